"""Run the SDO Notifications CLI."""

from .cli import main


if __name__ == "__main__":
    main()
