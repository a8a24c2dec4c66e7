"""Sample worker that runs until Skip The DevOps asks it to stop."""

import asyncio
import logging

from sdo_notifications import CredentialProvider, SdoNotifications


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


async def main():
    """Print a line every 10 seconds until the platform signals a stop."""
    notifications = SdoNotifications(stop_notification=lambda: print("Stop requested"))
    await notifications.initialize([CredentialProvider()])

    while not notifications.should_stop():
        print("Running...")
        await asyncio.sleep(10)

    notifications.stop()


if __name__ == "__main__":
    asyncio.run(main())
