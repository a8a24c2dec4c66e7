"""Command-line interface for SDO Notifications."""

import asyncio
import logging
import sys

import boto3
import click
from dotenv import load_dotenv

from .hub import SdoNotifications
from .providers.credentials import CredentialProvider
from .providers.stop import StopProvider


logger = logging.getLogger(__name__)


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
def main(debug: bool):
    """Cooperate with the Skip The DevOps platform."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    load_dotenv()


async def run_worker(interval: float, with_credentials: bool = True):
    """Log a line every ``interval`` seconds until the platform says stop."""
    notifications = SdoNotifications()
    providers = [CredentialProvider()] if with_credentials else []
    await notifications.initialize(providers)
    try:
        while not notifications.should_stop():
            logger.info("Running...")
            await asyncio.sleep(interval)
    finally:
        notifications.stop()
    logger.info("Stop requested, exiting")


@main.command()
@click.option('--interval', '-i', default=10.0, type=float, help='Seconds between log lines')
@click.option('--no-credentials', is_flag=True, help='Do not refresh AWS credentials')
def run(interval: float, no_credentials: bool):
    """Run the sample worker loop."""
    asyncio.run(run_worker(interval, with_credentials=not no_credentials))


def _mask(value: str) -> str:
    if len(value) <= 4:
        return "****"
    return f"{'*' * (len(value) - 4)}{value[-4:]}"


@main.command()
@click.option('--role-key', '-k', default=None, help='Role key from the process setup screen')
@click.option('--validate', is_flag=True, help='Call STS with the new credentials')
def credentials(role_key, validate: bool):
    """Fetch AWS credentials once and write them to the environment."""
    provider = CredentialProvider(credentials_key=role_key)
    creds = asyncio.run(provider.refresh(reschedule=False))
    if creds is None:
        click.echo("No credentials received from Skip The DevOps", err=True)
        sys.exit(1)

    click.echo(f"Access key: {_mask(creds.access_key_id)}")
    click.echo(f"Region: {creds.region}")
    click.echo(f"Expires: {creds.expiration.isoformat()}")

    if validate:
        try:
            # boto3 picks the credentials up from the environment
            identity = boto3.client("sts").get_caller_identity()
        except Exception as e:
            click.echo(f"✗ Credential validation failed: {e}", err=True)
            sys.exit(1)
        click.echo(f"✓ Credentials are valid for {identity['Arn']}")


@main.command(name='stop-status')
def stop_status():
    """Poll the stop endpoint once."""
    provider = StopProvider(lambda: None)
    if asyncio.run(provider.check()):
        click.echo("Stop requested")
    else:
        click.echo("Keep running")


if __name__ == "__main__":
    main()
