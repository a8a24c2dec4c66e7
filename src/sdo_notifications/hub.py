"""Link between a worker process and the Skip The DevOps platform.

The platform provides HTTP endpoints on the same EC2 instance that the
container runs on. They are advertised through environment variables:

SDO_STOP_URL - Returns ``{"stop": true}`` once the application needs to stop.
    Active requests or jobs should be completed as quickly as possible and the
    application should then exit.

SDO_CREDENTIALS_URL - Returns AWS access keys for the roles mapped to the
    process in the Skip The DevOps portal.

Both are absent when running locally, in which case every provider is inert.
"""

import asyncio
import logging
from typing import Callable, List, Optional

import httpx

from .providers import Provider, StopProvider

logger = logging.getLogger(__name__)


class SdoNotifications:
    """Owns the platform providers and exposes the aggregate stop flag."""

    def __init__(
        self,
        stop_notification: Optional[Callable[[], None]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the notification hub.

        Args:
            stop_notification: Called when the platform asks the process to stop
            client: Optional HTTP client for the built-in stop provider
        """
        self._stop_notification = stop_notification
        self._client = client
        self._stop_needed = False
        self._providers: List[Provider] = []

    @property
    def providers(self) -> List[Provider]:
        return list(self._providers)

    async def initialize(self, providers: Optional[List[Provider]] = None) -> list:
        """Start every provider.

        The stop provider is always added after the given providers. All
        providers start concurrently and one failing does not affect the rest.

        Args:
            providers: Optional providers such as CredentialProvider

        Returns:
            One entry per provider, None or the exception it raised
        """
        if self._providers:
            # Tear down the previous set before replacing it
            self.stop()
        self._providers = [
            *(providers or []),
            StopProvider(self._on_stop, client=self._client),
        ]

        results = await asyncio.gather(
            *(provider.initialize() for provider in self._providers),
            return_exceptions=True,
        )
        for provider, result in zip(self._providers, results):
            if isinstance(result, BaseException):
                logger.error(f"Failed to initialize {provider.__class__.__name__}: {result}")
        logger.info(f"Initialized {len(self._providers)} Skip The DevOps providers")
        return results

    def _on_stop(self):
        self._stop_needed = True
        if self._stop_notification is not None:
            try:
                self._stop_notification()
            except Exception as e:
                logger.error(f"Stop notification callback failed: {e}")

    def should_stop(self) -> bool:
        return self._stop_needed

    def stop(self) -> None:
        """Destroy every provider, cancelling all pending timers."""
        for provider in self._providers:
            try:
                provider.destroy()
            except Exception as e:
                logger.warning(f"Failed to destroy {provider.__class__.__name__}: {e}")
        logger.info("Skip The DevOps providers stopped")
