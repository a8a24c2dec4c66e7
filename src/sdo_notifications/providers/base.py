"""Base provider with the shared fetch capability."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class Provider(ABC):
    """Base class for platform providers.

    Every provider has an ``initialize``/``destroy`` lifecycle and can perform
    GET requests against the Skip The DevOps endpoints running on the same host.
    """

    # The local endpoints use a self-signed certificate scoped to the host
    verify_tls: bool = False

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        """Initialize provider.

        Args:
            client: Optional HTTP client to borrow. When omitted a short-lived
                client is opened for each request.
        """
        self._client = client

    @abstractmethod
    async def initialize(self) -> None:
        """Start reacting to the platform signal."""
        pass

    @abstractmethod
    def destroy(self) -> None:
        """Cancel any pending timer. Must be safe to call at any time."""
        pass

    async def fetch_url(self, url: Optional[str]) -> Optional[Any]:
        """GET a URL and return the parsed JSON body.

        Args:
            url: Endpoint URL, or None when running outside the platform

        Returns:
            The decoded JSON payload, or None on any failure. Never raises.
        """
        if not url:
            # Running outside the Skip The DevOps environment
            return None

        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(verify=self.verify_tls) as client:
                    response = await client.get(url)
        except Exception as e:
            logger.error(f"There was a problem calling {url} from the Skip The DevOps systems. {e}")
            return None

        if response.status_code < 200 or response.status_code >= 300:
            logger.error(
                f"Calling the Skip The DevOps systems at {url} failed with status code {response.status_code}."
            )
            return None

        try:
            return response.json()
        except ValueError:
            logger.error(f"There was an error parsing the response from Skip The DevOps at {url}")
            return None
