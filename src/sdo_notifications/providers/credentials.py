"""Provider that keeps AWS credentials from the platform up to date."""

import asyncio
import logging
import os
from datetime import datetime, timezone
from typing import Optional

import httpx
from pydantic import ValidationError

from .base import Provider
from .sinks import CredentialSink, EnvironmentSink, RoleCredentials

logger = logging.getLogger(__name__)

CREDENTIALS_URL_ENV = "SDO_CREDENTIALS_URL"


class CredentialProvider(Provider):
    """Optional provider that refreshes AWS credentials before they expire.

    Each cycle fetches ``SDO_CREDENTIALS_URL``, hands the configured role's
    credentials to the sink and schedules the next cycle ahead of the
    expiration time.
    """

    # Must match the key given to the role mapping on the Skip The DevOps
    # process setup screen
    credentials_key: str = "AwsAccess"
    credential_time_buffer: float = 60.0
    min_polling_interval: float = 60.0

    def __init__(
        self,
        sink: Optional[CredentialSink] = None,
        credentials_key: Optional[str] = None,
        credential_time_buffer: Optional[float] = None,
        min_polling_interval: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize credential provider.

        Args:
            sink: Where credentials are written (defaults to the process environment)
            credentials_key: Role key to read from the endpoint response
            credential_time_buffer: Seconds before expiration to refresh
            min_polling_interval: Lower bound in seconds between two refreshes
            client: Optional HTTP client to borrow
        """
        super().__init__(client)
        self.sink = sink or EnvironmentSink()
        if credentials_key is not None:
            self.credentials_key = credentials_key
        if credential_time_buffer is not None:
            self.credential_time_buffer = credential_time_buffer
        if min_polling_interval is not None:
            self.min_polling_interval = min_polling_interval
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None
        self._destroyed = False

    async def initialize(self) -> None:
        if self._destroyed:
            logger.debug("CredentialProvider already destroyed, not refreshing")
            return
        await self.refresh()

    async def refresh(self, reschedule: bool = True) -> Optional[RoleCredentials]:
        """Run one fetch cycle.

        Args:
            reschedule: Arm the timer for the next cycle on success

        Returns:
            The credentials written to the sink, or None if nothing was written
        """
        payload = await self.fetch_url(os.environ.get(CREDENTIALS_URL_ENV))
        if payload is None:
            # Running locally or the endpoint failed, nothing to refresh
            return None

        record = payload.get(self.credentials_key) if isinstance(payload, dict) else None
        if record is None:
            logger.error(f"Missing aws credentials for role key '{self.credentials_key}'")
            return None

        try:
            credentials = RoleCredentials.model_validate(record)
        except ValidationError as e:
            logger.error(f"Invalid aws credentials for role key '{self.credentials_key}': {e}")
            return None

        try:
            self.sink.write(credentials)
        except Exception as e:
            logger.error(f"Failed to store aws credentials with {self.sink.__class__.__name__}: {e}")
            return None

        if reschedule and not self._destroyed:
            self._schedule(self.next_refresh_delay(credentials.expiration))
        return credentials

    def next_refresh_delay(self, expiration: datetime, now: Optional[datetime] = None) -> float:
        """Seconds to wait before the next refresh.

        Never less than ``min_polling_interval``, even for expirations already
        in the past.
        """
        now = now or datetime.now(timezone.utc)
        delay = (expiration - now).total_seconds() - self.credential_time_buffer
        return max(delay, self.min_polling_interval)

    def _schedule(self, delay: float):
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._start_refresh)
        logger.info(f"Next credential refresh in {delay:.0f}s")

    def _start_refresh(self):
        self._timer = None
        self._task = asyncio.create_task(self.refresh())
        self._task.add_done_callback(self._log_refresh_failure)

    def _log_refresh_failure(self, task: asyncio.Task):
        if task.cancelled() or task.exception() is None:
            return
        logger.error(f"Credential refresh failed, no further refresh scheduled: {task.exception()}")

    @property
    def refresh_scheduled(self) -> bool:
        return self._timer is not None

    @property
    def next_refresh_in(self) -> Optional[float]:
        """Seconds until the pending refresh, or None if none is scheduled."""
        if self._timer is None:
            return None
        return self._timer.when() - asyncio.get_running_loop().time()

    def destroy(self) -> None:
        self._destroyed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._task is not None:
            self._task.cancel()
            self._task = None
