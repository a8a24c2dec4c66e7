"""Provider that polls the platform stop endpoint."""

import asyncio
import logging
import os
from typing import Any, Callable, Optional

import httpx

from .base import Provider

logger = logging.getLogger(__name__)

STOP_URL_ENV = "SDO_STOP_URL"


def is_stop_signal(payload: Any) -> bool:
    """Decide whether a stop endpoint payload asks the process to stop.

    The endpoint answers with ``{"stop": true|false}``. Anything else is
    treated as "keep running".
    """
    if payload is None:
        return False
    if not isinstance(payload, dict) or "stop" not in payload:
        logger.warning(f"Unexpected stop endpoint payload: {payload!r}")
        return False
    return payload["stop"] is True


class StopProvider(Provider):
    """Polls ``SDO_STOP_URL`` on a fixed interval and reports stop requests."""

    poll_interval: float = 5.0

    def __init__(
        self,
        should_stop_callback: Callable[[], None],
        poll_interval: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(client)
        self._should_stop_callback = should_stop_callback
        if poll_interval is not None:
            self.poll_interval = poll_interval
        self._task: Optional[asyncio.Task] = None
        self._destroyed = False

    async def initialize(self) -> None:
        if self._destroyed:
            logger.debug("StopProvider already destroyed, not polling")
            return
        if self._task is not None:
            self._task.cancel()
        self._task = asyncio.create_task(self._poll())
        logger.debug(f"Polling stop endpoint every {self.poll_interval}s")

    async def _poll(self):
        while True:
            await asyncio.sleep(self.poll_interval)
            try:
                await self.check()
            except Exception as e:
                logger.error(f"Stop endpoint poll failed: {e}")

    async def check(self) -> bool:
        """Run one poll of the stop endpoint.

        Returns:
            True if the platform asked the process to stop
        """
        # Read on every tick, the URL is absent when running locally
        payload = await self.fetch_url(os.environ.get(STOP_URL_ENV))
        if not is_stop_signal(payload):
            return False

        logger.info("Skip The DevOps requested that the application stop")
        try:
            self._should_stop_callback()
        except Exception as e:
            logger.error(f"Stop callback failed: {e}")
        return True

    @property
    def polling(self) -> bool:
        return self._task is not None and not self._task.done()

    def destroy(self) -> None:
        self._destroyed = True
        if self._task is not None:
            self._task.cancel()
            self._task = None
