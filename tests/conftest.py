import asyncio
from typing import Callable

import pytest

from sdo_notifications.providers.credentials import CREDENTIALS_URL_ENV
from sdo_notifications.providers.sinks import (
    AWS_ACCESS_KEY_ID,
    AWS_DEFAULT_REGION,
    AWS_SECRET_ACCESS_KEY,
    AWS_SESSION_TOKEN,
)
from sdo_notifications.providers.stop import STOP_URL_ENV


@pytest.fixture(autouse=True)
def platform_env(monkeypatch):
    """Start every test outside the platform with known AWS variables."""
    for name in (STOP_URL_ENV, CREDENTIALS_URL_ENV):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    for name in (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_SESSION_TOKEN, AWS_DEFAULT_REGION):
        monkeypatch.setenv(name, "old")
    return monkeypatch


@pytest.fixture
def wait_until():
    async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                return False
            await asyncio.sleep(0.005)
        return True

    return _wait_until
