"""
Shared pytest fixtures.

Every LogBuffer built through `make_buffer` is stopped at teardown so its
timer is cancelled and the process-wide error hooks are put back.
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from errorlog.services.log_buffer import LogBuffer

ERRORLOG_ENV_VARS = (
    "ERRORLOG_DEBUG",
    "ERRORLOG_MINUTES_WAIT",
    "ERRORLOG_FILE_NAME",
    "ERRORLOG_DATA_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep settings from the developer's shell out of the tests"""
    for name in ERRORLOG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture
def upload():
    return AsyncMock(return_value=None)


async def _settle(rounds: int = 5) -> None:
    """Let already-scheduled tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settle():
    return _settle


@pytest.fixture
async def make_buffer(log_dir, upload):
    created: list[LogBuffer] = []

    async def _zone():
        return None

    async def _make(**overrides) -> LogBuffer:
        kwargs = {
            "report_zone": _zone,
            "debug_mode": False,
            "upload_file": upload,
            "minutes_wait": 30,
            "log_dir": log_dir,
        }
        kwargs.update(overrides)
        buffer = LogBuffer(**kwargs)
        created.append(buffer)
        await buffer.wait_ready()
        await _settle()
        await buffer.drain()
        return buffer

    yield _make

    for buffer in created:
        await buffer.stop()
