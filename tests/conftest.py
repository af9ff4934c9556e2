"""
Pytest Configuration and Fixtures for Launcher Sentinel Tests
=============================================================

Purpose
-------
Reusable fixtures for the status poller, the health checker and the Discord
event handlers.

Responsibilities
----------------
- In-process launcher endpoint (aiohttp TestServer) for real HTTP checks
- Scriptable fake health checker for poller and dispatcher tests
- Discord.py mocks (bot, message, command context)
- Config isolation between tests

Architecture Notes
------------------
- Async tests run under pytest-asyncio (strict mode, explicit markers)
- Discord objects are mocked with pytest-mock; no gateway connection is opened
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from src.core.config.config import Config
from tests.helpers import FakeChecker

# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """Configure pytest environment."""
    os.environ.setdefault("ENVIRONMENT", "testing")
    os.environ.setdefault("LOG_LEVEL", "DEBUG")


@pytest.fixture(autouse=True)
def isolated_config():
    """Restore Config class attributes changed by a test."""
    snapshot = {key: value for key, value in vars(Config).items() if key.isupper()}
    yield
    for key, value in snapshot.items():
        setattr(Config, key, value)
    Config._validated = False


# ============================================================================
# LAUNCHER ENDPOINT (aiohttp TestServer)
# ============================================================================


@dataclass
class LauncherState:
    """Behaviour of the fake launcher endpoint, mutable per test."""

    status: int = 200
    hang: bool = False
    requests: int = 0
    release: asyncio.Event = field(default_factory=asyncio.Event)


@pytest_asyncio.fixture
async def launcher() -> AsyncGenerator[tuple, None]:
    """
    Start an in-process launcher endpoint.

    Yields ``(url, state)``; set ``state.status`` to choose the response code
    or ``state.hang`` to make requests wait until teardown.
    """
    state = LauncherState()

    async def handler(request: web.Request) -> web.Response:
        state.requests += 1
        if state.hang:
            await state.release.wait()
        return web.Response(status=state.status)

    app = web.Application()
    app.router.add_get("/", handler)

    server = TestServer(app)
    await server.start_server()

    yield str(server.make_url("/")), state

    state.release.set()
    await server.close()


# ============================================================================
# FAKE HEALTH CHECKER (Poller / Dispatcher Tests)
# ============================================================================


@pytest.fixture
def fake_checker() -> FakeChecker:
    return FakeChecker()


# ============================================================================
# DISCORD.PY MOCK FIXTURES
# ============================================================================


@pytest.fixture
def mock_bot(mocker):
    """Mock Discord bot exposing an async change_presence."""
    mock_bot = mocker.MagicMock()
    mock_bot.user = mocker.MagicMock()
    mock_bot.user.id = 123456789
    mock_bot.user.name = "TestBot"
    mock_bot.change_presence = mocker.AsyncMock()
    return mock_bot


@pytest.fixture
def make_message(mocker):
    """Factory for mock inbound messages with an async channel.send."""

    def _make(content: str, author_id: int = 987654321):
        message = mocker.MagicMock()
        message.content = content
        message.author.id = author_id
        message.guild = None
        message.channel.id = 555
        message.channel.send = mocker.AsyncMock()
        return message

    return _make


@pytest.fixture
def mock_context(mocker, mock_bot):
    """Mock Discord command context for cog testing."""
    mock_ctx = mocker.MagicMock()
    mock_ctx.bot = mock_bot
    mock_ctx.author.id = 987654321
    mock_ctx.guild = None
    mock_ctx.send = mocker.AsyncMock()
    mock_ctx.reply = mocker.AsyncMock()
    return mock_ctx
