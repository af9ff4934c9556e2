"""
Unit Tests for SentinelBot event handling
=========================================

Test Coverage
-------------
- Repeated and concurrent ready events start the poller exactly once
- Inline ``!ping`` fast path replies in the same channel
- Message handling is not blocked by a slow health check
- Reply failures are logged and do not affect later messages
- Shutdown stops the poller and closes the checker

Testing Strategy
----------------
- Real SentinelBot instance, never connected to the gateway
- change_presence and process_commands replaced with AsyncMocks
"""

import asyncio

import pytest
import pytest_asyncio

from src.bot.sentinel_bot import SentinelBot
from tests.helpers import FakeChecker, wait_until


@pytest_asyncio.fixture
async def bot(mocker, fake_checker):
    bot = SentinelBot(checker=fake_checker, interval_seconds=3600.0)
    bot.change_presence = mocker.AsyncMock()
    bot.process_commands = mocker.AsyncMock()
    yield bot
    await bot.lifecycle.shutdown()


@pytest.mark.unit
@pytest.mark.asyncio
class TestReadyHandling:
    """Single-start of the status poller."""

    async def test_first_ready_starts_poller(self, bot, fake_checker):
        await bot.on_ready()
        await wait_until(lambda: fake_checker.calls == 1)

        assert bot.lifecycle.gate.started
        assert bot.lifecycle.poller.metrics.loops_entered == 1
        assert bot.lifecycle.poller_task is not None

    async def test_repeated_ready_is_noop(self, bot):
        await bot.on_ready()
        first_task = bot.lifecycle.poller_task

        for _ in range(5):
            await bot.on_ready()
        await wait_until(lambda: bot.lifecycle.poller.metrics.loops_entered == 1)
        await asyncio.sleep(0.01)

        assert bot.lifecycle.poller_task is first_task
        assert bot.lifecycle.poller.metrics.loops_entered == 1
        assert bot.lifecycle.metrics.ready_events == 6

    async def test_two_ready_events_1ms_apart(self, bot):
        await bot.on_ready()
        await asyncio.sleep(0.001)
        await bot.on_ready()
        await asyncio.sleep(0.01)

        assert bot.lifecycle.poller.metrics.loops_entered == 1

    @pytest.mark.parametrize("count", [1, 2, 25])
    async def test_concurrent_ready_events(self, bot, count):
        await asyncio.gather(*(bot.on_ready() for _ in range(count)))
        await wait_until(lambda: bot.lifecycle.poller.metrics.loops_entered >= 1)
        await asyncio.sleep(0.01)

        assert bot.lifecycle.poller.metrics.loops_entered == 1
        assert bot.lifecycle.metrics.ready_events == count

    async def test_poller_publishes_through_bot_presence(self, bot, fake_checker):
        await bot.on_ready()
        await wait_until(lambda: bot.change_presence.await_count == 1)

        activity = bot.change_presence.await_args.kwargs["activity"]
        assert activity.name == "Blue Protocol is Up!"


@pytest.mark.unit
@pytest.mark.asyncio
class TestMessageHandling:
    """Inline ping fast path and router delegation."""

    async def test_ping_replies_pong_in_same_channel(self, bot, make_message):
        message = make_message("!ping")

        await bot.on_message(message)

        message.channel.send.assert_awaited_once_with("Pong!")
        bot.process_commands.assert_awaited_once_with(message)
        assert bot.lifecycle.metrics.pings_answered == 1

    async def test_other_messages_only_go_to_router(self, bot, make_message):
        message = make_message("hello there")

        await bot.on_message(message)

        message.channel.send.assert_not_awaited()
        bot.process_commands.assert_awaited_once_with(message)

    async def test_ping_match_is_exact(self, bot, make_message):
        message = make_message("!ping please")

        await bot.on_message(message)

        message.channel.send.assert_not_awaited()

    async def test_send_failure_is_swallowed(self, bot, make_message):
        failing = make_message("!ping")
        failing.channel.send.side_effect = RuntimeError("missing permissions")
        following = make_message("!ping")

        await bot.on_message(failing)
        await bot.on_message(following)

        following.channel.send.assert_awaited_once_with("Pong!")
        assert bot.lifecycle.metrics.replies_failed == 1
        assert bot.lifecycle.metrics.pings_answered == 1

    async def test_router_failure_is_swallowed(self, bot, make_message):
        bot.process_commands.side_effect = RuntimeError("router exploded")
        message = make_message("~ping")

        await bot.on_message(message)

        assert bot.lifecycle.metrics.messages_seen == 1

    async def test_message_not_blocked_by_slow_health_check(self, bot, fake_checker, make_message):
        fake_checker.block = True
        await bot.on_ready()
        await asyncio.wait_for(fake_checker.entered.wait(), timeout=1.0)

        message = make_message("!ping")
        await asyncio.wait_for(bot.on_message(message), timeout=1.0)

        message.channel.send.assert_awaited_once_with("Pong!")
        assert not fake_checker.release.is_set()
        assert bot.lifecycle.poller.metrics.cycles_completed == 0

        fake_checker.release.set()
        await wait_until(lambda: bot.lifecycle.poller.metrics.cycles_completed == 1)


@pytest.mark.unit
@pytest.mark.asyncio
class TestShutdown:
    async def test_shutdown_stops_poller_and_closes_checker(self, bot, fake_checker):
        await bot.on_ready()
        await wait_until(lambda: fake_checker.calls == 1)
        task = bot.lifecycle.poller_task

        await asyncio.wait_for(bot.lifecycle.shutdown(), timeout=2.0)

        assert task.done()
        assert fake_checker.closed
        assert bot.lifecycle.get_metrics_snapshot()["poller_running"] is False

    async def test_ready_after_shutdown_does_not_start(self, mocker):
        checker = FakeChecker()
        bot = SentinelBot(checker=checker, interval_seconds=3600.0)
        bot.change_presence = mocker.AsyncMock()

        await bot.lifecycle.shutdown()
        await bot.on_ready()

        assert bot.lifecycle.poller is None
        assert checker.calls == 0

    async def test_metrics_snapshot_reports_last_result(self, bot, fake_checker):
        await bot.on_ready()
        await wait_until(lambda: bot.lifecycle.poller.metrics.cycles_completed == 1)

        snapshot = bot.lifecycle.get_metrics_snapshot()

        assert snapshot["poller_started"] is True
        assert snapshot["last_status"] == "Up"
        assert snapshot["last_status_code"] == 200
