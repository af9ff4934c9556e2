"""
Unit Tests for the logging subsystem
====================================
"""

import asyncio
import json
import logging

import pytest

from src.core.logging.logger import ContextFilter, JSONFormatter, LogContext


def _record(message="hello", name="src.core.status.poller", **extra):
    record = logging.LogRecord(name, logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def _enriched(**context):
    record = _record()
    with LogContext(**context):
        ContextFilter().filter(record)
    return record


@pytest.mark.unit
class TestLogContext:
    def test_context_is_scoped(self):
        inside = _enriched(user_id=1, channel_id=2, command="!ping", correlation_id="abc")

        assert inside.user_id == "1"
        assert inside.channel_id == "2"
        assert inside.command == "!ping"
        assert inside.correlation_id == "abc"

        outside = _record()
        ContextFilter().filter(outside)
        assert outside.user_id == "N/A"
        assert outside.correlation_id == "N/A"

    def test_nested_context_restores_outer(self):
        record = _record()

        with LogContext(component="status_poller"):
            with LogContext(channel_id=5):
                pass
            ContextFilter().filter(record)

        assert record.component == "status_poller"
        assert record.channel_id == "N/A"

    @pytest.mark.asyncio
    async def test_concurrent_tasks_do_not_share_context(self):
        records = {}

        async def tagged(channel_id):
            async with LogContext(channel_id=channel_id):
                await asyncio.sleep(0)
                record = _record()
                ContextFilter().filter(record)
                records[channel_id] = record.channel_id

        await asyncio.gather(tagged(1), tagged(2))

        assert records == {1: "1", 2: "2"}


@pytest.mark.unit
class TestContextFilter:
    def test_component_defaults_to_module_name(self):
        record = _record()

        ContextFilter().filter(record)

        assert record.component == "poller"

    def test_explicit_component_wins(self):
        assert _enriched(component="status_poller").component == "status_poller"


@pytest.mark.unit
class TestJSONFormatter:
    def test_extra_fields_are_nested(self):
        record = _record(status_code=503)
        ContextFilter().filter(record)

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "hello"
        assert payload["component"] == "poller"
        assert payload["extra"] == {"status_code": 503}
        assert "user_id" not in payload

    def test_context_fields_are_top_level(self):
        record = _enriched(channel_id=99)

        payload = json.loads(JSONFormatter().format(record))

        assert payload["channel_id"] == "99"
        assert "extra" not in payload
