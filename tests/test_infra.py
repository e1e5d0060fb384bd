"""
Tests for the result cache, structured logging and settings.
"""

import asyncio
import dataclasses

import pytest

from liquidlens.cache import HumanizeCache


RESULT = {"text": "{{x}}", "matches": [], "cached": False}


class TestCache:
    """Humanize result cache tests."""

    def test_put_then_get(self):
        cache = HumanizeCache(ttl_seconds=60, max_entries=10)

        async def run():
            await cache.put("{{x}}", "friendly", 1, RESULT)
            return await cache.get("{{x}}", "friendly", 1)

        hit = asyncio.run(run())
        assert hit["cached"] is True
        assert hit["text"] == "{{x}}"
        assert RESULT["cached"] is False

    def test_miss_on_other_mode(self):
        cache = HumanizeCache(ttl_seconds=60, max_entries=10)

        async def run():
            await cache.put("{{x}}", "friendly", 1, RESULT)
            return await cache.get("{{x}}", "technical", 1)

        assert asyncio.run(run()) is None

    def test_miss_after_catalog_version_change(self):
        cache = HumanizeCache(ttl_seconds=60, max_entries=10)

        async def run():
            await cache.put("{{x}}", "friendly", 1, RESULT)
            return await cache.get("{{x}}", "friendly", 2)

        assert asyncio.run(run()) is None

    def test_expired_entry_removed(self):
        cache = HumanizeCache(ttl_seconds=-1, max_entries=10)

        async def run():
            await cache.put("{{x}}", "friendly", 1, RESULT)
            return await cache.get("{{x}}", "friendly", 1)

        assert asyncio.run(run()) is None
        assert cache.stats["entries"] == 0

    def test_oldest_evicted_at_capacity(self):
        cache = HumanizeCache(ttl_seconds=60, max_entries=2)

        async def run():
            await cache.put("a", "friendly", 1, RESULT)
            await cache.put("b", "friendly", 1, RESULT)
            await cache.put("c", "friendly", 1, RESULT)
            return [await cache.get(t, "friendly", 1) for t in ("a", "b", "c")]

        a, b, c = asyncio.run(run())
        assert a is None
        assert b is not None and c is not None

    def test_stats(self):
        cache = HumanizeCache(ttl_seconds=60, max_entries=10)

        async def run():
            await cache.get("a", "friendly", 1)
            await cache.put("a", "friendly", 1, RESULT)
            await cache.get("a", "friendly", 1)

        asyncio.run(run())
        assert cache.stats == {"entries": 1, "hits": 1, "misses": 1, "hit_rate": 0.5}

    def test_clear(self):
        cache = HumanizeCache(ttl_seconds=60, max_entries=10)

        async def run():
            await cache.put("a", "friendly", 1, RESULT)
            await cache.clear()

        asyncio.run(run())
        assert cache.stats["entries"] == 0


class TestLogging:
    """Structured logging tests."""

    def _record(self, msg):
        import logging
        return logging.LogRecord(
            name="liquidlens.test",
            level=logging.INFO,
            pathname="test.py",
            lineno=1,
            msg=msg,
            args=(),
            exc_info=None,
        )

    def test_json_formatter(self):
        import json
        from liquidlens.logging import JSONFormatter

        parsed = json.loads(JSONFormatter().format(self._record("Test message")))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Test message"
        assert parsed["logger"] == "liquidlens.test"
        assert "timestamp" in parsed

    def test_json_formatter_extra_fields(self):
        import json
        from liquidlens.logging import JSONFormatter

        record = self._record("Pass complete")
        record.fragments_count = 4
        record.display_mode = "friendly"
        record.unrelated = "ignored"
        parsed = json.loads(JSONFormatter().format(record))
        assert parsed["fragments_count"] == 4
        assert parsed["display_mode"] == "friendly"
        assert "unrelated" not in parsed

    def test_get_logger(self):
        from liquidlens.logging import get_logger
        log = get_logger("matcher")
        assert log.name == "liquidlens.matcher"

    def test_setup_logging_text(self):
        from liquidlens.logging import TextFormatter, setup_logging
        root = setup_logging(log_format="text")
        assert root.name == "liquidlens"
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_setup_logging_writes_to_stream(self):
        import io
        import json
        from liquidlens.logging import get_logger, setup_logging

        buf = io.StringIO()
        setup_logging(log_format="json", stream=buf)
        get_logger("api").warning("Catalog swapped", extra={"key_id": "3f9a1c2b7d4e"})
        parsed = json.loads(buf.getvalue().strip())
        assert parsed["logger"] == "liquidlens.api"
        assert parsed["key_id"] == "3f9a1c2b7d4e"


class TestSettings:
    def test_settings_frozen(self):
        from liquidlens.config import settings
        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.VERSION = "9.9.9"

    def test_defaults(self):
        from liquidlens.config import Settings
        s = Settings()
        assert s.CACHE_TTL > 0
        assert s.DISPLAY_MODE in ("friendly", "technical")
