"""Tests for the event hooks system — registry, collector, and integration."""

import logging

import pytest

from jwksmith import JWKSmith, UnsupportedAlgorithm
from jwksmith.events import (
    EVENT_MAP,
    Event,
    EventCollector,
    HookRegistry,
    KeyCreated,
    KeyDeleted,
    PrivateKeyPurged,
)

pytestmark = pytest.mark.asyncio


# ---------------------------------------------------------------------------
# Unit tests: HookRegistry
# ---------------------------------------------------------------------------


class TestHookRegistry:
    async def test_register_valid_event(self):
        registry = HookRegistry()
        registry.register("key_created", lambda e: None)
        assert len(registry.get_hooks("key_created")) == 1

    async def test_register_invalid_event_raises(self):
        registry = HookRegistry()
        with pytest.raises(ValueError, match="Unknown event"):
            registry.register("key_rotated", lambda e: None)

    async def test_multiple_hooks_per_event(self):
        registry = HookRegistry()
        for _ in range(3):
            registry.register("key_deleted", lambda e: None)
        assert len(registry.get_hooks("key_deleted")) == 3

    async def test_emit_async_callback(self):
        registry = HookRegistry()
        captured = []

        async def handler(event):
            captured.append(event)

        registry.register("key_created", handler)
        await registry.emit("key_created", KeyCreated(kid="k1", algorithm="ES256"))
        assert len(captured) == 1
        assert captured[0].kid == "k1"

    async def test_emit_sync_callback(self):
        registry = HookRegistry()
        captured = []

        def handler(event):
            captured.append(event)

        registry.register("private_key_purged", handler)
        await registry.emit("private_key_purged", PrivateKeyPurged(kid="k1"))
        assert len(captured) == 1

    async def test_emit_failing_callback_continues(self, caplog):
        registry = HookRegistry()
        captured = []

        async def bad_handler(event):
            raise RuntimeError("hook failed")

        async def good_handler(event):
            captured.append(event)

        registry.register("key_deleted", bad_handler)
        registry.register("key_deleted", good_handler)
        with caplog.at_level(logging.ERROR, logger="jwksmith.events"):
            await registry.emit("key_deleted", KeyDeleted(kid="k1"))

        assert len(captured) == 1
        assert "Hook error" in caplog.text
        assert "hook failed" in caplog.text

    async def test_emit_no_hooks_is_noop(self):
        await HookRegistry().emit("key_deleted", KeyDeleted())


# ---------------------------------------------------------------------------
# Unit tests: EventCollector
# ---------------------------------------------------------------------------


class TestEventCollector:
    async def test_collect_and_flush(self):
        registry = HookRegistry()
        captured = []

        async def handler(event):
            captured.append(event)

        registry.register("key_created", handler)
        collector = EventCollector(registry)
        collector.collect("key_created", KeyCreated(kid="a"))
        collector.collect("key_created", KeyCreated(kid="b"))
        assert captured == []

        await collector.flush()
        assert [e.kid for e in captured] == ["a", "b"]

        await collector.flush()
        assert len(captured) == 2

    async def test_discard_drops_pending(self):
        registry = HookRegistry()
        captured = []
        registry.register("key_deleted", captured.append)

        collector = EventCollector(registry)
        collector.collect("key_deleted", KeyDeleted(kid="a"))
        collector.discard()
        await collector.flush()
        assert captured == []


# ---------------------------------------------------------------------------
# Event dataclasses
# ---------------------------------------------------------------------------


class TestEventTypes:
    async def test_event_map(self):
        assert set(EVENT_MAP) == {"key_created", "key_deleted", "private_key_purged"}
        for event_cls in EVENT_MAP.values():
            assert issubclass(event_cls, Event)

    async def test_events_are_frozen(self):
        event = KeyDeleted(kid="a")
        with pytest.raises(AttributeError):
            event.kid = "b"

    async def test_timestamp_is_aware(self):
        assert KeyCreated().timestamp.tzinfo is not None


# ---------------------------------------------------------------------------
# Integration: facade operations fire events after commit
# ---------------------------------------------------------------------------


class TestLifecycleEvents:
    async def test_key_created(self, smith: JWKSmith, clock):
        captured = []

        @smith.on("key_created")
        async def handler(event):
            captured.append(event)

        record = await smith.create_key("ES256")

        assert len(captured) == 1
        event = captured[0]
        assert event.kid == record.kid
        assert event.algorithm == "ES256"
        assert event.private_key_expires_at == record.private_key_expires_at
        assert event.key_expires_at == record.key_expires_at
        assert event.timestamp == clock.current == record.created_at

    async def test_key_deleted_fires_once(self, smith: JWKSmith, clock):
        captured = []
        smith.add_hook("key_deleted", captured.append)

        record = await smith.create_key("ES256")
        clock.advance(30)
        await smith.delete_key(record.id)
        await smith.delete_key(record.id)

        assert [(e.kid, e.reason) for e in captured] == [(record.kid, "explicit")]
        assert captured[0].timestamp == clock.current

    async def test_private_key_purged(self, smith: JWKSmith, clock):
        captured = []

        @smith.on("private_key_purged")
        async def handler(event):
            captured.append(event)

        record = await smith.create_key("Ed25519")
        clock.advance(150)
        await smith.run_sweep()
        await smith.run_sweep()

        assert [e.kid for e in captured] == [record.kid]
        assert captured[0].timestamp == clock.current

    async def test_auto_delete_reason(self, make_smith, clock):
        smith = await make_smith(auto_delete_on_full_expiry=True)
        captured = []
        smith.add_hook("key_deleted", captured.append)

        record = await smith.create_key("ES256")
        clock.advance(300)
        await smith.run_sweep()

        assert [(e.kid, e.reason) for e in captured] == [(record.kid, "auto_expired")]

    async def test_failing_hook_does_not_break_create(self, smith: JWKSmith):
        @smith.on("key_created")
        async def bad_handler(event):
            raise RuntimeError("audit log down")

        record = await smith.create_key("ES256")
        assert (await smith.get_key(record.id)).kid == record.kid

    async def test_unsupported_algorithm_fires_nothing(self, smith: JWKSmith):
        captured = []
        smith.add_hook("key_created", captured.append)

        with pytest.raises(UnsupportedAlgorithm):
            await smith.create_key("RS1")
        assert captured == []
