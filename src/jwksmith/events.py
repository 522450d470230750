"""JWKSmith event system — typed events, hook registry, and event collection.

Developers register hooks via @smith.on("event_name") to react to key
lifecycle events (audit logs, cache invalidation, alerting). Hooks run after
DB commit and are fail-open (errors logged, never break the key flow).
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Callable

logger = logging.getLogger("jwksmith.events")


# ---------------------------------------------------------------------------
# Event dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Event:
    """Base event — all events carry a timestamp."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True, slots=True)
class KeyCreated(Event):
    """Fired when a new signing key is generated and stored."""
    kid: str = ""
    algorithm: str = ""
    private_key_expires_at: datetime | None = None
    key_expires_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class KeyDeleted(Event):
    """Fired when a key is soft-deleted (explicitly or by the auto-delete policy)."""
    kid: str = ""
    reason: str = "explicit"


@dataclass(frozen=True, slots=True)
class PrivateKeyPurged(Event):
    """Fired when the sweeper clears an expired private key."""
    kid: str = ""


# ---------------------------------------------------------------------------
# Event name mapping
# ---------------------------------------------------------------------------

EVENT_MAP: dict[str, type[Event]] = {
    "key_created": KeyCreated,
    "key_deleted": KeyDeleted,
    "private_key_purged": PrivateKeyPurged,
}


# ---------------------------------------------------------------------------
# Hook registry
# ---------------------------------------------------------------------------

HookCallback = Callable[..., Any]


class HookRegistry:
    """Registry for event hook callbacks. Supports multiple listeners per event."""

    def __init__(self) -> None:
        self._hooks: dict[str, list[HookCallback]] = {}

    def register(self, event_name: str, callback: HookCallback) -> None:
        """Register a callback for an event name."""
        if event_name not in EVENT_MAP:
            raise ValueError(
                f"Unknown event '{event_name}'. "
                f"Valid events: {', '.join(sorted(EVENT_MAP))}"
            )
        self._hooks.setdefault(event_name, []).append(callback)

    def get_hooks(self, event_name: str) -> list[HookCallback]:
        """Get all registered callbacks for an event name."""
        return self._hooks.get(event_name, [])

    async def emit(self, event_name: str, event: Event) -> None:
        """Fire all registered callbacks for an event. Fail-open: errors are logged."""
        for callback in self.get_hooks(event_name):
            try:
                if inspect.iscoroutinefunction(callback):
                    await callback(event)
                else:
                    loop = asyncio.get_running_loop()
                    await loop.run_in_executor(None, callback, event)
            except Exception:
                logger.exception(
                    "Hook error in '%s' handler %s.%s",
                    event_name,
                    callback.__module__,
                    callback.__qualname__,
                )


# ---------------------------------------------------------------------------
# Event collector
# ---------------------------------------------------------------------------

class EventCollector:
    """Collects events during a transaction, emits them after commit."""

    def __init__(self, registry: HookRegistry) -> None:
        self._registry = registry
        self._pending: list[tuple[str, Event]] = []

    def collect(self, event_name: str, event: Event) -> None:
        """Add an event to the pending list (called inside transaction)."""
        self._pending.append((event_name, event))

    def discard(self) -> None:
        """Drop pending events (the transaction they belong to was rolled back)."""
        self._pending.clear()

    async def flush(self) -> None:
        """Emit all pending events (called after commit). Clears the list."""
        events = self._pending.copy()
        self._pending.clear()
        for event_name, event in events:
            await self._registry.emit(event_name, event)


# ---------------------------------------------------------------------------
# ContextVar for request-scoped collector (used by FastAPI integration)
# ---------------------------------------------------------------------------

_current_collector: ContextVar[EventCollector | None] = ContextVar(
    "_current_collector", default=None,
)


def get_collector() -> EventCollector | None:
    """Get the current request's event collector (if any)."""
    return _current_collector.get()
