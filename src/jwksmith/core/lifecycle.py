"""Key lifecycle — state derivation from a record's timestamps.

    Active --(private_key_expires_at)--> PrivateExpired --(key_expires_at)--> Expired
    Active | PrivateExpired | Expired --(soft delete)--> Deleted

State is never stored. It is recomputed from the record and the current time,
so the same inputs always yield the same state.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol

from jwksmith.config import LifecycleConfig


class KeyState(str, Enum):
    ACTIVE = "active"
    PRIVATE_EXPIRED = "private_expired"
    EXPIRED = "expired"
    DELETED = "deleted"


class KeyTimestamps(Protocol):
    private_key_expires_at: datetime
    key_expires_at: datetime
    deleted_at: datetime | None


# Forward-only timeline; Deleted is reachable from any non-terminal state.
_TIMELINE = (KeyState.ACTIVE, KeyState.PRIVATE_EXPIRED, KeyState.EXPIRED)

PUBLISHED_STATES = frozenset({KeyState.ACTIVE, KeyState.PRIVATE_EXPIRED})


def compute_state(record: KeyTimestamps, now: datetime) -> KeyState:
    """Derive the key's state at ``now``."""
    if record.deleted_at is not None:
        return KeyState.DELETED
    if now < record.private_key_expires_at:
        return KeyState.ACTIVE
    if now < record.key_expires_at:
        return KeyState.PRIVATE_EXPIRED
    return KeyState.EXPIRED


def can_transition(current: KeyState, target: KeyState) -> bool:
    """Whether ``current`` may advance to ``target``."""
    if current is KeyState.DELETED:
        return False
    if target is KeyState.DELETED:
        return True
    return _TIMELINE.index(target) > _TIMELINE.index(current)


def is_published(state: KeyState) -> bool:
    """Published keys are the ones relying parties can still verify with."""
    return state in PUBLISHED_STATES


def has_signing_capability(state: KeyState) -> bool:
    return state is KeyState.ACTIVE


class KeyLifecycle:
    """Lifecycle decisions bound to an injected :class:`LifecycleConfig`."""

    def __init__(self, config: LifecycleConfig) -> None:
        self._config = config

    @property
    def config(self) -> LifecycleConfig:
        return self._config

    def expiry_for(self, created_at: datetime) -> tuple[datetime, datetime]:
        """Return ``(private_key_expires_at, key_expires_at)`` for a new key."""
        private_key_expires_at = created_at + timedelta(seconds=self._config.private_key_ttl_seconds)
        key_expires_at = created_at + timedelta(seconds=self._config.key_ttl_seconds)
        return private_key_expires_at, key_expires_at

    def should_purge_private_key(self, record, now: datetime) -> bool:
        """True once the private key has expired but is still stored."""
        state = compute_state(record, now)
        return state in (KeyState.PRIVATE_EXPIRED, KeyState.EXPIRED) and record.private_key is not None

    def should_auto_delete(self, record: KeyTimestamps, now: datetime) -> bool:
        return (
            self._config.auto_delete_on_full_expiry
            and compute_state(record, now) is KeyState.EXPIRED
        )
