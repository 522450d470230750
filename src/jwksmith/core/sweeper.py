"""Expiration sweeper — applies time-driven lifecycle transitions to stored keys.

``run_sweep_once`` is a plain, idempotent pass over the store and is safe to
run concurrently with itself and with explicit deletes: every mutation is a
conditional update, and a zero-row update means another actor got there
first. :class:`ExpirationSweeper` only adds an asyncio loop around it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import async_sessionmaker

from jwksmith.core.errors import PersistenceError
from jwksmith.core.lifecycle import KeyLifecycle
from jwksmith.db import get_session
from jwksmith.events import EventCollector, HookRegistry, KeyDeleted, PrivateKeyPurged
from jwksmith.repositories import signing_key as signing_key_repo

logger = logging.getLogger("jwksmith.sweeper")


@dataclass(frozen=True, slots=True)
class SweepReport:
    """Outcome of one sweep pass."""

    examined: int = 0
    purged: int = 0
    auto_deleted: int = 0
    failed: int = 0


async def run_sweep_once(
    session_factory: async_sessionmaker,
    lifecycle: KeyLifecycle,
    now: datetime,
    *,
    hooks: HookRegistry | None = None,
) -> SweepReport:
    """Run a single expiration pass at ``now``.

    Raises:
        PersistenceError: If the key records cannot be listed. Failures on
            individual records are logged and counted instead.
    """
    async with get_session(session_factory) as session:
        records = await signing_key_repo.list_not_deleted(session)

    purged = auto_deleted = failed = 0
    for record in records:
        collector = EventCollector(hooks or HookRegistry())
        try:
            if lifecycle.should_purge_private_key(record, now):
                async with get_session(session_factory) as session:
                    if await signing_key_repo.purge_private_key(session, record.id):
                        purged += 1
                        collector.collect(
                            "private_key_purged", PrivateKeyPurged(timestamp=now, kid=record.kid),
                        )
            if lifecycle.should_auto_delete(record, now):
                async with get_session(session_factory) as session:
                    if await signing_key_repo.mark_deleted(session, record.id, now):
                        auto_deleted += 1
                        collector.collect(
                            "key_deleted",
                            KeyDeleted(timestamp=now, kid=record.kid, reason="auto_expired"),
                        )
        except PersistenceError:
            failed += 1
            logger.warning("Sweep failed for key %s, will retry next pass", record.kid, exc_info=True)
        await collector.flush()

    report = SweepReport(
        examined=len(records),
        purged=purged,
        auto_deleted=auto_deleted,
        failed=failed,
    )
    if purged or auto_deleted or failed:
        logger.info(
            "Sweep at %s: examined=%d purged=%d auto_deleted=%d failed=%d",
            now.isoformat(), report.examined, purged, auto_deleted, failed,
        )
    return report


class ExpirationSweeper:
    """Runs :func:`run_sweep_once` every ``interval`` seconds on the event loop.

    Args:
        session_factory: Async session factory for the key store.
        lifecycle: Lifecycle rules (TTLs, auto-delete policy).
        clock: Source of the current time.
        interval: Seconds between passes.
        hooks: Registry notified of purges and auto-deletes.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        lifecycle: KeyLifecycle,
        clock: Callable[[], datetime],
        *,
        interval: float,
        hooks: HookRegistry | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._lifecycle = lifecycle
        self._clock = clock
        self._interval = interval
        self._hooks = hooks
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> SweepReport:
        return await run_sweep_once(
            self._session_factory, self._lifecycle, self._clock(), hooks=self._hooks,
        )

    def start(self) -> None:
        """Start the background loop. No-op if already running."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run_forever())

    async def stop(self) -> None:
        """Cancel the background loop and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Sweeper task ended with an error")

    async def _run_forever(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Sweep pass failed, retrying in %ss", self._interval)
            await asyncio.sleep(self._interval)
