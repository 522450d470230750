"""JWKSmith — instance-based key service configuration and entry point."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from jwksmith.config import (
    DEFAULT_KEY_TTL_SECONDS,
    DEFAULT_PRIVATE_KEY_TTL_SECONDS,
    DEFAULT_SWEEP_INTERVAL_SECONDS,
    JWKSmithConfig,
    LifecycleConfig,
)
from jwksmith.core.lifecycle import KeyLifecycle
from jwksmith.core.schemas import DeleteOutcome, SigningKeyPrivateResponse, SigningKeyResponse
from jwksmith.core.sweeper import ExpirationSweeper, SweepReport, run_sweep_once
from jwksmith.db import create_engine, create_session_factory, get_session, run_migrations
from jwksmith.events import EventCollector, HookRegistry, _current_collector
from jwksmith.models.signing_key import SigningKey
from jwksmith.utils import utc_now

if TYPE_CHECKING:
    from fastapi import APIRouter


class JWKSmith:
    """Main JWKSmith instance — holds all config and database connection state.

    Args:
        database_url: Required async database URL (e.g. postgresql+asyncpg://...).
        private_key_ttl: How long a new key may sign (seconds, default 1 day).
        key_ttl: How long a new key stays published, measured from creation
            (seconds, default 2 days). Must be >= private_key_ttl.
        auto_delete_on_full_expiry: Let the sweeper soft-delete fully expired keys.
        sweep_interval: Seconds between background sweeps (default 60).
        jwks_cache_max_age: ``Cache-Control`` max-age of the JWKS endpoint.
        clock: Source of the current time, injectable for tests.
    """

    def __init__(
        self,
        database_url: str,
        *,
        private_key_ttl: int = DEFAULT_PRIVATE_KEY_TTL_SECONDS,
        key_ttl: int = DEFAULT_KEY_TTL_SECONDS,
        auto_delete_on_full_expiry: bool = False,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        jwks_cache_max_age: int = 300,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._config = JWKSmithConfig(
            database_url=database_url,
            lifecycle=LifecycleConfig(
                private_key_ttl_seconds=private_key_ttl,
                key_ttl_seconds=key_ttl,
                auto_delete_on_full_expiry=auto_delete_on_full_expiry,
                sweep_interval_seconds=sweep_interval,
            ),
            jwks_cache_max_age=jwks_cache_max_age,
        )
        self._lifecycle = KeyLifecycle(self._config.lifecycle)
        self._clock = clock
        self._engine = create_engine(database_url)
        self._session_factory = create_session_factory(self._engine)
        self._hooks = HookRegistry()
        self._sweeper = ExpirationSweeper(
            self._session_factory,
            self._lifecycle,
            self._clock,
            interval=self._config.lifecycle.sweep_interval_seconds,
            hooks=self._hooks,
        )

    @property
    def config(self) -> JWKSmithConfig:
        """Read-only access to the internal config."""
        return self._config

    @property
    def lifecycle(self) -> KeyLifecycle:
        return self._lifecycle

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Access the async session factory (e.g., for testing)."""
        return self._session_factory

    @property
    def hooks(self) -> HookRegistry:
        """Access the hook registry."""
        return self._hooks

    # ------ Event hooks ------

    def on(self, event_name: str):
        """Decorator to register an event hook.

        Usage:
            @smith.on("key_created")
            async def handle(event):
                print(event.kid)
        """
        def decorator(fn):
            self._hooks.register(event_name, fn)
            return fn
        return decorator

    def add_hook(self, event_name: str, callback) -> None:
        """Register an event hook callback programmatically."""
        self._hooks.register(event_name, callback)

    # ------ Database session helpers ------

    def get_session(self) -> AsyncGenerator[AsyncSession]:
        """Context manager for service-level code (non-FastAPI)."""
        return get_session(self._session_factory)

    async def _get_db(self) -> AsyncGenerator[AsyncSession]:
        """FastAPI dependency: yields a request-scoped session with event flushing."""
        collector = EventCollector(self._hooks)
        token = _current_collector.set(collector)
        try:
            async with get_session(self._session_factory) as session:
                yield session
        except Exception:
            collector.discard()
            raise
        finally:
            _current_collector.reset(token)
        # Post-commit: flush collected events
        await collector.flush()

    # ------ Key operations ------

    async def create_key(self, algorithm: str) -> SigningKey:
        """Generate and store a new signing key.

        Raises:
            UnsupportedAlgorithm: If the algorithm identifier is not supported.
            GenerationError: If key generation fails.
        """
        from jwksmith.core.keys import generate_key, store_key

        now = self._clock()
        material = await generate_key(algorithm, lifecycle=self._lifecycle, now=now)
        collector = EventCollector(self._hooks)
        async with get_session(self._session_factory) as session:
            record = await store_key(
                session, material, lifecycle=self._lifecycle,
                now=now, events=collector,
            )
        await collector.flush()
        return record

    async def delete_key(self, key_id: uuid.UUID, *, strict: bool = False) -> DeleteOutcome:
        """Soft-delete a key. Deleting twice returns ``DeleteOutcome.ALREADY_DELETED``.

        Raises:
            KeyNotFound: If no key has this ID.
            KeyAlreadyDeleted: If the key was already deleted and ``strict`` is set.
        """
        from jwksmith.core.keys import soft_delete_key

        collector = EventCollector(self._hooks)
        async with get_session(self._session_factory) as session:
            outcome = await soft_delete_key(
                session, key_id, now=self._clock(), strict=strict, events=collector,
            )
        await collector.flush()
        return outcome

    async def get_jwks(self) -> dict:
        """The published JWK Set, as served at /.well-known/jwks.json."""
        from jwksmith.core.jwks import build_jwk_set

        async with get_session(self._session_factory) as session:
            return await build_jwk_set(session, self._clock())

    async def list_keys(self, *, include_deleted: bool = False) -> list[SigningKeyResponse]:
        """List key metadata with each key's current state."""
        from jwksmith.core.keys import list_keys

        async with get_session(self._session_factory) as session:
            return await list_keys(session, include_deleted=include_deleted, now=self._clock())

    async def get_key(self, key_id: uuid.UUID) -> SigningKeyResponse:
        """Get key metadata by ID, in any state."""
        from jwksmith.core.keys import get_key

        async with get_session(self._session_factory) as session:
            return await get_key(session, key_id, now=self._clock())

    async def get_signing_key(self, key_id: uuid.UUID) -> SigningKeyPrivateResponse:
        """Get a key with its private half for signing.

        Raises:
            KeyNotFound: If the key is unknown, deleted or fully expired.
            PrivateKeyExpired: If the private key can no longer be used.
        """
        from jwksmith.core.keys import get_signing_key

        async with get_session(self._session_factory) as session:
            return await get_signing_key(session, key_id, now=self._clock())

    # ------ Expiration sweeping ------

    async def run_sweep(self, now: datetime | None = None) -> SweepReport:
        """Run one expiration pass (purge expired private keys, auto-delete).

        Call this from your own scheduler, or use start_sweeper().
        """
        return await run_sweep_once(
            self._session_factory,
            self._lifecycle,
            now if now is not None else self._clock(),
            hooks=self._hooks,
        )

    def start_sweeper(self) -> None:
        """Start sweeping every ``sweep_interval`` seconds on the running event loop."""
        self._sweeper.start()

    async def stop_sweeper(self) -> None:
        await self._sweeper.stop()

    # ------ FastAPI integration ------

    def jwks_router(self) -> APIRouter:
        """Create a FastAPI router for the JWKS endpoint.

        Mount this at the root (no prefix) so the endpoint is at /.well-known/jwks.json.
        """
        from jwksmith.integrations.fastapi.jwks_router import create_jwks_router

        return create_jwks_router(self._config, self._get_db, self._clock)

    def admin_router(self, *, dependencies: Sequence | None = None) -> APIRouter:
        """Create a FastAPI router with the key management endpoints.

        Authentication is the host app's concern: pass FastAPI dependencies
        (e.g. ``[Depends(require_admin)]``) to guard every endpoint.

        Usage:
            app.include_router(smith.jwks_router())
            app.include_router(smith.admin_router(dependencies=[Depends(require_admin)]))
        """
        from jwksmith.integrations.fastapi.router import create_admin_router

        return create_admin_router(
            self._lifecycle, self._get_db, self._clock, dependencies=dependencies,
        )

    # ------ Migrations ------

    async def migrate(self) -> None:
        """Run pending database migrations. Safe to call on every startup.

        Uses bundled Alembic migrations to create or update the schema.
        Tracks state in the ``jwksmith_alembic_version`` table.
        """
        async with self._engine.begin() as conn:
            await conn.run_sync(run_migrations)

    # ------ Lifecycle ------

    async def dispose(self) -> None:
        """Stop the sweeper and dispose the database engine (for clean shutdown)."""
        await self._sweeper.stop()
        await self._engine.dispose()
