"""Core key service — create, delete, list and publish signing keys.

Framework-agnostic business logic. All functions take an AsyncSession and the
current time; none of them reads the clock or the environment itself.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from jwksmith.core.algorithms import get_algorithm
from jwksmith.core.codec import load_private_key, to_store
from jwksmith.core.errors import KeyAlreadyDeleted, KeyNotFound, PrivateKeyExpired
from jwksmith.core.generator import KeyMaterial, generate_key_material
from jwksmith.core.lifecycle import KeyLifecycle, KeyState, compute_state, has_signing_capability
from jwksmith.core.schemas import DeleteOutcome, SigningKeyPrivateResponse, SigningKeyResponse
from jwksmith.events import KeyCreated, KeyDeleted
from jwksmith.models.signing_key import SigningKey
from jwksmith.repositories import signing_key as signing_key_repo

if TYPE_CHECKING:
    from jwksmith.events import EventCollector

logger = logging.getLogger("jwksmith.keys")


def to_response(record: SigningKey, now: datetime) -> SigningKeyResponse:
    return SigningKeyResponse(
        id=record.id,
        kid=record.kid,
        algorithm=record.algorithm,
        state=compute_state(record, now),
        has_private_key=record.private_key is not None,
        created_at=record.created_at,
        private_key_expires_at=record.private_key_expires_at,
        key_expires_at=record.key_expires_at,
        deleted_at=record.deleted_at,
    )


async def generate_key(algorithm: str, *, lifecycle: KeyLifecycle, now: datetime) -> KeyMaterial:
    """Generate key material off the event loop.

    RSA certificates are valid from ``now`` until the key leaves the JWK Set.

    Raises:
        UnsupportedAlgorithm: If the identifier is not supported.
        GenerationError: If the primitive fails.
    """
    get_algorithm(algorithm)
    valid_for = timedelta(seconds=lifecycle.config.key_ttl_seconds)
    return await asyncio.to_thread(
        generate_key_material, algorithm, now=now, valid_for=valid_for,
    )


async def store_key(
    session: AsyncSession,
    material: KeyMaterial,
    *,
    lifecycle: KeyLifecycle,
    now: datetime,
    events: EventCollector | None = None,
) -> SigningKey:
    """Persist generated material with its expiry timestamps."""
    stored = to_store(material)
    private_key_expires_at, key_expires_at = lifecycle.expiry_for(now)
    record = await signing_key_repo.create_signing_key(
        session,
        algorithm=material.algorithm.name,
        public_key=stored.public_key,
        private_key=stored.private_key,
        certificate=stored.certificate,
        created_at=now,
        private_key_expires_at=private_key_expires_at,
        key_expires_at=key_expires_at,
    )
    logger.info("Created %s key %s", record.algorithm, record.kid)

    if events is not None:
        events.collect("key_created", KeyCreated(
            timestamp=now,
            kid=record.kid,
            algorithm=record.algorithm,
            private_key_expires_at=private_key_expires_at,
            key_expires_at=key_expires_at,
        ))
    return record


async def create_key(
    session: AsyncSession,
    *,
    algorithm: str,
    lifecycle: KeyLifecycle,
    now: datetime,
    events: EventCollector | None = None,
) -> SigningKey:
    """Generate and store a new signing key.

    Key material is computed before the session issues any statement, so no
    transaction is open during generation.

    Raises:
        UnsupportedAlgorithm: If the identifier is not supported.
        GenerationError: If the primitive fails.
    """
    material = await generate_key(algorithm, lifecycle=lifecycle, now=now)
    return await store_key(session, material, lifecycle=lifecycle, now=now, events=events)


async def soft_delete_key(
    session: AsyncSession,
    key_id: uuid.UUID,
    *,
    now: datetime,
    strict: bool = False,
    events: EventCollector | None = None,
) -> DeleteOutcome:
    """Soft-delete a key. Idempotent: a repeat returns ``ALREADY_DELETED``.

    ``deleted_at`` keeps the value set by the first successful call.

    Raises:
        KeyNotFound: If no key has this ID.
        KeyAlreadyDeleted: On a repeat, when ``strict`` is set.
    """
    if await signing_key_repo.mark_deleted(session, key_id, now):
        logger.info("Soft-deleted key %s", key_id)
        if events is not None:
            events.collect("key_deleted", KeyDeleted(timestamp=now, kid=str(key_id), reason="explicit"))
        return DeleteOutcome.DELETED

    record = await signing_key_repo.get_signing_key_by_id(session, key_id)
    if record is None:
        raise KeyNotFound("Key not found", key_id=str(key_id))
    if strict:
        raise KeyAlreadyDeleted("Key already deleted", key_id=str(key_id))
    return DeleteOutcome.ALREADY_DELETED


async def list_keys(
    session: AsyncSession, *, include_deleted: bool = False, now: datetime,
) -> list[SigningKeyResponse]:
    """List key metadata with each key's state at ``now``."""
    records = await signing_key_repo.list_signing_keys(session, include_deleted=include_deleted)
    return [to_response(record, now) for record in records]


async def get_key(session: AsyncSession, key_id: uuid.UUID, *, now: datetime) -> SigningKeyResponse:
    """Get key metadata in any state, including deleted.

    Raises:
        KeyNotFound: If no key has this ID.
    """
    record = await signing_key_repo.get_signing_key_by_id(session, key_id)
    if record is None:
        raise KeyNotFound("Key not found", key_id=str(key_id))
    return to_response(record, now)


async def get_signing_key(
    session: AsyncSession, key_id: uuid.UUID, *, now: datetime,
) -> SigningKeyPrivateResponse:
    """Get a key together with its private half, for signing.

    Raises:
        KeyNotFound: If the key does not exist, is deleted, or fully expired.
        PrivateKeyExpired: If the key is still published but can no longer sign.
        EncodingError: If the stored private key is unreadable.
    """
    record = await signing_key_repo.get_signing_key_by_id(session, key_id)
    if record is None:
        raise KeyNotFound("Key not found", key_id=str(key_id))

    state = compute_state(record, now)
    if state in (KeyState.DELETED, KeyState.EXPIRED):
        raise KeyNotFound("Key not found", key_id=str(key_id))
    if not has_signing_capability(state) or record.private_key is None:
        raise PrivateKeyExpired("Private key expired", key_id=str(key_id))

    load_private_key(record)

    summary = to_response(record, now)
    return SigningKeyPrivateResponse(
        **summary.model_dump(),
        private_key=record.private_key,
        public_key=record.public_key,
    )
