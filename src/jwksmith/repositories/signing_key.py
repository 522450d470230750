"""Signing key repository — database operations for key records.

Mutations after creation are conditional updates keyed on the field's
previously observed value, so a racing duplicate is a no-op.
"""

import uuid
from datetime import datetime

from sqlalchemy import select, update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession

from jwksmith.models.signing_key import SigningKey


async def create_signing_key(
    session: AsyncSession,
    *,
    algorithm: str,
    public_key: str,
    private_key: str,
    certificate: str | None,
    created_at: datetime,
    private_key_expires_at: datetime,
    key_expires_at: datetime,
    key_id: uuid.UUID | None = None,
) -> SigningKey:
    """Insert a new key record."""
    key = SigningKey(
        id=key_id or uuid.uuid4(),
        algorithm=algorithm,
        public_key=public_key,
        private_key=private_key,
        certificate=certificate,
        created_at=created_at,
        private_key_expires_at=private_key_expires_at,
        key_expires_at=key_expires_at,
    )
    session.add(key)
    await session.flush()
    await session.refresh(key)
    return key


async def get_signing_key_by_id(session: AsyncSession, key_id: uuid.UUID) -> SigningKey | None:
    """Get a key record by its ID, including soft-deleted ones."""
    statement = select(SigningKey).where(SigningKey.id == key_id)
    result = (await session.execute(statement)).scalars()
    return result.first()


async def list_signing_keys(session: AsyncSession, *, include_deleted: bool = False) -> list[SigningKey]:
    """List key records, oldest first."""
    statement = select(SigningKey)
    if not include_deleted:
        statement = statement.where(SigningKey.deleted_at == None)  # noqa: E711
    statement = statement.order_by(SigningKey.created_at.asc(), SigningKey.id.asc())
    result = (await session.execute(statement)).scalars()
    return list(result.all())


async def list_not_deleted(session: AsyncSession) -> list[SigningKey]:
    """List all key records without ``deleted_at``, oldest first."""
    return await list_signing_keys(session, include_deleted=False)


async def purge_private_key(session: AsyncSession, key_id: uuid.UUID) -> bool:
    """Clear the private key if it is still present.

    Returns True if this call cleared it, False if it was already gone.
    """
    stmt = (
        sa_update(SigningKey)
        .where(SigningKey.id == key_id, SigningKey.private_key != None)  # noqa: E711
        .values(private_key=None)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount == 1


async def mark_deleted(session: AsyncSession, key_id: uuid.UUID, deleted_at: datetime) -> bool:
    """Set ``deleted_at`` if it is still unset.

    Returns True if this call deleted the key, False if the key is missing or
    was already deleted.
    """
    stmt = (
        sa_update(SigningKey)
        .where(SigningKey.id == key_id, SigningKey.deleted_at == None)  # noqa: E711
        .values(deleted_at=deleted_at)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount == 1
