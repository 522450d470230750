"""JWK Set assembly — what relying parties see at /.well-known/jwks.json."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from jwksmith.core.codec import encode_public
from jwksmith.core.lifecycle import compute_state, is_published
from jwksmith.repositories import signing_key as signing_key_repo


async def build_active_set(session: AsyncSession, now: datetime) -> list[dict]:
    """Public JWKs of every Active or PrivateExpired key, oldest first.

    Late sweeps never leak expired keys here: inclusion is decided from the
    timestamps at ``now``, not from whether the sweeper has run.
    """
    records = await signing_key_repo.list_not_deleted(session)
    return [
        encode_public(record)
        for record in records
        if is_published(compute_state(record, now))
    ]


async def build_jwk_set(session: AsyncSession, now: datetime) -> dict:
    """JWK Set document (RFC 7517 section 5)."""
    return {"keys": await build_active_set(session, now)}
