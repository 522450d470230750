"""Key service schemas — request/response models for the core key logic."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from jwksmith.core.lifecycle import KeyState


class CreateKeyRequest(BaseModel):
    """Key generation input."""
    alg: str


class SigningKeyResponse(BaseModel):
    """Key metadata returned by admin endpoints (no private material)."""
    id: uuid.UUID
    kid: str
    algorithm: str
    state: KeyState
    has_private_key: bool
    created_at: datetime
    private_key_expires_at: datetime
    key_expires_at: datetime
    deleted_at: datetime | None = None


class SigningKeyPrivateResponse(SigningKeyResponse):
    """Key with its private half, for the signing component."""
    private_key: str
    public_key: str


class JWKSetResponse(BaseModel):
    """JWK Set document."""
    keys: list[dict]


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    ALREADY_DELETED = "already_deleted"
