"""JWKSmith SQLModel models — central registry.

Import all models here so SQLModel.metadata is populated for Alembic.
"""

from jwksmith.models.signing_key import SigningKey

__all__ = [
    "SigningKey",
]
