"""JWKSmith — signing key lifecycle and JWK Set publishing for Python."""

__version__ = "0.1.0"

from jwksmith.alembic_helper import alembic_filters
from jwksmith.config import LifecycleConfig
from jwksmith.core.algorithms import SUPPORTED_ALGORITHMS, AlgorithmSpec, KeyFamily, get_algorithm
from jwksmith.core.codec import encode_public
from jwksmith.core.errors import (
    EncodingError,
    GenerationError,
    JWKSmithError,
    KeyAlreadyDeleted,
    KeyNotFound,
    PersistenceError,
    PrivateKeyExpired,
    UnsupportedAlgorithm,
)
from jwksmith.core.lifecycle import KeyState, compute_state
from jwksmith.core.schemas import DeleteOutcome, SigningKeyPrivateResponse, SigningKeyResponse
from jwksmith.core.sweeper import SweepReport
from jwksmith.events import KeyCreated, KeyDeleted, PrivateKeyPurged
from jwksmith.jwksmith import JWKSmith
from jwksmith.models.signing_key import SigningKey

__all__ = [
    "AlgorithmSpec",
    "DeleteOutcome",
    "EncodingError",
    "GenerationError",
    "JWKSmith",
    "JWKSmithError",
    "KeyAlreadyDeleted",
    "KeyCreated",
    "KeyDeleted",
    "KeyFamily",
    "KeyNotFound",
    "KeyState",
    "LifecycleConfig",
    "PersistenceError",
    "PrivateKeyExpired",
    "PrivateKeyPurged",
    "SUPPORTED_ALGORITHMS",
    "SigningKey",
    "SigningKeyPrivateResponse",
    "SigningKeyResponse",
    "SweepReport",
    "UnsupportedAlgorithm",
    "alembic_filters",
    "compute_state",
    "encode_public",
    "get_algorithm",
]
