"""JWKSmith configuration — dataclasses for key lifetimes and sweeping."""

from dataclasses import dataclass, field

DEFAULT_PRIVATE_KEY_TTL_SECONDS = 60 * 60 * 24  # 1 day
DEFAULT_KEY_TTL_SECONDS = 60 * 60 * 24 * 2  # 2 days
DEFAULT_SWEEP_INTERVAL_SECONDS = 60


@dataclass(frozen=True, slots=True)
class LifecycleConfig:
    """Key lifetimes, measured from the key's creation time.

    Args:
        private_key_ttl_seconds: How long the private key may be used for signing.
        key_ttl_seconds: How long the public key stays published. Must be at
            least ``private_key_ttl_seconds`` so tokens signed just before the
            private key expires remain verifiable.
        auto_delete_on_full_expiry: Soft-delete keys once they are fully expired.
        sweep_interval_seconds: Delay between two expiration sweeps.
    """

    private_key_ttl_seconds: int = DEFAULT_PRIVATE_KEY_TTL_SECONDS
    key_ttl_seconds: int = DEFAULT_KEY_TTL_SECONDS
    auto_delete_on_full_expiry: bool = False
    sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        """Validate lifetimes at construction time."""
        if self.private_key_ttl_seconds <= 0:
            raise ValueError("private_key_ttl_seconds must be positive")
        if self.key_ttl_seconds < self.private_key_ttl_seconds:
            raise ValueError(
                "key_ttl_seconds must be greater than or equal to private_key_ttl_seconds"
            )
        if self.sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be positive")


@dataclass(frozen=True, slots=True)
class JWKSmithConfig:
    """Internal config built by the JWKSmith constructor. Not user-facing."""

    database_url: str
    lifecycle: LifecycleConfig = field(default_factory=LifecycleConfig)
    jwks_cache_max_age: int = 300
