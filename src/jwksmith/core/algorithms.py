"""Supported signing algorithms — a closed set of RSA, EC and OKP variants."""

from dataclasses import dataclass
from enum import Enum

from jwksmith.core.errors import UnsupportedAlgorithm


class KeyFamily(str, Enum):
    """JWK key type (``kty``) for each algorithm family."""

    RSA = "RSA"
    EC = "EC"
    OKP = "OKP"


@dataclass(frozen=True, slots=True)
class AlgorithmSpec:
    """Family-specific parameters for one algorithm identifier.

    Attributes:
        name: Identifier accepted from callers and stored on the key record.
        family: Key family, doubles as the JWK ``kty``.
        jwk_alg: Value published in the JWK ``alg`` member.
        key_size: RSA modulus width in bits (RSA only).
        curve: JWK ``crv`` value (EC and OKP only).
        coordinate_size: Byte width of each EC coordinate, or of the raw OKP
            public key.
        hash_name: Digest paired with the algorithm (RSA certificate signing).
    """

    name: str
    family: KeyFamily
    jwk_alg: str
    key_size: int | None = None
    curve: str | None = None
    coordinate_size: int | None = None
    hash_name: str | None = None


RSA_PUBLIC_EXPONENT = 65537

ALGORITHMS: dict[str, AlgorithmSpec] = {
    "RS256": AlgorithmSpec("RS256", KeyFamily.RSA, "RS256", key_size=2048, hash_name="sha256"),
    "RS384": AlgorithmSpec("RS384", KeyFamily.RSA, "RS384", key_size=3072, hash_name="sha384"),
    "RS512": AlgorithmSpec("RS512", KeyFamily.RSA, "RS512", key_size=4096, hash_name="sha512"),
    "ES256": AlgorithmSpec("ES256", KeyFamily.EC, "ES256", curve="P-256", coordinate_size=32, hash_name="sha256"),
    "ES384": AlgorithmSpec("ES384", KeyFamily.EC, "ES384", curve="P-384", coordinate_size=48, hash_name="sha384"),
    # P-521 field elements are 521 bits, so 66 bytes
    "ES512": AlgorithmSpec("ES512", KeyFamily.EC, "ES512", curve="P-521", coordinate_size=66, hash_name="sha512"),
    "Ed25519": AlgorithmSpec("Ed25519", KeyFamily.OKP, "EdDSA", curve="Ed25519", coordinate_size=32),
    "Ed448": AlgorithmSpec("Ed448", KeyFamily.OKP, "EdDSA", curve="Ed448", coordinate_size=57),
}

SUPPORTED_ALGORITHMS = tuple(ALGORITHMS)


def get_algorithm(identifier: str) -> AlgorithmSpec:
    """Look up an algorithm by identifier.

    Raises:
        UnsupportedAlgorithm: If the identifier is not in the supported set.
    """
    try:
        return ALGORITHMS[identifier]
    except (KeyError, TypeError):
        raise UnsupportedAlgorithm(
            f"Unsupported algorithm '{identifier}'. "
            f"Supported: {', '.join(SUPPORTED_ALGORITHMS)}",
            supported=list(SUPPORTED_ALGORITHMS),
        ) from None
