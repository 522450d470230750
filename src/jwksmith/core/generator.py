"""Key pair generation for every supported algorithm family."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa
from cryptography.x509.oid import NameOID

from jwksmith.config import DEFAULT_KEY_TTL_SECONDS
from jwksmith.core.algorithms import RSA_PUBLIC_EXPONENT, AlgorithmSpec, KeyFamily, get_algorithm
from jwksmith.core.errors import GenerationError
from jwksmith.utils import utc_now

logger = logging.getLogger("jwksmith.generator")

_EC_CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}

_HASHES = {
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}

CERTIFICATE_COMMON_NAME = "ANONYMOUS"


@dataclass(frozen=True, slots=True)
class KeyMaterial:
    """A freshly generated key pair, before it is serialized for storage."""

    algorithm: AlgorithmSpec
    private_key: object
    public_key: object
    certificate: x509.Certificate | None = None


def generate_key_material(
    algorithm: str, *, now: datetime | None = None, valid_for: timedelta | None = None,
) -> KeyMaterial:
    """Generate a key pair for the given algorithm identifier.

    RSA keys also get a self-signed X.509 certificate (published as ``x5c``),
    valid from ``now`` (defaults to the current time) for ``valid_for``
    (defaults to the default key TTL).

    Raises:
        UnsupportedAlgorithm: If the identifier is not supported.
        GenerationError: If the underlying primitive fails. Not retried.
    """
    spec = get_algorithm(algorithm)
    try:
        if spec.family is KeyFamily.RSA:
            private_key = rsa.generate_private_key(
                public_exponent=RSA_PUBLIC_EXPONENT,
                key_size=spec.key_size,
            )
            certificate = _self_signed_certificate(
                private_key,
                spec,
                now or utc_now(),
                valid_for or timedelta(seconds=DEFAULT_KEY_TTL_SECONDS),
            )
        elif spec.family is KeyFamily.EC:
            private_key = ec.generate_private_key(_EC_CURVES[spec.curve]())
            certificate = None
        elif spec.family is KeyFamily.OKP:
            if spec.curve == "Ed25519":
                private_key = ed25519.Ed25519PrivateKey.generate()
            else:
                private_key = ed448.Ed448PrivateKey.generate()
            certificate = None
        else:
            raise AssertionError(f"unhandled key family {spec.family}")
        public_key = private_key.public_key()
    except Exception as e:
        logger.exception("Key generation failed for %s", spec.name)
        raise GenerationError(f"Failed to generate {spec.name} key pair") from e

    return KeyMaterial(
        algorithm=spec,
        private_key=private_key,
        public_key=public_key,
        certificate=certificate,
    )


def _self_signed_certificate(
    private_key: rsa.RSAPrivateKey, spec: AlgorithmSpec, not_before: datetime, valid_for: timedelta,
) -> x509.Certificate:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, CERTIFICATE_COMMON_NAME)])
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_before + valid_for)
        .sign(private_key, _HASHES[spec.hash_name]())
    )
