"""Key material codec — native keys to storage form and to public JWKs.

Public JWKs follow RFC 7518 section 6:

- RSA ``n``/``e`` are unsigned big-endian integers in their minimal length.
- EC ``x``/``y`` are zero-padded to the curve's field width.
- OKP ``x`` is the raw public key (RFC 8037).

All members are base64url without padding, except ``x5c`` which RFC 7517
defines as standard base64 DER.
"""

import base64
import hashlib
from dataclasses import dataclass

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa

from jwksmith.core.algorithms import ALGORITHMS, AlgorithmSpec, KeyFamily
from jwksmith.core.errors import EncodingError, PrivateKeyExpired
from jwksmith.core.generator import KeyMaterial
from jwksmith.models.signing_key import SigningKey
from jwksmith.utils import b64url_encode

# cryptography curve names per JWK crv
_EC_CURVE_NAMES = {
    "P-256": "secp256r1",
    "P-384": "secp384r1",
    "P-521": "secp521r1",
}

_OKP_KEY_TYPES = {
    "Ed25519": ed25519.Ed25519PublicKey,
    "Ed448": ed448.Ed448PublicKey,
}


@dataclass(frozen=True, slots=True)
class StoredKeyMaterial:
    """Store-ready representation of a key pair."""

    public_key: str
    private_key: str
    certificate: str | None = None


def to_store(material: KeyMaterial) -> StoredKeyMaterial:
    """Serialize a generated key pair to PEM strings (PKCS#8 / SPKI)."""
    private_pem = material.private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")

    public_pem = material.public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")

    certificate = None
    if material.certificate is not None:
        der = material.certificate.public_bytes(serialization.Encoding.DER)
        certificate = base64.b64encode(der).decode("ascii")

    return StoredKeyMaterial(public_key=public_pem, private_key=private_pem, certificate=certificate)


def load_public_key(record: SigningKey):
    """Load the record's public key as a ``cryptography`` key object."""
    try:
        return serialization.load_pem_public_key(record.public_key.encode("utf-8"))
    except (ValueError, TypeError, AttributeError) as e:
        raise EncodingError(f"Key {record.kid} has unreadable public material") from e


def load_private_key(record: SigningKey):
    """Load the record's private key for signing.

    Raises:
        PrivateKeyExpired: If the private material has been purged.
    """
    if record.private_key is None:
        raise PrivateKeyExpired(f"Private key for {record.kid} has expired")
    try:
        return serialization.load_pem_private_key(record.private_key.encode("utf-8"), password=None)
    except (ValueError, TypeError) as e:
        raise EncodingError(f"Key {record.kid} has unreadable private material") from e


def int_to_b64url(value: int) -> str:
    """Encode a non-negative integer in its minimal unsigned big-endian form."""
    if value < 0:
        raise EncodingError("JWK integers must be non-negative")
    byte_length = max(1, (value.bit_length() + 7) // 8)
    return b64url_encode(value.to_bytes(byte_length, byteorder="big"))


def int_to_b64url_fixed(value: int, length: int) -> str:
    """Encode a non-negative integer as exactly ``length`` big-endian bytes."""
    try:
        return b64url_encode(value.to_bytes(length, byteorder="big"))
    except OverflowError as e:
        raise EncodingError(f"Value does not fit in {length} bytes") from e


def encode_public(record: SigningKey) -> dict:
    """Convert a key record to its public JWK.

    Returns:
        JWK dict with kty, kid, use, alg and the family-specific members.
        Private members are never included.

    Raises:
        EncodingError: If the stored public key does not match the record's
            algorithm.
    """
    spec = ALGORITHMS.get(record.algorithm)
    if spec is None:
        raise EncodingError(f"Key {record.kid} has unknown algorithm '{record.algorithm}'")

    public_key = load_public_key(record)
    jwk = {
        "kty": spec.family.value,
        "kid": record.kid,
        "use": "sig",
        "alg": spec.jwk_alg,
    }

    if spec.family is KeyFamily.RSA:
        jwk.update(_rsa_members(record, spec, public_key))
    elif spec.family is KeyFamily.EC:
        jwk.update(_ec_members(record, spec, public_key))
    elif spec.family is KeyFamily.OKP:
        jwk.update(_okp_members(record, spec, public_key))
    else:
        raise EncodingError(f"Unhandled key family {spec.family}")

    return jwk


def _rsa_members(record: SigningKey, spec: AlgorithmSpec, public_key) -> dict:
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise EncodingError(f"Key {record.kid} is {spec.name} but holds a non-RSA public key")
    numbers = public_key.public_numbers()
    members = {
        "n": int_to_b64url(numbers.n),
        "e": int_to_b64url(numbers.e),
    }
    if record.certificate:
        der = base64.b64decode(record.certificate)
        cert = x509.load_der_x509_certificate(der)
        if cert.public_key().public_numbers() != numbers:
            raise EncodingError(f"Key {record.kid} certificate does not match its public key")
        members["x5c"] = [record.certificate]
        members["x5t"] = b64url_encode(hashlib.sha1(der).digest())
    return members


def _ec_members(record: SigningKey, spec: AlgorithmSpec, public_key) -> dict:
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise EncodingError(f"Key {record.kid} is {spec.name} but holds a non-EC public key")
    if public_key.curve.name != _EC_CURVE_NAMES[spec.curve]:
        raise EncodingError(
            f"Key {record.kid} is {spec.name} but its curve is {public_key.curve.name}"
        )
    numbers = public_key.public_numbers()
    return {
        "crv": spec.curve,
        "x": int_to_b64url_fixed(numbers.x, spec.coordinate_size),
        "y": int_to_b64url_fixed(numbers.y, spec.coordinate_size),
    }


def _okp_members(record: SigningKey, spec: AlgorithmSpec, public_key) -> dict:
    if not isinstance(public_key, _OKP_KEY_TYPES[spec.curve]):
        raise EncodingError(f"Key {record.kid} is {spec.name} but holds a different public key type")
    raw = public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    if len(raw) != spec.coordinate_size:
        raise EncodingError(f"Key {record.kid} has a {len(raw)}-byte {spec.curve} public key")
    return {
        "crv": spec.curve,
        "x": b64url_encode(raw),
    }
