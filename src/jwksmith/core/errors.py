"""Error taxonomy for key generation, encoding, lifecycle and storage."""


class JWKSmithError(Exception):
    """Base error with an error code and HTTP status."""

    code = "jwksmith_error"
    status_code = 500

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None, **extra):
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra
        super().__init__(message)


class UnsupportedAlgorithm(JWKSmithError):
    """The requested algorithm identifier is outside the supported set."""

    code = "unsupported_algorithm"
    status_code = 400


class GenerationError(JWKSmithError):
    """The cryptographic primitive failed to produce a key pair."""

    code = "generation_failed"
    status_code = 500


class EncodingError(JWKSmithError):
    """Stored key material is inconsistent with its algorithm."""

    code = "encoding_failed"
    status_code = 500


class KeyNotFound(JWKSmithError):
    code = "key_not_found"
    status_code = 404


class KeyAlreadyDeleted(JWKSmithError):
    code = "key_already_deleted"
    status_code = 409


class PrivateKeyExpired(JWKSmithError):
    """The key exists but its private half can no longer be used for signing."""

    code = "private_key_expired"
    status_code = 410


class PersistenceError(JWKSmithError):
    """The store failed to complete an operation."""

    code = "persistence_error"
    status_code = 503
