"""
Shared error handling for the JWKS key resolver.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class JWKSException(Exception):
    """Base exception for key set retrieval and key resolution."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(JWKSException):
    """Invalid or incomplete resolver configuration."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class KeySetSourceError(JWKSException):
    """Base class for failures while fetching a key set from its source."""


class SourceUnavailable(KeySetSourceError):
    """The source could not be reached or read (network or file failure)."""

    def __init__(self, source: str, error: str):
        super().__init__(
            "SOURCE_UNAVAILABLE",
            f"Key set source unavailable: {source}",
            {"source": source, "error": error},
        )


class BadStatus(KeySetSourceError):
    """The endpoint answered with a status outside [200, 300)."""

    def __init__(self, source: str, status_code: int):
        self.status_code = status_code
        super().__init__(
            "BAD_STATUS",
            f"Failed request, status: {status_code}",
            {"source": source, "status_code": status_code},
        )


class MalformedPayload(KeySetSourceError):
    """The key set document could not be decoded."""

    def __init__(self, source: str, error: str):
        super().__init__(
            "MALFORMED_PAYLOAD",
            f"Malformed key set payload from {source}",
            {"source": source, "error": error},
        )


class KeyLookupError(JWKSException):
    """Base class for key selection failures."""


class KeyIdNotFound(KeyLookupError):
    """No key in the set carries the requested identifier."""

    def __init__(self, kid: str):
        self.kid = kid
        super().__init__("KEY_ID_NOT_FOUND", f"Not found a jwk that matches '{kid}'", {"kid": kid})


class NoUsableKey(KeyLookupError):
    """Keys with the identifier exist but none is a valid public key for the use."""

    def __init__(self, kid: str, use: str):
        self.kid = kid
        self.use = use
        super().__init__(
            "NO_USABLE_KEY",
            f"Not found a jwk contains valid public-key, used to '{use}'",
            {"kid": kid, "use": use},
        )


class AuthenticationError(JWKSException):
    """Token-related errors raised while selecting a verification key."""

    def __init__(self, code: str = "AUTHENTICATION_ERROR", message: str = "Authentication failed",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, details)


class MissingKeyId(AuthenticationError):
    """The token header carries no string ``kid``."""

    def __init__(self):
        super().__init__("MISSING_KEY_ID", "Not found a kid in jwt header")


class AlgorithmMismatch(AuthenticationError):
    """The token's ``alg`` differs from the algorithm declared by the resolved key."""

    def __init__(self, token_alg: Optional[str], key_alg: Optional[str]):
        self.token_alg = token_alg
        self.key_alg = key_alg
        super().__init__(
            "ALGORITHM_MISMATCH",
            f"Unexpected jwt signing method={token_alg}",
            {"token_alg": token_alg, "key_alg": key_alg},
        )
