"""
Error types raised by the token, JWKS and signing layers.

Verification never lets these escape; they are mapped to outcomes by the
pipeline. Signing propagates them to the caller.
"""

from typing import Any, Dict, Optional

from shared.errors import AccessLayerException, ExternalServiceError, ValidationError


class MalformedTokenError(ValidationError):
    """Compact token or one of its segments could not be parsed."""

    def __init__(self, message: str = "Malformed token", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class SigningError(AccessLayerException):
    """The signing primitive rejected the key or the input."""

    def __init__(self, message: str = "Signing failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("SIGNING_ERROR", message, details)


class JWKSFetchError(ExternalServiceError):
    """The JWKS endpoint was unreachable or answered with a failure."""

    def __init__(self, message: str = "JWKS fetch failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("jwks", message, details)


class IssuerNotAllowedError(AccessLayerException):
    """The issuer is outside the configured allow-list."""

    def __init__(self, issuer: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("ISSUER_NOT_ALLOWED", f"Issuer not allowed: {issuer}", details)
        self.issuer = issuer
