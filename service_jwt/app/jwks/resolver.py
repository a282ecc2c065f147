"""
Issuer to JWKS URL resolution.

The verifier trusts the token's own ``iss`` claim to locate its keys. Callers
that need allow-listing or pinning wrap the default resolver.
"""

from typing import Iterable, Optional, Protocol

from shared.logging import get_logger

from ..errors import IssuerNotAllowedError

WELL_KNOWN_PATH = "/.well-known/jwks.json"


class IssuerResolver(Protocol):
    """Maps an issuer claim to the URL of its JWKS document."""

    def resolve(self, issuer: str) -> str:
        ...


class WellKnownResolver:
    """Resolve ``iss`` to ``https://{iss}/.well-known/jwks.json``."""

    def __init__(self, scheme: str = "https"):
        self.scheme = scheme

    def resolve(self, issuer: str) -> str:
        return f"{self.scheme}://{issuer}{WELL_KNOWN_PATH}"


class AllowListResolver:
    """Reject issuers outside ``allowed`` before delegating to ``inner``."""

    def __init__(self, allowed: Iterable[str], inner: Optional[IssuerResolver] = None):
        self.allowed = frozenset(allowed)
        self.inner = inner or WellKnownResolver()
        self.logger = get_logger("jwt.jwks")

    def resolve(self, issuer: str) -> str:
        if issuer not in self.allowed:
            self.logger.warning("Issuer rejected by allow-list", issuer=issuer)
            raise IssuerNotAllowedError(issuer)
        return self.inner.resolve(issuer)


def build_resolver(allowed_issuers: Iterable[str] = ()) -> IssuerResolver:
    """Return the resolver for a configured allow-list; empty means any issuer."""
    allowed = list(allowed_issuers)
    if allowed:
        return AllowListResolver(allowed)
    return WellKnownResolver()
