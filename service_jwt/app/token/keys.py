"""
ES256 key material and signature primitives.

Keys travel as JWK dicts. The elliptic-curve work is done by python-jose on
top of the cryptography backend; signatures are raw ``r || s`` (64 bytes) as
JWS requires.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from cryptography.hazmat.primitives.asymmetric import ec
from jose import jwk
from jose.backends.base import Key

ALGORITHM = "ES256"

# Members that only exist on a private EC JWK
_PRIVATE_MEMBERS = ("d",)


@dataclass(frozen=True)
class Keyset:
    """A matching private/public JWK pair."""

    private_jwk: Dict[str, Any]
    public_jwk: Dict[str, Any]


def _construct(key_data: Mapping[str, Any]) -> Key:
    return jwk.construct(dict(key_data), ALGORITHM)


def generate_keyset(kid: Optional[str] = None) -> Keyset:
    """Generate a fresh P-256 key pair as JWKs."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    private = jwk.construct(private_key, ALGORITHM).to_dict()
    private["use"] = "sig"
    if kid is not None:
        private["kid"] = kid
    return Keyset(private_jwk=private, public_jwk=public_jwk(private))


def public_jwk(private: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the public half of a JWK."""
    return {name: value for name, value in private.items() if name not in _PRIVATE_MEMBERS}


def es256_sign(private: Mapping[str, Any], data: bytes) -> bytes:
    """Sign ``data`` with a private EC JWK."""
    return _construct(private).sign(data)


def es256_verify(public: Mapping[str, Any], data: bytes, signature: bytes) -> bool:
    """Check ``signature`` over ``data`` with a public EC JWK."""
    return bool(_construct(public).verify(data, signature))
