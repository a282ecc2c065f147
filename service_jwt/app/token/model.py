"""
Token claim set construction.
"""

import math
import time
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel

# Expiry values at or above this are absolute epoch milliseconds
ABSOLUTE_EXPIRY_THRESHOLD = 10**12


class TokenHeader(BaseModel):
    """JOSE header. Field order is the serialization order."""

    alg: Literal["ES256"] = "ES256"
    typ: Literal["JWT"] = "JWT"
    kid: str


class TokenPayload(BaseModel):
    """Registered claims. Field order is the serialization order."""

    iss: str
    sub: str
    iat: int
    # None when the requested expiry is not a finite number; serialized as null
    exp: Optional[int]


def normalize_expiry(exp: float, issued_at: int) -> Optional[int]:
    """Return the absolute expiry in epoch seconds.

    ``exp`` at or above 10**12 is read as epoch milliseconds. Anything lower is
    seconds relative to ``issued_at``; negative offsets are clamped to zero, so
    the token expires at ``issued_at`` rather than in the past.

    ``NaN`` and positive infinity have no expiry to give and return None, which
    no verifier accepts. Negative infinity clamps like any negative offset.
    """
    if math.isnan(exp) or exp == math.inf:
        return None
    if exp >= ABSOLUTE_EXPIRY_THRESHOLD:
        return int(math.floor(exp / 1000))
    if exp == -math.inf:
        return issued_at
    return issued_at + max(0, int(math.floor(exp)))


class Token(BaseModel):
    """A header paired with its claim set."""

    header: TokenHeader
    payload: TokenPayload

    @classmethod
    def create(
        cls,
        kid: str,
        iss: str,
        sub: str,
        exp: float,
        *,
        now: Optional[float] = None,
    ) -> "Token":
        """Build a token for ``sub`` issued by ``iss`` and signed under ``kid``.

        ``iss`` is a bare domain without scheme. No validation is done here;
        a bad issuer only shows up later as a failed JWKS lookup.
        """
        issued_at = int(math.floor(time.time() if now is None else now))
        return cls(
            header=TokenHeader(kid=kid),
            payload=TokenPayload(
                iss=iss,
                sub=sub,
                iat=issued_at,
                exp=normalize_expiry(exp, issued_at),
            ),
        )

    def header_dict(self) -> Dict[str, Any]:
        return self.header.model_dump()

    def payload_dict(self) -> Dict[str, Any]:
        return self.payload.model_dump()
