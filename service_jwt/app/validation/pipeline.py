"""
Verification pipeline for compact ES256 tokens.

Stages run in a fixed order and the first failing stage decides the outcome:

1. structure   - exactly three non-empty segments
2. decode      - header and payload are base64url JSON objects
3. header      - non-empty ``kid``, ``alg == "ES256"``, ``typ == "JWT"``
4. claims      - ``iss`` and ``sub`` are strings
5. expiry      - ``exp`` is a number strictly greater than now
6. discovery   - the issuer's JWKS holds a key with the header's ``kid``
7. signature   - ES256 over the signing input as received

``verify_detailed`` never raises. ``verify`` projects the result onto the
subject string or ``False``.
"""

import math
import time
from enum import Enum
from typing import Any, Callable, Dict, Literal, Optional, Union

from pydantic import BaseModel

from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..errors import IssuerNotAllowedError, JWKSFetchError, MalformedTokenError
from ..jwks.client import JWKSClient
from ..token.codec import CompactParts, b64url_decode, decode_segment, parse
from ..token.keys import ALGORITHM, es256_verify


class VerificationOutcome(str, Enum):
    """Tagged result of a verification run."""

    VALID = "valid"
    MALFORMED = "malformed"
    INVALID_HEADER = "invalid_header"
    MISSING_CLAIMS = "missing_claims"
    EXPIRED = "expired"
    ISSUER_NOT_ALLOWED = "issuer_not_allowed"
    NETWORK_ERROR = "network_error"
    KEY_NOT_FOUND = "key_not_found"
    SIGNATURE_INVALID = "signature_invalid"


class VerificationResult(BaseModel):
    """Outcome of verifying one token."""

    outcome: VerificationOutcome
    subject: Optional[str] = None
    issuer: Optional[str] = None
    kid: Optional[str] = None
    reason: Optional[str] = None

    @property
    def valid(self) -> bool:
        return self.outcome is VerificationOutcome.VALID


class _StageFailure(Exception):
    def __init__(self, outcome: VerificationOutcome, reason: str):
        super().__init__(reason)
        self.outcome = outcome
        self.reason = reason


class TokenVerifier:
    """Verifies compact tokens against their issuer's published keys."""

    def __init__(
        self,
        jwks_client: Optional[JWKSClient] = None,
        *,
        clock: Callable[[], float] = time.time,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.jwks_client = jwks_client or JWKSClient()
        self.clock = clock
        self.metrics = metrics
        self.logger = get_logger("jwt.verifier")

    async def verify(self, token: str) -> Union[str, Literal[False]]:
        """Return the verified subject, or ``False`` on any failure."""
        result = await self.verify_detailed(token)
        return result.subject if result.valid else False

    async def verify_detailed(self, token: str) -> VerificationResult:
        """Run every stage and report which one, if any, failed."""
        context: Dict[str, Any] = {}
        try:
            subject = await self._run(token, context)
            result = VerificationResult(
                outcome=VerificationOutcome.VALID,
                subject=subject,
                issuer=context.get("issuer"),
                kid=context.get("kid"),
            )
        except _StageFailure as failure:
            result = VerificationResult(
                outcome=failure.outcome,
                issuer=context.get("issuer"),
                kid=context.get("kid"),
                reason=failure.reason,
            )
        except Exception as e:
            self.logger.error("Unexpected error during token verification", error=str(e))
            result = VerificationResult(
                outcome=VerificationOutcome.MALFORMED,
                issuer=context.get("issuer"),
                kid=context.get("kid"),
                reason=f"unexpected error: {e}",
            )

        self._report(result)
        return result

    async def _run(self, token: str, context: Dict[str, Any]) -> str:
        parts = self._check_structure(token)
        header, payload = self._decode(parts)
        context["kid"] = self._check_header(header)
        context["issuer"], subject = self._check_claims(payload)
        self._check_expiry(payload)
        key = await self._discover_key(context["issuer"], context["kid"])
        self._check_signature(key, parts)
        return subject

    def _check_structure(self, token: str) -> CompactParts:
        try:
            return parse(token)
        except MalformedTokenError as e:
            raise _StageFailure(VerificationOutcome.MALFORMED, e.message) from e

    def _decode(self, parts: CompactParts):
        try:
            return decode_segment(parts.header_b64), decode_segment(parts.payload_b64)
        except MalformedTokenError as e:
            raise _StageFailure(VerificationOutcome.MALFORMED, e.message) from e

    def _check_header(self, header: Dict[str, Any]) -> str:
        kid = header.get("kid")
        if not isinstance(kid, str) or not kid:
            raise _StageFailure(VerificationOutcome.INVALID_HEADER, "missing kid")
        if header.get("alg") != ALGORITHM:
            raise _StageFailure(VerificationOutcome.INVALID_HEADER, "unsupported alg")
        if header.get("typ") != "JWT":
            raise _StageFailure(VerificationOutcome.INVALID_HEADER, "unsupported typ")
        return kid

    def _check_claims(self, payload: Dict[str, Any]):
        issuer, subject = payload.get("iss"), payload.get("sub")
        if not isinstance(issuer, str) or not isinstance(subject, str):
            raise _StageFailure(VerificationOutcome.MISSING_CLAIMS, "iss and sub must be strings")
        return issuer, subject

    def _check_expiry(self, payload: Dict[str, Any]):
        exp = payload.get("exp")
        # bool is an int subclass but not a timestamp
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise _StageFailure(VerificationOutcome.EXPIRED, "exp is missing or not a number")
        now = math.floor(self.clock())
        if not exp > now:
            raise _StageFailure(VerificationOutcome.EXPIRED, "token expired")

    async def _discover_key(self, issuer: str, kid: str) -> Dict[str, Any]:
        try:
            key = await self.jwks_client.find_key(issuer, kid)
        except IssuerNotAllowedError as e:
            raise _StageFailure(VerificationOutcome.ISSUER_NOT_ALLOWED, e.message) from e
        except JWKSFetchError as e:
            raise _StageFailure(VerificationOutcome.NETWORK_ERROR, e.message) from e
        except Exception as e:
            raise _StageFailure(VerificationOutcome.NETWORK_ERROR, str(e)) from e
        if key is None:
            raise _StageFailure(VerificationOutcome.KEY_NOT_FOUND, f"no key with kid {kid}")
        return key

    def _check_signature(self, key: Dict[str, Any], parts: CompactParts):
        try:
            signature = b64url_decode(parts.signature_b64)
            ok = es256_verify(key, parts.signing_input.encode("ascii"), signature)
        except Exception as e:
            raise _StageFailure(VerificationOutcome.SIGNATURE_INVALID, str(e)) from e
        if not ok:
            raise _StageFailure(VerificationOutcome.SIGNATURE_INVALID, "signature mismatch")

    def _report(self, result: VerificationResult):
        if self.metrics is not None:
            self.metrics.record_verification(result.outcome.value)

        if result.valid:
            self.logger.info("Token verified", sub=result.subject, iss=result.issuer, kid=result.kid)
        else:
            self.logger.warning(
                "Token verification failed",
                outcome=result.outcome.value,
                reason=result.reason,
                iss=result.issuer,
                kid=result.kid,
            )


async def verify(token: str) -> Union[str, Literal[False]]:
    """Verify ``token`` against ``https://{iss}/.well-known/jwks.json``.

    Returns the subject on success and ``False`` otherwise; never raises.
    """
    async with JWKSClient() as client:
        return await TokenVerifier(client).verify(token)
