"""
Token signing.
"""

from typing import Any, Mapping, Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..errors import SigningError
from .codec import assemble, encode_signing_input
from .keys import es256_sign
from .model import Token

logger = get_logger("jwt.signer")


async def sign(
    private_jwk: Mapping[str, Any],
    token: Token,
    *,
    metrics: Optional[MetricsCollector] = None,
) -> str:
    """Sign ``token`` with an EC P-256 private JWK and return the compact form.

    Failures of the signing primitive are raised as ``SigningError``.
    """
    signing_input = encode_signing_input(token.header_dict(), token.payload_dict())
    try:
        signature = es256_sign(private_jwk, signing_input.encode("ascii"))
    except Exception as e:
        logger.error("Token signing failed", kid=token.header.kid, error=str(e))
        raise SigningError(
            f"Token signing failed: {e}",
            details={"kid": token.header.kid},
        ) from e

    if metrics is not None:
        metrics.record_signed()
    logger.debug("Token signed", kid=token.header.kid, sub=token.payload.sub)
    return assemble(signing_input, signature)
