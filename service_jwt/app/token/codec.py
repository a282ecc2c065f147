"""
Compact JWS serialization.

A compact token is ``b64url(header) "." b64url(payload) "." b64url(signature)``
with unpadded base64url segments. Header and payload JSON keep the insertion
order of the mappings handed in, so the caller fixes the field order.
"""

import base64
import binascii
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from ..errors import MalformedTokenError

_B64URL_RE = re.compile(r"^[A-Za-z0-9_-]*$")


@dataclass(frozen=True)
class CompactParts:
    """The three raw segments of a compact token."""

    header_b64: str
    payload_b64: str
    signature_b64: str

    @property
    def signing_input(self) -> str:
        """Signing input exactly as received, never re-encoded."""
        return f"{self.header_b64}.{self.payload_b64}"


def b64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes:
    """Decode an unpadded base64url string."""
    if not isinstance(segment, str) or not _B64URL_RE.match(segment) or len(segment) % 4 == 1:
        raise MalformedTokenError("Invalid base64url segment")
    padded = segment + "=" * (-len(segment) % 4)
    try:
        return base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as exc:
        raise MalformedTokenError("Invalid base64url segment") from exc


def json_bytes(value: Mapping[str, Any]) -> bytes:
    """Serialize a mapping to compact UTF-8 JSON, keeping key order."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def encode_signing_input(header: Mapping[str, Any], payload: Mapping[str, Any]) -> str:
    """Build ``headerB64.payloadB64`` for the given header and payload."""
    return f"{b64url_encode(json_bytes(header))}.{b64url_encode(json_bytes(payload))}"


def assemble(signing_input: str, signature: bytes) -> str:
    """Append the encoded signature to the signing input."""
    return f"{signing_input}.{b64url_encode(signature)}"


def parse(token: str) -> CompactParts:
    """Split a compact token into its three segments without decoding them."""
    parts = str(token).split(".")
    if len(parts) != 3 or not all(parts):
        raise MalformedTokenError(
            "Token must have exactly three non-empty segments",
            details={"segments": len(parts)},
        )
    return CompactParts(*parts)


def _reject_constant(name: str):
    raise MalformedTokenError(f"Segment contains non-JSON constant {name}")


def decode_segment(segment: str) -> Dict[str, Any]:
    """Decode a base64url JSON segment into a dict.

    Only strict JSON is accepted: ``NaN`` and ``Infinity`` are rejected.
    """
    raw = b64url_decode(segment)
    try:
        value = json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedTokenError("Segment is not valid JSON") from exc
    if not isinstance(value, dict):
        raise MalformedTokenError("Segment is not a JSON object")
    return value
