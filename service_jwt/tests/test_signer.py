"""
Unit tests for ES256 keys and token signing.
"""

import pytest

from service_jwt.app.errors import SigningError
from service_jwt.app.token.codec import b64url_decode, parse
from service_jwt.app.token.keys import es256_sign, es256_verify, generate_keyset, public_jwk
from service_jwt.app.token.model import Token
from service_jwt.app.token.signer import sign
from shared.metrics import MetricsCollector

NOW = 1_700_000_000


class TestKeys:
    """Test cases for key generation and primitives."""

    def test_generate_keyset_shape(self, keyset):
        """Keys are P-256 EC JWKs tagged with the kid."""
        assert keyset.private_jwk["kty"] == "EC"
        assert keyset.private_jwk["crv"] == "P-256"
        assert keyset.private_jwk["kid"] == "test-key"
        assert "d" in keyset.private_jwk
        assert "d" not in keyset.public_jwk
        assert keyset.public_jwk["x"] == keyset.private_jwk["x"]

    def test_generate_keyset_without_kid(self):
        """kid is optional."""
        assert "kid" not in generate_keyset().private_jwk

    def test_public_jwk_strips_private_member(self, keyset):
        """public_jwk drops d and keeps everything else."""
        public = public_jwk(keyset.private_jwk)
        assert public == keyset.public_jwk

    def test_sign_and_verify(self, keyset):
        """Signatures are raw 64-byte r||s and verify with the public key."""
        signature = es256_sign(keyset.private_jwk, b"payload")

        assert len(signature) == 64
        assert es256_verify(keyset.public_jwk, b"payload", signature) is True
        assert es256_verify(keyset.public_jwk, b"other", signature) is False

    def test_verify_with_other_key(self, keyset):
        """A signature does not verify under an unrelated key."""
        signature = es256_sign(keyset.private_jwk, b"payload")
        other = generate_keyset("other-key")

        assert es256_verify(other.public_jwk, b"payload", signature) is False


class TestSign:
    """Test cases for sign."""

    @pytest.mark.asyncio
    async def test_sign_produces_compact_token(self, keyset):
        """Signed token has three segments and a valid signature."""
        token = Token.create("test-key", "example.com", "user-123", 60, now=NOW)

        compact = await sign(keyset.private_jwk, token)
        parts = parse(compact)

        assert compact.count(".") == 2
        assert es256_verify(
            keyset.public_jwk,
            parts.signing_input.encode("ascii"),
            b64url_decode(parts.signature_b64),
        )

    @pytest.mark.asyncio
    async def test_signing_input_is_deterministic(self, keyset):
        """Same content gives the same signing input even if signatures differ."""
        first = await sign(keyset.private_jwk, Token.create("test-key", "example.com", "u1", 60, now=NOW))
        second = await sign(keyset.private_jwk, Token.create("test-key", "example.com", "u1", 60, now=NOW))

        assert parse(first).signing_input == parse(second).signing_input

    @pytest.mark.asyncio
    async def test_sign_with_public_key_raises(self, keyset):
        """Signing failures propagate as SigningError."""
        token = Token.create("test-key", "example.com", "u1", 60, now=NOW)

        with pytest.raises(SigningError) as exc_info:
            await sign(keyset.public_jwk, token)

        assert exc_info.value.code == "SIGNING_ERROR"
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_sign_with_malformed_key_raises(self):
        """A key that is not an EC JWK is rejected."""
        token = Token.create("test-key", "example.com", "u1", 60, now=NOW)

        with pytest.raises(SigningError):
            await sign({"kty": "oct", "k": "c2VjcmV0"}, token)

    @pytest.mark.asyncio
    async def test_sign_records_metric(self, keyset):
        """Signed tokens are counted."""
        metrics = MetricsCollector("jwt")
        token = Token.create("test-key", "example.com", "u1", 60, now=NOW)

        await sign(keyset.private_jwk, token, metrics=metrics)

        assert metrics.registry.get_sample_value("tokens_signed_total") == 1.0
