"""
Unit tests for token construction.
"""

from unittest.mock import patch

import pytest

from service_jwt.app.token.codec import json_bytes
from service_jwt.app.token.model import Token, normalize_expiry

NOW = 1_700_000_000


class TestTokenCreate:
    """Test cases for Token.create."""

    def test_header_is_fixed(self):
        """Header carries the fixed alg/typ and the given kid."""
        token = Token.create("k1", "example.com", "u1", 60, now=NOW)

        assert token.header_dict() == {"alg": "ES256", "typ": "JWT", "kid": "k1"}
        assert list(token.header_dict()) == ["alg", "typ", "kid"]

    def test_payload_fields(self):
        """Payload has iss, sub, iat and the normalized exp, in that order."""
        token = Token.create("k1", "example.com", "u1", 60, now=NOW)

        assert token.payload_dict() == {"iss": "example.com", "sub": "u1", "iat": NOW, "exp": NOW + 60}
        assert list(token.payload_dict()) == ["iss", "sub", "iat", "exp"]

    def test_iat_is_floored_wall_clock(self):
        """iat is whole seconds of the current time."""
        with patch("service_jwt.app.token.model.time.time", return_value=NOW + 0.9):
            token = Token.create("k1", "example.com", "u1", 60)

        assert token.payload.iat == NOW
        assert token.payload.exp == NOW + 60

    def test_no_validation_of_issuer_or_subject(self):
        """Odd issuers and subjects are accepted as-is."""
        token = Token.create("k1", "https://not-a-bare-domain/", "", 60, now=NOW)

        assert token.payload.iss == "https://not-a-bare-domain/"
        assert token.payload.sub == ""


class TestNormalizeExpiry:
    """Test cases for expiry normalization."""

    def test_relative_seconds(self):
        """Small values are seconds from now."""
        assert normalize_expiry(3600, NOW) == NOW + 3600

    def test_relative_seconds_are_floored(self):
        """Fractional offsets are floored."""
        assert normalize_expiry(60.9, NOW) == NOW + 60

    def test_negative_relative_expiry_clamps_to_issued_at(self):
        """A negative offset gives exp == iat, not a time in the past."""
        assert normalize_expiry(-10, NOW) == NOW

        token = Token.create("k1", "example.com", "u1", -10, now=NOW)
        assert token.payload.exp == token.payload.iat

    def test_absolute_milliseconds(self):
        """Values at or above 10**12 are epoch milliseconds."""
        assert normalize_expiry(1_800_000_000_500, NOW) == 1_800_000_000

    @pytest.mark.parametrize(
        "exp,expected",
        [
            (10**12, 10**9),
            (10**12 - 1, NOW + 10**12 - 1),
        ],
    )
    def test_threshold_boundary(self, exp, expected):
        """The threshold itself is absolute; just below it is relative."""
        assert normalize_expiry(exp, NOW) == expected

    @pytest.mark.parametrize("exp", [float("nan"), float("inf")])
    def test_non_finite_expiry_has_no_exp(self, exp):
        """NaN and infinity construct a token whose exp is null."""
        assert normalize_expiry(exp, NOW) is None

        token = Token.create("k1", "example.com", "u1", exp, now=NOW)
        assert token.payload.exp is None
        assert token.payload_dict()["exp"] is None
        assert json_bytes(token.payload_dict()).endswith(b'"exp":null}')

    def test_negative_infinity_clamps_to_issued_at(self):
        """Negative infinity is a negative offset like any other."""
        assert normalize_expiry(float("-inf"), NOW) == NOW
