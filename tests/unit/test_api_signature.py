"""Unit tests for webhook HMAC verification.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_signature.py

"""

from __future__ import annotations

import hashlib
import hmac

import pytest

from shepherd.api.errors import InvalidSignatureError
from shepherd.api.webhooks.signature import compute_signature, verify_signature

SECRET = "It's a Secret to Everybody"
BODY = b"Hello, World!"
# Published example from GitHub's webhook validation guide.
KNOWN_SIGNATURE = (
    "sha256=757107ea0eb2509fc211221cce984b8a37570b6d7586c22c46f4379c8b043e17"
)


class TestComputeSignature:
    """Tests for compute_signature."""

    def test_matches_known_vector(self) -> None:
        """The signature matches GitHub's documented example."""
        assert compute_signature(SECRET, BODY) == KNOWN_SIGNATURE

    def test_matches_hmac_sha256(self) -> None:
        """The hex digest is HMAC-SHA256 of the raw body."""
        expected = hmac.new(b"s", b"{}", hashlib.sha256).hexdigest()
        assert compute_signature("s", b"{}") == f"sha256={expected}"


class TestVerifySignature:
    """Tests for verify_signature."""

    def test_prefixed_signature_is_accepted(self) -> None:
        """The canonical sha256= form verifies."""
        verify_signature(SECRET, BODY, KNOWN_SIGNATURE)

    def test_bare_hex_is_accepted(self) -> None:
        """The prefix is optional."""
        verify_signature(SECRET, BODY, KNOWN_SIGNATURE.removeprefix("sha256="))

    @pytest.mark.parametrize("signature", [None, ""])
    def test_missing_signature(self, signature: str | None) -> None:
        """An absent header is reported as missing."""
        with pytest.raises(InvalidSignatureError) as excinfo:
            verify_signature(SECRET, BODY, signature)
        assert excinfo.value.reason == "missing signature"

    @pytest.mark.parametrize(
        ("secret", "body", "signature"),
        [
            ("wrong secret", BODY, KNOWN_SIGNATURE),
            (SECRET, BODY + b" ", KNOWN_SIGNATURE),
            (SECRET, BODY, "sha256=deadbeef"),
            (SECRET, BODY, "sha1=" + KNOWN_SIGNATURE.removeprefix("sha256=")),
        ],
    )
    def test_mismatch(self, secret: str, body: bytes, signature: str) -> None:
        """Any change to secret, body or digest fails verification."""
        with pytest.raises(InvalidSignatureError) as excinfo:
            verify_signature(secret, body, signature)
        assert excinfo.value.reason == "invalid signature"
