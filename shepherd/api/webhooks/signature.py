"""HMAC-SHA256 verification of GitHub webhook deliveries."""

from __future__ import annotations

import hashlib
import hmac

from shepherd.api.errors import InvalidSignatureError

__all__ = ["SIGNATURE_HEADER", "compute_signature", "verify_signature"]

SIGNATURE_HEADER = "X-Hub-Signature-256"
_PREFIX = "sha256="


def compute_signature(secret: str, body: bytes) -> str:
    """Return the ``sha256=<hex>`` signature GitHub sends for *body*."""
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"{_PREFIX}{digest}"


def verify_signature(secret: str, body: bytes, signature: str | None) -> None:
    """Check *signature* against the HMAC of the raw *body*.

    The ``sha256=`` prefix is optional; the comparison is constant time.

    Raises
    ------
    InvalidSignatureError
        If the signature is missing or does not match.

    """
    if not signature:
        raise InvalidSignatureError.missing()

    provided = signature.removeprefix(_PREFIX)
    expected = compute_signature(secret, body).removeprefix(_PREFIX)
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        raise InvalidSignatureError.mismatch()
