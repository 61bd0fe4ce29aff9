"""Domain exceptions and Falcon error handlers for the API layer.

Usage
-----
Register error handlers on the Falcon app::

    from shepherd.api.errors import (
        InvalidPayloadError,
        InvalidSignatureError,
        handle_invalid_payload,
        handle_invalid_signature,
    )

    app.add_error_handler(InvalidSignatureError, handle_invalid_signature)
    app.add_error_handler(InvalidPayloadError, handle_invalid_payload)

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = [
    "InvalidPayloadError",
    "InvalidSignatureError",
    "handle_invalid_payload",
    "handle_invalid_signature",
]


class InvalidSignatureError(Exception):
    """Raised when a webhook delivery fails HMAC verification.

    Attributes
    ----------
    reason
        Human-readable description of why verification failed.

    """

    def __init__(self, reason: str) -> None:
        """Initialize with the verification failure reason."""
        self.reason = reason
        super().__init__(reason)

    @classmethod
    def missing(cls) -> InvalidSignatureError:
        """Return an error for a delivery without a signature header."""
        return cls("missing signature")

    @classmethod
    def mismatch(cls) -> InvalidSignatureError:
        """Return an error for a signature that does not match the body."""
        return cls("invalid signature")


class InvalidPayloadError(Exception):
    """Raised for webhook bodies that cannot be decoded; maps to HTTP 400.

    Attributes
    ----------
    reason
        Human-readable description of the decoding failure.

    """

    def __init__(self, reason: str) -> None:
        """Initialize with the decoding failure reason."""
        self.reason = reason
        super().__init__(reason)


async def handle_invalid_signature(
    _req: Request,
    resp: Response,
    ex: InvalidSignatureError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidSignatureError`` to an HTTP 401 JSON response."""
    resp.status = falcon.HTTP_401
    resp.media = {
        "title": "Invalid signature",
        "description": ex.reason,
    }


async def handle_invalid_payload(
    _req: Request,
    resp: Response,
    ex: InvalidPayloadError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidPayloadError`` to an HTTP 400 JSON response.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The decoding exception.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_400
    resp.media = {
        "title": "Invalid payload",
        "description": ex.reason,
    }
