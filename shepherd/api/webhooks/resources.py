"""GitHub App webhook resource.

Handles ``POST /hooks/github/app``: verifies the delivery signature,
decodes the event, binds the delivery id into the request context and
hands the event to :class:`~shepherd.webhooks.WebhookService`.  Slow work
is dispatched, so the response never waits for it.

Usage
-----
Register the resource on the Falcon app::

    app.add_route(
        "/hooks/github/app",
        GitHubWebhookResource(secret=secret, service=service),
    )

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from shepherd.api.errors import InvalidPayloadError, InvalidSignatureError
from shepherd.api.webhooks.signature import SIGNATURE_HEADER, verify_signature
from shepherd.context import bind_request
from shepherd.logging import get_logger, log_warning
from shepherd.webhooks import WebhookPayloadError, build_event

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from shepherd.webhooks import WebhookService

__all__ = ["DELIVERY_HEADER", "EVENT_HEADER", "GitHubWebhookResource"]

logger = get_logger(__name__)

EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"


class GitHubWebhookResource:
    """Receive GitHub App webhook deliveries.

    Parameters
    ----------
    secret
        Shared webhook secret used for HMAC verification.
    service
        Orchestrates logging and dispatch of verified events.

    """

    def __init__(self, *, secret: str, service: WebhookService) -> None:
        """Initialize the resource with its secret and service."""
        self._secret = secret
        self._service = service

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /hooks/github/app requests.

        Raises
        ------
        InvalidSignatureError
            If the signature header is missing or wrong (HTTP 401).
        InvalidPayloadError
            If the body cannot be decoded (HTTP 400).

        """
        body = await req.stream.read()
        delivery_id = req.get_header(DELIVERY_HEADER)

        try:
            verify_signature(self._secret, body, req.get_header(SIGNATURE_HEADER))
        except InvalidSignatureError:
            log_warning(
                logger, "Invalid webhook signature delivery_id=%s", delivery_id
            )
            raise

        try:
            event = build_event(req.get_header(EVENT_HEADER), delivery_id, body)
        except WebhookPayloadError as exc:
            log_warning(
                logger,
                "Failed to parse webhook payload delivery_id=%s: %s",
                delivery_id,
                exc,
            )
            raise InvalidPayloadError(str(exc)) from exc

        with bind_request(logger, delivery_id=event.delivery_id or None):
            try:
                await self._service.process_event(event)
            except WebhookPayloadError as exc:
                raise InvalidPayloadError(str(exc)) from exc

        resp.media = {"status": "success"}
        resp.status = HTTPStatus.OK
