"""Canonical representation of a received GitHub webhook delivery."""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt


class WebhookEventType(enum.StrEnum):
    """GitHub event types Shepherd recognises."""

    PULL_REQUEST = "pull_request"
    RELEASE = "release"
    PUSH = "push"
    UNKNOWN = "unknown"

    @classmethod
    def from_header(cls, value: str | None) -> WebhookEventType:
        """Map an ``X-GitHub-Event`` header value to an event type."""
        try:
            return cls((value or "").strip())
        except ValueError:
            return cls.UNKNOWN


_SUPPORTED_ACTIONS: dict[WebhookEventType, str | None] = {
    WebhookEventType.PULL_REQUEST: "opened",
    WebhookEventType.RELEASE: "released",
    # Push deliveries carry no action.
    WebhookEventType.PUSH: None,
}


@dataclasses.dataclass(frozen=True, slots=True)
class WebhookEvent:
    """A verified webhook delivery.

    Attributes
    ----------
    delivery_id
        Value of the ``X-GitHub-Delivery`` header.
    event_type
        Event type derived from the ``X-GitHub-Event`` header.
    action
        Payload ``action`` field; empty when the event has none.
    repository
        Repository full name (``owner/name``); empty when absent.
    sender
        Login of the user who triggered the event; empty when absent.
    raw_payload
        Request body exactly as received.
    received_at
        Time the delivery was accepted.

    """

    delivery_id: str
    event_type: WebhookEventType
    action: str
    repository: str
    sender: str
    raw_payload: bytes = dataclasses.field(repr=False)
    received_at: dt.datetime

    def is_supported(self) -> bool:
        """Return whether Shepherd acts on this event type and action."""
        if self.event_type not in _SUPPORTED_ACTIONS:
            return False
        expected = _SUPPORTED_ACTIONS[self.event_type]
        return expected is None or self.action == expected
