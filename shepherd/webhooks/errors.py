"""Errors raised while interpreting webhook deliveries."""

from __future__ import annotations

from shepherd.errors import ShepherdError


class WebhookPayloadError(ShepherdError):
    """Raised when a webhook body cannot be decoded for its event type."""

    def __init__(self, message: str, *, event_type: str) -> None:
        """Initialise with a description and the declared event type."""
        self.event_type = event_type
        super().__init__(message)

    @classmethod
    def undecodable(cls, event_type: str, detail: str) -> WebhookPayloadError:
        """Return an error for a body that is not a valid payload."""
        return cls(
            f"Invalid {event_type} payload: {detail}", event_type=event_type
        )
