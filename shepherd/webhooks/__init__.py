"""Webhook event model, payload decoding and orchestration.

Public API
----------
WebhookEvent
    Canonical, immutable record of a verified delivery.
build_event
    Decode a raw delivery into a ``WebhookEvent``.
WebhookService
    Logs events and dispatches supported ones to background handlers.
"""

from __future__ import annotations

from .errors import WebhookPayloadError
from .models import WebhookEvent, WebhookEventType
from .payloads import (
    Account,
    Commit,
    PullRequest,
    PullRequestEvent,
    PushEvent,
    Release,
    ReleaseEvent,
    Repository,
    WebhookPayload,
    build_event,
    decode_payload,
)
from .service import (
    PackageUpdateDetector,
    SourceEventProcessor,
    WebhookEventLogType,
    WebhookService,
)

__all__ = [
    "Account",
    "Commit",
    "PackageUpdateDetector",
    "PullRequest",
    "PullRequestEvent",
    "PushEvent",
    "Release",
    "ReleaseEvent",
    "Repository",
    "SourceEventProcessor",
    "WebhookEvent",
    "WebhookEventLogType",
    "WebhookEventType",
    "WebhookPayload",
    "WebhookPayloadError",
    "WebhookService",
    "build_event",
    "decode_payload",
]
