"""msgspec models for the parts of GitHub webhook payloads Shepherd reads.

Only consumed fields are declared; everything else in a payload is ignored
during decoding.
"""

from __future__ import annotations

import datetime as dt
import typing as typ

import msgspec

from .errors import WebhookPayloadError
from .models import WebhookEvent, WebhookEventType


class Account(msgspec.Struct, kw_only=True):
    """A GitHub user or organisation reference."""

    login: str = ""
    name: str | None = None


class Repository(msgspec.Struct, kw_only=True):
    """Repository block shared by every event payload."""

    name: str = ""
    full_name: str = ""
    owner: Account | None = None


class PullRequest(msgspec.Struct, kw_only=True):
    """Pull request fields used for package-update detection."""

    number: int = 0
    title: str = ""
    body: str | None = None


class PullRequestEvent(msgspec.Struct, kw_only=True):
    """``pull_request`` webhook payload."""

    action: str = ""
    pull_request: PullRequest | None = None
    repository: Repository | None = None
    sender: Account | None = None


class Release(msgspec.Struct, kw_only=True):
    """Release fields used to locate release sources."""

    tag_name: str = ""
    name: str | None = None
    target_commitish: str = ""


class ReleaseEvent(msgspec.Struct, kw_only=True):
    """``release`` webhook payload."""

    action: str = ""
    release: Release | None = None
    repository: Repository | None = None
    sender: Account | None = None


class Commit(msgspec.Struct, kw_only=True):
    """Commit reference within a push payload."""

    id: str = ""


class PushEvent(msgspec.Struct, kw_only=True):
    """``push`` webhook payload."""

    ref: str = ""
    before: str | None = None
    after: str | None = None
    created: bool | None = None
    deleted: bool | None = None
    head_commit: Commit | None = None
    pusher: Account | None = None
    repository: Repository | None = None
    sender: Account | None = None


type WebhookPayload = PullRequestEvent | ReleaseEvent | PushEvent

_PAYLOAD_TYPES: dict[WebhookEventType, type[WebhookPayload]] = {
    WebhookEventType.PULL_REQUEST: PullRequestEvent,
    WebhookEventType.RELEASE: ReleaseEvent,
    WebhookEventType.PUSH: PushEvent,
}


@typ.overload
def decode_payload(
    event_type: typ.Literal[WebhookEventType.PULL_REQUEST], body: bytes
) -> PullRequestEvent: ...


@typ.overload
def decode_payload(
    event_type: typ.Literal[WebhookEventType.RELEASE], body: bytes
) -> ReleaseEvent: ...


@typ.overload
def decode_payload(
    event_type: typ.Literal[WebhookEventType.PUSH], body: bytes
) -> PushEvent: ...


@typ.overload
def decode_payload(
    event_type: WebhookEventType, body: bytes
) -> WebhookPayload | None: ...


def decode_payload(event_type: WebhookEventType, body: bytes) -> WebhookPayload | None:
    """Decode *body* into the payload model for *event_type*.

    Bodies of unknown event types are only checked to be valid JSON, and
    ``None`` is returned for them.

    Raises
    ------
    WebhookPayloadError
        If *body* is not valid JSON or does not match the payload model.

    """
    payload_type = _PAYLOAD_TYPES.get(event_type)
    try:
        if payload_type is None:
            msgspec.json.decode(body)
            return None
        return msgspec.json.decode(body, type=payload_type)
    except msgspec.DecodeError as exc:
        raise WebhookPayloadError.undecodable(str(event_type), str(exc)) from exc


def _summary(payload: WebhookPayload | None) -> tuple[str, str, str]:
    match payload:
        case PullRequestEvent() | ReleaseEvent():
            action = payload.action
        case _:
            action = ""
    repository = payload.repository if payload is not None else None
    sender = payload.sender if payload is not None else None
    return (
        action,
        repository.full_name if repository is not None else "",
        sender.login if sender is not None else "",
    )


def build_event(
    event_name: str | None,
    delivery_id: str | None,
    body: bytes,
    *,
    received_at: dt.datetime | None = None,
) -> WebhookEvent:
    """Decode a delivery into a :class:`WebhookEvent`.

    Parameters
    ----------
    event_name
        Value of the ``X-GitHub-Event`` header.
    delivery_id
        Value of the ``X-GitHub-Delivery`` header.
    body
        Raw, already authenticated request body.
    received_at
        Acceptance time; defaults to now (UTC).

    Raises
    ------
    WebhookPayloadError
        If *body* cannot be decoded.

    """
    event_type = WebhookEventType.from_header(event_name)
    payload = decode_payload(event_type, body)
    action, repository, sender = _summary(payload)
    return WebhookEvent(
        delivery_id=delivery_id or "",
        event_type=event_type,
        action=action,
        repository=repository,
        sender=sender,
        raw_payload=body,
        received_at=received_at or dt.datetime.now(dt.UTC),
    )
