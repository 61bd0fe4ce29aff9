"""Unit tests for the GitHub App webhook endpoint.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_webhook_resource.py

"""

from __future__ import annotations

import asyncio
import typing as typ

import falcon
import falcon.testing
import msgspec
import pytest

from shepherd.api.app import WEBHOOK_ROUTE, AppDependencies, create_app
from shepherd.api.webhooks.signature import compute_signature
from shepherd.context import current_delivery_id
from shepherd.dispatch import DispatchEventType, Dispatcher
from shepherd.webhooks import WebhookEventType, WebhookService

if typ.TYPE_CHECKING:
    from shepherd.webhooks import WebhookEvent
    from tests.helpers.log_capture import RecordingLogger

SECRET = "webhook-secret"


class _RecordingService:
    """Stand-in for WebhookService that records events and delivery ids."""

    def __init__(self) -> None:
        self.events: list[WebhookEvent] = []
        self.delivery_ids: list[str | None] = []

    async def process_event(self, event: WebhookEvent) -> None:
        self.events.append(event)
        self.delivery_ids.append(current_delivery_id())


def _headers(
    body: bytes,
    *,
    event: str = "push",
    delivery: str = "72d3162e-cc78-11e3-81ab-4c9367dc0958",
    secret: str = SECRET,
) -> dict[str, str]:
    return {
        "X-GitHub-Event": event,
        "X-GitHub-Delivery": delivery,
        "X-Hub-Signature-256": compute_signature(secret, body),
        "Content-Type": "application/json",
    }


@pytest.fixture
def service() -> _RecordingService:
    """Return a recording service."""
    return _RecordingService()


@pytest.fixture
def client(service: _RecordingService) -> falcon.testing.TestClient:
    """Build a test client with the webhook route registered."""
    deps = AppDependencies(
        webhook_secret=SECRET,
        webhook_service=typ.cast("WebhookService", service),
        dispatcher=Dispatcher(),
    )
    return falcon.testing.TestClient(create_app(deps))


class TestSignature:
    """Authentication failures return 401 before any decoding."""

    def test_missing_signature(
        self, client: falcon.testing.TestClient, service: _RecordingService
    ) -> None:
        """A delivery without X-Hub-Signature-256 is rejected."""
        body = b'{"ref": "refs/heads/main"}'
        headers = _headers(body)
        del headers["X-Hub-Signature-256"]

        result = client.simulate_post(WEBHOOK_ROUTE, body=body, headers=headers)

        assert result.status == falcon.HTTP_401, "expected HTTP 401"
        assert result.json == {
            "title": "Invalid signature",
            "description": "missing signature",
        }
        assert service.events == [], "unauthenticated events must not be handled"

    def test_wrong_secret(
        self, client: falcon.testing.TestClient, service: _RecordingService
    ) -> None:
        """A signature made with another secret is rejected."""
        body = b'{"ref": "refs/heads/main"}'

        result = client.simulate_post(
            WEBHOOK_ROUTE, body=body, headers=_headers(body, secret="other")
        )

        assert result.status == falcon.HTTP_401, "expected HTTP 401"
        assert result.json["description"] == "invalid signature"
        assert service.events == []

    def test_signature_checked_before_parsing(
        self, client: falcon.testing.TestClient
    ) -> None:
        """Garbage with a bad signature is 401, not 400."""
        headers = _headers(b"other body")

        result = client.simulate_post(WEBHOOK_ROUTE, body=b"{{{", headers=headers)

        assert result.status == falcon.HTTP_401, "signature failures win"


class TestPayload:
    """Authenticated bodies are decoded and handed to the service."""

    def test_invalid_json_is_400(
        self, client: falcon.testing.TestClient, service: _RecordingService
    ) -> None:
        """A correctly signed body that is not JSON is rejected."""
        body = b"not json"

        result = client.simulate_post(WEBHOOK_ROUTE, body=body, headers=_headers(body))

        assert result.status == falcon.HTTP_400, "expected HTTP 400"
        assert result.json["title"] == "Invalid payload"
        assert result.json["description"].startswith("Invalid push payload")
        assert service.events == []

    def test_valid_push_is_accepted(
        self, client: falcon.testing.TestClient, service: _RecordingService
    ) -> None:
        """A valid delivery returns success and reaches the service."""
        body = msgspec.json.encode(
            {"ref": "refs/heads/main", "repository": {"full_name": "acme/widgets"}}
        )

        result = client.simulate_post(WEBHOOK_ROUTE, body=body, headers=_headers(body))

        assert result.status == falcon.HTTP_200, "expected HTTP 200"
        assert result.json == {"status": "success"}
        assert len(service.events) == 1
        event = service.events[0]
        assert event.event_type is WebhookEventType.PUSH
        assert event.repository == "acme/widgets"
        assert event.raw_payload == body, "the raw body must reach the service"

    def test_delivery_id_is_bound_for_service(
        self, client: falcon.testing.TestClient, service: _RecordingService
    ) -> None:
        """The delivery header is visible through the request context."""
        body = b"{}"

        client.simulate_post(
            WEBHOOK_ROUTE, body=body, headers=_headers(body, delivery="abc-123")
        )

        assert service.delivery_ids == ["abc-123"]

    def test_unknown_event_is_accepted(
        self, client: falcon.testing.TestClient, service: _RecordingService
    ) -> None:
        """Unrecognised event types still return success."""
        body = b'{"zen": "Keep it logically awesome."}'

        result = client.simulate_post(
            WEBHOOK_ROUTE, body=body, headers=_headers(body, event="ping")
        )

        assert result.status == falcon.HTTP_200, "expected HTTP 200"
        assert service.events[0].event_type is WebhookEventType.UNKNOWN

    def test_get_is_not_allowed(self, client: falcon.testing.TestClient) -> None:
        """Only POST is routed."""
        result = client.simulate_get(WEBHOOK_ROUTE)
        assert result.status == falcon.HTTP_405, "expected HTTP 405"


class _BlockingProcessor:
    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.done = asyncio.Event()

    async def process_event(self, event_type: object, payload: object) -> None:
        del event_type, payload
        await self.release.wait()
        self.done.set()


@pytest.mark.asyncio
async def test_response_does_not_wait_for_dispatched_work(
    monkeypatch: pytest.MonkeyPatch, recording_logger: RecordingLogger
) -> None:
    """The 200 is sent while the release handler is still blocked."""
    monkeypatch.setattr(
        "shepherd.api.webhooks.resources.logger", recording_logger
    )
    processor = _BlockingProcessor()
    dispatcher = Dispatcher()
    service = WebhookService(dispatcher, source_processor=processor)
    app = create_app(
        AppDependencies(
            webhook_secret=SECRET, webhook_service=service, dispatcher=dispatcher
        )
    )
    body = msgspec.json.encode(
        {"action": "released", "release": {"tag_name": "v1.0.0"}}
    )

    async with falcon.testing.ASGIConductor(app) as conductor:
        result = await conductor.simulate_post(
            WEBHOOK_ROUTE,
            body=body,
            headers=_headers(body, event="release", delivery="d-async"),
        )

        assert result.status == falcon.HTTP_200, "expected HTTP 200"
        assert not processor.done.is_set(), "work must still be pending"
        assert dispatcher.in_flight == 1

        processor.release.set()
        await dispatcher.drain()

    assert processor.done.is_set()
    completed = recording_logger.tagged(DispatchEventType.TASK_COMPLETED)
    assert len(completed) == 1
    assert "task=process-release delivery_id=d-async" in completed[0].message
