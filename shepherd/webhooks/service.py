"""Route verified webhook events to their background handlers.

The service does only cheap work on the request path: it logs the event and
hands anything slow to the :class:`~shepherd.dispatch.Dispatcher`.  Failures
of the dispatched handlers are reported by the dispatcher and never reach
the HTTP response.
"""

from __future__ import annotations

import enum
import typing as typ

from shepherd.context import current_logger
from shepherd.logging import LogLevel, log_event

from .models import WebhookEvent, WebhookEventType
from .payloads import PushEvent, ReleaseEvent, decode_payload

if typ.TYPE_CHECKING:
    from shepherd.dispatch import Dispatcher, TaskContext

__all__ = [
    "PackageUpdateDetector",
    "SourceEventProcessor",
    "WebhookEventLogType",
    "WebhookService",
]


class WebhookEventLogType(enum.StrEnum):
    """Structured log event types for webhook orchestration."""

    RECEIVED = "webhook.event.received"
    UNSUPPORTED = "webhook.event.unsupported"
    DISPATCHED = "webhook.event.dispatched"
    NO_HANDLER = "webhook.event.no_handler"


class PackageUpdateDetector(typ.Protocol):
    """Handler for newly opened pull requests."""

    async def detect_package_update(self, event: WebhookEvent) -> None:
        """Classify the pull request behind *event* and act on the verdict."""
        ...


class SourceEventProcessor(typ.Protocol):
    """Handler for release and push events."""

    async def process_event(
        self,
        event_type: WebhookEventType,
        payload: ReleaseEvent | PushEvent,
    ) -> None:
        """Download and extract the sources referenced by *payload*."""
        ...


class WebhookService:
    """Log webhook events and dispatch supported ones.

    Parameters
    ----------
    dispatcher
        Launches handlers detached from the request.
    detector
        Optional package-update detector for ``pull_request`` events.
    source_processor
        Optional processor for ``release`` and ``push`` events.

    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        detector: PackageUpdateDetector | None = None,
        source_processor: SourceEventProcessor | None = None,
    ) -> None:
        """Initialise the service with its dispatcher and handlers."""
        self._dispatcher = dispatcher
        self._detector = detector
        self._source_processor = source_processor

    async def process_event(self, event: WebhookEvent) -> None:
        """Log *event* and dispatch its handler when one applies.

        Raises
        ------
        WebhookPayloadError
            If a release or push body cannot be decoded for its handler.

        """
        logger = current_logger()
        supported = event.is_supported()
        log_event(
            logger,
            LogLevel.INFO,
            WebhookEventLogType.RECEIVED,
            delivery_id=event.delivery_id,
            type=event.event_type,
            action=event.action,
            repository=event.repository,
            sender=event.sender,
            supported=supported,
        )

        if not supported:
            log_event(
                logger,
                LogLevel.WARNING,
                WebhookEventLogType.UNSUPPORTED,
                type=event.event_type,
                action=event.action,
            )
            return

        match event.event_type:
            case WebhookEventType.PULL_REQUEST:
                self._dispatch_detection(event)
            case WebhookEventType.RELEASE | WebhookEventType.PUSH:
                self._dispatch_sources(event)

    def _dispatch_detection(self, event: WebhookEvent) -> None:
        detector = self._detector
        if detector is None:
            self._log_no_handler(event)
            return

        async def detect(_ctx: TaskContext) -> None:
            await detector.detect_package_update(event)

        self._dispatcher.dispatch(detect, name="detect-package-update")
        self._log_dispatched(event, "detect-package-update")

    def _dispatch_sources(self, event: WebhookEvent) -> None:
        processor = self._source_processor
        if processor is None:
            self._log_no_handler(event)
            return

        payload = decode_payload(event.event_type, event.raw_payload)
        if not isinstance(payload, ReleaseEvent | PushEvent):
            self._log_no_handler(event)
            return
        event_type = event.event_type
        task_name = f"process-{event_type}"

        async def process(_ctx: TaskContext) -> None:
            await processor.process_event(event_type, payload)

        self._dispatcher.dispatch(process, name=task_name)
        self._log_dispatched(event, task_name)

    def _log_dispatched(self, event: WebhookEvent, task_name: str) -> None:
        log_event(
            current_logger(),
            LogLevel.INFO,
            WebhookEventLogType.DISPATCHED,
            delivery_id=event.delivery_id,
            type=event.event_type,
            task=task_name,
        )

    def _log_no_handler(self, event: WebhookEvent) -> None:
        log_event(
            current_logger(),
            LogLevel.INFO,
            WebhookEventLogType.NO_HANDLER,
            delivery_id=event.delivery_id,
            type=event.event_type,
        )
