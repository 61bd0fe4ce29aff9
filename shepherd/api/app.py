"""Application factory for the Shepherd Falcon ASGI application.

This module provides ``create_app()`` which builds the Falcon ASGI
application with health endpoints and, when webhook dependencies are
supplied, the GitHub App webhook endpoint.

Usage
-----
Create a health-only app::

    app = create_app()

Create a full app with the webhook endpoint::

    from shepherd.api.app import AppDependencies, create_app

    deps = AppDependencies(
        webhook_secret=secret,
        webhook_service=WebhookService(dispatcher),
        dispatcher=dispatcher,
    )
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from shepherd.api.errors import (
    InvalidPayloadError,
    InvalidSignatureError,
    handle_invalid_payload,
    handle_invalid_signature,
)
from shepherd.api.health.resources import HealthResource, ReadyResource
from shepherd.api.middleware import DispatcherLifecycle, RequestLogger

if typ.TYPE_CHECKING:
    from shepherd.api.middleware import SupportsAclose
    from shepherd.dispatch import Dispatcher
    from shepherd.webhooks import WebhookService

__all__ = ["WEBHOOK_ROUTE", "AppDependencies", "create_app"]

WEBHOOK_ROUTE = "/hooks/github/app"


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    webhook_secret
        Shared secret for webhook signature verification.
    webhook_service
        Orchestrates verified webhook events.
    dispatcher
        Dispatcher drained on shutdown.
    closeables
        Clients closed on shutdown after the dispatcher drains.
    drain_timeout_s
        Seconds to wait for in-flight tasks at shutdown.

    """

    webhook_secret: str
    webhook_service: WebhookService
    dispatcher: Dispatcher
    closeables: tuple[SupportsAclose, ...] = ()
    drain_timeout_s: float = 30.0


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies.  When ``None``, only ``/health``
        and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    middleware: list[object] = [RequestLogger()]
    if dependencies is not None:
        middleware.append(
            DispatcherLifecycle(
                dependencies.dispatcher,
                closeables=dependencies.closeables,
                drain_timeout_s=dependencies.drain_timeout_s,
            )
        )

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource())

    if dependencies is not None:
        from shepherd.api.webhooks.resources import GitHubWebhookResource

        app.add_route(
            WEBHOOK_ROUTE,
            GitHubWebhookResource(
                secret=dependencies.webhook_secret,
                service=dependencies.webhook_service,
            ),
        )

    app.add_error_handler(InvalidSignatureError, handle_invalid_signature)
    app.add_error_handler(InvalidPayloadError, handle_invalid_payload)

    return app
