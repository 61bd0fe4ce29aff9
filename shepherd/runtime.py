"""Shepherd runtime entrypoint.

This module provides the ASGI application factory used by Granian.  It
reads the environment, builds the dispatcher and the downstream handlers,
and delegates application construction to :func:`shepherd.api.app.create_app`.

Configuration is driven by environment variables:

- ``SHEPHERD_HOST``: Bind address (default ``0.0.0.0``)
- ``SHEPHERD_PORT``: Listen port (default ``8080``)
- ``SHEPHERD_LOG_LEVEL``: Log level (default ``INFO``)
- ``SHEPHERD_GITHUB_WEBHOOK_SECRET``: Required webhook secret
- ``SHEPHERD_GITHUB_TOKEN``: Optional; enables release, push and pull
  request handlers
- ``SHEPHERD_CLASSIFIER_BACKEND``: Optional; enables package-update
  detection (``openai`` or ``mock``)

Dispatcher and archive settings are documented on
:meth:`shepherd.dispatch.DispatchConfig.from_env` and
:meth:`shepherd.archive.ExtractionLimits.from_env`.

Run the service directly with ``python -m shepherd.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from shepherd.archive import ExtractionLimits
from shepherd.dispatch import DispatchConfig, Dispatcher
from shepherd.github import GitHubConfigError
from shepherd.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)
from shepherd.webhooks import WebhookService

if typ.TYPE_CHECKING:
    import falcon.asgi

    from shepherd.api.middleware import SupportsAclose
    from shepherd.webhooks import PackageUpdateDetector, SourceEventProcessor

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid SHEPHERD_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def _webhook_secret_from_env() -> str:
    secret = os.environ.get("SHEPHERD_GITHUB_WEBHOOK_SECRET", "")
    if not secret.strip():
        raise GitHubConfigError.missing_webhook_secret()
    return secret


class _Handlers(typ.NamedTuple):
    detector: PackageUpdateDetector | None
    source_processor: SourceEventProcessor | None
    closeables: tuple[SupportsAclose, ...]


def _build_handlers(limits: ExtractionLimits) -> _Handlers:
    """Build downstream handlers for whichever integrations are configured."""
    if not os.environ.get("SHEPHERD_GITHUB_TOKEN", "").strip():
        log_warning(
            logger,
            "SHEPHERD_GITHUB_TOKEN is not set; webhook events will be logged only",
        )
        return _Handlers(None, None, ())

    from shepherd.github import GitHubRESTClient, GitHubRESTConfig
    from shepherd.sources import EventProcessor, SourceCodeService

    github = GitHubRESTClient(GitHubRESTConfig.from_env())
    source_processor = EventProcessor(SourceCodeService(github, limits=limits))
    closeables: list[SupportsAclose] = [github]

    detector: PackageUpdateDetector | None = None
    if os.environ.get("SHEPHERD_CLASSIFIER_BACKEND") is None:
        log_info(
            logger,
            "SHEPHERD_CLASSIFIER_BACKEND is not set; package detection disabled",
        )
    else:
        from shepherd.detection import GoProxyClient, PackageDetector, create_classifier

        classifier = create_classifier()
        go_proxy = GoProxyClient()
        detector = PackageDetector(classifier, github, go_proxy, limits=limits)
        closeables.append(go_proxy)
        if hasattr(classifier, "aclose"):
            closeables.append(typ.cast("SupportsAclose", classifier))

    return _Handlers(detector, source_processor, tuple(closeables))


def create_app() -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application from the environment.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    Raises
    ------
    ShepherdError
        If any configuration value is missing or invalid.

    """
    from shepherd.api.app import AppDependencies
    from shepherd.api.app import create_app as _create_api_app

    secret = _webhook_secret_from_env()
    dispatcher = Dispatcher(DispatchConfig.from_env())
    handlers = _build_handlers(ExtractionLimits.from_env())

    service = WebhookService(
        dispatcher,
        detector=handlers.detector,
        source_processor=handlers.source_processor,
    )
    deps = AppDependencies(
        webhook_secret=secret,
        webhook_service=service,
        dispatcher=dispatcher,
        closeables=handlers.closeables,
    )
    return _create_api_app(deps)


def main() -> None:
    """Start the Shepherd server using Granian.

    Reads ``SHEPHERD_HOST``, ``SHEPHERD_PORT``, and ``SHEPHERD_LOG_LEVEL``
    from the environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("SHEPHERD_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port_str = os.environ.get("SHEPHERD_PORT", "8080")
    port = _parse_port(port_str)
    log_level_str = os.environ.get("SHEPHERD_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid SHEPHERD_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting Shepherd on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "shepherd.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
