"""Falcon ASGI middleware for request logging and graceful shutdown.

Usage
-----
Register the middleware when creating the Falcon app::

    from shepherd.api.middleware import DispatcherLifecycle, RequestLogger

    app = falcon.asgi.App(
        middleware=[RequestLogger(), DispatcherLifecycle(dispatcher)]
    )

"""

from __future__ import annotations

import time
import typing as typ

from shepherd.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from falcon.asgi import Request, Response

    from shepherd.dispatch import Dispatcher

__all__ = ["DispatcherLifecycle", "RequestLogger", "SupportsAclose"]

logger = get_logger(__name__)

_DEFAULT_DRAIN_TIMEOUT_S = 30.0


class SupportsAclose(typ.Protocol):
    """An owner of async resources released at shutdown."""

    async def aclose(self) -> None:
        """Release the resources."""
        ...


class RequestLogger:
    """Log one line per HTTP request with its status and duration."""

    async def process_request(self, req: Request, _resp: Response) -> None:
        """Record the request start time on ``req.context``."""
        req.context.started_at = time.monotonic()

    async def process_response(
        self,
        req: Request,
        resp: Response,
        _resource: object,
        req_succeeded: bool,  # noqa: FBT001 - Falcon middleware signature requires positional bool
    ) -> None:
        """Emit the access log line.

        Parameters
        ----------
        req
            Falcon request carrying the start time.
        resp
            Falcon response whose status is logged.
        _resource
            The matched Falcon resource (unused).
        req_succeeded
            ``True`` when no unhandled exception occurred.

        """
        started_at = getattr(req.context, "started_at", None)
        duration_ms = (
            (time.monotonic() - started_at) * 1000 if started_at is not None else 0.0
        )
        log_info(
            logger,
            "HTTP request method=%s path=%s status=%s duration_ms=%.1f "
            "succeeded=%s",
            req.method,
            req.path,
            resp.status,
            duration_ms,
            req_succeeded,
        )


class DispatcherLifecycle:
    """Drain dispatched tasks and close clients on ASGI lifespan shutdown.

    Parameters
    ----------
    dispatcher
        Dispatcher whose in-flight tasks are drained.
    closeables
        Clients closed after the drain, in order.
    drain_timeout_s
        Seconds to wait for in-flight tasks before cancelling them.

    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        closeables: cabc.Sequence[SupportsAclose] = (),
        drain_timeout_s: float = _DEFAULT_DRAIN_TIMEOUT_S,
    ) -> None:
        """Initialize the middleware with the dispatcher and clients."""
        self._dispatcher = dispatcher
        self._closeables = tuple(closeables)
        self._drain_timeout_s = drain_timeout_s

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Drain the dispatcher, then close every client."""
        await self._dispatcher.drain(self._drain_timeout_s)
        for closeable in self._closeables:
            await closeable.aclose()
        log_info(logger, "Shutdown complete")
