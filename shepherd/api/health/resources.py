"""Health probe resources for liveness and readiness checks.

Usage
-----
Register health endpoints on the Falcon app::

    from shepherd.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource())

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from shepherd import __version__

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["SERVICE_NAME", "HealthResource", "ReadyResource"]

SERVICE_NAME = "shepherd"


class HealthResource:
    """Liveness probe reporting the service name and version.

    Parameters
    ----------
    version
        Version string to report; defaults to the installed package version.

    """

    def __init__(self, version: str = __version__) -> None:
        """Initialize with the version to report."""
        self._version = version

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with liveness status.

        """
        resp.media = {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": self._version,
        }
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource returning ``{"status": "ready"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        resp.media = {"status": "ready"}
        resp.status = HTTPStatus.OK
