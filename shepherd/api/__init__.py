"""Shepherd HTTP API layer.

This package provides the Falcon ASGI application serving the health probes
and the GitHub App webhook endpoint.

Usage
-----
Create and run the application::

    from shepherd.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # full mode with the webhook endpoint

Public API
----------
create_app
    Application factory for the Falcon ASGI app.
"""

from shepherd.api.app import create_app

__all__ = ["create_app"]
