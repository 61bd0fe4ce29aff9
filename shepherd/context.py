"""Request-scoped context values shared with logging and background tasks.

Values live in :mod:`contextvars` so they follow the request through awaits
without being threaded through every call.  Only the values defined here are
eligible to be carried into dispatched background tasks; see
:mod:`shepherd.dispatch`.

Usage
-----
Bind values for the duration of a request::

    from shepherd.context import bind_request, current_logger

    with bind_request(logger, delivery_id="72d3162e"):
        log_info(current_logger(), "handling delivery")

"""

from __future__ import annotations

import contextlib
import contextvars
import typing as typ

from shepherd.logging import get_logger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from shepherd.logging import SupportsLog

__all__ = [
    "bind_request",
    "current_delivery_id",
    "current_logger",
    "set_delivery_id",
    "set_logger",
]

_LOGGER: contextvars.ContextVar[SupportsLog] = contextvars.ContextVar(
    "shepherd_logger"
)
_DELIVERY_ID: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "shepherd_delivery_id", default=None
)

_DEFAULT_LOGGER_NAME = "shepherd"


def current_logger() -> SupportsLog:
    """Return the logger bound to the current context.

    Falls back to the package logger when nothing has been bound.
    """
    try:
        return _LOGGER.get()
    except LookupError:
        return get_logger(_DEFAULT_LOGGER_NAME)


def current_delivery_id() -> str | None:
    """Return the webhook delivery id bound to the current context."""
    return _DELIVERY_ID.get()


def set_logger(logger: SupportsLog) -> contextvars.Token[SupportsLog]:
    """Bind *logger* in the current context and return the reset token."""
    return _LOGGER.set(logger)


def set_delivery_id(delivery_id: str | None) -> contextvars.Token[str | None]:
    """Bind *delivery_id* in the current context and return the reset token."""
    return _DELIVERY_ID.set(delivery_id)


@contextlib.contextmanager
def bind_request(
    logger: SupportsLog,
    *,
    delivery_id: str | None = None,
) -> cabc.Iterator[None]:
    """Bind request values for the duration of the ``with`` block."""
    logger_token = _LOGGER.set(logger)
    delivery_token = _DELIVERY_ID.set(delivery_id)
    try:
        yield
    finally:
        _DELIVERY_ID.reset(delivery_token)
        _LOGGER.reset(logger_token)
