"""femtologging setup and structured log helpers for Shepherd.

Shepherd pre-formats every message before handing it to femtologging, so
loggers only ever see finished strings.  Two message shapes are used:

- free text built with percent-style templates (``log_info`` and friends);
- structured events rendered as ``[event.tag] key=value ...`` by
  :func:`log_event`, which operators grep for.

Example:
>>> from shepherd.logging import LogLevel, format_event
>>> format_event("webhook.event.received", type="push", supported=True)
'[webhook.event.received] type=push supported=True'

"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger

_FALLBACK_LEVEL = "INFO"


class LogLevel(enum.StrEnum):
    """Level names femtologging accepts."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SupportsLog(typ.Protocol):
    """Anything with femtologging's ``log`` signature."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Return ``(level, invalid)`` for a raw level name.

    Blank or unknown names fall back to ``INFO`` with ``invalid`` set so the
    caller can warn once logging is configured.
    """
    candidate = (level or "").strip().upper()
    if candidate in LogLevel.__members__:
        return (candidate, False)
    return (_FALLBACK_LEVEL, True)


def configure_logging(level: str | None, *, force: bool = False) -> tuple[str, bool]:
    """Install femtologging's root handler at the normalized *level*.

    Parameters
    ----------
    level : str | None
        Raw level name, usually ``SHEPHERD_LOG_LEVEL``.
    force : bool, optional
        Replace handlers installed by an earlier call.

    Returns
    -------
    tuple[str, bool]
        The level actually applied and whether the input was rejected.

    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def format_log_message(template: str, *args: object) -> str:
    """Interpolate *args* into a percent-style *template*."""
    return template % args if args else template


def format_event(event: str, /, **fields: object) -> str:
    """Render a structured event as ``[event] key=value ...``.

    Fields keep their keyword order.  ``None`` values render as ``None`` so
    an absent delivery id stays visible in the line.
    """
    rendered = " ".join(f"{key}={value}" for key, value in fields.items())
    return f"[{event}] {rendered}" if rendered else f"[{event}]"


def _emit(
    logger: SupportsLog,
    level: LogLevel,
    message: str,
    exc_info: object | None,
) -> None:
    logger.log(str(level), message, exc_info=exc_info, stack_info=False)


def log_event(
    logger: SupportsLog,
    level: LogLevel,
    event: str,
    /,
    *,
    exc_info: object | None = None,
    **fields: object,
) -> None:
    """Log a structured event at *level*.

    Parameters
    ----------
    logger : SupportsLog
        Destination logger.
    level : LogLevel
        Severity of the entry.
    event : str
        Dotted event tag, usually a ``StrEnum`` member.
    exc_info : object | None, optional
        Exception attached to the record.
    **fields : object
        Key/value pairs appended after the tag.

    """
    _emit(logger, level, format_event(event, **fields), exc_info)


def log_debug(logger: SupportsLog, template: str, *args: object) -> None:
    """Log a DEBUG message."""
    _emit(logger, LogLevel.DEBUG, format_log_message(template, *args), None)


def log_info(
    logger: SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an INFO message built from *template* and *args*."""
    _emit(logger, LogLevel.INFO, format_log_message(template, *args), exc_info)


def log_warning(
    logger: SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a WARNING message built from *template* and *args*."""
    _emit(logger, LogLevel.WARNING, format_log_message(template, *args), exc_info)


def log_error(
    logger: SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an ERROR message built from *template* and *args*."""
    _emit(logger, LogLevel.ERROR, format_log_message(template, *args), exc_info)


def log_exception(logger: SupportsLog, message: str, exc: BaseException) -> None:
    """Log *message* at ERROR with *exc* attached as ``exc_info``."""
    _emit(logger, LogLevel.ERROR, message, exc)


__all__ = [
    "LogLevel",
    "SupportsLog",
    "configure_logging",
    "format_event",
    "format_log_message",
    "get_logger",
    "log_debug",
    "log_error",
    "log_event",
    "log_exception",
    "log_info",
    "log_warning",
    "normalize_log_level",
]
