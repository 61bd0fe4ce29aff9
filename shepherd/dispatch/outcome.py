"""Outcomes of dispatched background work and their structured log events."""

from __future__ import annotations

import asyncio
import dataclasses
import enum
import traceback
import typing as typ

from shepherd.dispatch.errors import TaskTimeoutError
from shepherd.errors import ShepherdError
from shepherd.logging import LogLevel, format_event, log_error, log_event

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from shepherd.logging import SupportsLog


class DispatchEventType(enum.StrEnum):
    """Structured log event types for dispatched tasks."""

    TASK_COMPLETED = "dispatch.task.completed"
    TASK_FAILED = "dispatch.task.failed"
    TASK_CRASHED = "dispatch.task.crashed"
    TASK_CANCELLED = "dispatch.task.cancelled"


@dataclasses.dataclass(frozen=True, slots=True)
class TaskContext:
    """Values a dispatched task inherits from the request that spawned it.

    Attributes
    ----------
    logger
        Logger active for the originating request.
    delivery_id
        Webhook delivery id of the originating request, when known.

    """

    logger: SupportsLog
    delivery_id: str | None = None


type TaskWork = cabc.Callable[[TaskContext], cabc.Awaitable[None]]


@dataclasses.dataclass(frozen=True, slots=True)
class TaskSucceeded:
    """The work returned normally."""


@dataclasses.dataclass(frozen=True, slots=True)
class TaskFailed:
    """The work reported an expected failure."""

    error: BaseException


@dataclasses.dataclass(frozen=True, slots=True)
class TaskCrashed:
    """The work raised an unexpected exception.

    Attributes
    ----------
    error
        The exception that escaped the work.
    traceback
        Fully formatted traceback captured at the failure boundary.

    """

    error: BaseException
    traceback: str


type TaskOutcome = TaskSucceeded | TaskFailed | TaskCrashed


def _crashed(exc: BaseException) -> TaskCrashed:
    return TaskCrashed(exc, "".join(traceback.format_exception(exc)))


async def run_contained(
    work: TaskWork,
    context: TaskContext,
    *,
    timeout_s: float | None,
) -> TaskOutcome:
    """Run *work* and translate every way it can end into a ``TaskOutcome``.

    ``ShepherdError`` subclasses and expiry of the task's own timeout count
    as failures; any other exception, ``SystemExit`` included, counts as a
    crash.  Cancellation and ``KeyboardInterrupt`` are not translated and
    propagate to the caller.
    """
    deadline = asyncio.timeout(timeout_s)
    try:
        async with deadline:
            await work(context)
    except ShepherdError as exc:
        return TaskFailed(exc)
    except TimeoutError as exc:
        if deadline.expired() and timeout_s is not None:
            return TaskFailed(TaskTimeoutError(timeout_s))
        return _crashed(exc)
    except Exception as exc:  # noqa: BLE001 - failure boundary for detached work
        return _crashed(exc)
    except (asyncio.CancelledError, KeyboardInterrupt):
        raise
    except BaseException as exc:  # noqa: BLE001 - SystemExit from detached work
        return _crashed(exc)
    return TaskSucceeded()


def _describe(error: BaseException) -> str:
    try:
        return str(error)
    except Exception:  # noqa: BLE001 - __str__ of arbitrary exceptions
        return f"<unprintable {type(error).__name__}>"


def log_outcome(
    context: TaskContext,
    name: str,
    outcome: TaskOutcome,
    duration: dt.timedelta,
) -> None:
    """Emit exactly one log entry describing *outcome*."""
    fields: dict[str, object] = {
        "task": name,
        "delivery_id": context.delivery_id,
        "duration_seconds": f"{duration.total_seconds():.3f}",
    }
    match outcome:
        case TaskSucceeded():
            log_event(
                context.logger, LogLevel.INFO, DispatchEventType.TASK_COMPLETED, **fields
            )
        case TaskFailed(error=error):
            log_event(
                context.logger,
                LogLevel.ERROR,
                DispatchEventType.TASK_FAILED,
                **fields,
                error_type=type(error).__name__,
                error_message=_describe(error),
            )
        case TaskCrashed(error=error, traceback=trace):
            summary = format_event(
                DispatchEventType.TASK_CRASHED,
                **fields,
                error_type=type(error).__name__,
                error_message=_describe(error),
            )
            log_error(context.logger, "%s\n%s", summary, trace, exc_info=error)
