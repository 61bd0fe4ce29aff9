"""Fire-and-forget launcher for slow work triggered by webhook requests.

``Dispatcher.dispatch`` returns immediately.  The work runs on its own
asyncio task inside a fresh :class:`contextvars.Context` that holds only the
logger and delivery id captured from the caller, so cancelling or finishing
the request never reaches the task.  Every outcome is reported through a
single structured log entry; nothing is ever raised back to the caller.

Usage
-----
Dispatch work from a request handler::

    async def download(ctx: TaskContext) -> None:
        await sources.process_source(info)

    dispatcher.dispatch(download, name="process-source")

"""

from __future__ import annotations

import asyncio
import contextvars
import datetime as dt
import time
import typing as typ

from shepherd.context import (
    current_delivery_id,
    current_logger,
    set_delivery_id,
    set_logger,
)
from shepherd.dispatch.config import DispatchConfig
from shepherd.dispatch.outcome import (
    DispatchEventType,
    TaskContext,
    log_outcome,
    run_contained,
)
from shepherd.logging import (
    LogLevel,
    get_logger,
    log_event,
    log_exception,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    from shepherd.dispatch.outcome import TaskWork

__all__ = ["Dispatcher"]

logger = get_logger(__name__)

_DEFAULT_TASK_NAME = "task"


def _bind_task_context(context: TaskContext) -> None:
    set_logger(context.logger)
    set_delivery_id(context.delivery_id)


class Dispatcher:
    """Launch detached background tasks with contained failures.

    Parameters
    ----------
    config
        Timeout and admission settings; defaults to :class:`DispatchConfig`.

    """

    def __init__(self, config: DispatchConfig | None = None) -> None:
        """Initialise the dispatcher with optional settings."""
        self._config = config or DispatchConfig()
        self._tasks: set[asyncio.Task[None]] = set()
        self._semaphore: asyncio.Semaphore | None = (
            asyncio.Semaphore(self._config.max_concurrency)
            if self._config.max_concurrency is not None
            else None
        )

    @property
    def in_flight(self) -> int:
        """Return the number of dispatched tasks that have not finished."""
        return len(self._tasks)

    def dispatch(self, work: TaskWork, *, name: str | None = None) -> None:
        """Start *work* on an independent task and return immediately.

        Parameters
        ----------
        work
            Coroutine function receiving the captured :class:`TaskContext`.
        name
            Label used in log entries and the asyncio task name.

        Raises
        ------
        RuntimeError
            If called without a running event loop.

        """
        loop = asyncio.get_running_loop()
        task_context = TaskContext(
            logger=current_logger(),
            delivery_id=current_delivery_id(),
        )
        task_name = name or getattr(work, "__name__", _DEFAULT_TASK_NAME)

        detached = contextvars.Context()
        detached.run(_bind_task_context, task_context)

        task = loop.create_task(
            self._run(work, task_context, task_name),
            name=f"shepherd-dispatch:{task_name}",
            context=detached,
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(
        self,
        work: TaskWork,
        context: TaskContext,
        name: str,
    ) -> None:
        started = time.monotonic()
        try:
            if self._semaphore is None:
                outcome = await run_contained(
                    work, context, timeout_s=self._config.timeout_s
                )
            else:
                async with self._semaphore:
                    outcome = await run_contained(
                        work, context, timeout_s=self._config.timeout_s
                    )
        except asyncio.CancelledError:
            log_event(
                context.logger,
                LogLevel.WARNING,
                DispatchEventType.TASK_CANCELLED,
                task=name,
                delivery_id=context.delivery_id,
            )
            raise
        duration = dt.timedelta(seconds=time.monotonic() - started)
        try:
            log_outcome(context, name, outcome, duration)
        except Exception as exc:  # noqa: BLE001 - request loggers are caller-supplied
            log_exception(
                logger,
                f"Failed to log outcome of dispatched task {name}",
                exc,
            )

    async def drain(self, timeout_s: float | None = None) -> None:
        """Wait for in-flight tasks, cancelling any still running afterwards.

        Parameters
        ----------
        timeout_s
            Seconds to wait before cancelling; ``None`` waits indefinitely.

        """
        pending = set(self._tasks)
        if not pending:
            return

        log_info(logger, "Draining %d dispatched task(s)", len(pending))
        _done, still_running = await asyncio.wait(pending, timeout=timeout_s)
        if not still_running:
            return

        log_warning(
            logger,
            "Cancelling %d dispatched task(s) still running after %ss",
            len(still_running),
            timeout_s,
        )
        for task in still_running:
            task.cancel()
        await asyncio.gather(*still_running, return_exceptions=True)
