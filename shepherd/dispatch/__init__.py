"""Detached background execution for webhook follow-up work.

Public API
----------
Dispatcher
    Launches work on independent asyncio tasks and contains its failures.
DispatchConfig
    Per-task timeout and optional admission limit.
TaskContext
    Request values carried into a dispatched task.
"""

from __future__ import annotations

from shepherd.dispatch.config import DispatchConfig
from shepherd.dispatch.dispatcher import Dispatcher
from shepherd.dispatch.errors import DispatchConfigError, TaskTimeoutError
from shepherd.dispatch.outcome import (
    DispatchEventType,
    TaskContext,
    TaskCrashed,
    TaskFailed,
    TaskOutcome,
    TaskSucceeded,
    TaskWork,
    log_outcome,
    run_contained,
)

__all__ = [
    "DispatchConfig",
    "DispatchConfigError",
    "DispatchEventType",
    "Dispatcher",
    "TaskContext",
    "TaskCrashed",
    "TaskFailed",
    "TaskOutcome",
    "TaskSucceeded",
    "TaskTimeoutError",
    "TaskWork",
    "log_outcome",
    "run_contained",
]
