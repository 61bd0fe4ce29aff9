"""In-memory loggers for asserting on Shepherd log output."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(slots=True)
class LogRecord:
    """A captured log call."""

    level: str
    message: str
    exc_info: object | None = None


class RecordingLogger:
    """SupportsLog implementation that keeps every record in memory.

    Bind it with :func:`shepherd.context.bind_request` to observe logs
    emitted through ``current_logger()``, including those of dispatched
    tasks.
    """

    def __init__(self) -> None:
        """Initialise empty record storage."""
        self.records: list[LogRecord] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        """Store the record and return the message."""
        del stack_info
        self.records.append(LogRecord(str(level), message, exc_info))
        return message

    def messages(self, level: str | None = None) -> list[str]:
        """Return captured messages, optionally filtered by level."""
        return [
            record.message
            for record in self.records
            if level is None or record.level == level
        ]

    def tagged(self, tag: str) -> list[LogRecord]:
        """Return records whose message starts with ``[tag]``."""
        prefix = f"[{tag}]"
        return [record for record in self.records if record.message.startswith(prefix)]
