"""Errors reported by the task dispatcher."""

from __future__ import annotations

from shepherd.errors import ShepherdError


class TaskTimeoutError(ShepherdError):
    """Recorded when a dispatched task outlives its own timeout."""

    def __init__(self, timeout_s: float) -> None:
        """Initialise with the timeout that expired."""
        self.timeout_s = timeout_s
        super().__init__(f"Task exceeded timeout of {timeout_s:g}s")


class DispatchConfigError(ShepherdError):
    """Raised when dispatcher settings in the environment are invalid."""

    @classmethod
    def invalid_parameter(
        cls, name: str, value: str, constraint: str
    ) -> DispatchConfigError:
        """Return an error describing an invalid configuration value."""
        return cls(f"Invalid {name} '{value}'. {constraint}")
