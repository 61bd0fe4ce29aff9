"""Configuration for the background task dispatcher."""

from __future__ import annotations

import dataclasses
import math
import os

from shepherd.dispatch.errors import DispatchConfigError

_DEFAULT_TIMEOUT_S = 300.0


def _parse_timeout_from_env() -> float:
    raw = os.environ.get("SHEPHERD_DISPATCH_TIMEOUT_S")
    if raw is None:
        return _DEFAULT_TIMEOUT_S
    try:
        timeout_s = float(raw)
    except ValueError as exc:
        raise DispatchConfigError.invalid_parameter(
            "SHEPHERD_DISPATCH_TIMEOUT_S", raw, "Must be a positive number"
        ) from exc
    if not math.isfinite(timeout_s) or timeout_s <= 0:
        raise DispatchConfigError.invalid_parameter(
            "SHEPHERD_DISPATCH_TIMEOUT_S", raw, "Must be a positive number"
        )
    return timeout_s


def _parse_max_concurrency_from_env() -> int | None:
    raw = os.environ.get("SHEPHERD_DISPATCH_MAX_CONCURRENCY")
    if raw is None or not raw.strip():
        return None
    try:
        limit = int(raw)
    except ValueError as exc:
        raise DispatchConfigError.invalid_parameter(
            "SHEPHERD_DISPATCH_MAX_CONCURRENCY", raw, "Must be a positive integer"
        ) from exc
    if limit <= 0:
        raise DispatchConfigError.invalid_parameter(
            "SHEPHERD_DISPATCH_MAX_CONCURRENCY", raw, "Must be a positive integer"
        )
    return limit


@dataclasses.dataclass(frozen=True, slots=True)
class DispatchConfig:
    """Settings applied to every dispatched task.

    Attributes
    ----------
    timeout_s
        Per-task timeout in seconds; ``None`` disables it.
    max_concurrency
        Maximum number of tasks running their work at once; ``None`` means
        unbounded.

    """

    timeout_s: float | None = _DEFAULT_TIMEOUT_S
    max_concurrency: int | None = None

    @classmethod
    def from_env(cls) -> DispatchConfig:
        """Build configuration from environment variables.

        Reads the following environment variables:

        - ``SHEPHERD_DISPATCH_TIMEOUT_S``: per-task timeout (default 300)
        - ``SHEPHERD_DISPATCH_MAX_CONCURRENCY``: optional admission limit

        Raises
        ------
        DispatchConfigError
            If either value is malformed.

        """
        return cls(
            timeout_s=_parse_timeout_from_env(),
            max_concurrency=_parse_max_concurrency_from_env(),
        )
