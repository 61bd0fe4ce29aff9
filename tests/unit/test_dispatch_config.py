"""Unit tests for dispatcher configuration and contained execution.

Run with:
    pytest tests/unit/test_dispatch_config.py
"""

from __future__ import annotations

import asyncio
import datetime as dt

import pytest

from shepherd.dispatch import (
    DispatchConfig,
    DispatchConfigError,
    TaskContext,
    TaskCrashed,
    TaskFailed,
    TaskSucceeded,
    TaskTimeoutError,
    log_outcome,
    run_contained,
)
from shepherd.errors import ShepherdError
from tests.helpers.log_capture import RecordingLogger


class TestDispatchConfigFromEnv:
    """Tests for DispatchConfig.from_env."""

    def test_defaults(self) -> None:
        """Unset variables give a 300s timeout and no admission limit."""
        config = DispatchConfig.from_env()
        assert config == DispatchConfig(timeout_s=300.0, max_concurrency=None)

    def test_reads_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Both variables are parsed."""
        monkeypatch.setenv("SHEPHERD_DISPATCH_TIMEOUT_S", "12.5")
        monkeypatch.setenv("SHEPHERD_DISPATCH_MAX_CONCURRENCY", "4")

        config = DispatchConfig.from_env()

        assert config.timeout_s == pytest.approx(12.5)
        assert config.max_concurrency == 4

    def test_blank_concurrency_means_unbounded(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An empty admission limit is treated as unset."""
        monkeypatch.setenv("SHEPHERD_DISPATCH_MAX_CONCURRENCY", "  ")
        assert DispatchConfig.from_env().max_concurrency is None

    @pytest.mark.parametrize("raw", ["abc", "0", "-1", "nan", "inf"])
    def test_invalid_timeout(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        """Non-positive or non-finite timeouts are rejected."""
        monkeypatch.setenv("SHEPHERD_DISPATCH_TIMEOUT_S", raw)
        with pytest.raises(DispatchConfigError, match="SHEPHERD_DISPATCH_TIMEOUT_S"):
            DispatchConfig.from_env()

    @pytest.mark.parametrize("raw", ["two", "0", "-3", "1.5"])
    def test_invalid_concurrency(
        self, monkeypatch: pytest.MonkeyPatch, raw: str
    ) -> None:
        """Admission limits must be positive integers."""
        monkeypatch.setenv("SHEPHERD_DISPATCH_MAX_CONCURRENCY", raw)
        with pytest.raises(DispatchConfigError, match="positive integer"):
            DispatchConfig.from_env()


class TestRunContained:
    """run_contained maps every ending onto a TaskOutcome."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        """Normal return is a success."""

        async def work(_ctx: TaskContext) -> None:
            return None

        outcome = await run_contained(
            work, TaskContext(logger=RecordingLogger()), timeout_s=None
        )
        assert outcome == TaskSucceeded()

    @pytest.mark.asyncio
    async def test_domain_error_is_failure(self) -> None:
        """ShepherdError subclasses are failures carrying the error."""
        error = ShepherdError("nope")

        async def work(_ctx: TaskContext) -> None:
            raise error

        outcome = await run_contained(
            work, TaskContext(logger=RecordingLogger()), timeout_s=None
        )
        assert outcome == TaskFailed(error)

    @pytest.mark.asyncio
    async def test_unexpected_error_is_crash(self) -> None:
        """Other exceptions become crashes with a formatted traceback."""

        async def work(_ctx: TaskContext) -> None:
            message = "bad index"
            raise IndexError(message)

        outcome = await run_contained(
            work, TaskContext(logger=RecordingLogger()), timeout_s=None
        )
        assert isinstance(outcome, TaskCrashed), "expected a crash"
        assert isinstance(outcome.error, IndexError)
        assert "IndexError: bad index" in outcome.traceback

    @pytest.mark.asyncio
    async def test_deadline_is_failure(self) -> None:
        """Expiry of the task timeout becomes TaskTimeoutError."""

        async def work(_ctx: TaskContext) -> None:
            await asyncio.sleep(3600)

        outcome = await run_contained(
            work, TaskContext(logger=RecordingLogger()), timeout_s=0.01
        )
        assert isinstance(outcome, TaskFailed), "expected a failure"
        assert isinstance(outcome.error, TaskTimeoutError)
        assert str(outcome.error) == "Task exceeded timeout of 0.01s"


def test_log_outcome_success_fields() -> None:
    """Completion entries carry the task, delivery id and duration."""
    logger = RecordingLogger()
    context = TaskContext(logger=logger, delivery_id="abc")

    log_outcome(context, "work", TaskSucceeded(), dt.timedelta(milliseconds=1500))

    assert logger.records[0].level == "INFO"
    assert logger.messages() == [
        "[dispatch.task.completed] task=work delivery_id=abc duration_seconds=1.500"
    ]
