"""Unit tests for femtologging setup and structured log helpers.

Run with:
    pytest tests/unit/test_logging.py
"""

from __future__ import annotations

import pytest

from shepherd.logging import (
    LogLevel,
    configure_logging,
    format_event,
    format_log_message,
    log_debug,
    log_error,
    log_event,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)
from tests.helpers.log_capture import RecordingLogger


class TestNormalizeLogLevel:
    """Tests for normalize_log_level."""

    @pytest.mark.parametrize(
        ("raw", "expected", "invalid"),
        [
            ("warning", "WARNING", False),
            ("  debug ", "DEBUG", False),
            ("TRACE", "TRACE", False),
            (None, "INFO", True),
            ("", "INFO", True),
            ("loud", "INFO", True),
        ],
    )
    def test_normalize(self, raw: str | None, expected: str, invalid: bool) -> None:  # noqa: FBT001
        """Known names are upper-cased; others fall back to INFO."""
        level, flagged = normalize_log_level(raw)
        assert level == expected, f"{raw!r} should normalise to {expected}"
        assert flagged is invalid, f"invalid flag wrong for {raw!r}"


class TestFormatting:
    """Tests for message rendering."""

    def test_percent_template(self) -> None:
        """Templates are interpolated with their arguments."""
        assert format_log_message("hello %s (%d)", "world", 3) == "hello world (3)"

    def test_template_without_args_is_untouched(self) -> None:
        """A literal percent sign survives when no arguments are given."""
        assert format_log_message("100% done") == "100% done"

    def test_format_event_keeps_field_order(self) -> None:
        """Fields follow the tag in keyword order."""
        message = format_event("dispatch.task.completed", task="t", delivery_id=None)
        assert message == "[dispatch.task.completed] task=t delivery_id=None"

    def test_format_event_without_fields(self) -> None:
        """A bare tag renders without trailing whitespace."""
        assert format_event("webhook.event.received") == "[webhook.event.received]"


class TestLogHelpers:
    """Tests for the level-specific helpers."""

    @pytest.mark.parametrize(
        ("helper", "level"),
        [
            (log_debug, "DEBUG"),
            (log_info, "INFO"),
            (log_warning, "WARNING"),
            (log_error, "ERROR"),
        ],
    )
    def test_helpers_emit_their_level(self, helper: object, level: str) -> None:
        """Each helper formats the message and logs at its own level."""
        logger = RecordingLogger()

        helper(logger, "hello %s", "world")  # type: ignore[operator]

        assert [(r.level, r.message) for r in logger.records] == [
            (level, "hello world")
        ], f"expected one {level} record"

    def test_log_warning_forwards_exc_info(self) -> None:
        """exc_info reaches the logger unchanged."""
        logger = RecordingLogger()
        exc = ValueError("boom")

        log_warning(logger, "warning: %s", "oops", exc_info=exc)

        assert logger.records[0].exc_info is exc, "expected exc_info forwarded"

    def test_log_exception_logs_error_with_exc_info(self) -> None:
        """log_exception attaches the exception at ERROR."""
        logger = RecordingLogger()
        exc = RuntimeError("boom")

        log_exception(logger, "failed", exc)

        record = logger.records[0]
        assert (record.level, record.message, record.exc_info) == (
            "ERROR",
            "failed",
            exc,
        )

    def test_log_event_renders_structured_line(self) -> None:
        """log_event combines the tag and fields into one record."""
        logger = RecordingLogger()

        log_event(logger, LogLevel.WARNING, "webhook.event.unsupported", type="push")

        assert logger.tagged("webhook.event.unsupported")[0].level == "WARNING"
        assert logger.messages() == ["[webhook.event.unsupported] type=push"]


@pytest.mark.parametrize(
    ("raw", "expected", "invalid"),
    [("DEBUG", "DEBUG", False), ("nope", "INFO", True)],
)
def test_configure_logging(
    monkeypatch: pytest.MonkeyPatch,
    raw: str,
    expected: str,
    invalid: bool,  # noqa: FBT001
) -> None:
    """configure_logging passes the normalised level to femtologging."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("shepherd.logging.basicConfig", fake_basic_config)

    normalized, flagged = configure_logging(raw)

    assert normalized == expected, f"{raw} should normalise to {expected}"
    assert flagged is invalid, f"invalid flag wrong for {raw}"
    assert captured == {"level": expected, "force": False}, (
        "basicConfig should receive the normalised level"
    )
