"""Shared fixtures for Shepherd unit tests."""

from __future__ import annotations

import pytest

from tests.helpers.log_capture import RecordingLogger

_SHEPHERD_ENV_VARS = (
    "SHEPHERD_HOST",
    "SHEPHERD_PORT",
    "SHEPHERD_LOG_LEVEL",
    "SHEPHERD_GITHUB_WEBHOOK_SECRET",
    "SHEPHERD_GITHUB_TOKEN",
    "SHEPHERD_GITHUB_API_URL",
    "SHEPHERD_CLASSIFIER_BACKEND",
    "SHEPHERD_OPENAI_API_KEY",
    "SHEPHERD_OPENAI_ENDPOINT",
    "SHEPHERD_OPENAI_MODEL",
    "SHEPHERD_OPENAI_TIMEOUT_S",
    "SHEPHERD_DISPATCH_TIMEOUT_S",
    "SHEPHERD_DISPATCH_MAX_CONCURRENCY",
    "SHEPHERD_ARCHIVE_MAX_FILE_BYTES",
    "SHEPHERD_ARCHIVE_MAX_TOTAL_BYTES",
    "SHEPHERD_ARCHIVE_DIR_MODE",
)


@pytest.fixture(autouse=True)
def _clean_shepherd_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate tests from Shepherd settings in the developer's environment."""
    for name in _SHEPHERD_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """Return an empty RecordingLogger; bind it with ``bind_request``."""
    return RecordingLogger()
