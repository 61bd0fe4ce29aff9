"""Unit tests for extraction limits configuration.

Run with:
    pytest tests/unit/test_archive_models.py
"""

from __future__ import annotations

import pytest

from shepherd.archive import DEFAULT_LIMITS, ArchiveConfigError, ExtractionLimits
from shepherd.archive.models import GIB


class TestExtractionLimitsFromEnv:
    """Tests for ExtractionLimits.from_env."""

    def test_defaults(self) -> None:
        """Unset variables give 1 GiB per file, 10 GiB total and mode 0o700."""
        limits = ExtractionLimits.from_env()
        assert limits == DEFAULT_LIMITS
        assert (limits.max_file_bytes, limits.max_total_bytes) == (GIB, 10 * GIB)
        assert limits.dir_mode == 0o700

    def test_reads_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """All three variables are parsed."""
        monkeypatch.setenv("SHEPHERD_ARCHIVE_MAX_FILE_BYTES", "1024")
        monkeypatch.setenv("SHEPHERD_ARCHIVE_MAX_TOTAL_BYTES", "4096")
        monkeypatch.setenv("SHEPHERD_ARCHIVE_DIR_MODE", "750")

        limits = ExtractionLimits.from_env()

        assert (limits.max_file_bytes, limits.max_total_bytes) == (1024, 4096)
        assert limits.dir_mode == 0o750

    @pytest.mark.parametrize("raw", ["lots", "0", "-1", "1e9"])
    def test_invalid_sizes(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        """Sizes must be positive integers."""
        monkeypatch.setenv("SHEPHERD_ARCHIVE_MAX_FILE_BYTES", raw)
        with pytest.raises(ArchiveConfigError, match="positive integer"):
            ExtractionLimits.from_env()

    @pytest.mark.parametrize("raw", ["rwx", "600", "1777", "89"])
    def test_invalid_dir_modes(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        """Modes must be octal, within 777 and keep owner rwx."""
        monkeypatch.setenv("SHEPHERD_ARCHIVE_DIR_MODE", raw)
        with pytest.raises(ArchiveConfigError, match="SHEPHERD_ARCHIVE_DIR_MODE"):
            ExtractionLimits.from_env()
