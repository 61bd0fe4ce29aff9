"""Extraction limits and results for the safe archive extractor."""

from __future__ import annotations

import dataclasses
import os
import shutil
import typing as typ
from pathlib import Path

from shepherd.archive.errors import ArchiveConfigError
from shepherd.logging import get_logger, log_debug, log_warning

if typ.TYPE_CHECKING:
    import types

logger = get_logger(__name__)

GIB = 1024 * 1024 * 1024

_DEFAULT_MAX_FILE_BYTES = 1 * GIB
_DEFAULT_MAX_TOTAL_BYTES = 10 * GIB
_DEFAULT_DIR_MODE = 0o700
_DEFAULT_PREFIX = "shepherd-archive-"


def _parse_positive_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ArchiveConfigError.invalid_parameter(
            name, raw, "Must be a positive integer"
        ) from exc
    if value <= 0:
        raise ArchiveConfigError.invalid_parameter(
            name, raw, "Must be a positive integer"
        )
    return value


def _parse_dir_mode(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw, 8)
    except ValueError as exc:
        raise ArchiveConfigError.invalid_parameter(
            name, raw, "Must be an octal permission mode such as 700"
        ) from exc
    # The owner must keep rwx or extraction into the directory fails.
    if value & ~0o777 or value & 0o700 != 0o700:
        raise ArchiveConfigError.invalid_parameter(
            name, raw, "Must grant the owner rwx and stay within 777"
        )
    return value


@dataclasses.dataclass(frozen=True, slots=True)
class ExtractionLimits:
    """Policy constants applied to every extraction.

    Attributes
    ----------
    max_file_bytes
        Ceiling on a single entry's declared uncompressed size.
    max_total_bytes
        Ceiling on the running total of declared uncompressed sizes.
    dir_mode
        Permission mode applied to the extraction root right after creation.
    prefix
        Name prefix for the temporary directory.

    """

    max_file_bytes: int = _DEFAULT_MAX_FILE_BYTES
    max_total_bytes: int = _DEFAULT_MAX_TOTAL_BYTES
    dir_mode: int = _DEFAULT_DIR_MODE
    prefix: str = _DEFAULT_PREFIX

    @classmethod
    def from_env(cls) -> ExtractionLimits:
        """Build limits from environment variables.

        Reads the following environment variables:

        - ``SHEPHERD_ARCHIVE_MAX_FILE_BYTES``: per-file ceiling (bytes)
        - ``SHEPHERD_ARCHIVE_MAX_TOTAL_BYTES``: total ceiling (bytes)
        - ``SHEPHERD_ARCHIVE_DIR_MODE``: octal directory mode, e.g. ``700``

        Raises
        ------
        ArchiveConfigError
            If any value is malformed.

        """
        return cls(
            max_file_bytes=_parse_positive_int(
                "SHEPHERD_ARCHIVE_MAX_FILE_BYTES", _DEFAULT_MAX_FILE_BYTES
            ),
            max_total_bytes=_parse_positive_int(
                "SHEPHERD_ARCHIVE_MAX_TOTAL_BYTES", _DEFAULT_MAX_TOTAL_BYTES
            ),
            dir_mode=_parse_dir_mode("SHEPHERD_ARCHIVE_DIR_MODE", _DEFAULT_DIR_MODE),
        )


DEFAULT_LIMITS = ExtractionLimits()


def remove_tree(path: Path) -> None:
    """Recursively remove *path*, logging rather than raising on failure."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        log_warning(
            logger,
            "Failed to clean up temporary directory %s: %s",
            path,
            exc,
            exc_info=exc,
        )
    else:
        log_debug(logger, "Cleaned up temporary directory %s", path)


@dataclasses.dataclass(slots=True)
class ExtractionResult:
    """Temporary directory produced by a successful extraction.

    The caller owns ``root`` and must remove it.  Using the result as a
    context manager removes it on every exit path::

        with extract_archive(data) as result:
            readme = (result.root / result.files[0]).read_text()

    Attributes
    ----------
    root
        Extraction root; every file below it is fully written.
    files
        Extracted file paths relative to ``root``, in archive order.
    size
        Total uncompressed bytes written.

    """

    root: Path
    files: tuple[str, ...]
    size: int

    def cleanup(self) -> None:
        """Remove the extraction root and everything below it."""
        remove_tree(self.root)

    def __enter__(self) -> ExtractionResult:
        """Return the result itself."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Remove the extraction root."""
        self.cleanup()


@dataclasses.dataclass(frozen=True, slots=True)
class ArchiveEntry:
    """Metadata for one archive member, used only while extracting it.

    Attributes
    ----------
    name
        Relative path as recorded in the archive.
    size
        Declared uncompressed size in bytes.
    is_dir
        Whether the entry denotes a directory.
    mode
        Permission bits recorded by a Unix archiver, if any.

    """

    name: str
    size: int
    is_dir: bool
    mode: int | None = None
