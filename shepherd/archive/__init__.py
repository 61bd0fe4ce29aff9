"""Safe extraction of untrusted ZIP archives.

Public API
----------
extract_archive
    Extract ZIP bytes into a fresh owner-only temporary directory.
extract_archive_async
    Run ``extract_archive`` on a worker thread, cleaning up after cancellation.
ExtractionLimits
    Per-file and total size ceilings plus the directory mode.
ExtractionResult
    Caller-owned extraction root with its ordered file manifest.
ArchiveError
    Base exception for every extraction failure.
"""

from __future__ import annotations

from shepherd.archive.errors import (
    ArchiveConfigError,
    ArchiveError,
    ArchiveIOError,
    FileTooLargeError,
    InvalidArchiveError,
    PathTraversalError,
    TotalSizeExceededError,
)
from shepherd.archive.extractor import (
    extract_archive,
    extract_archive_async,
    resolve_destination,
)
from shepherd.archive.models import (
    DEFAULT_LIMITS,
    ArchiveEntry,
    ExtractionLimits,
    ExtractionResult,
)

__all__ = [
    "DEFAULT_LIMITS",
    "ArchiveConfigError",
    "ArchiveEntry",
    "ArchiveError",
    "ArchiveIOError",
    "ExtractionLimits",
    "ExtractionResult",
    "FileTooLargeError",
    "InvalidArchiveError",
    "PathTraversalError",
    "TotalSizeExceededError",
    "extract_archive",
    "extract_archive_async",
    "resolve_destination",
]
