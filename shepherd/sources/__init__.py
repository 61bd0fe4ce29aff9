"""Release and push source processing.

Public API
----------
EventProcessor
    Turns release and push payloads into source-processing runs.
SourceCodeService
    Downloads a repository zipball and extracts it safely.
"""

from __future__ import annotations

from .errors import InvalidEventError, SourceProcessingError
from .events import EventProcessor, extract_push_info, extract_release_info
from .models import ReleaseInfo, SourceInfo
from .service import SourceCodeService

__all__ = [
    "EventProcessor",
    "InvalidEventError",
    "ReleaseInfo",
    "SourceCodeService",
    "SourceInfo",
    "SourceProcessingError",
    "extract_push_info",
    "extract_release_info",
]
