"""Root exception for expected Shepherd failures."""

from __future__ import annotations


class ShepherdError(Exception):
    """Base class for failures Shepherd anticipates and reports.

    Background tasks that raise a ``ShepherdError`` are logged as ordinary
    failures.  Any other exception escaping a task is treated as a crash and
    logged together with its traceback.
    """
