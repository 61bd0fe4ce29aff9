"""Errors raised while extracting untrusted ZIP archives."""

from __future__ import annotations

from shepherd.errors import ShepherdError


class ArchiveError(ShepherdError):
    """Base exception for archive extraction failures."""


class InvalidArchiveError(ArchiveError):
    """Raised when the byte buffer is not a readable ZIP archive."""

    @classmethod
    def unreadable(cls, detail: str) -> InvalidArchiveError:
        """Return an error for a buffer that cannot be opened as a ZIP."""
        return cls(f"Invalid ZIP archive: {detail}")

    @classmethod
    def corrupt_entry(cls, name: str, detail: str) -> InvalidArchiveError:
        """Return an error for an entry whose content cannot be decoded."""
        return cls(f"Corrupt archive entry {name!r}: {detail}")

    @classmethod
    def encrypted_entry(cls, name: str) -> InvalidArchiveError:
        """Return an error for a password-protected entry."""
        return cls(f"Encrypted archive entry {name!r} is not supported")

    @classmethod
    def duplicate_entry(cls, name: str) -> InvalidArchiveError:
        """Return an error for an entry that overwrites an earlier file."""
        return cls(f"Duplicate archive entry {name!r}")


class FileTooLargeError(ArchiveError):
    """Raised when a single entry declares more bytes than allowed.

    Attributes
    ----------
    name
        Entry name as recorded in the archive.
    size
        Declared uncompressed size in bytes.
    limit
        Per-file ceiling in bytes.

    """

    def __init__(self, name: str, size: int, limit: int) -> None:
        """Initialise with the offending entry and the configured ceiling."""
        self.name = name
        self.size = size
        self.limit = limit
        super().__init__(
            f"File too large: {name} ({size} bytes exceeds limit of {limit})"
        )


class TotalSizeExceededError(ArchiveError):
    """Raised when the running uncompressed total crosses the ceiling.

    Attributes
    ----------
    name
        Entry at which the running total crossed the ceiling.
    total
        Running total including that entry.
    limit
        Total ceiling in bytes.

    """

    def __init__(self, name: str, total: int, limit: int) -> None:
        """Initialise with the crossing entry and the running total."""
        self.name = name
        self.total = total
        self.limit = limit
        super().__init__(
            f"Total uncompressed size too large at {name}: "
            f"{total} bytes exceeds limit of {limit}"
        )


class PathTraversalError(ArchiveError):
    """Raised when an entry resolves outside the extraction root."""

    def __init__(self, name: str, destination: str) -> None:
        """Initialise with the entry name and its resolved destination."""
        self.name = name
        self.destination = destination
        super().__init__(
            f"Invalid file path detected: file={name}, dest={destination}"
        )


class ArchiveIOError(ArchiveError):
    """Raised when a filesystem operation fails during extraction.

    Attributes
    ----------
    path
        Filesystem path the failed operation targeted.

    """

    def __init__(self, message: str, *, path: str) -> None:
        """Initialise with a description and the failing path."""
        self.path = path
        super().__init__(f"{message}: {path}")

    @classmethod
    def from_os_error(cls, action: str, path: str, exc: OSError) -> ArchiveIOError:
        """Wrap *exc* raised while performing *action* on *path*."""
        reason = exc.strerror or str(exc)
        return cls(f"Failed to {action} ({reason})", path=path)


class ArchiveConfigError(ArchiveError):
    """Raised when extraction limits configured in the environment are invalid."""

    @classmethod
    def invalid_parameter(
        cls, name: str, value: str, constraint: str
    ) -> ArchiveConfigError:
        """Return an error describing an invalid configuration value."""
        return cls(f"Invalid {name} '{value}'. {constraint}")
