"""Hardened extraction of untrusted ZIP archives into a private directory.

Every extraction gets its own freshly created, owner-only temporary
directory.  Entries are processed in archive order and each one is checked
before its content is decompressed:

1. its declared size against the per-file ceiling,
2. the running total of declared sizes against the total ceiling,
3. its resolved destination against the extraction root.

Any failure removes the directory before the error propagates, so callers
never observe a partially populated tree.

Usage
-----
Extract and consume a downloaded zipball::

    from shepherd.archive import extract_archive

    with extract_archive(zip_bytes) as result:
        for name in result.files:
            process(result.root / name)

"""

from __future__ import annotations

import asyncio
import contextvars
import functools
import io
import os
import stat
import tempfile
import threading
import typing as typ
import zipfile
import zlib
from pathlib import Path

from shepherd.archive.errors import (
    ArchiveIOError,
    FileTooLargeError,
    InvalidArchiveError,
    PathTraversalError,
    TotalSizeExceededError,
)
from shepherd.archive.models import (
    DEFAULT_LIMITS,
    ArchiveEntry,
    ExtractionLimits,
    ExtractionResult,
    remove_tree,
)
from shepherd.logging import get_logger, log_debug

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = ["extract_archive", "extract_archive_async", "resolve_destination"]

logger = get_logger(__name__)

_CHUNK_SIZE = 1024 * 1024
_UNIX_CREATE_SYSTEM = 3
_ENCRYPTED_FLAG = 0x1
_FILE_OPEN_FLAGS = (
    os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_NOFOLLOW", 0)
)
_DEFAULT_FILE_MODE = 0o600
_PARENT_DIR_MODE = 0o700
# Permission bits only; setuid, setgid and sticky bits are never restored.
_PERMISSION_BITS = 0o777

# Errors zipfile and its codecs raise for damaged member data.
_CORRUPT_DATA_ERRORS: tuple[type[Exception], ...] = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
)


def _entry_from_info(info: zipfile.ZipInfo) -> ArchiveEntry:
    mode: int | None = None
    if info.create_system == _UNIX_CREATE_SYSTEM:
        recorded = stat.S_IMODE(info.external_attr >> 16) & _PERMISSION_BITS
        if recorded:
            mode = recorded
    return ArchiveEntry(
        name=info.filename,
        size=info.file_size,
        is_dir=info.is_dir(),
        mode=mode,
    )


def resolve_destination(root: Path, name: str) -> Path:
    """Return the canonical destination for *name* below *root*.

    Parameters
    ----------
    root
        Canonical extraction root.
    name
        Entry name as recorded in the archive.

    Returns
    -------
    Path
        Canonical destination strictly inside *root*.

    Raises
    ------
    PathTraversalError
        If the destination is *root* itself or lies outside it.

    """
    canonical_root = os.path.realpath(root)
    destination = os.path.realpath(os.path.join(canonical_root, name))
    if not destination.startswith(canonical_root + os.sep):
        raise PathTraversalError(name, destination)
    return Path(destination)


def _make_root(limits: ExtractionLimits) -> Path:
    try:
        created = tempfile.mkdtemp(prefix=limits.prefix)
    except OSError as exc:
        raise ArchiveIOError.from_os_error(
            "create temporary directory", tempfile.gettempdir(), exc
        ) from exc

    root = Path(os.path.realpath(created))
    try:
        root.chmod(limits.dir_mode)
    except OSError as exc:
        remove_tree(root)
        raise ArchiveIOError.from_os_error(
            "set directory permissions", str(root), exc
        ) from exc
    return root


def _open_archive(data: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, EOFError, ValueError) as exc:
        raise InvalidArchiveError.unreadable(str(exc)) from exc


def _make_directory(path: Path, mode: int) -> None:
    try:
        path.mkdir(mode=mode, parents=True, exist_ok=True)
        path.chmod(mode)
    except OSError as exc:
        raise ArchiveIOError.from_os_error("create directory", str(path), exc) from exc


def _read_chunks(
    archive: zipfile.ZipFile, info: zipfile.ZipInfo
) -> cabc.Iterator[bytes]:
    try:
        with archive.open(info) as source:
            while chunk := source.read(_CHUNK_SIZE):
                yield chunk
    except _CORRUPT_DATA_ERRORS as exc:
        raise InvalidArchiveError.corrupt_entry(info.filename, str(exc)) from exc


def _write_file(
    archive: zipfile.ZipFile,
    info: zipfile.ZipInfo,
    entry: ArchiveEntry,
    destination: Path,
) -> int:
    """Stream one entry to *destination* and return the bytes written."""
    _make_directory(destination.parent, _PARENT_DIR_MODE)

    written = 0
    try:
        fd = os.open(destination, _FILE_OPEN_FLAGS, _DEFAULT_FILE_MODE)
        with os.fdopen(fd, "wb") as target:
            for chunk in _read_chunks(archive, info):
                written += len(chunk)
                if written > entry.size:
                    raise InvalidArchiveError.corrupt_entry(
                        entry.name, "content exceeds declared size"
                    )
                target.write(chunk)
        if entry.mode is not None:
            destination.chmod(entry.mode)
    except OSError as exc:
        raise ArchiveIOError.from_os_error(
            "write file", str(destination), exc
        ) from exc
    return written


def _extract_into(
    data: bytes,
    root: Path,
    limits: ExtractionLimits,
) -> tuple[list[str], int]:
    files: list[str] = []
    written_paths: set[Path] = set()
    declared_total = 0
    written_total = 0

    with _open_archive(data) as archive:
        for info in archive.infolist():
            entry = _entry_from_info(info)

            if entry.size > limits.max_file_bytes:
                raise FileTooLargeError(entry.name, entry.size, limits.max_file_bytes)

            declared_total += entry.size
            if declared_total > limits.max_total_bytes:
                raise TotalSizeExceededError(
                    entry.name, declared_total, limits.max_total_bytes
                )

            destination = resolve_destination(root, entry.name)

            if entry.is_dir:
                _make_directory(destination, (entry.mode or 0) | _PARENT_DIR_MODE)
                continue

            if info.flag_bits & _ENCRYPTED_FLAG:
                raise InvalidArchiveError.encrypted_entry(entry.name)

            if destination in written_paths:
                raise InvalidArchiveError.duplicate_entry(entry.name)

            written_total += _write_file(archive, info, entry, destination)
            written_paths.add(destination)
            files.append(entry.name)

    return files, written_total


def extract_archive(
    data: bytes,
    *,
    limits: ExtractionLimits = DEFAULT_LIMITS,
) -> ExtractionResult:
    """Extract ZIP *data* into a new private temporary directory.

    Parameters
    ----------
    data
        Raw ZIP bytes from an untrusted source.
    limits
        Size ceilings and directory policy to enforce.

    Returns
    -------
    ExtractionResult
        The populated directory, ordered file manifest and total size.
        Ownership of the directory passes to the caller.

    Raises
    ------
    InvalidArchiveError
        If the bytes are not a readable archive or an entry is corrupt.
    FileTooLargeError
        If an entry declares more than ``limits.max_file_bytes``.
    TotalSizeExceededError
        If the declared sizes sum past ``limits.max_total_bytes``.
    PathTraversalError
        If an entry resolves outside the extraction root.
    ArchiveIOError
        If a filesystem operation fails.

    """
    root = _make_root(limits)
    log_debug(logger, "Created temporary directory %s", root)

    try:
        files, size = _extract_into(data, root, limits)
    except BaseException:
        remove_tree(root)
        raise

    return ExtractionResult(root=root, files=tuple(files), size=size)


def _extract_for_caller(
    data: bytes,
    limits: ExtractionLimits,
    abandoned: threading.Event,
) -> ExtractionResult:
    result = extract_archive(data, limits=limits)
    if abandoned.is_set():
        result.cleanup()
    return result


def _discard_abandoned(future: asyncio.Future[ExtractionResult]) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    future.result().cleanup()


async def extract_archive_async(
    data: bytes,
    *,
    limits: ExtractionLimits = DEFAULT_LIMITS,
) -> ExtractionResult:
    """Run :func:`extract_archive` on a worker thread.

    The worker thread cannot be interrupted, so cancelling the awaiting task
    leaves it running.  Whatever tree it produces after the caller has gone
    is removed as soon as the thread finishes.

    Raises
    ------
    asyncio.CancelledError
        If the awaiting task is cancelled; the extraction root is still
        removed once the worker returns.

    """
    loop = asyncio.get_running_loop()
    abandoned = threading.Event()
    context = contextvars.copy_context()
    future = loop.run_in_executor(
        None,
        functools.partial(context.run, _extract_for_caller, data, limits, abandoned),
    )
    try:
        return await asyncio.shield(future)
    except asyncio.CancelledError:
        abandoned.set()
        future.add_done_callback(_discard_abandoned)
        raise
