"""Cleaning results, error classification and directory cleaning."""

from __future__ import annotations

import enum
import logging
import os
import threading
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Iterator, TypeVar, Union

logger = logging.getLogger(__name__)

FILE_TIMEOUT = 2.0
DIR_TIMEOUT = 30.0

# Windows sharing and lock violations surface as PermissionError in Python.
_LOCKED_WINERRORS = frozenset({32, 33})

_T = TypeVar("_T")
Age = Union[timedelta, float, int]


class ErrorType(enum.IntEnum):
    """Category of a cleaning failure."""

    LOCKED = 0
    PERMISSION_DENIED = 1
    TIMEOUT = 2
    NOT_FOUND = 3
    OTHER = 4


class CleanError(Exception):
    """A categorised failure on one path."""

    def __init__(self, path: str, kind: ErrorType, err: BaseException) -> None:
        super().__init__(path, kind, err)
        self.path = path
        self.kind = kind
        self.err = err

    def __str__(self) -> str:
        return f"{self.path}: {self.err}"


@dataclass
class CleanResult:
    """Totals gathered while cleaning."""

    files_deleted: int = 0
    skipped_files: int = 0
    space_freed: int = 0
    locked_files: int = 0
    permission_files: int = 0
    duration: timedelta = field(default_factory=timedelta)
    errors: list[BaseException] = field(default_factory=list)

    def merge(self, other: CleanResult) -> None:
        """Add the counters and errors of another result to this one."""
        self.files_deleted += other.files_deleted
        self.skipped_files += other.skipped_files
        self.space_freed += other.space_freed
        self.locked_files += other.locked_files
        self.permission_files += other.permission_files
        self.errors.extend(other.errors)


def classify_error(path: str, err: BaseException) -> CleanError:
    """Wrap an OS error in a CleanError with its category."""
    message = str(err).lower()
    if getattr(err, "winerror", None) in _LOCKED_WINERRORS:
        kind = ErrorType.LOCKED
    elif isinstance(err, PermissionError):
        kind = ErrorType.PERMISSION_DENIED
    elif isinstance(err, FileNotFoundError):
        kind = ErrorType.NOT_FOUND
    elif any(
        marker in message
        for marker in ("used by another process", "locked", "sharing violation")
    ):
        kind = ErrorType.LOCKED
    elif isinstance(err, TimeoutError) or "timeout" in message:
        kind = ErrorType.TIMEOUT
    else:
        kind = ErrorType.OTHER
    return CleanError(path, kind, err)


def format_bytes(num_bytes: int) -> str:
    """Format a byte count as a human-readable string."""
    kb = 1024
    mb = kb * 1024
    gb = mb * 1024
    if num_bytes >= gb:
        return f"{num_bytes / gb:.2f} GB"
    if num_bytes >= mb:
        return f"{num_bytes / mb:.2f} MB"
    if num_bytes >= kb:
        return f"{num_bytes / kb:.2f} KB"
    return f"{num_bytes} B"


def _run_with_timeout(func: Callable[[], _T], timeout: float, message: str) -> _T:
    """Run func in a worker thread; raise TimeoutError if it does not finish in time."""
    outcome: dict[str, object] = {}

    def target() -> None:
        try:
            outcome["value"] = func()
        except BaseException as exc:  # handed back to the caller below
            outcome["error"] = exc

    worker = threading.Thread(target=target, daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        raise TimeoutError(message)
    if "error" in outcome:
        raise outcome["error"]  # type: ignore[misc]
    return outcome["value"]  # type: ignore[return-value]


def remove_with_timeout(path: str | os.PathLike[str], timeout: float = FILE_TIMEOUT) -> None:
    """Remove a file, raising TimeoutError if removal takes longer than timeout seconds."""
    path = os.fspath(path)
    _run_with_timeout(lambda: os.remove(path), timeout, f"timeout removing {path}")


def _seconds(max_age: Age) -> float:
    if isinstance(max_age, timedelta):
        return max_age.total_seconds()
    return float(max_age)


def _walk_files(directory: str, errors: list[BaseException]) -> Iterator[os.DirEntry[str]]:
    """Yield non-directory entries below directory, skipping unreadable directories."""
    try:
        with os.scandir(directory) as scanner:
            entries = sorted(scanner, key=lambda entry: entry.name)
    except OSError:
        logger.info("Skipping inaccessible directory: %s", directory)
        return

    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as exc:
            errors.append(exc)
            continue
        if is_dir:
            yield from _walk_files(entry.path, errors)
        else:
            yield entry


def _clean_tree(directory: str, max_age: float, dry_run: bool) -> CleanResult:
    result = CleanResult()
    now = time.time()

    for entry in _walk_files(directory, result.errors):
        try:
            info = entry.stat(follow_symlinks=False)
        except OSError as exc:
            result.errors.append(exc)
            continue

        if max_age > 0 and now - info.st_mtime < max_age:
            continue

        if dry_run:
            result.files_deleted += 1
            result.space_freed += info.st_size
            continue

        try:
            remove_with_timeout(entry.path, FILE_TIMEOUT)
        except OSError as exc:
            failure = classify_error(entry.path, exc)
            if failure.kind in (ErrorType.LOCKED, ErrorType.TIMEOUT):
                result.skipped_files += 1
                result.locked_files += 1
            elif failure.kind is ErrorType.PERMISSION_DENIED:
                result.skipped_files += 1
                result.permission_files += 1
            else:
                result.errors.append(failure)
        else:
            result.files_deleted += 1
            result.space_freed += info.st_size

    return result


def clean_directory(
    directory: str | os.PathLike[str], max_age: Age = 0, dry_run: bool = False
) -> CleanResult:
    """Remove the files below directory that are at least max_age old.

    A max_age of zero removes every file. In a dry run nothing is removed and
    the result counts what would have been. A missing directory yields an
    empty result.
    """
    directory = os.fspath(directory)
    try:
        os.stat(directory)
    except FileNotFoundError:
        return CleanResult()
    except OSError:
        pass

    age = _seconds(max_age)
    try:
        return _run_with_timeout(
            lambda: _clean_tree(directory, age, dry_run),
            DIR_TIMEOUT,
            f"timeout cleaning {directory}",
        )
    except TimeoutError as exc:
        logger.warning("Directory cleanup timed out: %s", directory)
        return CleanResult(errors=[exc])