"""Cleaning categories and the orchestration that runs them."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass, fields
from datetime import timedelta
from typing import Callable, Iterable, Optional

from syscleaner.results import (
    FILE_TIMEOUT,
    CleanResult,
    clean_directory,
    format_bytes,
    remove_with_timeout,
)

logger = logging.getLogger(__name__)

ProgressFunc = Callable[[str, int, int], None]

OPERATION_TIMEOUT = 5 * 60.0
MAX_CLEAN_WORKERS = 4
THIRTY_DAYS = timedelta(days=30)

CHROMIUM_CACHE_SUBDIRS = ("Cache", "Code Cache", "GPUCache", "Service Worker", "ShaderCache")


@dataclass
class CleanOptions:
    """Which categories to clean and how."""

    # System categories
    windows_temp: bool = False
    user_temp: bool = False
    windows_update: bool = False
    windows_installer: bool = False
    prefetch: bool = False
    crash_dumps: bool = False
    error_reports: bool = False
    thumbnail_cache: bool = False
    icon_cache: bool = False
    font_cache: bool = False
    shader_cache: bool = False
    dns_cache: bool = False
    windows_logs: bool = False
    event_logs: bool = False
    delivery_optimization: bool = False
    recycle_bin: bool = False

    # Application categories
    chrome_cache: bool = False
    firefox_cache: bool = False
    edge_cache: bool = False
    brave_cache: bool = False
    opera_cache: bool = False
    discord_cache: bool = False
    spotify_cache: bool = False
    steam_cache: bool = False
    teams_cache: bool = False
    vscode_cache: bool = False
    java_cache: bool = False

    # Execution options
    dry_run: bool = False
    progress: Optional[ProgressFunc] = None

    def any_selected(self) -> bool:
        """Return True if at least one cleaning category is enabled."""
        return any(
            getattr(self, f.name)
            for f in fields(self)
            if f.name not in ("dry_run", "progress")
        )


CategoryFunc = Callable[[CleanOptions], CleanResult]


def dedup(items: Iterable[str]) -> list[str]:
    """Return the non-empty items in order, each only once."""
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if not item or item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out


def _on_windows() -> bool:
    return sys.platform == "win32"


def _env(name: str) -> str:
    return os.environ.get(name, "")


def _clean_dirs(directories: Iterable[str], dry_run: bool, max_age: timedelta | float = 0) -> CleanResult:
    result = CleanResult()
    for directory in directories:
        result.merge(clean_directory(directory, max_age, dry_run))
    return result


def _directories_under(
    env_var: str, *relative: tuple[str, ...], max_age: timedelta | float = 0
) -> CategoryFunc:
    """Build a Windows-only cleaner for directories below an environment path."""

    def cleaner(options: CleanOptions) -> CleanResult:
        if not _on_windows():
            return CleanResult()
        base = _env(env_var)
        if not base:
            return CleanResult()
        return _clean_dirs(
            (os.path.join(base, *parts) for parts in relative), options.dry_run, max_age
        )

    return cleaner


def _remove_single_file(path: str, dry_run: bool, result: CleanResult) -> None:
    """Count or remove one file, ignoring failures."""
    try:
        size = os.stat(path).st_size
    except OSError:
        return
    if not dry_run:
        try:
            remove_with_timeout(path, FILE_TIMEOUT)
        except OSError:
            return
    result.files_deleted += 1
    result.space_freed += size


def _run_command(args: list[str], failure: str, success: str, result: CleanResult) -> None:
    try:
        subprocess.run(args, check=True, capture_output=True)
    except (OSError, subprocess.SubprocessError) as exc:
        error = RuntimeError(f"{failure}: {exc}")
        error.__cause__ = exc
        result.errors.append(error)
    else:
        logger.info(success)


# System category cleaners

def _clean_user_temp(options: CleanOptions) -> CleanResult:
    temp_dirs = [_env("TEMP"), _env("TMP")]
    if _on_windows():
        local_app_data = _env("LOCALAPPDATA")
        if local_app_data:
            temp_dirs.append(os.path.join(local_app_data, "Temp"))
    return _clean_dirs(dedup(temp_dirs), options.dry_run)


def _clean_crash_dumps(options: CleanOptions) -> CleanResult:
    result = CleanResult()
    if not _on_windows():
        return result
    local_app_data = _env("LOCALAPPDATA")
    win_dir = _env("WINDIR")

    dirs: list[str] = []
    if local_app_data:
        dirs.append(os.path.join(local_app_data, "CrashDumps"))
    if win_dir:
        dirs.append(os.path.join(win_dir, "Minidump"))
        _remove_single_file(os.path.join(win_dir, "MEMORY.DMP"), options.dry_run, result)

    result.merge(_clean_dirs(dirs, options.dry_run))
    return result


def _clean_error_reports(options: CleanOptions) -> CleanResult:
    if not _on_windows():
        return CleanResult()
    dirs = [
        os.path.join(base, "Microsoft", "Windows", "WER")
        for base in (_env("LOCALAPPDATA"), _env("ProgramData"))
        if base
    ]
    return _clean_dirs(dirs, options.dry_run)


def _clean_thumbnail_cache(options: CleanOptions) -> CleanResult:
    result = CleanResult()
    if not _on_windows():
        return result
    local_app_data = _env("LOCALAPPDATA")
    if not local_app_data:
        return result

    thumb_dir = os.path.join(local_app_data, "Microsoft", "Windows", "Explorer")
    try:
        with os.scandir(thumb_dir) as scanner:
            entries = sorted(scanner, key=lambda entry: entry.name)
    except OSError:
        return result

    for entry in entries:
        if not entry.name.startswith(("thumbcache_", "iconcache_")):
            continue
        try:
            if entry.is_dir():
                continue
            size = entry.stat().st_size
        except OSError as exc:
            result.errors.append(exc)
            continue
        if options.dry_run:
            result.files_deleted += 1
            result.space_freed += size
            continue
        try:
            remove_with_timeout(entry.path, FILE_TIMEOUT)
        except OSError as exc:
            if isinstance(exc, TimeoutError) or "timeout" in str(exc).lower():
                result.skipped_files += 1
            else:
                result.errors.append(exc)
        else:
            result.files_deleted += 1
            result.space_freed += size
    return result


def _clean_icon_cache(options: CleanOptions) -> CleanResult:
    result = CleanResult()
    if not _on_windows():
        return result
    local_app_data = _env("LOCALAPPDATA")
    if local_app_data:
        _remove_single_file(os.path.join(local_app_data, "IconCache.db"), options.dry_run, result)
    return result


def _clean_dns_cache(options: CleanOptions) -> CleanResult:
    result = CleanResult()
    if not _on_windows() or options.dry_run:
        return result
    _run_command(
        ["ipconfig", "/flushdns"], "failed to flush DNS cache", "DNS cache flushed", result
    )
    return result


def _clean_event_logs(options: CleanOptions) -> CleanResult:
    result = CleanResult()
    if not _on_windows() or options.dry_run:
        return result
    # The Security log is left alone on purpose.
    for log_name in ("System", "Application"):
        _run_command(
            ["wevtutil", "cl", log_name],
            f"failed to clear {log_name} event log",
            f"Cleared {log_name} event log",
            result,
        )
    return result


def _clean_recycle_bin(options: CleanOptions) -> CleanResult:
    result = CleanResult()
    if not _on_windows() or options.dry_run:
        return result
    _run_command(
        ["powershell", "-Command", "Clear-RecycleBin -Force -ErrorAction SilentlyContinue"],
        "failed to clear recycle bin",
        "Recycle Bin cleared",
        result,
    )
    return result


# Application category cleaners

def clean_chromium_profiles(user_data_dir: str | os.PathLike[str], dry_run: bool) -> CleanResult:
    """Clean the cache folders of every Chromium profile in a user data directory."""
    result = CleanResult()
    user_data_dir = os.fspath(user_data_dir)
    try:
        with os.scandir(user_data_dir) as scanner:
            profiles = sorted(
                entry.name for entry in scanner if entry.is_dir()
            )
    except OSError:
        return result

    for name in profiles:
        if name == "Default" or name.startswith("Profile "):
            for sub in CHROMIUM_CACHE_SUBDIRS:
                result.merge(clean_directory(os.path.join(user_data_dir, name, sub), 0, dry_run))
    return result


def _chromium_browser(env_var: str, *user_data_dirs: tuple[str, ...]) -> CategoryFunc:
    def cleaner(options: CleanOptions) -> CleanResult:
        result = CleanResult()
        if not _on_windows():
            return result
        base = _env(env_var)
        if not base:
            return result
        for parts in user_data_dirs:
            result.merge(clean_chromium_profiles(os.path.join(base, *parts), options.dry_run))
        return result

    return cleaner


def _clean_firefox_cache(options: CleanOptions) -> CleanResult:
    result = CleanResult()
    if not _on_windows():
        return result
    app_data = _env("APPDATA")
    if not app_data:
        return result

    profiles_dir = os.path.join(app_data, "Mozilla", "Firefox", "Profiles")
    try:
        with os.scandir(profiles_dir) as scanner:
            profiles = sorted(entry.name for entry in scanner if entry.is_dir())
    except OSError:
        return result

    for name in profiles:
        for sub in ("cache2", "startupCache"):
            result.merge(clean_directory(os.path.join(profiles_dir, name, sub), 0, options.dry_run))
    return result


_CATEGORIES: tuple[tuple[str, str, CategoryFunc], ...] = (
    ("windows_temp", "Windows Temp", _directories_under("WINDIR", ("Temp",))),
    ("user_temp", "User Temp", _clean_user_temp),
    (
        "windows_update",
        "Windows Update Cache",
        _directories_under("WINDIR", ("SoftwareDistribution", "Download")),
    ),
    (
        "windows_installer",
        "Windows Installer Cache",
        _directories_under("WINDIR", ("Installer", "$PatchCache$")),
    ),
    ("prefetch", "Prefetch", _directories_under("WINDIR", ("Prefetch",), max_age=THIRTY_DAYS)),
    ("crash_dumps", "Crash Dumps", _clean_crash_dumps),
    ("error_reports", "Error Reports", _clean_error_reports),
    ("thumbnail_cache", "Thumbnail Cache", _clean_thumbnail_cache),
    ("icon_cache", "Icon Cache", _clean_icon_cache),
    (
        "font_cache",
        "Font Cache",
        _directories_under(
            "WINDIR", ("ServiceProfiles", "LocalService", "AppData", "Local", "FontCache")
        ),
    ),
    (
        "shader_cache",
        "Shader Cache",
        _directories_under(
            "LOCALAPPDATA",
            ("D3DSCache",),
            ("NVIDIA", "DXCache"),
            ("NVIDIA", "GLCache"),
            ("AMD", "DxCache"),
        ),
    ),
    ("dns_cache", "DNS Cache", _clean_dns_cache),
    (
        "windows_logs",
        "Windows Log Files",
        _directories_under("WINDIR", ("Logs",), ("Debug",), ("Panther",), max_age=THIRTY_DAYS),
    ),
    ("event_logs", "Event Logs", _clean_event_logs),
    (
        "delivery_optimization",
        "Delivery Optimization",
        _directories_under("WINDIR", ("SoftwareDistribution", "DeliveryOptimization")),
    ),
    ("recycle_bin", "Recycle Bin", _clean_recycle_bin),
    (
        "chrome_cache",
        "Chrome Cache",
        _chromium_browser("LOCALAPPDATA", ("Google", "Chrome", "User Data")),
    ),
    ("firefox_cache", "Firefox Cache", _clean_firefox_cache),
    (
        "edge_cache",
        "Edge Cache",
        _chromium_browser("LOCALAPPDATA", ("Microsoft", "Edge", "User Data")),
    ),
    (
        "brave_cache",
        "Brave Cache",
        _chromium_browser("LOCALAPPDATA", ("BraveSoftware", "Brave-Browser", "User Data")),
    ),
    (
        "opera_cache",
        "Opera Cache",
        _chromium_browser(
            "APPDATA",
            ("Opera Software", "Opera Stable"),
            ("Opera Software", "Opera GX Stable"),
        ),
    ),
    (
        "discord_cache",
        "Discord Cache",
        _directories_under(
            "APPDATA",
            ("discord", "Cache"),
            ("discord", "Code Cache"),
            ("discord", "GPUCache"),
        ),
    ),
    (
        "spotify_cache",
        "Spotify Cache",
        _directories_under("LOCALAPPDATA", ("Spotify", "Storage")),
    ),
    (
        "steam_cache",
        "Steam Cache",
        _directories_under("LOCALAPPDATA", ("Steam", "htmlcache")),
    ),
    (
        "teams_cache",
        "Teams Cache",
        _directories_under(
            "APPDATA",
            ("Microsoft", "Teams", "Cache"),
            ("Microsoft", "Teams", "blob_storage"),
            ("Microsoft", "Teams", "GPUCache"),
        ),
    ),
    (
        "vscode_cache",
        "VS Code Cache",
        _directories_under(
            "APPDATA",
            ("Code", "Cache"),
            ("Code", "CachedData"),
            ("Code", "CachedExtensions"),
        ),
    ),
    (
        "java_cache",
        "Java Cache",
        _directories_under(
            "USERPROFILE", ("AppData", "LocalLow", "Sun", "Java", "Deployment", "cache")
        ),
    ),
)


def _clean_category(label: str, func: CategoryFunc, options: CleanOptions) -> CleanResult:
    logger.info("Cleaning %s...", label)
    if options.progress is not None:
        options.progress(label, 0, 100)
    result = func(options)
    if options.progress is not None:
        options.progress(label, 100, 100)
    return result


def perform_clean(options: CleanOptions) -> CleanResult:
    """Run every enabled category, several at a time, and total the results."""
    start = time.monotonic()
    result = CleanResult()

    tasks = [(label, func) for attr, label, func in _CATEGORIES if getattr(options, attr)]
    if not tasks:
        result.duration = timedelta(seconds=time.monotonic() - start)
        return result

    deadline = start + OPERATION_TIMEOUT
    executor = ThreadPoolExecutor(max_workers=min(MAX_CLEAN_WORKERS, len(tasks)))
    try:
        futures = [
            (label, executor.submit(_clean_category, label, func, options))
            for label, func in tasks
        ]
        for label, future in futures:
            remaining = max(0.0, deadline - time.monotonic())
            try:
                result.merge(future.result(timeout=remaining))
            except FutureTimeout:
                logger.warning("%s cleaning timed out", label)
                result.errors.append(TimeoutError(f"{label} cleaning timed out"))
            except Exception as exc:  # a failing category must not stop the others
                result.errors.append(exc)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    result.duration = timedelta(seconds=time.monotonic() - start)
    logger.info(
        "Cleanup complete: %d files deleted, %d skipped, %s freed in %.3fs",
        result.files_deleted,
        result.skipped_files,
        format_bytes(result.space_freed),
        result.duration.total_seconds(),
    )
    return result