"""Command-line interface for the system cleaner."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from datetime import timedelta
from typing import Sequence

from syscleaner.categories import CleanOptions, perform_clean
from syscleaner.results import format_bytes

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


@dataclass(frozen=True)
class _Category:
    flag: str
    attr: str
    help: str
    group: str


_CATEGORY_FLAGS: tuple[_Category, ...] = (
    _Category("win-temp", "windows_temp", "Windows Temp directory", "system"),
    _Category("user-temp", "user_temp", "User Temp directories", "system"),
    _Category("wupdate", "windows_update", "Windows Update cache", "system"),
    _Category("installer", "windows_installer", "Windows Installer cache", "system"),
    _Category("prefetch", "prefetch", "Prefetch data (files older than 30 days)", "system"),
    _Category("crashdumps", "crash_dumps", "Crash dump files", "system"),
    _Category("wer", "error_reports", "Windows Error Reports", "system"),
    _Category("thumbcache", "thumbnail_cache", "Thumbnail cache", "system"),
    _Category("iconcache", "icon_cache", "Icon cache", "system"),
    _Category("fontcache", "font_cache", "Font cache", "system"),
    _Category("shadercache", "shader_cache", "DirectX shader cache", "system"),
    _Category("dnscache", "dns_cache", "DNS cache (flush)", "system"),
    _Category("winlogs", "windows_logs", "Windows log files", "system"),
    _Category("eventlogs", "event_logs", "Windows Event Logs", "system"),
    _Category("deliveryopt", "delivery_optimization", "Delivery Optimization cache", "system"),
    _Category("recyclebin", "recycle_bin", "Recycle Bin", "system"),
    _Category("chrome", "chrome_cache", "Chrome cache", "browsers"),
    _Category("firefox", "firefox_cache", "Firefox cache", "browsers"),
    _Category("edge", "edge_cache", "Edge cache", "browsers"),
    _Category("brave", "brave_cache", "Brave cache", "browsers"),
    _Category("opera", "opera_cache", "Opera cache", "browsers"),
    _Category("discord", "discord_cache", "Discord cache", "apps"),
    _Category("spotify", "spotify_cache", "Spotify cache", "apps"),
    _Category("steam", "steam_cache", "Steam cache", "apps"),
    _Category("teams", "teams_cache", "Teams cache", "apps"),
    _Category("vscode", "vscode_cache", "VS Code cache", "apps"),
    _Category("java", "java_cache", "Java cache", "apps"),
)

_GROUP_FLAGS = (
    ("all", "Clean everything"),
    ("system", "All system categories"),
    ("browsers", "All browser categories"),
    ("apps", "All application categories"),
)


def _parse_bool(text: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value {text!r}")


def _add_bool(parser: argparse.ArgumentParser, flag: str, dest: str, help_text: str) -> None:
    # A flag left unset stays None so that explicit values can override groups.
    parser.add_argument(
        f"--{flag}",
        dest=dest,
        nargs="?",
        const=True,
        default=None,
        type=_parse_bool,
        metavar="BOOL",
        help=help_text,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the clean subcommand."""
    parser = argparse.ArgumentParser(
        prog="syscleaner",
        description="SysCleaner - Windows System Cleaner & Gaming Optimizer",
    )
    commands = parser.add_subparsers(dest="command")

    clean = commands.add_parser(
        "clean",
        help="Clean system junk files and free disk space",
        description=(
            "Remove temporary files, browser caches, log files, prefetch data, and "
            "thumbnails. You can select specific categories or use group flags like "
            "--all, --system, --browsers, --apps."
        ),
    )
    for name, help_text in _GROUP_FLAGS:
        _add_bool(clean, name, name, help_text)
    for category in _CATEGORY_FLAGS:
        _add_bool(clean, category.flag, category.attr, category.help)
    _add_bool(clean, "dry-run", "dry_run", "Show what would be cleaned without deleting")
    clean.set_defaults(handler=_run_clean)
    return parser


def options_from_args(args: argparse.Namespace) -> CleanOptions:
    """Turn parsed clean arguments into CleanOptions; explicit flags override groups."""
    groups = {name: bool(getattr(args, name, None)) for name, _ in _GROUP_FLAGS}
    if groups["all"]:
        groups["system"] = groups["browsers"] = groups["apps"] = True

    options = CleanOptions(dry_run=bool(getattr(args, "dry_run", None)))
    for category in _CATEGORY_FLAGS:
        explicit = getattr(args, category.attr, None)
        if explicit is not None:
            setattr(options, category.attr, explicit)
        elif groups[category.group]:
            setattr(options, category.attr, True)
    return options


def _format_duration(duration: timedelta) -> str:
    """Render a duration rounded to milliseconds, e.g. 12ms, 1.5s or 1m5s."""
    ms = round(duration.total_seconds() * 1000)
    if ms == 0:
        return "0s"
    if ms < 1000:
        return f"{ms}ms"
    hours, rest = divmod(ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, millis = divmod(rest, 1000)
    text = str(seconds)
    if millis:
        text += f".{millis:03d}".rstrip("0")
    text += "s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return text


def _usage_hint() -> str:
    """Build the message shown when no cleaning category was selected."""
    group_lines = "\n".join(
        f"  {'--' + name:<14}: {help_text}" for name, help_text in _GROUP_FLAGS
    )
    return (
        "No cleaning targets specified.\n"
        "\nGroup flags:\n"
        f"{group_lines}\n"
        "\nRun 'syscleaner clean --help' for a full list of categories."
    )


def _run_clean(args: argparse.Namespace) -> int:
    options = options_from_args(args)
    if not options.any_selected():
        print(_usage_hint())
        return 0

    if options.dry_run:
        print("[DRY RUN] Scanning files without deleting...")
        print()

    print("Starting system cleanup...")
    print()

    result = perform_clean(options)

    print("=== Cleanup Summary ===")
    if options.dry_run:
        print("  Mode:          DRY RUN (no files deleted)")
    print(f"  Files deleted: {result.files_deleted}")
    print(f"  Files skipped: {result.skipped_files}")
    print(f"  Space freed:   {format_bytes(result.space_freed)}")
    print(f"  Time taken:    {_format_duration(result.duration)}")
    if result.locked_files > 0:
        print(f"  Skipped (in use): {result.locked_files}")
    if result.permission_files > 0:
        print(f"  Permission errors: {result.permission_files}")
    if result.errors:
        print(f"  Other errors:  {len(result.errors)}")
    print()
    if options.dry_run:
        print("Run without --dry-run to actually delete files.")
    else:
        print("Cleanup complete!")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return its exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 0
    return handler(args)