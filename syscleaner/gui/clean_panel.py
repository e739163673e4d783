"""Cleaning panel: category selection, preview and clean, with a Tk front end."""

from __future__ import annotations

import argparse
import queue
import threading
from dataclasses import fields
from typing import Callable, Mapping, Optional, Sequence

from syscleaner.categories import CleanOptions, perform_clean
from syscleaner.cli import _format_duration
from syscleaner.results import CleanResult, format_bytes

GROUPS: dict[str, tuple[tuple[str, str], ...]] = {
    "system": (
        ("windows_temp", "Windows Temp"),
        ("user_temp", "User Temp"),
        ("prefetch", "Prefetch (30+ days)"),
        ("crash_dumps", "Crash Dumps"),
        ("error_reports", "Error Reports"),
        ("thumbnail_cache", "Thumbnail Cache"),
        ("icon_cache", "Icon Cache"),
        ("shader_cache", "Shader Cache"),
        ("dns_cache", "DNS Cache"),
        ("windows_logs", "Windows Logs"),
        ("event_logs", "Event Logs"),
        ("delivery_optimization", "Delivery Optimization"),
        ("recycle_bin", "Recycle Bin"),
        ("windows_update", "Windows Update Cache"),
        ("windows_installer", "Windows Installer Cache"),
        ("font_cache", "Font Cache"),
    ),
    "browsers": (
        ("chrome_cache", "Chrome"),
        ("firefox_cache", "Firefox"),
        ("edge_cache", "Edge"),
        ("brave_cache", "Brave"),
        ("opera_cache", "Opera"),
    ),
    "apps": (
        ("discord_cache", "Discord"),
        ("spotify_cache", "Spotify"),
        ("steam_cache", "Steam"),
        ("teams_cache", "Teams"),
        ("vscode_cache", "VS Code"),
        ("java_cache", "Java"),
    ),
}

GROUP_TITLES = {"system": "System", "browsers": "Browsers", "apps": "Applications"}
GROUP_COLUMNS = {"system": 4, "browsers": 5, "apps": 3}

_UNCHECKED_BY_DEFAULT = frozenset(
    {
        "icon_cache",
        "dns_cache",
        "event_logs",
        "delivery_optimization",
        "recycle_bin",
        "windows_update",
        "windows_installer",
        "font_cache",
    }
)

_CATEGORY_ATTRS = frozenset(
    f.name for f in fields(CleanOptions) if f.name not in ("dry_run", "progress")
)


def default_selection() -> dict[str, bool]:
    """Return the categories checked when the panel opens."""
    return {
        attr: attr not in _UNCHECKED_BY_DEFAULT
        for entries in GROUPS.values()
        for attr, _ in entries
    }


def build_options(selection: Mapping[str, bool], dry_run: bool) -> CleanOptions:
    """Turn a category selection into CleanOptions."""
    unknown = set(selection) - _CATEGORY_ATTRS
    if unknown:
        raise ValueError(f"unknown cleaning categories: {', '.join(sorted(unknown))}")
    return CleanOptions(dry_run=dry_run, **{k: bool(v) for k, v in selection.items()})


def format_analysis(result: CleanResult) -> str:
    """Describe a dry-run result."""
    return (
        f"Files found: {result.files_deleted}\n"
        f"Space reclaimable: {format_bytes(result.space_freed)}\n"
        f"Duration: {_format_duration(result.duration)}\n\n"
        "Run 'Clean Now' to remove these files."
    )


def format_clean_result(result: CleanResult) -> str:
    """Describe the result of a real clean, including skipped files and errors."""
    text = (
        f"Files removed: {result.files_deleted}\n"
        f"Space freed: {format_bytes(result.space_freed)}\n"
        f"Duration: {_format_duration(result.duration)}"
    )
    if result.locked_files > 0 or result.permission_files > 0 or result.errors:
        text += "\n"
        if result.locked_files > 0:
            text += f"\nSkipped (in use): {result.locked_files}"
        if result.permission_files > 0:
            text += f"\nPermission errors: {result.permission_files}"
        if result.errors:
            text += f"\nOther errors: {len(result.errors)}"
    return text


class CleanPanel:
    """State of the cleaning panel: selection, status line and result text."""

    def __init__(
        self,
        selection: Optional[Mapping[str, bool]] = None,
        on_update: Optional[Callable[["CleanPanel"], None]] = None,
    ) -> None:
        self.selection: dict[str, bool] = dict(
            default_selection() if selection is None else selection
        )
        self.status_text = "Ready to clean."
        self.result_text = ""
        self.busy = False
        self._on_update = on_update

    def _notify(self) -> None:
        if self._on_update is not None:
            self._on_update(self)

    def select_group(self, group: str, value: bool) -> None:
        """Check or uncheck every category of a group."""
        try:
            entries = GROUPS[group]
        except KeyError:
            raise ValueError(f"unknown group: {group!r}") from None
        for attr, _ in entries:
            self.selection[attr] = bool(value)
        self._notify()

    def _run(self, dry_run: bool, working: str) -> CleanResult:
        self.busy = True
        self.status_text = working
        self._notify()
        try:
            return perform_clean(build_options(self.selection, dry_run))
        finally:
            self.busy = False

    def analyze(self) -> CleanResult:
        """Preview what would be cleaned without deleting anything."""
        result = self._run(True, "Analyzing system for cleanable files...")
        self.status_text = "Analysis complete."
        self.result_text = format_analysis(result)
        self._notify()
        return result

    def clean(self) -> CleanResult:
        """Clean the selected categories."""
        result = self._run(False, "Cleaning system...")
        self.status_text = "Cleaning complete!"
        self.result_text = format_clean_result(result)
        self._notify()
        return result


class _CleanWindow:
    """Tk front end for a CleanPanel."""

    def __init__(self, tk, ttk, root) -> None:
        self.tk = tk
        self.root = root
        self.panel = CleanPanel()
        self.vars = {
            attr: tk.BooleanVar(master=root, value=checked)
            for attr, checked in self.panel.selection.items()
        }
        self._results: queue.Queue[Callable[[], CleanResult]] = queue.Queue()

        frame = ttk.Frame(root, padding=10)
        frame.pack(fill="both", expand=True)
        ttk.Label(frame, text="System Cleaning", font=("TkDefaultFont", 14, "bold")).pack(
            anchor="w"
        )

        for group, entries in GROUPS.items():
            ttk.Separator(frame).pack(fill="x", pady=6)
            header = ttk.Frame(frame)
            header.pack(fill="x")
            ttk.Label(header, text=GROUP_TITLES[group], font=("TkDefaultFont", 10, "bold")).pack(
                side="left"
            )
            ttk.Button(header, text="Select All", command=lambda g=group: self._select(g, True)).pack(
                side="left", padx=4
            )
            ttk.Button(
                header, text="Deselect All", command=lambda g=group: self._select(g, False)
            ).pack(side="left")
            grid = ttk.Frame(frame)
            grid.pack(fill="x")
            columns = GROUP_COLUMNS[group]
            for position, (attr, label) in enumerate(entries):
                row, column = divmod(position, columns)
                ttk.Checkbutton(grid, text=label, variable=self.vars[attr]).grid(
                    row=row, column=column, sticky="w", padx=4
                )

        ttk.Separator(frame).pack(fill="x", pady=6)
        buttons = ttk.Frame(frame)
        buttons.pack(fill="x")
        self.analyze_button = ttk.Button(
            buttons, text="Analyze (Preview)", command=lambda: self._start(self.panel.analyze)
        )
        self.analyze_button.pack(side="left", expand=True, fill="x")
        self.clean_button = ttk.Button(
            buttons, text="Clean Now", command=lambda: self._start(self.panel.clean)
        )
        self.clean_button.pack(side="left", expand=True, fill="x")

        ttk.Separator(frame).pack(fill="x", pady=6)
        self.status = ttk.Label(frame, text=self.panel.status_text, wraplength=1100)
        self.status.pack(anchor="w")
        self.progress = ttk.Progressbar(frame, mode="indeterminate")
        self.result = tk.Text(frame, height=10, state="disabled")
        self.result.pack(fill="both", expand=True)

    def _select(self, group: str, value: bool) -> None:
        self.panel.select_group(group, value)
        for attr, _ in GROUPS[group]:
            self.vars[attr].set(value)

    def _start(self, action: Callable[[], CleanResult]) -> None:
        if self.panel.busy:
            return
        self.panel.selection = {attr: var.get() for attr, var in self.vars.items()}
        self.progress.pack(fill="x", before=self.result)
        self.progress.start()
        self.analyze_button.state(["disabled"])
        self.clean_button.state(["disabled"])
        self.panel.busy = True
        self.status.configure(text="Working...")
        worker = threading.Thread(target=lambda: self._results.put(action()), daemon=True)
        worker.start()
        self.root.after(100, self._poll)

    def _poll(self) -> None:
        try:
            self._results.get_nowait()
        except queue.Empty:
            self.root.after(100, self._poll)
            return
        self.progress.stop()
        self.progress.pack_forget()
        self.analyze_button.state(["!disabled"])
        self.clean_button.state(["!disabled"])
        self.status.configure(text=self.panel.status_text)
        self.result.configure(state="normal")
        self.result.delete("1.0", "end")
        self.result.insert("1.0", self.panel.result_text)
        self.result.configure(state="disabled")


def run() -> bool:
    """Open the cleaning window; return False if no graphical interface is available."""
    try:
        import tkinter as tk
        from tkinter import ttk

        root = tk.Tk()
    except (ImportError, RuntimeError, OSError) as exc:
        print("GUI mode is not available in this build.")
        print(f"Tk could not be started: {exc}")
        return False
    root.title("SysCleaner - Ultimate Performance")
    root.geometry("1200x800")
    _CleanWindow(tk, ttk, root)
    root.mainloop()
    return True


def main(argv: Sequence[str] | None = None) -> int:
    """Start the graphical cleaner and return an exit status."""
    parser = argparse.ArgumentParser(
        prog="syscleaner-gui", description="SysCleaner graphical cleaner"
    )
    parser.parse_args(argv)
    return 0 if run() else 1