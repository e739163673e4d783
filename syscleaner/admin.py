"""Checks for administrator privileges."""

from __future__ import annotations

import os
import subprocess
import sys

_ADMINISTRATORS_SID = "S-1-5-32-544"


class ElevationError(PermissionError):
    """Raised when an operation needs administrator privileges it does not have."""


def _windows_is_admin_member() -> bool:
    """Return True if the current token holds the Administrators group enabled."""
    try:
        completed = subprocess.run(
            ["whoami", "/groups", "/fo", "csv", "/nh"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.SubprocessError):
        return False

    for line in completed.stdout.splitlines():
        if _ADMINISTRATORS_SID in line:
            attributes = line.lower()
            return "enabled group" in attributes and "deny only" not in attributes
    return False


def is_elevated() -> bool:
    """Return True if the process runs with administrator privileges."""
    if sys.platform != "win32":
        return os.geteuid() == 0
    return _windows_is_admin_member()


def require_elevation(operation: str) -> None:
    """Raise ElevationError unless the process runs as administrator.

    Call this before a privileged operation so the user gets a clear message
    instead of silent failures.
    """
    if is_elevated():
        return
    raise ElevationError(
        f"{operation} requires administrator privileges.\n"
        'Please right-click the executable and select "Run as administrator"'
    )