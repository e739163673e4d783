import os
import subprocess
import sys

import pytest

from syscleaner import admin
from syscleaner.admin import ElevationError, is_elevated, require_elevation


def _fake_whoami(stdout):
    def fake_run(*args, **kwargs):
        return subprocess.CompletedProcess(args=args, returncode=0, stdout=stdout)

    return fake_run


def test_posix_root_is_elevated(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(os, "geteuid", lambda: 0, raising=False)
    assert is_elevated() is True


def test_posix_regular_user_is_not_elevated(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(os, "geteuid", lambda: 1000, raising=False)
    assert is_elevated() is False


def test_windows_enabled_admin_group(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    output = (
        '"Everyone","Well-known group","S-1-1-0","Mandatory group, Enabled group"\n'
        '"BUILTIN\\Administrators","Alias","S-1-5-32-544",'
        '"Mandatory group, Enabled by default, Enabled group, Group owner"\n'
    )
    monkeypatch.setattr(admin.subprocess, "run", _fake_whoami(output))
    assert is_elevated() is True


def test_windows_deny_only_admin_group(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    output = '"BUILTIN\\Administrators","Alias","S-1-5-32-544","Group used for deny only"\n'
    monkeypatch.setattr(admin.subprocess, "run", _fake_whoami(output))
    assert is_elevated() is False


def test_windows_missing_admin_group(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    output = '"Everyone","Well-known group","S-1-1-0","Mandatory group, Enabled group"\n'
    monkeypatch.setattr(admin.subprocess, "run", _fake_whoami(output))
    assert is_elevated() is False


def test_windows_command_failure_means_not_elevated(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")

    def failing_run(*args, **kwargs):
        raise FileNotFoundError("whoami")

    monkeypatch.setattr(admin.subprocess, "run", failing_run)
    assert is_elevated() is False


def test_require_elevation_raises_with_operation(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(os, "geteuid", lambda: 1000, raising=False)
    with pytest.raises(ElevationError) as excinfo:
        require_elevation("Extreme mode")
    message = str(excinfo.value)
    assert message.startswith("Extreme mode requires administrator privileges.")
    assert "Run as administrator" in message


def test_require_elevation_error_is_permission_error(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(os, "geteuid", lambda: 1000, raising=False)
    with pytest.raises(PermissionError):
        require_elevation("Cleaning")


def test_require_elevation_passes_when_elevated(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(os, "geteuid", lambda: 0, raising=False)
    assert require_elevation("Cleaning") is None