import os
import subprocess
import sys
from datetime import timedelta

import pytest

from syscleaner.categories import (
    CleanOptions,
    clean_chromium_profiles,
    dedup,
    perform_clean,
)


def _write(path, data="test data content"):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as handle:
        handle.write(data)
    return path


@pytest.fixture
def temp_env(tmp_path, monkeypatch):
    temp_dir = tmp_path / "temp"
    temp_dir.mkdir()
    monkeypatch.setenv("TEMP", str(temp_dir))
    monkeypatch.setenv("TMP", str(temp_dir))
    monkeypatch.delenv("LOCALAPPDATA", raising=False)
    return temp_dir


def test_dedup_keeps_order_and_drops_empty():
    assert dedup(["a", "", "b", "a", "c", "b", ""]) == ["a", "b", "c"]


def test_dedup_of_only_empty_is_empty():
    assert dedup(["", ""]) == []


def test_any_selected_false_by_default():
    assert CleanOptions().any_selected() is False


def test_any_selected_ignores_dry_run():
    assert CleanOptions(dry_run=True).any_selected() is False


@pytest.mark.parametrize("name", ["windows_temp", "recycle_bin", "chrome_cache", "java_cache"])
def test_any_selected_true_for_single_category(name):
    assert CleanOptions(**{name: True}).any_selected() is True


def test_perform_clean_no_tasks_returns_empty_result():
    result = perform_clean(CleanOptions())
    assert result.files_deleted == 0
    assert result.space_freed == 0
    assert result.errors == []
    assert result.duration >= timedelta(0)


def test_user_temp_dry_run_counts_without_deleting(temp_env):
    files = [_write(str(temp_env / name)) for name in ("a.tmp", "b.tmp")]
    _write(str(temp_env / "sub" / "c.tmp"))

    result = perform_clean(CleanOptions(user_temp=True, dry_run=True))

    assert result.files_deleted == 3
    assert result.space_freed == 3 * len("test data content")
    assert all(os.path.exists(f) for f in files)


def test_user_temp_deletes_files_once_despite_duplicate_env(temp_env):
    files = [_write(str(temp_env / name)) for name in ("a.tmp", "b.tmp")]

    result = perform_clean(CleanOptions(user_temp=True))

    assert result.files_deleted == 2
    assert not any(os.path.exists(f) for f in files)


def test_progress_reports_start_and_end(temp_env):
    calls = []
    perform_clean(
        CleanOptions(user_temp=True, dry_run=True, progress=lambda *args: calls.append(args))
    )
    assert calls == [("User Temp", 0, 100), ("User Temp", 100, 100)]


def test_windows_only_categories_do_nothing_elsewhere(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("WINDIR", str(tmp_path))
    _write(str(tmp_path / "Temp" / "x.tmp"))

    result = perform_clean(CleanOptions(windows_temp=True, dns_cache=True))

    assert result.files_deleted == 0
    assert os.path.exists(tmp_path / "Temp" / "x.tmp")


def test_windows_temp_on_windows(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.setenv("WINDIR", str(tmp_path))
    _write(str(tmp_path / "Temp" / "x.tmp"))

    result = perform_clean(CleanOptions(windows_temp=True, dry_run=True))

    assert result.files_deleted == 1


def test_prefetch_keeps_recent_files(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.setenv("WINDIR", str(tmp_path))
    fresh = _write(str(tmp_path / "Prefetch" / "fresh.pf"))

    result = perform_clean(CleanOptions(prefetch=True))

    assert result.files_deleted == 0
    assert os.path.exists(fresh)


def test_thumbnail_cache_only_matching_prefixes(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    explorer = tmp_path / "Microsoft" / "Windows" / "Explorer"
    _write(str(explorer / "thumbcache_32.db"))
    _write(str(explorer / "iconcache_16.db"))
    other = _write(str(explorer / "other.db"))

    result = perform_clean(CleanOptions(thumbnail_cache=True))

    assert result.files_deleted == 2
    assert sorted(os.listdir(explorer)) == ["other.db"]
    assert os.path.exists(other)


def test_icon_cache_file(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    icon = _write(str(tmp_path / "IconCache.db"), "abcd")

    result = perform_clean(CleanOptions(icon_cache=True))

    assert result.files_deleted == 1
    assert result.space_freed == 4
    assert not os.path.exists(icon)


def test_event_logs_runs_wevtutil(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    commands = []

    def fake_run(args, **kwargs):
        commands.append(list(args))
        return subprocess.CompletedProcess(args, 0)

    monkeypatch.setattr(subprocess, "run", fake_run)

    result = perform_clean(CleanOptions(event_logs=True))

    assert commands == [["wevtutil", "cl", "System"], ["wevtutil", "cl", "Application"]]
    assert result.errors == []


def test_event_logs_failure_is_recorded(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")

    def fake_run(args, **kwargs):
        raise subprocess.CalledProcessError(1, args)

    monkeypatch.setattr(subprocess, "run", fake_run)

    result = perform_clean(CleanOptions(event_logs=True))

    assert len(result.errors) == 2
    assert "failed to clear System event log" in str(result.errors[0])


def test_dns_cache_skipped_in_dry_run(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    commands = []
    monkeypatch.setattr(subprocess, "run", lambda args, **kw: commands.append(args))

    result = perform_clean(CleanOptions(dns_cache=True, recycle_bin=True, dry_run=True))

    assert commands == []
    assert result.errors == []


def test_chromium_profiles_only_cache_subdirs(tmp_path):
    _write(str(tmp_path / "Default" / "Cache" / "f1"))
    _write(str(tmp_path / "Profile 1" / "GPUCache" / "f2"))
    kept_profile = _write(str(tmp_path / "Other" / "Cache" / "f3"))
    kept_sub = _write(str(tmp_path / "Default" / "Bookmarks" / "f4"))

    dry = clean_chromium_profiles(tmp_path, True)
    assert dry.files_deleted == 2

    result = clean_chromium_profiles(tmp_path, False)
    assert result.files_deleted == 2
    assert os.path.exists(kept_profile)
    assert os.path.exists(kept_sub)
    assert not os.path.exists(tmp_path / "Default" / "Cache" / "f1")


def test_chromium_profiles_missing_dir(tmp_path):
    result = clean_chromium_profiles(tmp_path / "missing", False)
    assert result.files_deleted == 0
    assert result.errors == []