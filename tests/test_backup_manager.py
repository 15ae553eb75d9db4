from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta
from pathlib import Path
from unittest import mock

import pytest

from steamshortcuts.controllers.backup_manager import BackupManager
from steamshortcuts.errors import IdentityResolutionError
from steamshortcuts.shortcuts import SteamShortcut, read_shortcuts, read_shortcuts_text


class FakeClock:
    """Returns a new second on every call"""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture
def steam_root(tmp_path: Path) -> Path:
    root = tmp_path / "Steam"
    (root / "userdata" / "123456789" / "config").mkdir(parents=True)
    return root


@pytest.fixture
def manager(tmp_path: Path, steam_root: Path) -> BackupManager:
    return BackupManager(
        steam_root_path=steam_root,
        backups_root=tmp_path / "backups",
        clock=FakeClock(),
    )


def _target(steam_root: Path) -> Path:
    return steam_root / "userdata" / "123456789" / "config" / "shortcuts.vdf"


def test_snapshot_copies_file_with_timestamped_name(manager: BackupManager, tmp_path: Path) -> None:
    source = tmp_path / "shortcuts.vdf"
    source.write_bytes(b"content")

    dst = manager.snapshot(source, "123456789")

    assert dst == tmp_path / "backups" / "123456789" / "shortcuts-20240101_120000.bak.vdf"
    assert dst.read_bytes() == b"content"
    assert source.read_bytes() == b"content"


def test_snapshot_of_missing_or_empty_source_does_nothing(manager: BackupManager, tmp_path: Path) -> None:
    assert manager.snapshot(tmp_path / "nope.vdf", "123456789") is None
    assert manager.snapshot("", "123456789") is None
    assert manager.snapshot(None, "123456789") is None
    assert not (tmp_path / "backups").exists()


def test_snapshot_keeps_only_newest_five(manager: BackupManager, tmp_path: Path) -> None:
    source = tmp_path / "shortcuts.vdf"
    for i in range(7):
        source.write_bytes(f"version {i}".encode())
        manager.snapshot(source, "123456789")

    backups = manager.list_backups("123456789")
    assert len(backups) == 5
    assert [b.read_bytes() for b in backups] == [f"version {i}".encode() for i in (6, 5, 4, 3, 2)]


def test_max_backups_is_configurable(tmp_path: Path) -> None:
    manager = BackupManager(backups_root=tmp_path / "backups", max_backups=2, clock=FakeClock())
    source = tmp_path / "shortcuts.vdf"
    source.write_bytes(b"x")
    for _ in range(4):
        manager.snapshot(source, "42")
    assert len(manager.list_backups("42")) == 2


def test_snapshots_are_kept_per_user(manager: BackupManager, tmp_path: Path) -> None:
    source = tmp_path / "shortcuts.vdf"
    source.write_bytes(b"x")
    manager.snapshot(source, "1")
    manager.snapshot(source, "2")
    assert len(manager.list_backups("1")) == 1
    assert len(manager.list_backups("2")) == 1


def test_prune_failure_is_logged_and_other_deletions_continue(
    manager: BackupManager, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    source = tmp_path / "shortcuts.vdf"
    source.write_bytes(b"x")
    for _ in range(5):
        manager.snapshot(source, "123456789")

    original_unlink = Path.unlink
    calls = []

    def flaky_unlink(self, *args, **kwargs):
        calls.append(self.name)
        if len(calls) == 1:
            raise PermissionError("locked")
        return original_unlink(self, *args, **kwargs)

    manager.max_backups = 3
    with mock.patch.object(Path, "unlink", flaky_unlink), caplog.at_level(logging.WARNING):
        manager.snapshot(source, "123456789")

    assert len(calls) == 3
    assert len(manager.list_backups("123456789")) == 4
    assert "Failed to delete old backup" in caplog.text


def test_snapshot_copy_failure_returns_none(
    manager: BackupManager, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    source = tmp_path / "shortcuts.vdf"
    source.write_bytes(b"x")
    with mock.patch("shutil.copyfile", side_effect=OSError("disk full")), caplog.at_level(logging.WARNING):
        assert manager.snapshot(source, "123456789") is None
    assert "Failed to create managed backup" in caplog.text


def test_restore_writes_backup_over_target_and_snapshots_current(
    manager: BackupManager, steam_root: Path, tmp_path: Path
) -> None:
    target = _target(steam_root)
    target.write_bytes(b"current")
    backup = tmp_path / "old.bak.vdf"
    backup.write_bytes(b"previous")

    assert manager.restore(backup, "123456789") is True

    assert target.read_bytes() == b"previous"
    backups = manager.list_backups("123456789")
    assert len(backups) == 1
    assert backups[0].read_bytes() == b"current"


def test_restore_without_existing_target(manager: BackupManager, steam_root: Path, tmp_path: Path) -> None:
    backup = tmp_path / "old.bak.vdf"
    backup.write_bytes(b"previous")

    assert manager.restore(backup, "987") is True
    assert (steam_root / "userdata" / "987" / "config" / "shortcuts.vdf").read_bytes() == b"previous"
    assert manager.list_backups("987") == []


def test_restore_missing_backup_leaves_target_untouched(
    manager: BackupManager, steam_root: Path, tmp_path: Path
) -> None:
    target = _target(steam_root)
    target.write_bytes(b"current")

    assert manager.restore(tmp_path / "missing.bak.vdf", "123456789") is False
    assert target.read_bytes() == b"current"
    assert manager.list_backups("123456789") == []


def test_restore_without_steam_root_fails(tmp_path: Path) -> None:
    manager = BackupManager(backups_root=tmp_path / "backups")
    backup = tmp_path / "old.bak.vdf"
    backup.write_bytes(b"previous")
    assert manager.restore(backup, "123456789") is False


def test_restore_copy_failure_returns_false(manager: BackupManager, steam_root: Path, tmp_path: Path) -> None:
    backup = tmp_path / "old.bak.vdf"
    backup.write_bytes(b"previous")
    with mock.patch("shutil.copyfile", side_effect=OSError("denied")):
        assert manager.restore(backup, "123456789") is False


def test_resolve_target(manager: BackupManager, steam_root: Path) -> None:
    assert manager.resolve_target("123456789") == _target(steam_root)


def test_resolve_target_errors(tmp_path: Path) -> None:
    with pytest.raises(IdentityResolutionError):
        BackupManager(backups_root=tmp_path).resolve_target("1")
    with pytest.raises(IdentityResolutionError):
        BackupManager(steam_root_path=tmp_path, backups_root=tmp_path).resolve_target("")


def test_write_with_backup_snapshots_previous_content(manager: BackupManager, steam_root: Path) -> None:
    target = _target(steam_root)
    manager.write_with_backup(target, [SteamShortcut(app_name="First", exe="a")])
    manager.write_with_backup(target, [SteamShortcut(app_name="Second", exe="b")])

    assert [s.app_name for s in read_shortcuts(target)] == ["Second"]
    backups = manager.list_backups("123456789")
    assert len(backups) == 1
    assert [s.app_name for s in read_shortcuts(backups[0])] == ["First"]


def test_write_with_backup_uses_default_identity_outside_userdata(
    manager: BackupManager, tmp_path: Path
) -> None:
    target = tmp_path / "loose" / "shortcuts.vdf"
    target.parent.mkdir()
    target.write_bytes(b"\x00shortcuts\x00\x08\x08")
    manager.write_with_backup(target, [])
    assert len(manager.list_backups("user")) == 1


def test_write_with_backup_text(manager: BackupManager, tmp_path: Path) -> None:
    target = tmp_path / "shortcuts.txt"
    manager.write_with_backup(target, [SteamShortcut(app_name="Text", exe="t")], text=True)
    assert [s.app_name for s in read_shortcuts_text(target)] == ["Text"]


def test_write_with_backup_still_writes_when_snapshot_fails(
    manager: BackupManager, steam_root: Path, caplog: pytest.LogCaptureFixture
) -> None:
    target = _target(steam_root)
    target.write_bytes(b"\x00shortcuts\x00\x08\x08")
    with mock.patch.object(BackupManager, "snapshot", side_effect=RuntimeError("boom")), \
            caplog.at_level(logging.WARNING):
        manager.write_with_backup(target, [SteamShortcut(app_name="Kept", exe="k")])

    assert [s.app_name for s in read_shortcuts(target)] == ["Kept"]
    assert "backup failed" in caplog.text


def test_list_backups_empty(manager: BackupManager) -> None:
    assert manager.list_backups("123456789") == []


def test_list_backups_ignores_other_files(manager: BackupManager, tmp_path: Path) -> None:
    folder = tmp_path / "backups" / "123456789"
    folder.mkdir(parents=True)
    (folder / "notes.txt").write_text("x")
    (folder / "shortcuts-20240101_000000.bak.vdf").write_bytes(b"x")
    assert [p.name for p in manager.list_backups("123456789")] == ["shortcuts-20240101_000000.bak.vdf"]


def test_list_backups_falls_back_to_legacy_folder(manager: BackupManager, tmp_path: Path) -> None:
    legacy = tmp_path / "backups" / "shortcuts"
    legacy.mkdir(parents=True)
    (legacy / "shortcuts-123456789-main-20230101.bak.vdf").write_bytes(b"old")
    (legacy / "shortcuts-555-main-20230101.bak.vdf").write_bytes(b"other user")

    backups = manager.list_backups("123456789")
    assert [p.name for p in backups] == ["shortcuts-123456789-main-20230101.bak.vdf"]


def test_backups_sorted_newest_first_by_name_on_equal_mtime(tmp_path: Path) -> None:
    folder = tmp_path / "backups" / "1"
    folder.mkdir(parents=True)
    names = [
        "shortcuts-20240101_000001.bak.vdf",
        "shortcuts-20240101_000003.bak.vdf",
        "shortcuts-20240101_000002.bak.vdf",
    ]
    for name in names:
        path = folder / name
        path.write_bytes(b"x")
        os.utime(path, ns=(1_000_000_000, 1_000_000_000))

    manager = BackupManager(backups_root=tmp_path / "backups")
    assert [p.name for p in manager.list_backups("1")] == sorted(names, reverse=True)


def test_snapshots_in_the_same_second_do_not_overwrite(tmp_path: Path) -> None:
    fixed = datetime(2024, 1, 1, 12, 0, 0)
    manager = BackupManager(backups_root=tmp_path / "backups", clock=lambda: fixed)
    source = tmp_path / "shortcuts.vdf"

    source.write_bytes(b"first")
    first = manager.snapshot(source, "1")
    source.write_bytes(b"second")
    second = manager.snapshot(source, "1")

    assert first.name == "shortcuts-20240101_120000.bak.vdf"
    assert second.name == "shortcuts-20240101_120000_1.bak.vdf"
    assert first.read_bytes() == b"first"
    assert manager.list_backups("1")[0] == second


def test_same_second_counter_sorts_numerically_on_equal_mtime(tmp_path: Path) -> None:
    folder = tmp_path / "backups" / "1"
    folder.mkdir(parents=True)
    names = [
        "shortcuts-20240101_120000_2.bak.vdf",
        "shortcuts-20240101_120000.bak.vdf",
        "shortcuts-20240101_120000_10.bak.vdf",
        "shortcuts-20240101_115959_11.bak.vdf",
    ]
    for name in names:
        path = folder / name
        path.write_bytes(b"x")
        os.utime(path, ns=(1_000_000_000, 1_000_000_000))

    manager = BackupManager(backups_root=tmp_path / "backups")
    assert [p.name for p in manager.list_backups("1")] == [
        "shortcuts-20240101_120000_10.bak.vdf",
        "shortcuts-20240101_120000_2.bak.vdf",
        "shortcuts-20240101_120000.bak.vdf",
        "shortcuts-20240101_115959_11.bak.vdf",
    ]


def test_many_same_second_snapshots_keep_the_newest(tmp_path: Path) -> None:
    fixed = datetime(2024, 1, 1, 12, 0, 0)
    manager = BackupManager(backups_root=tmp_path / "backups", clock=lambda: fixed)
    source = tmp_path / "shortcuts.vdf"
    for i in range(12):
        source.write_bytes(f"v{i}".encode())
        manager.snapshot(source, "1")

    backups = manager.list_backups("1")
    assert [p.name for p in backups] == [
        f"shortcuts-20240101_120000_{n}.bak.vdf" for n in (11, 10, 9, 8, 7)
    ]
    assert [p.read_bytes() for p in backups] == [f"v{n}".encode() for n in (11, 10, 9, 8, 7)]


def test_counter_never_reuses_a_pruned_number(tmp_path: Path) -> None:
    fixed = datetime(2024, 1, 1, 12, 0, 0)
    manager = BackupManager(backups_root=tmp_path / "backups", max_backups=1, clock=lambda: fixed)
    source = tmp_path / "shortcuts.vdf"
    source.write_bytes(b"x")

    names = [manager.snapshot(source, "1").name for _ in range(3)]

    assert names == [
        "shortcuts-20240101_120000.bak.vdf",
        "shortcuts-20240101_120000_1.bak.vdf",
        "shortcuts-20240101_120000_2.bak.vdf",
    ]


def test_restore_oldest_of_full_backup_set(
    manager: BackupManager, steam_root: Path, tmp_path: Path
) -> None:
    source = tmp_path / "shortcuts.vdf"
    for i in range(5):
        source.write_bytes(f"v{i}".encode())
        manager.snapshot(source, "123456789")
    target = _target(steam_root)
    target.write_bytes(b"current")

    oldest = manager.list_backups("123456789")[-1]
    assert oldest.read_bytes() == b"v0"

    assert manager.restore(oldest, "123456789") is True

    assert target.read_bytes() == b"v0"
    assert oldest.is_file()
    backups = manager.list_backups("123456789")
    assert len(backups) == 5
    assert backups[0].read_bytes() == b"current"
    assert sorted(b.read_bytes() for b in backups) == [b"current", b"v0", b"v2", b"v3", b"v4"]
