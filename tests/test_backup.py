"""
Tests for the backup manager — naming, listing, latest selection, restore.
"""

import logging
from datetime import datetime
from pathlib import Path

import pytest

from cybex.adapters.shell.filesystem import LocalFilesystem
from cybex.core.models.backup import BackupRecord
from cybex.core.services.backup import BackupManager, backup_path_for


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


# ── Naming ──────────────────────────────────────────────────────────


class TestBackupPath:
    def test_suffix_is_fourteen_digit_timestamp(self):
        path = backup_path_for(Path("/etc/keyd/default.conf"), datetime(2024, 1, 2, 3, 4, 5))
        assert path == Path("/etc/keyd/default.conf.bak.20240102030405")

    def test_record_stamp(self):
        record = BackupRecord(
            original_path=Path("/a"),
            backup_path=Path("/a.bak.20240102030405"),
            created_at=datetime(2024, 1, 2, 3, 4, 5),
        )
        assert record.stamp == "20240102030405"


# ── Backup ──────────────────────────────────────────────────────────


class TestBackup:
    def test_missing_path_returns_none(self, tmp_path: Path, clock):
        manager = BackupManager(LocalFilesystem(), clock=clock)
        assert manager.backup(tmp_path / "nope.conf") is None
        assert list(tmp_path.iterdir()) == []

    def test_file_is_copied_aside(self, tmp_path: Path, clock):
        original = _write(tmp_path / "kitty.conf", "old settings\n")
        record = BackupManager(LocalFilesystem(), clock=clock).backup(original)

        assert record is not None
        assert record.backup_path == tmp_path / "kitty.conf.bak.20250314092653"
        assert record.backup_path.read_text() == "old settings\n"
        assert original.read_text() == "old settings\n"
        assert record.created_at == clock.now

    def test_directory_is_copied_recursively(self, tmp_path: Path, clock):
        _write(tmp_path / "custom" / "keybinds.conf", "bind\n")
        _write(tmp_path / "custom" / "sub" / "rules.conf", "rule\n")

        record = BackupManager(LocalFilesystem(), clock=clock).backup(tmp_path / "custom")

        assert record is not None
        assert (record.backup_path / "keybinds.conf").read_text() == "bind\n"
        assert (record.backup_path / "sub" / "rules.conf").read_text() == "rule\n"

    def test_same_second_backup_replaces_earlier(self, tmp_path: Path, clock, caplog):
        original = _write(tmp_path / "a.conf", "first\n")
        manager = BackupManager(LocalFilesystem(), clock=clock)
        manager.backup(original)

        original.write_text("second\n")
        with caplog.at_level(logging.WARNING, logger="cybex.core.services.backup"):
            record = manager.backup(original)

        assert record is not None
        assert record.backup_path.read_text() == "second\n"
        assert len(manager.list_backups(original)) == 1
        assert "already exists" in caplog.text


# ── Listing ─────────────────────────────────────────────────────────


class TestListBackups:
    def test_oldest_first(self, tmp_path: Path, clock):
        original = _write(tmp_path / "a.conf", "v1\n")
        manager = BackupManager(LocalFilesystem(), clock=clock)
        manager.backup(original)
        clock.advance(60)
        manager.backup(original)

        stamps = [r.stamp for r in manager.list_backups(original)]
        assert stamps == ["20250314092653", "20250314092753"]

    def test_ignores_malformed_suffixes(self, tmp_path: Path):
        original = _write(tmp_path / "a.conf", "v\n")
        _write(tmp_path / "a.conf.bak.2024", "short")
        _write(tmp_path / "a.conf.bak.20241301000000", "month 13")
        _write(tmp_path / "a.conf.bak.20240101000000.orig", "trailing")
        _write(tmp_path / "a.conf.bak.20240101000000", "good")
        _write(tmp_path / "b.conf.bak.20250101000000", "other file")

        records = BackupManager(LocalFilesystem()).list_backups(original)
        assert [r.backup_path.name for r in records] == ["a.conf.bak.20240101000000"]

    def test_no_parent_directory(self, tmp_path: Path):
        manager = BackupManager(LocalFilesystem())
        assert manager.list_backups(tmp_path / "missing" / "a.conf") == []

    def test_latest_is_greatest_suffix(self, tmp_path: Path):
        original = _write(tmp_path / "a.conf", "current\n")
        _write(tmp_path / "a.conf.bak.20231231235959", "older")
        _write(tmp_path / "a.conf.bak.20240601120000", "newest")
        _write(tmp_path / "a.conf.bak.20240101000000", "middle")

        latest = BackupManager(LocalFilesystem()).find_latest_backup(original)
        assert latest is not None
        assert latest.backup_path.read_text() == "newest"

    def test_latest_none_without_backups(self, tmp_path: Path):
        original = _write(tmp_path / "a.conf", "current\n")
        assert BackupManager(LocalFilesystem()).find_latest_backup(original) is None


# ── Restore ─────────────────────────────────────────────────────────


class TestRestore:
    def test_restore_file_keeps_backup(self, tmp_path: Path, clock):
        original = _write(tmp_path / "a.conf", "mine\n")
        manager = BackupManager(LocalFilesystem(), clock=clock)
        record = manager.backup(original)
        original.write_text("theirs\n")

        manager.restore(record)

        assert original.read_text() == "mine\n"
        assert record.backup_path.exists()

    def test_restore_directory_replaces_tree(self, tmp_path: Path, clock):
        original = tmp_path / "custom"
        _write(original / "keep.conf", "mine\n")
        manager = BackupManager(LocalFilesystem(), clock=clock)
        record = manager.backup(original)

        _write(original / "keep.conf", "theirs\n")
        _write(original / "added.conf", "extra\n")
        manager.restore(record)

        assert (original / "keep.conf").read_text() == "mine\n"
        assert not (original / "added.conf").exists()

    def test_restore_recreates_deleted_original(self, tmp_path: Path, clock):
        original = _write(tmp_path / "a.conf", "mine\n")
        manager = BackupManager(LocalFilesystem(), clock=clock)
        record = manager.backup(original)
        original.unlink()

        manager.restore(record)
        assert original.read_text() == "mine\n"

    def test_restore_missing_backup_raises(self, tmp_path: Path):
        record = BackupRecord(
            original_path=tmp_path / "a.conf",
            backup_path=tmp_path / "a.conf.bak.20240101000000",
            created_at=datetime(2024, 1, 1),
        )
        with pytest.raises(FileNotFoundError):
            BackupManager(LocalFilesystem()).restore(record)
