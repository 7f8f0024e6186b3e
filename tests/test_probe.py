"""
Tests for the state prober — absent / current / stale by content hash.
"""

from pathlib import Path

import pytest

from cybex.adapters.shell.filesystem import LocalFilesystem
from cybex.core.models.target import InstallTarget, TargetState
from cybex.core.services.probe import file_digest, probe_target, stale_files, target_installed


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


@pytest.fixture
def fs() -> LocalFilesystem:
    return LocalFilesystem()


class TestFileTargets:
    def test_absent(self, tmp_path: Path, fs):
        target = InstallTarget(source=_write(tmp_path / "src", "a"), destination=tmp_path / "dst")
        assert probe_target(target, fs) is TargetState.ABSENT

    def test_current(self, tmp_path: Path, fs):
        target = InstallTarget(source=_write(tmp_path / "src", "a"), destination=_write(tmp_path / "dst", "a"))
        assert probe_target(target, fs) is TargetState.CURRENT

    def test_stale(self, tmp_path: Path, fs):
        target = InstallTarget(source=_write(tmp_path / "src", "a"), destination=_write(tmp_path / "dst", "b"))
        assert probe_target(target, fs) is TargetState.STALE

    def test_directory_in_place_of_file_is_stale(self, tmp_path: Path, fs):
        (tmp_path / "dst").mkdir()
        target = InstallTarget(source=_write(tmp_path / "src", "a"), destination=tmp_path / "dst")
        assert probe_target(target, fs) is TargetState.STALE

    def test_literal_content(self, tmp_path: Path, fs):
        target = InstallTarget(content=b"a", destination=_write(tmp_path / "dst", "a"))
        assert probe_target(target, fs) is TargetState.CURRENT

    def test_needs_exactly_one_source(self, tmp_path: Path):
        with pytest.raises(ValueError):
            InstallTarget(destination=tmp_path / "dst")
        with pytest.raises(ValueError):
            InstallTarget(source=tmp_path / "src", content=b"a", destination=tmp_path / "dst")

    def test_digest_is_sha256(self):
        assert file_digest(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestDirectoryTargets:
    def _source(self, tmp_path: Path) -> Path:
        src = tmp_path / "src"
        _write(src / "a.conf", "a")
        _write(src / "nested" / "b.conf", "b")
        _write(src / ".hidden", "h")
        return src

    def test_current_ignores_hidden_and_extra_files(self, tmp_path: Path, fs):
        src = self._source(tmp_path)
        dst = tmp_path / "dst"
        _write(dst / "a.conf", "a")
        _write(dst / "nested" / "b.conf", "b")
        _write(dst / "mine.conf", "extra")

        target = InstallTarget(source=src, destination=dst)
        assert probe_target(target, fs) is TargetState.CURRENT

    def test_missing_file_is_stale(self, tmp_path: Path, fs):
        src = self._source(tmp_path)
        dst = tmp_path / "dst"
        _write(dst / "a.conf", "a")

        target = InstallTarget(source=src, destination=dst)
        assert probe_target(target, fs) is TargetState.STALE
        assert stale_files(target, fs) == [Path("nested/b.conf")]

    def test_hidden_files_count_when_not_excluded(self, tmp_path: Path, fs):
        src = self._source(tmp_path)
        dst = tmp_path / "dst"
        _write(dst / "a.conf", "a")
        _write(dst / "nested" / "b.conf", "b")

        target = InstallTarget(source=src, destination=dst, exclude_hidden=False)
        assert probe_target(target, fs) is TargetState.STALE


class TestTargetInstalled:
    def test_without_source_checks_presence(self, tmp_path: Path, fs):
        target = InstallTarget(source=tmp_path / "gone", destination=_write(tmp_path / "dst", "x"))
        assert target_installed(target, fs) is True

    def test_without_source_or_destination(self, tmp_path: Path, fs):
        target = InstallTarget(source=tmp_path / "gone", destination=tmp_path / "dst")
        assert target_installed(target, fs) is False

    def test_stale_is_not_installed(self, tmp_path: Path, fs):
        target = InstallTarget(source=_write(tmp_path / "src", "a"), destination=_write(tmp_path / "dst", "b"))
        assert target_installed(target, fs) is False
