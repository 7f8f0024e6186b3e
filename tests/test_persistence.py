"""
Tests for the audit ledger.
"""

import logging
from pathlib import Path

from cybex.core.persistence.audit import AuditEntry, AuditWriter


def _entry(op: str, status: str = "ok") -> AuditEntry:
    return AuditEntry(operation_id=op, mode="install", components=["screensaver"], status=status)


class TestAuditWriter:
    def test_write_and_read(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "state" / "audit.ndjson")
        writer.write(_entry("op-1"))
        writer.write(_entry("op-2", status="failed"))

        entries = writer.read_all()
        assert [e.operation_id for e in entries] == ["op-1", "op-2"]
        assert entries[1].status == "failed"
        assert writer.entry_count() == 2

    def test_in_state_dir(self, tmp_path: Path):
        writer = AuditWriter.in_state_dir(tmp_path)
        assert writer.path == tmp_path / "audit.ndjson"

    def test_missing_ledger(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "audit.ndjson")
        assert writer.read_all() == []
        assert writer.entry_count() == 0

    def test_corrupt_lines_are_skipped(self, tmp_path: Path, caplog):
        path = tmp_path / "audit.ndjson"
        writer = AuditWriter(path)
        writer.write(_entry("op-1"))
        with path.open("a") as f:
            f.write("{not json\n\n")
            f.write('{"steps_total": "many"}\n')
        writer.write(_entry("op-2"))

        with caplog.at_level(logging.WARNING):
            entries = writer.read_all()
        assert [e.operation_id for e in entries] == ["op-1", "op-2"]
        assert "line 2" in caplog.text

    def test_read_recent(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "audit.ndjson")
        for i in range(5):
            writer.write(_entry(f"op-{i}"))
        assert [e.operation_id for e in writer.read_recent(2)] == ["op-3", "op-4"]

    def test_unwritable_ledger_is_not_fatal(self, tmp_path: Path, caplog):
        blocker = tmp_path / "state"
        blocker.write_text("a file, not a directory")
        writer = AuditWriter(blocker / "audit.ndjson")

        with caplog.at_level(logging.ERROR):
            writer.write(_entry("op-1"))
        assert "Failed to write audit entry" in caplog.text
