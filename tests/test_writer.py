"""
Tests for ConflictCheckedWriter and atomic_write.
"""

import pytest

from authme.exceptions import FileConflictError
from authme.mutation import BackupLedger, ConflictCheckedWriter, atomic_write


class TestConflictCheckedWriter:
    """Write-if-absent semantics and rollback."""

    def test_writes_new_file_and_creates_parents(self, tmp_path):
        writer = ConflictCheckedWriter()
        target = tmp_path / "src" / "auth" / "guards" / "jwt-auth.guard.ts"

        assert writer.write(target, "export class JwtAuthGuard {}\n")

        assert target.read_text() == "export class JwtAuthGuard {}\n"
        assert writer.get_written_files() == [str(target)]

    def test_existing_file_is_a_conflict(self, tmp_path):
        target = tmp_path / "auth.module.ts"
        target.write_text("mine")
        mtime = target.stat().st_mtime_ns

        writer = ConflictCheckedWriter()
        with pytest.raises(FileConflictError) as exc_info:
            writer.write(target, "generated")

        assert isinstance(exc_info.value, FileExistsError)
        assert exc_info.value.file_path == str(target)
        assert target.read_text() == "mine"
        assert target.stat().st_mtime_ns == mtime
        assert not (tmp_path / "auth.module.ts.backup").exists()

    def test_tolerated_conflict_is_skipped(self, tmp_path):
        target = tmp_path / ".env"
        target.write_text("SECRET=mine")

        writer = ConflictCheckedWriter()
        assert writer.write(target, "SECRET=generated", tolerate_conflict=True) is False

        assert target.read_text() == "SECRET=mine"
        assert writer.get_skipped_files() == [str(target)]
        assert writer.get_written_files() == []

    def test_overwrite_backs_up_and_rollback_restores(self, tmp_path):
        target = tmp_path / "auth.module.ts"
        target.write_text("mine")

        writer = ConflictCheckedWriter()
        writer.write(target, "generated", overwrite=True)
        assert target.read_text() == "generated"
        assert (tmp_path / "auth.module.ts.backup").read_text() == "mine"

        writer.rollback_all()

        assert target.read_text() == "mine"
        assert not (tmp_path / "auth.module.ts.backup").exists()

    def test_rollback_removes_new_files_and_created_directories(self, tmp_path):
        writer = ConflictCheckedWriter()
        writer.write(tmp_path / "src" / "auth" / "dto" / "login.dto.ts", "a")
        writer.write(tmp_path / "src" / "users" / "users.module.ts", "b")

        writer.rollback_all()

        assert list(tmp_path.iterdir()) == []
        assert writer.get_written_files() == []

    def test_rollback_keeps_preexisting_directories(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "main.ts").write_text("x")

        writer = ConflictCheckedWriter()
        writer.write(tmp_path / "src" / "auth" / "auth.module.ts", "a")
        writer.rollback_all()

        assert (tmp_path / "src" / "main.ts").exists()
        assert not (tmp_path / "src" / "auth").exists()

    def test_cleanup_all_keeps_files_and_drops_backups(self, tmp_path):
        existing = tmp_path / "a.ts"
        existing.write_text("old")

        writer = ConflictCheckedWriter()
        writer.write(existing, "new", overwrite=True)
        writer.write(tmp_path / "b.ts", "b")
        writer.cleanup_all()

        assert existing.read_text() == "new"
        assert (tmp_path / "b.ts").read_text() == "b"
        assert not list(tmp_path.glob("*.backup"))

    def test_cleanup_all_starts_a_fresh_run(self, tmp_path):
        writer = ConflictCheckedWriter()
        writer.write(tmp_path / "a.ts", "a")
        (tmp_path / "b.env").write_text("mine")
        writer.write(tmp_path / "b.env", "x", tolerate_conflict=True)
        writer.cleanup_all()

        assert writer.get_written_files() == []
        assert writer.get_skipped_files() == []

        writer.write(tmp_path / "b.ts", "b")
        assert writer.get_written_files() == [str(tmp_path / "b.ts")]
        writer.rollback_all()

        assert (tmp_path / "a.ts").read_text() == "a"
        assert not (tmp_path / "b.ts").exists()

    def test_shared_ledger_sees_writes(self, tmp_path):
        ledger = BackupLedger()
        writer = ConflictCheckedWriter(ledger=ledger)
        writer.write(tmp_path / "a.ts", "a")

        assert ledger.has(tmp_path / "a.ts")

        ledger.rollback_all()
        assert not (tmp_path / "a.ts").exists()

    def test_writing_same_path_twice_keeps_first_backup(self, tmp_path):
        target = tmp_path / "a.ts"
        target.write_text("original")

        writer = ConflictCheckedWriter()
        writer.write(target, "first", overwrite=True)
        writer.write(target, "second", overwrite=True)
        writer.rollback_all()

        assert target.read_text() == "original"


class TestAtomicWrite:

    def test_replaces_content_and_leaves_no_temp_files(self, tmp_path):
        target = tmp_path / "package.json"
        target.write_text("{}")

        atomic_write(target, '{"name": "x"}\n')

        assert target.read_text() == '{"name": "x"}\n'
        assert [p.name for p in tmp_path.iterdir()] == ["package.json"]

    def test_preserves_crlf(self, tmp_path):
        target = tmp_path / "main.ts"
        atomic_write(target, "a\r\nb\r\n")

        assert target.read_bytes() == b"a\r\nb\r\n"
