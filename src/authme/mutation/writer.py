"""
ConflictCheckedWriter: Write generated files without clobbering prior work.

Every write is registered with a BackupLedger so a whole plan can be rolled
back as one unit.
"""

import os
import tempfile
from pathlib import Path
from typing import List, Optional

from authme.exceptions import FileConflictError
from authme.logging_config import logger
from .config import MUTATION_CONFIG
from .ledger import BackupLedger


class ConflictCheckedWriter:
    """
    Write files only when absent, or when overwrite is explicitly authorized.

    Features:
    - FileConflictError (a FileExistsError) on unauthorized overwrite
    - Backups through the shared BackupLedger
    - Parent directories created on demand (and removed again on rollback)
    - Atomic writes (temp file + rename)
    """

    def __init__(self, ledger: Optional[BackupLedger] = None, config: Optional[dict] = None):
        """
        Initialize writer.

        Args:
            ledger: Ledger to register backups with (a private one if omitted)
            config: Optional config overrides (merges with MUTATION_CONFIG)
        """
        self.config = {**MUTATION_CONFIG, **(config or {})}
        self.ledger = ledger or BackupLedger(self.config)
        self.written: List[str] = []
        self.skipped: List[str] = []
        self._created_dirs: List[Path] = []

    def write(
        self,
        file_path,
        content: str,
        overwrite: bool = False,
        tolerate_conflict: bool = False,
    ) -> bool:
        """
        Write ``content`` to ``file_path``.

        Args:
            file_path: Destination path
            content: Text to write
            overwrite: Allow replacing an existing file (backed up first)
            tolerate_conflict: Record a conflict as skipped instead of raising

        Returns:
            True if the file was written, False if it was skipped

        Raises:
            FileConflictError: If the file exists and neither flag allows it
        """
        path = Path(file_path)

        if path.exists() and not overwrite:
            if tolerate_conflict:
                logger.debug(f"Skipping existing file {path}")
                self.skipped.append(str(path))
                return False
            raise FileConflictError(str(path))

        if not self.ledger.has(path):
            self.ledger.begin(path)

        self._ensure_parent(path)
        self._atomic_write(path, content)
        self.written.append(str(path))
        logger.debug(f"Wrote {path}")
        return True

    def rollback_all(self) -> None:
        """
        Undo every write since the last cleanup_all().

        Restores overwritten files from their backups, deletes newly created
        files and removes directories this writer created if they are empty.
        """
        self.ledger.rollback_all()

        for directory in sorted(self._created_dirs, key=lambda d: len(d.parts), reverse=True):
            try:
                directory.rmdir()
            except OSError:
                logger.debug(f"Leaving non-empty directory {directory}")

        logger.info(f"Rolled back {len(self.written)} written file(s)")
        self._reset()

    def cleanup_all(self) -> None:
        """Discard all backups, keeping the new files."""
        self.ledger.commit_all()
        self._reset()

    def get_written_files(self) -> List[str]:
        return list(self.written)

    def get_skipped_files(self) -> List[str]:
        return list(self.skipped)

    def _reset(self) -> None:
        self.written = []
        self.skipped = []
        self._created_dirs = []

    def _ensure_parent(self, path: Path) -> None:
        missing = []
        parent = path.parent
        while not parent.exists():
            missing.append(parent)
            parent = parent.parent
        if missing:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._created_dirs.extend(missing)

    def _atomic_write(self, path: Path, content: str) -> None:
        atomic_write(path, content, encoding=self.config["encoding"])


def atomic_write(path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write via a temp file in the same directory, then rename over the target.

    Args:
        path: Destination
        content: Text to write
        encoding: Text encoding
    """
    fd, temp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(content)
        os.chmod(temp_path, 0o644)
        os.replace(temp_path, str(path))
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
