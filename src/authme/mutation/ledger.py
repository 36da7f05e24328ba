"""
BackupLedger: Track one backup sidecar per mutated file.

Every filesystem write in a generation run goes through a ledger so that a
failure at any step can put the target project back exactly as it was.
"""

import shutil
from pathlib import Path
from typing import Dict, List, Optional

from authme.exceptions import BackupInProgressError
from authme.logging_config import logger
from authme.schemas import BackupRecord
from .config import MUTATION_CONFIG


class BackupLedger:
    """
    Keyed map of in-flight backups, owned by one pipeline run.

    Lifecycle per path:
    - begin(): copy the original to ``<path><suffix>`` (or note that there
      was no original)
    - commit(): drop the sidecar, keep the new content
    - rollback(): copy the sidecar back (or delete the newly created file)

    A crash between begin() and commit()/rollback() can leave a stray
    sidecar file behind; it is never cleaned up implicitly.
    """

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize an empty ledger.

        Args:
            config: Optional config overrides (merges with MUTATION_CONFIG)
        """
        self.config = {**MUTATION_CONFIG, **(config or {})}
        self._records: Dict[str, BackupRecord] = {}

    @staticmethod
    def _key(file_path) -> str:
        return str(Path(file_path).absolute())

    def backup_path_for(self, file_path) -> Path:
        """Sidecar path used for ``file_path``."""
        path = Path(file_path)
        return path.with_name(path.name + self.config["backup_suffix"])

    def has(self, file_path) -> bool:
        """True if ``file_path`` has an active backup record."""
        return self._key(file_path) in self._records

    def records(self) -> List[BackupRecord]:
        """Active records, in the order they were taken."""
        return list(self._records.values())

    def begin(self, file_path) -> BackupRecord:
        """
        Take a backup of ``file_path`` before its first mutation.

        Args:
            file_path: File about to be mutated or created

        Returns:
            The new BackupRecord

        Raises:
            BackupInProgressError: If the path already has an active record
        """
        key = self._key(file_path)
        if key in self._records:
            raise BackupInProgressError(str(file_path))

        path = Path(file_path)
        backup_path = self.backup_path_for(path)
        existed = path.exists()

        if existed:
            shutil.copy2(path, backup_path)
            logger.debug(f"Backed up {path} -> {backup_path}")
        else:
            logger.debug(f"No prior file at {path}, rollback will delete it")

        record = BackupRecord(
            original_path=str(path),
            backup_path=str(backup_path),
            existed_before=existed,
        )
        self._records[key] = record
        return record

    def commit(self, file_path) -> None:
        """
        Discard the backup of ``file_path`` and forget the record.

        Args:
            file_path: File whose mutation succeeded
        """
        record = self._records.pop(self._key(file_path), None)
        if record is None:
            return

        backup_path = Path(record.backup_path)
        if backup_path.exists():
            backup_path.unlink()
        logger.debug(f"Committed {record.original_path}")

    def rollback(self, file_path) -> None:
        """
        Restore ``file_path`` to its pre-mutation state.

        Copies the sidecar back over the original, or deletes the file when
        it did not exist before begin().

        Args:
            file_path: File whose mutation failed
        """
        record = self._records.pop(self._key(file_path), None)
        if record is None:
            return

        original = Path(record.original_path)
        backup_path = Path(record.backup_path)

        if backup_path.exists():
            shutil.copy2(backup_path, original)
            backup_path.unlink()
            logger.info(f"Restored {original} from backup")
        elif not record.existed_before and original.exists():
            original.unlink()
            logger.info(f"Removed newly created {original}")

    def commit_all(self) -> None:
        """Discard every backup, keeping the new files."""
        for record in list(self._records.values()):
            self.commit(record.original_path)

    def rollback_all(self) -> None:
        """Restore every file touched since the last commit_all(), newest first."""
        for record in reversed(list(self._records.values())):
            self.rollback(record.original_path)
