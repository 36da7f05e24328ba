"""
MutationFacade: Orchestrate one backed-up AST mutation of one file.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional

from authme.exceptions import SourceNotFoundError
from authme.logging_config import logger
from authme.schemas import MutationResult

from .config import MUTATION_CONFIG
from .formatter import CodeFormatter
from .ledger import BackupLedger
from .source_model import SourceModel, load_source_model
from .writer import atomic_write

Edit = Callable[[SourceModel], Any]


class MutationFacade:
    """
    Main facade for source mutation.

    Orchestrates the pipeline for one file:
    1. Take backup (BackupLedger)
    2. Load source model (tree-sitter)
    3. Apply edits (ImportManager, DecoratorArrayEditor, BootstrapInjector, ...)
    4. Re-check syntax of the result
    5. Write back, preserving line endings
    6. Optionally run the external formatter
    7. Commit the backup, or restore it and re-raise on any failure

    The file on disk is either the old version or the new version; any
    exception between backup and save restores the backup.
    """

    def __init__(self, ledger: Optional[BackupLedger] = None, config: Optional[Dict[str, Any]] = None):
        """
        Initialize mutation facade.

        Args:
            ledger: Shared ledger (a private one if omitted)
            config: Optional config overrides
        """
        self.config = {**MUTATION_CONFIG, **(config or {})}
        self.ledger = ledger or BackupLedger(self.config)
        self.formatter = CodeFormatter(self.config)

    def mutate(self, file_path, *edits: Edit, commit: bool = True) -> MutationResult:
        """
        Apply ``edits`` to ``file_path`` under backup protection.

        Args:
            file_path: TypeScript file to mutate
            *edits: Callables receiving the loaded SourceModel
            commit: Discard the backup on success. Pass False to keep it in
                the ledger so a later step can still roll the file back.

        Returns:
            MutationResult describing what happened

        Raises:
            Whatever the loader or an edit raised, after the rollback
        """
        path = Path(file_path)
        if not path.is_file():
            raise SourceNotFoundError(str(path))

        self.ledger.begin(path)
        try:
            model = load_source_model(path, encoding=self.config["encoding"])
            for edit in edits:
                edit(model)

            if not model.modified:
                logger.debug(f"No changes needed for {path}")
                result = MutationResult(file_path=str(path), changed=False, state="unchanged")
            else:
                model.check_syntax()
                self._save(path, model)
                if self.config.get("auto_format_enabled"):
                    self.formatter.format_file(str(path))
                logger.info(f"Updated {path}")
                result = MutationResult(file_path=str(path), changed=True, state="saved")
        except Exception:
            logger.warning(f"Mutation of {path} failed, restoring backup")
            self.ledger.rollback(path)
            raise

        if commit:
            self.ledger.commit(path)
        return result

    def _save(self, path: Path, model: SourceModel) -> None:
        original = model.original.decode(model.encoding)
        content = self._normalize_line_endings(model.print(), self._detect_line_ending(original))

        atomic_write(path, content, encoding=model.encoding)

    def _detect_line_ending(self, content: str) -> str:
        if '\r\n' in content:
            return '\r\n'
        return '\n'

    def _normalize_line_endings(self, content: str, line_ending: str) -> str:
        content = content.replace('\r\n', '\n')
        if line_ending == '\r\n':
            content = content.replace('\n', '\r\n')
        return content
