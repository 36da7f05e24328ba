"""
Generator: render the generation plan into the target project.
"""

from pathlib import Path
from typing import List, Optional

from authme.logging_config import logger
from authme.mutation import ConflictCheckedWriter
from authme.schemas import GenerationConfig, GenerationResult, PreviewFile, ProjectInfo

from .plan import applicable_plan
from .template_engine import TemplateEngine


class Generator:
    """
    Render every applicable plan entry and write it through a
    ConflictCheckedWriter.

    Generation is all-or-nothing: any render or write error rolls back every
    file written so far (overwritten files restored, new files and the
    directories created for them removed).
    """

    def __init__(self, template_engine: Optional[TemplateEngine] = None):
        self.template_engine = template_engine or TemplateEngine()

    def generate(
        self,
        config: GenerationConfig,
        project: ProjectInfo,
        overwrite: bool = False,
        writer: Optional[ConflictCheckedWriter] = None,
        commit: bool = True,
    ) -> GenerationResult:
        """
        Generate all files of the plan.

        Args:
            config: Generation configuration
            project: Target project
            overwrite: Replace files that already exist (backed up first)
            writer: Writer to use; pass one sharing the pipeline's ledger
                together with ``commit=False`` to keep the backups for a later
                rollback
            commit: Discard backups once every file is written

        Returns:
            GenerationResult; ``success`` is False after a rollback
        """
        writer = writer or ConflictCheckedWriter()
        root = Path(project.root)

        try:
            for spec in applicable_plan(config):
                content = self.template_engine.render(spec.template, config)
                writer.write(
                    root / spec.output,
                    content,
                    overwrite=overwrite and not spec.keep_existing,
                    tolerate_conflict=spec.keep_existing,
                )
        except Exception as e:
            logger.error(f"Generation failed: {e}")
            writer.rollback_all()
            return GenerationResult(success=False, errors=[str(e)])

        files_created = writer.get_written_files()
        files_skipped = writer.get_skipped_files()
        if commit:
            writer.cleanup_all()

        logger.info(f"Generated {len(files_created)} file(s), skipped {len(files_skipped)}")
        return GenerationResult(
            success=True,
            files_created=files_created,
            files_skipped=files_skipped,
        )

    def preview(self, config: GenerationConfig, project: ProjectInfo) -> List[PreviewFile]:
        """Render the plan without touching the filesystem."""
        root = Path(project.root)
        files = []
        for spec in applicable_plan(config):
            content = self.template_engine.render(spec.template, config)
            files.append(PreviewFile(
                path=spec.output,
                content=content,
                is_new=not (root / spec.output).exists(),
            ))
        return files
