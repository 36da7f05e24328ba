"""
PrismaSchemaUpdater: Append the auth models to ``prisma/schema.prisma``.
"""

import re
import subprocess
import shutil
from pathlib import Path
from typing import Optional

from authme.generator.template_engine import TemplateEngine
from authme.logging_config import logger
from authme.mutation import BackupLedger, atomic_write
from authme.schemas import GenerationConfig, PrismaUpdateResult

SEPARATOR = "\n\n// === Auth models (added by authme) ===\n\n"


def _has_model(content: str, name: str) -> bool:
    return re.search(rf"^\s*model\s+{name}\s*\{{", content, re.MULTILINE) is not None


def _strip_model(content: str, name: str) -> str:
    return re.sub(rf"model\s+{name}\s*\{{[^}}]*\}}\n?", "", content, flags=re.DOTALL)


class PrismaSchemaUpdater:
    """
    Add ``User`` and ``RefreshToken`` models that the schema does not define yet.

    A missing schema is not an error; the result says what to do instead.
    """

    def __init__(self, schema_path: str, template_engine=None, ledger: Optional[BackupLedger] = None):
        self.schema_path = Path(schema_path)
        self.template_engine = template_engine or TemplateEngine()
        self.ledger = ledger or BackupLedger()

    def update(self, config: GenerationConfig, commit: bool = True) -> PrismaUpdateResult:
        if not self.schema_path.is_file():
            return PrismaUpdateResult(
                updated=False,
                message='prisma/schema.prisma not found. Run "npx prisma init" first, then re-run authme.',
            )

        existing = self.schema_path.read_text(encoding="utf-8")
        has_user = _has_model(existing, "User")
        has_refresh = _has_model(existing, "RefreshToken")

        skipped = []
        if has_user:
            skipped.append("User")
        if has_refresh and config.features.refresh_tokens:
            skipped.append("RefreshToken")

        needs_user = not has_user
        needs_refresh = config.features.refresh_tokens and not has_refresh
        if not needs_user and not needs_refresh:
            return PrismaUpdateResult(
                updated=False,
                message=(
                    f"Models already exist in schema.prisma: {', '.join(skipped)}. "
                    "Please check that your existing models have all required auth fields."
                ),
                skipped_models=skipped,
            )

        models = self.template_engine.render("prisma/schema.prisma.models", config)
        if has_user:
            models = _strip_model(models, "User")
        if has_refresh:
            models = _strip_model(models, "RefreshToken")
        models = re.sub(r"\n{3,}", "\n\n", models).strip()

        self.ledger.begin(self.schema_path)
        try:
            atomic_write(self.schema_path, existing.rstrip() + SEPARATOR + models + "\n")
        except Exception:
            self.ledger.rollback(self.schema_path)
            raise
        if commit:
            self.ledger.commit(self.schema_path)

        self._try_prisma_format()

        added = [name for name, needed in (("User", needs_user), ("RefreshToken", needs_refresh)) if needed]
        message = f"Added {', '.join(added)} model(s) to prisma/schema.prisma"
        if skipped:
            message += f". Skipped existing: {', '.join(skipped)} (check for missing auth fields)"
        logger.info(message)
        return PrismaUpdateResult(updated=True, message=message, skipped_models=skipped)

    def _try_prisma_format(self) -> None:
        """Run ``npx prisma format`` when available; formatting is optional."""
        if not shutil.which("npx"):
            return
        try:
            subprocess.run(
                ["npx", "prisma", "format"],
                cwd=str(self.schema_path.parent.parent),
                capture_output=True,
                timeout=15,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.debug(f"prisma format skipped: {e}")
