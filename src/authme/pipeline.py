"""
GenerationPipeline: run every step of ``authme add`` as one recoverable unit.

Steps and failure policy:

    generate        templated files          failed  -> roll back, abort
    ast-app-module  app.module.ts imports    failed  -> roll back, abort
    ast-main-ts     main.ts guards/pipes     warning -> continue
    package-json    dependencies             failed  -> roll back, abort
    prisma-schema   auth models (Prisma)     warning -> continue
    install-deps    package manager install  warning -> continue

All steps up to prisma-schema share one BackupLedger. An aborting failure
restores every file touched so far; success discards all backups.
"""

import threading
import time
from pathlib import Path
from typing import Callable, List, Optional

from authme.exceptions import GenerationBusyError, ProjectValidationError
from authme.generator import Generator, TemplateEngine
from authme.installer import (
    AppModuleUpdater,
    DependencyInstaller,
    MainTsUpdater,
    PackageUpdater,
    PrismaSchemaUpdater,
)
from authme.logging_config import logger
from authme.mutation import BackupLedger, ConflictCheckedWriter, MutationFacade
from authme.schemas import (
    GenerationConfig,
    GenerationResult,
    ModifiedFile,
    PreviewResult,
    ProgressEvent,
    ProgressStatus,
    ProjectInfo,
)

Observer = Callable[[ProgressEvent], None]


class GenerationPipeline:
    """
    Event-emitting generation pipeline.

    Only one generation runs at a time per pipeline; a concurrent request is
    rejected with GenerationBusyError rather than queued.
    """

    def __init__(
        self,
        template_engine: Optional[TemplateEngine] = None,
        installer: Optional[DependencyInstaller] = None,
    ):
        self.template_engine = template_engine or TemplateEngine()
        self.installer = installer or DependencyInstaller()
        self._observers: List[Observer] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """
        Register a progress observer.

        Returns:
            A function that unregisters the observer
        """
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def _emit(self, step: str, label: str, status: ProgressStatus, detail: Optional[str] = None) -> None:
        event = ProgressEvent(step=step, label=label, status=status, detail=detail, timestamp=time.time())
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception as e:
                logger.warning(f"Progress observer failed on {step}/{status}: {e}")

    def preview(self, config: GenerationConfig, project: ProjectInfo) -> PreviewResult:
        """Dry run: rendered files plus the existing files that would be edited."""
        files = Generator(self.template_engine).preview(config, project)

        modified_files = [
            ModifiedFile(
                path=f"{config.source_root}/app.module.ts",
                description="Add ConfigModule, AuthModule, UsersModule imports",
            ),
            ModifiedFile(
                path=f"{config.source_root}/main.ts",
                description="Add global JWT guard, ValidationPipe, Swagger setup",
            ),
            ModifiedFile(path="package.json", description="Add authentication dependencies"),
        ]
        if config.orm == "prisma":
            modified_files.append(
                ModifiedFile(path="prisma/schema.prisma", description="Add User and RefreshToken models")
            )

        return PreviewResult(
            files=files,
            modified_files=modified_files,
            total_files=len(files) + len(modified_files),
        )

    def generate(self, config: GenerationConfig, project: ProjectInfo, overwrite: bool = False) -> GenerationResult:
        """
        Run the full pipeline.

        Raises:
            ProjectValidationError: If the prober rejected the project
            GenerationBusyError: If a generation is already in flight
        """
        if not project.is_valid:
            raise ProjectValidationError("Not a valid NestJS project", project.errors)
        if not self._lock.acquire(blocking=False):
            raise GenerationBusyError("A generation is already in progress")
        try:
            return self._run(config, project, overwrite)
        finally:
            self._lock.release()

    def _run(self, config: GenerationConfig, project: ProjectInfo, overwrite: bool) -> GenerationResult:
        errors: List[str] = []
        warnings: List[str] = []
        ledger = BackupLedger()
        writer = ConflictCheckedWriter(ledger=ledger)
        facade = MutationFacade(ledger=ledger)

        # Step 1: templated files
        self._emit("generate", "Generating files from templates...", "started")
        result = Generator(self.template_engine).generate(
            config, project, overwrite=overwrite, writer=writer, commit=False
        )
        if not result.success:
            detail = result.errors[0] if result.errors else "Unknown error"
            self._emit("generate", "File generation failed", "failed", detail)
            return GenerationResult(success=False, errors=result.errors or [detail], warnings=warnings)
        self._emit("generate", f"Generated {len(result.files_created)} files", "completed")

        def abort(step: str, label: str, error: Exception) -> GenerationResult:
            message = str(error)
            logger.error(f"{label}: {message}")
            self._emit(step, label, "failed", message)
            writer.rollback_all()
            errors.append(message)
            return GenerationResult(
                success=False,
                files_created=[],
                files_skipped=result.files_skipped,
                errors=errors,
                warnings=warnings,
            )

        # Step 2: app.module.ts
        self._emit("ast-app-module", "Updating app.module.ts...", "started")
        try:
            AppModuleUpdater(project.app_module_path, facade=facade).update(config, commit=False)
        except Exception as e:
            return abort("ast-app-module", "Failed to update app.module.ts", e)
        self._emit("ast-app-module", "Updated app.module.ts", "completed")

        # Step 3: main.ts
        self._emit("ast-main-ts", "Updating main.ts...", "started")
        try:
            MainTsUpdater(project.main_ts_path, facade=facade).update(config, commit=False)
            self._emit("ast-main-ts", "Updated main.ts", "completed")
        except Exception as e:
            logger.warning(f"Could not auto-update main.ts: {e}")
            self._emit("ast-main-ts", "Could not auto-update main.ts", "warning", str(e))
            warnings.append("Could not auto-update main.ts - see main.ts.example for manual setup")

        # Step 4: package.json
        self._emit("package-json", "Updating package.json...", "started")
        try:
            PackageUpdater(project.package_json_path, ledger=ledger).update(config, commit=False)
        except Exception as e:
            return abort("package-json", "Failed to update package.json", e)
        self._emit("package-json", "Updated package.json", "completed")

        # Step 5: prisma/schema.prisma
        if config.orm == "prisma":
            self._emit("prisma-schema", "Updating prisma/schema.prisma...", "started")
            schema_path = Path(project.root) / "prisma" / "schema.prisma"
            try:
                update = PrismaSchemaUpdater(
                    str(schema_path), template_engine=self.template_engine, ledger=ledger
                ).update(config, commit=False)
                if update.updated:
                    self._emit("prisma-schema", update.message, "completed")
                else:
                    self._emit("prisma-schema", "Prisma schema not updated", "warning", update.message)
                    warnings.append(update.message)
            except Exception as e:
                logger.warning(f"Could not update prisma/schema.prisma: {e}")
                self._emit("prisma-schema", "Could not update prisma/schema.prisma", "warning", str(e))
                warnings.append("Could not update prisma/schema.prisma - see prisma-schema-additions.prisma")

        writer.cleanup_all()

        # Step 6: dependencies
        if config.auto_install:
            self._emit("install-deps", "Installing dependencies...", "started")
            try:
                manager = self.installer.install(project.root, capture=True)
                self._emit("install-deps", f"Dependencies installed with {manager}", "completed")
            except Exception as e:
                logger.warning(f"Dependency installation failed: {e}")
                self._emit("install-deps", "Failed to install dependencies", "warning", str(e))
                warnings.append("Failed to install dependencies - run npm install manually")

        logger.info(f"Generation finished: {len(result.files_created)} file(s), {len(warnings)} warning(s)")
        return GenerationResult(
            success=True,
            files_created=result.files_created,
            files_skipped=result.files_skipped,
            errors=errors,
            warnings=warnings,
        )
