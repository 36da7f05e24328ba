"""
AppModuleUpdater: Register the generated auth modules in ``app.module.ts``.
"""

from typing import List, Optional, Tuple

from authme.logging_config import logger
from authme.mutation import ArrayEntry, DecoratorArrayEditor, ImportManager, MutationFacade, SourceModel
from authme.schemas import GenerationConfig, MutationResult


def required_imports(config: GenerationConfig) -> List[Tuple[str, List[str]]]:
    """(module path, names) pairs the module file must import."""
    imports = [("@nestjs/config", ["ConfigModule"])]
    if config.features.rate_limiting:
        imports.append(("@nestjs/throttler", ["ThrottlerModule"]))
    if config.orm == "prisma":
        imports.append(("./prisma/prisma.module", ["PrismaModule"]))
    imports.append(("./auth/auth.module", ["AuthModule"]))
    imports.append(("./users/users.module", ["UsersModule"]))
    return imports


def module_entries(config: GenerationConfig) -> List[ArrayEntry]:
    """Entries merged into ``@Module({ imports: [...] })``, in order."""
    entries = ["ConfigModule.forRoot({ isGlobal: true })"]
    if config.features.rate_limiting:
        entries.append("ThrottlerModule.forRoot([{ ttl: 60000, limit: 10 }])")
    if config.orm == "prisma":
        entries.append("PrismaModule")
    entries += ["AuthModule", "UsersModule"]
    return [ArrayEntry.from_source(text) for text in entries]


class AppModuleUpdater:
    """
    Add ConfigModule, AuthModule, UsersModule (and friends) to AppModule.
    """

    CLASS_NAME = "AppModule"
    DECORATOR_NAME = "Module"
    PROPERTY_NAME = "imports"

    def __init__(self, app_module_path: str, facade: Optional[MutationFacade] = None):
        self.app_module_path = app_module_path
        self.facade = facade or MutationFacade()
        self.import_manager = ImportManager()
        self.array_editor = DecoratorArrayEditor()

    def update(self, config: GenerationConfig, commit: bool = True) -> MutationResult:
        """
        Update the module file in place; restores it on any failure.

        Args:
            config: Generation configuration
            commit: Discard the backup on success

        Returns:
            MutationResult for the module file
        """
        def add_imports(model: SourceModel) -> None:
            for module_path, names in required_imports(config):
                self.import_manager.ensure_import(model, module_path, names)

        def add_modules(model: SourceModel) -> None:
            appended = self.array_editor.merge(
                model,
                self.CLASS_NAME,
                self.DECORATOR_NAME,
                self.PROPERTY_NAME,
                module_entries(config),
            )
            if appended:
                logger.debug(f"Registered {[e.leading_identifier for e in appended]} in {self.CLASS_NAME}")

        return self.facade.mutate(self.app_module_path, add_imports, add_modules, commit=commit)
