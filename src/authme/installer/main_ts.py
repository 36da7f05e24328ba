"""
MainTsUpdater: Add the global JWT guard and ValidationPipe to the bootstrap
function of ``main.ts``.
"""

from typing import Optional

from authme.mutation import BootstrapInjector, ImportManager, MutationFacade, SourceModel, listen_call_matcher
from authme.schemas import GenerationConfig, MutationResult

# Presence of either string in bootstrap() means the guard block was already added
MARKERS = ("useGlobalGuards", "JwtAuthGuard")

# Swagger is set up at most once per bootstrap(), whoever wrote it
SWAGGER_MARKERS = ("SwaggerModule",)

GUARD_BLOCK = [
    "",
    "// Enable global validation pipe",
    "app.useGlobalPipes(",
    "  new ValidationPipe({",
    "    whitelist: true,",
    "    forbidNonWhitelisted: true,",
    "    transform: true,",
    "  }),",
    ");",
    "",
    "// Enable global JWT guard (all routes protected by default)",
    "// Use @Public() decorator on routes that should be accessible without auth",
    "const reflector = app.get(Reflector);",
    "app.useGlobalGuards(new JwtAuthGuard(reflector));",
    "",
]

SWAGGER_BLOCK = [
    "// Swagger API documentation",
    "const swaggerConfig = new DocumentBuilder()",
    "  .setTitle('API')",
    "  .addBearerAuth()",
    "  .build();",
    "const document = SwaggerModule.createDocument(app, swaggerConfig);",
    "SwaggerModule.setup('api/docs', app, document);",
    "",
]


class MainTsUpdater:
    """
    Inject global guards and pipes before ``app.listen(...)`` in ``bootstrap``.
    """

    FUNCTION_NAME = "bootstrap"

    def __init__(self, main_ts_path: str, facade: Optional[MutationFacade] = None):
        self.main_ts_path = main_ts_path
        self.facade = facade or MutationFacade()
        self.import_manager = ImportManager()
        self.injector = BootstrapInjector()

    def update(self, config: GenerationConfig, commit: bool = True) -> MutationResult:
        """
        Update ``main.ts`` in place; restores it on any failure.

        Raises:
            SourceNotFoundError: If main.ts does not exist
            StructureError: If there is no bootstrap function with a body
        """
        def add_imports(model: SourceModel) -> None:
            self.import_manager.ensure_import(model, "@nestjs/core", ["Reflector"])
            self.import_manager.ensure_import(model, "@nestjs/common", ["ValidationPipe"])
            self.import_manager.ensure_import(model, "./auth/guards/jwt-auth.guard", ["JwtAuthGuard"])
            if config.features.swagger:
                self.import_manager.ensure_import(model, "@nestjs/swagger", ["SwaggerModule", "DocumentBuilder"])

        def add_guards(model: SourceModel) -> None:
            self.injector.inject(
                model,
                self.FUNCTION_NAME,
                GUARD_BLOCK,
                anchor_matcher=listen_call_matcher,
                markers=MARKERS,
            )

        def add_swagger(model: SourceModel) -> None:
            self.injector.inject(
                model,
                self.FUNCTION_NAME,
                SWAGGER_BLOCK,
                anchor_matcher=listen_call_matcher,
                markers=SWAGGER_MARKERS,
            )

        edits = [add_imports, add_guards]
        if config.features.swagger:
            edits.append(add_swagger)

        return self.facade.mutate(self.main_ts_path, *edits, commit=commit)
