"""
Generation plan: which catalog template becomes which project file.
"""

from typing import List

from authme.schemas import FileSpec, GenerationConfig


def _rbac(config: GenerationConfig) -> bool:
    return config.rbac.enabled


def _reset_password(config: GenerationConfig) -> bool:
    return config.features.reset_password


def _typeorm(config: GenerationConfig) -> bool:
    return config.orm == "typeorm"


def _typeorm_refresh(config: GenerationConfig) -> bool:
    return config.orm == "typeorm" and config.features.refresh_tokens


def _prisma(config: GenerationConfig) -> bool:
    return config.orm == "prisma"


def _unit_tests(config: GenerationConfig) -> bool:
    return config.features.unit_tests


def build_generation_plan(config: GenerationConfig) -> List[FileSpec]:
    """
    Build the ordered file plan for ``config``.

    Every entry carries its own condition; callers filter with
    ``FileSpec.applies_to``. Output paths are relative to the project root.
    """
    src = config.source_root
    auth = f"{src}/auth"

    return [
        # Core auth module
        FileSpec("jwt/auth.module.ts", f"{auth}/auth.module.ts"),
        FileSpec("jwt/auth.service.ts", f"{auth}/auth.service.ts"),
        FileSpec("jwt/auth.controller.ts", f"{auth}/auth.controller.ts"),

        # Strategies and guards
        FileSpec("jwt/jwt.strategy.ts", f"{auth}/strategies/jwt.strategy.ts"),
        FileSpec("jwt/local.strategy.ts", f"{auth}/strategies/local.strategy.ts"),
        FileSpec("jwt/jwt-auth.guard.ts", f"{auth}/guards/jwt-auth.guard.ts"),
        FileSpec("jwt/local-auth.guard.ts", f"{auth}/guards/local-auth.guard.ts"),

        # RBAC
        FileSpec("rbac/roles.guard.ts", f"{auth}/guards/roles.guard.ts", _rbac),
        FileSpec("rbac/role.enum.ts", f"{auth}/enums/role.enum.ts", _rbac),
        FileSpec("decorators/roles.decorator.ts", f"{auth}/decorators/roles.decorator.ts", _rbac),

        FileSpec("decorators/public.decorator.ts", f"{auth}/decorators/public.decorator.ts"),
        FileSpec("decorators/current-user.decorator.ts", f"{auth}/decorators/current-user.decorator.ts"),

        # DTOs
        FileSpec("dto/login.dto.ts", f"{auth}/dto/login.dto.ts"),
        FileSpec("dto/register.dto.ts", f"{auth}/dto/register.dto.ts"),
        FileSpec("dto/change-password.dto.ts", f"{auth}/dto/change-password.dto.ts"),
        FileSpec("dto/auth-response.dto.ts", f"{auth}/dto/auth-response.dto.ts"),
        FileSpec("dto/create-user.dto.ts", f"{auth}/dto/create-user.dto.ts"),
        FileSpec("dto/forgot-password.dto.ts", f"{auth}/dto/forgot-password.dto.ts", _reset_password),
        FileSpec("dto/reset-password.dto.ts", f"{auth}/dto/reset-password.dto.ts", _reset_password),

        # Users module
        FileSpec("users/users.module.ts", f"{src}/users/users.module.ts"),
        FileSpec("users/users.service.ts", f"{src}/users/users.service.ts"),
        FileSpec("users/users.controller.ts", f"{src}/users/users.controller.ts"),

        # ORM specific
        FileSpec("entities/user.entity.typeorm", f"{src}/users/entities/user.entity.ts", _typeorm),
        FileSpec(
            "entities/refresh-token.entity.typeorm",
            f"{src}/users/entities/refresh-token.entity.ts",
            _typeorm_refresh,
        ),
        FileSpec("prisma/prisma.service.ts", f"{src}/prisma/prisma.service.ts", _prisma),
        FileSpec("prisma/prisma.module.ts", f"{src}/prisma/prisma.module.ts", _prisma),
        FileSpec("prisma/schema.prisma.additions", "prisma-schema-additions.prisma", _prisma),

        # Unit tests
        FileSpec("tests/auth.service.spec.ts", f"{auth}/auth.service.spec.ts", _unit_tests),
        FileSpec("tests/auth.controller.spec.ts", f"{auth}/auth.controller.spec.ts", _unit_tests),

        # Configuration files
        FileSpec("shared/env.template", ".env.example", keep_existing=True),
        FileSpec("shared/env", ".env", keep_existing=True),
        FileSpec("shared/README.auth.md", f"{auth}/README.md"),
        FileSpec("shared/main.ts.snippet", "main.ts.example"),
    ]


def applicable_plan(config: GenerationConfig) -> List[FileSpec]:
    """The plan entries whose condition holds for ``config``."""
    return [spec for spec in build_generation_plan(config) if spec.applies_to(config)]
