from dataclasses import dataclass
from typing import Callable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AuthStrategy = Literal["jwt", "oauth", "session"]
ORM = Literal["typeorm", "prisma", "mongoose", "none"]
Database = Literal["postgres", "mysql", "sqlite", "mongodb"]
ProgressStatus = Literal["started", "completed", "failed", "warning"]


class RBACConfig(BaseModel):
    """Role-based access control toggle and the ordered role names."""
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    roles: List[str] = Field(default_factory=lambda: ["Admin", "User"])


class FeaturesConfig(BaseModel):
    """Optional features of the generated auth module."""
    model_config = ConfigDict(frozen=True)

    refresh_tokens: bool = True
    rate_limiting: bool = True
    swagger: bool = False
    unit_tests: bool = False
    use_username: bool = False
    email_verification: bool = False
    reset_password: bool = False


class JWTConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    secret: str
    refresh_secret: str = ""
    access_expiration: str = "1h"
    refresh_expiration: str = "7d"


class GenerationConfig(BaseModel):
    """
    Fully-built configuration for one generation run.

    Built once by the config builder and passed read-only into every
    downstream component.
    """
    model_config = ConfigDict(frozen=True)

    project_name: str
    source_root: str = "src"
    strategy: AuthStrategy = "jwt"
    rbac: RBACConfig = Field(default_factory=RBACConfig)
    orm: ORM = "none"
    database: Database = "postgres"
    features: FeaturesConfig = Field(default_factory=FeaturesConfig)
    jwt: JWTConfig
    auto_install: bool = False
    timestamp: str = ""
    generator_version: str = ""


class PromptAnswers(BaseModel):
    """Flat answers object, gathered interactively or taken from defaults."""
    strategy: AuthStrategy = "jwt"
    enable_rbac: bool = True
    roles: List[str] = Field(default_factory=lambda: ["Admin", "User"])
    refresh_tokens: bool = True
    access_expiration: str = "1h"
    refresh_expiration: str = "7d"
    enable_rate_limiting: bool = True
    enable_swagger: bool = True
    generate_tests: bool = True
    use_username: bool = False
    email_verification: bool = False
    reset_password: bool = False
    use_detected_orm: bool = True
    database: Optional[Database] = None
    auto_install: bool = True


class ProjectInfo(BaseModel):
    """
    Result of probing a target directory.

    Carries the two AST target paths (module file, bootstrap file) and the
    manifest path consumed by the pipeline.
    """
    root: str
    source_root: str = "src"
    app_module_path: str
    main_ts_path: str
    package_json_path: str
    nest_cli_config_path: str

    orm: ORM = "none"
    database: Optional[Database] = None
    nest_version: Optional[str] = None
    typescript_version: Optional[str] = None
    auth_exists: bool = False

    is_valid: bool = False
    errors: List[str] = Field(default_factory=list)


@dataclass(frozen=True)
class FileSpec:
    """
    One entry of the generation plan.

    ``keep_existing`` files (the env files) are never replaced: when one is
    already present it is reported as skipped, even with overwrite enabled.
    """
    template: str
    output: str
    condition: Optional[Callable[[GenerationConfig], bool]] = None
    keep_existing: bool = False

    def applies_to(self, config: GenerationConfig) -> bool:
        return self.condition is None or bool(self.condition(config))


class BackupRecord(BaseModel):
    """One active backup: the original path, its sidecar copy, and whether the original existed."""
    original_path: str
    backup_path: str
    existed_before: bool


class MutationResult(BaseModel):
    """Outcome of one orchestrated AST mutation."""
    file_path: str
    changed: bool = False
    state: Literal["saved", "unchanged"] = "unchanged"


class GenerationResult(BaseModel):
    success: bool
    files_created: List[str] = Field(default_factory=list)
    files_skipped: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class PreviewFile(BaseModel):
    path: str
    content: str
    is_new: bool


class ModifiedFile(BaseModel):
    path: str
    description: str


class PreviewResult(BaseModel):
    files: List[PreviewFile] = Field(default_factory=list)
    modified_files: List[ModifiedFile] = Field(default_factory=list)
    total_files: int = 0


class ProgressEvent(BaseModel):
    """Observational progress notification emitted by the pipeline."""
    step: str
    label: str
    status: ProgressStatus
    detail: Optional[str] = None
    timestamp: float


class PrismaUpdateResult(BaseModel):
    updated: bool
    message: str
    skipped_models: List[str] = Field(default_factory=list)
