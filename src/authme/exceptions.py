# Custom exceptions for authme

class AuthmeError(Exception):
    """Base exception for all application-specific errors."""
    pass

class ConfigError(AuthmeError):
    """Raised for configuration-related problems."""
    pass

class ProjectValidationError(AuthmeError):
    """Raised when the target directory is not a usable NestJS project."""

    def __init__(self, message: str, errors: list = None):
        self.errors = errors or []
        super().__init__(message)

class FileConflictError(AuthmeError, FileExistsError):
    """Raised when a generated file already exists and overwrite was not authorized."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(f"File already exists: {file_path}")

class SourceNotFoundError(AuthmeError, FileNotFoundError):
    """Raised when a source file to be mutated does not exist."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(f"Source file not found: {file_path}")

class SourceParseError(AuthmeError):
    """Raised when a file cannot be parsed by tree-sitter."""

    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"Failed to parse {file_path}: {message}")

class StructureError(AuthmeError):
    """Raised when an expected class, decorator, function or property is missing or malformed."""
    pass

class BackupInProgressError(AuthmeError):
    """Raised when a path already has an active backup record."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(f"A mutation is already in progress for {file_path}")

class TemplateNotFoundError(AuthmeError):
    """Raised when a template identifier has no file in the catalog."""

    def __init__(self, template: str):
        self.template = template
        super().__init__(f"Template not found: {template}")

class InstallError(AuthmeError):
    """Raised when the package manager install command fails."""
    pass

class GenerationBusyError(AuthmeError):
    """Raised when a generation request arrives while another one is running."""
    pass
