"""
ProjectDetector: Validate a NestJS project and locate the files authme edits.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from authme.logging_config import logger
from authme.schemas import ProjectInfo
from .orm_detector import detect_database, detect_orm


class ProjectDetector:
    """
    Probe a directory for a NestJS project.

    A valid project has a package.json depending on ``@nestjs/core`` and
    ``@nestjs/common`` and an ``app.module.ts`` under its source root
    (``sourceRoot`` of nest-cli.json, ``src`` by default).
    """

    def __init__(self, cwd):
        self.root = Path(cwd).resolve()

    def detect(self) -> ProjectInfo:
        errors: List[str] = []
        package_json_path = self.root / "package.json"

        if not package_json_path.exists():
            errors.append("package.json not found")
            return self._invalid(errors)

        package_json = self._read_json(package_json_path)
        if package_json is None:
            errors.append("Failed to read package.json")
            return self._invalid(errors)

        dependencies = package_json.get("dependencies") or {}
        if "@nestjs/core" not in dependencies or "@nestjs/common" not in dependencies:
            errors.append("Not a NestJS project (missing @nestjs/core or @nestjs/common)")
            return self._invalid(errors)

        nest_cli_config_path = self.root / "nest-cli.json"
        nest_cli = self._read_json(nest_cli_config_path) if nest_cli_config_path.exists() else None
        source_root = (nest_cli or {}).get("sourceRoot") or "src"

        app_module_path = self.root / source_root / "app.module.ts"
        if not app_module_path.exists():
            errors.append(f"app.module.ts not found at {source_root}/app.module.ts")
            return self._invalid(errors, source_root)

        orm = detect_orm(package_json)
        info = ProjectInfo(
            root=str(self.root),
            source_root=source_root,
            app_module_path=str(app_module_path),
            main_ts_path=str(self.root / source_root / "main.ts"),
            package_json_path=str(package_json_path),
            nest_cli_config_path=str(nest_cli_config_path),
            orm=orm,
            database=detect_database(package_json, orm),
            nest_version=dependencies.get("@nestjs/core"),
            typescript_version=(package_json.get("devDependencies") or {}).get("typescript"),
            auth_exists=(self.root / source_root / "auth").exists(),
            is_valid=True,
            errors=[],
        )
        logger.debug(f"Detected NestJS project at {self.root} (orm={orm}, source_root={source_root})")
        return info

    def _read_json(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read {path}: {e}")
            return None

    def _invalid(self, errors: List[str], source_root: str = "src") -> ProjectInfo:
        return ProjectInfo(
            root=str(self.root),
            source_root=source_root,
            app_module_path=str(self.root / source_root / "app.module.ts"),
            main_ts_path=str(self.root / source_root / "main.ts"),
            package_json_path=str(self.root / "package.json"),
            nest_cli_config_path=str(self.root / "nest-cli.json"),
            orm="none",
            is_valid=False,
            errors=errors,
        )


def detect_project(cwd=".") -> ProjectInfo:
    """Detect project in ``cwd``."""
    return ProjectDetector(cwd).detect()
