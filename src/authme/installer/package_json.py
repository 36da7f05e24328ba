"""
PackageUpdater: Merge the auth dependency set into ``package.json``.
"""

import json
from pathlib import Path
from typing import Dict, Optional

from authme.exceptions import SourceNotFoundError
from authme.logging_config import logger
from authme.mutation import BackupLedger, atomic_write
from authme.schemas import GenerationConfig

BASE_DEPENDENCIES = {
    "@nestjs/jwt": "^11.0.0",
    "@nestjs/passport": "^11.0.0",
    "@nestjs/config": "^4.0.0",
    "passport": "^0.7.0",
    "passport-jwt": "^4.0.1",
    "passport-local": "^1.0.0",
    "bcrypt": "^5.1.1",
    "class-validator": "^0.14.0",
    "class-transformer": "^0.5.1",
}

BASE_DEV_DEPENDENCIES = {
    "@types/passport-jwt": "^4.0.0",
    "@types/passport-local": "^1.0.36",
    "@types/bcrypt": "^5.0.2",
}

DATABASE_DRIVERS = {
    "postgres": ("pg", "^8.11.3"),
    "mysql": ("mysql2", "^3.9.1"),
    "sqlite": ("sqlite3", "^5.1.7"),
    "mongodb": ("mongodb", "^6.3.0"),
}


def get_dependencies(config: GenerationConfig) -> Dict[str, Dict[str, str]]:
    """
    Dependencies to add, conditioned on ORM, database and features.

    Returns:
        {"dependencies": {...}, "devDependencies": {...}}
    """
    dependencies = dict(BASE_DEPENDENCIES)
    dev_dependencies = dict(BASE_DEV_DEPENDENCIES)

    if config.orm == "typeorm":
        dependencies["@nestjs/typeorm"] = "^11.0.0"
        dependencies["typeorm"] = "^0.3.20"
        driver, version = DATABASE_DRIVERS[config.database]
        dependencies[driver] = version
    elif config.orm == "prisma":
        dependencies["@prisma/client"] = "^6.0.0"
        dev_dependencies["prisma"] = "^6.0.0"
    elif config.orm == "mongoose":
        dependencies["@nestjs/mongoose"] = "^11.0.0"
        dependencies["mongoose"] = "^8.0.0"

    if config.features.rate_limiting:
        dependencies["@nestjs/throttler"] = "^6.0.0"
    if config.features.swagger:
        dependencies["@nestjs/swagger"] = "^11.0.0"

    return {"dependencies": dependencies, "devDependencies": dev_dependencies}


class PackageUpdater:
    """
    Update the dependency manifest under the backup/rollback contract.
    """

    def __init__(self, package_json_path: str, ledger: Optional[BackupLedger] = None):
        self.package_json_path = Path(package_json_path)
        self.ledger = ledger or BackupLedger()

    def update(self, config: GenerationConfig, commit: bool = True) -> Dict[str, Dict[str, str]]:
        """
        Merge dependencies, sort both maps and write back with two-space indentation.

        Args:
            config: Generation configuration
            commit: Discard the backup on success

        Returns:
            The dependency map that was merged
        """
        if not self.package_json_path.is_file():
            raise SourceNotFoundError(str(self.package_json_path))

        self.ledger.begin(self.package_json_path)
        try:
            package_json = json.loads(self.package_json_path.read_text(encoding="utf-8"))
            deps = get_dependencies(config)

            for section in ("dependencies", "devDependencies"):
                merged = {**package_json.get(section, {}), **deps[section]}
                package_json[section] = dict(sorted(merged.items()))

            atomic_write(self.package_json_path, json.dumps(package_json, indent=2) + "\n")
        except Exception:
            logger.warning(f"Updating {self.package_json_path} failed, restoring backup")
            self.ledger.rollback(self.package_json_path)
            raise

        if commit:
            self.ledger.commit(self.package_json_path)
        logger.info(f"Updated {self.package_json_path}")
        return deps
