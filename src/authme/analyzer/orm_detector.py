"""
ORM and database detection from ``package.json`` dependencies.
"""

from typing import Any, Dict, Optional


def _all_dependencies(package_json: Dict[str, Any]) -> Dict[str, str]:
    return {
        **(package_json.get("dependencies") or {}),
        **(package_json.get("devDependencies") or {}),
    }


def detect_orm(package_json: Dict[str, Any]) -> str:
    """Return ``typeorm``, ``prisma``, ``mongoose`` or ``none``."""
    deps = _all_dependencies(package_json)

    if "@nestjs/typeorm" in deps or "typeorm" in deps:
        return "typeorm"
    if "@prisma/client" in deps or "prisma" in deps:
        return "prisma"
    if "@nestjs/mongoose" in deps or "mongoose" in deps:
        return "mongoose"
    return "none"


def detect_database(package_json: Dict[str, Any], orm: str) -> Optional[str]:
    """
    Infer the datastore from driver packages.

    Prisma keeps its provider in schema.prisma, so nothing is inferred for it here.
    """
    deps = _all_dependencies(package_json)

    if orm == "typeorm":
        if "pg" in deps:
            return "postgres"
        if "mysql2" in deps or "mysql" in deps:
            return "mysql"
        if "sqlite3" in deps or "better-sqlite3" in deps:
            return "sqlite"
        if "mongodb" in deps:
            return "mongodb"
    if orm == "mongoose":
        return "mongodb"
    return None
