"""
Installer package: updaters for the files an auth generation run modifies,
plus the package manager invocation.
"""

from .app_module import AppModuleUpdater
from .main_ts import MainTsUpdater
from .package_json import PackageUpdater, get_dependencies
from .prisma_schema import PrismaSchemaUpdater
from .dependency_installer import DependencyInstaller, detect_package_manager

__all__ = [
    "AppModuleUpdater",
    "MainTsUpdater",
    "PackageUpdater",
    "get_dependencies",
    "PrismaSchemaUpdater",
    "DependencyInstaller",
    "detect_package_manager",
]
