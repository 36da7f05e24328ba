"""
DependencyInstaller: Run the project's package manager after generation.
"""

import subprocess
import shutil
from pathlib import Path

from authme.exceptions import InstallError
from authme.logging_config import logger

LOCKFILES = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("package-lock.json", "npm"),
)


def detect_package_manager(cwd) -> str:
    """Package manager inferred from lock files; npm when there is none."""
    root = Path(cwd)
    for lockfile, manager in LOCKFILES:
        if (root / lockfile).exists():
            return manager
    return "npm"


class DependencyInstaller:
    """
    Install dependencies with the detected package manager.
    """

    def __init__(self, timeout: int = 600):
        self.timeout = timeout

    def install(self, cwd, capture: bool = True) -> str:
        """
        Run ``<manager> install`` in ``cwd``.

        Args:
            cwd: Project root
            capture: Capture output instead of streaming it to the terminal

        Returns:
            The package manager that was used

        Raises:
            InstallError: If the manager is missing or the command fails
        """
        manager = detect_package_manager(cwd)
        if not shutil.which(manager):
            raise InstallError(f"Package manager '{manager}' not found in PATH")

        logger.info(f"Installing dependencies with {manager}")
        try:
            result = subprocess.run(
                [manager, "install"],
                cwd=str(cwd),
                capture_output=capture,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise InstallError(f"{manager} install timed out after {self.timeout}s") from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip() if capture else ""
            raise InstallError(f"Failed to install dependencies with {manager}: {detail or result.returncode}")

        return manager
