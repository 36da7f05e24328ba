"""
Pytest configuration for the authme test suite.

This conftest.py provides:
- Quiet logging (console sink suppressed)
- A fixture NestJS project tree (package.json, nest-cli.json, app.module.ts, main.ts)
- A GenerationConfig factory
- CLI machine-mode reset between tests
"""

import json
import os
from pathlib import Path

import pytest

from authme.cli.config import CLIConfig
from authme.logging_config import setup_logging
from authme.schemas import FeaturesConfig, GenerationConfig, JWTConfig, RBACConfig


APP_MODULE_TS = """import { Module } from '@nestjs/common';
import { AppController } from './app.controller';
import { AppService } from './app.service';

@Module({
  imports: [],
  controllers: [AppController],
  providers: [AppService],
})
export class AppModule {}
"""

MAIN_TS = """import { NestFactory } from '@nestjs/core';
import { AppModule } from './app.module';

async function bootstrap() {
  const app = await NestFactory.create(AppModule);
  await app.listen(3000);
}
bootstrap();
"""

PACKAGE_JSON = {
    "name": "demo-api",
    "version": "0.0.1",
    "scripts": {"start": "nest start"},
    "dependencies": {
        "@nestjs/common": "^11.0.0",
        "@nestjs/core": "^11.0.0",
        "@nestjs/platform-express": "^11.0.0",
        "reflect-metadata": "^0.2.0",
    },
    "devDependencies": {
        "@nestjs/cli": "^11.0.0",
        "typescript": "^5.4.0",
    },
}


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Keep console logging out of test output."""
    os.environ.setdefault("AUTHME_MACHINE_MODE", "1")


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Suppress console logs for clean test output."""
    setup_logging(level="DEBUG", suppress_console=True)


@pytest.fixture(autouse=True)
def reset_cli_mode():
    """CLIConfig is class-level state; restore the default around every test."""
    CLIConfig.set_machine_mode(None)
    yield
    CLIConfig.set_machine_mode(None)


# ============================================================================
# PROJECT FIXTURES
# ============================================================================

def _write_project(root: Path, package_json: dict = None, app_module: str = APP_MODULE_TS,
                  main_ts: str = MAIN_TS) -> Path:
    """Write a minimal NestJS project under ``root``."""
    (root / "src").mkdir(parents=True, exist_ok=True)
    (root / "package.json").write_text(json.dumps(package_json or PACKAGE_JSON, indent=2) + "\n")
    (root / "nest-cli.json").write_text(json.dumps({"sourceRoot": "src"}))
    (root / "src" / "app.module.ts").write_text(app_module)
    if main_ts is not None:
        (root / "src" / "main.ts").write_text(main_ts)
    return root


def _snapshot(root: Path) -> dict:
    """Every file under ``root`` mapped to its bytes."""
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def nest_project(tmp_path):
    """A minimal NestJS project without ORM."""
    return _write_project(tmp_path / "demo-api")


@pytest.fixture
def project_factory(tmp_path):
    """
    Build variants of the fixture project.

    Usage:
        root = project_factory("api", app_module=SOURCE, main_ts=None)
    """
    def _make(name="demo-api", **kwargs):
        return _write_project(tmp_path / name, **kwargs)

    return _make


@pytest.fixture
def take_snapshot():
    """Return a function mapping every file under a root to its bytes."""
    return _snapshot


@pytest.fixture
def make_config():
    """
    Factory for GenerationConfig with test-friendly defaults.

    Usage:
        config = make_config(orm="prisma", swagger=True)
    """
    feature_names = set(FeaturesConfig.model_fields)

    def _make(rbac=True, roles=("Admin", "User"), **overrides):
        features = {k: overrides.pop(k) for k in list(overrides) if k in feature_names}
        defaults = dict(
            project_name="demo-api",
            source_root="src",
            rbac=RBACConfig(enabled=rbac, roles=list(roles) if rbac else []),
            features=FeaturesConfig(**features),
            jwt=JWTConfig(secret="test-secret", refresh_secret="test-refresh-secret"),
            timestamp="2026-01-01T00:00:00+00:00",
            generator_version="1.3.0",
        )
        defaults.update(overrides)
        return GenerationConfig(**defaults)

    return _make
