"""
Tests for NestJS project detection.
"""

import json

import pytest

from authme.analyzer import detect_database, detect_orm, detect_project


class TestProjectDetector:

    def test_valid_project(self, nest_project):
        info = detect_project(nest_project)

        assert info.is_valid
        assert info.errors == []
        assert info.source_root == "src"
        assert info.app_module_path == str(nest_project.resolve() / "src" / "app.module.ts")
        assert info.main_ts_path == str(nest_project.resolve() / "src" / "main.ts")
        assert info.orm == "none"
        assert info.nest_version == "^11.0.0"
        assert info.typescript_version == "^5.4.0"
        assert not info.auth_exists

    def test_missing_package_json(self, tmp_path):
        info = detect_project(tmp_path)

        assert not info.is_valid
        assert info.errors == ["package.json not found"]

    def test_unreadable_package_json(self, nest_project):
        (nest_project / "package.json").write_text("{")

        info = detect_project(nest_project)

        assert not info.is_valid
        assert info.errors == ["Failed to read package.json"]

    def test_not_a_nest_project(self, project_factory):
        root = project_factory("express-app", package_json={"name": "x", "dependencies": {"express": "^4"}})

        info = detect_project(root)

        assert not info.is_valid
        assert "Not a NestJS project" in info.errors[0]

    def test_missing_app_module(self, nest_project):
        (nest_project / "src" / "app.module.ts").unlink()

        info = detect_project(nest_project)

        assert not info.is_valid
        assert info.errors == ["app.module.ts not found at src/app.module.ts"]

    def test_custom_source_root(self, nest_project):
        (nest_project / "nest-cli.json").write_text(json.dumps({"sourceRoot": "apps/api/src"}))
        target = nest_project / "apps" / "api" / "src"
        target.mkdir(parents=True)
        (nest_project / "src" / "app.module.ts").rename(target / "app.module.ts")

        info = detect_project(nest_project)

        assert info.is_valid
        assert info.source_root == "apps/api/src"
        assert info.app_module_path.endswith("apps/api/src/app.module.ts")

    def test_existing_auth_directory(self, nest_project):
        (nest_project / "src" / "auth").mkdir()

        assert detect_project(nest_project).auth_exists


class TestOrmDetection:

    @pytest.mark.parametrize("deps,expected", [
        ({"@nestjs/typeorm": "^11", "typeorm": "^0.3"}, "typeorm"),
        ({"@prisma/client": "^6"}, "prisma"),
        ({"@nestjs/mongoose": "^11"}, "mongoose"),
        ({"express": "^4"}, "none"),
    ])
    def test_detect_orm(self, deps, expected):
        assert detect_orm({"dependencies": deps}) == expected

    def test_prisma_cli_in_dev_dependencies(self):
        assert detect_orm({"devDependencies": {"prisma": "^6"}}) == "prisma"

    @pytest.mark.parametrize("driver,expected", [
        ("pg", "postgres"),
        ("mysql2", "mysql"),
        ("better-sqlite3", "sqlite"),
    ])
    def test_typeorm_database(self, driver, expected):
        package_json = {"dependencies": {"typeorm": "^0.3", driver: "*"}}

        assert detect_database(package_json, "typeorm") == expected

    def test_mongoose_is_mongodb(self):
        assert detect_database({}, "mongoose") == "mongodb"

    def test_prisma_database_not_inferred(self):
        assert detect_database({"dependencies": {"pg": "*"}}, "prisma") is None

    def test_detected_in_project(self, project_factory):
        package_json = {
            "name": "orm-api",
            "dependencies": {
                "@nestjs/common": "^11.0.0",
                "@nestjs/core": "^11.0.0",
                "@nestjs/typeorm": "^11.0.0",
                "typeorm": "^0.3.20",
                "mysql2": "^3.9.1",
            },
        }
        info = detect_project(project_factory("orm-api", package_json=package_json))

        assert info.orm == "typeorm"
        assert info.database == "mysql"
