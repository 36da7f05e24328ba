import json

from typer.testing import CliRunner

from authme import __version__
from authme.cli.main import app

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == f"authme v{__version__}"


def test_detect_json(nest_project):
    result = runner.invoke(app, ["detect", str(nest_project), "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["is_valid"] is True
    assert payload["source_root"] == "src"
    assert payload["orm"] == "none"


def test_detect_invalid_project(tmp_path):
    result = runner.invoke(app, ["detect", str(tmp_path), "--json"])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["errors"] == ["package.json not found"]


def test_add_yes_json(nest_project):
    result = runner.invoke(app, ["add", str(nest_project), "--yes", "--no-install", "--json"])
    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload["status"] == "ok"
    assert payload["success"] is True
    assert any(path.endswith("auth.module.ts") for path in payload["files_created"])
    assert (nest_project / "src" / "auth" / "auth.service.spec.ts").is_file()
    assert "SwaggerModule.setup" in (nest_project / "src" / "main.ts").read_text()
    assert not list(nest_project.rglob("*.backup"))


def test_add_invalid_project(tmp_path):
    result = runner.invoke(app, ["add", str(tmp_path), "--yes", "--json"])
    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["status"] == "error"
    assert payload["code"] == "INVALID_PROJECT"


def test_add_refuses_existing_auth(nest_project, take_snapshot):
    (nest_project / "src" / "auth").mkdir()
    before = take_snapshot(nest_project)

    result = runner.invoke(app, ["add", str(nest_project), "--yes", "--no-install", "--json"])
    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["code"] == "AUTH_EXISTS"
    assert payload["actionable_fix"] == "authme add --overwrite"
    assert take_snapshot(nest_project) == before


def test_add_overwrite_existing_auth(nest_project):
    (nest_project / "src" / "auth").mkdir()
    (nest_project / "src" / "auth" / "auth.module.ts").write_text("// old\n")

    result = runner.invoke(app, ["add", str(nest_project), "--yes", "--overwrite", "--no-install", "--json"])
    assert result.exit_code == 0, result.stdout
    assert "AuthModule" in (nest_project / "src" / "auth" / "auth.module.ts").read_text()


def test_add_failure_exits_nonzero(nest_project, take_snapshot):
    (nest_project / "src" / "app.module.ts").write_text(
        "import { Module } from '@nestjs/common';\n\nexport class AppModule {}\n"
    )
    before = take_snapshot(nest_project)

    result = runner.invoke(app, ["add", str(nest_project), "--yes", "--no-install", "--json"])
    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["status"] == "error"
    assert payload["errors"]
    assert take_snapshot(nest_project) == before


def test_preview_json(nest_project, take_snapshot):
    before = take_snapshot(nest_project)

    result = runner.invoke(app, ["preview", str(nest_project), "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["total_files"] == len(payload["files"]) + len(payload["modified_files"])
    assert all("content" not in f for f in payload["files"])
    assert take_snapshot(nest_project) == before


def test_preview_with_content(nest_project):
    result = runner.invoke(app, ["preview", str(nest_project), "--json", "--content"])
    assert result.exit_code == 0
    files = json.loads(result.stdout)["files"]
    module = next(f for f in files if f["path"] == "src/auth/auth.module.ts")
    assert "@Module(" in module["content"]
