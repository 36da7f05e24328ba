import json
from pathlib import Path
from typing import Optional

import typer
from rich.prompt import Confirm

from authme import __version__
from authme.analyzer import detect_project
from authme.config_builder import build_config, get_default_answers
from authme.exceptions import AuthmeError
from authme.logging_config import logger, setup_logging
from authme.pipeline import GenerationPipeline
from authme.schemas import GenerationConfig, ProgressEvent, ProjectInfo
from authme.cli import ui
from authme.cli.config import CLIConfig
from authme.cli.output import get_console, print_error, print_json
from authme.cli.prompts import prompt_answers

app = typer.Typer(help="Add a production-ready authentication module to a NestJS project.")
console = get_console()

STATUS_ICONS = {"completed": "[green]✓[/green]", "warning": "[yellow]⚠[/yellow]", "failed": "[red]✗[/red]"}


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"authme v{__version__}")
        raise typer.Exit()


@app.callback()
def global_options(
    human: bool = typer.Option(
        False,
        "--human",
        "-H",
        help="Enable human mode: prompts, colors, spinners (also via AUTHME_HUMAN_MODE env var)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the authme version and exit",
    ),
):
    """
    authme: NestJS authentication generator

    Machine mode is the default (plain/JSON output, no prompts).
    Use --human/-H for the interactive experience.
    """
    if human:
        CLIConfig.set_machine_mode(False)
    if CLIConfig.is_machine_mode():
        setup_logging(suppress_console=True)


def _detect_or_exit(path: Path, json_output: bool) -> ProjectInfo:
    info = detect_project(path)
    if not info.is_valid:
        print_error(
            "Not a valid NestJS project",
            code="INVALID_PROJECT",
            errors=info.errors,
            json_output=json_output,
        )
        if not CLIConfig.is_machine_mode() and not json_output:
            ui.show_not_nest_project_help()
        raise typer.Exit(code=1)
    return info


def _project_name(info: ProjectInfo) -> str:
    try:
        name = json.loads(Path(info.package_json_path).read_text(encoding="utf-8")).get("name")
    except (OSError, ValueError):
        name = None
    return name or Path(info.root).name


def _default_config(info: ProjectInfo) -> GenerationConfig:
    answers = get_default_answers(info.orm, info.database)
    return build_config(answers, _project_name(info), info.source_root, info.orm, info.database)


@app.command("add")
def add_cmd(
    path: Path = typer.Argument(Path("."), help="NestJS project directory", file_okay=False),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip questions and use the recommended defaults"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace an existing auth module (files are backed up)"),
    no_install: bool = typer.Option(False, "--no-install", help="Do not run the package manager afterwards"),
    json_output: bool = typer.Option(False, "--json", help="Output the result as JSON"),
):
    """
    Generate the auth module and wire it into app.module.ts, main.ts and package.json.

    Every write is backed up; a failure restores the project as it was.
    """
    interactive = not (yes or json_output or CLIConfig.is_machine_mode())

    info = _detect_or_exit(path, json_output)
    if interactive:
        ui.show_banner()
        ui.show_project_info(info)

    if info.auth_exists and not overwrite:
        if not interactive:
            print_error(
                f"{info.source_root}/auth already exists",
                code="AUTH_EXISTS",
                actionable_fix="authme add --overwrite",
                json_output=json_output,
            )
            raise typer.Exit(code=1)
        if not Confirm.ask(f"{info.source_root}/auth already exists. Overwrite it?", default=False):
            console.print("[yellow]Aborted.[/yellow]")
            raise typer.Exit(code=1)
        overwrite = True

    try:
        answers = prompt_answers(info.orm, info.database) if interactive else get_default_answers(info.orm, info.database)
        if no_install:
            answers = answers.model_copy(update={"auto_install": False})
        config = build_config(answers, _project_name(info), info.source_root, info.orm, info.database)
    except AuthmeError as e:
        print_error(str(e), code="INVALID_CONFIG", json_output=json_output)
        raise typer.Exit(code=1)

    pipeline = GenerationPipeline()
    if interactive:
        with console.status("Generating...") as status:
            def on_progress(event: ProgressEvent) -> None:
                if event.status == "started":
                    status.update(event.label)
                else:
                    detail = f" [dim]({event.detail})[/dim]" if event.detail else ""
                    console.print(f"{STATUS_ICONS[event.status]} {event.label}{detail}")

            unsubscribe = pipeline.subscribe(on_progress)
            try:
                result = pipeline.generate(config, info, overwrite=overwrite)
            finally:
                unsubscribe()
    else:
        result = pipeline.generate(config, info, overwrite=overwrite)

    if json_output or CLIConfig.is_machine_mode():
        print_json({"status": "ok" if result.success else "error", **result.model_dump()})
    elif result.success:
        ui.show_summary(result, config)
    else:
        print_error("Generation failed, all changes were rolled back", code="GENERATION_FAILED", errors=result.errors)

    if not result.success:
        logger.debug(f"authme add failed: {result.errors}")
        raise typer.Exit(code=1)


@app.command("preview")
def preview_cmd(
    path: Path = typer.Argument(Path("."), help="NestJS project directory", file_okay=False),
    json_output: bool = typer.Option(False, "--json", help="Output the plan as JSON"),
    show_content: bool = typer.Option(False, "--content", help="Include rendered file contents in JSON output"),
):
    """
    Dry run: list the files ``authme add --yes`` would create and modify.
    """
    info = _detect_or_exit(path, json_output)
    preview = GenerationPipeline().preview(_default_config(info), info)

    if json_output or CLIConfig.is_machine_mode():
        exclude = None if show_content else {"files": {"__all__": {"content"}}}
        print_json(preview.model_dump(exclude=exclude))
    else:
        ui.show_preview(preview)


@app.command("detect")
def detect_cmd(
    path: Path = typer.Argument(Path("."), help="Directory to inspect", file_okay=False),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show what authme detects about a project.
    """
    info = detect_project(path)

    if json_output or CLIConfig.is_machine_mode():
        print_json(info.model_dump())
    elif info.is_valid:
        ui.show_project_info(info)
    else:
        print_error("Not a valid NestJS project", code="INVALID_PROJECT", errors=info.errors)

    if not info.is_valid:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
