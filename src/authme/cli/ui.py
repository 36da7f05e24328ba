"""
Human-mode presentation for the authme CLI.
"""

from rich.panel import Panel
from rich.table import Table

from authme import __version__
from authme.installer import get_dependencies
from authme.schemas import GenerationConfig, GenerationResult, PreviewResult, ProjectInfo
from .output import get_console

console = get_console()


def show_banner() -> None:
    console.print(Panel.fit(f"[bold]🔐 authme - NestJS Auth Generator v{__version__}[/bold]", border_style="cyan"))
    console.print()


def show_project_info(info: ProjectInfo) -> None:
    console.print(f"[green]✓[/green] Detected NestJS {info.nest_version or 'project'}")
    if info.orm != "none":
        db = f" ({info.database})" if info.database else ""
        console.print(f"[green]✓[/green] Found {info.orm.upper()}{db}")
    console.print(f"[green]✓[/green] Source directory: {info.source_root}/")
    if info.auth_exists:
        console.print(f"[yellow]![/yellow] Existing auth module found in {info.source_root}/auth/")
    else:
        console.print("[green]✓[/green] No existing auth module found")
    console.print()


def show_not_nest_project_help() -> None:
    console.print("[yellow]To create a new NestJS project:[/yellow]")
    console.print()
    console.print("[cyan]  npm i -g @nestjs/cli[/cyan]")
    console.print("[cyan]  nest new my-project[/cyan]")
    console.print()


def show_summary(result: GenerationResult, config: GenerationConfig) -> None:
    console.print()
    console.print("[green bold]🎉 Success![/green bold] Authentication module generated.")
    console.print()

    console.print("[bold]📁 Files:[/bold]")
    console.print(f"   • {len(result.files_created)} new files in {config.source_root}/auth/ and {config.source_root}/users/")
    for skipped in result.files_skipped:
        console.print(f"   • Kept existing {skipped}")
    console.print(f"   • Updated {config.source_root}/app.module.ts and package.json")
    console.print()

    deps = get_dependencies(config)
    console.print("[bold]📦 Dependencies added:[/bold]")
    console.print(f"   • {', '.join(sorted(deps['dependencies']))}")
    console.print()

    console.print("[bold]🔐 JWT configuration:[/bold]")
    console.print(f"   • Access token: {config.jwt.access_expiration}")
    if config.features.refresh_tokens:
        console.print(f"   • Refresh token: {config.jwt.refresh_expiration}")
    console.print("   • Secret: auto-generated (see .env)")
    console.print()

    if result.warnings:
        console.print("[bold yellow]⚠ Warnings:[/bold yellow]")
        for warning in result.warnings:
            console.print(f"   • {warning}")
        console.print()

    console.print("[bold]📋 Next steps:[/bold]")
    step = 1
    if not config.auto_install:
        console.print(f"   {step}. npm install")
        step += 1
    if config.orm == "prisma":
        console.print(f"   {step}. npx prisma migrate dev --name add-auth")
        step += 1
    console.print(f"   {step}. npm run start:dev")
    console.print(f"   {step + 1}. Read {config.source_root}/auth/README.md")
    console.print()


def show_preview(preview: PreviewResult) -> None:
    table = Table(title=f"authme preview ({preview.total_files} files)")
    table.add_column("File", style="cyan")
    table.add_column("Action")

    for file in preview.files:
        table.add_row(file.path, "[green]create[/green]" if file.is_new else "[yellow]overwrite[/yellow]")
    for modified in preview.modified_files:
        table.add_row(modified.path, f"[blue]modify[/blue]: {modified.description}")

    console.print(table)
