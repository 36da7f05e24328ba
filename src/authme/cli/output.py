"""
CLI Output Utilities

Machine-aware output functions that adapt based on machine mode.
"""

import json
import re
from typing import Any, Optional

import typer
from rich.console import Console as RichConsole

from authme.cli.config import CLIConfig

_MARKUP = re.compile(r"\[/?[a-z][^\]]*\]")
_EMOJI = re.compile(
    r"[\U0001F300-\U0001F9FF\U00002600-\U000027BF\U0000FE00-\U0000FE0F\U0001FA00-\U0001FA6F]"
)


class MachineAwareConsole:
    """
    A Console wrapper that automatically adapts output based on machine mode.
    Acts as a drop-in replacement for rich.console.Console.
    """

    def __init__(self):
        self._rich_console = RichConsole()

    def print(self, *args, **kwargs):
        """Print that respects machine mode."""
        if not CLIConfig.is_machine_mode():
            self._rich_console.print(*args, **kwargs)
            return

        for arg in args:
            if isinstance(arg, str):
                # Remove rich markup and emojis
                plain = _EMOJI.sub("", _MARKUP.sub("", arg)).strip()
                if plain:
                    print(plain)
            elif hasattr(arg, "__rich__") or hasattr(arg, "__rich_console__"):
                # Tables and panels are human-only; machine mode uses JSON
                continue
            elif arg:
                print(arg)

    def __getattr__(self, name):
        """Delegate all other attributes to the rich console."""
        return getattr(self._rich_console, name)


# Console instance for rich output (machine-aware)
_console = MachineAwareConsole()


def echo(message: str = "", **kwargs) -> None:
    """Print a message respecting machine mode."""
    if CLIConfig.is_machine_mode():
        print(message, **kwargs)
    else:
        typer.echo(message, **kwargs)


def print_json(data: Any, minified: Optional[bool] = None) -> None:
    """
    Print JSON data respecting machine mode.
    In machine mode, always minifies. In human mode, pretty prints.
    """
    if minified is None:
        minified = CLIConfig.is_machine_mode()

    if minified:
        echo(json.dumps(data, separators=(",", ":")))
    else:
        echo(json.dumps(data, indent=2))


def structured_error(code: str, message: str, errors: Optional[list] = None,
                     actionable_fix: Optional[str] = None) -> dict:
    """
    Create a structured error object for machine mode.

    Args:
        code: Error code (e.g., "INVALID_PROJECT", "AUTH_EXISTS")
        message: Human-readable error message
        errors: Detail lines
        actionable_fix: Command or flag that would fix the issue

    Returns:
        Structured error dictionary
    """
    error_obj = {
        "status": "error",
        "code": code,
        "message": message,
    }
    if errors:
        error_obj["errors"] = errors
    if actionable_fix:
        error_obj["actionable_fix"] = actionable_fix
    return error_obj


def print_error(message: str, code: str = "ERROR", errors: Optional[list] = None,
                actionable_fix: Optional[str] = None, json_output: bool = False) -> None:
    """
    Print an error respecting machine mode.
    In machine mode (or with --json), outputs a structured JSON error.
    """
    if CLIConfig.is_machine_mode() or json_output:
        print_json(structured_error(code, message, errors=errors, actionable_fix=actionable_fix))
        return

    _console.print()
    _console.print(f"[red]❌ Error:[/red] [bold]{message}[/bold]")
    for error in errors or []:
        _console.print(f"[red]  •[/red] {error}")
    if actionable_fix:
        _console.print(f"[yellow]Try:[/yellow] {actionable_fix}")
    _console.print()


def get_console() -> MachineAwareConsole:
    """
    Get the console instance for advanced usage.
    Note: Direct console usage should check machine mode.
    """
    return _console
