"""
Command Management CLI Commands

Commands for inspecting the slash commands on disk without touching the
network.
"""

import asyncio
import json
from pathlib import Path
from typing import Annotated

import structlog
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from slashbot.config import get_settings
from slashbot.core.diagnostics import Diagnostic, DiagnosticLog
from slashbot.core.registry import CommandDirectoryError, CommandRegistry, discover

logger = structlog.get_logger(__name__)
console = Console()

app = typer.Typer(
    name="commands",
    help="Inspect slash commands",
    no_args_is_help=True,
)

CommandsDirOption = Annotated[
    Path | None,
    typer.Option(
        "--dir",
        "-d",
        help="Commands directory (default: SLASHBOT_COMMANDS_DIR or the bundled commands)",
    ),
]


def load_commands(
    commands_dir: Path,
    reserved_dir: str,
    diagnostic_log: DiagnosticLog | None = None,
) -> tuple[CommandRegistry, list[Diagnostic]]:
    """Discover commands, exiting with code 1 if the directory is unusable."""
    try:
        return asyncio.run(
            discover(commands_dir, reserved_dir=reserved_dir, diagnostic_log=diagnostic_log)
        )
    except CommandDirectoryError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _print_diagnostics(diagnostics: list[Diagnostic]) -> None:
    if not diagnostics:
        return

    table = Table(
        title=f"Load Diagnostics ({len(diagnostics)})",
        show_header=True,
        header_style="bold red",
    )
    table.add_column("Code", style="red")
    table.add_column("Source", style="dim")
    table.add_column("Message")

    for diagnostic in diagnostics:
        table.add_row(
            diagnostic.code.value if diagnostic.code else "-",
            diagnostic.source or "-",
            diagnostic.context.get("error") or diagnostic.message,
        )

    console.print(table)


@app.command("list")
def list_commands(
    commands_dir: CommandsDirOption = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show options and source files",
        ),
    ] = False,
) -> None:
    """
    List the commands that would be registered.

    Example:
        slashbot commands list
        slashbot commands list --dir ./my_commands -v
    """
    settings = get_settings()
    registry, diagnostics = load_commands(
        commands_dir or settings.commands_dir, settings.reserved_dir
    )

    if not registry:
        console.print("[yellow]No commands found[/yellow]")
    else:
        table = Table(
            title=f"Slash Commands ({len(registry)} total)",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Name", style="green")
        table.add_column("Description")
        if verbose:
            table.add_column("Options")
            table.add_column("Source", style="dim")

        for name, unit in registry.items():
            row = [f"/{name}", unit.definition.description]
            if verbose:
                row.append(
                    ", ".join(
                        o.name + ("*" if o.required else "")
                        for o in unit.definition.options
                    )
                    or "-"
                )
                row.append(str(unit.source))
            table.add_row(*row)

        console.print(table)

    _print_diagnostics(diagnostics)


@app.command("show")
def show_command(
    name: Annotated[str, typer.Argument(help="Command name (without leading /)")],
    commands_dir: CommandsDirOption = None,
) -> None:
    """
    Show the registration payload for one command.

    Example:
        slashbot commands show ping
    """
    settings = get_settings()
    registry, _ = load_commands(commands_dir or settings.commands_dir, settings.reserved_dir)

    unit = registry.get(name.lstrip("/"))
    if unit is None:
        console.print(f"[red]Command not found:[/red] {name}")
        console.print(f"Available commands: {', '.join(registry.names()) or 'none'}")
        raise typer.Exit(1)

    console.print(
        Panel(
            json.dumps(unit.definition.to_schema(), indent=2),
            title=f"/{unit.name}",
            subtitle=str(unit.source),
            border_style="cyan",
        )
    )
