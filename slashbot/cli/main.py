"""
slashbot CLI Main Entry Point

The main Typer application: run the bot, deploy commands, inspect them.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import structlog
import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from slashbot import __version__
from slashbot.config import BotSettings, ConfigurationError, get_settings
from slashbot.core.deploy import publish
from slashbot.core.diagnostics import Diagnostic, DiagnosticCode, DiagnosticLog
from slashbot.core.dispatcher import InteractionDispatcher
from slashbot.core.registry import CommandRegistry, discover

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)
console = Console()

# Create the main app
app = typer.Typer(
    name="slashbot",
    help="slashbot - load, deploy and serve Discord slash commands",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(
            Panel(
                Text.from_markup(
                    f"[bold cyan]slashbot[/bold cyan] v{__version__}\n"
                    "[dim]Discord slash-command scaffold[/dim]"
                ),
                title="Version",
                border_style="cyan",
            )
        )
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
) -> None:
    """
    slashbot - Discord slash-command scaffold

    Loads command files from a directory, publishes them to Discord and
    answers interactions.
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(message)s")


def _require_credentials(settings: BotSettings) -> tuple[str, str]:
    """Fetch credentials or exit before any network activity."""
    try:
        return settings.require_credentials()
    except ConfigurationError as e:
        DiagnosticLog(logger).record(
            Diagnostic.error(
                DiagnosticCode.MISSING_CONFIGURATION,
                str(e),
                missing=e.missing,
            )
        )
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


async def _deploy(
    settings: BotSettings,
    token: str,
    client_id: str,
    registry: CommandRegistry,
    diagnostic_log: DiagnosticLog,
) -> list[dict]:
    return await publish(
        registry,
        client_id,
        token,
        base_url=settings.api_base_url,
        timeout_seconds=settings.request_timeout,
        diagnostic_log=diagnostic_log,
    )


@app.command()
def deploy(
    commands_dir: Annotated[
        Path | None,
        typer.Option("--dir", "-d", help="Commands directory"),
    ] = None,
) -> None:
    """
    Publish all commands to Discord, replacing the registered set.

    Example:
        slashbot deploy
    """
    settings = get_settings()
    token, client_id = _require_credentials(settings)
    diagnostic_log = DiagnosticLog(logger)

    registry, _ = load_commands(
        commands_dir or settings.commands_dir, settings.reserved_dir, diagnostic_log
    )

    try:
        published = asyncio.run(_deploy(settings, token, client_id, registry, diagnostic_log))
    except Exception as e:
        console.print(f"[red]Deploy failed:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Deployed {len(published)} command(s)[/green]")


async def _run_bot(
    settings: BotSettings,
    token: str,
    client_id: str,
    commands_dir: Path,
    skip_deploy: bool,
) -> None:
    from slashbot.chat.discord import DiscordBot

    diagnostic_log = DiagnosticLog(logger)
    registry, _ = await discover(
        commands_dir, reserved_dir=settings.reserved_dir, diagnostic_log=diagnostic_log
    )

    if not skip_deploy:
        logger.info("Deploying commands...")
        await _deploy(settings, token, client_id, registry, diagnostic_log)
        logger.info("Command deploy complete")

    dispatcher = InteractionDispatcher(registry, diagnostic_log)
    bot = DiscordBot(token, dispatcher)

    try:
        await bot.run()
    finally:
        await bot.stop()


@app.command()
def run(
    commands_dir: Annotated[
        Path | None,
        typer.Option("--dir", "-d", help="Commands directory"),
    ] = None,
    skip_deploy: Annotated[
        bool,
        typer.Option("--skip-deploy", help="Do not publish commands before connecting"),
    ] = False,
) -> None:
    """
    Deploy commands, connect to Discord and answer interactions.

    Example:
        slashbot run
        slashbot run --skip-deploy
    """
    logger.info("Booting up the bot...")
    settings = get_settings()
    token, client_id = _require_credentials(settings)

    try:
        asyncio.run(
            _run_bot(settings, token, client_id, commands_dir or settings.commands_dir, skip_deploy)
        )
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.error("Failed to initialize bot", error=str(e), exc_info=e)
        console.print(f"[red]Bot stopped:[/red] {e}")
        raise typer.Exit(1)


# Import and register sub-commands
from slashbot.cli.commands_cmd import app as commands_app
from slashbot.cli.commands_cmd import load_commands

app.add_typer(commands_app, name="commands", help="Inspect slash commands")


if __name__ == "__main__":
    app()
