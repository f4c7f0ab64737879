"""
Deployment Synchronizer

Publishes the registry's command definitions to the platform as one
full-replace registration call.
"""

from typing import Any, Protocol

import structlog

from slashbot.chat.rest import DEFAULT_API_BASE_URL, DiscordRestClient
from slashbot.core.diagnostics import Diagnostic, DiagnosticCode, DiagnosticLevel, DiagnosticLog
from slashbot.core.registry import CommandRegistry

logger = structlog.get_logger(__name__)


class RegistrationClient(Protocol):
    """Anything able to replace an application's global command set."""

    async def put_global_commands(
        self,
        application_id: str,
        commands: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        ...


class CommandDeployer:
    """
    Full-replace publisher for application commands.

    Whatever is not in the registry is removed from the platform. Failures
    are not retried: they are logged and re-raised so the caller can abort.
    """

    def __init__(
        self,
        client: RegistrationClient,
        diagnostic_log: DiagnosticLog | None = None,
    ) -> None:
        self.client = client
        self.diagnostics = (
            diagnostic_log if diagnostic_log is not None else DiagnosticLog(logger)
        )

    async def publish(
        self,
        registry: CommandRegistry,
        application_id: str,
    ) -> list[dict[str, Any]]:
        """
        Publish every command in the registry.

        Args:
            registry: Loaded commands
            application_id: Application (client) ID

        Returns:
            The command descriptors confirmed by the platform

        Raises:
            Exception: Whatever the registration call raised
        """
        commands = registry.schemas()

        logger.info(
            f"Started refreshing {len(commands)} application (/) commands.",
            command_count=len(commands),
        )

        try:
            published = await self.client.put_global_commands(application_id, commands)
        except Exception as e:
            self.diagnostics.record(
                Diagnostic.error(
                    DiagnosticCode.COMMAND_DEPLOY_ERROR,
                    "Error deploying commands",
                    error=str(e),
                    error_type=type(e).__name__,
                    client_id=application_id,
                    command_count=len(commands),
                ),
                exc_info=e,
            )
            raise

        logger.info(
            f"Successfully reloaded {len(published)} application (/) commands.",
            command_count=len(published),
            client_id=application_id,
        )
        self._report_divergence(commands, published, application_id)
        return published

    def _report_divergence(
        self,
        requested: list[dict[str, Any]],
        published: list[dict[str, Any]],
        application_id: str,
    ) -> None:
        """Warn when the confirmed set differs from what was sent."""
        requested_names = [c["name"] for c in requested]
        published_names = [c.get("name") for c in published if isinstance(c, dict)]

        missing = sorted(set(requested_names) - set(published_names))
        unexpected = sorted(
            n for n in set(published_names) - set(requested_names) if n is not None
        )
        if missing or unexpected or len(published) != len(requested):
            self.diagnostics.record(
                Diagnostic(
                    message="Published command set differs from requested set",
                    level=DiagnosticLevel.WARNING,
                    context={
                        "client_id": application_id,
                        "requested_count": len(requested),
                        "published_count": len(published),
                        "missing": missing,
                        "unexpected": unexpected,
                    },
                )
            )


async def publish(
    registry: CommandRegistry,
    application_id: str,
    token: str,
    base_url: str = DEFAULT_API_BASE_URL,
    timeout_seconds: float = 30.0,
    diagnostic_log: DiagnosticLog | None = None,
    client: RegistrationClient | None = None,
) -> list[dict[str, Any]]:
    """
    Publish a registry with a short-lived REST client.

    Args:
        registry: Loaded commands
        application_id: Application (client) ID
        token: Bot token
        base_url: API root
        timeout_seconds: Request timeout for the fresh REST client
        diagnostic_log: Shared log to record diagnostics into
        client: Registration client to use instead of a fresh REST client

    Returns:
        The command descriptors confirmed by the platform
    """
    if client is not None:
        return await CommandDeployer(client, diagnostic_log).publish(registry, application_id)

    async with DiscordRestClient(
        token, base_url=base_url, timeout_seconds=timeout_seconds
    ) as rest:
        return await CommandDeployer(rest, diagnostic_log).publish(registry, application_id)
