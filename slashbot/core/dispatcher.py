"""
Interaction Dispatcher

Routes an inbound interaction to its command handler and makes sure a
failing handler never takes the process down or leaves the user
without an answer.
"""

import inspect
import traceback

import structlog

from slashbot.chat.interaction import Interaction
from slashbot.core.diagnostics import Diagnostic, DiagnosticCode, DiagnosticLog
from slashbot.core.registry import CommandRegistry

logger = structlog.get_logger(__name__)

ERROR_REPLY = "There was an error while executing this command!"


class InteractionDispatcher:
    """
    Dispatches interactions against a read-only command registry.

    Usage:
        dispatcher = InteractionDispatcher(registry)
        await dispatcher.dispatch(interaction)
    """

    def __init__(
        self,
        registry: CommandRegistry,
        diagnostic_log: DiagnosticLog | None = None,
    ) -> None:
        self.registry = registry
        self.diagnostics = (
            diagnostic_log if diagnostic_log is not None else DiagnosticLog(logger)
        )

    async def dispatch(self, interaction: Interaction) -> None:
        """
        Run the handler for an interaction.

        Never raises. Unknown commands are logged and left unanswered;
        handler failures are logged and answered with an ephemeral error
        message (a follow-up if the interaction was already answered).

        Args:
            interaction: The inbound invocation
        """
        unit = self.registry.get(interaction.command_name)

        if unit is None:
            self.diagnostics.record(
                Diagnostic.error(
                    DiagnosticCode.COMMAND_NOT_FOUND,
                    f"No command matching {interaction.command_name} was found.",
                    **interaction.describe(),
                )
            )
            return

        try:
            result = unit.handler(interaction)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.diagnostics.record(
                Diagnostic.error(
                    DiagnosticCode.COMMAND_EXECUTION_ERROR,
                    "Error executing command",
                    error=str(e),
                    error_type=type(e).__name__,
                    stack="".join(traceback.format_exception(type(e), e, e.__traceback__)),
                    file_path=str(unit.source),
                    **interaction.describe(),
                )
            )
            await self._send_error_reply(interaction)
            return

        self.diagnostics.record(
            Diagnostic.info("Command executed successfully", **interaction.describe())
        )

    async def _send_error_reply(self, interaction: Interaction) -> None:
        """Send exactly one user-visible error message."""
        try:
            if interaction.responded:
                await interaction.follow_up(ERROR_REPLY, ephemeral=True)
            else:
                await interaction.reply(ERROR_REPLY, ephemeral=True)
        except Exception as e:
            logger.warning(
                "Failed to send error reply",
                command_name=interaction.command_name,
                user_id=interaction.user_id,
                error=str(e),
            )
