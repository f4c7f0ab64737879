"""
Discord Adapter

Gateway client and interaction wrapper built on discord.py.
"""

import asyncio
from typing import Any

import discord
import structlog

from slashbot.chat.interaction import Interaction
from slashbot.core.dispatcher import InteractionDispatcher

logger = structlog.get_logger(__name__)

# Chat-input application command
CHAT_INPUT_TYPE = 1

# Discord has a 2000 character limit on message content
MAX_MESSAGE_LENGTH = 2000

_DEFERRED_RESPONSE_TYPES = frozenset({
    discord.InteractionResponseType.deferred_channel_message,
    discord.InteractionResponseType.deferred_message_update,
})


def is_chat_input_command(interaction: Any) -> bool:
    """Check if a raw interaction is a slash (chat-input) command."""
    if interaction.type != discord.InteractionType.application_command:
        return False
    data = interaction.data or {}
    return data.get("type", CHAT_INPUT_TYPE) == CHAT_INPUT_TYPE


def _flatten_options(raw: list[dict[str, Any]] | None) -> dict[str, Any]:
    """Flatten the interaction's option payload to ``{name: value}``."""
    options: dict[str, Any] = {}
    for option in raw or []:
        if "value" in option:
            options[option["name"]] = option["value"]
    return options


class DiscordInteraction(Interaction):
    """Interaction backed by a ``discord.Interaction``."""

    def __init__(self, interaction: Any) -> None:
        self._interaction = interaction
        self._data: dict[str, Any] = interaction.data or {}

    @property
    def raw(self) -> Any:
        """The underlying discord.py interaction."""
        return self._interaction

    @property
    def command_name(self) -> str:
        return self._data.get("name", "")

    @property
    def user_id(self) -> str:
        return str(self._interaction.user.id)

    @property
    def guild_id(self) -> str | None:
        guild_id = self._interaction.guild_id
        return str(guild_id) if guild_id is not None else None

    @property
    def channel_id(self) -> str | None:
        channel_id = self._interaction.channel_id
        return str(channel_id) if channel_id is not None else None

    @property
    def options(self) -> dict[str, Any]:
        return _flatten_options(self._data.get("options"))

    @property
    def deferred(self) -> bool:
        return self._interaction.response.type in _DEFERRED_RESPONSE_TYPES

    @property
    def replied(self) -> bool:
        return self._interaction.response.is_done() and not self.deferred

    async def reply(self, content: str, *, ephemeral: bool = False) -> None:
        await self._interaction.response.send_message(
            _truncate(content), ephemeral=ephemeral
        )

    async def follow_up(self, content: str, *, ephemeral: bool = False) -> None:
        await self._interaction.followup.send(_truncate(content), ephemeral=ephemeral)

    async def defer(self, *, ephemeral: bool = False) -> None:
        await self._interaction.response.defer(ephemeral=ephemeral, thinking=True)


def _truncate(text: str) -> str:
    if len(text) > MAX_MESSAGE_LENGTH:
        return text[: MAX_MESSAGE_LENGTH - 3] + "..."
    return text


class DiscordBot:
    """
    Discord gateway client that feeds slash commands to a dispatcher.

    Requires:
    - BOTTOKEN: Discord bot token
    """

    def __init__(
        self,
        token: str,
        dispatcher: InteractionDispatcher,
    ) -> None:
        """
        Initialize the bot.

        Args:
            token: Discord bot token
            dispatcher: Dispatcher holding the loaded commands
        """
        self.token = token
        self.dispatcher = dispatcher
        self._client: discord.Client | None = None
        self._running = False

    def connect(self) -> discord.Client:
        """Create the gateway client and register event handlers."""
        intents = discord.Intents.none()
        intents.guilds = True
        client = discord.Client(intents=intents)

        @client.event
        async def on_ready() -> None:
            logger.info(
                f"Logged in as {client.user}!",
                username=client.user.name,
                user_id=str(client.user.id),
            )

        @client.event
        async def on_interaction(interaction: discord.Interaction) -> None:
            await self.handle_interaction(interaction)

        self._client = client
        logger.info("Discord client initialized")
        return client

    async def handle_interaction(self, interaction: Any) -> None:
        """Dispatch a raw gateway interaction if it is a slash command."""
        if not is_chat_input_command(interaction):
            return
        await self.dispatcher.dispatch(DiscordInteraction(interaction))

    async def run(self) -> None:
        """Log in and process events until the client closes."""
        client = self._client or self.connect()

        self._running = True
        logger.info("Discord bot starting", commands=len(self.dispatcher.registry))

        try:
            await client.start(self.token)
        except asyncio.CancelledError:
            await self.stop()
            raise
        finally:
            self._running = False

    async def stop(self) -> None:
        """Disconnect from Discord."""
        if self._client is not None and not self._client.is_closed():
            await self._client.close()
        logger.info("Disconnected from Discord")
