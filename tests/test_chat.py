"""Tests for the slashbot chat layer."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from slashbot.chat.discord import (
    MAX_MESSAGE_LENGTH,
    DiscordBot,
    DiscordInteraction,
    is_chat_input_command,
)
from slashbot.core.diagnostics import DiagnosticCode, DiagnosticLog
from slashbot.core.dispatcher import ERROR_REPLY, InteractionDispatcher
from slashbot.core.registry import discover

BUNDLED_COMMANDS = Path(__file__).resolve().parents[1] / "slashbot" / "commands"


def _raw_interaction(
    name: str = "ping",
    options: list[dict] | None = None,
    interaction_type: discord.InteractionType = discord.InteractionType.application_command,
    command_type: int = 1,
    done: bool = False,
    response_type: discord.InteractionResponseType | None = None,
) -> MagicMock:
    """Build a stand-in for a discord.py Interaction."""
    raw = MagicMock()
    raw.type = interaction_type
    raw.data = {"type": command_type, "name": name, "options": options or []}
    raw.user.id = 42
    raw.guild_id = 7
    raw.channel_id = 8
    raw.response.is_done = MagicMock(return_value=done)
    raw.response.type = response_type
    raw.response.send_message = AsyncMock()
    raw.response.defer = AsyncMock()
    raw.followup.send = AsyncMock()
    return raw


class TestDiscordInteraction:
    """Tests for DiscordInteraction."""

    def test_identifiers(self) -> None:
        """Test IDs are exposed as strings."""
        interaction = DiscordInteraction(_raw_interaction())
        assert interaction.command_name == "ping"
        assert interaction.user_id == "42"
        assert interaction.guild_id == "7"
        assert interaction.channel_id == "8"

    def test_dm_has_no_guild(self) -> None:
        """Test guild_id is None outside a guild."""
        raw = _raw_interaction()
        raw.guild_id = None
        assert DiscordInteraction(raw).guild_id is None

    def test_options_flattened(self) -> None:
        """Test option payloads become a name/value dict."""
        raw = _raw_interaction(
            "echo",
            options=[
                {"name": "message", "type": 3, "value": "hi"},
                {"name": "ephemeral", "type": 5, "value": True},
            ],
        )
        interaction = DiscordInteraction(raw)
        assert interaction.options == {"message": "hi", "ephemeral": True}
        assert interaction.get_option("missing", "x") == "x"

    def test_fresh_state(self) -> None:
        """Test a fresh interaction is neither replied nor deferred."""
        interaction = DiscordInteraction(_raw_interaction())
        assert interaction.replied is False
        assert interaction.deferred is False
        assert interaction.responded is False

    def test_replied_state(self) -> None:
        """Test a sent message counts as replied."""
        interaction = DiscordInteraction(
            _raw_interaction(
                done=True,
                response_type=discord.InteractionResponseType.channel_message,
            )
        )
        assert interaction.replied is True
        assert interaction.deferred is False

    def test_deferred_state(self) -> None:
        """Test a deferred response counts as deferred, not replied."""
        interaction = DiscordInteraction(
            _raw_interaction(
                done=True,
                response_type=discord.InteractionResponseType.deferred_channel_message,
            )
        )
        assert interaction.deferred is True
        assert interaction.replied is False
        assert interaction.responded is True

    @pytest.mark.asyncio
    async def test_reply_and_follow_up(self) -> None:
        """Test replies go through the response and follow-ups through the webhook."""
        raw = _raw_interaction()
        interaction = DiscordInteraction(raw)

        await interaction.reply("hello", ephemeral=True)
        await interaction.follow_up("again")

        raw.response.send_message.assert_awaited_once_with("hello", ephemeral=True)
        raw.followup.send.assert_awaited_once_with("again", ephemeral=False)

    @pytest.mark.asyncio
    async def test_long_reply_truncated(self) -> None:
        """Test messages are cut to the platform limit."""
        raw = _raw_interaction()

        await DiscordInteraction(raw).reply("x" * 5000)

        sent = raw.response.send_message.await_args.args[0]
        assert len(sent) == MAX_MESSAGE_LENGTH
        assert sent.endswith("...")


class TestChatInputFilter:
    """Tests for is_chat_input_command()."""

    def test_slash_command(self) -> None:
        assert is_chat_input_command(_raw_interaction()) is True

    def test_component_interaction(self) -> None:
        raw = _raw_interaction(interaction_type=discord.InteractionType.component)
        assert is_chat_input_command(raw) is False

    def test_context_menu_command(self) -> None:
        raw = _raw_interaction(command_type=2)
        assert is_chat_input_command(raw) is False


class TestDiscordBot:
    """Tests for DiscordBot event handling."""

    @pytest.mark.asyncio
    async def test_ignores_non_commands(self) -> None:
        """Test only slash commands reach the dispatcher."""
        dispatcher = MagicMock()
        dispatcher.dispatch = AsyncMock()
        bot = DiscordBot("token", dispatcher)

        await bot.handle_interaction(
            _raw_interaction(interaction_type=discord.InteractionType.component)
        )

        dispatcher.dispatch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ping_end_to_end(self) -> None:
        """Test /ping from the bundled commands answers pong!."""
        diagnostic_log = DiagnosticLog()
        registry, _ = await discover(BUNDLED_COMMANDS, diagnostic_log=diagnostic_log)
        bot = DiscordBot("token", InteractionDispatcher(registry, diagnostic_log))
        raw = _raw_interaction("ping")

        await bot.handle_interaction(raw)

        raw.response.send_message.assert_awaited_once_with("pong!", ephemeral=False)
        assert diagnostic_log.with_code(DiagnosticCode.COMMAND_EXECUTION_ERROR) == []

    @pytest.mark.asyncio
    async def test_echo_end_to_end(self) -> None:
        """Test /echo replies with its option value."""
        registry, _ = await discover(BUNDLED_COMMANDS)
        bot = DiscordBot("token", InteractionDispatcher(registry))
        raw = _raw_interaction(
            "echo",
            options=[
                {"name": "message", "type": 3, "value": "hello there"},
                {"name": "ephemeral", "type": 5, "value": True},
            ],
        )

        await bot.handle_interaction(raw)

        raw.response.send_message.assert_awaited_once_with("hello there", ephemeral=True)

    @pytest.mark.asyncio
    async def test_failing_reply_uses_follow_up(self) -> None:
        """Test an error after the platform marked the reply done goes to follow-up."""
        registry, _ = await discover(BUNDLED_COMMANDS)
        dispatcher = InteractionDispatcher(registry)
        raw = _raw_interaction("ping")

        async def send_then_fail(*args, **kwargs):
            raw.response.is_done.return_value = True
            raw.response.type = discord.InteractionResponseType.channel_message
            raise RuntimeError("send failed after acknowledging")

        raw.response.send_message.side_effect = send_then_fail

        await dispatcher.dispatch(DiscordInteraction(raw))

        raw.followup.send.assert_awaited_once_with(ERROR_REPLY, ephemeral=True)
