"""Replies with "pong!" when invoked."""

from slashbot.core.models import CommandDefinition

data = CommandDefinition(
    name="ping",
    description="Pong!",
)


async def execute(interaction) -> None:
    await interaction.reply("pong!")
