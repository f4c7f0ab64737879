"""
Echoes a message back to the caller.

The definition is built by a producer so it is resolved at load time.
"""

from slashbot.commands.tooling.text import truncate
from slashbot.core.models import CommandDefinition, CommandOption, OptionType


async def data() -> CommandDefinition:
    return CommandDefinition(
        name="echo",
        description="Repeat a message back to you",
        options=[
            CommandOption(
                type=OptionType.STRING,
                name="message",
                description="Text to repeat",
                required=True,
                max_length=2000,
            ),
            CommandOption(
                type=OptionType.BOOLEAN,
                name="ephemeral",
                description="Only show the reply to you",
            ),
        ],
    )


async def execute(interaction) -> None:
    message = interaction.get_option("message", "")
    ephemeral = bool(interaction.get_option("ephemeral", False))
    await interaction.reply(truncate(message), ephemeral=ephemeral)
