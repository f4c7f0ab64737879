"""
slashbot Chat Layer

Platform-facing pieces: the interaction interface and the REST client.
The gateway adapter lives in slashbot.chat.discord and is imported directly.
"""

from slashbot.chat.interaction import Interaction
from slashbot.chat.rest import DEFAULT_API_BASE_URL, DiscordRestClient

__all__ = [
    "Interaction",
    "DiscordRestClient",
    "DEFAULT_API_BASE_URL",
]
