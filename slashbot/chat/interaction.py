"""
Interaction Base

Platform-neutral view of one inbound slash-command invocation.
"""

from abc import ABC, abstractmethod
from typing import Any


class Interaction(ABC):
    """
    Abstract base class for an inbound command invocation.

    The platform client owns the replied/deferred state; implementations
    only report it. At most one initial reply (or defer) is allowed, after
    which any number of follow-ups may be sent.
    """

    @property
    @abstractmethod
    def command_name(self) -> str:
        """Name of the command being invoked."""
        ...

    @property
    @abstractmethod
    def user_id(self) -> str:
        """ID of the invoking user."""
        ...

    @property
    @abstractmethod
    def guild_id(self) -> str | None:
        """ID of the originating guild (None in DMs)."""
        ...

    @property
    @abstractmethod
    def channel_id(self) -> str | None:
        """ID of the originating channel."""
        ...

    @property
    @abstractmethod
    def options(self) -> dict[str, Any]:
        """Option values keyed by option name."""
        ...

    @property
    @abstractmethod
    def replied(self) -> bool:
        """Whether an initial reply has been sent."""
        ...

    @property
    @abstractmethod
    def deferred(self) -> bool:
        """Whether the initial response was deferred."""
        ...

    @abstractmethod
    async def reply(self, content: str, *, ephemeral: bool = False) -> None:
        """
        Send the initial reply.

        Args:
            content: Message text
            ephemeral: Only visible to the invoking user
        """
        ...

    @abstractmethod
    async def follow_up(self, content: str, *, ephemeral: bool = False) -> None:
        """
        Send a follow-up message after the initial response.

        Args:
            content: Message text
            ephemeral: Only visible to the invoking user
        """
        ...

    @abstractmethod
    async def defer(self, *, ephemeral: bool = False) -> None:
        """Acknowledge now and reply later."""
        ...

    @property
    def responded(self) -> bool:
        """Whether an initial response (reply or defer) was already sent."""
        return self.replied or self.deferred

    def get_option(self, name: str, default: Any = None) -> Any:
        """Get an option value by name."""
        return self.options.get(name, default)

    def describe(self) -> dict[str, Any]:
        """Identifiers for structured logging."""
        return {
            "command_name": self.command_name,
            "options": self.options,
            "guild_id": self.guild_id,
            "channel_id": self.channel_id,
            "user_id": self.user_id,
        }
