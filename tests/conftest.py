"""
Pytest configuration and shared fixtures.
"""

import textwrap
from pathlib import Path
from typing import Any, Callable

import pytest

from slashbot.chat.interaction import Interaction
from slashbot.core.diagnostics import DiagnosticLog


class FakeInteraction(Interaction):
    """In-memory interaction that records every response."""

    def __init__(
        self,
        command_name: str,
        options: dict[str, Any] | None = None,
        user_id: str = "u1",
        guild_id: str | None = "g1",
        channel_id: str | None = "c1",
        replied: bool = False,
        deferred: bool = False,
    ) -> None:
        self._command_name = command_name
        self._options = options or {}
        self._user_id = user_id
        self._guild_id = guild_id
        self._channel_id = channel_id
        self._replied = replied
        self._deferred = deferred
        self.replies: list[tuple[str, bool]] = []
        self.follow_ups: list[tuple[str, bool]] = []

    @property
    def command_name(self) -> str:
        return self._command_name

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def guild_id(self) -> str | None:
        return self._guild_id

    @property
    def channel_id(self) -> str | None:
        return self._channel_id

    @property
    def options(self) -> dict[str, Any]:
        return self._options

    @property
    def replied(self) -> bool:
        return self._replied

    @property
    def deferred(self) -> bool:
        return self._deferred

    async def reply(self, content: str, *, ephemeral: bool = False) -> None:
        if self.responded:
            raise RuntimeError("Interaction already acknowledged")
        self.replies.append((content, ephemeral))
        self._replied = True

    async def follow_up(self, content: str, *, ephemeral: bool = False) -> None:
        self.follow_ups.append((content, ephemeral))

    async def defer(self, *, ephemeral: bool = False) -> None:
        if self.responded:
            raise RuntimeError("Interaction already acknowledged")
        self._deferred = True

    @property
    def response_count(self) -> int:
        return len(self.replies) + len(self.follow_ups)


STATIC_COMMAND = """
from slashbot.core.models import CommandDefinition

data = CommandDefinition(name={name!r}, description="Static command")


async def execute(interaction):
    await interaction.reply({reply!r})
"""

DEFERRED_COMMAND = """
from slashbot.core.models import CommandDefinition

calls = []


async def data():
    calls.append(1)
    return CommandDefinition(name={name!r}, description="Deferred command")


async def execute(interaction):
    await interaction.reply({reply!r})
"""

@pytest.fixture
def diagnostic_log() -> DiagnosticLog:
    """Fresh diagnostic log for each test."""
    return DiagnosticLog()


@pytest.fixture
def write_command(tmp_path: Path) -> Callable[..., Path]:
    """Write a command file under tmp_path and return its path."""

    def _write(relative: str, source: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source))
        return path

    return _write


@pytest.fixture
def static_command() -> Callable[..., str]:
    """Source for a static command replying with a fixed string."""

    def _source(name: str, reply: str = "ok") -> str:
        return STATIC_COMMAND.format(name=name, reply=reply)

    return _source


@pytest.fixture
def deferred_command() -> Callable[..., str]:
    """Source for a command whose definition comes from an async producer."""

    def _source(name: str, reply: str = "ok") -> str:
        return DEFERRED_COMMAND.format(name=name, reply=reply)

    return _source


@pytest.fixture
def make_interaction() -> Callable[..., FakeInteraction]:
    """Factory for in-memory interactions."""
    return FakeInteraction
