"""
Command Models

Definitions, options and load-time units for slash commands.
"""

import re
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Platform limits for chat-input commands
NAME_PATTERN = re.compile(r"^[-_\w]{1,32}$")
MAX_DESCRIPTION_LENGTH = 100
MAX_OPTIONS = 25
MAX_CHOICES = 25

# Chat-input application command
CHAT_INPUT_COMMAND_TYPE = 1


class OptionType(IntEnum):
    """Value types a command option can carry."""

    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11


def _check_name(value: str) -> str:
    if not NAME_PATTERN.match(value):
        raise ValueError(
            f"Invalid name {value!r}: must be 1-32 characters of letters, digits, '-' or '_'"
        )
    if value != value.lower():
        raise ValueError(f"Invalid name {value!r}: must be lowercase")
    return value


class OptionChoice(BaseModel):
    """A fixed value offered for an option."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=100)
    value: str | int | float


class CommandOption(BaseModel):
    """A single parameter accepted by a command."""

    model_config = ConfigDict(frozen=True)

    type: OptionType
    name: str
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    required: bool = False
    choices: tuple[OptionChoice, ...] = ()
    min_value: int | float | None = None
    max_value: int | float | None = None
    min_length: int | None = Field(default=None, ge=0, le=6000)
    max_length: int | None = Field(default=None, ge=1, le=6000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_name(value)

    @field_validator("choices")
    @classmethod
    def validate_choices(cls, value: tuple[OptionChoice, ...]) -> tuple[OptionChoice, ...]:
        if len(value) > MAX_CHOICES:
            raise ValueError(f"An option can have at most {MAX_CHOICES} choices")
        return value

    def to_schema(self) -> dict[str, Any]:
        """Project to the registration wire format."""
        schema: dict[str, Any] = {
            "type": int(self.type),
            "name": self.name,
            "description": self.description,
            "required": self.required,
        }
        if self.choices:
            schema["choices"] = [
                {"name": c.name, "value": c.value} for c in self.choices
            ]
        for key in ("min_value", "max_value", "min_length", "max_length"):
            value = getattr(self, key)
            if value is not None:
                schema[key] = value
        return schema


class CommandDefinition(BaseModel):
    """
    Resolved definition of a slash command.

    Immutable once built. ``to_schema()`` gives the exact payload the
    registration endpoint expects for this command.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    options: tuple[CommandOption, ...] = ()
    default_member_permissions: str | None = None
    dm_permission: bool | None = None
    nsfw: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_name(value)

    @model_validator(mode="after")
    def validate_options(self) -> "CommandDefinition":
        if len(self.options) > MAX_OPTIONS:
            raise ValueError(f"A command can have at most {MAX_OPTIONS} options")

        names = [o.name for o in self.options]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate option names: {', '.join(duplicates)}")

        seen_optional = False
        for option in self.options:
            if not option.required:
                seen_optional = True
            elif seen_optional:
                raise ValueError(
                    f"Required option {option.name!r} must come before optional options"
                )
        return self

    @classmethod
    def coerce(cls, value: Any) -> "CommandDefinition":
        """
        Build a definition from whatever a command module supplied.

        Accepts an existing definition or a plain mapping.

        Raises:
            TypeError: If the value is neither
            pydantic.ValidationError: If the mapping is not a valid definition
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls.model_validate(value)
        raise TypeError(
            f"Command data must be a CommandDefinition or dict, got {type(value).__name__}"
        )

    def to_schema(self) -> dict[str, Any]:
        """Project to the registration wire format."""
        schema: dict[str, Any] = {
            "type": CHAT_INPUT_COMMAND_TYPE,
            "name": self.name,
            "description": self.description,
            "options": [o.to_schema() for o in self.options],
            "nsfw": self.nsfw,
        }
        if self.default_member_permissions is not None:
            schema["default_member_permissions"] = self.default_member_permissions
        if self.dm_permission is not None:
            schema["dm_permission"] = self.dm_permission
        return schema


# Type alias for command handlers: (interaction) -> None, sync or async
CommandHandler = Callable[[Any], Awaitable[None] | None]


@runtime_checkable
class CommandModule(Protocol):
    """
    Shape every command file must expose.

    ``data`` is either a definition (static) or a zero-argument producer
    returning one (deferred). ``execute`` handles the interaction; a plain
    function is accepted as well as a coroutine function.
    """

    data: Any

    async def execute(self, interaction: Any) -> None:
        ...


@dataclass(frozen=True)
class CommandUnit:
    """A resolved definition bound to its handler."""

    definition: CommandDefinition
    handler: CommandHandler
    source: Path

    @property
    def name(self) -> str:
        return self.definition.name
