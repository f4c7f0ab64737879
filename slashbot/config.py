"""Bot Configuration."""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from slashbot.chat.rest import DEFAULT_API_BASE_URL

# Bundled commands shipped with the package
DEFAULT_COMMANDS_DIR = Path(__file__).parent / "commands"


class ConfigurationError(Exception):
    """Raised when required configuration is missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            f"Missing required environment variable(s): {', '.join(missing)}. "
            "Set them in the environment or in a .env file."
        )


class BotSettings(BaseSettings):
    """Settings for the slashbot process."""

    # Credentials
    bot_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("BOTTOKEN", "SLASHBOT_BOT_TOKEN", "bot_token"),
    )
    client_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CLIENTID", "SLASHBOT_CLIENT_ID", "client_id"),
    )

    # Command loading
    commands_dir: Path = DEFAULT_COMMANDS_DIR
    reserved_dir: str = "tooling"

    # Registration endpoint
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = 30.0  # seconds

    log_level: str = "INFO"

    class Config:
        env_prefix = "SLASHBOT_"
        env_file = ".env"
        extra = "ignore"

    def require_credentials(self) -> tuple[str, str]:
        """
        Return (bot_token, client_id), failing if either is unset.

        Raises:
            ConfigurationError: Listing every missing variable
        """
        missing = []
        if not self.bot_token:
            missing.append("BOTTOKEN")
        if not self.client_id:
            missing.append("CLIENTID")
        if missing:
            raise ConfigurationError(missing)
        return self.bot_token, self.client_id


def get_settings() -> BotSettings:
    """Load settings from the environment and ``.env``."""
    return BotSettings()
