"""
Discord REST Client

Minimal client for the application-command registration endpoint.
"""

from typing import Any

import httpx
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_API_BASE_URL = "https://discord.com/api/v10"


class DiscordRestClient:
    """
    HTTP client for registering application commands.

    Requires:
    - a bot token, sent as ``Authorization: Bot <token>``
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: Bot token
            base_url: API root including the version segment
            timeout_seconds: Per-request timeout
            transport: Optional httpx transport (used by tests)
        """
        self._token = token
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                transport=self._transport,
                headers={
                    "Authorization": f"Bot {self._token}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "DiscordRestClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def put_global_commands(
        self,
        application_id: str,
        commands: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """
        Replace the application's global command set.

        Anything not in ``commands`` is removed from the platform.

        Args:
            application_id: Application (client) ID
            commands: Wire-schema command payloads

        Returns:
            The command objects the platform confirmed

        Raises:
            httpx.HTTPStatusError: If the platform rejected the request
            httpx.HTTPError: On transport failures
        """
        client = await self._get_client()
        response = await client.put(
            f"/applications/{application_id}/commands",
            json=commands,
        )
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, list):
            raise ValueError(
                f"Unexpected registration response: expected a list, got {type(data).__name__}"
            )
        logger.debug(
            "Registration endpoint responded",
            status_code=response.status_code,
            count=len(data),
        )
        return data
