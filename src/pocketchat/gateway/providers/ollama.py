"""Ollama HTTP gateway.

Sends the raw prompt to a local Ollama server's /api/generate endpoint
and returns the non-streamed reply.
"""

from typing import Any

import httpx

from ..base import PromptGateway
from ..errors import GatewayConnectionError, GatewayResponseError

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "llama3.2"
DEFAULT_TIMEOUT = 120.0


class OllamaGateway(PromptGateway):
    """HTTP gateway for an Ollama generation server.

    Hidden design decisions:
    - Endpoint path and payload shape
    - HTTP client ownership and timeouts
    - Mapping transport and status errors to GatewayError
    """

    error_message = "Error contacting Ollama."

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        **options: Any
    ):
        """Initialize Ollama gateway.

        Args:
            base_url: Server URL (default: http://localhost:11434)
            model: Model name known to the server
            timeout: Request timeout in seconds
            client: Optional pre-built client (not closed by cleanup())
            **options: Extra fields merged into the request's "options"
        """
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._options = options
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def backend_type(self) -> str:
        return "ollama"

    @property
    def base_url(self) -> str:
        return self._base_url

    async def fetch_response(self, prompt: str) -> str:
        """POST the prompt to /api/generate and return the reply text."""
        payload: dict[str, Any] = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
        }
        if self._options:
            payload["options"] = self._options

        try:
            response = await self._client.post(f"{self._base_url}/api/generate", json=payload)
        except httpx.HTTPError as e:
            raise GatewayConnectionError(str(e)) from e

        if response.status_code >= 400:
            raise GatewayResponseError(response.text[:200], status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise GatewayResponseError("body is not JSON", status_code=response.status_code) from e

        reply = data.get("response") if isinstance(data, dict) else None
        if not isinstance(reply, str):
            raise GatewayResponseError("missing 'response' field", status_code=response.status_code)
        return reply

    async def list_models(self) -> list[str]:
        """Names of the models the server has pulled (GET /api/tags)."""
        try:
            response = await self._client.get(f"{self._base_url}/api/tags")
        except httpx.HTTPError as e:
            raise GatewayConnectionError(str(e)) from e

        if response.status_code >= 400:
            raise GatewayResponseError(response.text[:200], status_code=response.status_code)

        try:
            models = response.json().get("models", [])
        except (ValueError, AttributeError) as e:
            raise GatewayResponseError("unexpected /api/tags body") from e
        return [entry["name"] for entry in models if isinstance(entry, dict) and "name" in entry]

    async def cleanup(self) -> None:
        """Close the HTTP client if this gateway created it."""
        if self._owns_client:
            await self._client.aclose()
