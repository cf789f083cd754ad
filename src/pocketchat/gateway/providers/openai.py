from typing import Any

from openai import APIConnectionError, APIError, AsyncOpenAI

from ..base import ChatCompletionGateway, ProgressCallback
from ..errors import GatewayConnectionError, GatewayResponseError
from ..models import ChatMessage


class OpenAICompatibleGateway(ChatCompletionGateway):
    """Chat Completions gateway for OpenAI or any compatible server.

    Ollama, the llama.cpp server and vLLM all expose /v1/chat/completions,
    so pointing base_url at them gives a message-sequence backend.

    Hidden design decisions:
    - OpenAI API client initialization
    - Message format conversion
    - Streaming delta extraction
    - Mapping SDK errors to GatewayError
    """

    error_message = "Sorry, something went wrong."

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **client_kwargs: Any
    ):
        """Initialize the gateway.

        Args:
            api_key: API key (any non-empty string for local servers)
            model: Model to request
            base_url: Optional custom API base URL
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            **client_kwargs
        )

    @property
    def backend_type(self) -> str:
        return "openai"

    async def completion(
        self,
        messages: list[ChatMessage],
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Generate a reply using Chat Completions.

        Streams when on_progress is given; the return value is the full reply
        either way.
        """
        request_params: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "temperature": self._temperature,
        }
        if self._max_tokens is not None:
            request_params["max_tokens"] = self._max_tokens

        try:
            if on_progress is None:
                completion = await self._client.chat.completions.create(**request_params)
                if not completion.choices:
                    raise GatewayResponseError("no choices returned")
                return completion.choices[0].message.content or ""
            return await self._stream(request_params, on_progress)
        except APIConnectionError as e:
            raise GatewayConnectionError(str(e)) from e
        except APIError as e:
            raise GatewayResponseError(e.message, status_code=getattr(e, "status_code", None)) from e

    async def _stream(
        self,
        request_params: dict[str, Any],
        on_progress: ProgressCallback,
    ) -> str:
        parts: list[str] = []
        stream = await self._client.chat.completions.create(stream=True, **request_params)
        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta.content:
                delta = chunk.choices[0].delta.content
                parts.append(delta)
                on_progress(delta)
        return "".join(parts)

    async def cleanup(self) -> None:
        """Close the OpenAI client.

        Note: Uses the OpenAI SDK's async context manager for proper cleanup.
        See: https://github.com/openai/openai-python#async-usage
        """
        await self._client.close()
