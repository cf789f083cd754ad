"""Embedded llama.cpp gateway.

Runs a GGUF model in-process through the llama-cpp-python binding.
All blocking calls into the native runtime run in worker threads.
"""

import asyncio
import os
from pathlib import Path
from typing import Any

try:
    from llama_cpp import Llama
    LLAMA_CPP_AVAILABLE = True
except ImportError:
    LLAMA_CPP_AVAILABLE = False
    Llama = None

from ..base import ChatCompletionGateway, ProgressCallback
from ..errors import GatewayNotInitializedError, GatewayResponseError
from ..models import ChatMessage


def _default_threads() -> int:
    return max(2, (os.cpu_count() or 4) // 2)


class LlamaCppGateway(ChatCompletionGateway):
    """On-device model gateway using llama.cpp.

    Hidden design decisions:
    - Model file loading and runtime parameters
    - Thread offloading of blocking inference
    - Streaming delta extraction
    """

    error_message = "Sorry, something went wrong."

    def __init__(
        self,
        model_path: str | Path,
        n_ctx: int = 2048,
        n_threads: int | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **llama_kwargs: Any
    ):
        """Initialize the gateway without loading the model.

        Args:
            model_path: Path to a GGUF model file
            n_ctx: Context window size in tokens
            n_threads: CPU threads for inference (default: half the cores)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate (None: runtime default)
            **llama_kwargs: Additional kwargs for llama_cpp.Llama
        """
        if not LLAMA_CPP_AVAILABLE:
            raise ImportError(
                "Embedded backend requires llama-cpp-python. "
                "Install with: pip install 'pocketchat[embedded]'"
            )

        self._model_path = Path(model_path)
        self._n_ctx = n_ctx
        self._n_threads = n_threads or _default_threads()
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._llama_kwargs = llama_kwargs
        self._llm: Any | None = None
        self._init_lock = asyncio.Lock()

    @property
    def backend_type(self) -> str:
        return "embedded"

    @property
    def model(self) -> str:
        return self._model_path.name

    @property
    def is_initialized(self) -> bool:
        return self._llm is not None

    async def initialize(self) -> None:
        """Load the model once. Later calls return immediately."""
        async with self._init_lock:
            if self._llm is not None:
                return
            if not self._model_path.exists():
                raise FileNotFoundError(f"Model file not found: {self._model_path}")
            self._llm = await asyncio.to_thread(
                Llama,
                model_path=str(self._model_path),
                n_ctx=self._n_ctx,
                n_threads=self._n_threads,
                verbose=False,
                **self._llama_kwargs
            )

    async def completion(
        self,
        messages: list[ChatMessage],
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Generate a reply with the loaded model.

        Streams from the runtime when on_progress is given, forwarding each
        delta; otherwise makes a single blocking call.
        """
        if self._llm is None:
            raise GatewayNotInitializedError(self.backend_type)

        llama_messages = [{"role": msg.role, "content": msg.content} for msg in messages]
        request_params: dict[str, Any] = {
            "messages": llama_messages,
            "temperature": self._temperature,
        }
        if self._max_tokens is not None:
            request_params["max_tokens"] = self._max_tokens

        if on_progress is None:
            result = await asyncio.to_thread(self._llm.create_chat_completion, **request_params)
            try:
                return result["choices"][0]["message"]["content"] or ""
            except (KeyError, IndexError, TypeError) as e:
                raise GatewayResponseError(f"unexpected completion shape: {e}") from e

        return await asyncio.to_thread(self._stream_completion, request_params, on_progress)

    def _stream_completion(
        self,
        request_params: dict[str, Any],
        on_progress: ProgressCallback,
    ) -> str:
        """Run a streaming completion in the calling (worker) thread."""
        parts: list[str] = []
        for chunk in self._llm.create_chat_completion(stream=True, **request_params):
            choices = chunk.get("choices") or []
            if not choices:
                continue
            delta = choices[0].get("delta", {}).get("content")
            if delta:
                parts.append(delta)
                on_progress(delta)
        return "".join(parts)

    async def cleanup(self) -> None:
        """Release the native model."""
        if self._llm is None:
            return
        close = getattr(self._llm, "close", None)
        if callable(close):
            await asyncio.to_thread(close)
        self._llm = None
