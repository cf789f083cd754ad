from typing import Any

from .base import InferenceGateway
from .providers import LlamaCppGateway, OllamaGateway, OpenAICompatibleGateway

SUPPORTED_BACKENDS = ("embedded", "ollama", "openai")


def create_inference_gateway(backend: str, **config: Any) -> InferenceGateway:
    """Create an inference gateway instance.

    This factory function hides the instantiation logic for different backends.

    Args:
        backend: Backend type ('embedded', 'ollama', 'openai')
        **config: Backend-specific configuration
            For embedded (llama.cpp):
                - model_path: str (required)
                - n_ctx: int (default: 2048)
                - n_threads: int | None
                - temperature: float (default: 0.7)
            For ollama:
                - base_url: str (default: 'http://localhost:11434')
                - model: str (default: 'llama3.2')
                - timeout: float (default: 120.0)
            For openai:
                - api_key: str (required)
                - model: str (default: 'gpt-4o-mini')
                - base_url: str | None

    Returns:
        Gateway instance. Call initialize() before first use.

    Raises:
        ValueError: If backend type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> gateway = create_inference_gateway(
        ...     "ollama",
        ...     base_url="http://192.168.1.20:11434",
        ...     model="llama3.2"
        ... )

        >>> gateway = create_inference_gateway(
        ...     "embedded",
        ...     model_path="models/qwen2.5-0.5b-instruct-q4_k_m.gguf"
        ... )
    """
    backend_lower = backend.lower()

    if backend_lower in ("embedded", "llama", "llama.cpp"):
        if "model_path" not in config:
            raise TypeError("Embedded backend requires 'model_path' in config")
        return LlamaCppGateway(**config)

    if backend_lower == "ollama":
        return OllamaGateway(**config)

    if backend_lower == "openai":
        if "api_key" not in config:
            raise TypeError("OpenAI backend requires 'api_key' in config")
        return OpenAICompatibleGateway(**config)

    raise ValueError(
        f"Unsupported backend: {backend}. "
        f"Supported backends: 'embedded', 'ollama', 'openai'"
    )
