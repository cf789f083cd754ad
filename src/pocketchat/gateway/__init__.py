"""Inference gateway module.

Hides which model runtime turns a prompt or conversation into reply text.
"""

from .base import ChatCompletionGateway, InferenceGateway, PromptGateway
from .errors import (
    GatewayConnectionError,
    GatewayError,
    GatewayNotInitializedError,
    GatewayResponseError,
)
from .factory import SUPPORTED_BACKENDS, create_inference_gateway
from .models import ChatMessage
from .providers import LlamaCppGateway, OllamaGateway, OpenAICompatibleGateway

__all__ = [
    "ChatCompletionGateway",
    "ChatMessage",
    "GatewayConnectionError",
    "GatewayError",
    "GatewayNotInitializedError",
    "GatewayResponseError",
    "InferenceGateway",
    "LlamaCppGateway",
    "OllamaGateway",
    "OpenAICompatibleGateway",
    "PromptGateway",
    "SUPPORTED_BACKENDS",
    "create_inference_gateway",
]
