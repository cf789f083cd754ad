"""
PocketChat: a small chat front-end for local language models.

A single-flight transcript store drives either an embedded llama.cpp
model, an Ollama server, or an OpenAI-compatible API.
"""

__version__ = "0.1.0"

from .gateway import (
    ChatMessage,
    GatewayError,
    InferenceGateway,
    create_inference_gateway,
)
from .transcript import ChatTurn, Sender, TranscriptState, TranscriptStore

__all__ = [
    "ChatMessage",
    "ChatTurn",
    "GatewayError",
    "InferenceGateway",
    "Sender",
    "TranscriptState",
    "TranscriptStore",
    "create_inference_gateway",
]
