from .llama import LlamaCppGateway
from .ollama import OllamaGateway
from .openai import OpenAICompatibleGateway

__all__ = ["LlamaCppGateway", "OllamaGateway", "OpenAICompatibleGateway"]
