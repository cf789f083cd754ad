"""Pytest configuration and shared fixtures."""
import asyncio
import os

import pytest

from pocketchat.gateway import ChatCompletionGateway, ChatMessage, PromptGateway


class FakeChatGateway(ChatCompletionGateway):
    """Chat-completion gateway that answers from a script.

    Records every message sequence it receives and the peak number of
    calls in flight at once.
    """

    error_message = "Sorry, something went wrong."

    def __init__(self, reply: str = "ok", error: Exception | None = None, chunks: list[str] | None = None):
        self.reply = reply
        self.error = error
        self.chunks = chunks or []
        self.calls: list[list[ChatMessage]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.initialize_calls = 0
        self.cleanup_calls = 0
        self.gate: asyncio.Event | None = None

    @property
    def backend_type(self) -> str:
        return "fake-chat"

    @property
    def model(self) -> str:
        return "fake-model"

    async def initialize(self) -> None:
        self.initialize_calls += 1

    async def cleanup(self) -> None:
        self.cleanup_calls += 1

    async def completion(self, messages, on_progress=None) -> str:
        self.calls.append(list(messages))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if self.gate is not None:
                await self.gate.wait()
            if self.error is not None:
                raise self.error
            for chunk in self.chunks:
                if on_progress is not None:
                    on_progress(chunk)
            return self.reply
        finally:
            self.in_flight -= 1


class FakePromptGateway(PromptGateway):
    """Prompt gateway that echoes or fails."""

    error_message = "Error contacting Ollama."

    def __init__(self, reply: str | None = None, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    @property
    def backend_type(self) -> str:
        return "fake-prompt"

    async def fetch_response(self, prompt: str) -> str:
        self.prompts.append(prompt)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.reply if self.reply is not None else f"echo: {prompt}"


@pytest.fixture
def chat_gateway():
    """A scripted chat-completion gateway."""
    return FakeChatGateway(reply="4")


@pytest.fixture
def prompt_gateway():
    """A scripted prompt gateway."""
    return FakePromptGateway()


@pytest.fixture(scope="session")
def ollama_config():
    """Return Ollama configuration for integration tests."""
    return {
        "base_url": os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),
        "model": os.getenv("OLLAMA_MODEL", "llama3.2"),
    }


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration variables so defaults apply."""
    for name in (
        "CHAT_BACKEND",
        "LLAMA_MODEL_PATH",
        "LLAMA_N_CTX",
        "OLLAMA_BASE_URL",
        "OLLAMA_MODEL",
        "OPENAI_API_KEY",
        "OPENAI_BASE_URL",
        "OPENAI_CHAT_MODEL",
        "CHAT_SYSTEM_PROMPT",
        "CHAT_CONTEXT_WINDOW",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
