from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from .models import ChatMessage

ProgressCallback = Callable[[str], None]


class InferenceGateway(ABC):
    """Abstract base class for inference backends.

    This module hides the design decision of which model runtime turns a
    prompt into reply text. Implementations must handle backend-specific
    details like:
    - Model loading or client setup
    - Request/response format conversion
    - Wrapping library errors in GatewayError subclasses

    Two input contracts exist, see ChatCompletionGateway and PromptGateway.

    Supports async context manager protocol for lifecycle handling:
        async with gateway:
            reply = await gateway.completion(messages)
        # initialize() ran on entry, cleanup() on exit
    """

    # Fixed user-facing text shown when a call fails
    error_message: str = "Sorry, something went wrong."

    async def initialize(self) -> None:
        """Prepare the backend for use. Must be idempotent."""

    async def cleanup(self) -> None:
        """Release backend resources at session end."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    @property
    def model(self) -> str:
        """Get the model name, if the backend has one."""
        return getattr(self, "_model", "unknown")

    async def __aenter__(self) -> "InferenceGateway":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.cleanup()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise


class ChatCompletionGateway(InferenceGateway):
    """Gateway that takes a role-tagged message sequence."""

    @abstractmethod
    async def completion(
        self,
        messages: list[ChatMessage],
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Generate a complete reply for the conversation.

        Args:
            messages: System instruction followed by recent turns, oldest first
            on_progress: Optional callback receiving text chunks as they are
                generated. The returned string is always the full reply.

        Returns:
            The completed reply text

        Raises:
            GatewayError: Backend-specific failures
        """


class PromptGateway(InferenceGateway):
    """Gateway that takes only the raw latest user text."""

    @abstractmethod
    async def fetch_response(self, prompt: str) -> str:
        """Generate a reply for a single prompt.

        Args:
            prompt: The user's latest message, without history

        Returns:
            The completed reply text

        Raises:
            GatewayError: Backend-specific failures
        """
