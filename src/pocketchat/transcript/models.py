"""Data models for the chat transcript.

These models define chat turns and the store's state, independent of how
they are rendered.
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER_TEXT = "Thinking..."
DEFAULT_GREETING = "Hello! Ask me anything."


class Sender(str, Enum):
    """Author of a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"


class TranscriptState(str, Enum):
    """Single-flight state of the transcript store."""

    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


class ChatTurn(BaseModel):
    """One immutable message in the transcript.

    Identity is a random token, never a timestamp; replacing a turn means
    removing it by id and appending a new one.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex, description="Unique turn identifier")
    text: str = Field(description="Displayed content")
    sender: Sender = Field(description="Who authored the turn")
    pending: bool = Field(default=False, description="True only for the reply placeholder")
    created_at: datetime = Field(default_factory=datetime.now)

    @classmethod
    def user(cls, text: str) -> "ChatTurn":
        return cls(text=text, sender=Sender.USER)

    @classmethod
    def assistant(cls, text: str) -> "ChatTurn":
        return cls(text=text, sender=Sender.ASSISTANT)

    @classmethod
    def placeholder(cls) -> "ChatTurn":
        return cls(text=PLACEHOLDER_TEXT, sender=Sender.ASSISTANT, pending=True)

    @property
    def role(self) -> str:
        """Chat-completion role for this turn."""
        return self.sender.value
