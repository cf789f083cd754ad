from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Represents a role-tagged message sent to a chat completion backend."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")
