"""Chat transcript module.

Holds the chat turns, the single-flight reply flag and the policy that
derives prompt context from the transcript.
"""

from .context import DEFAULT_CONTEXT_WINDOW, DEFAULT_SYSTEM_PROMPT, build_chat_context
from .models import DEFAULT_GREETING, PLACEHOLDER_TEXT, ChatTurn, Sender, TranscriptState
from .store import TranscriptStore

__all__ = [
    "ChatTurn",
    "DEFAULT_CONTEXT_WINDOW",
    "DEFAULT_GREETING",
    "DEFAULT_SYSTEM_PROMPT",
    "PLACEHOLDER_TEXT",
    "Sender",
    "TranscriptState",
    "TranscriptStore",
    "build_chat_context",
]
