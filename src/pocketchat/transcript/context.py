"""Prompt context derivation.

Turns the transcript into the role-tagged message sequence sent to
chat-completion backends. The window is a plain turn count: no token
accounting, older turns are dropped.
"""

from collections.abc import Sequence

from ..gateway.models import ChatMessage
from .models import ChatTurn

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."
DEFAULT_CONTEXT_WINDOW = 5


def build_chat_context(
    turns: Sequence[ChatTurn],
    system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    window: int = DEFAULT_CONTEXT_WINDOW,
) -> list[ChatMessage]:
    """Build the message sequence for a chat completion.

    Args:
        turns: Transcript in chronological order, including the turn just
            submitted. Pending placeholders are skipped.
        system_prompt: Instruction placed first
        window: Maximum number of turns to include

    Returns:
        One system message followed by the most recent turns, oldest first
    """
    if window < 0:
        raise ValueError(f"window must be >= 0, got {window}")

    settled = [turn for turn in turns if not turn.pending]
    recent = settled[-window:] if window else []

    messages = [ChatMessage(role="system", content=system_prompt)]
    messages.extend(ChatMessage(role=turn.role, content=turn.text) for turn in recent)
    return messages
