"""Terminal UI module for pocketchat.

Provides a Textual-based chat front-end over a TranscriptStore.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (chat bubbles, input bar, status line, log panel)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palette
- config.py: Log levels and display constants
- app.py: Application orchestration (user interaction flow)
"""

from .app import PocketChatApp, run_textual_tui
from .config import LogLevel
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, StatusBar

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "LogLevel",
    "PocketChatApp",
    "StatusBar",
    "run_textual_tui",
]
