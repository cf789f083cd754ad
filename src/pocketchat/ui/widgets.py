"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Status line formatting
- Log rendering and level filtering
- Chat bubble rendering and incremental transcript sync
"""

from datetime import datetime

from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, Markdown, RichLog, Static, TextArea

from ..transcript.models import ChatTurn, Sender, TranscriptState
from .config import (
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    MESSAGE_TIMESTAMP_FORMAT,
    STATUS_PREVIEW_MAX_LENGTH,
    LogLevel,
)


class ClickableMessage(Vertical):
    """A chat bubble that copies its text when clicked."""

    def __init__(self, content: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._content = content

    def on_click(self, event: Click) -> None:
        event.stop()
        self.app.copy_to_clipboard(self._content)
        self.app.notify("Copied to clipboard", timeout=2)


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button.

    Posts Submitted with the trimmed text. The bar does not clear itself;
    the app clears it once the submission is accepted.
    """

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="primary").with_tooltip(
            "Send message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False
        text_area.focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        last_row = len(lines) - 1
        last_col = len(lines[-1]) if lines else 0
        return text_area.cursor_location == (last_row, last_col)

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:  # Up
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:  # Down
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        if text_area.disabled:
            return
        value = text_area.text.strip()
        if value:
            self.post_message(self.Submitted(value))

    @property
    def value(self) -> str:
        return self.query_one("#chat-input", TextArea).text

    @value.setter
    def value(self, text: str) -> None:
        self.query_one("#chat-input", TextArea).text = text

    def accept(self, value: str) -> None:
        """Record an accepted submission in history and clear the input."""
        if not self._history or self._history[-1] != value:
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        self.value = ""

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable typing and the Send button."""
        text_area = self.query_one("#chat-input", TextArea)
        text_area.disabled = not enabled
        self.query_one("#send-btn", Button).disabled = not enabled
        if enabled:
            text_area.focus()


class StatusBar(Static):
    """One-line status: backend, model, state, timing and stream preview."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._backend = "-"
        self._model = "-"
        self._state = "starting"
        self._last_reply_seconds: float | None = None
        self._preview = ""
        self._text = Text()

    def on_mount(self) -> None:
        self._update_display()

    def set_backend(self, backend: str, model: str) -> None:
        self._backend = backend
        self._model = model
        self._update_display()

    def set_state(self, state: TranscriptState | str) -> None:
        self._state = state.value if isinstance(state, TranscriptState) else state
        if self._state != TranscriptState.AWAITING_REPLY.value:
            self._preview = ""
        self._update_display()

    def set_last_reply_time(self, seconds: float) -> None:
        self._last_reply_seconds = seconds
        self._update_display()

    def append_preview(self, chunk: str) -> None:
        """Show the tail of text streamed so far for the pending reply."""
        self._preview = (self._preview + chunk)[-STATUS_PREVIEW_MAX_LENGTH:]
        self._update_display()

    @property
    def preview(self) -> str:
        return self._preview

    def _update_display(self) -> None:
        text = Text()
        text.append(f"{self._backend}", style="bold")
        text.append(f" | {self._model} | ")
        state_style = "yellow" if self._state == TranscriptState.AWAITING_REPLY.value else "green"
        text.append(self._state.replace("_", " "), style=state_style)
        if self._last_reply_seconds is not None:
            text.append(f" | last reply {self._last_reply_seconds:.2f}s")
        if self._preview:
            preview = " ".join(self._preview.split())
            text.append(f" | {preview}", style="dim italic")
        self._text = text
        self.update(text)

    def get_plain_text(self) -> str:
        return self._text.plain


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped messages from the store, gateway and app.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    COMPONENT_COLORS = {
        "TUI": "cyan",
        "Store": "green",
        "Gateway": "magenta",
    }

    LEVEL_COLORS = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level
        self.entry_count = 0

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def add_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return

        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        line = Text()
        line.append(datetime.now().strftime(LOG_TIMESTAMP_FORMAT), style="dim")
        line.append(" ")
        line.append(f"{LogLevel.name(level):<7}", style=self.LEVEL_COLORS.get(level, "white"))
        line.append(f"[{component}]", style=self.COMPONENT_COLORS.get(component, "white"))
        line.append(f" {message}")
        self.write(line)
        self.entry_count += 1

    def debug(self, component: str, message: str) -> None:
        self.add_entry(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        self.add_entry(component, message, LogLevel.INFO)

    def error(self, component: str, message: str) -> None:
        self.add_entry(component, message, LogLevel.ERROR)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history mirroring the transcript store.

    The store is the source of truth; sync_turns() mounts bubbles for new
    turns and removes bubbles whose turn left the transcript.
    """

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._turns: list[ChatTurn] = []
        self._bubbles: dict[str, ClickableMessage] = {}

    @property
    def turn_ids(self) -> list[str]:
        return [turn.id for turn in self._turns]

    def sync_turns(self, turns: list[ChatTurn]) -> None:
        """Bring the display in line with a chronological list of turns."""
        wanted = {turn.id for turn in turns}
        for turn_id in list(self._bubbles):
            if turn_id not in wanted:
                self._bubbles.pop(turn_id).remove()

        for turn in turns:
            if turn.id not in self._bubbles:
                bubble = self._build_bubble(turn)
                self._bubbles[turn.id] = bubble
                self.mount(bubble)

        self._turns = list(turns)
        settled = sum(1 for turn in turns if not turn.pending)
        self.border_subtitle = f"{settled} messages"
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the last settled assistant reply."""
        for turn in reversed(self._turns):
            if turn.sender == Sender.ASSISTANT and not turn.pending:
                return turn.text
        return None

    def _build_bubble(self, turn: ChatTurn) -> ClickableMessage:
        if turn.sender == Sender.USER:
            prefix, classes = "You", "chat-message user-message"
        else:
            prefix, classes = "Assistant", "chat-message assistant-message"
        if turn.pending:
            classes += " pending-message"

        bubble = ClickableMessage(content=turn.text, id=f"turn-{turn.id}", classes=classes)
        timestamp = turn.created_at.strftime(MESSAGE_TIMESTAMP_FORMAT)
        bubble.compose_add_child(Static(f"{prefix} {timestamp}", classes="message-header", markup=False))

        if turn.sender == Sender.ASSISTANT and not turn.pending:
            bubble.compose_add_child(Markdown(turn.text, classes="message-content"))
        else:
            bubble.compose_add_child(Static(turn.text, classes="message-content", markup=False))
        return bubble
