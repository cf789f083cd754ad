"""Main Textual TUI application.

Orchestrates the UI components around a TranscriptStore. The store owns
the transcript and the single-flight flag; the app only renders it and
forwards submissions.
"""

import asyncio
import contextlib
import threading
import time
from typing import Any

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..gateway.base import InferenceGateway
from ..transcript import (
    DEFAULT_CONTEXT_WINDOW,
    DEFAULT_GREETING,
    DEFAULT_SYSTEM_PROMPT,
    TranscriptState,
    TranscriptStore,
)
from .config import LogLevel
from .styles import APP_CSS
from .themes import POCKET_DARK
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, StatusBar


class PocketChatApp(App):
    """Textual chat front-end for a single inference gateway."""

    CSS = APP_CSS
    TITLE = "PocketChat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+k", "clear_chat", "Clear Chat", priority=True),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+d", "toggle_debug", "Log", priority=True),
    ]

    def __init__(
        self,
        gateway: InferenceGateway,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
        greeting: str | None = DEFAULT_GREETING,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._gateway = gateway
        self._log_level = log_level
        self._gateway_ready = False
        self._closing = False
        self._gateway_closed = False
        self._submitted_at: float | None = None
        self.store = TranscriptStore(
            gateway,
            system_prompt=system_prompt,
            context_window=context_window,
            greeting=greeting,
            on_change=self._on_store_change,
            on_progress=self._on_progress,
            debug_callback=self._route_debug,
        )

    @property
    def is_ready(self) -> bool:
        """True once the gateway finished initializing."""
        return self._gateway_ready

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield DebugPanel(id="debug-panel")
        with Vertical(id="bottom-bar"):
            yield StatusBar(id="status")
            yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(POCKET_DARK)
        self.theme = "pocket-dark"

        if self._log_level is not None:
            log_panel = self.query_one("#debug-panel", DebugPanel)
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        self.sub_title = f"{self._gateway.backend_type} | {self._gateway.model}"
        status = self.query_one("#status", StatusBar)
        status.set_backend(self._gateway.backend_type, self._gateway.model)

        self.query_one("#chat-history", ChatHistoryWidget).sync_turns(self.store.history)
        self.query_one("#chat-input-bar", ChatInputBar).set_enabled(False)
        self._initialize_gateway()

    @work(exclusive=True, group="gateway")
    async def _initialize_gateway(self) -> None:
        """Run the gateway's initialize() hook before the first submission."""
        status = self.query_one("#status", StatusBar)
        status.set_state("initializing")
        self._route_debug("info", "TUI", f"Initializing {self._gateway.backend_type} gateway")

        try:
            await self._gateway.initialize()
        except Exception as e:
            self._route_debug("error", "Gateway", f"Initialization failed: {e}")
            status.set_state("backend unavailable")
            self.notify(f"Backend unavailable: {str(e)[:60]}", severity="error", timeout=8)
            return

        self._gateway_ready = True
        self._route_debug("info", "Gateway", "Ready")
        status.set_state(self.store.state)
        self.query_one("#chat-input-bar", ChatInputBar).set_enabled(True)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Forward a submission to the store; clear the input if accepted."""
        if not self._gateway_ready:
            self.notify("Backend is not ready yet", severity="warning", timeout=3)
            return

        task = self.store.submit(event.value)
        if task is None:
            if self.store.is_awaiting_reply:
                self.notify("Wait for the current reply", severity="warning", timeout=2)
            return

        self._submitted_at = time.monotonic()
        self.query_one("#chat-input-bar", ChatInputBar).accept(event.value)

    def _on_store_change(self, store: TranscriptStore) -> None:
        if self._closing:
            return
        self.query_one("#chat-history", ChatHistoryWidget).sync_turns(store.history)

        status = self.query_one("#status", StatusBar)
        status.set_state(store.state)
        if store.state == TranscriptState.IDLE and self._submitted_at is not None:
            status.set_last_reply_time(time.monotonic() - self._submitted_at)
            self._submitted_at = None

        self.query_one("#chat-input-bar", ChatInputBar).set_enabled(
            self._gateway_ready and not store.is_awaiting_reply
        )

    def _call_thread_safe(self, func: Any, *args: Any) -> None:
        """Call func on the app thread; gateways may report from workers."""
        if self._thread_id != threading.get_ident():
            self.call_from_thread(func, *args)
        else:
            func(*args)

    def _on_progress(self, chunk: str) -> None:
        if self._closing:
            return
        self._call_thread_safe(self._show_progress, chunk)

    def _show_progress(self, chunk: str) -> None:
        if self._closing:
            return
        self.query_one("#status", StatusBar).append_preview(chunk)

    def _route_debug(self, level: str, component: str, message: str) -> None:
        """Route debug messages to the log panel."""
        if self._closing:
            return
        self._call_thread_safe(self._write_log, component, message, LogLevel.from_string(level))

    def _write_log(self, component: str, message: str, level: int) -> None:
        if self._closing:
            return
        self.query_one("#debug-panel", DebugPanel).add_entry(component, message, level)

    async def on_unmount(self) -> None:
        """Cancel a pending reply and release the gateway."""
        self._closing = True
        task = self.store.pending_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.shutdown_gateway()

    async def shutdown_gateway(self) -> None:
        """Run the gateway's cleanup() hook once."""
        if self._gateway_closed:
            return
        self._gateway_closed = True
        await self._gateway.cleanup()

    def action_clear_chat(self) -> None:
        """Clear the chat history."""
        if self.store.clear():
            self.notify("Chat cleared", timeout=2)
        else:
            self.notify("Cannot clear while a reply is pending", severity="warning", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(
    gateway: InferenceGateway,
    system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    context_window: int = DEFAULT_CONTEXT_WINDOW,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        gateway: Inference gateway (initialized by the app on mount)
        system_prompt: System instruction for chat-completion backends
        context_window: Number of recent turns sent as context
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = PocketChatApp(
        gateway=gateway,
        system_prompt=system_prompt,
        context_window=context_window,
        log_level=log_level,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        with contextlib.suppress(Exception):
            await app.shutdown_gateway()
