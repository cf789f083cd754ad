"""Transcript store: chat turns plus the single-flight reply flag.

The store owns the only copy of the transcript. A submission is accepted
only while no reply is pending; acceptance appends the user turn and a
placeholder and sets the flag in one locked step, then the gateway call
runs as an asyncio task. When the call finishes the placeholder is swapped
for the reply, or for the gateway's fixed error text.
"""

import asyncio
import functools
import threading
from collections.abc import Callable
from typing import Any

from ..gateway.base import ChatCompletionGateway, InferenceGateway, PromptGateway
from ..gateway.models import ChatMessage
from .context import DEFAULT_CONTEXT_WINDOW, DEFAULT_SYSTEM_PROMPT, build_chat_context
from .models import DEFAULT_GREETING, ChatTurn, TranscriptState

DebugCallback = Callable[[str, str, str], None]
ChangeListener = Callable[["TranscriptStore"], None]
ProgressListener = Callable[[str], None]


class TranscriptStore:
    """Single-flight chat transcript bound to one inference gateway.

    Example:
        store = TranscriptStore(gateway)
        task = store.submit("What is 2+2?")   # returns immediately
        store.is_awaiting_reply                # True
        reply = await task                     # ChatTurn(text="4", ...)
    """

    def __init__(
        self,
        gateway: InferenceGateway,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
        greeting: str | None = DEFAULT_GREETING,
        on_change: ChangeListener | None = None,
        on_progress: ProgressListener | None = None,
        debug_callback: DebugCallback | None = None,
    ) -> None:
        if not isinstance(gateway, (ChatCompletionGateway, PromptGateway)):
            raise TypeError(
                f"Gateway must be a ChatCompletionGateway or PromptGateway, got {type(gateway).__name__}"
            )
        if context_window < 0:
            raise ValueError(f"context_window must be >= 0, got {context_window}")

        self._gateway = gateway
        self._system_prompt = system_prompt
        self._context_window = context_window
        self._greeting = greeting
        self._on_change = on_change
        self._on_progress = on_progress
        self._debug_callback = debug_callback

        self._lock = threading.Lock()
        self._turns: list[ChatTurn] = self._initial_turns()
        self._placeholder: ChatTurn | None = None
        self._task: asyncio.Task[ChatTurn] | None = None
        self._last_error: Exception | None = None

    def _initial_turns(self) -> list[ChatTurn]:
        if self._greeting is None:
            return []
        return [ChatTurn.assistant(self._greeting)]

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback is not None:
            self._debug_callback(level, "Store", message)

    def _notify(self) -> None:
        if self._on_change is None:
            return
        # Listener errors are logged, never propagated
        try:
            self._on_change(self)
        except Exception as e:
            self._debug("error", f"Change listener failed: {type(e).__name__}: {e}")

    @property
    def gateway(self) -> InferenceGateway:
        return self._gateway

    @property
    def turns(self) -> list[ChatTurn]:
        """Transcript in display order, newest first."""
        with self._lock:
            return list(reversed(self._turns))

    @property
    def history(self) -> list[ChatTurn]:
        """Transcript in chronological order, oldest first."""
        with self._lock:
            return list(self._turns)

    @property
    def state(self) -> TranscriptState:
        if self._placeholder is None:
            return TranscriptState.IDLE
        return TranscriptState.AWAITING_REPLY

    @property
    def is_awaiting_reply(self) -> bool:
        return self._placeholder is not None

    @property
    def pending_turn(self) -> ChatTurn | None:
        """The placeholder turn while a reply is pending."""
        return self._placeholder

    @property
    def last_error(self) -> Exception | None:
        """Exception from the most recent gateway call, None if it succeeded."""
        return self._last_error

    @property
    def pending_task(self) -> "asyncio.Task[ChatTurn] | None":
        return self._task

    def submit(self, text: str) -> "asyncio.Task[ChatTurn] | None":
        """Accept a user message and start the gateway call.

        Must be called from a running event loop. Returns the task that
        resolves to the final assistant turn, or None when the text is blank
        or a reply is already pending.
        """
        trimmed = text.strip()
        if not trimmed:
            self._debug("debug", "Ignored blank submission")
            return None

        loop = asyncio.get_running_loop()

        with self._lock:
            busy = self._placeholder is not None
            if not busy:
                user_turn = ChatTurn.user(trimmed)
                self._turns.append(user_turn)
                context = self._derive_context(user_turn)
                placeholder = ChatTurn.placeholder()
                self._turns.append(placeholder)
                self._placeholder = placeholder

        if busy:
            self._debug("warning", "Rejected submission while a reply is pending")
            return None

        task = loop.create_task(self._complete(placeholder, context))
        task.add_done_callback(functools.partial(self._on_task_done, placeholder))
        self._task = task

        self._debug("info", f"Accepted submission ({len(trimmed)} chars)")
        self._notify()
        return task

    async def send(self, text: str) -> ChatTurn | None:
        """Submit and wait for the reply turn. None if not accepted."""
        task = self.submit(text)
        if task is None:
            return None
        return await task

    def clear(self) -> bool:
        """Reset to the greeting. Refused while a reply is pending."""
        with self._lock:
            if self._placeholder is not None:
                return False
            self._turns = self._initial_turns()
        self._debug("info", "Transcript cleared")
        self._notify()
        return True

    def _derive_context(self, user_turn: ChatTurn) -> list[ChatMessage] | str:
        # Called with the lock held, after the user turn is appended.
        if isinstance(self._gateway, ChatCompletionGateway):
            return build_chat_context(self._turns, self._system_prompt, self._context_window)
        return user_turn.text

    async def _call_gateway(self, context: list[ChatMessage] | str) -> str:
        if isinstance(context, str):
            return await self._gateway.fetch_response(context)
        return await self._gateway.completion(context, on_progress=self._on_progress)

    async def _complete(self, placeholder: ChatTurn, context: Any) -> ChatTurn:
        backend = self._gateway.backend_type
        self._debug("debug", f"Calling {backend} gateway")
        try:
            reply = await self._call_gateway(context)
            final = ChatTurn.assistant(reply)
        except asyncio.CancelledError:
            self._debug("warning", "Gateway call cancelled")
            self._finish(placeholder, None)
            raise
        except Exception as e:
            self._debug("error", f"{backend} gateway failed: {type(e).__name__}: {e}")
            self._last_error = e
            final = ChatTurn.assistant(self._gateway.error_message)
        else:
            self._last_error = None
            self._debug("info", f"Reply received ({len(reply)} chars)")

        self._finish(placeholder, final)
        return final

    def _on_task_done(self, placeholder: ChatTurn, task: "asyncio.Task[ChatTurn]") -> None:
        # Covers tasks cancelled before their first step, where _complete never ran
        if not task.cancelled():
            return
        current = self._placeholder
        if current is not None and current.id == placeholder.id:
            self._debug("warning", "Gateway call cancelled before it started")
            self._finish(placeholder, None)

    def _finish(self, placeholder: ChatTurn, final: ChatTurn | None) -> None:
        with self._lock:
            self._turns = [turn for turn in self._turns if turn.id != placeholder.id]
            if final is not None:
                self._turns.append(final)
            self._placeholder = None
            self._task = None
        self._notify()
