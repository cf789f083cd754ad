"""Unit and property-based tests for the transcript store."""
import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from conftest import FakeChatGateway, FakePromptGateway
from pocketchat.transcript import (
    DEFAULT_GREETING,
    PLACEHOLDER_TEXT,
    ChatTurn,
    Sender,
    TranscriptState,
    TranscriptStore,
)

non_blank_text = st.text(min_size=1).filter(lambda s: s.strip())
blank_text = st.text(alphabet=" \t\n\r\x0b\x0c", max_size=20)


class TestChatTurn:
    """Tests for the ChatTurn model."""

    def test_ids_are_unique(self):
        """Turns created back to back never share an id."""
        ids = {ChatTurn.user("same text").id for _ in range(1000)}
        assert len(ids) == 1000

    def test_turn_is_frozen(self):
        """Turns cannot be edited after creation."""
        turn = ChatTurn.assistant("hello")
        with pytest.raises(ValidationError):
            turn.text = "changed"  # type: ignore[misc]

    def test_placeholder(self):
        """Placeholder is a pending assistant turn with the sentinel text."""
        turn = ChatTurn.placeholder()
        assert turn.sender == Sender.ASSISTANT
        assert turn.text == PLACEHOLDER_TEXT
        assert turn.pending

    def test_role_mapping(self):
        """Sender maps onto chat-completion roles."""
        assert ChatTurn.user("a").role == "user"
        assert ChatTurn.assistant("b").role == "assistant"


class TestStoreConstruction:
    """Tests for TranscriptStore setup."""

    def test_starts_idle_with_greeting(self, chat_gateway):
        store = TranscriptStore(chat_gateway)
        assert store.state == TranscriptState.IDLE
        assert not store.is_awaiting_reply
        assert [t.text for t in store.turns] == [DEFAULT_GREETING]
        assert store.turns[0].sender == Sender.ASSISTANT

    def test_greeting_can_be_disabled(self, chat_gateway):
        store = TranscriptStore(chat_gateway, greeting=None)
        assert store.turns == []

    def test_rejects_unknown_gateway_type(self):
        with pytest.raises(TypeError):
            TranscriptStore(object())  # type: ignore[arg-type]

    def test_rejects_negative_window(self, chat_gateway):
        with pytest.raises(ValueError):
            TranscriptStore(chat_gateway, context_window=-1)


class TestSubmit:
    """Tests for submission acceptance and the single-flight flag."""

    @given(non_blank_text)
    @settings(max_examples=50)
    def test_accepted_submission_appends_user_and_placeholder(self, text: str):
        """Property test: any non-blank text adds one user turn and one placeholder."""
        async def scenario():
            store = TranscriptStore(FakeChatGateway(), greeting=None)
            task = store.submit(text)
            assert task is not None

            turns = store.history
            assert len(turns) == 2
            assert turns[0].sender == Sender.USER
            assert turns[0].text == text.strip()
            assert turns[1].pending
            assert store.is_awaiting_reply
            assert store.pending_turn == turns[1]
            await task

        asyncio.run(scenario())

    @given(blank_text)
    def test_blank_submission_is_ignored(self, text: str):
        """Property test: whitespace-only input never creates a turn or sets the flag."""
        store = TranscriptStore(FakeChatGateway())
        before = store.history

        assert store.submit(text) is None
        assert store.history == before
        assert store.state == TranscriptState.IDLE

    @pytest.mark.asyncio
    async def test_submission_rejected_while_awaiting(self, chat_gateway):
        """A second submission while a reply is pending changes nothing."""
        store = TranscriptStore(chat_gateway)
        first = store.submit("first")
        snapshot = store.history

        assert store.submit("second") is None
        assert store.history == snapshot

        await first
        assert len(chat_gateway.calls) == 1

    @pytest.mark.asyncio
    async def test_at_most_one_call_in_flight(self):
        """Bursts of submissions never overlap gateway calls."""
        gateway = FakeChatGateway()
        store = TranscriptStore(gateway)

        tasks = [store.submit(f"message {i}") for i in range(20)]
        accepted = [t for t in tasks if t is not None]
        assert len(accepted) == 1
        await accepted[0]

        for i in range(5):
            await store.send(f"follow-up {i}")
        assert gateway.max_in_flight == 1
        assert len(gateway.calls) == 6

    @pytest.mark.asyncio
    async def test_flag_cleared_after_reply_allows_next_submission(self, chat_gateway):
        store = TranscriptStore(chat_gateway)
        await store.send("one")
        assert store.state == TranscriptState.IDLE
        assert store.submit("two") is not None
        await store.pending_task


class TestReplies:
    """Tests for the success and failure transitions."""

    @pytest.mark.asyncio
    async def test_success_swaps_placeholder_for_reply(self, chat_gateway):
        store = TranscriptStore(chat_gateway)
        task = store.submit("What is 2+2?")
        placeholder = store.pending_turn
        length_after_submit = len(store.history)

        reply = await task

        history = store.history
        assert len(history) == length_after_submit
        assert all(turn.id != placeholder.id for turn in history)
        assert history[-1] == reply
        assert reply.sender == Sender.ASSISTANT
        assert reply.text == "4"
        assert not reply.pending
        assert store.state == TranscriptState.IDLE
        assert store.last_error is None

    @given(st.text())
    @settings(max_examples=30)
    def test_failure_uses_fixed_error_text(self, detail: str):
        """Property test: the error turn never depends on the error's content."""
        async def scenario():
            gateway = FakeChatGateway(error=RuntimeError(detail))
            store = TranscriptStore(gateway)
            length_before = len(store.history)
            reply = await store.send("hello")

            assert reply.text == gateway.error_message
            assert len(store.history) == length_before + 2
            assert not any(turn.pending for turn in store.history)
            assert store.state == TranscriptState.IDLE
            assert isinstance(store.last_error, RuntimeError)

        asyncio.run(scenario())

    @pytest.mark.asyncio
    async def test_prompt_gateway_error_text(self):
        gateway = FakePromptGateway(error=ConnectionError("refused"))
        store = TranscriptStore(gateway)
        reply = await store.send("hi")
        assert reply.text == "Error contacting Ollama."

    @pytest.mark.asyncio
    async def test_invalid_reply_becomes_error_turn(self):
        """A gateway returning a non-string is treated as a failure."""
        gateway = FakeChatGateway(reply=None)  # type: ignore[arg-type]
        store = TranscriptStore(gateway)
        reply = await store.send("hi")
        assert reply.text == gateway.error_message
        assert not store.is_awaiting_reply

    @pytest.mark.asyncio
    async def test_example_conversation(self):
        """Greeting, question, placeholder, answer in display order."""
        gateway = FakeChatGateway(reply="4")
        store = TranscriptStore(gateway)
        greeting = store.turns[0]

        task = store.submit("What is 2+2?")
        shown = store.turns
        assert [t.text for t in shown] == [PLACEHOLDER_TEXT, "What is 2+2?", "Hello! Ask me anything."]
        assert [t.sender for t in shown] == [Sender.ASSISTANT, Sender.USER, Sender.ASSISTANT]
        assert store.state == TranscriptState.AWAITING_REPLY

        await task
        shown = store.turns
        assert [t.text for t in shown] == ["4", "What is 2+2?", "Hello! Ask me anything."]
        assert shown[2] == greeting
        assert store.state == TranscriptState.IDLE

    @pytest.mark.asyncio
    async def test_prompt_gateway_receives_trimmed_latest_text_only(self, prompt_gateway):
        store = TranscriptStore(prompt_gateway)
        await store.send("  first question  ")
        reply = await store.send("second")

        assert prompt_gateway.prompts == ["first question", "second"]
        assert reply.text == "echo: second"

    @pytest.mark.asyncio
    async def test_cancellation_removes_placeholder(self):
        gateway = FakeChatGateway()
        gateway.gate = asyncio.Event()
        store = TranscriptStore(gateway)

        task = store.submit("never answered")
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not store.is_awaiting_reply
        assert not any(turn.pending for turn in store.history)
        assert store.history[-1].text == "never answered"


class TestListeners:
    """Tests for change, progress and debug callbacks."""

    @pytest.mark.asyncio
    async def test_on_change_sees_every_transition(self, chat_gateway):
        states = []
        store = TranscriptStore(chat_gateway, on_change=lambda s: states.append(s.state))
        await store.send("hi")
        assert states == [TranscriptState.AWAITING_REPLY, TranscriptState.IDLE]

    @pytest.mark.asyncio
    async def test_progress_is_forwarded(self):
        gateway = FakeChatGateway(reply="Hello there", chunks=["Hello", " there"])
        received = []
        store = TranscriptStore(gateway, on_progress=received.append)
        reply = await store.send("hi")
        assert received == ["Hello", " there"]
        assert reply.text == "Hello there"

    @pytest.mark.asyncio
    async def test_debug_callback_gets_error_detail(self):
        gateway = FakeChatGateway(error=RuntimeError("model exploded"))
        entries = []
        store = TranscriptStore(gateway, debug_callback=lambda *args: entries.append(args))
        await store.send("hi")

        errors = [e for e in entries if e[0] == "error"]
        assert errors
        assert errors[0][1] == "Store"
        assert "model exploded" in errors[0][2]


class TestClear:
    """Tests for clearing the transcript."""

    @pytest.mark.asyncio
    async def test_clear_refused_while_awaiting(self, chat_gateway):
        store = TranscriptStore(chat_gateway)
        task = store.submit("hi")
        assert store.clear() is False
        assert store.is_awaiting_reply
        await task

    @pytest.mark.asyncio
    async def test_clear_resets_to_greeting(self, chat_gateway):
        store = TranscriptStore(chat_gateway)
        await store.send("hi")
        assert store.clear() is True
        assert [t.text for t in store.turns] == [DEFAULT_GREETING]


class TestStuckStates:
    """Tests that the reply flag is always released."""

    @pytest.mark.asyncio
    async def test_cancel_before_first_step_releases_flag(self, chat_gateway):
        """A task cancelled before it starts still removes the placeholder."""
        store = TranscriptStore(chat_gateway)
        task = store.submit("hi")
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not store.is_awaiting_reply
        assert [t.text for t in store.history] == [DEFAULT_GREETING, "hi"]
        assert chat_gateway.calls == []

        reply = await store.send("again")
        assert reply is not None
        assert reply.text == "4"

    @pytest.mark.asyncio
    async def test_failing_change_listener_does_not_block_replies(self, chat_gateway):
        calls = []
        entries = []

        def listener(store):
            calls.append(store.state)
            if len(calls) == 1:
                raise RuntimeError("render failed")

        store = TranscriptStore(
            chat_gateway,
            on_change=listener,
            debug_callback=lambda *args: entries.append(args),
        )
        task = store.submit("hi")
        assert task is not None
        assert store.pending_task is task

        reply = await task
        assert reply.text == "4"
        assert store.state == TranscriptState.IDLE
        assert any("render failed" in e[2] for e in entries if e[0] == "error")
        assert await store.send("next") is not None
