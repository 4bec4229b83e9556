"""Unit tests for the streaming session controller."""
import asyncio

import pytest

from luntra.chat import Message, Role, StreamingSession
from luntra.exceptions import MessageSourceError, UseAfterCompleteError
from luntra.sources import ScriptedMessageSource


class Recorder:
    """Collects listener calls."""

    def __init__(self):
        self.updates: list[str] = []
        self.completed: list[str] = []

    def on_update(self, handle):
        self.updates.append(handle.buffer)

    def on_complete(self, handle):
        self.completed.append(handle.turn_id)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def session(recorder):
    return StreamingSession(on_update=recorder.on_update, on_complete=recorder.on_complete)


class TestTurns:
    """Tests for starting, feeding and ending turns."""

    def test_start_turn_marks_message_streaming(self, session):
        """Test that a new turn streams into a fresh model message."""
        handle = session.start_turn()

        assert handle.message.role == Role.MODEL
        assert handle.message.is_streaming
        assert session.active is handle

    def test_start_turn_uses_given_message(self, session):
        """Test that a placeholder message can be supplied."""
        message = Message(role=Role.MODEL)
        handle = session.start_turn(message)

        assert handle.message is message

    def test_append_returns_full_buffer(self, session, recorder):
        """Test that each append returns the buffer and notifies the listener."""
        handle = session.start_turn()

        assert session.append_chunk(handle, "Hello ") == "Hello "
        assert session.append_chunk(handle, "world") == "Hello world"
        assert recorder.updates == ["Hello ", "Hello world"]
        assert handle.chunk_count == 2

    def test_append_after_end_raises(self, session):
        """Test that a completed turn rejects further chunks."""
        handle = session.start_turn()
        session.append_chunk(handle, "done")
        session.end_turn(handle)

        with pytest.raises(UseAfterCompleteError):
            session.append_chunk(handle, "more")
        assert handle.buffer == "done"
        assert not handle.message.is_streaming

    def test_use_after_complete_is_runtime_error(self, session):
        """Test that the error can be caught as a RuntimeError."""
        handle = session.start_turn()
        session.end_turn(handle)

        with pytest.raises(RuntimeError, match=handle.turn_id):
            session.append_chunk(handle, "x")

    def test_end_turn_is_idempotent(self, session, recorder):
        """Test that ending a turn twice notifies only once."""
        handle = session.start_turn()
        session.end_turn(handle)
        session.end_turn(handle)

        assert recorder.completed == [handle.turn_id]
        assert session.active is None

    def test_new_turn_completes_previous(self, session, recorder):
        """Test that starting a turn implicitly ends the active one."""
        first = session.start_turn()
        session.append_chunk(first, "partial")
        second = session.start_turn()

        assert first.completed
        assert not first.message.is_streaming
        assert first.buffer == "partial"
        assert session.active is second
        assert recorder.completed == [first.turn_id]

    def test_reset_discards_active_turn(self, session):
        """Test that reset ends the active turn and allows a new one."""
        handle = session.start_turn()
        session.reset()

        assert session.active is None
        with pytest.raises(UseAfterCompleteError):
            session.append_chunk(handle, "late")
        assert session.start_turn() is not handle

    def test_reset_without_turn(self, session, recorder):
        """Test that reset with nothing active does nothing."""
        session.reset()

        assert recorder.completed == []


class TestConsume:
    """Tests for feeding a turn from an async source."""

    @pytest.mark.asyncio
    async def test_consume_whole_source(self, session, recorder):
        """Test that every chunk is appended and the turn ends."""
        handle = session.start_turn()
        source = ScriptedMessageSource(["a", "b", "c"])

        result = await session.consume(handle, source.stream("prompt"))

        assert result is handle
        assert handle.completed
        assert handle.error is None
        assert handle.buffer == "abc"
        assert recorder.updates == ["a", "ab", "abc"]
        assert recorder.completed == [handle.turn_id]

    @pytest.mark.asyncio
    async def test_source_failure_keeps_partial_content(self, session, recorder):
        """Test that a failing source ends the turn with what arrived so far."""
        handle = session.start_turn()
        source = ScriptedMessageSource(["Hello ", "world"], fail_after=1)

        with pytest.raises(MessageSourceError) as exc_info:
            await session.consume(handle, source.stream("prompt"))

        assert exc_info.value.partial_content == "Hello "
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert handle.completed
        assert handle.buffer == "Hello "
        assert "Scripted failure" in handle.error
        assert recorder.completed == [handle.turn_id]

    @pytest.mark.asyncio
    async def test_listener_errors_are_not_wrapped(self):
        """Test that a failing listener propagates its own exception."""
        def explode(handle):
            raise KeyError("listener")

        session = StreamingSession(on_update=explode)
        handle = session.start_turn()

        with pytest.raises(KeyError):
            await session.consume(handle, ScriptedMessageSource(["a", "b"]).stream("p"))
        assert handle.completed
        assert not handle.message.is_streaming
        assert session.active is None
        assert handle.buffer == "a"
        assert "listener" in handle.error

    @pytest.mark.asyncio
    async def test_consume_stops_when_turn_reset(self):
        """Test that resetting mid-stream stops further appends."""
        def reset_after_first(h):
            session.reset()

        session = StreamingSession(on_update=reset_after_first)
        handle = session.start_turn()

        await session.consume(handle, ScriptedMessageSource(["a", "b", "c"]).stream("p"))

        assert handle.buffer == "a"
        assert handle.completed

    @pytest.mark.asyncio
    async def test_cancellation_ends_turn(self, session, recorder):
        """Test that cancelling the consumer completes the turn and propagates."""
        arrived = asyncio.Event()

        async def stalled():
            yield "first"
            arrived.set()
            await asyncio.Event().wait()
            yield "never"

        handle = session.start_turn()
        task = asyncio.create_task(session.consume(handle, stalled()))
        await arrived.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert handle.completed
        assert handle.buffer == "first"
        assert recorder.completed == [handle.turn_id]

    @pytest.mark.asyncio
    async def test_reset_abandons_pending_read(self, session):
        """Test that ending the turn stops waiting on a stalled source."""
        arrived = asyncio.Event()
        closed = []

        async def stalled():
            try:
                yield "first"
                arrived.set()
                await asyncio.Event().wait()
                yield "never"
            finally:
                closed.append(True)

        handle = session.start_turn()
        task = asyncio.create_task(session.consume(handle, stalled()))
        await arrived.wait()
        session.reset()

        result = await asyncio.wait_for(task, timeout=1)

        assert result is handle
        assert handle.buffer == "first"
        assert handle.error is None
        assert closed == [True]
