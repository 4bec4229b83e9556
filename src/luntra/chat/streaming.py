"""Streaming session controller.

Owns the growing buffer of the message currently being produced. A turn is
started, fed chunks, and ended; appending to an ended turn is a programming
error and raises ``UseAfterCompleteError``.

Everything runs on one event loop: a single producer (the message source)
feeds a single consumer (the render listener) in strict order, and each
listener call sees an immutable ``str`` snapshot of the buffer. No locking
is needed.
"""

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable
from dataclasses import dataclass, field
from uuid import uuid4

from ..exceptions import MessageSourceError, UseAfterCompleteError
from .models import Message, Role

logger = logging.getLogger(__name__)

TurnListener = Callable[["TurnHandle"], None]


@dataclass
class TurnHandle:
    """Handle on one streaming turn.

    Attributes:
        message: The MODEL message whose content is the turn's buffer
        turn_id: Unique identifier of the turn
        completed: True once the turn has ended
        error: Failure reported by the message source, if any
        chunk_count: Number of chunks appended so far
        ended: Set when the turn ends, so a pending read can be abandoned
    """

    message: Message
    turn_id: str = field(default_factory=lambda: str(uuid4()))
    completed: bool = False
    error: str | None = None
    chunk_count: int = 0
    ended: asyncio.Event = field(default_factory=asyncio.Event, repr=False, compare=False)

    @property
    def buffer(self) -> str:
        return self.message.content


class StreamingSession:
    """Accumulates chunks for at most one active turn at a time.

    Args:
        on_update: Called after every appended chunk (typically re-renders)
        on_complete: Called once when a turn ends, for whatever reason
    """

    def __init__(
        self,
        on_update: TurnListener | None = None,
        on_complete: TurnListener | None = None,
    ) -> None:
        self._on_update = on_update
        self._on_complete = on_complete
        self._active: TurnHandle | None = None

    @property
    def active(self) -> TurnHandle | None:
        """The turn currently accepting chunks, if any."""
        return self._active

    def start_turn(self, message: Message | None = None) -> TurnHandle:
        """Start a new turn, completing any turn still in progress.

        Args:
            message: Placeholder MODEL message to stream into; a new empty
                one is created if omitted

        Returns:
            Handle for the new turn
        """
        if self._active is not None:
            logger.debug("Implicitly completing turn %s", self._active.turn_id)
            self.end_turn(self._active)

        message = message or Message(role=Role.MODEL)
        message.is_streaming = True
        handle = TurnHandle(message=message)
        self._active = handle
        logger.debug("Started turn %s for message %s", handle.turn_id, message.id)
        return handle

    def append_chunk(self, handle: TurnHandle, text: str) -> str:
        """Append a chunk to the turn's buffer.

        Args:
            handle: Turn to append to
            text: Chunk text

        Returns:
            The full buffer after appending

        Raises:
            UseAfterCompleteError: If the turn has already ended
        """
        if handle.completed:
            raise UseAfterCompleteError(handle.turn_id)

        handle.message.content += text
        handle.chunk_count += 1
        if self._on_update is not None:
            self._on_update(handle)
        return handle.message.content

    def end_turn(self, handle: TurnHandle, error: str | None = None) -> None:
        """Mark a turn complete. Ending an already completed turn is a no-op.

        Args:
            handle: Turn to end
            error: Failure description if the turn ended because of an error
        """
        if handle.completed:
            return

        handle.completed = True
        handle.error = error
        handle.message.is_streaming = False
        handle.ended.set()
        if self._active is handle:
            self._active = None

        if error:
            logger.warning("Turn %s ended with error: %s", handle.turn_id, error)
        else:
            logger.debug("Turn %s completed after %d chunks", handle.turn_id, handle.chunk_count)

        if self._on_complete is not None:
            self._on_complete(handle)

    def reset(self) -> None:
        """Discard the in-progress turn so a new one can start."""
        if self._active is not None:
            self.end_turn(self._active)

    async def consume(self, handle: TurnHandle, source: AsyncIterable[str]) -> TurnHandle:
        """Feed every chunk from ``source`` into ``handle``, then end the turn.

        Stops as soon as the turn is ended elsewhere (for example by
        ``reset`` or a new turn starting), abandoning any pending read.
        Every exit path ends the turn: cancellation and listener errors
        propagate unchanged after the turn is closed.

        Args:
            handle: Turn to feed
            source: Lazy, finite sequence of text fragments

        Returns:
            The completed handle

        Raises:
            MessageSourceError: If the source fails; the partial content is
                kept on the message
            asyncio.CancelledError: If the consuming task is cancelled
        """
        iterator = source.__aiter__()
        try:
            while not handle.completed:
                try:
                    chunk = await self._next_chunk(handle, iterator)
                except StopAsyncIteration:
                    break
                except Exception as e:
                    self.end_turn(handle, error=str(e) or type(e).__name__)
                    raise MessageSourceError(
                        f"Message source failed: {e}",
                        partial_content=handle.buffer,
                    ) from e
                if chunk is None or handle.completed:
                    break
                self.append_chunk(handle, chunk)
        except asyncio.CancelledError:
            self.end_turn(handle)
            raise
        except BaseException as e:
            self.end_turn(handle, error=str(e) or type(e).__name__)
            raise
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

        self.end_turn(handle)
        return handle

    @staticmethod
    async def _next_chunk(handle: TurnHandle, iterator: AsyncIterator[str]) -> str | None:
        """Await the next chunk, or return None as soon as the turn ends.

        Raises whatever the iterator raises, ``StopAsyncIteration`` included.
        """
        read = asyncio.ensure_future(iterator.__anext__())
        ended = asyncio.ensure_future(handle.ended.wait())
        try:
            await asyncio.wait({read, ended}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            ended.cancel()
            if not read.done():
                read.cancel()
                await asyncio.wait({read})
        if read.cancelled():
            return None
        return read.result()
