"""Message source that replays pre-recorded chunks."""

import asyncio
from collections.abc import AsyncIterator, Iterable, Sequence

from ..chat.models import Message
from .base import MessageSource


def split_into_chunks(text: str, size: int) -> list[str]:
    """Split ``text`` into consecutive chunks of at most ``size`` characters."""
    if size < 1:
        raise ValueError("Chunk size must be at least 1")
    return [text[i:i + size] for i in range(0, len(text), size)]


class ScriptedMessageSource(MessageSource):
    """Replays the same chunks for every prompt.

    Useful for demos, replaying saved replies and tests.

    Args:
        chunks: Fragments to yield, in order
        delay: Seconds to wait before each fragment
        fail_after: If set, raise ``ConnectionError`` after this many fragments
    """

    def __init__(
        self,
        chunks: Iterable[str],
        delay: float = 0.0,
        fail_after: int | None = None,
    ):
        self._chunks = list(chunks)
        self._delay = delay
        self._fail_after = fail_after
        self.prompts: list[str] = []
        self.reset_count = 0

    @classmethod
    def from_text(cls, text: str, chunk_size: int, **kwargs) -> "ScriptedMessageSource":
        return cls(split_into_chunks(text, chunk_size), **kwargs)

    async def stream(self, prompt: str, history: Sequence[Message] = ()) -> AsyncIterator[str]:
        self.prompts.append(prompt)
        for index, chunk in enumerate(self._chunks):
            if self._fail_after is not None and index >= self._fail_after:
                raise ConnectionError(f"Scripted failure after {index} chunks")
            if self._delay:
                await asyncio.sleep(self._delay)
            yield chunk

    def reset(self) -> None:
        self.reset_count += 1

    @property
    def source_type(self) -> str:
        return "scripted"
