"""Abstract base class for message sources.

A message source turns a prompt into a lazy, finite, non-restartable
sequence of text fragments for one turn. End of the sequence means the
turn is complete; an exception raised while iterating is a turn-level
failure.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from typing import Any

from ..chat.models import Message


class MessageSource(ABC):
    """Abstract message source.

    Implementations hide the transport (SDK client, HTTP stream, replay).

    Supports async context manager protocol for resource cleanup:
        async with source:
            async for chunk in source.stream("Hello", history):
                ...
    """

    @abstractmethod
    def stream(self, prompt: str, history: Sequence[Message] = ()) -> AsyncIterator[str]:
        """Stream the reply to ``prompt``.

        Args:
            prompt: The user's message
            history: Earlier messages of the conversation, oldest first

        Returns:
            Async iterator of text fragments
        """

    def reset(self) -> None:
        """Forget any conversation context held by the source."""

    async def close(self) -> None:
        """Close any open connections or resources."""

    @property
    @abstractmethod
    def source_type(self) -> str:
        """Get the source type identifier."""

    async def __aenter__(self) -> "MessageSource":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
