"""Abstract base class for key-value store backends.

This module defines the interface for local client storage.
The abstraction hides:
- Storage format (dict, SQLite table, etc.)
- Persistence mechanism (file, database, in-memory)
- Connection management

Values are opaque text; callers decide how to encode them.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract key-value store.

    A missing key is a normal state, reported as ``None`` by ``get``.

    Supports async context manager protocol:
        async with store:
            await store.set("preferences", "{}")
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store backend gracefully."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete ``key``. Removing a missing key is not an error."""

    @abstractmethod
    async def keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with ``prefix``, sorted."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "KeyValueStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
