"""Typed access to chat state kept in a key-value store.

Values are JSON documents. A missing key yields the default value; so does
a corrupted record or a failing read, which is logged and otherwise
ignored so that one bad record never takes the whole session down.
"""

import logging
from typing import TypeVar

from pydantic import TypeAdapter, ValidationError

from ..chat.models import Conversation, Message, Preferences
from .base import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY_PREFIX = "history:"
CONVERSATIONS_KEY = "conversations"
PREFERENCES_KEY = "preferences"

T = TypeVar("T")

_MESSAGES = TypeAdapter(list[Message])
_CONVERSATIONS = TypeAdapter(list[Conversation])
_PREFERENCES = TypeAdapter(Preferences)


def history_key(conversation_id: str) -> str:
    return f"{HISTORY_KEY_PREFIX}{conversation_id}"


class ChatRepository:
    """Loads and saves history, the conversation list and preferences."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    @property
    def store(self) -> KeyValueStore:
        return self._store

    async def _load(self, key: str, adapter: TypeAdapter[T], default: T) -> T:
        try:
            raw = await self._store.get(key)
        except Exception as e:  # noqa: BLE001
            logger.warning("Failed to read %r from %s store: %s", key, self._store.backend_type, e)
            return default

        if raw is None:
            return default

        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding malformed record %r (%d errors)", key, e.error_count())
            return default

    async def _save(self, key: str, adapter: TypeAdapter[T], value: T) -> None:
        await self._store.set(key, adapter.dump_json(value).decode("utf-8"))

    async def load_history(self, conversation_id: str) -> list[Message]:
        """Messages of a conversation, empty if none are stored."""
        return await self._load(history_key(conversation_id), _MESSAGES, [])

    async def save_history(self, conversation_id: str, messages: list[Message]) -> None:
        await self._save(history_key(conversation_id), _MESSAGES, messages)

    async def delete_history(self, conversation_id: str) -> None:
        await self._store.remove(history_key(conversation_id))

    async def load_conversations(self) -> list[Conversation]:
        """Conversation summaries, most recent first."""
        conversations = await self._load(CONVERSATIONS_KEY, _CONVERSATIONS, [])
        return sorted(conversations, key=lambda c: c.timestamp, reverse=True)

    async def save_conversations(self, conversations: list[Conversation]) -> None:
        await self._save(CONVERSATIONS_KEY, _CONVERSATIONS, conversations)

    async def upsert_conversation(self, conversation: Conversation) -> list[Conversation]:
        """Insert or replace one summary and return the updated list."""
        conversations = [c for c in await self.load_conversations() if c.id != conversation.id]
        conversations.insert(0, conversation)
        await self.save_conversations(conversations)
        return conversations

    async def remove_conversation(self, conversation_id: str) -> list[Conversation]:
        """Delete a conversation's summary and history, returning the remaining list."""
        conversations = [c for c in await self.load_conversations() if c.id != conversation_id]
        await self.save_conversations(conversations)
        await self.delete_history(conversation_id)
        return conversations

    async def load_preferences(self) -> Preferences:
        return await self._load(PREFERENCES_KEY, _PREFERENCES, Preferences())

    async def save_preferences(self, preferences: Preferences) -> None:
        await self._save(PREFERENCES_KEY, _PREFERENCES, preferences)
