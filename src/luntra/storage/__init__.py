"""Local client storage for luntra.

Provides persistent key-value storage for history, the conversation list
and preferences.
"""

from .base import KeyValueStore
from .factory import create_key_value_store
from .in_memory import InMemoryKeyValueStore
from .repository import CONVERSATIONS_KEY, PREFERENCES_KEY, ChatRepository, history_key

__all__ = [
    "CONVERSATIONS_KEY",
    "ChatRepository",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "PREFERENCES_KEY",
    "create_key_value_store",
    "history_key",
]
