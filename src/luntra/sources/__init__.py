"""Message sources: where streamed reply text comes from."""

from .base import MessageSource
from .factory import create_message_source
from .scripted import ScriptedMessageSource, split_into_chunks

__all__ = [
    "MessageSource",
    "ScriptedMessageSource",
    "create_message_source",
    "split_into_chunks",
]
