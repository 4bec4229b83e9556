"""
Luntra: a chat client core with a streaming markdown renderer.

Each sub-package hides one design decision:
- markdown: how partial markdown becomes stable, styled blocks
- chat: how turns stream, and how conversations are kept and exported
- storage: where local state lives
- sources: where reply text comes from
"""

__version__ = "0.1.0"

from .chat import ChatSession, Message, Role, StreamingSession
from .exceptions import LuntraError, MessageSourceError, UseAfterCompleteError
from .markdown import RenderDriver, render, segment, tokenize

__all__ = [
    "ChatSession",
    "LuntraError",
    "Message",
    "MessageSourceError",
    "RenderDriver",
    "Role",
    "StreamingSession",
    "UseAfterCompleteError",
    "render",
    "segment",
    "tokenize",
]
