"""Chat domain for luntra.

Module structure:
- models.py: Messages, conversation summaries, preferences
- streaming.py: Turn lifecycle and chunk accumulation
- session.py: Conversation flow (send, new chat, load, delete)
- export.py: Transcript encodings
"""

from .export import ExportFormat, default_filename, export_conversation
from .models import ChatSessionState, Conversation, Message, Preferences, Role
from .session import ChatSession
from .streaming import StreamingSession, TurnHandle

__all__ = [
    "ChatSession",
    "ChatSessionState",
    "Conversation",
    "ExportFormat",
    "Message",
    "Preferences",
    "Role",
    "StreamingSession",
    "TurnHandle",
    "default_filename",
    "export_conversation",
]
