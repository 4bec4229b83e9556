"""Data models for the chat domain.

These models define messages, conversation summaries and preferences,
independent of how they are stored or displayed.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

from ..config import (
    CONVERSATION_PREVIEW_MAX_LENGTH,
    CONVERSATION_TITLE_MAX_LENGTH,
    DEFAULT_CONVERSATION_TITLE,
    DEFAULT_MODEL,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _truncate(text: str, limit: int) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[:limit - 3].rstrip() + "..."


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    MODEL = "model"


class Message(BaseModel):
    """A single message in a conversation.

    ``content`` only grows while ``is_streaming`` is true, and is frozen
    once the turn producing it completes.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    role: Role
    content: str = ""
    is_streaming: bool = False
    timestamp: datetime = Field(default_factory=_now)
    bookmarked: bool = False
    edited: bool = False
    reactions: list[str] = Field(default_factory=list)


class Conversation(BaseModel):
    """Summary of a stored conversation, as shown in the conversation list."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str = DEFAULT_CONVERSATION_TITLE
    timestamp: datetime = Field(default_factory=_now)
    preview: str | None = None
    message_count: int = Field(default=0, ge=0)

    @classmethod
    def summarize(cls, conversation_id: str, messages: list[Message]) -> "Conversation":
        """Build a summary from a conversation's messages.

        Args:
            conversation_id: Conversation identifier
            messages: Messages in chronological order

        Returns:
            Summary titled after the first user message
        """
        first_user = next(
            (m for m in messages if m.role == Role.USER and m.content.strip()), None
        )
        title = (
            _truncate(first_user.content, CONVERSATION_TITLE_MAX_LENGTH)
            if first_user else DEFAULT_CONVERSATION_TITLE
        )
        preview = (
            _truncate(messages[-1].content, CONVERSATION_PREVIEW_MAX_LENGTH)
            if messages else None
        )
        return cls(
            id=conversation_id,
            title=title,
            timestamp=messages[-1].timestamp if messages else _now(),
            preview=preview or None,
            message_count=len(messages),
        )


class Preferences(BaseModel):
    """User preferences persisted between sessions."""

    theme: Literal["dark", "light"] = "dark"
    model: str = DEFAULT_MODEL
    sidebar_open: bool = False


class ChatSessionState(BaseModel):
    """Observable state of the active conversation."""

    conversation_id: str = Field(default_factory=lambda: str(uuid4()))
    messages: list[Message] = Field(default_factory=list)
    is_typing: bool = False
    error: str | None = None
