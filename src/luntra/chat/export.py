"""Conversation export.

Pure functions of a message list: no clock, no I/O. Writing the result to
a file is left to the caller.
"""

import json
import re
from collections.abc import Sequence
from enum import Enum

from ..config import ASSISTANT_NAME, DEFAULT_CONVERSATION_TITLE, TRANSCRIPT_TIMESTAMP_FORMAT, USER_LABEL
from .models import Message, Role


class ExportFormat(str, Enum):
    """Supported transcript encodings."""

    TEXT = "txt"
    JSON = "json"
    MARKDOWN = "md"


def _speaker(message: Message) -> str:
    return USER_LABEL if message.role == Role.USER else ASSISTANT_NAME


def _stamp(message: Message) -> str:
    return message.timestamp.strftime(TRANSCRIPT_TIMESTAMP_FORMAT)


def export_text(messages: Sequence[Message], title: str | None = None) -> str:
    """Plain-text transcript, one block per message."""
    lines = []
    if title:
        lines.extend([title, "=" * len(title), ""])
    for message in messages:
        lines.append(f"[{_stamp(message)}] {_speaker(message)}:")
        lines.append(message.content)
        lines.append("")
    return "\n".join(lines).rstrip("\n") + "\n"


def export_json(messages: Sequence[Message], title: str | None = None) -> str:
    """JSON document with the title and every message field."""
    document = {
        "title": title or DEFAULT_CONVERSATION_TITLE,
        "message_count": len(messages),
        "messages": [message.model_dump(mode="json") for message in messages],
    }
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def export_markdown(messages: Sequence[Message], title: str | None = None) -> str:
    """Markdown document; model replies are embedded verbatim."""
    lines = [f"# {title or DEFAULT_CONVERSATION_TITLE}", ""]
    for message in messages:
        marker = " ★" if message.bookmarked else ""
        lines.append(f"## {_speaker(message)}{marker}")
        lines.append(f"*{_stamp(message)}*")
        lines.append("")
        lines.append(message.content)
        lines.append("")
    return "\n".join(lines).rstrip("\n") + "\n"


_EXPORTERS = {
    ExportFormat.TEXT: export_text,
    ExportFormat.JSON: export_json,
    ExportFormat.MARKDOWN: export_markdown,
}


def export_conversation(
    messages: Sequence[Message],
    fmt: ExportFormat | str,
    title: str | None = None,
) -> str:
    """Encode a conversation in the requested format.

    Args:
        messages: Messages in chronological order
        fmt: Export format or its value ("txt", "json", "md")
        title: Optional conversation title

    Returns:
        The encoded transcript

    Raises:
        ValueError: If the format is not supported
    """
    return _EXPORTERS[ExportFormat(fmt)](messages, title)


def default_filename(title: str | None, fmt: ExportFormat | str) -> str:
    """Suggest a file name such as ``project-ideas.md`` for an export."""
    slug = re.sub(r"[^a-z0-9]+", "-", (title or "").lower()).strip("-")
    return f"{slug or 'conversation'}.{ExportFormat(fmt).value}"
