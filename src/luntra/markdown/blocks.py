"""Block segmenter for streamed markdown.

The buffer is first split on triple-backtick fences. Odd-numbered segments
are fenced code, even-numbered segments are prose. An odd number of fence
markers leaves the trailing segment inside an open code block.

Prose is grouped line by line into paragraphs, headers, spacers and flat
lists. List state is ``none``, ``unordered`` or ``ordered``; switching
between ordered and unordered closes the list and opens a new one, while
mixing ``-`` and ``*`` bullets does not.

Every node records the ``start``/``end`` offsets of its source, so the
nodes tile the buffer with no gaps and no overlap.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from .models import BlockNode, CodeBlock, Header, ListBlock, Paragraph, Spacer

FENCE = "```"

_UNORDERED_ITEM = re.compile(r"^[-*]\s+(.*)")
_ORDERED_ITEM = re.compile(r"^(\d+)\.\s+(.*)")
_HEADER = re.compile(r"^(#{1,6})\s+(.*)")

# Unterminated trailing lines that may still become an item of the open list
_PENDING_UNORDERED = re.compile(r"[-*]")
_PENDING_ORDERED = re.compile(r"\d+\.?")


@dataclass
class _OpenList:
    ordered: bool
    start: int
    end: int
    items: list[str] = field(default_factory=list)

    def to_block(self) -> ListBlock:
        return ListBlock(
            ordered=self.ordered,
            items=tuple(self.items),
            start=self.start,
            end=self.end,
        )


def _split_fences(buffer: str) -> Iterator[tuple[bool, str, int]]:
    """Yield ``(fenced, segment_text, offset)`` for every fence segment.

    ``offset`` is the position of the segment text in ``buffer`` (after the
    opening marker for fenced segments).
    """
    offset = 0
    for index, part in enumerate(buffer.split(FENCE)):
        yield index % 2 == 1, part, offset
        offset += len(part) + len(FENCE)


def _lines_with_offsets(text: str, base: int) -> list[tuple[str, int, int]]:
    """Split ``text`` on newlines, returning ``(line, start, end)`` tuples.

    ``end`` includes the line's newline when it has one.
    """
    result = []
    position = 0
    lines = text.split("\n")
    for index, line in enumerate(lines):
        end = position + len(line)
        if index < len(lines) - 1:
            end += 1
        result.append((line, base + position, base + end))
        position = end
    return result


def _code_block(segment: str, start: int, end: int, closed: bool) -> CodeBlock:
    newline = segment.find("\n")
    if newline < 0:
        language, code = None, segment
    else:
        language = segment[:newline].strip() or None
        code = segment[newline + 1:]
    return CodeBlock(language=language, code=code, closed=closed, start=start, end=end)


def _segment_prose(text: str, base: int, *, hold_pending: bool) -> list[BlockNode]:
    """Group the lines of one prose segment into block nodes.

    Args:
        text: Prose segment text
        base: Offset of ``text`` within the full buffer
        hold_pending: Whether the segment's last line is still being
            streamed, in which case a partial list marker keeps the
            current list open

    Returns:
        Block nodes for this segment, in order
    """
    blocks: list[BlockNode] = []
    current: _OpenList | None = None
    lines = _lines_with_offsets(text, base)
    last_index = len(lines) - 1

    def close_list() -> None:
        nonlocal current
        if current is not None:
            blocks.append(current.to_block())
            current = None

    for index, (line, start, end) in enumerate(lines):
        if not line.strip():
            close_list()
            if index < last_index or end > start:
                blocks.append(Spacer(start=start, end=end))
            continue

        unordered = _UNORDERED_ITEM.match(line)
        ordered = _ORDERED_ITEM.match(line)
        if unordered or ordered:
            is_ordered = unordered is None
            content = unordered.group(1) if unordered else ordered.group(2)
            if current is not None and current.ordered != is_ordered:
                close_list()
            if current is None:
                current = _OpenList(ordered=is_ordered, start=start, end=end)
            current.items.append(content)
            current.end = end
            continue

        if hold_pending and index == last_index and current is not None:
            pending = _PENDING_ORDERED if current.ordered else _PENDING_UNORDERED
            if pending.fullmatch(line):
                current.end = end
                continue

        close_list()
        header = _HEADER.match(line)
        if header:
            blocks.append(Header(
                level=len(header.group(1)),
                text=header.group(2),
                start=start,
                end=end,
            ))
        else:
            blocks.append(Paragraph(text=line, start=start, end=end))

    close_list()
    return blocks


def segment(buffer: str, *, final: bool = False) -> list[BlockNode]:
    """Segment a (possibly partial) markdown buffer into block nodes.

    Args:
        buffer: Full accumulated text
        final: True once no more text will be appended. While streaming
            (the default), a trailing ``-``/``*`` or ``1``/``1.`` that may
            still become the next item of an open list is held inside
            that list rather than closing it.

    Returns:
        Ordered block nodes covering the whole buffer
    """
    blocks: list[BlockNode] = []
    segments = list(_split_fences(buffer))
    last = len(segments) - 1

    for index, (fenced, text, offset) in enumerate(segments):
        if fenced:
            closed = index < last
            start = offset - len(FENCE)
            end = offset + len(text) + (len(FENCE) if closed else 0)
            blocks.append(_code_block(text, start, end, closed))
        else:
            blocks.extend(
                _segment_prose(text, offset, hold_pending=not final and index == last)
            )

    return blocks


def has_open_fence(buffer: str) -> bool:
    """Return True if ``buffer`` ends inside an unterminated code fence."""
    return buffer.count(FENCE) % 2 == 1
