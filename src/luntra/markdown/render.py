"""Render driver: buffer -> rendered blocks with stable identities.

Every update re-parses the whole buffer. Turn buffers are short-lived and
bounded (chat replies, not documents), so a full re-parse per chunk keeps
the parser a pure function of its input. If throughput ever matters, the
parse can resume from the last closed block: all blocks but the final one
are unchanged when text is appended.

Identity is positional. A rendered block's key is ``"{kind}-{index}"``, so
a block keeps its key for as long as the same kind of block sits at the
same index, which is what happens when content only grows at the tail.
"""

import logging

from pydantic import BaseModel, ConfigDict, Field

from .blocks import segment
from .inline import tokenize
from .models import BlockNode, CodeBlock, Header, InlineSpan, ListBlock, Paragraph

logger = logging.getLogger(__name__)


class RenderedBlock(BaseModel):
    """A block node together with its tokenized inline content.

    ``spans`` holds the inline spans of a paragraph or header text, or of
    a code block's language tag. ``item_spans`` holds one span sequence per
    list item. Code bodies are never tokenized.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Positional identity, stable while the tail grows")
    block: BlockNode
    spans: tuple[InlineSpan, ...] = ()
    item_spans: tuple[tuple[InlineSpan, ...], ...] = ()


class RenderUpdate(BaseModel):
    """Result of feeding one buffer snapshot to a ``RenderDriver``."""

    model_config = ConfigDict(frozen=True)

    blocks: tuple[RenderedBlock, ...] = ()
    added: tuple[str, ...] = ()
    changed: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()

    @property
    def is_noop(self) -> bool:
        return not (self.added or self.changed or self.removed)


def block_key(block: BlockNode, index: int) -> str:
    return f"{block.kind}-{index}"


def render_block(block: BlockNode, index: int) -> RenderedBlock:
    """Attach inline spans to a single block node."""
    key = block_key(block, index)
    if isinstance(block, (Paragraph, Header)):
        return RenderedBlock(key=key, block=block, spans=tuple(tokenize(block.text)))
    if isinstance(block, ListBlock):
        return RenderedBlock(
            key=key,
            block=block,
            item_spans=tuple(tuple(tokenize(item)) for item in block.items),
        )
    if isinstance(block, CodeBlock) and block.language:
        return RenderedBlock(key=key, block=block, spans=tuple(tokenize(block.language)))
    return RenderedBlock(key=key, block=block)


def render(buffer: str, *, final: bool = False) -> list[RenderedBlock]:
    """Segment and tokenize a buffer.

    Pure and idempotent: the same buffer always renders to equal output.

    Args:
        buffer: Full message text accumulated so far
        final: True once the message is complete (see ``segment``)

    Returns:
        Rendered blocks in document order
    """
    return [render_block(block, index) for index, block in enumerate(segment(buffer, final=final))]


class RenderDriver:
    """Re-renders a growing buffer and reports which blocks changed.

    Blocks are matched by index and kind against the previous render. A
    block whose node is unchanged reuses the previous ``RenderedBlock``
    object, so presentation layers can skip redrawing it.
    """

    def __init__(self) -> None:
        self._blocks: list[RenderedBlock] = []
        self._buffer = ""
        self._renders = 0

    @property
    def blocks(self) -> list[RenderedBlock]:
        return list(self._blocks)

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def render_count(self) -> int:
        return self._renders

    def update(self, buffer: str, *, final: bool = False) -> RenderUpdate:
        """Render ``buffer`` and diff it against the previous render.

        Args:
            buffer: Current full buffer (an immutable snapshot)
            final: True once the message is complete

        Returns:
            The new blocks plus the keys added, changed and removed
        """
        previous = self._blocks
        nodes = segment(buffer, final=final)
        blocks: list[RenderedBlock] = []
        added: list[str] = []
        changed: list[str] = []
        removed: list[str] = []

        for index, node in enumerate(nodes):
            old = previous[index] if index < len(previous) else None
            if old is not None and old.block == node:
                blocks.append(old)
                continue

            rendered = render_block(node, index)
            blocks.append(rendered)
            if old is None:
                added.append(rendered.key)
            elif old.key == rendered.key:
                changed.append(rendered.key)
            else:
                # Kind changed at this position: a different block took its place
                removed.append(old.key)
                added.append(rendered.key)

        removed.extend(block.key for block in previous[len(blocks):])

        self._blocks = blocks
        self._buffer = buffer
        self._renders += 1

        if removed:
            logger.debug("Render dropped blocks %s", removed)

        return RenderUpdate(
            blocks=tuple(blocks),
            added=tuple(added),
            changed=tuple(changed),
            removed=tuple(removed),
        )

    def reset(self) -> None:
        """Forget the previous render."""
        self._blocks = []
        self._buffer = ""
        self._renders = 0
