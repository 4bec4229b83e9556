"""Presentation of rendered blocks.

Hides how block and span variants turn into something displayable. Each
output format has exactly one dispatch over the block kinds; unknown kinds
raise ``TypeError`` instead of rendering silently wrong output.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from rich.console import Group, RenderableType
from rich.padding import Padding
from rich.panel import Panel
from rich.style import Style
from rich.syntax import Syntax
from rich.text import Text

from .models import (
    Bold,
    CodeBlock,
    Header,
    InlineCode,
    InlineSpan,
    Italic,
    Link,
    ListBlock,
    Paragraph,
    PlainText,
    Spacer,
)
from .render import RenderedBlock

# Styles roughly follow the chat client's dark palette
CODE_STYLE = Style(color="#E6E0E9", bgcolor="#49454F")
LINK_STYLE = Style(color="#D0BCFF", underline=True)
HEADER_STYLES = {
    1: Style(bold=True, underline=True),
    2: Style(bold=True),
}
DEFAULT_HEADER_STYLE = Style(bold=True, italic=True)
SYNTAX_THEME = "monokai"
OPEN_FENCE_SUBTITLE = "streaming..."


def spans_to_text(spans: Iterable[InlineSpan]) -> Text:
    """Convert inline spans to a styled Rich ``Text``."""
    text = Text(overflow="fold")
    for span in spans:
        if isinstance(span, PlainText):
            text.append(span.text)
        elif isinstance(span, InlineCode):
            text.append(span.text, style=CODE_STYLE)
        elif isinstance(span, Bold):
            text.append(span.text, style="bold")
        elif isinstance(span, Italic):
            text.append(span.text, style="italic")
        elif isinstance(span, Link):
            text.append(span.label, style=LINK_STYLE + Style(link=span.href))
        else:
            raise TypeError(f"Unknown inline span: {type(span).__name__}")
    return text


def _list_renderable(rendered: RenderedBlock, block: ListBlock) -> RenderableType:
    lines = []
    for number, spans in enumerate(rendered.item_spans, 1):
        marker = f"{number}. " if block.ordered else "• "
        line = Text(marker, style="dim")
        line.append_text(spans_to_text(spans))
        lines.append(line)
    return Padding(Group(*lines), (0, 0, 0, 2))


def _code_renderable(rendered: RenderedBlock, block: CodeBlock) -> RenderableType:
    syntax = Syntax(
        block.code.rstrip("\n"),
        block.language or "text",
        theme=SYNTAX_THEME,
        word_wrap=False,
    )
    title = spans_to_text(rendered.spans) if rendered.spans else None
    return Panel(
        syntax,
        title=title,
        title_align="left",
        subtitle=None if block.closed else OPEN_FENCE_SUBTITLE,
        border_style="#49454F",
    )


def block_to_renderable(rendered: RenderedBlock) -> RenderableType:
    """Build the Rich renderable for one rendered block."""
    block = rendered.block
    if isinstance(block, Paragraph):
        return spans_to_text(rendered.spans)
    if isinstance(block, Header):
        style = HEADER_STYLES.get(block.level, DEFAULT_HEADER_STYLE)
        text = spans_to_text(rendered.spans)
        text.stylize(style)
        return text
    if isinstance(block, ListBlock):
        return _list_renderable(rendered, block)
    if isinstance(block, CodeBlock):
        return _code_renderable(rendered, block)
    if isinstance(block, Spacer):
        return Text("")
    raise TypeError(f"Unknown block node: {type(block).__name__}")


def to_rich(blocks: Sequence[RenderedBlock]) -> Group:
    """Combine rendered blocks into a single Rich renderable."""
    return Group(*(block_to_renderable(block) for block in blocks))


def _spans_to_data(spans: Iterable[InlineSpan]) -> list[dict[str, Any]]:
    return [span.model_dump(mode="json") for span in spans]


def block_to_data(rendered: RenderedBlock) -> dict[str, Any]:
    """Convert one rendered block to JSON-compatible data."""
    block = rendered.block
    data: dict[str, Any] = {"key": rendered.key, "kind": block.kind}
    if isinstance(block, Paragraph):
        data["spans"] = _spans_to_data(rendered.spans)
    elif isinstance(block, Header):
        data["level"] = block.level
        data["spans"] = _spans_to_data(rendered.spans)
    elif isinstance(block, ListBlock):
        data["ordered"] = block.ordered
        data["items"] = [_spans_to_data(spans) for spans in rendered.item_spans]
    elif isinstance(block, CodeBlock):
        data["language"] = block.language
        data["code"] = block.code
        data["closed"] = block.closed
    elif isinstance(block, Spacer):
        pass
    else:
        raise TypeError(f"Unknown block node: {type(block).__name__}")
    return data


def to_plain_data(blocks: Sequence[RenderedBlock]) -> list[dict[str, Any]]:
    """Convert rendered blocks to plain structured data (no UI types)."""
    return [block_to_data(block) for block in blocks]
