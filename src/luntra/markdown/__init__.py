"""Streaming markdown rendering.

Module structure (each module hides one design decision):
- models.py: Block node and inline span variants
- inline.py: Inline tokenizer (span precedence)
- blocks.py: Block segmenter (fences, lists, headers, paragraphs)
- render.py: Full re-parse per update and positional block identity
- presenters.py: Conversion to Rich renderables and plain data
"""

from .blocks import FENCE, has_open_fence, segment
from .inline import tokenize
from .models import (
    BlockNode,
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
from .presenters import to_plain_data, to_rich
from .render import RenderDriver, RenderedBlock, RenderUpdate, render

__all__ = [
    # Models
    "BlockNode",
    "Bold",
    "CodeBlock",
    "Header",
    "InlineCode",
    "InlineSpan",
    "Italic",
    "Link",
    "ListBlock",
    "Paragraph",
    "PlainText",
    "Spacer",
    # Parsing
    "FENCE",
    "has_open_fence",
    "segment",
    "tokenize",
    # Rendering
    "RenderDriver",
    "RenderUpdate",
    "RenderedBlock",
    "render",
    "to_plain_data",
    "to_rich",
]
