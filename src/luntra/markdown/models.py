"""Data models for the streaming markdown pipeline.

Block nodes and inline spans are closed sum types: each variant is a frozen
pydantic model tagged by a ``kind`` literal. Consumers dispatch on the
variant once, at the presentation boundary (see ``presenters.py``).
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class PlainText(BaseModel):
    """Literal text, including any unmatched delimiters."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str

    @property
    def raw(self) -> str:
        return self.text


class InlineCode(BaseModel):
    """Backtick-delimited code. Content is never re-scanned."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["code"] = "code"
    text: str

    @property
    def raw(self) -> str:
        return f"`{self.text}`"


class Bold(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["bold"] = "bold"
    text: str

    @property
    def raw(self) -> str:
        return f"**{self.text}**"


class Italic(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["italic"] = "italic"
    text: str

    @property
    def raw(self) -> str:
        return f"*{self.text}*"


class Link(BaseModel):
    """Markdown ``[label](href)`` link."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["link"] = "link"
    label: str
    href: str

    @property
    def raw(self) -> str:
        return f"[{self.label}]({self.href})"


InlineSpan = Annotated[
    PlainText | InlineCode | Bold | Italic | Link,
    Field(discriminator="kind"),
]


class _BlockBase(BaseModel):
    """Common fields for all block nodes.

    ``start`` and ``end`` delimit the node's source in the buffer it was
    parsed from, line terminators and fence markers included.
    """

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0, description="Offset of the first source character")
    end: int = Field(ge=0, description="Offset one past the last source character")

    def raw(self, buffer: str) -> str:
        """Return the source text of this node within ``buffer``."""
        return buffer[self.start:self.end]


class Paragraph(_BlockBase):
    kind: Literal["paragraph"] = "paragraph"
    text: str


class Header(_BlockBase):
    kind: Literal["header"] = "header"
    level: int = Field(ge=1, le=6, description="Heading level (1-6)")
    text: str


class ListBlock(_BlockBase):
    kind: Literal["list"] = "list"
    ordered: bool
    items: tuple[str, ...] = ()


class CodeBlock(_BlockBase):
    kind: Literal["code"] = "code"
    language: str | None = None
    code: str = ""
    closed: bool = Field(
        default=True,
        description="False while the closing fence has not arrived yet"
    )


class Spacer(_BlockBase):
    """Vertical spacing produced by a blank line."""

    kind: Literal["spacer"] = "spacer"


BlockNode = Annotated[
    Paragraph | Header | ListBlock | CodeBlock | Spacer,
    Field(discriminator="kind"),
]
