"""Inline span tokenizer.

Splits a single line into plain text, inline code, links, bold and italic
spans. Alternatives are tried in a fixed order at each position so that
overlapping delimiters resolve the same way every time:

    1. `code`
    2. [label](href)
    3. **bold**
    4. *italic*

Anything left over, dangling delimiters included, is plain text.
"""

import re

from .models import Bold, InlineCode, InlineSpan, Italic, Link, PlainText

_INLINE_PATTERN = re.compile(
    r"`(?P<code>[^`]+)`"
    r"|\[(?P<label>[^\]]+)\]\((?P<href>[^)]+)\)"
    r"|\*\*(?P<bold>[^*]+)\*\*"
    r"|\*(?P<italic>[^*]+)\*"
)


def _span_from_match(match: re.Match[str]) -> InlineSpan:
    if match.group("code") is not None:
        return InlineCode(text=match.group("code"))
    if match.group("label") is not None:
        return Link(label=match.group("label"), href=match.group("href"))
    if match.group("bold") is not None:
        return Bold(text=match.group("bold"))
    return Italic(text=match.group("italic"))


def tokenize(line: str) -> list[InlineSpan]:
    """Tokenize one line of text into inline spans.

    Args:
        line: Source text. Normally a single line, but newlines are
            treated as ordinary characters.

    Returns:
        Spans in source order. Joining ``span.raw`` for every span gives
        back ``line`` exactly. Empty plain-text runs are never emitted.
    """
    spans: list[InlineSpan] = []
    position = 0

    for match in _INLINE_PATTERN.finditer(line):
        if match.start() > position:
            spans.append(PlainText(text=line[position:match.start()]))
        spans.append(_span_from_match(match))
        position = match.end()

    if position < len(line):
        spans.append(PlainText(text=line[position:]))

    return spans

