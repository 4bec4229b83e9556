"""Unit tests for the inline tokenizer."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from luntra.markdown import (
    Bold,
    InlineCode,
    Italic,
    Link,
    PlainText,
    tokenize,
)


class TestTokenize:
    """Tests for tokenize()."""

    def test_empty_line_has_no_spans(self):
        """Test that an empty line yields no spans at all."""
        assert tokenize("") == []

    def test_plain_text(self):
        """Test that text without delimiters is a single plain span."""
        assert tokenize("just words") == [PlainText(text="just words")]

    def test_link_between_plain_text(self):
        """Test that a link splits the surrounding text."""
        assert tokenize("See [docs](https://x.test) now") == [
            PlainText(text="See "),
            Link(label="docs", href="https://x.test"),
            PlainText(text=" now"),
        ]

    def test_bold_and_italic(self):
        """Test that ** and * produce bold and italic spans."""
        assert tokenize("a **b** c *d*") == [
            PlainText(text="a "),
            Bold(text="b"),
            PlainText(text=" c "),
            Italic(text="d"),
        ]

    def test_mixed_spans_in_order(self):
        """Test that spans come back in source order."""
        spans = tokenize("**a** and *b* and `c`")

        assert [span.kind for span in spans] == ["bold", "text", "italic", "text", "code"]
        assert spans[-1] == InlineCode(text="c")


class TestPrecedence:
    """Tests for delimiter precedence: code > link > bold > italic."""

    def test_code_content_is_opaque(self):
        """Test that asterisks inside backticks stay literal."""
        assert tokenize("`**x**`") == [InlineCode(text="**x**")]

    def test_code_wins_over_link(self):
        """Test that a link inside backticks is not parsed."""
        assert tokenize("`[a](b)`") == [InlineCode(text="[a](b)")]

    def test_link_wins_over_bold(self):
        """Test that a bold label stays part of the link label."""
        assert tokenize("[**x**](y)") == [Link(label="**x**", href="y")]

    def test_bold_wins_over_italic(self):
        """Test that ** is read as bold, not as two italics."""
        assert tokenize("**x**") == [Bold(text="x")]


class TestMalformedInput:
    """Tests that malformed syntax degrades to plain text."""

    @pytest.mark.parametrize("line", [
        "**bold",
        "`open code",
        "[label](no close",
        "[label] (gap)",
        "[x]()",
        "****",
        "``",
        "*",
    ])
    def test_unmatched_delimiters_are_plain(self, line: str):
        """Test that dangling delimiters are emitted verbatim."""
        assert tokenize(line) == [PlainText(text=line)]

    def test_partial_bold_while_streaming(self):
        """Test that a half-received bold span is plain until it closes."""
        assert tokenize("Hello **wor") == [PlainText(text="Hello **wor")]
        assert tokenize("Hello **world**") == [PlainText(text="Hello "), Bold(text="world")]


class TestTokenizeProperties:
    """Property-based tests for tokenize()."""

    @given(st.text())
    def test_raw_concatenation_reconstructs_line(self, line: str):
        """Property test: joining raw spans gives back the input."""
        assert "".join(span.raw for span in tokenize(line)) == line

    @given(st.text(alphabet="*`[]()ab "))
    def test_no_empty_or_adjacent_plain_spans(self, line: str):
        """Property test: plain runs are non-empty and never adjacent."""
        spans = tokenize(line)

        for span in spans:
            if isinstance(span, PlainText):
                assert span.text
        for left, right in zip(spans, spans[1:]):
            assert not (isinstance(left, PlainText) and isinstance(right, PlainText))

    @given(st.text())
    def test_tokenize_is_deterministic(self, line: str):
        """Property test: the same line always tokenizes the same way."""
        assert tokenize(line) == tokenize(line)
