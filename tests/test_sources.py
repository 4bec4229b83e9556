"""Unit tests for message sources."""
import pytest

from luntra.chat import Message, Role
from luntra.sources import (
    MessageSource,
    ScriptedMessageSource,
    create_message_source,
    split_into_chunks,
)
from luntra.sources.gemini import GeminiMessageSource


async def _collect(source: MessageSource, prompt: str = "prompt") -> list[str]:
    return [chunk async for chunk in source.stream(prompt)]


class TestMessageSourceInterface:
    """Tests for the abstract MessageSource interface."""

    def test_source_is_abstract(self):
        """Test that MessageSource cannot be instantiated directly."""
        with pytest.raises(TypeError):
            MessageSource()  # type: ignore


class TestScriptedMessageSource:
    """Tests for ScriptedMessageSource."""

    @pytest.mark.asyncio
    async def test_replays_chunks_for_every_prompt(self):
        """Test that each stream yields the same chunks."""
        source = ScriptedMessageSource(["a", "b"])

        assert await _collect(source, "one") == ["a", "b"]
        assert await _collect(source, "two") == ["a", "b"]
        assert source.prompts == ["one", "two"]

    @pytest.mark.asyncio
    async def test_from_text(self):
        """Test that text is split into fixed-size chunks."""
        source = ScriptedMessageSource.from_text("abcdefg", 3)

        assert await _collect(source) == ["abc", "def", "g"]

    @pytest.mark.asyncio
    async def test_fail_after(self):
        """Test that the scripted failure is raised mid-stream."""
        source = ScriptedMessageSource(["a", "b", "c"], fail_after=2)
        received = []

        with pytest.raises(ConnectionError):
            async for chunk in source.stream("prompt"):
                received.append(chunk)
        assert received == ["a", "b"]

    @pytest.mark.asyncio
    async def test_context_manager(self):
        """Test that the source works as an async context manager."""
        async with ScriptedMessageSource(["x"]) as source:
            assert await _collect(source) == ["x"]

    def test_split_into_chunks(self):
        """Test chunk splitting and its size check."""
        assert split_into_chunks("", 4) == []
        assert split_into_chunks("abcd", 2) == ["ab", "cd"]
        with pytest.raises(ValueError, match="at least 1"):
            split_into_chunks("abc", 0)


class TestGeminiMessageSource:
    """Tests for GeminiMessageSource that need no network."""

    def test_convert_messages(self):
        """Test that history is mapped to roles and empty replies are skipped."""
        history = [
            Message(role=Role.USER, content="hi"),
            Message(role=Role.MODEL, content=""),
            Message(role=Role.MODEL, content="hello"),
        ]

        contents = GeminiMessageSource._convert_messages("next", history)

        assert [c.role for c in contents] == ["user", "model", "user"]
        assert [c.parts[0].text for c in contents] == ["hi", "hello", "next"]

    def test_model_property(self):
        """Test that the configured model is exposed."""
        source = GeminiMessageSource(api_key="fake-key", model="gemini-2.5-pro")

        assert source.model == "gemini-2.5-pro"
        assert source.source_type == "gemini"

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_stream_reply(self, api_keys):
        """Integration test: stream a short reply from Gemini."""
        if not api_keys["gemini"]:
            pytest.skip("Requires GEMINI_API_KEY")

        source = GeminiMessageSource(api_key=api_keys["gemini"])
        chunks = await _collect(source, "Reply with the single word: pong")

        assert "pong" in "".join(chunks).lower()


class TestMessageSourceFactory:
    """Tests for create_message_source()."""

    def test_create_scripted(self):
        """Test that the factory builds a scripted source."""
        source = create_message_source("Scripted", chunks=["a"])

        assert isinstance(source, ScriptedMessageSource)
        assert source.source_type == "scripted"

    def test_create_gemini(self):
        """Test that the factory builds a Gemini source."""
        source = create_message_source("gemini", api_key="fake-key")

        assert isinstance(source, GeminiMessageSource)

    @pytest.mark.parametrize("kind", ["gemini", "scripted"])
    def test_missing_required_config(self, kind: str):
        """Test that required configuration is enforced."""
        with pytest.raises(TypeError):
            create_message_source(kind)

    def test_unsupported_source(self):
        """Test that an unknown source type raises ValueError."""
        with pytest.raises(ValueError, match="Unsupported message source"):
            create_message_source("carrier-pigeon")
