"""Google Gemini message source.

Uses the official Google GenAI SDK for async streaming.
Reference: https://github.com/googleapis/python-genai
"""

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any

from google import genai
from google.genai import types

from ..chat.models import Message, Role
from ..config import DEFAULT_MODEL, DEFAULT_SYSTEM_INSTRUCTION
from .base import MessageSource

logger = logging.getLogger(__name__)

# Only high-probability harms are blocked
DEFAULT_SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_ONLY_HIGH"),
]


class GeminiMessageSource(MessageSource):
    """Streams replies from Google Gemini.

    Hidden design decisions:
    - Google GenAI client initialization
    - Message format conversion (history is sent with every request, so
      the source itself holds no conversation state)
    - Relaxed safety settings to avoid blocking code content
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION,
        temperature: float | None = None,
        **client_kwargs: Any
    ):
        """Initialize Gemini source.

        Args:
            api_key: Google AI API key
            model: Model name (gemini-2.5-flash, gemini-2.5-pro, ...)
            system_instruction: System prompt sent with every request
            temperature: Sampling temperature, model default if None
            **client_kwargs: Additional kwargs for Client
        """
        self._model = model
        self._system_instruction = system_instruction
        self._temperature = temperature
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the model name."""
        return self._model

    @staticmethod
    def _convert_messages(prompt: str, history: Sequence[Message]) -> list[types.Content]:
        """Convert history plus the new prompt to Gemini contents.

        Empty messages (e.g. a reply that failed before any text arrived)
        are skipped; Gemini rejects empty parts.
        """
        contents = []
        for message in history:
            if not message.content:
                continue
            role = "user" if message.role == Role.USER else "model"
            contents.append(types.Content(role=role, parts=[types.Part(text=message.content)]))
        contents.append(types.Content(role="user", parts=[types.Part(text=prompt)]))
        return contents

    @staticmethod
    def _extract_text(chunk: Any) -> str:
        """Extract text from a streamed chunk, tolerating empty candidates."""
        if chunk.candidates:
            candidate = chunk.candidates[0]
            if candidate.content and candidate.content.parts:
                texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
                if texts:
                    return "".join(texts)
        try:
            return chunk.text or ""
        except (ValueError, AttributeError):
            return ""

    async def stream(self, prompt: str, history: Sequence[Message] = ()) -> AsyncIterator[str]:
        config = types.GenerateContentConfig(
            system_instruction=self._system_instruction,
            safety_settings=DEFAULT_SAFETY_SETTINGS,
            temperature=self._temperature,
        )
        contents = self._convert_messages(prompt, history)
        logger.debug("Streaming %s with %d content items", self._model, len(contents))

        stream = await self._client.aio.models.generate_content_stream(
            model=self._model, contents=contents, config=config
        )
        async for chunk in stream:
            text = self._extract_text(chunk)
            if text:
                yield text

    @property
    def source_type(self) -> str:
        return "gemini"
