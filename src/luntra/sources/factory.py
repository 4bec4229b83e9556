"""Factory for creating message sources."""

from typing import Any

from .base import MessageSource


def create_message_source(kind: str, **config: Any) -> MessageSource:
    """Create a message source instance.

    Args:
        kind: Source type ('gemini' or 'scripted')
        **config: Source-specific configuration
            For Gemini:
                - api_key: str (required)
                - model: str (default: 'gemini-2.5-flash')
                - system_instruction: str
            For scripted:
                - chunks: Iterable[str] (required)
                - delay: float (default: 0.0)
                - fail_after: int | None

    Returns:
        Initialized message source

    Raises:
        ValueError: If source type is not supported
        TypeError: If required configuration is missing
    """
    kind_lower = kind.lower()

    if kind_lower == "gemini":
        if "api_key" not in config:
            raise TypeError("Gemini source requires 'api_key' in config")
        from .gemini import GeminiMessageSource
        return GeminiMessageSource(**config)

    if kind_lower == "scripted":
        if "chunks" not in config:
            raise TypeError("Scripted source requires 'chunks' in config")
        from .scripted import ScriptedMessageSource
        return ScriptedMessageSource(**config)

    raise ValueError(
        f"Unsupported message source: {kind}. "
        f"Supported sources: gemini, scripted"
    )
