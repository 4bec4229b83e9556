"""Pytest configuration and shared fixtures."""
import os
from datetime import datetime, timedelta, timezone

import pytest

from luntra.chat import Message, Role
from luntra.sources import ScriptedMessageSource
from luntra.storage import ChatRepository, InMemoryKeyValueStore


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "gemini": os.getenv("GEMINI_API_KEY"),
    }


@pytest.fixture
def memory_store():
    """Return an empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(memory_store):
    """Return a chat repository backed by the in-memory store."""
    return ChatRepository(memory_store)


@pytest.fixture
def scripted_source():
    """Return a scripted source that streams a short markdown reply."""
    return ScriptedMessageSource(["Hi ", "**there**\n", "- one\n- two"])


@pytest.fixture
def sample_reply():
    """Return a markdown reply touching every block kind."""
    return (
        "# Summary\n"
        "\n"
        "Use `pip` and see [docs](https://docs.test).\n"
        "- first\n"
        "- **second**\n"
        "1. step\n"
        "```python\n"
        "print('hi')\n"
        "```\n"
    )


@pytest.fixture
def sample_messages():
    """Return a two-message exchange with fixed timestamps."""
    start = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    return [
        Message(id="m1", role=Role.USER, content="hello", timestamp=start),
        Message(
            id="m2",
            role=Role.MODEL,
            content="hi **there**",
            timestamp=start + timedelta(seconds=1),
        ),
    ]
