"""Configuration for luntra.

Runtime settings come from environment variables (optionally loaded from a
``.env`` file). Fixed display values are module constants.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ASSISTANT_NAME = "Luntra"
USER_LABEL = "You"

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_SYSTEM_INSTRUCTION = (
    "You are Luntra, a professional, smart, and user-friendly AI assistant. "
    "You provide concise, helpful, and accurate answers. "
    "You format your responses with Markdown."
)

# Conversation list configuration
CONVERSATION_TITLE_MAX_LENGTH = 40  # Characters of the first user message
CONVERSATION_PREVIEW_MAX_LENGTH = 80  # Characters of the last message
DEFAULT_CONVERSATION_TITLE = "New chat"

# Streaming display configuration
LIVE_REFRESH_PER_SECOND = 12
DEFAULT_REPLAY_CHUNK_SIZE = 12  # Characters per chunk when replaying a file

# Timestamp format for transcripts
TRANSCRIPT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_DATA_DIR = Path.home() / ".luntra"


class Settings(BaseModel):
    """Runtime settings resolved from the environment."""

    data_dir: Path = Field(default=DEFAULT_DATA_DIR, description="Directory for local state")
    store_backend: str = Field(default="sqlite", description="Key-value store: sqlite or memory")
    db_path: Path | None = Field(default=None, description="SQLite file, defaults to data_dir/luntra.db")
    gemini_api_key: str | None = Field(default=None, description="Google AI API key")
    gemini_model: str | None = Field(default=None, description="Gemini model, overrides the saved preference")
    log_level: str = Field(default="WARNING")

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Normalize and check the store backend name."""
        backend = v.strip().lower()
        if backend not in ("sqlite", "memory"):
            raise ValueError(f"Unsupported store backend: {v}")
        return backend

    @property
    def database_path(self) -> Path:
        return self.db_path or self.data_dir / "luntra.db"


def load_settings(env_file: Path | None = None) -> Settings:
    """Build settings from environment variables.

    Environment variables:
        LUNTRA_DATA_DIR: Directory for local state (default: ~/.luntra)
        LUNTRA_STORE: Key-value store backend, sqlite or memory (default: sqlite)
        LUNTRA_DB_PATH: SQLite database file (default: $LUNTRA_DATA_DIR/luntra.db)
        GEMINI_API_KEY: Google AI API key for the gemini message source
        GEMINI_MODEL: Gemini model (default: the saved preference, else gemini-2.5-flash)
        LUNTRA_LOG_LEVEL: Log level name (default: WARNING)

    Args:
        env_file: Optional ``.env`` file; the default lookup is used if None

    Returns:
        Resolved settings
    """
    load_dotenv(env_file)

    db_path = os.getenv("LUNTRA_DB_PATH")
    return Settings(
        data_dir=Path(os.getenv("LUNTRA_DATA_DIR", str(DEFAULT_DATA_DIR))).expanduser(),
        store_backend=os.getenv("LUNTRA_STORE", "sqlite"),
        db_path=Path(db_path).expanduser() if db_path else None,
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL") or None,
        log_level=os.getenv("LUNTRA_LOG_LEVEL", "WARNING"),
    )
