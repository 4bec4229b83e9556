"""Unit tests for settings and logging setup."""
import logging
import os

import pytest
from pydantic import ValidationError
from rich.logging import RichHandler

from luntra.config import Settings, load_settings
from luntra.log import PACKAGE_LOGGER, configure_logging, parse_level


class TestSettings:
    """Tests for Settings and load_settings()."""

    def test_environment_overrides(self, tmp_path, monkeypatch):
        """Test that settings are read from environment variables."""
        monkeypatch.setenv("LUNTRA_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("LUNTRA_STORE", " Memory ")
        monkeypatch.setenv("GEMINI_API_KEY", "key")
        monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")
        monkeypatch.setenv("LUNTRA_LOG_LEVEL", "debug")
        monkeypatch.delenv("LUNTRA_DB_PATH", raising=False)

        settings = load_settings(tmp_path / "missing.env")

        assert settings.data_dir == tmp_path
        assert settings.store_backend == "memory"
        assert settings.database_path == tmp_path / "luntra.db"
        assert settings.gemini_api_key == "key"
        assert settings.gemini_model == "gemini-2.5-pro"
        assert settings.log_level == "debug"

    def test_model_unset_when_not_configured(self, tmp_path, monkeypatch):
        """Test that an unset GEMINI_MODEL leaves room for the saved preference."""
        monkeypatch.setenv("GEMINI_MODEL", "")

        assert load_settings(tmp_path / "missing.env").gemini_model is None

    def test_env_file_is_loaded(self, tmp_path, monkeypatch):
        """Test that values can come from a .env file."""
        monkeypatch.delenv("GEMINI_MODEL", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("GEMINI_MODEL=from-file\n", encoding="utf-8")

        try:
            assert load_settings(env_file).gemini_model == "from-file"
        finally:
            os.environ.pop("GEMINI_MODEL", None)

    def test_explicit_db_path(self, tmp_path):
        """Test that an explicit database path wins over the data dir."""
        settings = Settings(data_dir=tmp_path, db_path=tmp_path / "other.db")

        assert settings.database_path == tmp_path / "other.db"
        assert settings.gemini_model is None

    def test_unknown_store_backend(self):
        """Test that an unsupported backend fails validation."""
        with pytest.raises(ValidationError):
            Settings(store_backend="redis")


class TestLogging:
    """Tests for the logging bootstrap."""

    @pytest.mark.parametrize(("raw", "expected"), [
        ("debug", logging.DEBUG),
        (" INFO ", logging.INFO),
        ("error", logging.ERROR),
        (None, logging.WARNING),
        ("chatty", logging.WARNING),
    ])
    def test_parse_level(self, raw, expected):
        """Test level name parsing with a WARNING fallback."""
        assert parse_level(raw) == expected

    def test_configure_logging_does_not_duplicate_handlers(self):
        """Test that repeated configuration keeps a single Rich handler."""
        configure_logging("info")
        logger = configure_logging("debug")

        handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1
        assert logger.name == PACKAGE_LOGGER
        assert logger.level == logging.DEBUG
