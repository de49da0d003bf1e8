
import logging
import os
from unittest.mock import patch

from moodlens.config import DEFAULT_INSIGHT_LIMIT, DEFAULT_SUMMARY_TIMEOUT, load_settings
from moodlens.utils.logger import LOG_FILE_NAME, setup_logger


class TestSettings:
    """Test suite for environment settings."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings(dotenv=False)

        assert settings.gemini_api_key is None
        assert settings.mongodb_uri is None
        assert settings.database == "moodlens"
        assert settings.summary_timeout == DEFAULT_SUMMARY_TIMEOUT
        assert settings.insight_limit == DEFAULT_INSIGHT_LIMIT
        assert settings.log_level == "INFO"

    def test_from_environment(self):
        with patch.dict(os.environ, {
            "MOODLENS_DATABASE": "journal",
            "MOODLENS_SUMMARY_TIMEOUT": "2.5",
            "MOODLENS_INSIGHT_LIMIT": "3",
            "MOODLENS_LOG_LEVEL": "debug",
        }):
            settings = load_settings(dotenv=False)

        assert settings.gemini_api_key == "fake_key"
        assert settings.mongodb_uri == "mongodb://fake-host:27017"
        assert settings.database == "journal"
        assert settings.summary_timeout == 2.5
        assert settings.insight_limit == 3
        assert settings.log_level == "DEBUG"

    def test_malformed_numbers_fall_back(self, caplog):
        with patch.dict(os.environ, {"MOODLENS_SUMMARY_TIMEOUT": "soon", "MOODLENS_INSIGHT_LIMIT": "many"}):
            with caplog.at_level(logging.WARNING):
                settings = load_settings(dotenv=False)

        assert settings.summary_timeout == DEFAULT_SUMMARY_TIMEOUT
        assert settings.insight_limit == DEFAULT_INSIGHT_LIMIT
        assert "MOODLENS_SUMMARY_TIMEOUT" in caplog.text


class TestLogger:
    """Test suite for setup_logger."""

    def test_console_and_file(self, tmp_path):
        logger = setup_logger("moodlens.test.file", "DEBUG", str(tmp_path))
        logger.info("hello")

        assert len(logger.handlers) == 2
        assert logger.level == logging.DEBUG
        assert (tmp_path / LOG_FILE_NAME).exists()

    def test_idempotent(self, tmp_path):
        first = setup_logger("moodlens.test.twice", "INFO", str(tmp_path))
        second = setup_logger("moodlens.test.twice", "INFO", str(tmp_path))

        assert first is second
        assert len(second.handlers) == 2

    def test_console_only(self):
        logger = setup_logger("moodlens.test.console", "WARNING", None)
        assert len(logger.handlers) == 1
