import sys

from loguru import logger

from convohub.core.config import Settings, get_settings
from convohub.core.logging import setup_logging


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("MONGODB_DB", "chat_test")
    monkeypatch.setenv("JSON_LOGS", "true")

    settings = Settings()

    assert settings.MONGODB_DB == "chat_test"
    assert settings.JSON_LOGS is True
    assert settings.MONGODB_URL == "mongodb://localhost:27017"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_setup_logging_respects_level(capsys):
    try:
        setup_logging(Settings(LOG_LEVEL="warning", JSON_LOGS=False))

        logger.info("hidden")
        logger.warning("shown")

        err = capsys.readouterr().err
        assert "shown" in err
        assert "hidden" not in err
    finally:
        logger.remove()
        logger.add(sys.stderr)
