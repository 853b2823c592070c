import logging
from logging.handlers import RotatingFileHandler

from reservation_api.config.settings import Settings
from reservation_api.core.logging.builder import make_dict_config, setup_logging
from reservation_api.core.logging.filters import RequestIdFilter


def make_settings(**overrides) -> Settings:
    values = {
        "ENV": "development",
        "LOG_FORMAT": "json",
        "LOG_LEVEL": "INFO",
        "LOG_TO_STDOUT": False,
        "LOG_MAX_BYTES": 1000,
        "LOG_BACKUP_COUNT": 1,
        "ENABLE_SQL_LOGGING": False,
    }
    values.update(overrides)
    return Settings(**values)


def test_make_dict_config_with_files(tmp_path):
    cfg = make_dict_config(make_settings(LOG_DIR=tmp_path))

    assert set(cfg["handlers"]) == {"console", "file", "error_file"}
    assert cfg["handlers"]["file"]["filename"] == str(tmp_path / "app.log")
    assert cfg["handlers"]["error_file"]["level"] == "ERROR"
    assert "json" in cfg["formatters"]


def test_make_dict_config_stdout_only(tmp_path):
    cfg = make_dict_config(make_settings(LOG_DIR=tmp_path, LOG_TO_STDOUT=True))

    assert set(cfg["handlers"]) == {"console", "error_console"}
    assert cfg["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"


def test_text_format_uses_standard_formatter(tmp_path):
    cfg = make_dict_config(make_settings(LOG_DIR=tmp_path, LOG_FORMAT="TEXT", LOG_TO_STDOUT=True))

    assert cfg["handlers"]["console"]["formatter"] == "standard"


def test_settings_normalize_log_level():
    assert make_settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_setup_logging_creates_log_dir(tmp_path):
    settings = make_settings(LOG_DIR=tmp_path / "logs")
    assert not settings.LOG_DIR.exists()

    setup_logging(settings)

    root = logging.getLogger()
    assert settings.LOG_DIR.exists()
    assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
    assert any(isinstance(f, RequestIdFilter) for f in root.filters)
