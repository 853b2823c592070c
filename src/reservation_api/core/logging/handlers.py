"""
Handler factories for logging.dictConfig.

Each function returns a handler configuration dict; the formatter and filter
names refer to entries that builder.make_dict_config() defines.
"""

from pathlib import Path

from reservation_api.config.settings import Settings

FILTERS = ["request_id", "redact"]


def _formatter_name(settings: Settings) -> str:
    return "json" if settings.LOG_FORMAT == "json" else "standard"


def _rotating_file(settings: Settings, filename: str, *, level: str, formatter: str) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": formatter,
        "level": level,
        "filename": str(Path(settings.LOG_DIR) / filename),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
        "filters": FILTERS,
    }


def get_console_handler(settings: Settings) -> dict:
    return {
        "class": "logging.StreamHandler",
        "formatter": _formatter_name(settings),
        "level": settings.LOG_LEVEL,
        "filters": FILTERS,
    }


def get_file_handler(settings: Settings) -> dict:
    return _rotating_file(settings, "app.log", level=settings.LOG_LEVEL, formatter=_formatter_name(settings))


def get_error_file_handler(settings: Settings) -> dict:
    # Error files stay structured regardless of LOG_FORMAT
    return _rotating_file(settings, "errors.log", level="ERROR", formatter="json")


def get_error_console_handler(settings: Settings) -> dict:
    """Errors as JSON on stdout, used when no log files are written."""
    return {
        "class": "logging.StreamHandler",
        "formatter": "json",
        "level": "ERROR",
        "stream": "ext://sys.stdout",
        "filters": FILTERS,
    }
