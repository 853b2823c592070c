# src/reservation_api/core/logging/filters.py
"""
Logging filters.

- RequestIdFilter stamps every LogRecord with `request_id`, read from a
  contextvar that RequestIDMiddleware sets per HTTP request. Records logged
  outside a request carry the sentinel "-", so `%(request_id)s` never KeyErrors.
- RedactFilter masks sensitive attributes passed through `extra={...}`.

A contextvar (not threading.local) is used because concurrent requests share
the event loop thread; the value follows the request across awaits.
"""

import logging
from logging import LogRecord
import contextvars

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None):
    """
    Set the request id for the current context.

    Returns:
        The contextvar token, to be passed to reset_request_id().
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantee a `request_id` attribute on every record.

    Precedence: an explicit `extra={"request_id": ...}`, then the contextvar,
    then "-". Never drops a record.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "authorization", "dsn"}

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = "***REDACTED***"
        return True
