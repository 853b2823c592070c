# src/reservation_api/core/logging/middleware.py
"""
Request ID middleware.

Each request gets an id: the incoming `X-Request-ID` header when it is a
valid UUID, a fresh UUID4 otherwise. The id is stored in the request id
contextvar for the duration of the request (so log records carry it) and
echoed back in the `X-Request-ID` response header.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .filters import set_request_id, reset_request_id

REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger(__name__)


def _resolve_request_id(incoming: str | None) -> str:
    if incoming:
        try:
            return str(uuid.UUID(incoming))
        except ValueError:
            pass
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = _resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = set_request_id(rid)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            logger.info(
                "%s %s -> %s",
                request.method,
                request.url.path,
                response.status_code,
                extra={"duration_ms": round((time.perf_counter() - started) * 1000, 2)},
            )
            return response
        finally:
            reset_request_id(token)
