"""
FastAPI exception handlers rendering application errors as
application/problem+json responses.

    BadRequestError         -> 400, with an aggregated `errors` map
    RequestValidationError  -> 400, with `errors` keyed "Request.<field>"
    NotFoundError           -> 404
    RepositoryError         -> 400 (500 for database_error), `code` instead of `errors`

Anything else (e.g. PersistenceStateError) is left to the framework's 500.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from reservation_api.exceptions.base import BadRequestError, NotFoundError, RepositoryError
from reservation_api.exceptions.errors import ErrorDetail, aggregate_errors

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"

BAD_REQUEST_TYPE = "https://tools.ietf.org/html/rfc9110#section-15.5.1"
NOT_FOUND_TYPE = "https://tools.ietf.org/html/rfc9110#section-15.5.5"
SERVER_ERROR_TYPE = "https://tools.ietf.org/html/rfc9110#section-15.6.1"
VALIDATION_FAILED_DETAIL = "Request validation failed."


def problem_response(
    request: Request,
    *,
    status: int,
    type_: str,
    title: str,
    detail: str,
    **extensions,
) -> JSONResponse:
    content = {
        "type": type_,
        "title": title,
        "status": status,
        "detail": detail,
        "instance": request.url.path,
    }
    content.update(extensions)
    return JSONResponse(status_code=status, content=content, media_type=PROBLEM_JSON)


def _bad_request(request: Request, details: list[ErrorDetail]) -> JSONResponse:
    return problem_response(
        request,
        status=400,
        type_=BAD_REQUEST_TYPE,
        title="Bad Request",
        detail=VALIDATION_FAILED_DETAIL,
        errors=aggregate_errors(details),
    )


async def bad_request_handler(request: Request, exc: BadRequestError) -> JSONResponse:
    logger.info(
        "%s for %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        extra={"error_codes": sorted({d.code for d in exc.errors})},
    )
    return _bad_request(request, exc.errors)


def _error_code_for(loc: tuple) -> str:
    # ("body", "minPeople") -> "Request.minPeople"; ("body",) -> "Request.body"
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return "Request." + ".".join(parts or ["body"])


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [ErrorDetail(_error_code_for(tuple(err.get("loc", ()))), err.get("msg", "")) for err in exc.errors()]
    logger.info(
        "Malformed request for %s %s",
        request.method,
        request.url.path,
        extra={"error_codes": sorted({d.code for d in details})},
    )
    return _bad_request(request, details)


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.info("NotFoundError for %s %s: %s", request.method, request.url.path, exc.message)
    return problem_response(
        request,
        status=exc.http_status(),
        type_=NOT_FOUND_TYPE,
        title="Not Found",
        detail=exc.message,
    )


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    """
    Storage-side failures. Constraint violations (e.g. an overlapping range)
    are the client's fault; a failing store is ours. Only the sanitized
    message and the canonical code reach the client.
    """
    status = exc.http_status()
    if status >= 500:
        logger.error("RepositoryError for %s %s: %s", request.method, request.url.path, str(exc))
        type_, title = SERVER_ERROR_TYPE, "Internal Server Error"
    else:
        logger.warning("RepositoryError for %s %s: %s", request.method, request.url.path, str(exc))
        type_, title = BAD_REQUEST_TYPE, "Bad Request"
    return problem_response(
        request,
        status=status,
        type_=type_,
        title=title,
        detail=exc.message,
        **exc.to_payload(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BadRequestError, bad_request_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
