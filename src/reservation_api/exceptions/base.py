"""
Application-level exceptions.

Two families are rendered by the HTTP layer:

- BadRequestError: carries a list of ErrorDetail; rendered as 400 with an
  aggregated `errors` map.
- RepositoryError: storage-side failures with a sanitized message and a
  canonical `error_code`; NotFoundError is the 404 branch of this family and
  DatabaseOperationError the 500 branch.

PersistenceStateError is deliberately outside both families: it means the
store did not behave as the caller required (wrong row count, missing
identity) and is left to surface as a 500.
"""

from typing import Iterable

from .errors import ErrorDetail


class RepositoryError(Exception):
    """
    Base exception for repository/service errors.

    - message: human-friendly message (safe to show to clients)
    - fields: optional list of field names related to the error
    - constraint: optional DB constraint name (for logs only)
    - error_code: canonical short code used by clients (e.g. 'overlap', 'not_found')
    """

    # Default HTTP status per canonical error_code; anything else is a 400.
    ERROR_CODE_TO_STATUS = {
        "not_found": 404,
        "database_error": 500,
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{self.message} ({'; '.join(parts)})"
        return self.message

    def to_payload(self) -> dict:
        """
        Extra members for the problem response: `code` and `fields` when known.
        The constraint name is never included.
        """
        payload: dict = {}
        if self.error_code:
            payload["code"] = self.error_code
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload

    def http_status(self) -> int:
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 400)
        return 400


class NotFoundError(RepositoryError):
    def __init__(self, message: str = "Not found", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="not_found")


class GroupNotFoundError(NotFoundError):
    def __init__(self, group_id: int | None = None, *, message: str | None = None):
        super().__init__(message or f"Group with id: {group_id} could not be found.")
        self.group_id = group_id

    @classmethod
    def for_people(cls, people: int) -> "GroupNotFoundError":
        return cls(message=f"There are no matching groups with {people} people.")


class DatabaseOperationError(RepositoryError):
    """The store failed for a reason other than a constraint (unreachable, driver error)."""

    def __init__(self, message: str):
        super().__init__(message, error_code="database_error")


class BadRequestError(Exception):
    """Client input rejected before reaching storage; `errors` feeds the 400 `errors` map."""

    def __init__(self, errors: Iterable[ErrorDetail], message: str = "Request validation failed."):
        self.errors = list(errors)
        self.message = message
        super().__init__(message)


class RequestValidationFailedError(BadRequestError):
    pass


class InvalidRequestIdError(BadRequestError):
    DETAIL = ErrorDetail("Request.InvalidRequestId", "The request id must match the route id.")

    def __init__(self):
        super().__init__([self.DETAIL])


class PersistenceStateError(RuntimeError):
    """The store affected an unexpected number of rows or returned no identity."""


__all__ = [
    "RepositoryError",
    "NotFoundError",
    "GroupNotFoundError",
    "DatabaseOperationError",
    "BadRequestError",
    "RequestValidationFailedError",
    "InvalidRequestIdError",
    "PersistenceStateError",
]
