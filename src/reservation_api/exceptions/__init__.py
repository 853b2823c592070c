from .base import (
    RepositoryError,
    NotFoundError,
    GroupNotFoundError,
    DatabaseOperationError,
    BadRequestError,
    RequestValidationFailedError,
    InvalidRequestIdError,
    PersistenceStateError,
)
from .errors import ErrorDetail, aggregate_errors

__all__ = [
    "RepositoryError",
    "NotFoundError",
    "GroupNotFoundError",
    "DatabaseOperationError",
    "BadRequestError",
    "RequestValidationFailedError",
    "InvalidRequestIdError",
    "PersistenceStateError",
    "ErrorDetail",
    "aggregate_errors",
]
