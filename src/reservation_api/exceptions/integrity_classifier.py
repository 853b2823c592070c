import logging
import re
from enum import Enum
from typing import Type

from sqlalchemy.exc import IntegrityError

from .base import RepositoryError

logger = logging.getLogger(__name__)


# =================================================================================================================
# Constraint-specific exceptions (internal classification only)
# =================================================================================================================

class ConstraintViolationError(RepositoryError):
    """Base for integrity/constraint violations."""
    pass


class UniqueConstraintError(ConstraintViolationError):
    pass


class NotNullConstraintError(ConstraintViolationError):
    pass


class CheckConstraintError(ConstraintViolationError):
    pass


class ExclusionConstraintError(ConstraintViolationError):
    """Exclusion constraint (overlapping group ranges)."""
    pass


class UnknownIntegrityError(ConstraintViolationError):
    pass


# =================================================================================================================
# Postgres error code mapping
# =================================================================================================================

# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    CHECK_VIOLATION = "23514"
    EXCLUSION_VIOLATION = "23P01"


PGCODE_EXCEPTION_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION: UniqueConstraintError,
    PostgresErrorCodes.NOT_NULL_VIOLATION: NotNullConstraintError,
    PostgresErrorCodes.CHECK_VIOLATION: CheckConstraintError,
    PostgresErrorCodes.EXCLUSION_VIOLATION: ExclusionConstraintError,
}

# SQLite: 'CHECK constraint failed: ck_groups_min_people_positive',
#         'exclusion constraint violated: groups_no_overlap' (raised by the overlap triggers)
_CONSTRAINT_NAME_PATTERNS = (
    re.compile(r"check constraint failed: (?P<name>\w+)", re.IGNORECASE),
    re.compile(r"exclusion constraint violated: (?P<name>\w+)", re.IGNORECASE),
)


# =================================================================================================================
# Integrity Error Classifiers
# =================================================================================================================

def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _classify_from_postgres_diag(orig) -> tuple[Type[ConstraintViolationError] | None, str | None]:
    """
    Classify a Postgres integrity error from its SQLSTATE and diagnostics.

    psycopg 3 exposes the code as `sqlstate`, psycopg2 as `pgcode`.
    """
    pgcode = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if not pgcode:
        return None, None

    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None) if diag else None

    exception_class = PGCODE_EXCEPTION_MAP.get(pgcode)
    if exception_class:
        logger.debug(
            "Postgres integrity diagnostic",
            extra={"pgcode": pgcode, "constraint_name": constraint_name},
        )
        return exception_class, constraint_name

    logger.warning(
        "Unknown Postgres integrity error code encountered",
        extra={"pgcode": pgcode, "constraint_name": constraint_name},
    )
    logger.debug("Postgres orig diagnostic (raw)", extra={"orig_repr": repr(orig)})
    return UnknownIntegrityError, constraint_name


def _extract_constraint_name(msg: str) -> str | None:
    for pattern in _CONSTRAINT_NAME_PATTERNS:
        m = pattern.search(msg)
        if m:
            return m.group("name")
    return None


def _classify_from_generic_message(msg: str) -> tuple[Type[ConstraintViolationError], str | None]:
    """
    Classify from the message text (SQLite and other drivers without SQLSTATE).
    """
    normalized = msg.lower()
    constraint_name = _extract_constraint_name(msg)

    if _match_any(normalized, ["exclusion constraint", "conflicting key value violates exclusion"]):
        return ExclusionConstraintError, constraint_name

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate"]):
        return UniqueConstraintError, constraint_name

    if _match_any(normalized, ["not null constraint", "not null", "null value in column"]):
        return NotNullConstraintError, constraint_name

    if _match_any(normalized, ["check constraint", "check failed"]):
        return CheckConstraintError, constraint_name

    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": (msg or "")[:200]})
    logger.debug("Unknown integrity raw message", extra={"raw": msg})
    return UnknownIntegrityError, constraint_name


def classify_integrity_error(exc: IntegrityError) -> tuple[Type[ConstraintViolationError], str | None]:
    """
    Classify a SQLAlchemy IntegrityError into a ConstraintViolationError subclass.

    Returns:
        (exception class, constraint name if available)
    """
    orig = exc.orig

    exception_class, constraint_name = _classify_from_postgres_diag(orig)
    if exception_class is not None:
        return exception_class, constraint_name

    return _classify_from_generic_message(str(orig) if orig is not None else str(exc))
