import re
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .integrity_classifier import (
    classify_integrity_error,
    UniqueConstraintError,
    NotNullConstraintError,
    CheckConstraintError,
    ExclusionConstraintError,
)
from .base import DatabaseOperationError, RepositoryError

logger = logging.getLogger(__name__)


# -----------------------
# Column extraction helpers
# -----------------------

def _extract_columns_postgres(msg: str) -> list[str] | None:
    """
    Column names from Postgres messages:
      - 'null value in column "min_people" violates not-null constraint'
      - 'DETAIL:  Key (group_id)=(1) already exists.'
    """
    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    m = re.search(r'key \((?P<cols>[^)]+)\)=', msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # 'UNIQUE constraint failed: groups.group_id' / 'NOT NULL constraint failed: groups.min_people'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$', msg, flags=re.IGNORECASE)
    if m:
        return [c.split('.')[-1].strip() for c in re.split(r',\s*', m.group("cols"))]
    return None


def extract_columns_from_integrity(exc: IntegrityError) -> list[str] | None:
    msg = str(exc.orig) if exc.orig is not None else str(exc)
    if not msg:
        return None
    return _extract_columns_postgres(msg) or _extract_columns_sqlite(msg)


# -----------------------
# Mapper
# -----------------------

def raise_mapped_integrity_error(exc: IntegrityError, model_name: str | None = None) -> None:
    """
    Map a SQLAlchemy IntegrityError to a sanitized RepositoryError and raise it.

    The raised message never contains the raw database text; `constraint`
    is kept on the exception for logs only.
    """
    exc_cls, constraint_name = classify_integrity_error(exc)
    columns = extract_columns_from_integrity(exc)
    model_part = model_name or "Record"

    if exc_cls is ExclusionConstraintError:
        logger.info(
            "mapper.exclusion_violation",
            extra={"model": model_part, "constraint": constraint_name},
        )
        raise RepositoryError(
            f"{model_part} overlaps an existing {model_part.lower()}.",
            constraint=constraint_name,
            error_code="overlap",
        ) from exc

    if exc_cls is UniqueConstraintError:
        logger.info(
            "mapper.duplicate_detected",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise RepositoryError(
                f"{model_part} already exists for field(s): {', '.join(columns)}",
                fields=columns, constraint=constraint_name, error_code="duplicate",
            ) from exc
        raise RepositoryError(
            f"{model_part} already exists (unique constraint)",
            constraint=constraint_name, error_code="duplicate",
        ) from exc

    if exc_cls is NotNullConstraintError:
        logger.info(
            "mapper.not_null_violation",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise RepositoryError(
                f"Missing required field(s): {', '.join(columns)} for {model_part}",
                fields=columns, constraint=constraint_name, error_code="missing_field",
            ) from exc
        raise RepositoryError(
            f"Missing required field for {model_part}",
            constraint=constraint_name, error_code="missing_field",
        ) from exc

    if exc_cls is CheckConstraintError:
        raw = str(exc.orig) if exc.orig is not None else str(exc)
        logger.debug(
            "mapper.check_constraint_failure",
            extra={"model": model_part, "raw": raw, "constraint": constraint_name},
        )
        raise RepositoryError(
            f"{model_part} business rule violated (check constraint).",
            constraint=constraint_name, error_code="check_violation",
        ) from exc

    raw = str(exc.orig) if exc.orig is not None else str(exc)
    logger.warning(
        "mapper.unknown_integrity_error",
        extra={"model": model_part, "constraint": constraint_name},
    )
    logger.debug("mapper.unknown_integrity_raw", extra={"model": model_part, "raw": raw})
    raise RepositoryError(f"{model_part} database integrity error.", error_code="integrity_error") from exc


# -----------------------
# Async context manager shared by repository methods
# -----------------------
@asynccontextmanager
async def db_error_handler(db: AsyncSession, model_name: str | None = None):
    """
    Usage:
        async with db_error_handler(self.db, "Group"):
            ... statements that may raise IntegrityError ...

    Rolls back on error. IntegrityError becomes a mapped RepositoryError (400),
    any other failure a DatabaseOperationError (500). Application errors
    raised inside the block (RepositoryError, PersistenceStateError) are
    rolled back and re-raised unchanged.
    """
    try:
        yield
    except IntegrityError as exc:
        await _safe_rollback(db, model_name, "IntegrityError")
        raise_mapped_integrity_error(exc, model_name)
    except (RepositoryError, RuntimeError):
        await _safe_rollback(db, model_name, "application error")
        raise
    except Exception as exc:
        await _safe_rollback(db, model_name, "unexpected error")
        logger.exception("Unexpected DB error for %s", model_name, extra={"model": model_name})
        raise DatabaseOperationError(f"Failed to operate on {(model_name or 'record').lower()}.") from exc


async def _safe_rollback(db: AsyncSession, model_name: str | None, reason: str) -> None:
    try:
        await db.rollback()
    except Exception:
        logger.exception("Failed to rollback session after %s", reason, extra={"model": model_name})
