"""
Base repository class providing common database operations.

Model-specific repositories inherit the generic statements below and add
their own queries. Repositories flush but never commit: the service layer
owns the transaction boundary.
"""

import logging
import time
from typing import Any, Generic, Type, TypeVar

from sqlalchemy import delete, inspect, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_api.database.base import Base
from reservation_api.exceptions.base import DatabaseOperationError, PersistenceStateError
from reservation_api.exceptions.mapper import db_error_handler

ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository over a single-column primary key.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    # Used in messages, e.g. "Failed to update group with id: 3"
    entity_name = "entity"

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db
        self.pk = inspect(model).primary_key[0]

    @property
    def model_name(self) -> str:
        return self.model.__name__

    @property
    def display_name(self) -> str:
        # Client-facing name in error messages, e.g. "Group"
        return self.entity_name.capitalize()

    # =================================================================================================================
    # Create
    # =================================================================================================================

    async def create(self, **kwargs: Any) -> ModelType:
        """
        INSERT a new row and return the refreshed entity.

        Raises:
            RepositoryError: a storage constraint rejected the row (400), or
                DatabaseOperationError when the store itself failed (500).
        """
        logger.debug(
            "repo.create.start",
            extra={"model": self.model_name, "operation": "create", "provided_keys": sorted(kwargs)},
        )
        start = time.perf_counter()

        async with db_error_handler(self.db, self.display_name):
            entity = self.model(**kwargs)
            self.db.add(entity)
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.create.success",
            extra={
                "model": self.model_name,
                "operation": "create",
                "id": getattr(entity, self.pk.key, None),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    # =================================================================================================================
    # Read
    # =================================================================================================================

    async def get_by_id(self, entity_id: Any) -> ModelType | None:
        try:
            result = await self.db.execute(select(self.model).where(self.pk == entity_id))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(
                "repo.get_by_id.failed",
                extra={"model": self.model_name, "id": entity_id, "error": str(e)},
            )
            raise DatabaseOperationError(f"Failed to retrieve {self.entity_name}.") from e

    async def get_all(self, order_by: str | None = None) -> list[ModelType]:
        """
        All rows, ordered by `order_by` when it names a column, else by primary key.
        """
        query = select(self.model)
        if order_by and hasattr(self.model, order_by):
            query = query.order_by(getattr(self.model, order_by))
        else:
            if order_by:
                logger.warning(
                    "Ignored invalid 'order_by' field: '%s' does not exist on %s", order_by, self.model_name
                )
            query = query.order_by(self.pk)

        try:
            result = await self.db.execute(query)
        except Exception as e:
            logger.error("repo.get_all.failed", extra={"model": self.model_name, "error": str(e)})
            raise DatabaseOperationError(f"Failed to retrieve {self.entity_name} list.") from e

        entities = list(result.scalars().all())
        logger.debug("repo.get_all.success", extra={"model": self.model_name, "count": len(entities)})
        return entities

    # =================================================================================================================
    # Update / Delete
    # =================================================================================================================

    async def update(self, entity_id: Any, **kwargs: Any) -> int:
        """
        Replace the given columns of one row. Returns the affected row count.
        """
        stmt = (
            update(self.model)
            .where(self.pk == entity_id)
            .values(**kwargs)
            .execution_options(synchronize_session="evaluate")
        )
        async with db_error_handler(self.db, self.display_name):
            result = await self.db.execute(stmt)
        return result.rowcount

    async def delete(self, entity_id: Any) -> int:
        """Delete one row. Returns the affected row count."""
        stmt = (
            delete(self.model)
            .where(self.pk == entity_id)
            .execution_options(synchronize_session="evaluate")
        )
        async with db_error_handler(self.db, self.display_name):
            result = await self.db.execute(stmt)
        return result.rowcount

    def ensure_single_row(self, rowcount: int, operation: str, entity_id: Any) -> None:
        """
        Raise PersistenceStateError unless exactly one row was affected.

        Callers check existence first, so any other count means a concurrent
        writer or a broken invariant.
        """
        if rowcount != 1:
            logger.error(
                "repo.%s.row_count_mismatch",
                operation,
                extra={"model": self.model_name, "id": entity_id, "rowcount": rowcount},
            )
            raise PersistenceStateError(
                f"Failed to {operation} {self.entity_name} with id: {entity_id}"
            )
