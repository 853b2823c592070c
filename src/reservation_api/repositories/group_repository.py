import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_api.domain.group import Group
from reservation_api.exceptions.base import DatabaseOperationError, PersistenceStateError
from reservation_api.models.group import GroupModel

from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class GroupRepository(BaseRepository[GroupModel]):
    """
    Persistence gateway for groups. Accepts and returns `Group` values, never ORM rows.

    Storage constraints are authoritative: an invalid or overlapping group is
    rejected by the database and surfaces as a RepositoryError.
    """

    entity_name = "group"

    def __init__(self, db: AsyncSession):
        super().__init__(GroupModel, db)

    async def find_all(self) -> list[Group]:
        return [row.to_domain() for row in await self.get_all(order_by="group_id")]

    async def find_by_id(self, group_id: int) -> Group | None:
        row = await self.get_by_id(group_id)
        return row.to_domain() if row is not None else None

    async def find_by_people(self, people: int) -> Group | None:
        """The group whose inclusive [min_people, max_people] range contains `people`."""
        stmt = select(GroupModel).where(
            GroupModel.min_people <= people,
            GroupModel.max_people >= people,
        )
        try:
            result = await self.db.execute(stmt)
        except Exception as e:
            logger.error("repo.find_by_people.failed", extra={"people": people, "error": str(e)})
            raise DatabaseOperationError(f"Failed to retrieve {self.entity_name}.") from e

        # Non-overlap makes this at most one row
        row = result.scalars().first()
        return row.to_domain() if row is not None else None

    async def create(self, group: Group) -> int:
        """
        INSERT the group; the store assigns the id, `group.group_id` is ignored.

        Returns:
            The new group id.
        """
        row = await super().create(**_columns(group))
        if row.group_id is None:
            raise PersistenceStateError("Failed to create group: no id was returned")
        return row.group_id

    async def update(self, group_id: int, group: Group) -> None:
        """Full replace of the row at `group_id`."""
        rowcount = await super().update(group_id, **_columns(group))
        self.ensure_single_row(rowcount, "update", group_id)
        logger.info("repo.update.success", extra={"model": self.model_name, "id": group_id})

    async def delete(self, group_id: int) -> None:
        rowcount = await super().delete(group_id)
        self.ensure_single_row(rowcount, "delete", group_id)
        logger.info("repo.delete.success", extra={"model": self.model_name, "id": group_id})


def _columns(group: Group) -> dict:
    return {
        "min_people": group.min_people,
        "max_people": group.max_people,
        "admission_price": group.admission_price,
        "start_interval": group.start_interval,
    }
