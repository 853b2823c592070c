"""
Group application service.

Owns the transaction boundary: the repository flushes, the service commits
after each successful write. update/delete confirm existence first; that
check is advisory, so a row deleted concurrently between the check and the
write surfaces as PersistenceStateError rather than GroupNotFoundError.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from reservation_api.domain.group import Group
from reservation_api.exceptions.base import GroupNotFoundError
from reservation_api.repositories.group_repository import GroupRepository

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, repository: GroupRepository, db: AsyncSession):
        self.repository = repository
        self.db = db

    async def find_all(self) -> list[Group]:
        return await self.repository.find_all()

    async def find_by_id(self, group_id: int) -> Group:
        group = await self.repository.find_by_id(group_id)
        if group is None:
            logger.info("service.group.not_found", extra={"group_id": group_id})
            raise GroupNotFoundError(group_id)
        return group

    async def find_by_people(self, people: int) -> Group:
        group = await self.repository.find_by_people(people)
        if group is None:
            logger.info("service.group.no_match", extra={"people": people})
            raise GroupNotFoundError.for_people(people)
        return group

    async def create(self, group: Group) -> int:
        group_id = await self.repository.create(group)
        await self.db.commit()
        logger.info("service.group.created", extra={"group_id": group_id})
        return group_id

    async def update(self, group_id: int, group: Group) -> None:
        await self.find_by_id(group_id)
        await self.repository.update(group_id, group)
        await self.db.commit()
        logger.info("service.group.updated", extra={"group_id": group_id})

    async def delete(self, group_id: int) -> None:
        await self.find_by_id(group_id)
        await self.repository.delete(group_id)
        await self.db.commit()
        logger.info("service.group.deleted", extra={"group_id": group_id})
