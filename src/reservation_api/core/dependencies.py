from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_api.database.session import get_async_session
from reservation_api.repositories.group_repository import GroupRepository
from reservation_api.services.group_service import GroupService


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request."""
    async for session in get_async_session():
        yield session


def get_group_repository(db: AsyncSession = Depends(get_db_session)) -> GroupRepository:
    return GroupRepository(db)


def get_group_service(
    repository: GroupRepository = Depends(get_group_repository),
    db: AsyncSession = Depends(get_db_session),
) -> GroupService:
    return GroupService(repository, db)
