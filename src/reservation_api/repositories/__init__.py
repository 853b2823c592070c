from .base_repository import BaseRepository
from .group_repository import GroupRepository

__all__ = ["BaseRepository", "GroupRepository"]
