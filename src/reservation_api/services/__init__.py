from .group_service import GroupService

__all__ = ["GroupService"]
