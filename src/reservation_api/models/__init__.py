from .group import GroupModel

__all__ = ["GroupModel"]
