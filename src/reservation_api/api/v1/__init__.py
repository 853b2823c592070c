from . import groups

__all__ = ["groups"]
