from .group import GroupRequest, GroupDto, ProblemDetail

__all__ = ["GroupRequest", "GroupDto", "ProblemDetail"]
