"""
Error details reported to clients in the `errors` map of a 400 response.
"""

from collections.abc import Iterable
from typing import NamedTuple


class ErrorDetail(NamedTuple):
    """A single violation: a stable `code` (e.g. "Group.MinPeople") and a human-readable description."""

    code: str
    description: str


def aggregate_errors(details: Iterable[ErrorDetail]) -> dict[str, list[str]]:
    """
    Group descriptions by code.

    Codes keep first-seen order and descriptions keep insertion order within
    their code:

        [("A", "x"), ("A", "y"), ("B", "z")] -> {"A": ["x", "y"], "B": ["z"]}
    """
    errors: dict[str, list[str]] = {}
    for detail in details:
        errors.setdefault(detail.code, []).append(detail.description)
    return errors


__all__ = ["ErrorDetail", "aggregate_errors"]
