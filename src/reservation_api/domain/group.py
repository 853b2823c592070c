"""
Group: a party-size bracket used to classify reservations.

A group covers the inclusive range [min_people, max_people]. `group_id` is
assigned by the store; it is 0 for a group that has not been persisted yet.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Group:
    group_id: int
    min_people: int
    max_people: int
    admission_price: Decimal | None
    start_interval: int
