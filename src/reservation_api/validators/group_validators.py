"""
Field and cross-field checks for a candidate Group.

Every field check runs; none short-circuits another. The size relation is
only checked once both size fields are individually valid.
"""

from collections.abc import Callable
from decimal import Decimal

from reservation_api.domain.group import Group
from reservation_api.exceptions.errors import ErrorDetail

PRICE_INTEGER_DIGITS = 10
PRICE_FRACTION_DIGITS = 2

MIN_PEOPLE_POSITIVE = ErrorDetail(
    "Group.MinPeople", "The minimum number of people must be greater than 0"
)
MAX_PEOPLE_POSITIVE = ErrorDetail(
    "Group.MaxPeople", "The maximum number of people must be greater than 0"
)
ADMISSION_PRICE_NOT_NULL = ErrorDetail(
    "Group.AdmissionPrice", "The admission price must not be null"
)
ADMISSION_PRICE_NON_NEGATIVE = ErrorDetail(
    "Group.AdmissionPrice", "The admission price must be zero or greater"
)
ADMISSION_PRICE_DIGITS = ErrorDetail(
    "Group.AdmissionPrice",
    "The admission price's numeric value is out of bounds "
    f"(<{PRICE_INTEGER_DIGITS} digits>.<{PRICE_FRACTION_DIGITS} digits> expected)",
)
START_INTERVAL_POSITIVE = ErrorDetail(
    "Group.StartInterval", "The start interval must be greater than 0"
)
GROUP_SIZE = ErrorDetail(
    "Group.Size",
    "The maximum number of people should be greater than the minimum number of people",
)


def decimal_digits(value: Decimal) -> tuple[int, int]:
    """
    Return (integer digits, fraction digits) of `value` with trailing zeros stripped.

    >>> decimal_digits(Decimal("13.990"))
    (2, 2)
    >>> decimal_digits(Decimal("0.05"))
    (0, 2)
    """
    _, digits, exponent = value.normalize().as_tuple()
    integer_digits = max(len(digits) + exponent, 0)
    if digits == (0,):
        integer_digits = 0
    fraction_digits = max(-exponent, 0)
    return integer_digits, fraction_digits


def check_min_people(group: Group) -> list[ErrorDetail]:
    return [] if group.min_people > 0 else [MIN_PEOPLE_POSITIVE]


def check_max_people(group: Group) -> list[ErrorDetail]:
    return [] if group.max_people > 0 else [MAX_PEOPLE_POSITIVE]


def check_admission_price(group: Group) -> list[ErrorDetail]:
    price = group.admission_price
    if price is None:
        return [ADMISSION_PRICE_NOT_NULL]

    if not price.is_finite():
        return [ADMISSION_PRICE_DIGITS]

    errors = []
    if price < 0:
        errors.append(ADMISSION_PRICE_NON_NEGATIVE)
    integer_digits, fraction_digits = decimal_digits(price)
    if integer_digits > PRICE_INTEGER_DIGITS or fraction_digits > PRICE_FRACTION_DIGITS:
        errors.append(ADMISSION_PRICE_DIGITS)
    return errors


def check_start_interval(group: Group) -> list[ErrorDetail]:
    return [] if group.start_interval > 0 else [START_INTERVAL_POSITIVE]


def check_group_size(group: Group | None) -> list[ErrorDetail]:
    """`max_people` must exceed `min_people`. An absent group cannot violate the relation."""
    if group is None:
        return []
    return [] if group.max_people > group.min_people else [GROUP_SIZE]


FIELD_CHECKS: tuple[Callable[[Group], list[ErrorDetail]], ...] = (
    check_min_people,
    check_max_people,
    check_admission_price,
    check_start_interval,
)


def validate_group(group: Group | None) -> list[ErrorDetail]:
    """
    Run every field check, then the size relation when both size fields passed.

    Returns the violations in check order; an empty list means valid.
    """
    if group is None:
        return []

    errors: list[ErrorDetail] = []
    for check in FIELD_CHECKS:
        errors.extend(check(group))

    if not check_min_people(group) and not check_max_people(group):
        errors.extend(check_group_size(group))
    return errors


__all__ = [
    "validate_group",
    "check_group_size",
    "decimal_digits",
]
