from decimal import Decimal

import pytest

from reservation_api.domain.group import Group
from reservation_api.validators.group_validators import (
    check_group_size,
    decimal_digits,
    validate_group,
)


def make(min_people=1, max_people=5, admission_price=Decimal("13.99"), start_interval=4) -> Group:
    return Group(0, min_people, max_people, admission_price, start_interval)


def descriptions(errors) -> list[str]:
    return [e.description for e in errors]


def test_valid_group_has_no_errors():
    assert validate_group(make()) == []


def test_none_candidate_is_valid():
    assert validate_group(None) == []
    assert check_group_size(None) == []


@pytest.mark.parametrize("min_people", [0, -1])
def test_min_people_must_be_positive(min_people):
    errors = validate_group(make(min_people=min_people))

    assert ("Group.MinPeople", "The minimum number of people must be greater than 0") in errors


@pytest.mark.parametrize("max_people", [0, -3])
def test_max_people_must_be_positive(max_people):
    errors = validate_group(make(min_people=1, max_people=max_people))

    assert ("Group.MaxPeople", "The maximum number of people must be greater than 0") in errors


@pytest.mark.parametrize("start_interval", [0, -10])
def test_start_interval_must_be_positive(start_interval):
    errors = validate_group(make(start_interval=start_interval))

    assert errors == [("Group.StartInterval", "The start interval must be greater than 0")]


def test_admission_price_must_not_be_null():
    errors = validate_group(make(admission_price=None))

    assert errors == [("Group.AdmissionPrice", "The admission price must not be null")]


def test_admission_price_must_not_be_negative():
    errors = validate_group(make(admission_price=Decimal("-0.01")))

    assert errors == [("Group.AdmissionPrice", "The admission price must be zero or greater")]


def test_zero_admission_price_is_valid():
    assert validate_group(make(admission_price=Decimal("0"))) == []


@pytest.mark.parametrize(
    "price",
    [Decimal("12345678901"), Decimal("1.999"), Decimal("12345678901.001")],
)
def test_admission_price_digits_out_of_bounds(price):
    errors = validate_group(make(admission_price=price))

    assert descriptions(errors) == [
        "The admission price's numeric value is out of bounds (<10 digits>.<2 digits> expected)"
    ]


@pytest.mark.parametrize(
    "price",
    [Decimal("9999999999.99"), Decimal("13.990000"), Decimal("100"), Decimal("0.5")],
)
def test_admission_price_digits_within_bounds(price):
    assert validate_group(make(admission_price=price)) == []


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("13.99"), (2, 2)),
        (Decimal("13.990"), (2, 2)),
        (Decimal("0.05"), (0, 2)),
        (Decimal("0"), (0, 0)),
        (Decimal("1E+3"), (4, 0)),
    ],
)
def test_decimal_digits(value, expected):
    assert decimal_digits(value) == expected


@pytest.mark.parametrize("min_people, max_people", [(5, 5), (6, 5)])
def test_max_people_must_exceed_min_people(min_people, max_people):
    errors = validate_group(make(min_people=min_people, max_people=max_people))

    assert errors == [
        (
            "Group.Size",
            "The maximum number of people should be greater than the minimum number of people",
        )
    ]


def test_size_relation_skipped_when_a_size_field_is_invalid():
    errors = validate_group(make(min_people=3, max_people=0))

    assert [e.code for e in errors] == ["Group.MaxPeople"]


def test_all_violations_reported_together():
    errors = validate_group(
        make(min_people=0, max_people=-1, admission_price=Decimal("-1.001"), start_interval=0)
    )

    assert [e.code for e in errors] == [
        "Group.MinPeople",
        "Group.MaxPeople",
        "Group.AdmissionPrice",
        "Group.AdmissionPrice",
        "Group.StartInterval",
    ]
    assert descriptions(errors)[2:4] == [
        "The admission price must be zero or greater",
        "The admission price's numeric value is out of bounds (<10 digits>.<2 digits> expected)",
    ]
