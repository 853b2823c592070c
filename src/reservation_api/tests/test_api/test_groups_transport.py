"""HTTP mapping tests with the GroupService replaced by an AsyncMock."""

from decimal import Decimal

import pytest

from reservation_api.domain.group import Group
from reservation_api.exceptions.base import GroupNotFoundError, RepositoryError

VALID_BODY = {"groupId": 0, "minPeople": 1, "maxPeople": 5, "admissionPrice": 13.99, "startInterval": 4}


async def test_find_all_renders_camel_case_dtos(mocked_client, mock_service):
    mock_service.find_all.return_value = [Group(1, 1, 5, Decimal("13.99"), 4)]

    resp = await mocked_client.get("/groups")

    assert resp.status_code == 200
    assert resp.json() == [
        {"groupId": 1, "minPeople": 1, "maxPeople": 5, "admissionPrice": 13.99, "startInterval": 4}
    ]


async def test_find_by_id_not_found(mocked_client, mock_service):
    mock_service.find_by_id.side_effect = GroupNotFoundError(8)

    resp = await mocked_client.get("/groups/8")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Group with id: 8 could not be found."
    assert resp.json()["instance"] == "/groups/8"


async def test_find_by_people(mocked_client, mock_service):
    mock_service.find_by_people.return_value = Group(2, 6, 10, Decimal("20.00"), 5)

    resp = await mocked_client.get("/groups/by-people/7")

    assert resp.status_code == 200
    assert resp.json()["groupId"] == 2
    mock_service.find_by_people.assert_awaited_once_with(7)


async def test_create_returns_201_with_absolute_location(mocked_client, mock_service):
    mock_service.create.return_value = 42

    resp = await mocked_client.post("/groups", json=VALID_BODY)

    assert resp.status_code == 201
    assert resp.content == b""
    assert resp.headers["location"] == "http://testserver/groups/42"
    created = mock_service.create.await_args.args[0]
    assert created == Group(0, 1, 5, Decimal("13.99"), 4)


async def test_create_invalid_body_never_reaches_service(mocked_client, mock_service):
    body = {**VALID_BODY, "minPeople": 0, "maxPeople": 0, "admissionPrice": None, "startInterval": 0}

    resp = await mocked_client.post("/groups", json=body)

    assert resp.status_code == 400
    assert resp.json()["errors"] == {
        "Group.MinPeople": ["The minimum number of people must be greater than 0"],
        "Group.MaxPeople": ["The maximum number of people must be greater than 0"],
        "Group.AdmissionPrice": ["The admission price must not be null"],
        "Group.StartInterval": ["The start interval must be greater than 0"],
    }
    mock_service.create.assert_not_awaited()


async def test_create_missing_fields_are_reported_by_validation(mocked_client, mock_service):
    resp = await mocked_client.post("/groups", json={})

    assert resp.status_code == 400
    assert "Group.AdmissionPrice" in resp.json()["errors"]
    mock_service.create.assert_not_awaited()


async def test_create_wrong_json_type_is_bad_request(mocked_client, mock_service):
    resp = await mocked_client.post("/groups", json={**VALID_BODY, "minPeople": "lots"})

    assert resp.status_code == 400
    assert "Request.minPeople" in resp.json()["errors"]
    mock_service.create.assert_not_awaited()


async def test_create_storage_failure_is_400_without_errors(mocked_client, mock_service):
    mock_service.create.side_effect = RepositoryError("Group overlaps an existing group.", error_code="overlap")

    resp = await mocked_client.post("/groups", json=VALID_BODY)

    assert resp.status_code == 400
    assert "errors" not in resp.json()


async def test_update_returns_204(mocked_client, mock_service):
    resp = await mocked_client.put("/groups/3", json={**VALID_BODY, "groupId": 3})

    assert resp.status_code == 204
    assert resp.content == b""
    mock_service.update.assert_awaited_once_with(3, Group(3, 1, 5, Decimal("13.99"), 4))


async def test_update_id_mismatch_rejected_before_service(mocked_client, mock_service):
    resp = await mocked_client.put("/groups/1", json={**VALID_BODY, "groupId": 2})

    assert resp.status_code == 400
    assert resp.json()["errors"] == {
        "Request.InvalidRequestId": ["The request id must match the route id."]
    }
    mock_service.update.assert_not_awaited()
    mock_service.find_by_id.assert_not_awaited()


async def test_update_field_validation_runs_before_id_check(mocked_client, mock_service):
    resp = await mocked_client.put("/groups/1", json={**VALID_BODY, "groupId": 2, "maxPeople": 1})

    assert resp.status_code == 400
    assert list(resp.json()["errors"]) == ["Group.Size"]


async def test_update_not_found(mocked_client, mock_service):
    mock_service.update.side_effect = GroupNotFoundError(3)

    resp = await mocked_client.put("/groups/3", json={**VALID_BODY, "groupId": 3})

    assert resp.status_code == 404


async def test_delete_returns_204(mocked_client, mock_service):
    resp = await mocked_client.delete("/groups/3")

    assert resp.status_code == 204
    mock_service.delete.assert_awaited_once_with(3)


async def test_delete_not_found(mocked_client, mock_service):
    mock_service.delete.side_effect = GroupNotFoundError(3)

    resp = await mocked_client.delete("/groups/3")

    assert resp.status_code == 404
    assert resp.json()["title"] == "Not Found"


async def test_response_carries_request_id(mocked_client, mock_service):
    mock_service.find_all.return_value = []

    resp = await mocked_client.get("/groups")

    assert resp.headers.get("X-Request-ID")


async def test_oversized_body_integer_is_a_parse_error(mocked_client, mock_service):
    resp = await mocked_client.post("/groups", json={**VALID_BODY, "maxPeople": 10**20})

    assert resp.status_code == 400
    assert list(resp.json()["errors"]) == ["Request.maxPeople"]
    mock_service.create.assert_not_awaited()


async def test_int32_bounds_are_accepted_by_the_parser(mocked_client, mock_service):
    body = {**VALID_BODY, "minPeople": 1, "maxPeople": 2**31 - 1}
    mock_service.create.return_value = 1

    resp = await mocked_client.post("/groups", json=body)

    assert resp.status_code == 201


@pytest.mark.parametrize(
    "method, path, code",
    [
        ("GET", "/groups/100000000000000000000", "Request.group_id"),
        ("DELETE", "/groups/100000000000000000000", "Request.group_id"),
        ("GET", "/groups/by-people/100000000000000000000", "Request.people"),
    ],
)
async def test_oversized_path_integer_is_a_bad_request(mocked_client, mock_service, method, path, code):
    resp = await mocked_client.request(method, path)

    assert resp.status_code == 400
    assert list(resp.json()["errors"]) == [code]
    assert not mock_service.method_calls


async def test_price_keeps_two_fraction_digits(mocked_client, mock_service):
    mock_service.find_by_id.return_value = Group(4, 1, 5, Decimal("13.9"), 4)

    resp = await mocked_client.get("/groups/4")

    assert resp.status_code == 200
    assert '"admissionPrice":13.90' in resp.text
    assert resp.headers["content-type"] == "application/json"
