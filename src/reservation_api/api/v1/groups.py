"""
Group endpoints.

Bodies are parsed by pydantic (malformed JSON or wrong types -> 400 via the
RequestValidationError handler), then checked by validate_group before any
service call.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, Response, status

from reservation_api.core.dependencies import get_group_service
from reservation_api.domain.group import Group
from reservation_api.exceptions.base import InvalidRequestIdError, RequestValidationFailedError
from reservation_api.schemas.group import INT32_MAX, INT32_MIN, GroupDto, GroupRequest, ProblemDetail
from reservation_api.services.group_service import GroupService
from reservation_api.validators.group_validators import validate_group

from .responses import DecimalJSONResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/groups", tags=["groups"])

_BAD_REQUEST = {status.HTTP_400_BAD_REQUEST: {"model": ProblemDetail}}
_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ProblemDetail}}

# Path ids outside the column range fail as "Request.<name>" bad requests
GroupId = Annotated[int, Path(ge=INT32_MIN, le=INT32_MAX)]
People = Annotated[int, Path(ge=INT32_MIN, le=INT32_MAX)]


def _validated(body: GroupRequest) -> Group:
    group = body.to_domain()
    errors = validate_group(group)
    if errors:
        raise RequestValidationFailedError(errors)
    return group


@router.get("", response_model=list[GroupDto], response_class=DecimalJSONResponse)
async def find_all_groups(service: GroupService = Depends(get_group_service)):
    groups = await service.find_all()
    return DecimalJSONResponse([GroupDto.from_domain(g).to_content() for g in groups])


@router.get(
    "/by-people/{people}",
    response_model=GroupDto,
    response_class=DecimalJSONResponse,
    responses=_NOT_FOUND,
)
async def find_group_by_people(people: People, service: GroupService = Depends(get_group_service)):
    return DecimalJSONResponse(GroupDto.from_domain(await service.find_by_people(people)).to_content())


@router.get(
    "/{group_id}",
    name="find_group_by_id",
    response_model=GroupDto,
    response_class=DecimalJSONResponse,
    responses=_NOT_FOUND,
)
async def find_group_by_id(group_id: GroupId, service: GroupService = Depends(get_group_service)):
    return DecimalJSONResponse(GroupDto.from_domain(await service.find_by_id(group_id)).to_content())


@router.post("", status_code=status.HTTP_201_CREATED, response_class=Response, responses=_BAD_REQUEST)
async def create_group(
    body: GroupRequest,
    request: Request,
    service: GroupService = Depends(get_group_service),
) -> Response:
    group_id = await service.create(_validated(body))
    location = str(request.url_for("find_group_by_id", group_id=group_id))
    return Response(status_code=status.HTTP_201_CREATED, headers={"Location": location})


@router.put(
    "/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
async def update_group(
    group_id: GroupId,
    body: GroupRequest,
    service: GroupService = Depends(get_group_service),
) -> Response:
    group = _validated(body)
    if body.group_id != group_id:
        logger.info("Request id mismatch", extra={"route_id": group_id, "body_id": body.group_id})
        raise InvalidRequestIdError()

    await service.update(group_id, group)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_NOT_FOUND,
)
async def delete_group(group_id: GroupId, service: GroupService = Depends(get_group_service)) -> Response:
    await service.delete(group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
