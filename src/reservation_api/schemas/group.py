from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from reservation_api.domain.group import Group

PRICE_QUANTUM = Decimal("0.01")

# INTEGER columns; larger values are parse errors, not driver overflows
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

StorageInt = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GroupRequest(CamelModel):
    """
    Create/update body. Missing numeric fields default to 0 so that they are
    reported by group validation rather than by the parser.
    """

    group_id: StorageInt = 0
    min_people: StorageInt = 0
    max_people: StorageInt = 0
    admission_price: Decimal | None = None
    start_interval: StorageInt = 0

    def to_domain(self) -> Group:
        return Group(
            group_id=self.group_id,
            min_people=self.min_people,
            max_people=self.max_people,
            admission_price=self.admission_price,
            start_interval=self.start_interval,
        )


class GroupDto(CamelModel):
    group_id: int
    min_people: int
    max_people: int
    admission_price: Decimal
    start_interval: int

    @field_serializer("admission_price")
    def serialize_price(self, value: Decimal) -> Decimal:
        return value.quantize(PRICE_QUANTUM)

    def to_content(self) -> dict:
        """Python-mode camelCase dict for DecimalJSONResponse."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_domain(cls, group: Group) -> "GroupDto":
        return cls(
            group_id=group.group_id,
            min_people=group.min_people,
            max_people=group.max_people,
            admission_price=group.admission_price,
            start_interval=group.start_interval,
        )


class ProblemDetail(BaseModel):
    """application/problem+json body, documented in the OpenAPI schema."""

    type: str
    title: str
    status: int
    detail: str | None = None
    instance: str | None = None
    errors: dict[str, list[str]] | None = Field(default=None)
