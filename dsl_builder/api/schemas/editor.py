from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from dsl_builder.domain.enums import LogicalOperator
from dsl_builder.domain.models import (
    ConditionGroup,
    ConditionValue,
    KeyValuePair,
    ValidationGroup,
)


class GroupsRequest(BaseModel):
    groups: list[ConditionGroup] = Field(default_factory=list)
    validation_fields: bool = Field(
        default=False,
        description="New conditions carry negate/mandatory flags (validation documents)",
    )


class GroupRequest(GroupsRequest):
    group_id: str


class GroupOperatorRequest(GroupRequest):
    operator: LogicalOperator


class ConditionRequest(GroupRequest):
    condition_id: str


class ConditionUpdateRequest(ConditionRequest):
    field: Literal["key", "type", "value", "negate", "mandatory"]
    value: ConditionValue | None = None


class GroupsResponse(BaseModel):
    groups: list[ConditionGroup]


class ReconcileRequest(BaseModel):
    previous: list[ValidationGroup] = Field(default_factory=list)
    groups: list[ConditionGroup] = Field(default_factory=list)


class ValidationErrorUpdateRequest(BaseModel):
    validations: list[ValidationGroup]
    group_id: str
    field: Literal["error_code", "error_message"]
    value: str


class ValidationsResponse(BaseModel):
    validations: list[ValidationGroup]


class PairsRequest(BaseModel):
    pairs: list[KeyValuePair] = Field(default_factory=list)


class PairRequest(PairsRequest):
    pair_id: str


class PairUpdateRequest(PairRequest):
    field: Literal["key", "value"]
    value: str


class PairsResponse(BaseModel):
    pairs: list[KeyValuePair]
