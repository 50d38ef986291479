"""
Canonical DSL document shapes.

Field declaration order is the key order of the serialized document, so do
not reorder fields. Identity fields of the editable tree never appear here.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from dsl_builder.domain.enums import ConditionType, HttpMethod, LogicalOperator, RetryCase
from dsl_builder.domain.models import ConditionValue


class MatchCondition(BaseModel):
    key: str
    type: ConditionType
    value: ConditionValue


class ValidationCondition(MatchCondition):
    negate: bool
    mandatory: bool


class Match(BaseModel):
    operator: LogicalOperator
    conditions: list[MatchCondition]


class Precondition(BaseModel):
    """Gate deciding whether the vendor call is attempted."""

    match: Match


class ResponseMapping(BaseModel):
    """Response-matching condition plus the fields emitted when it matches."""

    match: Match
    response: dict[str, Any] = Field(default_factory=dict)


class Validation(BaseModel):
    operator: LogicalOperator
    conditions: list[ValidationCondition]
    error_code: str
    error_message: str


class VendorDSL(BaseModel):
    """vendor.json: one outbound HTTP integration."""

    vendor: str = ""
    endpoint: str = ""
    method: HttpMethod = HttpMethod.POST
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: str = ""
    retry_cases: list[RetryCase] = Field(default_factory=list)
    body: dict[str, Any] = Field(default_factory=dict)
    preconditions: list[Precondition] = Field(default_factory=list)
    response_mappings: list[ResponseMapping] = Field(default_factory=list)
    response_template: dict[str, Any] = Field(default_factory=dict)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ConfigDSL(BaseModel):
    """config.json: request validation rules."""

    validations: list[Validation] = Field(default_factory=list)
    additional_validations: bool = False
    read_write: dict[str, Any] | None = None

    def to_document(self) -> dict[str, Any]:
        """JSON-ready mapping; ``read_write`` is left out entirely when empty."""
        document = self.model_dump(mode="json")
        if not document["read_write"]:
            del document["read_write"]
        return document
