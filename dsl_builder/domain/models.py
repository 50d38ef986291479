"""
Editable rule-tree and form-state models.

These are the values the editor operations transform and the assemblers read.
All models are immutable: an edit produces a new value and leaves untouched
nodes shared with the previous tree.
"""

from __future__ import annotations

import uuid
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dsl_builder.domain.enums import (
    DEFAULT_ERROR_CODE,
    DEFAULT_ERROR_MESSAGE,
    ConditionType,
    HttpMethod,
    LogicalOperator,
    RetryCase,
)

Scalar = str | int | float | bool
ConditionValue = Scalar | list[Scalar]


def new_id() -> str:
    """Return a process-unique identifier for a tree node."""
    return uuid.uuid4().hex


def _check_text(value: Any) -> Any:
    if isinstance(value, str):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValueError(
                f"text is not valid UTF-8 (lone surrogate at position {e.start})"
            ) from e
    elif isinstance(value, list):
        for item in value:
            _check_text(item)
    return value


class EditorModel(BaseModel):
    """Immutable base for editor values; every text field must encode as UTF-8."""

    model_config = ConfigDict(frozen=True)

    @field_validator("*")
    @classmethod
    def validate_text(cls, v: Any) -> Any:
        return _check_text(v)


class Condition(EditorModel):
    """A single typed comparison leaf."""

    id: str = Field(default_factory=new_id)
    key: str = ""
    type: ConditionType = ConditionType.EQUALS
    value: ConditionValue = ""
    # Only meaningful for validation documents
    negate: bool | None = None
    mandatory: bool | None = None


class ConditionGroup(EditorModel):
    """Ordered, non-empty set of conditions combined by one operator."""

    id: str = Field(default_factory=new_id)
    operator: LogicalOperator = LogicalOperator.AND
    conditions: list[Condition] = Field(min_length=1)

    def find_condition(self, condition_id: str) -> Condition | None:
        for condition in self.conditions:
            if condition.id == condition_id:
                return condition
        return None


class ValidationGroup(ConditionGroup):
    """Condition group carrying the error reported when it fails."""

    error_code: str = DEFAULT_ERROR_CODE
    error_message: str = DEFAULT_ERROR_MESSAGE


class KeyValuePair(EditorModel):
    """One editable row of a key/value list (headers, body, templates)."""

    id: str = Field(default_factory=new_id)
    key: str = ""
    value: str = ""


class VendorFormState(EditorModel):
    """Snapshot of everything the operator entered for a vendor document."""

    vendor: str = ""
    endpoint: str = ""
    method: HttpMethod | Literal[""] = ""
    # Environment variable name; rendered as a ${env.<name>} placeholder
    timeout: str = ""
    headers: list[KeyValuePair] = Field(default_factory=list)
    retry_cases: list[RetryCase] = Field(default_factory=list)
    body: list[KeyValuePair] = Field(default_factory=list)
    preconditions: list[ConditionGroup] = Field(default_factory=list)
    response_mappings: list[ConditionGroup] = Field(default_factory=list)
    response_template: list[KeyValuePair] = Field(default_factory=list)


class ConfigFormState(EditorModel):
    """Snapshot of everything the operator entered for a config document."""

    validations: list[ValidationGroup] = Field(default_factory=list)
    additional_validations: bool = False
    read_write: list[KeyValuePair] = Field(default_factory=list)


def default_vendor_form() -> VendorFormState:
    """Initial vendor editor state: the common JSON POST integration skeleton."""
    return VendorFormState(
        method=HttpMethod.POST,
        headers=[KeyValuePair(key="Content-Type", value="application/json")],
        body=[KeyValuePair(key="id_number", value="${data.id_number}")],
        response_mappings=[
            ConditionGroup(
                conditions=[
                    Condition(
                        key="${response.status_code}",
                        type=ConditionType.EQUALS,
                        value="200",
                    )
                ],
            )
        ],
        response_template=[KeyValuePair(key="status", value="success")],
    )


def default_config_form() -> ConfigFormState:
    """Initial config editor state: an ID-number format check."""
    return ConfigFormState(
        validations=[
            ValidationGroup(
                conditions=[
                    Condition(
                        key="data.id_number",
                        type=ConditionType.MATCHES,
                        value="^\\d+$",
                        negate=False,
                        mandatory=True,
                    )
                ],
                error_code="PE_INVALID_ID_NUMBER",
                error_message="Please provide a valid ID Number.",
            )
        ],
        read_write=[KeyValuePair(key="search_term", value="${request.data.id_number}")],
    )
