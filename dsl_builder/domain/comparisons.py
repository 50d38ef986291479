"""
Typed comparison variants.

A condition stores its ``(type, value)`` pair loosely because the editor holds
whatever the operator typed. This module gives each comparison type its own
validated shape:

- equals: a scalar
- matches: a pattern that compiles as a regular expression
- greater_than / less_than: a number
- contains: a string or a list of strings
- str_len_range: a non-negative ``[min, max]`` range with ``min <= max``
- data_type: one of the JSON type names

``parse_comparison`` coerces the text the operator typed into the variant and
raises ``ValidationError`` when it does not fit.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal

import pydantic
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    TypeAdapter,
    field_validator,
    model_validator,
)

from dsl_builder.core.errors import ValidationError
from dsl_builder.domain.enums import ConditionType
from dsl_builder.domain.models import Condition

DATA_TYPE_NAMES = ("string", "number", "integer", "boolean", "array", "object", "null")

_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_RANGE_RE = re.compile(r"^\s*(\d+)\s*(?:,|-|\.\.)\s*(\d+)\s*$")


class _Variant(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_value(self) -> Any:
        raise NotImplementedError


class Equals(_Variant):
    type: Literal["equals"] = "equals"
    value: StrictStr | StrictBool | int | float

    def to_value(self) -> Any:
        return self.value


class Matches(_Variant):
    type: Literal["matches"] = "matches"
    pattern: StrictStr

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        return v

    def to_value(self) -> Any:
        return self.pattern


class GreaterThan(_Variant):
    type: Literal["greater_than"] = "greater_than"
    value: int | float

    def to_value(self) -> Any:
        return self.value


class LessThan(_Variant):
    type: Literal["less_than"] = "less_than"
    value: int | float

    def to_value(self) -> Any:
        return self.value


class Contains(_Variant):
    type: Literal["contains"] = "contains"
    value: StrictStr | list[StrictStr]

    def to_value(self) -> Any:
        return self.value


class StrLenRange(_Variant):
    type: Literal["str_len_range"] = "str_len_range"
    min: int = Field(ge=0)
    max: int = Field(ge=0)

    @model_validator(mode="after")
    def validate_bounds(self) -> StrLenRange:
        if self.min > self.max:
            raise ValueError(f"range minimum {self.min} exceeds maximum {self.max}")
        return self

    def to_value(self) -> Any:
        return [self.min, self.max]


class DataType(_Variant):
    type: Literal["data_type"] = "data_type"
    name: Literal["string", "number", "integer", "boolean", "array", "object", "null"]

    def to_value(self) -> Any:
        return self.name


Comparison = Annotated[
    Equals | Matches | GreaterThan | LessThan | Contains | StrLenRange | DataType,
    Field(discriminator="type"),
]

_comparison_adapter: TypeAdapter[Any] = TypeAdapter(Comparison)


def _coerce_number(raw: Any) -> Any:
    if isinstance(raw, str) and _NUMBER_RE.match(raw.strip()):
        text = raw.strip()
        if re.fullmatch(r"[+-]?\d+", text):
            return int(text)
        return float(text)
    if isinstance(raw, bool):
        # bool is an int subclass; never a valid number here
        return str(raw)
    return raw


def _coerce_range(raw: Any) -> dict[str, Any]:
    if isinstance(raw, str):
        match = _RANGE_RE.match(raw)
        if match:
            return {"min": int(match.group(1)), "max": int(match.group(2))}
        return {"min": raw, "max": None}
    if isinstance(raw, list | tuple) and len(raw) == 2:
        return {"min": _coerce_number(raw[0]), "max": _coerce_number(raw[1])}
    return {"min": raw, "max": None}


def _variant_payload(condition_type: ConditionType, raw: Any) -> dict[str, Any]:
    if condition_type == ConditionType.MATCHES:
        return {"type": condition_type.value, "pattern": raw}
    if condition_type in (ConditionType.GREATER_THAN, ConditionType.LESS_THAN):
        return {"type": condition_type.value, "value": _coerce_number(raw)}
    if condition_type == ConditionType.CONTAINS:
        if isinstance(raw, str) and "," in raw:
            raw = [part.strip() for part in raw.split(",") if part.strip()]
        return {"type": condition_type.value, "value": raw}
    if condition_type == ConditionType.STR_LEN_RANGE:
        return {"type": condition_type.value, **_coerce_range(raw)}
    if condition_type == ConditionType.DATA_TYPE:
        name = raw.strip().lower() if isinstance(raw, str) else raw
        return {"type": condition_type.value, "name": name}
    return {"type": condition_type.value, "value": raw}


def parse_comparison(condition_type: ConditionType | str, raw: Any) -> Comparison:
    """
    Build the typed comparison variant for a condition's type and raw value.

    Args:
        condition_type: One of the closed condition types
        raw: Value as held by the editor (usually the text the operator typed)

    Returns:
        The validated comparison variant

    Raises:
        ValidationError: If the type is unknown or the value does not fit it

    Example:
        >>> parse_comparison("str_len_range", "3,10").to_value()
        [3, 10]
    """
    try:
        condition_type = ConditionType(condition_type)
    except ValueError:
        raise ValidationError(
            f"Unknown condition type '{condition_type}'",
            details={"type": str(condition_type)},
        )

    try:
        return _comparison_adapter.validate_python(_variant_payload(condition_type, raw))
    except pydantic.ValidationError as e:
        raise ValidationError(
            f"Value does not fit condition type '{condition_type.value}'",
            details={
                "type": condition_type.value,
                "value": raw,
                "errors": [err["msg"] for err in e.errors()],
            },
        ) from e


def condition_comparison(condition: Condition) -> Comparison:
    """Typed comparison for an editor condition."""
    return parse_comparison(condition.type, condition.value)


def is_condition_complete(condition: Condition) -> bool:
    """True when the condition names a key and a type and holds a value."""
    return bool(condition.key and condition.type and condition.value is not None)
