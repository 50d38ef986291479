"""
Rule-tree editor operations.

Every operation takes a sequence of condition groups and returns a new list.
Nothing is mutated: only the groups and conditions on the path to the edited
node are rebuilt, every other node is carried over as the same object. Callers
can therefore use ``is`` to tell whether a subtree changed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, TypeVar

import pydantic

from dsl_builder.core.errors import LastConditionError, ValidationError
from dsl_builder.domain.enums import (
    DEFAULT_ERROR_CODE,
    DEFAULT_ERROR_MESSAGE,
    ConditionType,
    LogicalOperator,
)
from dsl_builder.domain.models import Condition, ConditionGroup, ValidationGroup

logger = logging.getLogger(__name__)

G = TypeVar("G", bound=ConditionGroup)

CONDITION_FIELDS = ("key", "type", "value", "negate", "mandatory")
VALIDATION_ERROR_FIELDS = ("error_code", "error_message")


def create_empty_condition(validation_fields: bool = False) -> Condition:
    """
    Fresh condition as the editor inserts it.

    Validation documents additionally get ``negate=False`` and ``mandatory=True``.
    """
    if validation_fields:
        return Condition(key="", type=ConditionType.EQUALS, value="", negate=False, mandatory=True)
    return Condition(key="", type=ConditionType.EQUALS, value="")


def add_group(
    groups: Sequence[ConditionGroup], *, validation_fields: bool = False
) -> list[ConditionGroup]:
    """Append an AND group holding one empty condition."""
    group = ConditionGroup(
        operator=LogicalOperator.AND,
        conditions=[create_empty_condition(validation_fields)],
    )
    logger.debug("Added condition group", extra={"group_id": group.id})
    return [*groups, group]


def remove_group(groups: Sequence[G], group_id: str) -> list[G]:
    """Drop the group with ``group_id``; unknown ids leave the list unchanged."""
    return [group for group in groups if group.id != group_id]


def update_group_operator(
    groups: Sequence[G], group_id: str, operator: LogicalOperator | str
) -> list[G]:
    """Replace the operator of one group."""
    try:
        operator = LogicalOperator(operator)
    except ValueError:
        raise ValidationError(
            f"Unknown operator '{operator}'",
            details={"operator": str(operator), "allowed": [o.value for o in LogicalOperator]},
        )

    return [
        group.model_copy(update={"operator": operator}) if group.id == group_id else group
        for group in groups
    ]


def add_condition(
    groups: Sequence[G], group_id: str, *, validation_fields: bool = False
) -> list[G]:
    """Append an empty condition to one group."""
    return [
        group.model_copy(
            update={"conditions": [*group.conditions, create_empty_condition(validation_fields)]}
        )
        if group.id == group_id
        else group
        for group in groups
    ]


def remove_condition(groups: Sequence[G], group_id: str, condition_id: str) -> list[G]:
    """
    Remove one condition from one group.

    Raises:
        LastConditionError: If the condition is the only one left in its group
    """
    result: list[G] = []
    for group in groups:
        if group.id != group_id or group.find_condition(condition_id) is None:
            result.append(group)
            continue

        if len(group.conditions) == 1:
            raise LastConditionError(
                "A condition group must keep at least one condition",
                details={"group_id": group_id, "condition_id": condition_id},
            )

        result.append(
            group.model_copy(
                update={"conditions": [c for c in group.conditions if c.id != condition_id]}
            )
        )
    return result


def update_condition(
    groups: Sequence[G], group_id: str, condition_id: str, field: str, value: Any
) -> list[G]:
    """
    Replace one field of one condition.

    The rebuilt condition is validated, so an unknown comparison type is
    rejected here rather than reaching a generated document.

    Raises:
        ValidationError: If the field is not editable or the value is rejected
    """
    if field not in CONDITION_FIELDS:
        raise ValidationError(
            f"Condition field '{field}' cannot be edited",
            details={"field": field, "allowed": list(CONDITION_FIELDS)},
        )

    def _replace(condition: Condition) -> Condition:
        try:
            return Condition.model_validate({**condition.model_dump(), field: value})
        except pydantic.ValidationError as e:
            raise ValidationError(
                f"Invalid value for condition field '{field}'",
                details={
                    "group_id": group_id,
                    "condition_id": condition_id,
                    "errors": [err["msg"] for err in e.errors()],
                },
            ) from e

    return [
        group.model_copy(
            update={
                "conditions": [
                    _replace(c) if c.id == condition_id else c for c in group.conditions
                ]
            }
        )
        if group.id == group_id and group.find_condition(condition_id) is not None
        else group
        for group in groups
    ]


# ============================================================================
# Validation groups
# ============================================================================


def _error_info(prior: ValidationGroup | None) -> tuple[str, str]:
    if prior is None:
        return DEFAULT_ERROR_CODE, DEFAULT_ERROR_MESSAGE
    return (
        prior.error_code or DEFAULT_ERROR_CODE,
        prior.error_message or DEFAULT_ERROR_MESSAGE,
    )


def reconcile(
    previous: Sequence[ValidationGroup], groups: Sequence[ConditionGroup]
) -> list[ValidationGroup]:
    """
    Merge edited groups back into validation groups, keyed by group id.

    Each group keeps the error code and message of the previous validation
    with the same id. Groups without a prior match, or whose prior value is
    empty, get ``VALIDATION_ERROR`` / ``Validation failed.``. Groups missing
    from ``groups`` are dropped.

    Example:
        >>> edited = add_group(validations, validation_fields=True)
        >>> validations = reconcile(validations, edited)
    """
    by_id = {validation.id: validation for validation in previous}
    merged: list[ValidationGroup] = []

    for group in groups:
        prior = by_id.get(group.id)
        error_code, error_message = _error_info(prior)

        if (
            isinstance(group, ValidationGroup)
            and group.error_code == error_code
            and group.error_message == error_message
        ):
            merged.append(group)
            continue

        merged.append(
            ValidationGroup(
                id=group.id,
                operator=group.operator,
                conditions=group.conditions,
                error_code=error_code,
                error_message=error_message,
            )
        )

    return merged


def update_validation_error(
    validations: Sequence[ValidationGroup], group_id: str, field: str, value: str
) -> list[ValidationGroup]:
    """
    Set ``error_code`` or ``error_message`` of one validation; unknown ids are a no-op.

    Raises:
        ValidationError: If the field is not one of the error fields or the value is rejected
    """
    if field not in VALIDATION_ERROR_FIELDS:
        raise ValidationError(
            f"Validation field '{field}' cannot be edited",
            details={"field": field, "allowed": list(VALIDATION_ERROR_FIELDS)},
        )

    def _replace(validation: ValidationGroup) -> ValidationGroup:
        try:
            return ValidationGroup.model_validate(
                {
                    "id": validation.id,
                    "operator": validation.operator,
                    "conditions": validation.conditions,
                    "error_code": validation.error_code,
                    "error_message": validation.error_message,
                    field: value,
                }
            )
        except pydantic.ValidationError as e:
            raise ValidationError(
                f"Invalid value for validation field '{field}'",
                details={"group_id": group_id, "errors": [err["msg"] for err in e.errors()]},
            ) from e

    return [
        _replace(validation) if validation.id == group_id else validation
        for validation in validations
    ]
