"""
Optional shape checks for condition values.

Generation passes condition values through verbatim by default. When strict
mode is on, every condition is parsed into its comparison variant first and
all mismatches are reported together with their JSONPath.
"""

import logging
from collections.abc import Sequence
from typing import Any

from dsl_builder.core.errors import ValidationError
from dsl_builder.domain.comparisons import condition_comparison, is_condition_complete
from dsl_builder.domain.models import ConditionGroup

logger = logging.getLogger(__name__)


def collect_value_errors(groups: Sequence[ConditionGroup], path: str) -> list[dict[str, Any]]:
    """
    Collect shape mismatches for every condition under ``groups``.

    Args:
        groups: Condition groups to inspect
        path: JSONPath of the group list, e.g. ``$.validations``

    Returns:
        One entry per mismatching condition (empty when all values fit)
    """
    errors: list[dict[str, Any]] = []
    for i, group in enumerate(groups):
        for j, condition in enumerate(group.conditions):
            try:
                condition_comparison(condition)
            except ValidationError as e:
                errors.append(
                    {
                        "path": f"{path}[{i}].conditions[{j}]",
                        "key": condition.key,
                        "type": condition.type.value,
                        "message": e.message,
                        "errors": e.details.get("errors", []),
                    }
                )
    return errors


def check_condition_values(groups_by_path: dict[str, Sequence[ConditionGroup]]) -> None:
    """
    Strict-mode gate run before a document is assembled.

    Raises:
        ValidationError: If any condition value does not fit its type
    """
    errors: list[dict[str, Any]] = []
    for path, groups in groups_by_path.items():
        errors.extend(collect_value_errors(groups, path))

    if errors:
        raise ValidationError(
            f"{len(errors)} condition value(s) do not fit their comparison type",
            details={"errors": errors},
        )


def count_incomplete_conditions(groups: Sequence[ConditionGroup]) -> int:
    """Number of conditions still missing a key."""
    return sum(
        1
        for group in groups
        for condition in group.conditions
        if not is_condition_complete(condition)
    )
