"""Editing and folding of key/value rows (headers, body, templates, read_write)."""

from __future__ import annotations

from collections.abc import Sequence

import pydantic

from dsl_builder.core.errors import ValidationError
from dsl_builder.domain.models import KeyValuePair

PAIR_FIELDS = ("key", "value")


def add_pair(pairs: Sequence[KeyValuePair]) -> list[KeyValuePair]:
    """Append an empty row."""
    return [*pairs, KeyValuePair()]


def remove_pair(pairs: Sequence[KeyValuePair], pair_id: str) -> list[KeyValuePair]:
    return [pair for pair in pairs if pair.id != pair_id]


def update_pair(
    pairs: Sequence[KeyValuePair], pair_id: str, field: str, value: str
) -> list[KeyValuePair]:
    """
    Replace the key or the value of one row.

    Raises:
        ValidationError: If the field is not editable or the value is rejected
    """
    if field not in PAIR_FIELDS:
        raise ValidationError(
            f"Key/value field '{field}' cannot be edited",
            details={"field": field, "allowed": list(PAIR_FIELDS)},
        )

    def _replace(pair: KeyValuePair) -> KeyValuePair:
        try:
            return KeyValuePair.model_validate({**pair.model_dump(), field: value})
        except pydantic.ValidationError as e:
            raise ValidationError(
                f"Invalid value for key/value field '{field}'",
                details={"pair_id": pair_id, "errors": [err["msg"] for err in e.errors()]},
            ) from e

    return [_replace(pair) if pair.id == pair_id else pair for pair in pairs]


def fold_pairs(pairs: Sequence[KeyValuePair], *, require_value: bool = False) -> dict[str, str]:
    """
    Fold rows into a mapping in row order.

    Rows with an empty key are skipped. With ``require_value`` rows with an
    empty value are skipped too; otherwise an empty value is kept as ``""``.
    A repeated key keeps its first position and takes the last value.

    Example:
        >>> fold_pairs([KeyValuePair(key="a", value=""), KeyValuePair(key="", value="x")])
        {'a': ''}
    """
    folded: dict[str, str] = {}
    for pair in pairs:
        if not pair.key:
            continue
        if require_value and not pair.value:
            continue
        folded[pair.key] = pair.value or ""
    return folded
