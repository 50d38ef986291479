"""
Pure editor operations over rule trees and key/value rows.

Each operation returns a new value and shares every untouched node with its
input.
"""

from dsl_builder.editor.key_values import add_pair, fold_pairs, remove_pair, update_pair
from dsl_builder.editor.operations import (
    add_condition,
    add_group,
    create_empty_condition,
    reconcile,
    remove_condition,
    remove_group,
    update_condition,
    update_group_operator,
    update_validation_error,
)

__all__ = [
    "add_condition",
    "add_group",
    "add_pair",
    "create_empty_condition",
    "fold_pairs",
    "reconcile",
    "remove_condition",
    "remove_group",
    "remove_pair",
    "update_condition",
    "update_group_operator",
    "update_pair",
    "update_validation_error",
]
