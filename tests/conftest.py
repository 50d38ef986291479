"""
Pytest configuration and shared fixtures.

Provides:
- Import path setup for the repository root
- AnyIO backend selection
- Rule-tree factories shared by editor, generator and API tests
- FastAPI TestClient
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

# Add package root to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402 (import after path setup)
from fastapi.testclient import TestClient  # noqa: E402 (import after path setup)

from dsl_builder.domain.enums import ConditionType, LogicalOperator  # noqa: E402
from dsl_builder.domain.models import (  # noqa: E402
    Condition,
    ConditionGroup,
    ValidationGroup,
)
from dsl_builder.main import create_app  # noqa: E402


# Per AnyIO testing docs: https://anyio.readthedocs.io/en/stable/testing.html
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def make_condition(key: str = "data.amount", **overrides) -> Condition:
    data = {"key": key, "type": ConditionType.EQUALS, "value": "1"}
    data.update(overrides)
    return Condition(**data)


def make_group(*conditions: Condition, operator: LogicalOperator = LogicalOperator.AND):
    if not conditions:
        conditions = (make_condition(),)
    return ConditionGroup(operator=operator, conditions=list(conditions))


def make_validation(*conditions: Condition, **overrides) -> ValidationGroup:
    if not conditions:
        conditions = (make_condition(negate=False, mandatory=True),)
    return ValidationGroup(conditions=list(conditions), **overrides)


@pytest.fixture
def two_groups() -> list[ConditionGroup]:
    """Two groups; the first holds two conditions, the second one."""
    return [
        make_group(make_condition("data.a"), make_condition("data.b")),
        make_group(make_condition("data.c"), operator=LogicalOperator.OR),
    ]


@pytest.fixture
def id_number_validation() -> ValidationGroup:
    """The validation group used by the config editor's initial state."""
    return ValidationGroup(
        operator=LogicalOperator.AND,
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
