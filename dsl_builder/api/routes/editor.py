"""
Stateless editor endpoints.

Each request carries the full tree (or row list) and receives the edited
copy; the service keeps no editing session.
"""

from fastapi import APIRouter

from dsl_builder.api.schemas.editor import (
    ConditionRequest,
    ConditionUpdateRequest,
    GroupOperatorRequest,
    GroupRequest,
    GroupsRequest,
    GroupsResponse,
    PairRequest,
    PairsRequest,
    PairsResponse,
    PairUpdateRequest,
    ReconcileRequest,
    ValidationErrorUpdateRequest,
    ValidationsResponse,
)
from dsl_builder.editor import key_values, operations

router = APIRouter(prefix="/editor", tags=["editor"])


@router.post("/groups/add", response_model=GroupsResponse)
def post_add_group(payload: GroupsRequest) -> GroupsResponse:
    return GroupsResponse(
        groups=operations.add_group(payload.groups, validation_fields=payload.validation_fields)
    )


@router.post("/groups/remove", response_model=GroupsResponse)
def post_remove_group(payload: GroupRequest) -> GroupsResponse:
    return GroupsResponse(groups=operations.remove_group(payload.groups, payload.group_id))


@router.post("/groups/operator", response_model=GroupsResponse)
def post_update_group_operator(payload: GroupOperatorRequest) -> GroupsResponse:
    return GroupsResponse(
        groups=operations.update_group_operator(payload.groups, payload.group_id, payload.operator)
    )


@router.post("/conditions/add", response_model=GroupsResponse)
def post_add_condition(payload: GroupRequest) -> GroupsResponse:
    return GroupsResponse(
        groups=operations.add_condition(
            payload.groups, payload.group_id, validation_fields=payload.validation_fields
        )
    )


@router.post("/conditions/remove", response_model=GroupsResponse)
def post_remove_condition(payload: ConditionRequest) -> GroupsResponse:
    """Responds 409 (LastConditionError) when the condition is the last in its group."""
    return GroupsResponse(
        groups=operations.remove_condition(payload.groups, payload.group_id, payload.condition_id)
    )


@router.post("/conditions/update", response_model=GroupsResponse)
def post_update_condition(payload: ConditionUpdateRequest) -> GroupsResponse:
    return GroupsResponse(
        groups=operations.update_condition(
            payload.groups,
            payload.group_id,
            payload.condition_id,
            payload.field,
            payload.value,
        )
    )


@router.post("/validations/reconcile", response_model=ValidationsResponse)
def post_reconcile(payload: ReconcileRequest) -> ValidationsResponse:
    """Restore error codes/messages onto edited groups by group id."""
    return ValidationsResponse(validations=operations.reconcile(payload.previous, payload.groups))


@router.post("/validations/error", response_model=ValidationsResponse)
def post_update_validation_error(payload: ValidationErrorUpdateRequest) -> ValidationsResponse:
    return ValidationsResponse(
        validations=operations.update_validation_error(
            payload.validations, payload.group_id, payload.field, payload.value
        )
    )


@router.post("/pairs/add", response_model=PairsResponse)
def post_add_pair(payload: PairsRequest) -> PairsResponse:
    return PairsResponse(pairs=key_values.add_pair(payload.pairs))


@router.post("/pairs/remove", response_model=PairsResponse)
def post_remove_pair(payload: PairRequest) -> PairsResponse:
    return PairsResponse(pairs=key_values.remove_pair(payload.pairs, payload.pair_id))


@router.post("/pairs/update", response_model=PairsResponse)
def post_update_pair(payload: PairUpdateRequest) -> PairsResponse:
    return PairsResponse(
        pairs=key_values.update_pair(payload.pairs, payload.pair_id, payload.field, payload.value)
    )
