from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from dsl_builder.api.schemas.dsl import GenerateResponse, OptionsResponse
from dsl_builder.core.errors import NotFoundError
from dsl_builder.core.observability import metrics, track_generation
from dsl_builder.domain.comparisons import DATA_TYPE_NAMES
from dsl_builder.domain.enums import (
    CONDITION_OPERATORS,
    CONDITION_TYPES,
    HTTP_METHODS,
    RETRY_CASES,
    DocumentKind,
)
from dsl_builder.domain.models import (
    ConfigFormState,
    VendorFormState,
    default_config_form,
    default_vendor_form,
)
from dsl_builder.generator.assembler import generate_config_dsl, generate_vendor_dsl
from dsl_builder.generator.serializer import document_checksum, format_dsl, to_json_value

router = APIRouter(prefix="/dsl", tags=["dsl"])

StrictQuery = Annotated[
    bool | None,
    Query(description="Check condition values against their comparison type"),
]


def _render(kind: DocumentKind, dsl) -> GenerateResponse:
    content = format_dsl(dsl)
    size = len(content.encode("utf-8", "surrogatepass"))
    metrics.dsl_document_bytes.labels(document=kind.value).observe(size)
    return GenerateResponse(
        document=to_json_value(dsl),
        content=content,
        checksum=document_checksum(dsl),
    )


@router.get("/options", response_model=OptionsResponse)
def get_options() -> OptionsResponse:
    """Value sets for the method, retry-case, condition-type and operator selects."""
    return OptionsResponse(
        methods=HTTP_METHODS,
        retry_cases=RETRY_CASES,
        condition_types=CONDITION_TYPES,
        operators=CONDITION_OPERATORS,
        data_types=list(DATA_TYPE_NAMES),
    )


@router.get("/defaults/{kind}", response_model=VendorFormState | ConfigFormState)
def get_defaults(kind: str):
    """Initial form state for a fresh editing session."""
    if kind == DocumentKind.VENDOR.value:
        return default_vendor_form()
    if kind == DocumentKind.CONFIG.value:
        return default_config_form()
    raise NotFoundError(
        f"Unknown document kind '{kind}'",
        details={"kind": kind, "allowed": [k.value for k in DocumentKind]},
    )


@router.post("/vendor", response_model=GenerateResponse)
def post_vendor(payload: VendorFormState, strict: StrictQuery = None) -> GenerateResponse:
    """
    Generate vendor.json from the vendor form.

    Returns the document, its pretty-printed JSON and a checksum.
    """
    with track_generation(DocumentKind.VENDOR.value):
        dsl = generate_vendor_dsl(payload, strict=strict)
    return _render(DocumentKind.VENDOR, dsl)


@router.post("/config", response_model=GenerateResponse)
def post_config(payload: ConfigFormState, strict: StrictQuery = None) -> GenerateResponse:
    """
    Generate config.json from the validation form.

    Responds 422 (MissingValidationError) when the form has no validation group.
    """
    with track_generation(DocumentKind.CONFIG.value):
        dsl = generate_config_dsl(payload, strict=strict)
    return _render(DocumentKind.CONFIG, dsl)
