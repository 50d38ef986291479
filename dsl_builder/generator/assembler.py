"""
Document assemblers.

Fold the editable form state into canonical VendorDSL / ConfigDSL documents.
Both functions are pure: they read a snapshot of the form and return a new
document that shares no mutable state with it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel

from dsl_builder.core.config import settings
from dsl_builder.core.errors import MissingValidationError, ValidationError
from dsl_builder.domain.enums import DEFAULT_METHOD
from dsl_builder.domain.models import (
    Condition,
    ConditionGroup,
    ConfigFormState,
    ValidationGroup,
    VendorFormState,
)
from dsl_builder.editor.key_values import fold_pairs
from dsl_builder.generator.documents import (
    ConfigDSL,
    Match,
    MatchCondition,
    Precondition,
    ResponseMapping,
    Validation,
    ValidationCondition,
    VendorDSL,
)
from dsl_builder.generator.validator import check_condition_values, count_incomplete_conditions

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=BaseModel)

MISSING_VALIDATION_MESSAGE = "Please add at least one validation rule."


def create_empty_vendor_dsl() -> VendorDSL:
    return VendorDSL()


def create_empty_config_dsl() -> ConfigDSL:
    return ConfigDSL()


def _coerce_form(model: type[F], form: F | Mapping[str, Any]) -> F:
    if isinstance(form, model):
        return form
    try:
        return model.model_validate(form)
    except pydantic.ValidationError as e:
        raise ValidationError(
            f"Invalid {model.__name__}",
            details={
                "errors": [
                    {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                    for err in e.errors()
                ]
            },
        ) from e


def env_placeholder(name: str) -> str:
    """Wrap an environment variable name as a ``${env.<name>}`` token."""
    return f"${{env.{name}}}" if name else ""


def _match_condition(condition: Condition) -> MatchCondition:
    return MatchCondition(key=condition.key, type=condition.type, value=condition.value)


def _validation_condition(condition: Condition) -> ValidationCondition:
    # Missing flags take the editor defaults for validation conditions
    return ValidationCondition(
        key=condition.key,
        type=condition.type,
        value=condition.value,
        negate=bool(condition.negate),
        mandatory=True if condition.mandatory is None else condition.mandatory,
    )


def _match(group: ConditionGroup) -> Match:
    return Match(
        operator=group.operator,
        conditions=[_match_condition(c) for c in group.conditions],
    )


def _validation(group: ValidationGroup) -> Validation:
    return Validation(
        operator=group.operator,
        conditions=[_validation_condition(c) for c in group.conditions],
        error_code=group.error_code,
        error_message=group.error_message,
    )


def generate_vendor_dsl(
    form: VendorFormState | Mapping[str, Any], *, strict: bool | None = None
) -> VendorDSL:
    """
    Build the vendor document from the vendor form.

    Defaulting rules:
    - method falls back to POST when empty
    - timeout names an environment variable and becomes ``${env.<name>}``
    - header rows need both key and value; body and template rows only a key
    - every response mapping gets an empty ``response`` object

    Args:
        form: Vendor form state (model or plain mapping)
        strict: Check condition values against their types
                (defaults to ``settings.dsl_strict_values``)

    Returns:
        VendorDSL document

    Raises:
        ValidationError: If the form is malformed, or in strict mode a
                         condition value does not fit its type

    Example:
        >>> dsl = generate_vendor_dsl({"vendor": "acme", "timeout": "VENDOR_TIMEOUT"})
        >>> dsl.method, dsl.timeout
        (<HttpMethod.POST: 'POST'>, '${env.VENDOR_TIMEOUT}')
    """
    form = _coerce_form(VendorFormState, form)

    if settings.dsl_strict_values if strict is None else strict:
        check_condition_values(
            {
                "$.preconditions": form.preconditions,
                "$.response_mappings": form.response_mappings,
            }
        )

    incomplete = count_incomplete_conditions([*form.preconditions, *form.response_mappings])
    if incomplete:
        logger.warning(
            "Vendor document has conditions without a key",
            extra={"vendor": form.vendor, "incomplete_conditions": incomplete},
        )

    dsl = VendorDSL(
        vendor=form.vendor or "",
        endpoint=form.endpoint or "",
        method=form.method or DEFAULT_METHOD,
        headers=fold_pairs(form.headers, require_value=True),
        timeout=env_placeholder(form.timeout),
        retry_cases=list(form.retry_cases),
        body=fold_pairs(form.body),
        preconditions=[Precondition(match=_match(group)) for group in form.preconditions],
        response_mappings=[
            ResponseMapping(match=_match(group), response={}) for group in form.response_mappings
        ],
        response_template=fold_pairs(form.response_template),
    )

    logger.info(
        "Generated vendor DSL",
        extra={
            "vendor": dsl.vendor,
            "method": dsl.method.value,
            "preconditions": len(dsl.preconditions),
            "response_mappings": len(dsl.response_mappings),
        },
    )
    return dsl


def generate_config_dsl(
    form: ConfigFormState | Mapping[str, Any], *, strict: bool | None = None
) -> ConfigDSL:
    """
    Build the config document from the validation form.

    Args:
        form: Config form state (model or plain mapping)
        strict: Check condition values against their types
                (defaults to ``settings.dsl_strict_values``)

    Returns:
        ConfigDSL document; ``read_write`` is None when no row has a key

    Raises:
        MissingValidationError: If the form has no validation group
        ValidationError: If the form is malformed, or in strict mode a
                         condition value does not fit its type
    """
    form = _coerce_form(ConfigFormState, form)

    if not form.validations:
        logger.info("Config generation refused: no validation groups")
        raise MissingValidationError(
            MISSING_VALIDATION_MESSAGE, details={"title": "Validation required"}
        )

    if settings.dsl_strict_values if strict is None else strict:
        check_condition_values({"$.validations": form.validations})

    incomplete = count_incomplete_conditions(form.validations)
    if incomplete:
        logger.warning(
            "Config document has conditions without a key",
            extra={"incomplete_conditions": incomplete},
        )

    read_write = fold_pairs(form.read_write)
    dsl = ConfigDSL(
        validations=[_validation(group) for group in form.validations],
        additional_validations=form.additional_validations,
        read_write=read_write or None,
    )

    logger.info(
        "Generated config DSL",
        extra={
            "validations": len(dsl.validations),
            "additional_validations": dsl.additional_validations,
            "read_write_keys": len(read_write),
        },
    )
    return dsl
