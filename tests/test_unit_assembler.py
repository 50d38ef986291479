"""
Tests for vendor and config document assembly.

These tests verify:
- Defaulting of method, timeout and key/value folding
- Canonical structure of preconditions, response mappings and validations
- Refusal of config documents without validations
- Strict-mode value checks
"""

from unittest.mock import patch

import pytest

from conftest import make_condition, make_group, make_validation
from dsl_builder.core.errors import MissingValidationError, ValidationError
from dsl_builder.domain.enums import ConditionType, HttpMethod, LogicalOperator, RetryCase
from dsl_builder.domain.models import (
    ConfigFormState,
    KeyValuePair,
    VendorFormState,
    default_config_form,
    default_vendor_form,
)
from dsl_builder.generator.assembler import (
    MISSING_VALIDATION_MESSAGE,
    create_empty_config_dsl,
    create_empty_vendor_dsl,
    env_placeholder,
    generate_config_dsl,
    generate_vendor_dsl,
)
from dsl_builder.generator.documents import ConfigDSL, VendorDSL


class TestEmptyDocuments:
    @pytest.mark.anyio
    async def test_empty_vendor_dsl(self):
        dsl = create_empty_vendor_dsl()
        assert isinstance(dsl, VendorDSL)
        assert dsl.to_document() == {
            "vendor": "",
            "endpoint": "",
            "method": "POST",
            "headers": {},
            "timeout": "",
            "retry_cases": [],
            "body": {},
            "preconditions": [],
            "response_mappings": [],
            "response_template": {},
        }

    @pytest.mark.anyio
    async def test_empty_config_dsl(self):
        dsl = create_empty_config_dsl()
        assert isinstance(dsl, ConfigDSL)
        assert dsl.to_document() == {"validations": [], "additional_validations": False}


class TestGenerateVendorDsl:
    """Vendor form to vendor.json."""

    @pytest.mark.anyio
    async def test_basic_vendor_document(self):
        form = {
            "vendor": "acme",
            "endpoint": "https://x/y",
            "method": "",
            "timeout": "VENDOR_TIMEOUT",
            "headers": [{"key": "Content-Type", "value": "application/json"}],
        }

        dsl = generate_vendor_dsl(form)

        assert dsl.method == HttpMethod.POST
        assert dsl.timeout == "${env.VENDOR_TIMEOUT}"
        assert dsl.headers == {"Content-Type": "application/json"}
        assert dsl.vendor == "acme"
        assert dsl.endpoint == "https://x/y"

    @pytest.mark.anyio
    async def test_explicit_method_kept(self):
        dsl = generate_vendor_dsl(VendorFormState(method=HttpMethod.GET))
        assert dsl.method == HttpMethod.GET

    @pytest.mark.anyio
    async def test_empty_timeout_stays_empty(self):
        assert generate_vendor_dsl(VendorFormState()).timeout == ""

    @pytest.mark.anyio
    async def test_header_without_value_dropped(self):
        form = VendorFormState(
            headers=[
                KeyValuePair(key="Authorization", value=""),
                KeyValuePair(key="Accept", value="application/json"),
            ]
        )
        assert generate_vendor_dsl(form).headers == {"Accept": "application/json"}

    @pytest.mark.anyio
    async def test_body_and_template_keep_empty_values(self):
        form = VendorFormState(
            body=[KeyValuePair(key="id_number", value=""), KeyValuePair(key="", value="x")],
            response_template=[KeyValuePair(key="status", value="")],
        )
        dsl = generate_vendor_dsl(form)
        assert dsl.body == {"id_number": ""}
        assert dsl.response_template == {"status": ""}

    @pytest.mark.anyio
    async def test_retry_cases_in_order(self):
        form = VendorFormState(retry_cases=[RetryCase.TIMEOUT, RetryCase.SERVER_ERROR])
        assert generate_vendor_dsl(form).to_document()["retry_cases"] == [
            "timeout",
            "server_error",
        ]

    @pytest.mark.anyio
    async def test_preconditions_wrap_match(self):
        group = make_group(
            make_condition("data.country", value="ZA"),
            make_condition("data.age", type=ConditionType.GREATER_THAN, value="18"),
            operator=LogicalOperator.OR,
        )

        document = generate_vendor_dsl(VendorFormState(preconditions=[group])).to_document()

        assert document["preconditions"] == [
            {
                "match": {
                    "operator": "OR",
                    "conditions": [
                        {"key": "data.country", "type": "equals", "value": "ZA"},
                        {"key": "data.age", "type": "greater_than", "value": "18"},
                    ],
                }
            }
        ]

    @pytest.mark.anyio
    async def test_response_mapping_has_empty_response(self):
        document = generate_vendor_dsl(default_vendor_form()).to_document()

        assert document["response_mappings"] == [
            {
                "match": {
                    "operator": "AND",
                    "conditions": [
                        {"key": "${response.status_code}", "type": "equals", "value": "200"}
                    ],
                },
                "response": {},
            }
        ]

    @pytest.mark.anyio
    async def test_no_identity_fields_in_document(self):
        document = generate_vendor_dsl(default_vendor_form()).to_document()
        assert "id" not in document["response_mappings"][0]["match"]
        assert "id" not in document["response_mappings"][0]["match"]["conditions"][0]

    @pytest.mark.anyio
    async def test_validation_flags_not_emitted_for_matches(self):
        group = make_group(make_condition(negate=True, mandatory=False))
        document = generate_vendor_dsl(VendorFormState(preconditions=[group])).to_document()
        condition = document["preconditions"][0]["match"]["conditions"][0]
        assert set(condition) == {"key", "type", "value"}

    @pytest.mark.anyio
    async def test_key_order(self):
        document = generate_vendor_dsl(default_vendor_form()).to_document()
        assert list(document) == [
            "vendor",
            "endpoint",
            "method",
            "headers",
            "timeout",
            "retry_cases",
            "body",
            "preconditions",
            "response_mappings",
            "response_template",
        ]

    @pytest.mark.anyio
    async def test_values_pass_through(self):
        group = make_group(make_condition(type=ConditionType.GREATER_THAN, value="not a number"))
        dsl = generate_vendor_dsl(VendorFormState(preconditions=[group]), strict=False)
        assert dsl.preconditions[0].match.conditions[0].value == "not a number"

    @pytest.mark.anyio
    async def test_form_is_not_mutated(self):
        form = default_vendor_form()
        before = form.model_dump()
        generate_vendor_dsl(form)
        assert form.model_dump() == before

    @pytest.mark.anyio
    async def test_malformed_form_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            generate_vendor_dsl({"method": "FETCH"})
        assert exc_info.value.details["errors"][0]["loc"].startswith("method")


class TestGenerateConfigDsl:
    """Validation form to config.json."""

    @pytest.mark.anyio
    async def test_single_validation(self, id_number_validation):
        dsl = generate_config_dsl(ConfigFormState(validations=[id_number_validation]))

        assert dsl.to_document() == {
            "validations": [
                {
                    "operator": "AND",
                    "conditions": [
                        {
                            "key": "data.id_number",
                            "type": "matches",
                            "value": "^\\d+$",
                            "negate": False,
                            "mandatory": True,
                        }
                    ],
                    "error_code": "PE_INVALID_ID_NUMBER",
                    "error_message": "Please provide a valid ID Number.",
                }
            ],
            "additional_validations": False,
        }

    @pytest.mark.anyio
    async def test_no_validations_refused(self):
        with pytest.raises(MissingValidationError) as exc_info:
            generate_config_dsl(ConfigFormState(read_write=[KeyValuePair(key="a", value="b")]))

        assert exc_info.value.message == MISSING_VALIDATION_MESSAGE
        assert exc_info.value.details == {"title": "Validation required"}

    @pytest.mark.anyio
    async def test_missing_flags_take_defaults(self):
        validation = make_validation(make_condition("data.email"))
        dsl = generate_config_dsl({"validations": [validation.model_dump()]})
        condition = dsl.validations[0].conditions[0]
        assert condition.negate is False
        assert condition.mandatory is True

    @pytest.mark.anyio
    async def test_explicit_flags_kept(self):
        validation = make_validation(make_condition(negate=True, mandatory=False))
        dsl = generate_config_dsl(ConfigFormState(validations=[validation]))
        condition = dsl.validations[0].conditions[0]
        assert condition.negate is True
        assert condition.mandatory is False

    @pytest.mark.anyio
    async def test_read_write_included_when_keyed(self):
        document = generate_config_dsl(default_config_form()).to_document()
        assert document["read_write"] == {"search_term": "${request.data.id_number}"}
        assert list(document) == ["validations", "additional_validations", "read_write"]

    @pytest.mark.anyio
    async def test_read_write_omitted_without_keys(self, id_number_validation):
        form = ConfigFormState(
            validations=[id_number_validation],
            read_write=[KeyValuePair(key="", value="${request.data.id_number}")],
        )
        dsl = generate_config_dsl(form)
        assert dsl.read_write is None
        assert "read_write" not in dsl.to_document()

    @pytest.mark.anyio
    async def test_additional_validations_flag(self, id_number_validation):
        form = ConfigFormState(validations=[id_number_validation], additional_validations=True)
        assert generate_config_dsl(form).additional_validations is True


class TestStrictMode:
    @pytest.mark.anyio
    async def test_strict_rejects_mismatched_values(self):
        form = VendorFormState(
            preconditions=[
                make_group(make_condition(type=ConditionType.GREATER_THAN, value="abc"))
            ]
        )

        with pytest.raises(ValidationError) as exc_info:
            generate_vendor_dsl(form, strict=True)

        errors = exc_info.value.details["errors"]
        assert len(errors) == 1
        assert errors[0]["path"] == "$.preconditions[0].conditions[0]"
        assert errors[0]["type"] == "greater_than"

    @pytest.mark.anyio
    async def test_strict_reports_every_mismatch(self):
        validation = make_validation(
            make_condition(type=ConditionType.MATCHES, value="([a-z]"),
            make_condition(type=ConditionType.STR_LEN_RANGE, value="10,3"),
        )
        with pytest.raises(ValidationError) as exc_info:
            generate_config_dsl(ConfigFormState(validations=[validation]), strict=True)

        paths = [e["path"] for e in exc_info.value.details["errors"]]
        assert paths == ["$.validations[0].conditions[0]", "$.validations[0].conditions[1]"]

    @pytest.mark.anyio
    async def test_strict_accepts_defaults(self):
        generate_vendor_dsl(default_vendor_form(), strict=True)
        generate_config_dsl(default_config_form(), strict=True)

    @pytest.mark.anyio
    async def test_strict_from_settings(self):
        form = VendorFormState(
            response_mappings=[
                make_group(make_condition(type=ConditionType.DATA_TYPE, value="decimal"))
            ]
        )
        with patch("dsl_builder.generator.assembler.settings") as mock_settings:
            mock_settings.dsl_strict_values = True
            with pytest.raises(ValidationError):
                generate_vendor_dsl(form)

    @pytest.mark.anyio
    async def test_refusal_precedes_strict_check(self):
        with pytest.raises(MissingValidationError):
            generate_config_dsl(ConfigFormState(), strict=True)


class TestEnvPlaceholder:
    @pytest.mark.anyio
    async def test_wraps_name(self):
        assert env_placeholder("API_TIMEOUT") == "${env.API_TIMEOUT}"

    @pytest.mark.anyio
    async def test_empty_name(self):
        assert env_placeholder("") == ""


class TestUnencodableText:
    @pytest.mark.anyio
    async def test_vendor_form_mapping_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            generate_vendor_dsl({"vendor": "\ud800"})

        error = exc_info.value.details["errors"][0]
        assert error["loc"] == "vendor"
        assert "lone surrogate" in error["msg"]
