"""
Domain enums for the integration DSL documents.

These closed enumerations are the only values the downstream engine accepts;
request payloads and editor operations are validated against them.
"""

from enum import Enum


class LogicalOperator(str, Enum):
    """Boolean operator combining the conditions of one group."""

    AND = "AND"
    OR = "OR"


class ConditionType(str, Enum):
    """
    Comparison applied by a condition.

    Each type implies a value shape:
    equals -> string, matches -> regex, greater_than/less_than -> number,
    contains -> string or array, str_len_range -> [min, max],
    data_type -> type name.
    """

    EQUALS = "equals"
    MATCHES = "matches"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"
    STR_LEN_RANGE = "str_len_range"
    DATA_TYPE = "data_type"


class HttpMethod(str, Enum):
    """HTTP method of the outbound vendor call."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class RetryCase(str, Enum):
    """Failure classes for which the engine retries a vendor call."""

    HTTP_POISON_ERROR = "http_poison_error"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"


class DocumentKind(str, Enum):
    """Kind of generated DSL document."""

    VENDOR = "vendor"
    CONFIG = "config"


# Select-option catalogs, in display order
HTTP_METHODS = [m.value for m in HttpMethod]
RETRY_CASES = [r.value for r in RetryCase]
CONDITION_TYPES = [t.value for t in ConditionType]
CONDITION_OPERATORS = [o.value for o in LogicalOperator]

DEFAULT_METHOD = HttpMethod.POST
DEFAULT_ERROR_CODE = "VALIDATION_ERROR"
DEFAULT_ERROR_MESSAGE = "Validation failed."
