"""
Deterministic JSON rendering of DSL documents.

Keys are never sorted: output order is the order the document was built in.
The assemblers always build keys in schema order, so the same form state
renders to byte-identical JSON.
"""

import hashlib
import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from dsl_builder.core.config import settings


def to_json_value(document: Any) -> Any:
    """
    Convert a document (model or mapping) into plain JSON-ready data.

    Models exposing ``to_document`` decide which optional keys they emit.
    """
    if hasattr(document, "to_document"):
        return document.to_document()
    if isinstance(document, BaseModel):
        return document.model_dump(mode="json")
    if isinstance(document, Mapping):
        return {k: to_json_value(v) for k, v in document.items()}
    if isinstance(document, list | tuple):
        return [to_json_value(item) for item in document]
    return document


def format_dsl(document: Any, indent: int | None = None) -> str:
    """
    Render a document as pretty-printed JSON.

    Args:
        document: VendorDSL, ConfigDSL or any JSON-ready mapping
        indent: Spaces per level (defaults to ``settings.dsl_indent``, 2)

    Returns:
        JSON string with construction-order keys and no trailing whitespace

    Example:
        >>> print(format_dsl({"vendor": "acme", "method": "POST"}))
        {
          "vendor": "acme",
          "method": "POST"
        }
    """
    return json.dumps(
        to_json_value(document),
        indent=settings.dsl_indent if indent is None else indent,
        ensure_ascii=False,
    )


def to_compact_json(document: Any) -> str:
    """Render a document without whitespace."""
    return json.dumps(to_json_value(document), separators=(",", ":"), ensure_ascii=False)


def document_checksum(document: Any) -> str:
    """
    SHA-256 of the compact rendering.

    Two generations from unchanged form state share a checksum, so callers can
    tell whether a regenerated document actually differs.
    """
    return hashlib.sha256(to_compact_json(document).encode("utf-8", "surrogatepass")).hexdigest()
