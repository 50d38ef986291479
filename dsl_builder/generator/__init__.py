"""
DSL document generator.

This package turns editable rule-tree state into the vendor.json and
config.json documents read by the request-processing engine.

Key Components:
- assembler: Folds form state into VendorDSL / ConfigDSL
- documents: Canonical document shapes (field order = key order)
- serializer: Deterministic JSON rendering
- validator: Optional condition value shape checks

Design Principles:
- Determinism: Same form state produces byte-for-byte identical output
- Purity: Generation reads a snapshot and never mutates it
- Pass-through: Condition values are emitted verbatim unless strict mode is on
"""

from dsl_builder.generator.assembler import generate_config_dsl, generate_vendor_dsl
from dsl_builder.generator.serializer import document_checksum, format_dsl

__all__ = [
    "generate_vendor_dsl",
    "generate_config_dsl",
    "format_dsl",
    "document_checksum",
]
