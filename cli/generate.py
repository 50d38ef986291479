"""Generate a vendor.json or config.json document from a saved form state.

The form file holds the same JSON the editor posts to /api/v1/dsl/<kind>.

Usage:
    uv run dsl-generate vendor vendor-form.json
    uv run dsl-generate config config-form.json --output config.json --strict
    uv run dsl-generate vendor --defaults
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dsl_builder.core.errors import DslBuilderError, MissingValidationError
from dsl_builder.domain.enums import DocumentKind
from dsl_builder.domain.models import default_config_form, default_vendor_form
from dsl_builder.generator.assembler import generate_config_dsl, generate_vendor_dsl
from dsl_builder.generator.serializer import format_dsl


def _load_form(path: str) -> dict:
    if path == "-":
        return json.load(sys.stdin)
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a DSL document from editor form state"
    )
    parser.add_argument("kind", choices=[k.value for k in DocumentKind], help="Document kind")
    parser.add_argument(
        "form",
        nargs="?",
        default=None,
        help="Form state JSON file ('-' reads stdin)",
    )
    parser.add_argument(
        "--defaults",
        action="store_true",
        help="Use the editor's initial form state instead of a file",
    )
    parser.add_argument("--output", "-o", default=None, help="Write to file instead of stdout")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Reject condition values that do not fit their comparison type",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.defaults:
        form = default_vendor_form() if args.kind == "vendor" else default_config_form()
    elif args.form:
        try:
            form = _load_form(args.form)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            print(f"[ERROR] Cannot read form {args.form}: {e}", file=sys.stderr)
            return 1
    else:
        parser.error("a form file is required unless --defaults is given")

    try:
        if args.kind == DocumentKind.VENDOR.value:
            dsl = generate_vendor_dsl(form, strict=args.strict)
        else:
            dsl = generate_config_dsl(form, strict=args.strict)
    except MissingValidationError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        return 2
    except DslBuilderError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        for error in e.details.get("errors", []):
            print(f"  - {error}", file=sys.stderr)
        return 1

    content = format_dsl(dsl)
    if args.output:
        Path(args.output).write_text(content + "\n", encoding="utf-8")
        print(f"[OK] {args.kind} document written: {args.output}")
    else:
        print(content)
    return 0


if __name__ == "__main__":
    sys.exit(main())
