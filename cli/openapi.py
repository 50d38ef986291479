"""Write the OpenAPI schema of the HTTP service to docs/openapi.json.

Usage:
    uv run openapi [--output docs/openapi.json]
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from dsl_builder.main import create_app


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate the OpenAPI schema")
    parser.add_argument(
        "--output",
        "-o",
        default="docs/openapi.json",
        help="Destination file (default: docs/openapi.json)",
    )
    args = parser.parse_args()

    schema = create_app().openapi()

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2)
        f.write("\n")

    print(f"[OK] OpenAPI schema generated: {output}")
    print(f"   Title: {schema['info']['title']}")
    print(f"   Version: {schema['info']['version']}")
    print(f"   Endpoints: {len(schema['paths'])} paths")


if __name__ == "__main__":
    main()
