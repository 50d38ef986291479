from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class GenerateResponse(BaseModel):
    """Generated document in both structured and rendered form."""

    document: dict[str, Any]
    content: str = Field(description="Pretty-printed JSON, ready to copy or download")
    checksum: str = Field(description="SHA-256 of the compact JSON rendering")


class OptionsResponse(BaseModel):
    """Closed value sets offered by the editor's select inputs."""

    methods: list[str]
    retry_cases: list[str]
    condition_types: list[str]
    operators: list[str]
    data_types: list[str]
