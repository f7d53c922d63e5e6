"""Pydantic model for a reformat chain spec."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ReformatSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    chain_type: Literal["reformat_spec"] = "reformat_spec"
    chain_id: int = Field(ge=0)
    formatters: dict[str, str] = Field(default_factory=dict)  # output_key -> format template
    input_keys: list[str] = Field(default_factory=list)
