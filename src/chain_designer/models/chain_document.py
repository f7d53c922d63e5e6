"""Pydantic model for a persisted chain document."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from chain_designer.models.chain_spec import ChainSpec


class ChainDocument(BaseModel):
    name: str = ""
    revision: Optional[str] = None
    chain: Optional[ChainSpec] = None
