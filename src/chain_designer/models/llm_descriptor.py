"""Pydantic model for a registered LLM backend."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LLMDescriptor(BaseModel):
    model_name: str
    label: str = ""  # shown in place of the llm_key when set
    provider: str = Field(default="openai-compatible")
    base_url: str = Field(default="https://api.openai.com/v1")
    api_key_env: str = Field(default="OPENAI_API_KEY")
    temperature: float = 0.2
    max_tokens: int = 2048

    def display_name(self, llm_key: str) -> str:
        return self.label or llm_key
