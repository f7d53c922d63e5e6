"""Registry of LLM backends that llm_spec nodes may reference."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from chain_designer.exceptions import UnknownLLMError
from chain_designer.models.llm_descriptor import LLMDescriptor

logger = logging.getLogger(__name__)

LLM_FILE_SUFFIXES = (".yaml", ".yml")


def load_llm_file(path: Path) -> LLMDescriptor:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"LLM file {path} must contain a mapping.")
    return LLMDescriptor.model_validate(raw)


class LLMRegistry:
    def __init__(self, llm_roots: list[Path]):
        self.llm_roots = llm_roots
        self._cache: dict[str, LLMDescriptor] = {}
        self._index: dict[str, Path] | None = None

    @classmethod
    def from_mapping(cls, llms: Mapping[str, LLMDescriptor | Mapping[str, Any]]) -> "LLMRegistry":
        registry = cls([])
        registry._index = {}
        for llm_key, descriptor in llms.items():
            if isinstance(descriptor, LLMDescriptor):
                registry._cache[llm_key] = descriptor
            else:
                registry._cache[llm_key] = LLMDescriptor.model_validate(dict(descriptor))
        return registry

    def _build_index(self) -> dict[str, Path]:
        index: dict[str, Path] = {}
        for root in self.llm_roots:
            if not root.exists():
                continue
            for path in sorted(root.rglob("*")):
                if path.suffix.lower() not in LLM_FILE_SUFFIXES:
                    continue
                llm_key = path.stem
                if llm_key in index:
                    logger.warning("Ignoring duplicate LLM %s at %s", llm_key, path)
                    continue
                index[llm_key] = path
        return index

    def _get_index(self) -> dict[str, Path]:
        if self._index is None:
            self._index = self._build_index()
        return self._index

    def list_llms(self) -> list[str]:
        return sorted(set(self._get_index()) | set(self._cache))

    def default_key(self) -> str:
        llms = self.list_llms()
        return llms[0] if llms else ""

    def __contains__(self, llm_key: object) -> bool:
        return isinstance(llm_key, str) and llm_key in self.list_llms()

    def get(self, llm_key: str) -> LLMDescriptor:
        if llm_key in self._cache:
            return self._cache[llm_key]
        path = self._get_index().get(llm_key)
        if path is None:
            raise UnknownLLMError(llm_key)
        descriptor = load_llm_file(path)
        self._cache[llm_key] = descriptor
        return descriptor

    def labels(self) -> dict[str, str]:
        """llm_key -> display name, for picking a backend on an llm_spec."""
        return {llm_key: self.get(llm_key).display_name(llm_key) for llm_key in self.list_llms()}

    def build_model(self, llm_key: str) -> OpenAIChatModel:
        return build_model(self.get(llm_key))


def build_model(descriptor: LLMDescriptor) -> OpenAIChatModel:
    api_key = os.environ.get(descriptor.api_key_env, "noop")
    provider = OpenAIProvider(base_url=descriptor.base_url, api_key=api_key)
    return OpenAIChatModel(descriptor.model_name, provider=provider)
