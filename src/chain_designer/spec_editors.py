"""Per-variant edits that keep derived fields in sync with template text."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional, Sequence

from chain_designer.dependencies import extract_inputs, extract_inputs_from_templates
from chain_designer.json_utils import parse_string_mapping
from chain_designer.models.api_spec import APISpec
from chain_designer.models.chain_spec import CaseSpec, ChainSpec
from chain_designer.models.llm_spec import LLMSpec
from chain_designer.models.reformat_spec import ReformatSpec
from chain_designer.tree import chain_branches, with_branches

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiSpecEdit:
    spec: APISpec
    headers_error: bool = False
    headers_text: Optional[str] = None


def _api_templates(spec: APISpec) -> Iterator[str]:
    yield spec.url
    yield spec.method
    for name, value in spec.headers.items():
        yield name
        yield value
    if spec.body:
        yield spec.body


def derive_input_keys(spec: ChainSpec) -> list[str]:
    """Input keys of a leaf computed from its own template text; containers have none."""
    if isinstance(spec, LLMSpec):
        return extract_inputs(spec.prompt)[0]
    if isinstance(spec, ReformatSpec):
        return extract_inputs_from_templates(spec.formatters.values())
    if isinstance(spec, APISpec):
        return extract_inputs_from_templates(_api_templates(spec))
    return []


def refresh_input_keys(spec: ChainSpec) -> ChainSpec:
    if isinstance(spec, (LLMSpec, ReformatSpec, APISpec)):
        return spec.model_copy(update={"input_keys": derive_input_keys(spec)})
    return spec


def edit_llm_spec(
    spec: LLMSpec,
    *,
    prompt: Optional[str] = None,
    llm_key: Optional[str] = None,
    output_key: Optional[str] = None,
) -> LLMSpec:
    update: dict[str, object] = {}
    if prompt is not None:
        update["prompt"] = prompt
        update["input_keys"] = extract_inputs(prompt)[0]
    if llm_key is not None:
        update["llm_key"] = llm_key
    if output_key is not None:
        update["output_key"] = output_key
    return spec.model_copy(update=update)


def edit_reformat_spec(spec: ReformatSpec, formatters: Mapping[str, str]) -> ReformatSpec:
    new_formatters = dict(formatters)
    return spec.model_copy(
        update={
            "formatters": new_formatters,
            "input_keys": extract_inputs_from_templates(new_formatters.values()),
        }
    )


def add_formatter(spec: ReformatSpec) -> ReformatSpec:
    counter = len(spec.formatters)
    key = f"output_key_{counter}"
    while key in spec.formatters:
        counter += 1
        key = f"output_key_{counter}"
    return edit_reformat_spec(spec, {**spec.formatters, key: ""})


def edit_api_spec(
    spec: APISpec,
    *,
    url: Optional[str] = None,
    method: Optional[str] = None,
    headers_text: Optional[str] = None,
    body: Optional[str] = None,
    output_key: Optional[str] = None,
) -> ApiSpecEdit:
    """
    Apply API form values. Header text that does not parse keeps the previous
    headers and is handed back with headers_error set.
    """
    update: dict[str, object] = {}
    headers_error = False
    if url is not None:
        update["url"] = url
    if method is not None:
        update["method"] = method
    if headers_text is not None:
        try:
            update["headers"] = parse_string_mapping(headers_text)
        except ValueError as exc:
            logger.warning("Keeping previous headers for api_spec %d: %s", spec.chain_id, exc)
            headers_error = True
    if body is not None:
        update["body"] = body or None
    if output_key is not None:
        update["output_key"] = output_key
    edited = spec.model_copy(update=update)
    edited = edited.model_copy(update={"input_keys": derive_input_keys(edited)})
    return ApiSpecEdit(spec=edited, headers_error=headers_error, headers_text=headers_text)


def edit_case_spec(
    spec: CaseSpec,
    *,
    categorization_key: Optional[str] = None,
    labels: Optional[Sequence[Optional[str]]] = None,
) -> CaseSpec:
    """
    Relabel branches by position in chain_branches order. A None label moves
    a branch into the default slot.
    """
    edited = spec
    if labels is not None:
        branches = chain_branches(spec)
        if len(labels) != len(branches):
            raise ValueError(f"Expected {len(branches)} labels for case_spec {spec.chain_id}, got {len(labels)}.")
        named = [label for label in labels if label is not None]
        if len(set(named)) != len(named):
            raise ValueError(f"Duplicate case labels for case_spec {spec.chain_id}.")
        if len(labels) - len(named) > 1:
            raise ValueError(f"case_spec {spec.chain_id} can hold only one default case.")
        relabeled = with_branches(spec, [(label, chain) for label, (_, chain) in zip(labels, branches)])
        if not isinstance(relabeled, CaseSpec):
            raise TypeError("Relabeling must preserve the case_spec variant.")
        edited = relabeled
    if categorization_key is not None:
        edited = edited.model_copy(update={"categorization_key": categorization_key})
    return edited
