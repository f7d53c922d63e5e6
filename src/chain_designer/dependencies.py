"""Input variable extraction for format templates."""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field, replace
from typing import Iterable

from chain_designer.directives import (
    DEFAULT_BINDING,
    FORMAT_EXPRESSION_RE,
    IDENTIFIER_RE,
    LOOP_BINDINGS,
    TokenKind,
    classify_token,
    split_reference,
)
from chain_designer.scanner import ExpressionScanner, ScanResult

logger = logging.getLogger(__name__)

ERROR_TOKEN = '<span class="error">ERROR</span>'


@dataclass(frozen=True)
class VariableState:
    inputs: tuple[str, ...] = ()
    internal: frozenset[str] = field(default_factory=frozenset)

    def use(self, name: str) -> "VariableState":
        # Names bound earlier in the same template are not demanded from the caller.
        if not name or name in self.internal or name in self.inputs:
            return self
        return replace(self, inputs=self.inputs + (name,))

    def bind(self, *names: str) -> "VariableState":
        return replace(self, internal=self.internal | frozenset(names))


def _var_name(name: str) -> str:
    return f'<span class="var-name">{html.escape(name)}</span>'


def _render_reference(prefix: str, argument: str, suffix: str) -> tuple[str, str]:
    name, tail = split_reference(argument)
    rendered = f'<span class="expr">{{{prefix}{_var_name(name)}{html.escape(tail)}{suffix}}}</span>'
    return name, rendered


def reduce_format_expression(state: VariableState, match: re.Match[str]) -> tuple[VariableState, str]:
    token = classify_token(match)
    if token.kind is TokenKind.ERROR:
        logger.warning("Unrecognized template expression %r", token.text)
        return state, ERROR_TOKEN

    if token.kind is TokenKind.PLAIN:
        name, rendered = _render_reference("", token.argument, "")
        return state.use(name), rendered

    binding = token.binding or DEFAULT_BINDING
    suffix = f":{html.escape(token.binding)}" if token.binding is not None else ""

    if token.directive == "expr":
        parts: list[str] = []
        position = 0
        for ident in IDENTIFIER_RE.finditer(token.argument):
            parts.append(html.escape(token.argument[position : ident.start()]))
            parts.append(_var_name(ident.group(0)))
            state = state.use(ident.group(0))
            position = ident.end()
        parts.append(html.escape(token.argument[position:]))
        rendered = f'<span class="expr">{{expr:{"".join(parts)}{suffix}}}</span>'
        return state.bind(binding), rendered

    name, rendered = _render_reference(f"{token.directive}:", token.argument, suffix)
    state = state.use(name).bind(binding)
    if token.directive == "join":
        return state.bind(*LOOP_BINDINGS), rendered
    return state, rendered


def _input_keys(state: VariableState) -> list[str]:
    return list(state.inputs)


variable_scanner: ExpressionScanner[VariableState, list[str]] = ExpressionScanner(
    FORMAT_EXPRESSION_RE,
    VariableState,
    reduce_format_expression,
    _input_keys,
)


def scan_template(template: str) -> ScanResult[VariableState, list[str]]:
    return variable_scanner.scan(template)


def extract_inputs(template: str) -> tuple[list[str], str]:
    """
    Returns the external input keys a template requires, in first-occurrence
    order, together with its highlighted HTML preview.
    """
    result = scan_template(template)
    return result.result, result.rendered


def merge_input_keys(key_lists: Iterable[Iterable[str]]) -> list[str]:
    return list(dict.fromkeys(key for keys in key_lists for key in keys))


def extract_inputs_from_templates(templates: Iterable[str]) -> list[str]:
    """Ordered union of the inputs of templates scanned independently."""
    return merge_input_keys(extract_inputs(template)[0] for template in templates)
