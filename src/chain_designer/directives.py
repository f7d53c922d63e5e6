"""Template directive grammar.

A template is plain text interleaved with bracketed expressions. Two shapes
are recognized:

    {name<tail>}                 plain reference to an external variable
    {directive:name<tail>:out}   one of DIRECTIVES, binding ``out`` internally

``expr`` takes a free-form expression as its first argument instead of a
single reference. Anything else between braces that contains a colon, or that
has no leading name, is an error token.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

DIRECTIVES = ("join", "parse_json", "let", "int", "float", "expr")
LOOP_BINDINGS = ("item", "index")
DEFAULT_BINDING = "data"

FORMAT_EXPRESSION_RE = re.compile(
    r"\{(join|parse_json|let|expr|int|float):([^:{}]+)(?::([^:{}]+))?\}"
    r"|\{([^{}]*)\}"
)
LEADING_NAME_RE = re.compile(r"^[_A-Za-z0-9]+")
IDENTIFIER_RE = re.compile(r"[_A-Za-z][_A-Za-z0-9]*")


class TokenKind(str, Enum):
    DIRECTIVE = "directive"
    PLAIN = "plain"
    ERROR = "error"


@dataclass(frozen=True)
class FormatToken:
    kind: TokenKind
    text: str
    directive: Optional[str] = None
    argument: str = ""
    binding: Optional[str] = None


def split_reference(expression: str) -> tuple[str, str]:
    """Split ``name<tail>`` into the leading name and the untouched tail."""
    match = LEADING_NAME_RE.match(expression)
    name = match.group(0) if match else ""
    return name, expression[len(name) :]


def classify_token(match: re.Match[str]) -> FormatToken:
    directive, argument, binding, plain = match.groups()
    text = match.group(0)
    if directive is not None:
        if directive != "expr" and not split_reference(argument)[0]:
            return FormatToken(kind=TokenKind.ERROR, text=text)
        return FormatToken(
            kind=TokenKind.DIRECTIVE,
            text=text,
            directive=directive,
            argument=argument,
            binding=binding,
        )
    if ":" in plain or not split_reference(plain)[0]:
        return FormatToken(kind=TokenKind.ERROR, text=text)
    return FormatToken(kind=TokenKind.PLAIN, text=text, argument=plain)
