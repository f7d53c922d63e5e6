"""Single-pass template scanner with threaded reducer state."""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

S = TypeVar("S")
R = TypeVar("R")

Reducer = Callable[[S, re.Match[str]], tuple[S, str]]


@dataclass(frozen=True)
class ScanResult(Generic[S, R]):
    state: S
    rendered: str
    result: R


class ExpressionScanner(Generic[S, R]):
    """
    Walks a string left to right, replacing each pattern match with the text
    returned by ``reduce`` and threading its state between matches.
    Text between matches is escaped and passed through. ``finalize`` runs once
    on the final state.
    """

    def __init__(
        self,
        pattern: re.Pattern[str],
        initial: Callable[[], S],
        reduce: Reducer[S],
        finalize: Callable[[S], R],
        escape: Callable[[str], str] = html.escape,
    ) -> None:
        self._pattern = pattern
        self._initial = initial
        self._reduce = reduce
        self._finalize = finalize
        self._escape = escape

    def scan(self, text: str) -> ScanResult[S, R]:
        state = self._initial()
        parts: list[str] = []
        position = 0
        for match in self._pattern.finditer(text):
            parts.append(self._escape(text[position : match.start()]))
            state, rendered = self._reduce(state, match)
            parts.append(rendered)
            position = match.end()
        parts.append(self._escape(text[position:]))
        return ScanResult(state=state, rendered="".join(parts), result=self._finalize(state))
