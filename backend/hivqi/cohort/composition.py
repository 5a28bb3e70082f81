"""Composition-string algebra.

Parses boolean expressions over named sub-searches, for example
``"females AND aged18AndOver"`` or ``"(a OR b) AND NOT c"``.

Grammar (keywords are case-insensitive, NOT binds tightest, then AND, then OR):
    expr    := term ("OR" term)*
    term    := factor ("AND" factor)*
    factor  := "NOT" factor | "(" expr ")" | KEY
"""

import re
from collections.abc import Mapping, Set
from dataclasses import dataclass

from hivqi.core.exceptions import CompositionError

_TOKEN = re.compile(r"\s*(?:(?P<paren>[()])|(?P<word>[A-Za-z_][A-Za-z0-9_.]*)|(?P<other>\S))")
_KEYWORDS = {"AND", "OR", "NOT"}


@dataclass(frozen=True)
class SearchRef:
    key: str

    def keys(self) -> set[str]:
        return {self.key}

    def evaluate(self, results: Mapping[str, Set[int]], universe: Set[int]) -> set[int]:
        return set(results[self.key])


@dataclass(frozen=True)
class Not:
    operand: "Expression"

    def keys(self) -> set[str]:
        return self.operand.keys()

    def evaluate(self, results: Mapping[str, Set[int]], universe: Set[int]) -> set[int]:
        return set(universe) - self.operand.evaluate(results, universe)


@dataclass(frozen=True)
class And:
    left: "Expression"
    right: "Expression"

    def keys(self) -> set[str]:
        return self.left.keys() | self.right.keys()

    def evaluate(self, results: Mapping[str, Set[int]], universe: Set[int]) -> set[int]:
        return self.left.evaluate(results, universe) & self.right.evaluate(results, universe)


@dataclass(frozen=True)
class Or:
    left: "Expression"
    right: "Expression"

    def keys(self) -> set[str]:
        return self.left.keys() | self.right.keys()

    def evaluate(self, results: Mapping[str, Set[int]], universe: Set[int]) -> set[int]:
        return self.left.evaluate(results, universe) | self.right.evaluate(results, universe)


Expression = SearchRef | Not | And | Or


def tokenize(composition: str) -> list[str]:
    """Split a composition string into keywords, parentheses and keys."""
    tokens: list[str] = []
    position = 0
    stripped = composition.rstrip()
    while position < len(stripped):
        match = _TOKEN.match(stripped, position)
        if match is None or match.group("other"):
            bad = match.group("other") if match else stripped[position:]
            raise CompositionError(f"Unexpected '{bad}' in composition '{composition}'")
        token = match.group("paren") or match.group("word")
        tokens.append(token.upper() if token.upper() in _KEYWORDS else token)
        position = match.end()
    return tokens


class _Parser:
    def __init__(self, composition: str) -> None:
        self.composition = composition
        self.tokens = tokenize(composition)
        self.position = 0

    def _peek(self) -> str | None:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise CompositionError(f"Unexpected end of composition '{self.composition}'")
        self.position += 1
        return token

    def parse(self) -> Expression:
        if not self.tokens:
            raise CompositionError("Composition string is empty")
        expression = self._expr()
        if self._peek() is not None:
            raise CompositionError(f"Unexpected '{self._peek()}' in composition '{self.composition}'")
        return expression

    def _expr(self) -> Expression:
        expression = self._term()
        while self._peek() == "OR":
            self._next()
            expression = Or(expression, self._term())
        return expression

    def _term(self) -> Expression:
        expression = self._factor()
        while self._peek() == "AND":
            self._next()
            expression = And(expression, self._factor())
        return expression

    def _factor(self) -> Expression:
        token = self._next()
        if token == "NOT":
            return Not(self._factor())
        if token == "(":
            expression = self._expr()
            if self._next() != ")":
                raise CompositionError(f"Unbalanced parentheses in composition '{self.composition}'")
            return expression
        if token in _KEYWORDS or token == ")":
            raise CompositionError(f"Unexpected '{token}' in composition '{self.composition}'")
        return SearchRef(token)


def parse_composition(composition: str) -> Expression:
    """Parse a composition string into an expression tree.

    Raises:
        CompositionError: If the string is empty or malformed.
    """
    return _Parser(composition).parse()
