"""
Recursive-descent parser for first-order formulas in Fitch notation.

Grammar, loosest binding first:

    formula  := iff
    iff      := implies ('↔' implies)*        right-associative
    implies  := or ('→' or)*                  right-associative
    or       := and ('∨' and)*                left-associative
    and      := unary ('∧' unary)*            left-associative
    unary    := '¬' unary | ('∀'|'∃') VAR unary | atomic
    atomic   := '⊥' | '(' formula ')' | term '=' term | NAME ['(' terms ')']
    term     := NAME ['(' terms ')']

Identifiers listed in the bindable-variable set parse as variables, every
other bare identifier as a constant. Nesting is bounded so that deeply
nested input is rejected instead of exhausting the interpreter stack.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from ..errors import ProofSyntaxError
from .syntax import (
    BOTTOM_SYMBOL,
    EQUALS_SYMBOL,
    NEGATION_SYMBOL,
    Binary,
    Bottom,
    Connective,
    Constant,
    Equality,
    Formula,
    FunctionApplication,
    Negation,
    Predicate,
    Quantified,
    QuantifierKind,
    Term,
    Variable,
    node_height,
)

DEFAULT_VARIABLE_LIST = "x,y,z,u,v,w"
DEFAULT_VARIABLES = frozenset(DEFAULT_VARIABLE_LIST.split(","))
DEFAULT_MAX_DEPTH = 100

IDENTIFIER = re.compile(r"[^\W\d]\w*")
_WHITESPACE = re.compile(r"\s+")

_CONNECTIVES = {c.value: c for c in Connective}
_QUANTIFIERS = {q.value: q for q in QuantifierKind}
_PUNCTUATION = {"(", ")", ",", EQUALS_SYMBOL, NEGATION_SYMBOL, BOTTOM_SYMBOL}

# Binding strength of the binary connectives, tightest highest
_BINDING = {
    Connective.IFF: 1,
    Connective.IMPLIES: 2,
    Connective.OR: 3,
    Connective.AND: 4,
}
_RIGHT_ASSOCIATIVE = {Connective.IFF, Connective.IMPLIES}


def _reduces_before(top: Connective, incoming: Connective) -> bool:
    """Whether the stacked operator must be applied before pushing ``incoming``."""
    if _BINDING[top] != _BINDING[incoming]:
        return _BINDING[top] > _BINDING[incoming]
    return incoming not in _RIGHT_ASSOCIATIVE


def _reduce(operands: list[Formula], operators: list[Connective]) -> None:
    op = operators.pop()
    right = operands.pop()
    left = operands.pop()
    operands.append(Binary(op, left, right))


@dataclass
class Token:
    kind: str  # "name", "symbol" or "end"
    text: str
    position: int


def tokenize(text: str) -> list[Token]:
    """Split formula text into tokens. Whitespace is insignificant."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        if match := _WHITESPACE.match(text, pos):
            pos = match.end()
            continue
        if match := IDENTIFIER.match(text, pos):
            tokens.append(Token("name", match.group(), pos))
            pos = match.end()
            continue
        char = text[pos]
        if char in _CONNECTIVES or char in _QUANTIFIERS or char in _PUNCTUATION:
            tokens.append(Token("symbol", char, pos))
            pos += 1
            continue
        raise ProofSyntaxError(f"unexpected character '{char}'", position=pos)
    tokens.append(Token("end", "", len(text)))
    return tokens


def parse_variables(text: str | Iterable[str]) -> frozenset[str]:
    """
    Parse a comma-separated list of bindable variable names.

    Raises:
        ValueError: if a name is not an identifier
    """
    names = text.split(",") if isinstance(text, str) else list(text)
    result = set()
    for raw in names:
        name = raw.strip()
        if not name:
            continue
        if not IDENTIFIER.fullmatch(name):
            raise ValueError(f"Invalid variable name '{name}'")
        result.add(name)
    return frozenset(result)


class FormulaParser:
    """
    Parser for a single formula (or term) span.

    Args:
        variables: Identifiers a quantifier may bind
        max_depth: Maximum nesting depth and syntax-tree height
    """

    def __init__(
        self,
        variables: Iterable[str] = DEFAULT_VARIABLES,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.variables = frozenset(variables)
        self.max_depth = max_depth
        self._tokens: list[Token] = []
        self._index = 0
        self._depth = 0

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def parse(self, text: str) -> Formula:
        """Parse ``text`` as a complete formula."""
        self._reset(text)
        formula = self._parse_expression()
        self._expect_end()
        self._check_height(formula)
        return formula

    def parse_term(self, text: str) -> Term:
        """Parse ``text`` as a complete term."""
        self._reset(text)
        term = self._parse_term()
        self._expect_end()
        self._check_height(term)
        return term

    # -------------------------------------------------------------------------
    # Token handling
    # -------------------------------------------------------------------------

    def _reset(self, text: str) -> None:
        self._tokens = tokenize(text)
        self._index = 0
        self._depth = 0
        if self._tokens[0].kind == "end":
            raise ProofSyntaxError("expected a formula", position=0)

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind != "end":
            self._index += 1
        return token

    def _at(self, text: str) -> bool:
        token = self._peek()
        return token.kind == "symbol" and token.text == text

    def _expect(self, text: str) -> Token:
        token = self._peek()
        if not self._at(text):
            raise ProofSyntaxError(
                f"expected '{text}' but found {_describe(token)}", position=token.position
            )
        return self._advance()

    def _expect_end(self) -> None:
        token = self._peek()
        if token.kind != "end":
            raise ProofSyntaxError(f"unexpected {_describe(token)}", position=token.position)

    def _enter(self, token: Token) -> None:
        self._depth += 1
        if self._depth > self.max_depth:
            raise ProofSyntaxError(
                f"formula nests deeper than {self.max_depth} levels", position=token.position
            )

    def _leave(self) -> None:
        self._depth -= 1

    def _check_height(self, node: Formula | Term) -> None:
        if node_height(node) > self.max_depth:
            raise ProofSyntaxError(
                f"formula nests deeper than {self.max_depth} levels", position=0
            )

    # -------------------------------------------------------------------------
    # Binary connectives
    # -------------------------------------------------------------------------

    def _parse_expression(self) -> Formula:
        """
        Operator-precedence loop over the binary connectives.

        Only parentheses and unary operators recurse, so a long chain such as
        ``P → Q → ... → Z`` does not grow the interpreter stack.
        """
        operands = [self._parse_unary()]
        operators: list[Connective] = []
        while (op := self._binary_operator()) is not None:
            self._advance()
            while operators and _reduces_before(operators[-1], op):
                _reduce(operands, operators)
            operators.append(op)
            operands.append(self._parse_unary())
        while operators:
            _reduce(operands, operators)
        return operands[0]

    def _binary_operator(self) -> Connective | None:
        token = self._peek()
        if token.kind != "symbol":
            return None
        return _CONNECTIVES.get(token.text)

    # -------------------------------------------------------------------------
    # Unary and atomic formulas
    # -------------------------------------------------------------------------

    def _parse_unary(self) -> Formula:
        token = self._peek()

        if self._at(NEGATION_SYMBOL):
            self._advance()
            self._enter(token)
            body = self._parse_unary()
            self._leave()
            return Negation(body)

        if token.kind == "symbol" and token.text in _QUANTIFIERS:
            self._advance()
            variable = self._parse_bound_variable()
            self._enter(token)
            body = self._parse_unary()
            self._leave()
            return Quantified(_QUANTIFIERS[token.text], variable, body)

        return self._parse_atomic()

    def _parse_bound_variable(self) -> str:
        token = self._peek()
        if token.kind != "name":
            raise ProofSyntaxError(
                f"expected a variable after quantifier but found {_describe(token)}",
                position=token.position,
            )
        self._advance()
        if token.text in self.variables:
            return token.text

        # "∀xP(x)": bind the longest variable prefix, keep the rest as a name
        for cut in range(len(token.text) - 1, 0, -1):
            prefix = token.text[:cut]
            if prefix in self.variables:
                rest = Token("name", token.text[cut:], token.position + cut)
                self._tokens.insert(self._index, rest)
                return prefix

        raise ProofSyntaxError(
            f"'{token.text}' is not a bindable variable", position=token.position
        )

    def _parse_atomic(self) -> Formula:
        token = self._peek()

        if self._at(BOTTOM_SYMBOL):
            self._advance()
            return Bottom()

        if self._at("("):
            self._advance()
            self._enter(token)
            formula = self._parse_expression()
            self._leave()
            self._expect(")")
            return formula

        if token.kind != "name":
            raise ProofSyntaxError(
                f"expected a formula but found {_describe(token)}", position=token.position
            )

        self._advance()
        args = self._parse_arguments(token) if self._at("(") else None

        if self._at(EQUALS_SYMBOL):
            self._advance()
            left = self._make_term(token.text, args)
            right = self._parse_term()
            return Equality(left, right)

        if token.text in self.variables and args is None:
            raise ProofSyntaxError(
                f"variable '{token.text}' cannot stand alone as a formula",
                position=token.position,
            )
        return Predicate(token.text, args or ())

    # -------------------------------------------------------------------------
    # Terms
    # -------------------------------------------------------------------------

    def _parse_term(self) -> Term:
        token = self._peek()
        if token.kind != "name":
            raise ProofSyntaxError(
                f"expected a term but found {_describe(token)}", position=token.position
            )
        self._advance()
        args = self._parse_arguments(token) if self._at("(") else None
        return self._make_term(token.text, args)

    def _parse_arguments(self, head: Token) -> tuple[Term, ...]:
        self._expect("(")
        self._enter(head)
        args: list[Term] = []
        if not self._at(")"):
            args.append(self._parse_term())
            while self._at(","):
                self._advance()
                args.append(self._parse_term())
        self._leave()
        self._expect(")")
        return tuple(args)

    def _make_term(self, name: str, args: tuple[Term, ...] | None) -> Term:
        if args is not None:
            return FunctionApplication(name, args)
        if name in self.variables:
            return Variable(name)
        return Constant(name)


def _describe(token: Token) -> str:
    if token.kind == "end":
        return "end of formula"
    return f"'{token.text}'"


def parse_formula(
    text: str,
    variables: Iterable[str] = DEFAULT_VARIABLES,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Formula:
    """Parse a formula, raising ProofSyntaxError with the offending position."""
    return FormulaParser(variables, max_depth).parse(text)


def parse_term(
    text: str,
    variables: Iterable[str] = DEFAULT_VARIABLES,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Term:
    """Parse a term, raising ProofSyntaxError with the offending position."""
    return FormulaParser(variables, max_depth).parse_term(text)
