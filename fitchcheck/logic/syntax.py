"""
Abstract syntax for first-order formulas.

Terms:
- Variable: an identifier from the configured bindable set (x, y, ...)
- Constant: any other bare identifier, including fresh box constants
- FunctionApplication: f(t1, ..., tn)

Formulas:
- Bottom (⊥), Predicate, Equality
- Negation, Binary (∧ ∨ → ↔), Quantified (∀ ∃)

All nodes are frozen dataclasses, so structural equality is plain ``==``.
Alpha-equivalence lives in ``operations``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Union


class Connective(Enum):
    """Binary connectives, valued by their symbol."""

    AND = "∧"
    OR = "∨"
    IMPLIES = "→"
    IFF = "↔"


class QuantifierKind(Enum):
    """Quantifiers, valued by their symbol."""

    FORALL = "∀"
    EXISTS = "∃"


BOTTOM_SYMBOL = "⊥"
NEGATION_SYMBOL = "¬"
EQUALS_SYMBOL = "="


class _Node:
    """Shared behaviour for every syntax node."""

    __slots__ = ()

    def __str__(self) -> str:
        return render(self)  # type: ignore[arg-type]


# =============================================================================
# Terms
# =============================================================================


@dataclass(frozen=True)
class Variable(_Node):
    name: str


@dataclass(frozen=True)
class Constant(_Node):
    name: str


@dataclass(frozen=True)
class FunctionApplication(_Node):
    name: str
    args: tuple["Term", ...] = ()


Term = Union[Variable, Constant, FunctionApplication]


# =============================================================================
# Formulas
# =============================================================================


@dataclass(frozen=True)
class Bottom(_Node):
    pass


@dataclass(frozen=True)
class Predicate(_Node):
    name: str
    args: tuple[Term, ...] = ()


@dataclass(frozen=True)
class Equality(_Node):
    left: Term
    right: Term


@dataclass(frozen=True)
class Negation(_Node):
    body: "Formula"


@dataclass(frozen=True)
class Binary(_Node):
    op: Connective
    left: "Formula"
    right: "Formula"


@dataclass(frozen=True)
class Quantified(_Node):
    kind: QuantifierKind
    variable: str
    body: "Formula"


Formula = Union[Bottom, Predicate, Equality, Negation, Binary, Quantified]
Node = Union[Term, Formula]

TERM_TYPES = (Variable, Constant, FunctionApplication)
FORMULA_TYPES = (Bottom, Predicate, Equality, Negation, Binary, Quantified)


# Convenience constructors used by the checker and tests


def conj(left: Formula, right: Formula) -> Binary:
    return Binary(Connective.AND, left, right)


def disj(left: Formula, right: Formula) -> Binary:
    return Binary(Connective.OR, left, right)


def implies(left: Formula, right: Formula) -> Binary:
    return Binary(Connective.IMPLIES, left, right)


def iff(left: Formula, right: Formula) -> Binary:
    return Binary(Connective.IFF, left, right)


def is_binary(formula: Formula, op: Connective) -> bool:
    return isinstance(formula, Binary) and formula.op == op


# =============================================================================
# Traversal
# =============================================================================


def children(node: Node) -> tuple[Node, ...]:
    """Direct sub-nodes of a term or formula, left to right."""
    if isinstance(node, (FunctionApplication, Predicate)):
        return node.args
    if isinstance(node, Equality):
        return (node.left, node.right)
    if isinstance(node, Negation):
        return (node.body,)
    if isinstance(node, Binary):
        return (node.left, node.right)
    if isinstance(node, Quantified):
        return (node.body,)
    return ()


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal using an explicit stack."""
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


def node_height(node: Node) -> int:
    """Height of the syntax tree (a leaf has height 1), computed iteratively."""
    height = 0
    stack: list[tuple[Node, int]] = [(node, 1)]
    while stack:
        current, depth = stack.pop()
        height = max(height, depth)
        for child in children(current):
            stack.append((child, depth + 1))
    return height


# =============================================================================
# Rendering
# =============================================================================

# Binding strength, loosest first. Quantifiers and negation share a level.
_PRECEDENCE = {
    Connective.IFF: 1,
    Connective.IMPLIES: 2,
    Connective.OR: 3,
    Connective.AND: 4,
}
_UNARY = 5
_ATOMIC = 6

_RIGHT_ASSOCIATIVE = {Connective.IFF, Connective.IMPLIES}


def _precedence(formula: Formula) -> int:
    if isinstance(formula, Binary):
        return _PRECEDENCE[formula.op]
    if isinstance(formula, (Negation, Quantified)):
        return _UNARY
    return _ATOMIC


def _render_term(term: Term) -> str:
    if isinstance(term, FunctionApplication):
        return f"{term.name}({','.join(_render_term(a) for a in term.args)})"
    return term.name


def _wrap(formula: Formula, needs_parens: bool) -> str:
    text = render(formula)
    return f"({text})" if needs_parens else text


def render(node: Node) -> str:
    """
    Render a term or formula with the fewest parentheses that reparse
    to the same tree.
    """
    if isinstance(node, TERM_TYPES):
        return _render_term(node)  # type: ignore[arg-type]

    if isinstance(node, Bottom):
        return BOTTOM_SYMBOL

    if isinstance(node, Predicate):
        if not node.args:
            return node.name
        return f"{node.name}({','.join(_render_term(a) for a in node.args)})"

    if isinstance(node, Equality):
        return f"{_render_term(node.left)} {EQUALS_SYMBOL} {_render_term(node.right)}"

    if isinstance(node, Negation):
        return NEGATION_SYMBOL + _wrap(node.body, _precedence(node.body) < _UNARY)

    if isinstance(node, Quantified):
        body = _wrap(node.body, _precedence(node.body) < _UNARY)
        # Keep the variable from running into an identifier
        separator = " " if body[0].isalnum() or body[0] == "_" else ""
        return f"{node.kind.value}{node.variable}{separator}{body}"

    if isinstance(node, Binary):
        level = _PRECEDENCE[node.op]
        left_level = _precedence(node.left)
        right_level = _precedence(node.right)
        if node.op in _RIGHT_ASSOCIATIVE:
            left = _wrap(node.left, left_level <= level)
            right = _wrap(node.right, right_level < level)
        else:
            left = _wrap(node.left, left_level < level)
            right = _wrap(node.right, right_level <= level)
        return f"{left} {node.op.value} {right}"

    raise TypeError(f"Not a syntax node: {node!r}")
