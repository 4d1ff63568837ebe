"""
Structural operations on formulas used by the rule checker.

- Occurrence queries (constants, variables)
- Capture-avoiding substitution of a term for a free variable
- Alpha-equivalence (equality up to renaming of bound variables)
- Instance matching: find t such that φ(x := t) equals a target
- Equality rewriting: does one formula arise from another by replacing
  occurrences of a term a with b
"""

from __future__ import annotations

from itertools import count

from .syntax import (
    Binary,
    Bottom,
    Constant,
    Equality,
    Formula,
    FunctionApplication,
    Negation,
    Node,
    Predicate,
    Quantified,
    Term,
    Variable,
    walk,
)


# =============================================================================
# Occurrences
# =============================================================================


def constant_names(node: Node) -> frozenset[str]:
    """Names of constants and function symbols occurring anywhere in ``node``."""
    return frozenset(
        n.name for n in walk(node) if isinstance(n, (Constant, FunctionApplication))
    )


def occurs(name: str, node: Node) -> bool:
    """Whether ``name`` occurs as a constant or function symbol."""
    return name in constant_names(node)


def term_variables(term: Term) -> frozenset[str]:
    return frozenset(n.name for n in walk(term) if isinstance(n, Variable))


def free_variables(formula: Formula) -> frozenset[str]:
    """Variables with at least one occurrence not under a matching quantifier."""
    if isinstance(formula, Bottom):
        return frozenset()
    if isinstance(formula, Predicate):
        return frozenset().union(*(term_variables(a) for a in formula.args))
    if isinstance(formula, Equality):
        return term_variables(formula.left) | term_variables(formula.right)
    if isinstance(formula, Negation):
        return free_variables(formula.body)
    if isinstance(formula, Binary):
        return free_variables(formula.left) | free_variables(formula.right)
    if isinstance(formula, Quantified):
        return free_variables(formula.body) - {formula.variable}
    raise TypeError(f"Not a formula: {formula!r}")


def is_ground(term: Term) -> bool:
    return not term_variables(term)


# =============================================================================
# Substitution
# =============================================================================


def substitute_term(term: Term, variable: str, replacement: Term) -> Term:
    if isinstance(term, Variable):
        return replacement if term.name == variable else term
    if isinstance(term, FunctionApplication):
        return FunctionApplication(
            term.name, tuple(substitute_term(a, variable, replacement) for a in term.args)
        )
    return term


def _fresh_variable(base: str, avoid: frozenset[str]) -> str:
    for n in count(1):
        candidate = f"{base}_{n}"
        if candidate not in avoid:
            return candidate
    raise AssertionError("unreachable")


def substitute(formula: Formula, variable: str, replacement: Term) -> Formula:
    """
    Replace every free occurrence of ``variable`` with ``replacement``.

    Bound variables that would capture a variable of ``replacement`` are
    renamed first.
    """
    if isinstance(formula, Bottom):
        return formula
    if isinstance(formula, Predicate):
        return Predicate(
            formula.name, tuple(substitute_term(a, variable, replacement) for a in formula.args)
        )
    if isinstance(formula, Equality):
        return Equality(
            substitute_term(formula.left, variable, replacement),
            substitute_term(formula.right, variable, replacement),
        )
    if isinstance(formula, Negation):
        return Negation(substitute(formula.body, variable, replacement))
    if isinstance(formula, Binary):
        return Binary(
            formula.op,
            substitute(formula.left, variable, replacement),
            substitute(formula.right, variable, replacement),
        )
    if isinstance(formula, Quantified):
        if formula.variable == variable or variable not in free_variables(formula.body):
            return formula
        bound = formula.variable
        body = formula.body
        replacement_vars = term_variables(replacement)
        if bound in replacement_vars:
            renamed = _fresh_variable(bound, replacement_vars | free_variables(body))
            body = substitute(body, bound, Variable(renamed))
            bound = renamed
        return Quantified(formula.kind, bound, substitute(body, variable, replacement))
    raise TypeError(f"Not a formula: {formula!r}")


# =============================================================================
# Matching
# =============================================================================


def _mentions(term: Term, names: dict[str, int]) -> bool:
    return any(isinstance(n, Variable) and n.name in names for n in walk(term))


class _Matcher:
    """
    Parallel walk over a pattern and a target formula.

    Bound variables are compared by the depth of their binder, so
    ``∀x P(x)`` and ``∀y P(y)`` match. When ``variable`` is set, its free
    occurrences in the pattern may stand for one consistent term of the
    target, which is recorded in ``binding``.
    """

    def __init__(self, variable: str | None = None):
        self.variable = variable
        self.binding: Term | None = None

    def formulas(
        self,
        pattern: Formula,
        target: Formula,
        bound_p: dict[str, int],
        bound_t: dict[str, int],
        depth: int = 0,
    ) -> bool:
        if type(pattern) is not type(target):
            return False
        if isinstance(pattern, Bottom):
            return True
        if isinstance(pattern, Predicate):
            return (
                pattern.name == target.name
                and len(pattern.args) == len(target.args)
                and all(
                    self.terms(p, t, bound_p, bound_t)
                    for p, t in zip(pattern.args, target.args)
                )
            )
        if isinstance(pattern, Equality):
            return self.terms(pattern.left, target.left, bound_p, bound_t) and self.terms(
                pattern.right, target.right, bound_p, bound_t
            )
        if isinstance(pattern, Negation):
            return self.formulas(pattern.body, target.body, bound_p, bound_t, depth)
        if isinstance(pattern, Binary):
            return (
                pattern.op == target.op
                and self.formulas(pattern.left, target.left, bound_p, bound_t, depth)
                and self.formulas(pattern.right, target.right, bound_p, bound_t, depth)
            )
        if isinstance(pattern, Quantified):
            if pattern.kind != target.kind:
                return False
            return self.formulas(
                pattern.body,
                target.body,
                {**bound_p, pattern.variable: depth},
                {**bound_t, target.variable: depth},
                depth + 1,
            )
        return False

    def terms(
        self,
        pattern: Term,
        target: Term,
        bound_p: dict[str, int],
        bound_t: dict[str, int],
    ) -> bool:
        if isinstance(pattern, Variable):
            if pattern.name in bound_p:
                return (
                    isinstance(target, Variable)
                    and target.name in bound_t
                    and bound_t[target.name] == bound_p[pattern.name]
                )
            if pattern.name == self.variable:
                if _mentions(target, bound_t):
                    return False
                if self.binding is None:
                    self.binding = target
                    return True
                return self.binding == target
            return (
                isinstance(target, Variable)
                and target.name == pattern.name
                and target.name not in bound_t
            )
        if isinstance(pattern, Constant):
            return isinstance(target, Constant) and target.name == pattern.name
        if isinstance(pattern, FunctionApplication):
            return (
                isinstance(target, FunctionApplication)
                and pattern.name == target.name
                and len(pattern.args) == len(target.args)
                and all(
                    self.terms(p, t, bound_p, bound_t)
                    for p, t in zip(pattern.args, target.args)
                )
            )
        return False


def alpha_equal(left: Formula, right: Formula) -> bool:
    """Structural equality up to consistent renaming of bound variables."""
    return _Matcher().formulas(left, right, {}, {})


def match_instance(
    pattern: Formula, target: Formula, variable: str
) -> tuple[bool, Term | None]:
    """
    Decide whether ``target`` is ``pattern`` with one term put in place of
    every free occurrence of ``variable``.

    Returns:
        (matched, term). ``term`` is None when ``variable`` does not occur
        free in ``pattern``.
    """
    matcher = _Matcher(variable)
    if not matcher.formulas(pattern, target, {}, {}):
        return False, None
    return True, matcher.binding


# =============================================================================
# Equality rewriting
# =============================================================================


class _Rewriter(_Matcher):
    """Matcher that also accepts ``source`` terms rewritten to ``replacement``."""

    def __init__(self, source: Term, replacement: Term):
        super().__init__()
        self.source = source
        self.replacement = replacement
        self.rewritten = 0

    def terms(
        self,
        pattern: Term,
        target: Term,
        bound_p: dict[str, int],
        bound_t: dict[str, int],
    ) -> bool:
        if (
            isinstance(pattern, FunctionApplication)
            and isinstance(target, FunctionApplication)
            and pattern.name == target.name
            and len(pattern.args) == len(target.args)
        ):
            before = self.rewritten
            if all(
                self.terms(p, t, bound_p, bound_t) for p, t in zip(pattern.args, target.args)
            ):
                return True
            self.rewritten = before
        elif super().terms(pattern, target, bound_p, bound_t):
            return True

        if (
            pattern == self.source
            and target == self.replacement
            and not _mentions(pattern, bound_p)
            and not _mentions(target, bound_t)
        ):
            self.rewritten += 1
            return True
        return False


def count_rewrites(original: Formula, result: Formula, source: Term, replacement: Term) -> int | None:
    """
    Count the positions where ``result`` replaces ``source`` by ``replacement``.

    Returns:
        Number of rewritten positions, or None if ``result`` does not arise
        from ``original`` this way.
    """
    rewriter = _Rewriter(source, replacement)
    if not rewriter.formulas(original, result, {}, {}):
        return None
    return rewriter.rewritten
