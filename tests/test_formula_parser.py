"""
Tests for the first-order formula parser and renderer.

Tests cover:
1. Precedence and associativity of the connectives
2. Quantifiers, terms and identity
3. Syntax errors with positions
4. Nesting limits
5. Rendering back to text
"""

import pytest

from fitchcheck.errors import ProofSyntaxError
from fitchcheck.logic import (
    Binary,
    Bottom,
    Connective,
    Constant,
    Equality,
    FunctionApplication,
    Negation,
    Predicate,
    Quantified,
    QuantifierKind,
    Variable,
    alpha_equal,
    parse_formula,
    parse_term,
    parse_variables,
    render,
)
from fitchcheck.logic.syntax import conj, disj, iff, implies

P = Predicate("P")
Q = Predicate("Q")
R = Predicate("R")


class TestConnectives:
    """Tests for binary connectives and negation."""

    def test_conjunction_binds_tighter_than_implication(self):
        """P ∧ Q → R groups the conjunction first."""
        assert parse_formula("P ∧ Q → R") == implies(conj(P, Q), R)

    def test_disjunction_binds_looser_than_conjunction(self):
        """P ∨ Q ∧ R groups the conjunction first."""
        assert parse_formula("P ∨ Q ∧ R") == disj(P, conj(Q, R))

    def test_biconditional_is_loosest(self):
        """P → Q ↔ R groups the conditional first."""
        assert parse_formula("P → Q ↔ R") == iff(implies(P, Q), R)

    def test_implication_is_right_associative(self):
        """P → Q → R is P → (Q → R)."""
        assert parse_formula("P → Q → R") == implies(P, implies(Q, R))

    def test_conjunction_is_left_associative(self):
        """P ∧ Q ∧ R is (P ∧ Q) ∧ R."""
        assert parse_formula("P ∧ Q ∧ R") == conj(conj(P, Q), R)

    def test_parentheses_override_precedence(self):
        """Explicit grouping wins."""
        assert parse_formula("P ∧ (Q ∨ R)") == conj(P, disj(Q, R))

    def test_double_negation(self):
        """Negation nests."""
        assert parse_formula("¬¬P") == Negation(Negation(P))

    def test_bottom(self):
        """⊥ is an atomic formula."""
        assert parse_formula("⊥") == Bottom()
        assert parse_formula("¬⊥") == Negation(Bottom())

    def test_whitespace_is_insignificant(self):
        """Spacing does not change the tree."""
        assert parse_formula("P∧Q") == parse_formula("  P  ∧   Q ")


class TestQuantifiersAndTerms:
    """Tests for quantifiers, predicates, functions and identity."""

    def test_universal(self):
        """∀x P(x) binds a variable."""
        assert parse_formula("∀x P(x)") == Quantified(
            QuantifierKind.FORALL, "x", Predicate("P", (Variable("x"),))
        )

    def test_quantifier_binds_like_negation(self):
        """∀x P(x) → Q is (∀x P(x)) → Q."""
        formula = parse_formula("∀x P(x) → Q")
        assert isinstance(formula, Binary)
        assert formula.op == Connective.IMPLIES
        assert isinstance(formula.left, Quantified)

    def test_quantifier_without_space(self):
        """∀xP(x) splits off the variable prefix."""
        assert parse_formula("∀xP(x)") == parse_formula("∀x P(x)")

    def test_stacked_quantifiers(self):
        """∀x∃y reads as two binders."""
        formula = parse_formula("∀x∃y Likes(x,y)")
        assert isinstance(formula, Quantified)
        assert formula.kind == QuantifierKind.FORALL
        assert isinstance(formula.body, Quantified)
        assert formula.body.kind == QuantifierKind.EXISTS

    def test_constants_and_variables(self):
        """Only configured identifiers are variables."""
        formula = parse_formula("Likes(a, x)")
        assert formula == Predicate("Likes", (Constant("a"), Variable("x")))

    def test_custom_variables(self):
        """A custom variable set changes which names are bindable."""
        formula = parse_formula("∀t P(t)", parse_variables("t, s"))
        assert formula == Quantified(QuantifierKind.FORALL, "t", Predicate("P", (Variable("t"),)))

    def test_function_terms(self):
        """Function applications nest inside predicates."""
        formula = parse_formula("P(f(a, g(b)))")
        expected_term = FunctionApplication(
            "f", (Constant("a"), FunctionApplication("g", (Constant("b"),)))
        )
        assert formula == Predicate("P", (expected_term,))

    def test_equality(self):
        """t = s parses to an equation."""
        assert parse_formula("x = f(a)") == Equality(
            Variable("x"), FunctionApplication("f", (Constant("a"),))
        )

    def test_parse_term(self):
        """Terms can be parsed on their own."""
        assert parse_term("f(x)") == FunctionApplication("f", (Variable("x"),))


class TestSyntaxErrors:
    """Tests for malformed formulas."""

    def test_dangling_connective(self):
        """A connective without a right operand is rejected at the end."""
        with pytest.raises(ProofSyntaxError) as exc_info:
            parse_formula("P ∧")
        assert exc_info.value.position == 3

    def test_unbalanced_parenthesis(self):
        """Missing ')' is reported."""
        with pytest.raises(ProofSyntaxError, match="expected '\\)'"):
            parse_formula("(P ∧ Q")

    def test_unknown_character(self):
        """Characters outside the vocabulary are rejected with their offset."""
        with pytest.raises(ProofSyntaxError) as exc_info:
            parse_formula("P & Q")
        assert exc_info.value.position == 2

    def test_quantifier_needs_variable(self):
        """A constant cannot be bound."""
        with pytest.raises(ProofSyntaxError, match="not a bindable variable"):
            parse_formula("∀a P(a)")

    def test_bare_variable_is_not_a_formula(self):
        """x alone is a term, not a formula."""
        with pytest.raises(ProofSyntaxError, match="cannot stand alone"):
            parse_formula("x")

    def test_empty_text(self):
        """An empty formula is an error."""
        with pytest.raises(ProofSyntaxError):
            parse_formula("   ")

    def test_invalid_variable_list(self):
        """Variable lists must contain identifiers."""
        with pytest.raises(ValueError):
            parse_variables("x, 1y")


class TestNestingLimits:
    """Tests for the formula nesting guard."""

    def test_deep_parentheses_rejected(self):
        """Pathological nesting fails cleanly instead of overflowing the stack."""
        text = "(" * 5000 + "P" + ")" * 5000
        with pytest.raises(ProofSyntaxError, match="nests deeper"):
            parse_formula(text)

    def test_long_chain_rejected(self):
        """A long right-associative chain exceeds the tree-height limit."""
        text = " → ".join(["P"] * 500)
        with pytest.raises(ProofSyntaxError, match="nests deeper"):
            parse_formula(text)

    def test_limit_is_configurable(self):
        """A small limit rejects modest nesting."""
        with pytest.raises(ProofSyntaxError):
            parse_formula("¬¬¬¬P", max_depth=2)
        assert parse_formula("¬¬P", max_depth=5) == Negation(Negation(P))


class TestRender:
    """Tests for rendering formulas back to text."""

    @pytest.mark.parametrize(
        "text",
        [
            "P ∧ Q → R",
            "P → Q → R",
            "(P → Q) → R",
            "P ∧ (Q ∨ R)",
            "¬(P ∧ Q)",
            "∀x∃y Likes(x,y)",
            "∀x(P(x) → Q(x))",
            "f(a) = b",
            "¬∀x ¬P(x)",
            "(P ∧ Q) ∧ R ↔ P ∧ Q ∧ R",
        ],
    )
    def test_render_reparses_to_same_formula(self, text):
        """Rendered text reparses to an alpha-equivalent formula."""
        formula = parse_formula(text)
        assert alpha_equal(parse_formula(render(formula)), formula)

    def test_minimal_parentheses(self):
        """Only the parentheses the grammar needs are printed."""
        assert render(parse_formula("((P ∧ Q)) → (R)")) == "P ∧ Q → R"
        assert render(parse_formula("(P → Q) → R")) == "(P → Q) → R"

    def test_str_uses_render(self):
        """str() of a node is its rendering."""
        assert str(parse_formula("∀x P(x)")) == "∀x P(x)"
