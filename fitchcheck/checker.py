"""
Rule checker for Fitch proofs.

Walks the parsed proof top to bottom and verifies each justified line
against its rule, using the scope tracker for visibility and structural
comparison (up to renaming of bound variables) for formulas.

Problems are collected per line; checking always continues to the end so
one pass reports every defect.
"""

from __future__ import annotations

import logging
from typing import Callable

from .errors import ProofError, ProofSyntaxError, RuleViolationError, ScopeError
from .logic.operations import (
    alpha_equal,
    count_rewrites,
    is_ground,
    match_instance,
    occurs,
    substitute,
)
from .logic.parser import DEFAULT_MAX_DEPTH, DEFAULT_VARIABLE_LIST, parse_variables
from .logic.syntax import (
    Binary,
    Bottom,
    Connective,
    Constant,
    Equality,
    Formula,
    Negation,
    Quantified,
    QuantifierKind,
    implies,
    is_binary,
)
from .models import Box, Justification, LineKind, Proof, ProofLine, ProofResult, Reference
from .proof.scope import ScopeTracker
from .proof.structure import DEFAULT_MAX_BOX_DEPTH, parse_proof
from .rulebook import DEFAULT_RULESET, Rule, RuleSet

logger = logging.getLogger(__name__)


class ProofChecker:
    """
    Verifies every line of a parsed proof.

    Args:
        proof: Output of the proof-structure parser
        ruleset: Rules that justifications may use
    """

    def __init__(self, proof: Proof, ruleset: RuleSet = DEFAULT_RULESET):
        self.proof = proof
        self.ruleset = ruleset
        self.scope = ScopeTracker(proof)
        self._handlers: dict[Rule, Callable[[int, Formula, Justification], None]] = {
            Rule.REIT: self._check_reit,
            Rule.AND_INTRO: self._check_and_intro,
            Rule.AND_ELIM: self._check_and_elim,
            Rule.OR_INTRO: self._check_or_intro,
            Rule.OR_ELIM: self._check_or_elim,
            Rule.NOT_INTRO: self._check_not_intro,
            Rule.NOT_ELIM: self._check_not_elim,
            Rule.DOUBLE_NEG_ELIM: self._check_double_neg_elim,
            Rule.IMPLIES_INTRO: self._check_implies_intro,
            Rule.IMPLIES_ELIM: self._check_implies_elim,
            Rule.IFF_INTRO: self._check_iff_intro,
            Rule.IFF_ELIM: self._check_iff_elim,
            Rule.BOTTOM_ELIM: self._check_bottom_elim,
            Rule.FORALL_INTRO: self._check_forall_intro,
            Rule.FORALL_ELIM: self._check_forall_elim,
            Rule.EXISTS_INTRO: self._check_exists_intro,
            Rule.EXISTS_ELIM: self._check_exists_elim,
            Rule.EQ_INTRO: self._check_eq_intro,
            Rule.EQ_ELIM: self._check_eq_elim,
        }

    def check(self) -> ProofResult:
        issues = []
        for index, line in enumerate(self.proof.lines):
            try:
                self._check_line(index, line)
            except (ScopeError, RuleViolationError) as exc:
                exc.locate(label=line.label)
                exc.issue.row = line.row
                logger.debug("Rejected %s", exc.issue.message)
                issues.append(exc.issue)

        if issues:
            return ProofResult.error(issues)
        return ProofResult.correct()

    # -------------------------------------------------------------------------
    # Per-line dispatch
    # -------------------------------------------------------------------------

    def _check_line(self, index: int, line: ProofLine) -> None:
        if line.is_structural or line.kind == LineKind.PREMISE:
            return

        justification = line.justification
        if line.kind == LineKind.ASSUMPTION:
            if justification is not None:
                raise RuleViolationError("an assumption cannot carry a justification")
            return

        if justification is None:
            raise RuleViolationError("missing justification")

        info = self.ruleset.lookup(justification.rule_text)
        if info is None:
            if DEFAULT_RULESET.lookup(justification.rule_text) is not None:
                raise RuleViolationError(
                    f"rule {justification.rule_text} is not allowed in this rule set"
                )
            raise RuleViolationError(f"unknown rule '{justification.rule_text}'")

        is_valid, error = self.ruleset.validate_references(info, justification)
        if not is_valid:
            raise RuleViolationError(error, rule=info.name)

        if line.formula is None:
            raise RuleViolationError("missing formula", rule=info.name)
        try:
            self._handlers[info.rule](index, line.formula, justification)
        except ProofError as exc:
            exc.locate(rule=info.name)
            raise
        logger.debug("Line %s: %s accepted", line.label, info.name)

    # -------------------------------------------------------------------------
    # Citation helpers
    # -------------------------------------------------------------------------

    def _cite(self, index: int, reference: Reference) -> Formula:
        line = self.scope.resolve_line(index, reference)
        if line.formula is None:
            raise RuleViolationError(f"line {reference.start} has no formula to cite")
        return line.formula

    def _cite_all(self, index: int, justification: Justification) -> list[Formula]:
        return [self._cite(index, ref) for ref in justification.labels]

    def _subproof(self, index: int, reference: Reference) -> tuple[Box, ProofLine, Formula]:
        """Resolve a range to (box, assumption line, concluded formula)."""
        box = self.scope.resolve_box(index, reference)
        assumption = self.scope.assumption(box)
        conclusion = self.scope.conclusion(box)
        if conclusion.depth != box.depth:
            raise RuleViolationError(
                f"subproof {reference} must end with a line at its own depth"
            )
        if conclusion.formula is None:
            raise RuleViolationError(f"subproof {reference} has no conclusion")
        return box, assumption, conclusion.formula

    def _plain_subproof(self, index: int, reference: Reference) -> tuple[Formula, Formula]:
        """Resolve a range to (assumed formula, concluded formula)."""
        _, assumption, concluded = self._subproof(index, reference)
        if assumption.fresh_constant:
            raise RuleViolationError(
                f"subproof {reference} introduces [{assumption.fresh_constant}]; "
                "only ∀Intro or ∃Elim can discharge it"
            )
        if assumption.formula is None:
            raise RuleViolationError(f"subproof {reference} has no assumption")
        return assumption.formula, concluded

    def _check_fresh(self, box: Box, constant: str, *formulas: Formula) -> None:
        """
        The constant of a ``[c]`` box must not occur in the discharged
        formulas nor in anything visible where the box opens.
        """
        for formula in formulas:
            if occurs(constant, formula):
                raise RuleViolationError(
                    f"fresh constant {constant} must not occur in {formula}"
                )
        for line in self.scope.visible_lines(box.start):
            if line.formula is not None and occurs(constant, line.formula):
                raise RuleViolationError(
                    f"constant {constant} is not fresh: it occurs on line {line.label}"
                )

    # -------------------------------------------------------------------------
    # Structural and propositional rules
    # -------------------------------------------------------------------------

    def _check_reit(self, index: int, current: Formula, justification: Justification) -> None:
        reference = justification.labels[0]
        line = self.scope.resolve_line(index, reference)
        if not self.scope.is_citable_for_reiteration(line):
            raise RuleViolationError(
                f"line {reference.start} is not a premise or derived line"
            )
        cited = self._cite(index, reference)
        if not alpha_equal(cited, current):
            raise RuleViolationError(f"formula differs from line {reference.start}")

    def _check_and_intro(self, index: int, current: Formula, justification: Justification) -> None:
        first, second = self._cite_all(index, justification)
        if not isinstance(current, Binary) or current.op != Connective.AND:
            raise RuleViolationError("expected a conjunction")
        if (alpha_equal(current.left, first) and alpha_equal(current.right, second)) or (
            alpha_equal(current.left, second) and alpha_equal(current.right, first)
        ):
            return
        a, b = (r.start for r in justification.labels)
        raise RuleViolationError(f"conjunction is not made of lines {a} and {b}")

    def _check_and_elim(self, index: int, current: Formula, justification: Justification) -> None:
        (cited,) = self._cite_all(index, justification)
        label = justification.labels[0].start
        if not isinstance(cited, Binary) or cited.op != Connective.AND:
            raise RuleViolationError(f"line {label} is not a conjunction")
        if not (alpha_equal(current, cited.left) or alpha_equal(current, cited.right)):
            raise RuleViolationError(f"formula is not a conjunct of line {label}")

    def _check_or_intro(self, index: int, current: Formula, justification: Justification) -> None:
        (cited,) = self._cite_all(index, justification)
        label = justification.labels[0].start
        if not isinstance(current, Binary) or current.op != Connective.OR:
            raise RuleViolationError("expected a disjunction")
        if not (alpha_equal(current.left, cited) or alpha_equal(current.right, cited)):
            raise RuleViolationError(f"neither disjunct matches line {label}")

    def _check_or_elim(self, index: int, current: Formula, justification: Justification) -> None:
        (cited,) = self._cite_all(index, justification)
        label = justification.labels[0].start
        if not isinstance(cited, Binary) or cited.op != Connective.OR:
            raise RuleViolationError(f"line {label} is not a disjunction")

        first_ref, second_ref = justification.ranges
        first = self._plain_subproof(index, first_ref)
        second = self._plain_subproof(index, second_ref)

        for reference, (_, concluded) in ((first_ref, first), (second_ref, second)):
            if not alpha_equal(concluded, current):
                raise RuleViolationError(f"subproof {reference} does not conclude {current}")

        if (alpha_equal(first[0], cited.left) and alpha_equal(second[0], cited.right)) or (
            alpha_equal(first[0], cited.right) and alpha_equal(second[0], cited.left)
        ):
            return
        raise RuleViolationError(
            f"subproofs {first_ref} and {second_ref} must assume the two disjuncts of line {label}"
        )

    def _check_not_intro(self, index: int, current: Formula, justification: Justification) -> None:
        reference = justification.ranges[0]
        assumed, concluded = self._plain_subproof(index, reference)
        if not isinstance(concluded, Bottom):
            raise RuleViolationError(f"subproof {reference} must conclude ⊥")
        if not isinstance(current, Negation):
            raise RuleViolationError("expected a negation")
        if not alpha_equal(current.body, assumed):
            raise RuleViolationError(f"formula is not the negation of the assumption of {reference}")

    def _check_not_elim(self, index: int, current: Formula, justification: Justification) -> None:
        first, second = self._cite_all(index, justification)
        if not isinstance(current, Bottom):
            raise RuleViolationError("¬Elim concludes ⊥")
        if alpha_equal(second, Negation(first)) or alpha_equal(first, Negation(second)):
            return
        a, b = (r.start for r in justification.labels)
        raise RuleViolationError(f"lines {a} and {b} are not a formula and its negation")

    def _check_double_neg_elim(
        self, index: int, current: Formula, justification: Justification
    ) -> None:
        (cited,) = self._cite_all(index, justification)
        label = justification.labels[0].start
        if not (isinstance(cited, Negation) and isinstance(cited.body, Negation)):
            raise RuleViolationError(f"line {label} is not a double negation")
        if not alpha_equal(cited.body.body, current):
            raise RuleViolationError(f"formula does not match line {label} without ¬¬")

    def _check_implies_intro(
        self, index: int, current: Formula, justification: Justification
    ) -> None:
        reference = justification.ranges[0]
        assumed, concluded = self._plain_subproof(index, reference)
        if not is_binary(current, Connective.IMPLIES):
            raise RuleViolationError("expected a conditional")
        if not alpha_equal(current, implies(assumed, concluded)):
            raise RuleViolationError(
                f"expected {implies(assumed, concluded)} from subproof {reference}"
            )

    def _check_implies_elim(
        self, index: int, current: Formula, justification: Justification
    ) -> None:
        first, second = self._cite_all(index, justification)
        for conditional, antecedent in ((first, second), (second, first)):
            if not isinstance(conditional, Binary) or conditional.op != Connective.IMPLIES:
                continue
            if not alpha_equal(conditional.left, antecedent):
                continue
            if alpha_equal(conditional.right, current):
                return
            raise RuleViolationError(f"formula is not the consequent of {conditional}")
        a, b = (r.start for r in justification.labels)
        raise RuleViolationError(
            f"lines {a} and {b} are not a conditional and its antecedent"
        )

    def _check_iff_intro(self, index: int, current: Formula, justification: Justification) -> None:
        first_ref, second_ref = justification.ranges
        first = self._plain_subproof(index, first_ref)
        second = self._plain_subproof(index, second_ref)
        if not isinstance(current, Binary) or current.op != Connective.IFF:
            raise RuleViolationError("expected a biconditional")

        forward = (current.left, current.right)
        backward = (current.right, current.left)
        for one, other in ((first, second), (second, first)):
            if _same_pair(one, forward) and _same_pair(other, backward):
                return
        raise RuleViolationError(
            f"subproofs {first_ref} and {second_ref} must derive each side from the other"
        )

    def _check_iff_elim(self, index: int, current: Formula, justification: Justification) -> None:
        first, second = self._cite_all(index, justification)
        for biconditional, side in ((first, second), (second, first)):
            if not isinstance(biconditional, Binary) or biconditional.op != Connective.IFF:
                continue
            if alpha_equal(side, biconditional.left) and alpha_equal(current, biconditional.right):
                return
            if alpha_equal(side, biconditional.right) and alpha_equal(current, biconditional.left):
                return
        a, b = (r.start for r in justification.labels)
        raise RuleViolationError(
            f"lines {a} and {b} are not a biconditional and one of its sides giving this formula"
        )

    def _check_bottom_elim(self, index: int, current: Formula, justification: Justification) -> None:
        (cited,) = self._cite_all(index, justification)
        if not isinstance(cited, Bottom):
            raise RuleViolationError(f"line {justification.labels[0].start} is not ⊥")

    # -------------------------------------------------------------------------
    # Quantifier rules
    # -------------------------------------------------------------------------

    def _check_forall_intro(
        self, index: int, current: Formula, justification: Justification
    ) -> None:
        reference = justification.ranges[0]
        box, assumption, concluded = self._subproof(index, reference)
        constant = assumption.fresh_constant
        if constant is None:
            raise RuleViolationError(
                f"subproof {reference} must open with a fresh constant such as [c]"
            )
        if not isinstance(current, Quantified) or current.kind != QuantifierKind.FORALL:
            raise RuleViolationError("expected a universal formula")

        instance = substitute(current.body, current.variable, Constant(constant))
        if assumption.formula is None:
            if not alpha_equal(instance, concluded):
                raise RuleViolationError(
                    f"replacing {current.variable} by {constant} does not give line {reference.end}"
                )
        else:
            # General conditional proof: [c] P(c) ... Q(c) gives ∀x(P(x) → Q(x))
            expected = implies(assumption.formula, concluded)
            if not alpha_equal(instance, expected):
                raise RuleViolationError(
                    f"replacing {current.variable} by {constant} does not give {expected}"
                )

        self._check_fresh(box, constant, current)

    def _check_forall_elim(
        self, index: int, current: Formula, justification: Justification
    ) -> None:
        (cited,) = self._cite_all(index, justification)
        label = justification.labels[0].start
        if not isinstance(cited, Quantified) or cited.kind != QuantifierKind.FORALL:
            raise RuleViolationError(f"line {label} is not a universal formula")

        matched, term = match_instance(cited.body, current, cited.variable)
        if not matched:
            raise RuleViolationError(f"formula is not an instance of line {label}")
        if term is not None and not is_ground(term):
            raise RuleViolationError(f"instance term {term} must not contain variables")

    def _check_exists_intro(
        self, index: int, current: Formula, justification: Justification
    ) -> None:
        (cited,) = self._cite_all(index, justification)
        label = justification.labels[0].start
        if not isinstance(current, Quantified) or current.kind != QuantifierKind.EXISTS:
            raise RuleViolationError("expected an existential formula")

        matched, term = match_instance(current.body, cited, current.variable)
        if not matched:
            raise RuleViolationError(f"line {label} is not an instance of this formula")
        if term is not None and not is_ground(term):
            raise RuleViolationError(f"witness term {term} must not contain variables")

    def _check_exists_elim(
        self, index: int, current: Formula, justification: Justification
    ) -> None:
        (cited,) = self._cite_all(index, justification)
        label = justification.labels[0].start
        reference = justification.ranges[0]
        if not isinstance(cited, Quantified) or cited.kind != QuantifierKind.EXISTS:
            raise RuleViolationError(f"line {label} is not an existential formula")

        box, assumption, concluded = self._subproof(index, reference)
        constant = assumption.fresh_constant
        if constant is None or assumption.formula is None:
            raise RuleViolationError(
                f"subproof {reference} must assume an instance [c] φ(c) of line {label}"
            )
        instance = substitute(cited.body, cited.variable, Constant(constant))
        if not alpha_equal(instance, assumption.formula):
            raise RuleViolationError(
                f"subproof {reference} must assume {instance}"
            )
        if not alpha_equal(concluded, current):
            raise RuleViolationError(f"subproof {reference} does not conclude {current}")

        self._check_fresh(box, constant, current, cited)

    # -------------------------------------------------------------------------
    # Identity rules
    # -------------------------------------------------------------------------

    def _check_eq_intro(self, index: int, current: Formula, justification: Justification) -> None:
        if not isinstance(current, Equality):
            raise RuleViolationError("expected an equation")
        if current.left != current.right:
            raise RuleViolationError("both sides must be the same term")

    def _check_eq_elim(self, index: int, current: Formula, justification: Justification) -> None:
        first, second = self._cite_all(index, justification)
        tried_equation = False
        for equation, original in ((first, second), (second, first)):
            if not isinstance(equation, Equality):
                continue
            tried_equation = True
            for source, replacement in (
                (equation.left, equation.right),
                (equation.right, equation.left),
            ):
                rewritten = count_rewrites(original, current, source, replacement)
                if rewritten is None:
                    continue
                if rewritten > 0 or source == replacement:
                    return
        a, b = (r.start for r in justification.labels)
        if not tried_equation:
            raise RuleViolationError(f"neither line {a} nor line {b} is an equation")
        raise RuleViolationError(
            f"formula does not follow by substituting equals from lines {a} and {b}"
        )


def _same_pair(subproof: tuple[Formula, Formula], sides: tuple[Formula, Formula]) -> bool:
    return alpha_equal(subproof[0], sides[0]) and alpha_equal(subproof[1], sides[1])


def check_proof(
    text: str,
    bindable_variables: str = DEFAULT_VARIABLE_LIST,
    *,
    max_formula_depth: int = DEFAULT_MAX_DEPTH,
    max_box_depth: int = DEFAULT_MAX_BOX_DEPTH,
    ruleset: RuleSet | None = None,
) -> ProofResult:
    """
    Parse and check a Fitch proof.

    Args:
        text: The proof document
        bindable_variables: Comma-separated identifiers quantifiers may bind
        max_formula_depth: Nesting limit for formulas
        max_box_depth: Nesting limit for subproofs
        ruleset: Rules available to justifications (default: all)

    Returns:
        ProofResult: CORRECT, ERROR with one message per bad line, or
        FATAL_ERROR when the document cannot be parsed
    """
    try:
        variables = parse_variables(bindable_variables)
    except ValueError as exc:
        return ProofResult.fatal(str(exc))

    try:
        proof = parse_proof(text, variables, max_formula_depth, max_box_depth)
    except ProofSyntaxError as exc:
        logger.info("Proof could not be parsed: %s", exc.issue.message)
        return ProofResult.fatal(exc.issue.message, exc.issue)

    result = ProofChecker(proof, ruleset or DEFAULT_RULESET).check()
    logger.info(
        "Checked %d lines: %s (%d issues)",
        len(proof.formula_lines),
        result.status.name,
        len(result.issues),
    )
    return result
