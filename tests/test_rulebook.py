"""
Tests for the rule registry.

Tests cover:
1. Rule lookup by canonical name and variant spellings
2. Reference-shape validation
3. Restricted rule sets and help output
"""

import pytest

from fitchcheck.models import Justification, Reference
from fitchcheck.rulebook import (
    DEFAULT_RULESET,
    SYMBOLS,
    Rule,
    RuleFamily,
    RuleInfo,
    RuleSet,
    create_custom_ruleset,
    create_default_ruleset,
    normalize_rule_name,
)


class TestRuleLookup:
    """Tests for finding rules by name."""

    def test_every_rule_registered(self):
        """The default set covers every rule."""
        rs = create_default_ruleset()
        assert {info.rule for info in rs.rules.values()} == set(Rule)

    def test_lookup_ignores_case_and_spaces(self):
        """Spelling variants resolve to the same rule."""
        for spelling in ["∧Intro", "∧ Intro", "∧ intro", "∧INTRO"]:
            assert DEFAULT_RULESET.lookup(spelling).rule == Rule.AND_INTRO

    def test_reiteration_alias(self):
        """Reit also accepts its long name."""
        assert DEFAULT_RULESET.lookup("Reiteration").rule == Rule.REIT
        assert DEFAULT_RULESET.lookup("reit").name == "Reit"

    def test_double_negation_distinct_from_negation(self):
        """¬¬Elim is its own rule."""
        assert DEFAULT_RULESET.lookup("¬¬Elim").rule == Rule.DOUBLE_NEG_ELIM
        assert DEFAULT_RULESET.lookup("¬Elim").rule == Rule.NOT_ELIM

    def test_unknown_rule(self):
        """Unknown names do not resolve."""
        assert DEFAULT_RULESET.lookup("MagicIntro") is None
        assert not DEFAULT_RULESET.is_available("MagicIntro")

    def test_normalize_rule_name(self):
        """Normalization drops whitespace and case."""
        assert normalize_rule_name(" ∀ Elim ") == "∀elim"


class TestReferenceValidation:
    """Tests for checking the reference shape of a justification."""

    def test_valid_shape(self):
        """∨Elim takes one line and two ranges."""
        info = DEFAULT_RULESET.get(Rule.OR_ELIM)
        justification = Justification("∨Elim", (Reference(1), Reference(2, 3), Reference(4, 5)))

        is_valid, error = DEFAULT_RULESET.validate_references(info, justification)
        assert is_valid
        assert error is None

    def test_too_few_lines(self):
        """A missing line reference is reported with both counts."""
        info = DEFAULT_RULESET.get(Rule.AND_INTRO)

        is_valid, error = DEFAULT_RULESET.validate_references(
            info, Justification("∧Intro", (Reference(1),))
        )
        assert not is_valid
        assert error == "expects 2 lines, got 1 line reference"

    def test_line_instead_of_range(self):
        """→Intro needs a range, not a line."""
        info = DEFAULT_RULESET.get(Rule.IMPLIES_INTRO)

        is_valid, error = DEFAULT_RULESET.validate_references(
            info, Justification("→Intro", (Reference(2),))
        )
        assert not is_valid
        assert error == "expects 1 subproof, got 1 line reference"

    def test_no_references_expected(self):
        """=Intro rejects references."""
        info = DEFAULT_RULESET.get(Rule.EQ_INTRO)

        is_valid, error = DEFAULT_RULESET.validate_references(
            info, Justification("=Intro", (Reference(1, 2),))
        )
        assert not is_valid
        assert error == "expects no references, got 1 subproof range"

    def test_signature(self):
        """Signatures describe the expected references."""
        assert DEFAULT_RULESET.get(Rule.EXISTS_ELIM).signature == "1 line, 1 subproof"
        assert DEFAULT_RULESET.get(Rule.IFF_ELIM).signature == "2 lines"


class TestRuleSet:
    """Tests for RuleSet operations."""

    def test_add_and_get_rule(self):
        """Rules can be added and retrieved."""
        rs = RuleSet()
        info = RuleInfo(Rule.REIT, "Reit", RuleFamily.STRUCTURAL, "Repeat", lines=1)

        rs.add(info)

        assert rs.get(Rule.REIT) == info
        assert rs.is_available("reit")

    def test_by_family(self):
        """Rules filter by family."""
        quantifier = DEFAULT_RULESET.by_family(RuleFamily.QUANTIFIER)
        assert {r.name for r in quantifier} == {"∀Intro", "∀Elim", "∃Intro", "∃Elim"}

    def test_custom_ruleset(self):
        """A custom set only has the listed rules."""
        rs = create_custom_ruleset(["∧ intro", "Reit"])

        assert rs.is_available("∧Intro")
        assert rs.is_available("Reiteration")
        assert not rs.is_available("∨Intro")

    def test_custom_ruleset_unknown_name(self):
        """Unknown names are rejected with the valid list."""
        with pytest.raises(ValueError, match="Unknown rule 'Cut'"):
            create_custom_ruleset(["Cut"])

    def test_to_help_text(self):
        """Help text lists rules by family."""
        text = DEFAULT_RULESET.to_help_text()

        assert "Available rules:" in text
        assert "QUANTIFIER:" in text
        assert "∃Elim (1 line, 1 subproof)" in text

    def test_to_dict(self):
        """Serializes rule shapes."""
        data = DEFAULT_RULESET.to_dict()

        assert data["∨Elim"] == {"family": "DISJUNCTION", "lines": 1, "ranges": 2}
        assert len(data) == len(Rule)

    def test_symbols(self):
        """The symbol vocabulary covers every connective and quantifier."""
        assert {s.symbol for s in SYMBOLS} == {"∧", "∨", "∀", "∃", "→", "↔", "⊥", "¬"}
