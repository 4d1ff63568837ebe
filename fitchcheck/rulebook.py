"""
Rulebook: the closed set of Fitch inference rules.

The rulebook defines which rule names a justification may use, how they
are spelled, and what shape of references each rule takes (single lines
versus subproof ranges). The checker dispatches on ``Rule`` members, so a
name that does not resolve here is reported as an unknown rule.

Rule names are matched ignoring case and whitespace, so ``∧ Intro``,
``∧Intro`` and ``∧ intro`` all resolve to the same rule.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from .models import Justification


class RuleFamily(Enum):
    """Rule families, grouped by the connective they govern."""

    STRUCTURAL = auto()  # Reit
    CONJUNCTION = auto()  # ∧
    DISJUNCTION = auto()  # ∨
    NEGATION = auto()  # ¬, ¬¬
    CONDITIONAL = auto()  # →
    BICONDITIONAL = auto()  # ↔
    CONTRADICTION = auto()  # ⊥
    QUANTIFIER = auto()  # ∀, ∃
    IDENTITY = auto()  # =


class Rule(Enum):
    REIT = auto()
    AND_INTRO = auto()
    AND_ELIM = auto()
    OR_INTRO = auto()
    OR_ELIM = auto()
    NOT_INTRO = auto()
    NOT_ELIM = auto()
    IMPLIES_INTRO = auto()
    IMPLIES_ELIM = auto()
    IFF_INTRO = auto()
    IFF_ELIM = auto()
    BOTTOM_ELIM = auto()
    DOUBLE_NEG_ELIM = auto()
    FORALL_INTRO = auto()
    FORALL_ELIM = auto()
    EXISTS_INTRO = auto()
    EXISTS_ELIM = auto()
    EQ_INTRO = auto()
    EQ_ELIM = auto()


def normalize_rule_name(text: str) -> str:
    """Canonical lookup key for a rule name as written."""
    return "".join(text.split()).casefold()


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


@dataclass
class RuleInfo:
    """Information about a single inference rule."""

    rule: Rule
    name: str  # Canonical spelling, e.g. "∧Intro"
    family: RuleFamily
    description: str = ""
    example: str = ""
    lines: int = 0  # Single-line references required
    ranges: int = 0  # Subproof ranges required
    aliases: list[str] = field(default_factory=list)

    @property
    def signature(self) -> str:
        parts = []
        if self.lines:
            parts.append(_plural(self.lines, "line"))
        if self.ranges:
            parts.append(_plural(self.ranges, "subproof"))
        return ", ".join(parts) if parts else "no references"


@dataclass
class RuleSet:
    """
    A set of available rules.

    Rules are grouped by family for documentation, and looked up by any
    of their accepted spellings.
    """

    rules: dict[Rule, RuleInfo] = field(default_factory=dict)
    _names: dict[str, Rule] = field(default_factory=dict, repr=False)

    def add(self, info: RuleInfo) -> None:
        """Add a rule to the set."""
        self.rules[info.rule] = info
        for spelling in [info.name, *info.aliases]:
            self._names[normalize_rule_name(spelling)] = info.rule

    def get(self, rule: Rule) -> RuleInfo | None:
        return self.rules.get(rule)

    def lookup(self, text: str) -> RuleInfo | None:
        """Find a rule by any accepted spelling."""
        rule = self._names.get(normalize_rule_name(text))
        return self.rules.get(rule) if rule else None

    def is_available(self, text: str) -> bool:
        return self.lookup(text) is not None

    def by_family(self, family: RuleFamily) -> list[RuleInfo]:
        """Get all rules in a family."""
        return [r for r in self.rules.values() if r.family == family]

    def all_names(self) -> list[str]:
        return [r.name for r in self.rules.values()]

    def validate_references(
        self, info: RuleInfo, justification: Justification
    ) -> tuple[bool, str | None]:
        """
        Check the reference shape of a justification against its rule.

        Returns:
            (is_valid, error_message)
        """
        lines = len(justification.labels)
        ranges = len(justification.ranges)
        if lines == info.lines and ranges == info.ranges:
            return True, None
        got = []
        if lines or not ranges:
            got.append(_plural(lines, "line reference"))
        if ranges:
            got.append(_plural(ranges, "subproof range"))
        return False, f"expects {info.signature}, got {' and '.join(got)}"

    def to_help_text(self, families: list[RuleFamily] | None = None) -> str:
        """
        Generate text describing the available rules.

        Args:
            families: Optional filter for specific families
        """
        lines = ["Available rules:"]
        for family in families or list(RuleFamily):
            rules = self.by_family(family)
            if rules:
                lines.append(f"\n{family.name}:")
                for r in rules:
                    lines.append(f"  - {r.name} ({r.signature}): {r.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            r.name: {"family": r.family.name, "lines": r.lines, "ranges": r.ranges}
            for r in self.rules.values()
        }


@dataclass(frozen=True)
class SymbolInfo:
    """A logical symbol and the words an editor may complete it from."""

    symbol: str
    description: str
    keywords: tuple[str, ...] = ()


SYMBOLS = [
    SymbolInfo("∧", "Conjunction", ("conjunction", "and")),
    SymbolInfo("∨", "Disjunction", ("disjunction", "or")),
    SymbolInfo("∀", "For all (universal quantifier)", ("fa", "forall")),
    SymbolInfo("∃", "There exists (existential quantifier)", ("ex", "exists")),
    SymbolInfo("→", "Implies", ("implies", "implication", "if")),
    SymbolInfo("↔", "Double implication", ("bic", "double")),
    SymbolInfo("⊥", "Bottom", ("bottom", "false", "contradiction")),
    SymbolInfo("¬", "Negation", ("not", "neg", "!")),
]


# =============================================================================
# Preset rule sets
# =============================================================================


def _create_rules() -> list[RuleInfo]:
    return [
        RuleInfo(
            Rule.REIT,
            "Reit",
            RuleFamily.STRUCTURAL,
            "Repeat an earlier premise or derived line",
            example="Reit: 1",
            lines=1,
            aliases=["Reiteration"],
        ),
        RuleInfo(
            Rule.AND_INTRO,
            "∧Intro",
            RuleFamily.CONJUNCTION,
            "From φ and ψ infer φ ∧ ψ",
            example="∧Intro: 1, 2",
            lines=2,
        ),
        RuleInfo(
            Rule.AND_ELIM,
            "∧Elim",
            RuleFamily.CONJUNCTION,
            "From φ ∧ ψ infer either conjunct",
            example="∧Elim: 3",
            lines=1,
        ),
        RuleInfo(
            Rule.OR_INTRO,
            "∨Intro",
            RuleFamily.DISJUNCTION,
            "From φ infer φ ∨ ψ or ψ ∨ φ",
            example="∨Intro: 2",
            lines=1,
        ),
        RuleInfo(
            Rule.OR_ELIM,
            "∨Elim",
            RuleFamily.DISJUNCTION,
            "From φ ∨ ψ and subproofs φ ⇒ χ and ψ ⇒ χ infer χ",
            example="∨Elim: 1, 2-4, 5-7",
            lines=1,
            ranges=2,
        ),
        RuleInfo(
            Rule.NOT_INTRO,
            "¬Intro",
            RuleFamily.NEGATION,
            "From a subproof φ ⇒ ⊥ infer ¬φ",
            example="¬Intro: 2-5",
            ranges=1,
        ),
        RuleInfo(
            Rule.NOT_ELIM,
            "¬Elim",
            RuleFamily.NEGATION,
            "From φ and ¬φ infer ⊥",
            example="¬Elim: 3, 4",
            lines=2,
        ),
        RuleInfo(
            Rule.DOUBLE_NEG_ELIM,
            "¬¬Elim",
            RuleFamily.NEGATION,
            "From ¬¬φ infer φ",
            example="¬¬Elim: 6",
            lines=1,
        ),
        RuleInfo(
            Rule.IMPLIES_INTRO,
            "→Intro",
            RuleFamily.CONDITIONAL,
            "From a subproof φ ⇒ ψ infer φ → ψ",
            example="→Intro: 2-4",
            ranges=1,
        ),
        RuleInfo(
            Rule.IMPLIES_ELIM,
            "→Elim",
            RuleFamily.CONDITIONAL,
            "From φ → ψ and φ infer ψ",
            example="→Elim: 1, 2",
            lines=2,
        ),
        RuleInfo(
            Rule.IFF_INTRO,
            "↔Intro",
            RuleFamily.BICONDITIONAL,
            "From subproofs φ ⇒ ψ and ψ ⇒ φ infer φ ↔ ψ",
            example="↔Intro: 2-4, 5-7",
            ranges=2,
        ),
        RuleInfo(
            Rule.IFF_ELIM,
            "↔Elim",
            RuleFamily.BICONDITIONAL,
            "From φ ↔ ψ and one side infer the other",
            example="↔Elim: 1, 2",
            lines=2,
        ),
        RuleInfo(
            Rule.BOTTOM_ELIM,
            "⊥Elim",
            RuleFamily.CONTRADICTION,
            "From ⊥ infer anything",
            example="⊥Elim: 5",
            lines=1,
        ),
        RuleInfo(
            Rule.FORALL_INTRO,
            "∀Intro",
            RuleFamily.QUANTIFIER,
            "From a subproof [c] ⇒ φ(c) infer ∀x φ(x), c fresh",
            example="∀Intro: 3-6",
            ranges=1,
        ),
        RuleInfo(
            Rule.FORALL_ELIM,
            "∀Elim",
            RuleFamily.QUANTIFIER,
            "From ∀x φ(x) infer φ(t) for a ground term t",
            example="∀Elim: 1",
            lines=1,
        ),
        RuleInfo(
            Rule.EXISTS_INTRO,
            "∃Intro",
            RuleFamily.QUANTIFIER,
            "From φ(t) infer ∃x φ(x)",
            example="∃Intro: 4",
            lines=1,
        ),
        RuleInfo(
            Rule.EXISTS_ELIM,
            "∃Elim",
            RuleFamily.QUANTIFIER,
            "From ∃x φ(x) and a subproof [c] φ(c) ⇒ ψ infer ψ, c fresh",
            example="∃Elim: 2, 3-8",
            lines=1,
            ranges=1,
        ),
        RuleInfo(
            Rule.EQ_INTRO,
            "=Intro",
            RuleFamily.IDENTITY,
            "Infer t = t",
            example="=Intro",
        ),
        RuleInfo(
            Rule.EQ_ELIM,
            "=Elim",
            RuleFamily.IDENTITY,
            "From a = b and φ infer φ with some a replaced by b (or b by a)",
            example="=Elim: 1, 2",
            lines=2,
        ),
    ]


def create_default_ruleset() -> RuleSet:
    """Create the full rule set for first-order logic with identity."""
    rs = RuleSet()
    for info in _create_rules():
        rs.add(info)
    return rs


def create_custom_ruleset(allowed_rules: list[str]) -> RuleSet:
    """
    Create a rule set restricted to the named rules.

    Args:
        allowed_rules: Rule names in any accepted spelling

    Raises:
        ValueError: if a name does not match any rule
    """
    full = create_default_ruleset()
    rs = RuleSet()
    for name in allowed_rules:
        info = full.lookup(name)
        if info is None:
            valid = ", ".join(full.all_names())
            raise ValueError(f"Unknown rule '{name}'. Valid rules: {valid}")
        rs.add(info)
    return rs


# Convenience: default rule set
DEFAULT_RULESET = create_default_ruleset()
