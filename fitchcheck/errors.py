"""
Error taxonomy for Fitch proof checking.

Three kinds of problems can be found in a proof document:
- Syntax errors: the text cannot be split into Fitch rows, or a formula
  does not follow the grammar. These are fatal for the whole document.
- Scope errors: a justification cites a line or subproof that does not
  exist or is no longer visible.
- Rule violations: the cited material does not have the shape the rule
  requires.

Scope errors and rule violations are reported per line and checking
continues with the next line.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class ProofErrorCategory(Enum):
    """
    Categorization of proof errors.

    - SYNTAX: Document or formula could not be parsed (fatal)
    - SCOPE: Reference to a missing or invisible line or subproof
    - RULE_VIOLATION: Reference shape or formulas do not fit the rule
    """

    SYNTAX = auto()
    SCOPE = auto()
    RULE_VIOLATION = auto()


@dataclass
class LineIssue:
    """
    A single problem located in a proof document.

    Messages always lead with ``line <label>:`` when the Fitch label is
    known, since editors map diagnostics back to rows by that prefix.
    """

    category: ProofErrorCategory
    reason: str

    # Location information
    label: int | None = None
    row: int | None = None
    column: int | None = None

    # Rule being checked when the problem was found
    rule: str | None = None

    @property
    def message(self) -> str:
        body = f"{self.rule}: {self.reason}" if self.rule else self.reason

        where = ""
        if self.row is not None:
            where = f"row {self.row}"
            if self.column is not None:
                where += f", column {self.column}"

        if self.label is not None:
            if self.category == ProofErrorCategory.SYNTAX and where:
                return f"line {self.label}: {body} ({where})"
            return f"line {self.label}: {body}"
        if where:
            return f"{where}: {body}"
        return body

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.name,
            "message": self.message,
            "reason": self.reason,
            "label": self.label,
            "rule": self.rule,
            "location": {
                "row": self.row,
                "column": self.column,
            }
            if self.row
            else None,
        }


class ProofError(Exception):
    """Exception wrapping a located proof problem."""

    category = ProofErrorCategory.RULE_VIOLATION

    def __init__(
        self,
        reason: str,
        *,
        label: int | None = None,
        row: int | None = None,
        column: int | None = None,
        rule: str | None = None,
    ):
        self.issue = LineIssue(
            category=self.category,
            reason=reason,
            label=label,
            row=row,
            column=column,
            rule=rule,
        )
        super().__init__(self.issue.message)

    @property
    def reason(self) -> str:
        return self.issue.reason

    def locate(self, *, label: int | None = None, rule: str | None = None) -> "ProofError":
        """Attach the line label and rule name once they are known."""
        if label is not None and self.issue.label is None:
            self.issue.label = label
        if rule is not None and self.issue.rule is None:
            self.issue.rule = rule
        self.args = (self.issue.message,)
        return self


class ProofSyntaxError(ProofError):
    """
    The text does not follow the Fitch row grammar or the formula grammar.

    ``position`` is the 0-based character offset inside the formula text
    when the error comes from the formula parser.
    """

    category = ProofErrorCategory.SYNTAX

    def __init__(self, reason: str, *, position: int | None = None, **kwargs: Any):
        self.position = position
        super().__init__(reason, **kwargs)

    def at_row(self, row: int, column_offset: int, label: int | None = None) -> "ProofSyntaxError":
        """Translate a formula-relative position into document coordinates."""
        self.issue.row = row
        if self.position is not None:
            self.issue.column = column_offset + self.position + 1
        elif self.issue.column is None:
            self.issue.column = column_offset + 1
        return self.locate(label=label)  # type: ignore[return-value]


class ScopeError(ProofError):
    """A cited line or subproof is missing or not visible."""

    category = ProofErrorCategory.SCOPE


class RuleViolationError(ProofError):
    """The cited material does not license the line under the named rule."""

    category = ProofErrorCategory.RULE_VIOLATION
