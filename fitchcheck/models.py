"""
Core data models for Fitch proofs.

Defines the fundamental structures:
- ProofLine (one row of the document) and its Justification
- Box (a subproof, as an index interval over the flat line list)
- Proof (lines + boxes)
- ProofResult / FormatResult
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from .errors import LineIssue
from .logic.syntax import Formula

CORRECT_MESSAGE = "The proof is correct!"
FATAL_PREFIX = "Fatal error: "


class LineKind(Enum):
    """Role of a row in the proof layout."""

    PREMISE = auto()  # Unjustified depth-1 row before the premise divider
    ASSUMPTION = auto()  # First row of a subproof, may carry [c]
    DIVIDER = auto()  # Row of dashes under premises or an assumption
    SEPARATOR = auto()  # Row of bars only, closes deeper subproofs
    DERIVED = auto()  # Any other formula row, needs a justification


@dataclass(frozen=True)
class Reference:
    """A cited line label, or a label range ``a-b`` naming a subproof."""

    start: int
    end: int | None = None

    @property
    def is_range(self) -> bool:
        return self.end is not None

    def __str__(self) -> str:
        if self.end is None:
            return str(self.start)
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class Justification:
    """Rule name as written plus the ordered reference list."""

    rule_text: str
    references: tuple[Reference, ...] = ()

    @property
    def labels(self) -> list[Reference]:
        return [r for r in self.references if not r.is_range]

    @property
    def ranges(self) -> list[Reference]:
        return [r for r in self.references if r.is_range]

    def render(self, rule_name: str | None = None) -> str:
        name = rule_name or self.rule_text
        if not self.references:
            return name
        return f"{name}: {', '.join(str(r) for r in self.references)}"

    def __str__(self) -> str:
        return self.render()


@dataclass
class ProofLine:
    """
    One row of a Fitch proof.

    Attributes:
        row: 1-based physical line in the source document
        depth: Number of bars (1 = top level)
        kind: Layout role of the row
        label: Fitch line number as written (None for dividers/separators)
        formula: Parsed formula (None for dividers, separators and bare [c])
        formula_text: Formula text as written, whitespace-trimmed
        justification: Rule and references, if any
        fresh_constant: Constant introduced by a ``[c]`` marker
    """

    row: int
    depth: int
    kind: LineKind
    label: int | None = None
    formula: Formula | None = None
    formula_text: str = ""
    justification: Justification | None = None
    fresh_constant: str | None = None

    @property
    def is_structural(self) -> bool:
        """Dividers and separators carry no formula and cannot be cited."""
        return self.kind in {LineKind.DIVIDER, LineKind.SEPARATOR}

    @property
    def content(self) -> str:
        """Row content after the bars, as the formatter prints it."""
        parts = []
        if self.fresh_constant:
            parts.append(f"[{self.fresh_constant}]")
        if self.formula_text:
            parts.append(self.formula_text)
        return " ".join(parts)


@dataclass(frozen=True)
class Box:
    """
    A subproof: lines ``start`` (the assumption) through ``end`` (the last
    labelled line) at depth ``depth`` or deeper.
    """

    start: int
    end: int
    depth: int
    closed: bool = True

    def contains(self, index: int) -> bool:
        return self.start <= index <= self.end


@dataclass
class Proof:
    """A parsed proof: the flat line list and the boxes over it."""

    lines: list[ProofLine] = field(default_factory=list)
    boxes: list[Box] = field(default_factory=list)

    @property
    def formula_lines(self) -> list[ProofLine]:
        return [line for line in self.lines if not line.is_structural]

    @property
    def max_label_width(self) -> int:
        return max((len(str(line.label)) for line in self.formula_lines), default=0)


class ResultStatus(Enum):
    """Overall outcome of checking a proof."""

    CORRECT = auto()
    ERROR = auto()
    FATAL_ERROR = auto()


@dataclass
class ProofResult:
    """
    Outcome of ``check_proof``.

    - CORRECT: every justified line passed
    - ERROR: the proof parsed, one message per offending line
    - FATAL_ERROR: the document could not be parsed, single message
    """

    status: ResultStatus
    messages: list[str] = field(default_factory=list)
    issues: list[LineIssue] = field(default_factory=list)

    @classmethod
    def correct(cls) -> ProofResult:
        return cls(ResultStatus.CORRECT)

    @classmethod
    def error(cls, issues: list[LineIssue]) -> ProofResult:
        return cls(ResultStatus.ERROR, [i.message for i in issues], list(issues))

    @classmethod
    def fatal(cls, message: str, issue: LineIssue | None = None) -> ProofResult:
        return cls(ResultStatus.FATAL_ERROR, [message], [issue] if issue else [])

    @property
    def is_correct(self) -> bool:
        return self.status == ResultStatus.CORRECT

    @property
    def is_fatal(self) -> bool:
        return self.status == ResultStatus.FATAL_ERROR

    def __str__(self) -> str:
        if self.status == ResultStatus.CORRECT:
            return CORRECT_MESSAGE
        if self.status == ResultStatus.FATAL_ERROR:
            return FATAL_PREFIX + self.messages[0]
        return "\n\n".join(self.messages)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.name,
            "messages": self.messages,
            "issues": [i.to_dict() for i in self.issues],
        }


@dataclass(frozen=True)
class FormatResult:
    """Outcome of ``format_proof``: the aligned text, or why there is none."""

    text: str | None = None
    error: str | None = None

    @classmethod
    def success(cls, text: str) -> FormatResult:
        return cls(text=text)

    @classmethod
    def failure(cls, error: str) -> FormatResult:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.text is not None
