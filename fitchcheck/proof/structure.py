"""
Proof-structure parser: raw document text to a flat line list plus boxes.

Row layout:

    <label> | | <formula> <rule>: <references>
            | | ----                   divider under an assumption
            | |                        separator, closes deeper boxes
    <label> | | | [c] <formula>        assumption introducing constant c

The parser works in two passes. The first classifies each physical row
(formula, divider, separator) and parses its content; the second assigns
layout roles and box intervals, which needs one row of lookahead because a
divider marks the row above it as an assumption.

Any problem is a ProofSyntaxError for the whole document.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable

from ..errors import ProofSyntaxError
from ..logic.parser import DEFAULT_MAX_DEPTH, DEFAULT_VARIABLES, IDENTIFIER, FormulaParser
from ..logic.syntax import Formula
from ..models import Box, Justification, LineKind, Proof, ProofLine, Reference

logger = logging.getLogger(__name__)

DEFAULT_MAX_BOX_DEPTH = 32

_ROW = re.compile(r"^\s*(?P<label>\d+)?\s*(?P<bars>(?:\|\s*)*)(?P<rest>.*?)\s*$")
_DIVIDER = re.compile(r"^[-–—─]+$")
_FRESH = re.compile(r"^\[\s*(?P<name>[^\]]*?)\s*\]\s*")
_JUSTIFICATION = re.compile(
    r"(?<![\w(,])(?P<rule>(?:¬¬|[∧∨¬→↔⊥∀∃=])[ \t]*(?:intro|elim)|reit(?:eration)?)"
    r"(?![\w(])[ \t]*:?(?P<refs>[^:]*)$",
    re.IGNORECASE,
)
_REFERENCE = re.compile(r"^(?P<start>\d+)(?:\s*[-–]\s*(?P<end>\d+))?$")


@dataclass
class RawRow:
    """A non-blank physical row after the first pass."""

    row: int
    depth: int
    kind: LineKind  # DIVIDER, SEPARATOR, or DERIVED for any formula row
    label: int | None = None
    formula: Formula | None = None
    formula_text: str = ""
    justification: Justification | None = None
    fresh_constant: str | None = None


def parse_references(text: str, row: int | None = None, label: int | None = None) -> tuple[Reference, ...]:
    """Parse a comma-separated reference list such as ``1, 3-5``."""
    text = text.strip()
    if not text:
        return ()
    references = []
    for item in text.split(","):
        item = item.strip()
        match = _REFERENCE.match(item)
        if not match:
            raise ProofSyntaxError(
                f"invalid reference '{item}'" if item else "empty reference in list",
                row=row,
                label=label,
            )
        end = match.group("end")
        references.append(Reference(int(match.group("start")), int(end) if end else None))
    return tuple(references)


class ProofParser:
    """
    Parser for a complete Fitch proof document.

    Args:
        variables: Identifiers the formula parser treats as bindable
        max_formula_depth: Nesting limit for each formula
        max_box_depth: Limit on bar depth
    """

    def __init__(
        self,
        variables: Iterable[str] = DEFAULT_VARIABLES,
        max_formula_depth: int = DEFAULT_MAX_DEPTH,
        max_box_depth: int = DEFAULT_MAX_BOX_DEPTH,
    ):
        self.variables = frozenset(variables)
        self.max_box_depth = max_box_depth
        self._formulas = FormulaParser(self.variables, max_formula_depth)

    def parse(self, text: str) -> Proof:
        rows = [r for r in (self._scan_row(n, line) for n, line in enumerate(text.splitlines(), 1)) if r]
        proof = self._assemble(rows)
        logger.debug(
            "Parsed %d rows into %d lines and %d boxes", len(rows), len(proof.lines), len(proof.boxes)
        )
        return proof

    # -------------------------------------------------------------------------
    # First pass: rows
    # -------------------------------------------------------------------------

    def _scan_row(self, row: int, line: str) -> RawRow | None:
        if not line.strip():
            return None

        match = _ROW.match(line)
        if match is None:
            raise ProofSyntaxError("unreadable row", row=row)
        label = int(match.group("label")) if match.group("label") else None
        depth = match.group("bars").count("|")
        rest = match.group("rest")

        if depth == 0:
            raise ProofSyntaxError(
                "expected '|' before the row content", row=row, column=match.start("rest") + 1, label=label
            )
        if depth > self.max_box_depth:
            raise ProofSyntaxError(
                f"subproofs nest deeper than {self.max_box_depth} levels", row=row, label=label
            )

        if not rest:
            if label is not None:
                raise ProofSyntaxError("row has a line number but no formula", row=row, label=label)
            return RawRow(row, depth, LineKind.SEPARATOR)

        if _DIVIDER.match(rest):
            if label is not None:
                raise ProofSyntaxError("a divider cannot carry a line number", row=row, label=label)
            return RawRow(row, depth, LineKind.DIVIDER)

        if label is None:
            raise ProofSyntaxError(
                "missing line number", row=row, column=match.start("rest") + 1
            )

        return self._scan_content(row, depth, label, rest, match.start("rest"))

    def _scan_content(self, row: int, depth: int, label: int, rest: str, column: int) -> RawRow:
        parsed = RawRow(row, depth, LineKind.DERIVED, label=label)

        if fresh := _FRESH.match(rest):
            name = fresh.group("name")
            if not IDENTIFIER.fullmatch(name):
                raise ProofSyntaxError(
                    f"'[{name}]' does not name a constant", row=row, column=column + 1, label=label
                )
            if name in self.variables:
                raise ProofSyntaxError(
                    f"'{name}' is a variable and cannot be introduced as a fresh constant",
                    row=row,
                    column=column + 1,
                    label=label,
                )
            parsed.fresh_constant = name
            column += fresh.end()
            rest = rest[fresh.end():]

        formula_text = rest
        if justification := _JUSTIFICATION.search(rest):
            formula_text = rest[: justification.start()]
            rule_text = " ".join(justification.group("rule").split())
            references = parse_references(justification.group("refs"), row=row, label=label)
            parsed.justification = Justification(rule_text, references)

        leading = len(formula_text) - len(formula_text.lstrip())
        formula_text = formula_text.strip()
        if formula_text:
            try:
                parsed.formula = self._formulas.parse(formula_text)
            except ProofSyntaxError as exc:
                raise exc.at_row(row, column + leading, label) from None
            parsed.formula_text = formula_text
        elif parsed.fresh_constant is None:
            raise ProofSyntaxError("missing formula", row=row, column=column + 1, label=label)

        return parsed

    # -------------------------------------------------------------------------
    # Second pass: layout roles and boxes
    # -------------------------------------------------------------------------

    def _assemble(self, rows: list[RawRow]) -> Proof:
        lines: list[ProofLine] = []
        boxes: list[Box] = []
        # Open boxes as [start index, depth, last labelled index]
        stack: list[list[int]] = []
        seen_labels: dict[int, int] = {}
        premise_phase = True

        def close_deeper_than(depth: int) -> None:
            while stack and stack[-1][1] > depth:
                start, box_depth, last = stack.pop()
                boxes.append(Box(start, last, box_depth, closed=True))

        for k, raw in enumerate(rows):
            scope = len(stack) + 1

            if raw.kind == LineKind.SEPARATOR:
                if raw.depth > scope:
                    raise ProofSyntaxError(
                        "separator is deeper than the open subproofs", row=raw.row
                    )
                close_deeper_than(raw.depth)
                lines.append(ProofLine(raw.row, raw.depth, LineKind.SEPARATOR))
                continue

            if raw.kind == LineKind.DIVIDER:
                previous = lines[-1] if lines else None
                if raw.depth == 1:
                    if not premise_phase:
                        raise ProofSyntaxError(
                            "the premise divider must directly follow the premises", row=raw.row
                        )
                    premise_phase = False
                elif (
                    previous is None
                    or previous.kind != LineKind.ASSUMPTION
                    or previous.depth != raw.depth
                ):
                    raise ProofSyntaxError(
                        "a divider must directly follow a subproof assumption", row=raw.row
                    )
                lines.append(ProofLine(raw.row, raw.depth, LineKind.DIVIDER))
                continue

            depth = raw.depth
            if depth > scope + 1:
                raise ProofSyntaxError(
                    f"row is {depth - scope} levels deeper than its enclosing proof; "
                    "a subproof opens one level at a time",
                    row=raw.row,
                    label=raw.label,
                )
            if depth < scope:
                close_deeper_than(depth)
                scope = depth

            if depth == 1 and raw.fresh_constant:
                raise ProofSyntaxError(
                    "a fresh constant can only be introduced by a subproof assumption",
                    row=raw.row,
                    label=raw.label,
                )

            next_row = rows[k + 1] if k + 1 < len(rows) else None
            marked = raw.fresh_constant is not None or (
                next_row is not None
                and next_row.kind == LineKind.DIVIDER
                and next_row.depth == depth
            )

            opens_box = depth == scope + 1
            if not opens_box and depth > 1 and marked:
                # Sibling subproof at the same depth
                close_deeper_than(depth - 1)
                opens_box = True

            if opens_box:
                stack.append([len(lines), depth, len(lines)])
                kind = LineKind.ASSUMPTION
                premise_phase = False
            elif depth == 1 and premise_phase and raw.justification is None:
                kind = LineKind.PREMISE
            else:
                kind = LineKind.DERIVED
                premise_phase = False

            if raw.label is None:
                raise ProofSyntaxError("missing line number", row=raw.row)
            if raw.label in seen_labels:
                raise ProofSyntaxError(
                    f"line number {raw.label} is already used on row {seen_labels[raw.label]}",
                    row=raw.row,
                    label=raw.label,
                )
            seen_labels[raw.label] = raw.row

            index = len(lines)
            for open_box in stack:
                open_box[2] = index
            lines.append(
                ProofLine(
                    row=raw.row,
                    depth=depth,
                    kind=kind,
                    label=raw.label,
                    formula=raw.formula,
                    formula_text=raw.formula_text,
                    justification=raw.justification,
                    fresh_constant=raw.fresh_constant,
                )
            )

        while stack:
            start, box_depth, last = stack.pop()
            boxes.append(Box(start, last, box_depth, closed=False))

        boxes.sort(key=lambda b: (b.start, b.depth))
        return Proof(lines=lines, boxes=boxes)


def parse_proof(
    text: str,
    variables: Iterable[str] = DEFAULT_VARIABLES,
    max_formula_depth: int = DEFAULT_MAX_DEPTH,
    max_box_depth: int = DEFAULT_MAX_BOX_DEPTH,
) -> Proof:
    """Parse a proof document, raising ProofSyntaxError on malformed input."""
    return ProofParser(variables, max_formula_depth, max_box_depth).parse(text)
