"""
Fitch scoping: which earlier lines and subproofs a line may cite.

A line L is visible from line i when L comes first and every box that
contains L also contains i. Once a box closes, its interior lines can only
be cited as a whole, through a range naming its assumption and its last
line.
"""

from __future__ import annotations

from ..errors import ScopeError
from ..models import Box, LineKind, Proof, ProofLine, Reference


class ScopeTracker:
    """
    Visibility queries over a parsed proof.

    Lines are addressed by their index in ``proof.lines``; references are
    resolved from their labels.
    """

    def __init__(self, proof: Proof):
        self.proof = proof
        self._index_by_label: dict[int, int] = {
            line.label: i for i, line in enumerate(proof.lines) if line.label is not None
        }
        self._box_by_start: dict[int, Box] = {box.start: box for box in proof.boxes}

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    def index_of(self, label: int) -> int | None:
        return self._index_by_label.get(label)

    def boxes_containing(self, index: int) -> list[Box]:
        """Boxes around line ``index``, outermost first."""
        return [box for box in self.proof.boxes if box.contains(index)]

    def box_opened_at(self, index: int) -> Box | None:
        return self._box_by_start.get(index)

    def enclosing_boxes(self, box: Box) -> list[Box]:
        """Boxes strictly around ``box``."""
        return [
            other
            for other in self.proof.boxes
            if other is not box and other.depth < box.depth and other.contains(box.start)
        ]

    def conclusion(self, box: Box) -> ProofLine:
        return self.proof.lines[box.end]

    def assumption(self, box: Box) -> ProofLine:
        return self.proof.lines[box.start]

    # -------------------------------------------------------------------------
    # Visibility
    # -------------------------------------------------------------------------

    def is_line_visible(self, target: int, from_index: int) -> bool:
        if target >= from_index:
            return False
        return all(box.contains(from_index) for box in self.boxes_containing(target))

    def is_box_visible(self, box: Box, from_index: int) -> bool:
        if box.end >= from_index:
            return False
        return all(outer.contains(from_index) for outer in self.enclosing_boxes(box))

    def visible_lines(self, from_index: int) -> list[ProofLine]:
        """Every earlier labelled line that ``from_index`` may cite."""
        return [
            line
            for i, line in enumerate(self.proof.lines[:from_index])
            if line.label is not None and self.is_line_visible(i, from_index)
        ]

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve_line(self, from_index: int, reference: Reference) -> ProofLine:
        """
        Resolve a single-label reference.

        Raises:
            ScopeError: if the line is missing, not earlier, or hidden
                inside a closed subproof
        """
        if reference.is_range:
            raise ScopeError(f"expected a line, got the range {reference}")
        target = self.index_of(reference.start)
        if target is None:
            raise ScopeError(f"line {reference.start} does not exist")
        if target == from_index:
            raise ScopeError("a line cannot cite itself")
        if target > from_index:
            raise ScopeError(f"line {reference.start} comes later in the proof")
        if not self.is_line_visible(target, from_index):
            raise ScopeError(f"line {reference.start} is inside a closed subproof")
        return self.proof.lines[target]

    def resolve_box(self, from_index: int, reference: Reference) -> Box:
        """
        Resolve a range reference to the closed subproof it names.

        Raises:
            ScopeError: if the range does not span exactly one subproof that
                has closed and whose surrounding scope is still open
        """
        if reference.end is None:
            raise ScopeError(f"expected a subproof range, got line {reference.start}")
        start = self.index_of(reference.start)
        if start is None:
            raise ScopeError(f"line {reference.start} does not exist")
        end = self.index_of(reference.end)
        if end is None:
            raise ScopeError(f"line {reference.end} does not exist")

        box = self.box_opened_at(start)
        if box is None:
            raise ScopeError(f"line {reference.start} does not open a subproof")
        if box.end != end:
            last = self.proof.lines[box.end].label
            raise ScopeError(
                f"{reference} does not span the subproof {reference.start}-{last}"
            )
        if box.end >= from_index:
            raise ScopeError(f"subproof {reference} is still open here")
        if not self.is_box_visible(box, from_index):
            raise ScopeError(f"subproof {reference} is inside a closed subproof")
        return box

    def is_citable_for_reiteration(self, line: ProofLine) -> bool:
        return line.kind in {LineKind.PREMISE, LineKind.DERIVED}
