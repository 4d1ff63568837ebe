"""
Tests for Fitch scoping: which lines and subproofs a line may cite.
"""

import pytest

from fitchcheck.errors import ScopeError
from fitchcheck.models import Reference
from fitchcheck.proof import ScopeTracker, parse_proof

NESTED = """\
1 | P
  |----
2 | | Q
  | |----
3 | | | R
  | | |----
4 | | | Q     Reit: 2
5 | | R → Q   →Intro: 3-4
6 | Q → (R → Q)   →Intro: 2-5
7 | P         Reit: 1
"""


@pytest.fixture
def tracker():
    return ScopeTracker(parse_proof(NESTED))


def index(tracker, label):
    return tracker.index_of(label)


class TestLineVisibility:
    """Tests for single-line citations."""

    def test_enclosing_lines_visible(self, tracker):
        """Lines of enclosing boxes are visible from inside."""
        assert tracker.is_line_visible(index(tracker, 2), index(tracker, 4))
        assert tracker.is_line_visible(index(tracker, 1), index(tracker, 4))

    def test_closed_box_lines_invisible(self, tracker):
        """Once a box closes, its lines are hidden."""
        assert not tracker.is_line_visible(index(tracker, 3), index(tracker, 5))
        assert not tracker.is_line_visible(index(tracker, 2), index(tracker, 7))

    def test_later_lines_invisible(self, tracker):
        """Nothing may cite forward."""
        assert not tracker.is_line_visible(index(tracker, 4), index(tracker, 2))

    def test_visible_lines(self, tracker):
        """visible_lines lists exactly the citable labels."""
        labels = [line.label for line in tracker.visible_lines(index(tracker, 7))]
        assert labels == [1, 6]

    def test_visible_lines_include_open_assumptions(self, tracker):
        """Assumptions of the boxes around a line are citable from it."""
        labels = [line.label for line in tracker.visible_lines(index(tracker, 4))]
        assert labels == [1, 2, 3]

    def test_resolve_missing_line(self, tracker):
        """A label that does not exist is a scope error."""
        with pytest.raises(ScopeError, match="line 99 does not exist"):
            tracker.resolve_line(index(tracker, 7), Reference(99))

    def test_resolve_self(self, tracker):
        """A line cannot justify itself."""
        with pytest.raises(ScopeError, match="cannot cite itself"):
            tracker.resolve_line(index(tracker, 7), Reference(7))

    def test_resolve_forward(self, tracker):
        """A later line cannot be cited."""
        with pytest.raises(ScopeError, match="comes later"):
            tracker.resolve_line(index(tracker, 4), Reference(7))

    def test_resolve_hidden(self, tracker):
        """A line in a closed box cannot be cited."""
        with pytest.raises(ScopeError, match="inside a closed subproof"):
            tracker.resolve_line(index(tracker, 7), Reference(4))


class TestBoxResolution:
    """Tests for subproof range citations."""

    def test_resolve_closed_box(self, tracker):
        """A finished box at the current level resolves."""
        box = tracker.resolve_box(index(tracker, 6), Reference(2, 5))
        assert tracker.assumption(box).label == 2
        assert tracker.conclusion(box).label == 5

    def test_inner_box_from_parent(self, tracker):
        """A nested box is citable from the box around it."""
        box = tracker.resolve_box(index(tracker, 5), Reference(3, 4))
        assert box.depth == 3

    def test_inner_box_hidden_outside(self, tracker):
        """A nested box is not citable once its parent closed."""
        with pytest.raises(ScopeError, match="inside a closed subproof"):
            tracker.resolve_box(index(tracker, 7), Reference(3, 4))

    def test_range_must_span_box(self, tracker):
        """The range end must be the box's last line."""
        with pytest.raises(ScopeError, match="does not span the subproof 2-5"):
            tracker.resolve_box(index(tracker, 6), Reference(2, 4))

    def test_range_must_start_at_assumption(self, tracker):
        """The range start must open a box."""
        with pytest.raises(ScopeError, match="does not open a subproof"):
            tracker.resolve_box(index(tracker, 7), Reference(1, 6))

    def test_box_still_open(self, tracker):
        """A box cannot be cited from inside itself."""
        with pytest.raises(ScopeError, match="still open"):
            tracker.resolve_box(index(tracker, 4), Reference(3, 4))

    def test_line_reference_where_range_expected(self, tracker):
        """A single label is not a subproof."""
        with pytest.raises(ScopeError, match="expected a subproof range"):
            tracker.resolve_box(index(tracker, 6), Reference(2))


class TestReiterationEligibility:
    """Tests for which lines Reit may repeat."""

    def test_premise_and_derived_citable(self, tracker):
        """Premises and derived lines can be reiterated."""
        assert tracker.is_citable_for_reiteration(tracker.proof.lines[index(tracker, 1)])
        assert tracker.is_citable_for_reiteration(tracker.proof.lines[index(tracker, 6)])

    def test_assumption_not_citable(self, tracker):
        """Assumptions are not reiterated."""
        assert not tracker.is_citable_for_reiteration(tracker.proof.lines[index(tracker, 2)])
