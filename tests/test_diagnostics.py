"""
Tests for mapping check results to editor diagnostics.
"""

from fitchcheck import check_proof
from fitchcheck.diagnostics import (
    Diagnostic,
    collect_diagnostics,
    extract_line_number,
    locate_editor_line,
)

DOCUMENT = """\
 1 | P
   |----
 2 | Q      Reit: 1
 3 | P      Reit: 1
10 | R      Reit: 1
"""


class TestLineNumbers:
    """Tests for label extraction and row lookup."""

    def test_extract_line_number(self):
        """The first 'line N' wins."""
        assert extract_line_number("line 12: ∧Intro: expects 2 lines") == 12
        assert extract_line_number("Fatal error: line 4: missing formula") == 4

    def test_extract_defaults_to_one(self):
        """Messages without a label map to line 1."""
        assert extract_line_number("row 3: missing line number") == 1

    def test_locate_editor_line(self):
        """The row is found by its leading label."""
        assert locate_editor_line(DOCUMENT, 2) == 2
        assert locate_editor_line(DOCUMENT, 10) == 4

    def test_locate_does_not_match_longer_labels(self):
        """Label 1 is not found on the row labelled 10."""
        assert locate_editor_line("10 | P\n1 | Q\n", 1) == 1

    def test_locate_missing_label(self):
        """An unknown label maps to the first row."""
        assert locate_editor_line(DOCUMENT, 7) == 0


class TestCollectDiagnostics:
    """Tests for diagnostics built from a ProofResult."""

    def test_one_diagnostic_per_error(self):
        """Each message becomes a diagnostic on its row."""
        result = check_proof(DOCUMENT)
        diagnostics = collect_diagnostics(DOCUMENT, result)
        assert [d.line for d in diagnostics] == [2, 4]
        assert diagnostics[0].message == "line 2: Reit: formula differs from line 1"

    def test_correct_proof_has_no_diagnostics(self):
        """A correct proof yields nothing."""
        text = "1 | P\n  |----\n2 | P   Reit: 1\n"
        assert collect_diagnostics(text, check_proof(text)) == []

    def test_fatal_error_diagnostic(self):
        """A fatal error is placed on the row of its label."""
        text = "1 | P\n  |----\n2 | P ∧\n"
        diagnostics = collect_diagnostics(text, check_proof(text))
        assert len(diagnostics) == 1
        assert diagnostics[0].line == 2
        assert diagnostics[0].message.startswith("Fatal error: line 2:")

    def test_to_dict_shape(self):
        """Diagnostics serialize in the editor-protocol shape."""
        diagnostic = Diagnostic(line=3, message="line 4: missing justification")
        assert diagnostic.to_dict() == {
            "range": {
                "start": {"line": 3, "character": 0},
                "end": {"line": 3, "character": 100},
            },
            "severity": 1,
            "source": "fitch_lsp",
            "message": "line 4: missing justification",
        }
