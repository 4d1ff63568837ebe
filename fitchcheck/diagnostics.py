"""
Editor diagnostics derived from a ProofResult.

Editors receive the rendered result text, one message per line. Each message
leads with ``line <N>:`` where N is a Fitch label; the label is mapped back
to a physical row by finding the first document row that starts with it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .models import CORRECT_MESSAGE, ProofResult

DIAGNOSTIC_SOURCE = "fitch_lsp"
SEVERITY_ERROR = 1
DEFAULT_END_CHARACTER = 100

_PATTERNS = {
    # Fitch label reference: "line 12: ∧Intro: ..."
    "label": re.compile(r"(?:line\s+)(\d+)"),
    # Row opening with a label: "  12 | | P ∧ Q"
    "labelled_row": r"^\s*{label}(?!\d)",
}


def extract_line_number(message: str) -> int:
    """Fitch label named by a message, defaulting to 1."""
    if match := _PATTERNS["label"].search(message):
        return int(match.group(1))
    return 1


def locate_editor_line(text: str, label: int) -> int:
    """0-based row of the first document line starting with ``label``, else 0."""
    pattern = re.compile(_PATTERNS["labelled_row"].format(label=label))
    for index, line in enumerate(text.splitlines()):
        if pattern.match(line):
            return index
    return 0


@dataclass(frozen=True)
class Diagnostic:
    """A single editor diagnostic, spanning one row."""

    line: int
    message: str
    start_character: int = 0
    end_character: int = DEFAULT_END_CHARACTER
    severity: int = SEVERITY_ERROR
    source: str = DIAGNOSTIC_SOURCE

    def to_dict(self) -> dict[str, Any]:
        return {
            "range": {
                "start": {"line": self.line, "character": self.start_character},
                "end": {"line": self.line, "character": self.end_character},
            },
            "severity": self.severity,
            "source": self.source,
            "message": self.message,
        }


def collect_diagnostics(text: str, result: ProofResult) -> list[Diagnostic]:
    """
    Build one diagnostic per message line of ``result``.

    Args:
        text: The document that was checked
        result: What ``check_proof`` returned for it
    """
    diagnostics = []
    for message in str(result).splitlines():
        if not message.strip() or CORRECT_MESSAGE in message:
            continue
        label = extract_line_number(message)
        diagnostics.append(Diagnostic(locate_editor_line(text, label), message))
    return diagnostics
