"""
fitchcheck - Fitch natural-deduction proof checker for first-order logic.

Verifies hand-written proofs laid out with vertical bars for subproofs,
and re-aligns them for display.
"""

from .checker import ProofChecker, check_proof
from .errors import (
    LineIssue,
    ProofError,
    ProofErrorCategory,
    ProofSyntaxError,
    RuleViolationError,
    ScopeError,
)
from .formatter import format_proof
from .models import FormatResult, ProofResult, ResultStatus

__version__ = "0.1.0"

__all__ = [
    "ProofChecker",
    "check_proof",
    "format_proof",
    "FormatResult",
    "ProofResult",
    "ResultStatus",
    "LineIssue",
    "ProofError",
    "ProofErrorCategory",
    "ProofSyntaxError",
    "RuleViolationError",
    "ScopeError",
]
