"""
Proof layer: document structure and Fitch scoping.
"""

from .structure import (
    DEFAULT_MAX_BOX_DEPTH,
    ProofParser,
    parse_proof,
    parse_references,
)
from .scope import ScopeTracker

__all__ = [
    "DEFAULT_MAX_BOX_DEPTH",
    "ProofParser",
    "parse_proof",
    "parse_references",
    "ScopeTracker",
]
