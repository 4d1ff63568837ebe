"""
Formatter: re-render a proof with aligned labels, bars and justifications.

The formatter reuses the proof-structure parser, so only documents that
parse can be formatted. Formulas are printed as written; rule names are
printed in their canonical spelling.
"""

from __future__ import annotations

import logging

from .errors import ProofSyntaxError
from .logic.parser import DEFAULT_MAX_DEPTH, DEFAULT_VARIABLE_LIST, parse_variables
from .models import FormatResult, LineKind, Proof, ProofLine
from .proof.structure import DEFAULT_MAX_BOX_DEPTH, parse_proof
from .rulebook import DEFAULT_RULESET

logger = logging.getLogger(__name__)

MIN_DIVIDER_WIDTH = 4
JUSTIFICATION_GAP = 2


def _bars(depth: int) -> str:
    return "| " * depth


def _justification_text(line: ProofLine) -> str:
    if line.justification is None:
        return ""
    info = DEFAULT_RULESET.lookup(line.justification.rule_text)
    return line.justification.render(info.name if info else None)


def _divider(proof: Proof, index: int) -> str:
    line = proof.lines[index]
    width = MIN_DIVIDER_WIDTH
    # Span the widest row the divider sits under
    for previous in reversed(proof.lines[:index]):
        if previous.is_structural or previous.depth != line.depth:
            break
        width = max(width, len(previous.content))
        if previous.kind == LineKind.ASSUMPTION:
            break
    return _bars(line.depth - 1) + "|" + "-" * width


def render_proof(proof: Proof) -> str:
    """Render a parsed proof as aligned text, one row per line."""
    label_width = proof.max_label_width
    indent = " " * (label_width + 1)

    bodies = []
    for index, line in enumerate(proof.lines):
        if line.kind == LineKind.SEPARATOR:
            bodies.append(_bars(line.depth).rstrip())
        elif line.kind == LineKind.DIVIDER:
            bodies.append(_divider(proof, index))
        else:
            bodies.append(_bars(line.depth) + line.content)

    column = max(
        (len(body) for body, line in zip(bodies, proof.lines) if line.justification),
        default=0,
    )

    rows = []
    for body, line in zip(bodies, proof.lines):
        prefix = f"{line.label:>{label_width}} " if line.label is not None else indent
        justification = _justification_text(line)
        if justification:
            body = body.ljust(column + JUSTIFICATION_GAP) + justification
        rows.append((prefix + body).rstrip())
    return "\n".join(rows)


def format_proof(
    text: str,
    bindable_variables: str = DEFAULT_VARIABLE_LIST,
    *,
    max_formula_depth: int = DEFAULT_MAX_DEPTH,
    max_box_depth: int = DEFAULT_MAX_BOX_DEPTH,
) -> FormatResult:
    """
    Re-align a proof document.

    Returns:
        FormatResult: the aligned text, or the parse error message when
        the document cannot be parsed
    """
    try:
        variables = parse_variables(bindable_variables)
        proof = parse_proof(text, variables, max_formula_depth, max_box_depth)
    except ValueError as exc:
        return FormatResult.failure(str(exc))
    except ProofSyntaxError as exc:
        logger.info("Not formatting: %s", exc.issue.message)
        return FormatResult.failure(exc.issue.message)

    rendered = render_proof(proof)
    if rendered and text.endswith("\n"):
        rendered += "\n"
    return FormatResult.success(rendered)
