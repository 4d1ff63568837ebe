"""
First-order logic layer: syntax tree, parser and structural operations.
"""

from .syntax import (
    Binary,
    Bottom,
    Connective,
    Constant,
    Equality,
    Formula,
    FunctionApplication,
    Negation,
    Predicate,
    Quantified,
    QuantifierKind,
    Term,
    Variable,
    render,
)
from .parser import (
    DEFAULT_VARIABLE_LIST,
    DEFAULT_VARIABLES,
    FormulaParser,
    parse_formula,
    parse_term,
    parse_variables,
)
from .operations import (
    alpha_equal,
    constant_names,
    count_rewrites,
    free_variables,
    match_instance,
    occurs,
    substitute,
)

__all__ = [
    # Syntax
    "Binary",
    "Bottom",
    "Connective",
    "Constant",
    "Equality",
    "Formula",
    "FunctionApplication",
    "Negation",
    "Predicate",
    "Quantified",
    "QuantifierKind",
    "Term",
    "Variable",
    "render",
    # Parser
    "DEFAULT_VARIABLE_LIST",
    "DEFAULT_VARIABLES",
    "FormulaParser",
    "parse_formula",
    "parse_term",
    "parse_variables",
    # Operations
    "alpha_equal",
    "constant_names",
    "count_rewrites",
    "free_variables",
    "match_instance",
    "occurs",
    "substitute",
]
