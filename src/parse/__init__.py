"""Parsing utilities for known-imports-core."""

from parse.imports import Binding, ImportSection, scan_imports
from parse.references import (
    Reference,
    ReferenceContext,
    SyntacticRole,
    iter_references,
)
from parse.treesitter_rust import SourceSpan, parse_source

__all__ = [
    "Binding",
    "ImportSection",
    "Reference",
    "ReferenceContext",
    "SourceSpan",
    "SyntacticRole",
    "iter_references",
    "parse_source",
    "scan_imports",
]
