"""Report artifact contract definitions.

Filenames, formats and identifier formats of the files a check run writes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Report schema version for diagnostics and fix artifacts.
REPORT_SCHEMA_VERSION = 1

DIAGNOSTICS_JSONL = "known_imports.jsonl"
FIXES_JSON = "known_imports_fixes.json"


@dataclass(frozen=True)
class ReportArtifactSpec:
    """Specification for one report artifact."""

    filename: str
    format: str
    required_fields_note: str


# ---------------------------------------------------------------------------
# Deterministic diagnostic_id
# ---------------------------------------------------------------------------
# Canonical format: diag:{path}@L{line}:C{col}:{verdict}:{symbol}
# - path: POSIX relative path (forward slashes, no ./ prefix)
# - line/col: 1-based integers
# - verdict: lowercase verdict value (e.g. "unimported")

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_path_label(path: str) -> str:
    normalized = _WHITESPACE_RUN.sub(" ", path.strip()).replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def build_diagnostic_id(
    path: str,
    start_line: int,
    start_col: int,
    verdict: str,
    symbol: str,
) -> str:
    """Build a deterministic diagnostic_id following the contract format."""
    return (
        f"diag:{normalize_path_label(path)}@L{start_line}:C{start_col}"
        f":{verdict}:{symbol}"
    )


REPORT_ARTIFACT_SPECS: dict[str, ReportArtifactSpec] = {
    "diagnostics": ReportArtifactSpec(
        filename=DIAGNOSTICS_JSONL,
        format="jsonl",
        required_fields_note="DiagnosticRecord fields required by contract.",
    ),
    "fixes": ReportArtifactSpec(
        filename=FIXES_JSON,
        format="json",
        required_fields_note="FixesReport fields required by contract.",
    ),
}


__all__ = [
    "DIAGNOSTICS_JSONL",
    "FIXES_JSON",
    "REPORT_ARTIFACT_SPECS",
    "REPORT_SCHEMA_VERSION",
    "ReportArtifactSpec",
    "build_diagnostic_id",
    "normalize_path_label",
]
