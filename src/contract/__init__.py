"""Stable report surface for known-imports-core.

Filenames and record schemas of the artifacts a check run writes. Treat these
exports as the boundary other tools read reports through.
"""

from contract.artifacts import (
    DIAGNOSTICS_JSONL,
    FIXES_JSON,
    REPORT_ARTIFACT_SPECS,
    REPORT_SCHEMA_VERSION,
    ReportArtifactSpec,
    build_diagnostic_id,
)


def __getattr__(name: str) -> object:
    if name in {"DiagnosticRecord", "DiagnosticSpan", "FixEditRecord", "FixesReport"}:
        from contract.models import (
            DiagnosticRecord,
            DiagnosticSpan,
            FixEditRecord,
            FixesReport,
        )

        return {
            "DiagnosticRecord": DiagnosticRecord,
            "DiagnosticSpan": DiagnosticSpan,
            "FixEditRecord": FixEditRecord,
            "FixesReport": FixesReport,
        }[name]

    if name in {"ValidationMessage", "ValidationResult", "validate_report"}:
        from contract.validation import (
            ValidationMessage,
            ValidationResult,
            validate_report,
        )

        return {
            "ValidationMessage": ValidationMessage,
            "ValidationResult": ValidationResult,
            "validate_report": validate_report,
        }[name]

    msg = f"module 'contract' has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "DIAGNOSTICS_JSONL",
    "FIXES_JSON",
    "REPORT_ARTIFACT_SPECS",
    "REPORT_SCHEMA_VERSION",
    "DiagnosticRecord",
    "DiagnosticSpan",
    "FixEditRecord",
    "FixesReport",
    "ReportArtifactSpec",
    "ValidationMessage",
    "ValidationResult",
    "build_diagnostic_id",
    "validate_report",
]
