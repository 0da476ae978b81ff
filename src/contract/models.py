"""Report models for known-import diagnostics and fixes."""

from __future__ import annotations

from pydantic import BaseModel, Field

from contract.artifacts import REPORT_SCHEMA_VERSION


class DiagnosticSpan(BaseModel):
    """Source span of a reported identifier."""

    start_byte: int
    end_byte: int
    start_line: int
    start_col: int
    end_line: int
    end_col: int


class DiagnosticRecord(BaseModel):
    """Schema for known_imports.jsonl records."""

    schema_version: int = Field(default=REPORT_SCHEMA_VERSION)
    diagnostic_id: str
    path: str
    span: DiagnosticSpan
    verdict: str
    symbol: str
    message: str
    expected: list[str] = Field(default_factory=list)

    def location(self) -> str:
        return f"{self.path}:{self.span.start_line}:{self.span.start_col}"


class FixEditRecord(BaseModel):
    """A single machine-applicable edit against the original file bytes."""

    start_byte: int
    end_byte: int
    text: str


class FileFixes(BaseModel):
    path: str
    edits: list[FixEditRecord]


class FixesReport(BaseModel):
    """Schema for known_imports_fixes.json."""

    schema_version: int = Field(default=REPORT_SCHEMA_VERSION)
    files: list[FileFixes] = Field(default_factory=list)


__all__ = [
    "DiagnosticRecord",
    "DiagnosticSpan",
    "FileFixes",
    "FixEditRecord",
    "FixesReport",
]
