"""Validation helpers for known-import report artifacts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from contract.artifacts import REPORT_ARTIFACT_SPECS, REPORT_SCHEMA_VERSION
from contract.models import DiagnosticRecord, FixesReport

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class ValidationMessage:
    artifact: str
    path: Path
    message: str
    line: int | None = None

    def location(self) -> str:
        if self.line is None:
            return str(self.path)
        return f"{self.path}:{self.line}"

    def to_dict(self) -> dict[str, object]:
        return {
            "artifact": self.artifact,
            "path": str(self.path),
            "line": self.line,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    errors: list[ValidationMessage] = field(default_factory=list)
    warnings: list[ValidationMessage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def validate_report(report_dir: Path) -> ValidationResult:
    """Check that a report directory holds well-formed diagnostics and fixes.

    Every record must parse as JSON, match its pydantic schema and carry the
    current schema_version. Problems are collected, never raised.
    """
    result = ValidationResult()

    if not report_dir.exists():
        result.errors.append(
            ValidationMessage(
                artifact="report_dir",
                path=report_dir,
                message="Report directory does not exist.",
            )
        )
        return result

    if not report_dir.is_dir():
        result.errors.append(
            ValidationMessage(
                artifact="report_dir",
                path=report_dir,
                message="Report path is not a directory.",
            )
        )
        return result

    for artifact_name, spec in REPORT_ARTIFACT_SPECS.items():
        path = report_dir / spec.filename
        if not path.exists():
            result.errors.append(
                ValidationMessage(
                    artifact=artifact_name,
                    path=path,
                    message="Required report file is missing.",
                )
            )
            continue

        if spec.format == "jsonl":
            _validate_diagnostics(artifact_name, path, result)
        elif spec.format == "json":
            _validate_fixes(artifact_name, path, result)
        else:
            result.errors.append(
                ValidationMessage(
                    artifact=artifact_name,
                    path=path,
                    message=f"Unsupported report format: {spec.format}.",
                )
            )

    return result


def _validate_diagnostics(
    artifact_name: str, path: Path, result: ValidationResult
) -> None:
    try:
        handle = path.open("rb")
    except OSError as exc:
        result.errors.append(
            ValidationMessage(
                artifact=artifact_name,
                path=path,
                message=f"Failed to read file: {exc}.",
            )
        )
        return

    seen_ids: set[str] = set()
    with handle:
        for line_number, raw_line in enumerate(handle, 1):
            line = raw_line.strip()
            if not line:
                continue
            try:
                data = orjson.loads(line)
            except orjson.JSONDecodeError as exc:
                result.errors.append(
                    ValidationMessage(
                        artifact=artifact_name,
                        path=path,
                        line=line_number,
                        message=f"Invalid JSON: {exc}.",
                    )
                )
                continue

            try:
                record = DiagnosticRecord.model_validate(data)
            except ValidationError as exc:
                result.errors.append(
                    ValidationMessage(
                        artifact=artifact_name,
                        path=path,
                        line=line_number,
                        message=f"Schema validation failed: {exc}.",
                    )
                )
                continue

            _check_schema_version(
                artifact_name, path, line_number, record.schema_version, result
            )
            if record.diagnostic_id in seen_ids:
                result.warnings.append(
                    ValidationMessage(
                        artifact=artifact_name,
                        path=path,
                        line=line_number,
                        message=f"Duplicate diagnostic_id: {record.diagnostic_id}.",
                    )
                )
            seen_ids.add(record.diagnostic_id)


def _validate_fixes(artifact_name: str, path: Path, result: ValidationResult) -> None:
    try:
        raw = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as exc:
        result.errors.append(
            ValidationMessage(
                artifact=artifact_name,
                path=path,
                message=f"Invalid JSON: {exc}.",
            )
        )
        return

    try:
        report = FixesReport.model_validate(raw)
    except ValidationError as exc:
        result.errors.append(
            ValidationMessage(
                artifact=artifact_name,
                path=path,
                message=f"Schema validation failed: {exc}.",
            )
        )
        return

    _check_schema_version(artifact_name, path, None, report.schema_version, result)
    for file_fixes in report.files:
        previous_end = -1
        for edit in file_fixes.edits:
            if edit.start_byte > edit.end_byte or edit.start_byte < previous_end:
                result.errors.append(
                    ValidationMessage(
                        artifact=artifact_name,
                        path=path,
                        message=(
                            f"Edits for {file_fixes.path} are unsorted or "
                            f"overlapping at byte {edit.start_byte}."
                        ),
                    )
                )
                break
            previous_end = edit.end_byte


def _check_schema_version(
    artifact_name: str,
    path: Path,
    line: int | None,
    schema_version: int,
    result: ValidationResult,
) -> None:
    if schema_version != REPORT_SCHEMA_VERSION:
        result.errors.append(
            ValidationMessage(
                artifact=artifact_name,
                path=path,
                line=line,
                message=(
                    "Schema version mismatch: "
                    f"expected {REPORT_SCHEMA_VERSION}, got {schema_version}."
                ),
            )
        )


__all__ = [
    "ValidationMessage",
    "ValidationResult",
    "validate_report",
]
