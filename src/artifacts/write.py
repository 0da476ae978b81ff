from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artifacts.utils import _write_json, _write_jsonl
from contract.artifacts import DIAGNOSTICS_JSONL, FIXES_JSON
from contract.models import FileFixes, FixEditRecord, FixesReport

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from check.run import FileReport

logger = logging.getLogger(__name__)


def write_report(
    out_dir: Path,
    reports: Sequence[FileReport],
) -> dict[str, object]:
    """Write diagnostics and fix artifacts for a check run.

    Args:
        out_dir: Directory to write the artifacts into (created if missing)
        reports: Per-file reports, in the order they were analyzed

    Returns:
        Dictionary with counts and list of written artifact paths.
    """
    out_dir.mkdir(parents=True, exist_ok=True)

    diagnostics = [
        diagnostic for report in reports for diagnostic in report.diagnostics
    ]
    fixes = FixesReport(
        files=[
            FileFixes(
                path=report.path,
                edits=[
                    FixEditRecord(
                        start_byte=edit.start_byte,
                        end_byte=edit.end_byte,
                        text=edit.report_text,
                    )
                    for edit in report.edits
                ],
            )
            for report in reports
            if report.edits
        ]
    )

    diagnostics_path = out_dir / DIAGNOSTICS_JSONL
    fixes_path = out_dir / FIXES_JSON
    _write_jsonl(diagnostics_path, diagnostics)
    _write_json(fixes_path, fixes)
    logger.info(
        "Wrote %d diagnostics and fixes for %d files to %s",
        len(diagnostics),
        len(fixes.files),
        out_dir,
    )

    return {
        "diagnostic_count": len(diagnostics),
        "fixable_file_count": len(fixes.files),
        "artifacts": [str(diagnostics_path), str(fixes_path)],
    }
