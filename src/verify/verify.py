"""Idempotence and determinism verification for known-import fixes."""

from __future__ import annotations

import filecmp
import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from artifacts.write import write_report
from check.run import analyze_source, check_repo

if TYPE_CHECKING:
    from registry import Registry
    from rules.config import KnownImportsConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdempotenceResult:
    ok: bool
    changed: tuple[str, ...] = field(default_factory=tuple)
    unstable: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    mismatches: tuple[str, ...] = field(default_factory=tuple)
    missing: tuple[str, ...] = field(default_factory=tuple)
    extra: tuple[str, ...] = field(default_factory=tuple)


def verify_idempotence(
    root: Path,
    config: KnownImportsConfig,
    registry: Registry,
) -> IdempotenceResult:
    """Verify that fixing a repository once leaves nothing left to fix.

    Each file's fixes are applied in memory and the fixed text is analyzed
    again; the working tree is never written.

    Returns:
        IdempotenceResult listing the files a first pass would change and the
        files whose fixed text still produces edits.
    """
    report = check_repo(root, config, registry)
    changed: list[str] = []
    unstable: list[str] = []
    for file_report in report.files:
        if not file_report.edits:
            continue
        changed.append(file_report.path)
        second = analyze_source(
            file_report.fixed_source(),
            registry,
            path=file_report.path,
            module_path=file_report.module_path,
        )
        if second.edits:
            logger.warning("Fixes for %s are not idempotent", file_report.path)
            unstable.append(file_report.path)

    return IdempotenceResult(
        ok=not unstable,
        changed=tuple(changed),
        unstable=tuple(unstable),
    )


def _list_relative_files(root: Path) -> set[Path]:
    return {path.relative_to(root) for path in root.rglob("*") if path.is_file()}


def verify_determinism(
    *,
    root: Path,
    config: KnownImportsConfig,
    registry: Registry,
    report_dir: Path,
) -> DeterminismResult:
    """Verify that report artifacts are reproducible byte-for-byte.

    Regenerates the report into a temporary directory and compares it against
    `report_dir`. File set comparisons are performed on relative paths.

    Raises:
        FileNotFoundError: If report_dir does not exist.
        NotADirectoryError: If report_dir is not a directory.
    """
    if not report_dir.exists():
        msg = f"Report directory does not exist: {report_dir}"
        raise FileNotFoundError(msg)
    if not report_dir.is_dir():
        msg = f"Report path is not a directory: {report_dir}"
        raise NotADirectoryError(msg)

    report = check_repo(root, config, registry)
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        write_report(temp_path, report.files)

        original_files = _list_relative_files(report_dir)
        regenerated_files = _list_relative_files(temp_path)

        missing = sorted(str(path) for path in original_files - regenerated_files)
        extra = sorted(str(path) for path in regenerated_files - original_files)

        mismatches = [
            str(path)
            for path in sorted(original_files & regenerated_files)
            if not filecmp.cmp(report_dir / path, temp_path / path, shallow=False)
        ]

    ok = not missing and not extra and not mismatches
    return DeterminismResult(
        ok=ok,
        mismatches=tuple(mismatches),
        missing=tuple(missing),
        extra=tuple(extra),
    )


__all__ = [
    "DeterminismResult",
    "IdempotenceResult",
    "verify_determinism",
    "verify_idempotence",
]
