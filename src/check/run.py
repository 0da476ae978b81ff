"""Per-file and per-repository known-import checking."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

from artifacts.utils import _get_output_dir_name
from check.diagnostics import build_diagnostic
from fix.apply import apply_fix_edits
from fix.synthesizer import synthesize_fixes
from parse.imports import scan_imports
from parse.references import iter_references
from parse.treesitter_rust import parse_source
from resolve.resolver import resolve_references
from rules.config import resolve_output_dir
from scan.files import find_rust_files
from utils import path_to_module

if TYPE_CHECKING:
    from pathlib import Path

    from contract.models import DiagnosticRecord
    from fix.apply import FixEdit
    from registry import Registry
    from resolve.resolver import Resolution
    from rules.config import KnownImportsConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileReport:
    """Outcome of checking one file."""

    path: str
    source: bytes = b""
    module_path: str | None = None
    resolutions: tuple[Resolution, ...] = ()
    edits: tuple[FixEdit, ...] = ()

    @property
    def violations(self) -> tuple[Resolution, ...]:
        return tuple(
            resolution for resolution in self.resolutions if resolution.is_violation
        )

    @cached_property
    def diagnostics(self) -> list[DiagnosticRecord]:
        return [build_diagnostic(self.path, resolution) for resolution in self.violations]

    def fixed_source(self) -> bytes:
        if not self.edits:
            return self.source
        return apply_fix_edits(self.source, self.edits)


@dataclass
class RepoReport:
    """Reports for every file checked in one run."""

    files: list[FileReport] = field(default_factory=list)
    complete: bool = True

    @property
    def violation_count(self) -> int:
        return sum(len(report.violations) for report in self.files)

    @property
    def diagnostics(self) -> list[DiagnosticRecord]:
        return [diagnostic for report in self.files for diagnostic in report.diagnostics]


def analyze_source(
    source: bytes | str,
    registry: Registry,
    *,
    path: str = "<memory>",
    module_path: str | None = None,
) -> FileReport:
    """Check one file's text and synthesize its fixes.

    Args:
        source: File contents; text is encoded as UTF-8
        registry: Known imports
        path: Label used in diagnostics
        module_path: The file's own module path, used to accept names the
            file itself declares

    Returns:
        FileReport with one resolution per reference, in source order.
    """
    source_bytes = source.encode("utf8") if isinstance(source, str) else source
    tree = parse_source(source_bytes)
    root_node = tree.root_node
    if root_node.has_error:
        logger.debug("Syntax errors in %s; checking the recoverable parts", path)

    section = scan_imports(root_node, source_bytes)
    resolutions = resolve_references(
        iter_references(root_node, source_bytes),
        registry,
        section,
        module_path=module_path,
    )
    edits = synthesize_fixes(resolutions, section, source_bytes)
    return FileReport(
        path=path,
        source=source_bytes,
        module_path=module_path,
        resolutions=resolutions,
        edits=edits,
    )


def analyze_file(
    file_path: Path,
    root: Path,
    registry: Registry,
    *,
    crate_root: str = "src",
) -> FileReport:
    """Check a file on disk; unreadable files yield an empty report."""
    rel_path = file_path.relative_to(root).as_posix()
    try:
        source = file_path.read_bytes()
    except OSError as exc:
        logger.warning("Skipping unreadable file %s: %s", rel_path, exc)
        return FileReport(path=rel_path)

    return analyze_source(
        source,
        registry,
        path=rel_path,
        module_path=path_to_module(rel_path, crate_root),
    )


def _iter_checked_files(root: Path, config: KnownImportsConfig) -> list[Path]:
    out_dir = resolve_output_dir(root, config.output_dir)
    return list(
        find_rust_files(
            root,
            output_dir=_get_output_dir_name(out_dir, root.resolve()),
            include_patterns=config.include or None,
            exclude_patterns=config.exclude or None,
            nested_gitignore=config.nested_gitignore,
        )
    )


def check_repo(
    root: Path,
    config: KnownImportsConfig,
    registry: Registry,
    *,
    time_budget: float | None = None,
) -> RepoReport:
    """Check every Rust file under `root` in deterministic order.

    Args:
        root: Repository root
        config: Loaded configuration
        registry: Known imports
        time_budget: Seconds after which no further files are started

    Returns:
        RepoReport; `complete` is False when the budget ran out.
    """
    report = RepoReport()
    deadline = time.monotonic() + time_budget if time_budget is not None else None

    files = _iter_checked_files(root, config)
    for index, file_path in enumerate(files):
        if deadline is not None and time.monotonic() >= deadline:
            logger.warning(
                "Time budget exhausted; %d of %d files not checked",
                len(files) - index,
                len(files),
            )
            report.complete = False
            break
        logger.debug("Checking %s", file_path)
        report.files.append(
            analyze_file(file_path, root, registry, crate_root=config.crate_root)
        )

    logger.info(
        "Checked %d files: %d violations", len(report.files), report.violation_count
    )
    return report


def fix_repo(
    root: Path,
    config: KnownImportsConfig,
    registry: Registry,
    *,
    time_budget: float | None = None,
) -> tuple[RepoReport, list[Path]]:
    """Apply every synthesized fix in place.

    Returns:
        The pre-fix report and the files that were rewritten.
    """
    report = check_repo(root, config, registry, time_budget=time_budget)
    changed: list[Path] = []
    for file_report in report.files:
        if not file_report.edits:
            continue
        target = root / file_report.path
        target.write_bytes(file_report.fixed_source())
        logger.debug("Fixed %s (%d edits)", file_report.path, len(file_report.edits))
        changed.append(target)

    logger.info("Rewrote %d files", len(changed))
    return report, changed


__all__ = [
    "FileReport",
    "RepoReport",
    "analyze_file",
    "analyze_source",
    "check_repo",
    "fix_repo",
]
