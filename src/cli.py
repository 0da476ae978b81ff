"""Command-line interface for known-imports-core."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from artifacts.write import write_report
from check.run import check_repo, fix_repo
from contract.validation import validate_report
from rules.config import ConfigError, build_registry, load_config, resolve_output_dir
from verify.verify import verify_determinism, verify_idempotence

if TYPE_CHECKING:
    from check.run import RepoReport
    from registry import Registry
    from rules.config import KnownImportsConfig


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Repository root (default: .)",
    )


def _add_time_budget(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--time-budget",
        type=float,
        default=None,
        help="Stop starting new files after this many seconds",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="known-imports")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check", help="Report imports that do not match the known-import registry"
    )
    _add_common_paths(check_parser)
    _add_time_budget(check_parser)
    check_parser.add_argument(
        "--output-dir",
        default=None,
        help="Output directory for report artifacts (default: config output dir)",
    )
    check_parser.add_argument(
        "--no-report",
        action="store_true",
        help="Print diagnostics without writing report artifacts",
    )

    fix_parser = subparsers.add_parser("fix", help="Rewrite imports in place")
    _add_common_paths(fix_parser)
    _add_time_budget(fix_parser)

    validate_parser = subparsers.add_parser(
        "validate", help="Validate report artifacts"
    )
    _add_common_paths(validate_parser)
    validate_parser.add_argument(
        "--report-dir",
        default=None,
        help="Report directory (default: config output dir)",
    )

    verify_parser = subparsers.add_parser(
        "verify", help="Verify that fixes are idempotent and reports deterministic"
    )
    _add_common_paths(verify_parser)
    verify_parser.add_argument(
        "--report-dir",
        default=None,
        help="Also compare a regenerated report against this directory",
    )

    return parser


def _load(root: Path) -> tuple[KnownImportsConfig, Registry]:
    config = load_config(root)
    return config, build_registry(config, root)


def _resolve_report_dir(
    root: Path, config: KnownImportsConfig, report_dir: str | None
) -> Path:
    if report_dir is None:
        return resolve_output_dir(root, config.output_dir)
    return Path(report_dir).expanduser().resolve()


def _print_diagnostics(report: RepoReport) -> None:
    for diagnostic in report.diagnostics:
        sys.stderr.write(
            f"{diagnostic.location()}: {diagnostic.verdict}: {diagnostic.message}\n"
        )


def _handle_check(
    root: Path,
    output_dir: str | None,
    *,
    no_report: bool,
    time_budget: float | None,
) -> int:
    config, registry = _load(root)
    report = check_repo(root, config, registry, time_budget=time_budget)
    _print_diagnostics(report)
    if not no_report:
        write_report(_resolve_report_dir(root, config, output_dir), report.files)
    return 1 if report.violation_count else 0


def _handle_fix(root: Path, time_budget: float | None) -> int:
    config, registry = _load(root)
    _, changed = fix_repo(root, config, registry, time_budget=time_budget)
    for path in changed:
        sys.stdout.write(f"fixed: {path.relative_to(root).as_posix()}\n")

    remaining = check_repo(root, config, registry, time_budget=time_budget)
    _print_diagnostics(remaining)
    return 1 if remaining.violation_count else 0


def _handle_validate(root: Path, report_dir: str | None) -> int:
    config = load_config(root)
    result = validate_report(_resolve_report_dir(root, config, report_dir))
    for warning in result.warnings:
        sys.stderr.write(f"{warning.location()}: warning: {warning.message}\n")
    if result.errors:
        for error in result.errors:
            sys.stderr.write(f"{error.location()}: {error.message}\n")
        return 1
    return 0


def _handle_verify(root: Path, report_dir: str | None) -> int:
    config, registry = _load(root)
    exit_code = 0

    idempotence = verify_idempotence(root, config, registry)
    for path in idempotence.unstable:
        sys.stderr.write(f"unstable: {path}\n")
    if not idempotence.ok:
        exit_code = 1

    if report_dir is not None:
        resolved_report_dir = Path(report_dir).expanduser().resolve()
        try:
            result = verify_determinism(
                root=root,
                config=config,
                registry=registry,
                report_dir=resolved_report_dir,
            )
        except (FileNotFoundError, NotADirectoryError) as exc:
            sys.stderr.write(f"report-dir: {resolved_report_dir}\n")
            sys.stderr.write(f"error: {exc}\n")
            return 2
        if not result.ok:
            for label, paths in (
                ("missing", result.missing),
                ("extra", result.extra),
                ("mismatches", result.mismatches),
            ):
                for path in paths:
                    sys.stderr.write(f"{label}: {path}\n")
            exit_code = 1

    return exit_code


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    root = Path(args.root).expanduser().resolve()

    try:
        if args.command == "check":
            return _handle_check(
                root,
                args.output_dir,
                no_report=args.no_report,
                time_budget=args.time_budget,
            )

        if args.command == "fix":
            return _handle_fix(root, args.time_budget)

        if args.command == "validate":
            return _handle_validate(root, args.report_dir)

        if args.command == "verify":
            return _handle_verify(root, args.report_dir)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
