"""Rust source discovery for known-imports-core."""

from __future__ import annotations

from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

RUST_SUFFIX = ".rs"

# Directories never holding checked sources: Cargo build output and VCS data.
SKIPPED_DIRS = frozenset({"target", ".git"})


def _matches_any(rel_path: str, patterns: list[str] | None) -> bool:
    return bool(patterns) and any(fnmatch(rel_path, pat) for pat in patterns or ())


def _resolved_relative(path: Path, root: Path) -> Path | None:
    """Relative path of `path` under `root`, or None if it resolves outside."""
    try:
        path.resolve().relative_to(root.resolve())
        return path.relative_to(root)
    except (OSError, ValueError):
        return None


def _is_checked_file(
    path: Path,
    root: Path,
    *,
    output_dir: str,
    gitignore_matches: Callable[[str], bool] | None,
    include_patterns: list[str] | None,
    exclude_patterns: list[str] | None,
) -> bool:
    if path.is_symlink() or not path.is_file():
        return False

    rel_path = _resolved_relative(path, root)
    if rel_path is None:
        return False

    directories = rel_path.parts[:-1]
    if SKIPPED_DIRS.intersection(directories):
        return False
    if output_dir and directories and directories[0] == output_dir:
        return False

    if gitignore_matches is not None and gitignore_matches(str(path)):
        return False

    rel_path_str = rel_path.as_posix()
    if include_patterns and not _matches_any(rel_path_str, include_patterns):
        return False
    return not _matches_any(rel_path_str, exclude_patterns)


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    gitignore_paths = [root / ".gitignore", *root.rglob(".gitignore")]
    unique_paths = {path for path in gitignore_paths if path.is_file()}
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    matchers = [parse_gitignore(path) for path in _iter_gitignore_files(root)]
    if not matchers:
        return None

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                # Paths outside a nested .gitignore's base are not its concern.
                continue
        return False

    return matches


def find_rust_files(
    directory: Path,
    *,
    output_dir: str = ".known-imports",
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find all Rust source files in a directory, respecting .gitignore.

    Args:
        directory: Repository root to search
        output_dir: Top-level report directory name to skip
        include_patterns: Optional fnmatch patterns; if provided, files must
            match at least one of them
        exclude_patterns: Optional fnmatch patterns; matching files are skipped
        nested_gitignore: Compose every .gitignore below the root instead of
            only the root one

    Yields:
        Paths of `*.rs` files, sorted by relative path. Symlinks, files that
        resolve outside the root and anything under `target/` are skipped.
    """
    gitignore_matches = _build_gitignore_matcher(
        directory,
        nested_gitignore=nested_gitignore,
    )

    matched_files = [
        path
        for path in directory.rglob(f"*{RUST_SUFFIX}")
        if _is_checked_file(
            path,
            directory,
            output_dir=output_dir,
            gitignore_matches=gitignore_matches,
            include_patterns=include_patterns,
            exclude_patterns=exclude_patterns,
        )
    ]
    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())

    yield from matched_files


__all__ = ["RUST_SUFFIX", "SKIPPED_DIRS", "find_rust_files"]
