"""Shared utilities for known-imports-core."""

from __future__ import annotations

from pathlib import Path

CRATE_ROOT_MODULE = "crate"

_ROOT_FILES = frozenset({"lib.rs", "main.rs"})


def path_to_module(file_path: str | Path, crate_root: str = "src") -> str:
    """Convert a Rust file path to its module path within the crate.

    Args:
        file_path: Path relative to the repository root (e.g., "src/foo/bar.rs")
        crate_root: Directory holding the crate's lib.rs or main.rs

    Returns:
        Module path (e.g., "crate::foo::bar")

    Examples:
        >>> path_to_module("src/foo/bar.rs")
        'crate::foo::bar'
        >>> path_to_module("src/lib.rs")
        'crate'
        >>> path_to_module(Path("src/foo/mod.rs"))
        'crate::foo'
    """
    path_str = file_path.as_posix() if isinstance(file_path, Path) else str(file_path)
    normalized_parts = [part for part in path_str.replace("\\", "/").split("/") if part]
    root_parts = [part for part in crate_root.replace("\\", "/").split("/") if part]

    module_parts = (
        normalized_parts[len(root_parts) :]
        if normalized_parts[: len(root_parts)] == root_parts
        else normalized_parts
    )

    # lib.rs/main.rs only name the crate root at the top level; elsewhere
    # they are ordinary modules.
    if len(module_parts) == 1 and module_parts[0] in _ROOT_FILES:
        module_parts = []
    elif module_parts and module_parts[-1] == "mod.rs":
        module_parts = module_parts[:-1]
    elif module_parts and module_parts[-1].endswith(".rs"):
        module_parts[-1] = module_parts[-1][:-3]

    return "::".join([CRATE_ROOT_MODULE, *module_parts])
