"""Report artifact entry points."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from check.run import FileReport


def write_report(
    out_dir: Path,
    reports: Sequence[FileReport],
) -> dict[str, object]:
    """Write report artifacts via lazy import to avoid package import cycles."""
    from artifacts.write import write_report as _write_report

    return _write_report(out_dir, reports)


__all__ = ["write_report"]
