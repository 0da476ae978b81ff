"""Utility functions for report artifact writing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def _to_dict(obj: object) -> object:
    """Convert object to dict for JSON serialization."""
    from dataclasses import asdict, is_dataclass

    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    return obj


def _write_jsonl(path: Path, records: Sequence[object]) -> None:
    with path.open("wb") as f:
        for rec in records:
            payload = _to_dict(rec)
            f.write(orjson.dumps(payload, option=orjson.OPT_SORT_KEYS))
            f.write(b"\n")


def _write_json(path: Path, obj: object) -> None:
    payload = _to_dict(obj)
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    path.write_bytes(orjson.dumps(payload, option=opts))


def _get_output_dir_name(out_dir: Path, root: Path) -> str:
    """Get the output directory name for filtering."""
    try:
        if out_dir.is_relative_to(root):
            rel = out_dir.relative_to(root)
            if rel.parts:
                return rel.parts[0]
            return ""
    except ValueError:
        # Non-comparable paths mean out_dir is external; avoid filtering.
        return ""
    return ""
