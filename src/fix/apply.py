"""Byte-range text edits and their application."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

Splice = tuple[int, int, bytes]

# Bytes that are not valid UTF-8 survive a decode/encode round trip.
SOURCE_ERRORS = "surrogateescape"


@dataclass(frozen=True)
class FixEdit:
    """Replacement of one import block, offsets against the original text.

    `block_index` is None for the zero-width insertion made into a file that
    has no import section yet.
    """

    start_byte: int
    end_byte: int
    text: str
    block_index: int | None = None

    @property
    def encoded(self) -> bytes:
        return self.text.encode("utf8", SOURCE_ERRORS)

    @property
    def report_text(self) -> str:
        """`text` with undecodable bytes shown as U+FFFD, safe to serialize."""
        return self.encoded.decode("utf8", errors="replace")


def splice(data: bytes, splices: Iterable[Splice]) -> bytes:
    """Apply (start, end, replacement) splices right to left.

    Raises:
        ValueError: If two splices overlap.
    """
    ordered = sorted(splices, key=lambda item: (item[0], item[1]))
    for previous, current in zip(ordered, ordered[1:]):
        if current[0] < previous[1]:
            msg = (
                f"Overlapping edits: [{previous[0]}, {previous[1]}) and "
                f"[{current[0]}, {current[1]})"
            )
            raise ValueError(msg)

    result = data
    for start, end, replacement in reversed(ordered):
        result = result[:start] + replacement + result[end:]
    return result


def apply_fix_edits(source_bytes: bytes, edits: Iterable[FixEdit]) -> bytes:
    return splice(
        source_bytes,
        ((edit.start_byte, edit.end_byte, edit.encoded) for edit in edits),
    )


__all__ = ["SOURCE_ERRORS", "FixEdit", "Splice", "apply_fix_edits", "splice"]
