"""Turn unimported/misimported resolutions into import-section edits.

All changes that land in the same import block are merged into a single
replacement of that block, so the returned edits never overlap and can be
applied in one pass against the original text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fix.apply import SOURCE_ERRORS, FixEdit, Splice, splice
from registry.entries import SymbolKind
from resolve.resolver import Verdict

if TYPE_CHECKING:
    from collections.abc import Iterable

    from parse.imports import (
        Binding,
        ImportBlock,
        ImportSection,
        UseClause,
        UseDeclaration,
    )
    from resolve.resolver import Resolution


def _clause_removals(
    clause: UseClause, removed: set[Binding]
) -> list[tuple[int, int]] | None:
    """Byte ranges to delete from `clause`, or None if the clause goes entirely.

    Separators are removed with the clause: a run of removed list items takes
    the text up to the next kept item, or, at the end of a list, the text back
    to the previous kept item.
    """
    if not clause.is_list:
        return None if clause.binding in removed else []
    if not clause.children:
        return []

    results = [_clause_removals(child, removed) for child in clause.children]
    if all(result is None for result in results):
        return None

    children = clause.children
    spans: list[tuple[int, int]] = []
    index = 0
    while index < len(children):
        result = results[index]
        if result is not None:
            spans.extend(result)
            index += 1
            continue

        run_end = index
        while run_end < len(children) and results[run_end] is None:
            run_end += 1
        if run_end < len(children):
            spans.append((children[index].start_byte, children[run_end].start_byte))
        else:
            spans.append((children[index - 1].end_byte, children[run_end - 1].end_byte))
        index = run_end
    return spans


def _is_space(byte: int) -> bool:
    return chr(byte).isspace()


class _FixPlan:
    def __init__(self, section: ImportSection, source_bytes: bytes) -> None:
        self.section = section
        self.source_bytes = source_bytes
        self.insertions: list[str] = []
        self.rewrites: dict[int, str] = {}
        self.removals: set[Binding] = set()
        self.handled: set[Binding] = set()

    def _insert(self, line: str) -> None:
        if line not in self.insertions:
            self.insertions.append(line)

    def add_unimported(self, resolution: Resolution) -> None:
        path = resolution.expected_import_path
        if path is None:
            return
        # An alias already in use for a same-named item is reused for this one.
        binding = resolution.binding
        if binding is not None and binding.alias:
            self._insert(f"use {path} as {binding.alias};")
        else:
            self._insert(f"use {path};")

    def add_misimported(self, resolution: Resolution) -> None:
        binding = resolution.binding
        path = resolution.expected_import_path
        if binding is None or path is None or binding in self.handled:
            return

        declaration = self.section.declaration_of(binding)
        if declaration.has_attributes:
            return
        self.handled.add(binding)

        for old in resolution.superseded:
            if not self.section.declaration_of(old).has_attributes:
                self.removals.add(old)

        clause = f"{path} as {binding.alias}" if binding.alias else path
        if declaration.is_simple:
            self.rewrites[declaration.index] = clause
        else:
            self.removals.add(binding)
            self._insert(f"{declaration.visibility}use {clause};")

    def _declaration_splices(self, block: ImportBlock) -> list[Splice]:
        splices: list[Splice] = []
        dropped: list[int] = []
        for index in block.declaration_indices:
            declaration = self.section.declarations[index]

            rewrite = self.rewrites.get(index)
            if rewrite is not None:
                splices.append(
                    (
                        declaration.argument_start,
                        declaration.argument_end,
                        rewrite.encode("utf8"),
                    )
                )
                continue

            if not self.removals.intersection(declaration.tree.iter_bindings()):
                continue

            spans = _clause_removals(declaration.tree, self.removals)
            if spans is None:
                dropped.append(index)
                continue
            collapsed = self._collapsed_group(declaration)
            if collapsed is not None:
                splices.append(
                    (declaration.argument_start, declaration.argument_end, collapsed)
                )
            else:
                splices.extend((start, end, b"") for start, end in spans)

        for first, last in self._runs(block, dropped):
            splices.append((*self._dropped_run_span(block, first, last), b""))
        return splices

    def _collapsed_group(self, declaration: UseDeclaration) -> bytes | None:
        """`x::{A, B}` losing `B` becomes `x::A` rather than `x::{A}`."""
        tree = declaration.tree
        if not tree.is_list:
            return None
        kept = []
        for child in tree.children:
            result = _clause_removals(child, self.removals)
            if result is not None:
                kept.append((child, result))
        if len(kept) != 1:
            return None
        child, result = kept[0]
        # `x::{self}` has no shorter spelling.
        if child.is_list or result or child.binding is None:
            return None
        if child.binding.imported_kind is SymbolKind.MODULE:
            return None

        brace = self.source_bytes.find(
            b"{", declaration.argument_start, declaration.argument_end
        )
        if brace < 0:
            return None
        prefix = self.source_bytes[declaration.argument_start : brace]
        return prefix + self.source_bytes[child.start_byte : child.end_byte]

    @staticmethod
    def _runs(block: ImportBlock, dropped: list[int]) -> list[tuple[int, int]]:
        """Group dropped declarations into runs of block neighbors."""
        order = {
            index: position
            for position, index in enumerate(block.declaration_indices)
        }
        runs: list[tuple[int, int]] = []
        for index in dropped:
            if runs and order[index] == order[runs[-1][1]] + 1:
                runs[-1] = (runs[-1][0], index)
            else:
                runs.append((index, index))
        return runs

    def _dropped_run_span(
        self, block: ImportBlock, first: int, last: int
    ) -> tuple[int, int]:
        start = self.section.declarations[first].start_byte
        end = self.section.declarations[last].end_byte
        if end < block.end_byte:
            while end < block.end_byte and _is_space(self.source_bytes[end]):
                end += 1
            return start, end
        while start > block.start_byte and _is_space(self.source_bytes[start - 1]):
            start -= 1
        return start, end

    def _block_edit(self, block: ImportBlock, insertions: list[str]) -> FixEdit | None:
        original = self.source_bytes[block.start_byte : block.end_byte]
        relative = [
            (start - block.start_byte, end - block.start_byte, text)
            for start, end, text in self._declaration_splices(block)
        ]
        text = splice(original, relative).decode("utf8", SOURCE_ERRORS)
        if insertions:
            if text.strip():
                text += "".join(f"\n{line}" for line in insertions)
            else:
                text = "\n".join(insertions)

        if text.encode("utf8", SOURCE_ERRORS) == original:
            return None
        return FixEdit(
            start_byte=block.start_byte,
            end_byte=block.end_byte,
            text=text,
            block_index=block.index,
        )

    def _header_insertion(self) -> FixEdit:
        point = self.section.insertion_point
        lines = "\n".join(self.insertions)
        if point >= len(self.source_bytes):
            needs_newline = bool(self.source_bytes) and not self.source_bytes.endswith(
                b"\n"
            )
            text = ("\n" if needs_newline else "") + lines + "\n"
        else:
            text = lines + "\n\n"
        return FixEdit(start_byte=point, end_byte=point, text=text)

    def edits(self) -> tuple[FixEdit, ...]:
        target = self.section.insertion_block
        edits: list[FixEdit] = []
        if target is None and self.insertions:
            edits.append(self._header_insertion())

        for block in self.section.blocks:
            insertions = self.insertions if block == target else []
            edit = self._block_edit(block, insertions)
            if edit is not None:
                edits.append(edit)

        edits.sort(key=lambda edit: (edit.start_byte, edit.end_byte))
        return tuple(edits)


def synthesize_fixes(
    resolutions: Iterable[Resolution],
    section: ImportSection,
    source_bytes: bytes,
) -> tuple[FixEdit, ...]:
    """Build the merged, non-overlapping edits that fix a file's imports.

    Args:
        resolutions: Resolutions in source order; only `unimported` and
            `misimported` verdicts with a single expected path produce edits
        section: The import section the resolutions were checked against
        source_bytes: The original file text

    Returns:
        Edits sorted by start offset, at most one per import block. New
        declarations are appended to the first import block in the order
        their references first appear.
    """
    plan = _FixPlan(section, source_bytes)
    for resolution in resolutions:
        if resolution.verdict is Verdict.UNIMPORTED:
            plan.add_unimported(resolution)
        elif resolution.verdict is Verdict.MISIMPORTED:
            plan.add_misimported(resolution)
    return plan.edits()


__all__ = ["synthesize_fixes"]
