"""Human-readable diagnostics for violating resolutions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from contract.artifacts import build_diagnostic_id
from contract.models import DiagnosticRecord, DiagnosticSpan
from resolve.resolver import Verdict

if TYPE_CHECKING:
    from resolve.resolver import Resolution


def _quoted(paths: tuple[str, ...]) -> str:
    return ", ".join(f"`{path}`" for path in paths)


def diagnostic_message(resolution: Resolution) -> str:
    name = resolution.reference.identifier_text
    paths = resolution.expected_paths
    verdict = resolution.verdict

    if verdict is Verdict.UNIMPORTED:
        if len(paths) == 1:
            return f"`{name}` is not imported; expected `use {paths[0]};`"
        return f"`{name}` is not imported; expected one of {_quoted(paths)}"
    if verdict is Verdict.MISIMPORTED:
        imported = resolution.binding.full_path if resolution.binding else "?"
        return f"`{name}` is imported from `{imported}`; expected {_quoted(paths)}"
    if verdict is Verdict.AMBIGUOUS_INTERFACE:
        interfaces = tuple(
            sorted(
                {
                    entry.owning_interface
                    for entry in resolution.expected_entries
                    if entry.owning_interface
                }
            )
        )
        return (
            f"method `{name}` is provided by several traits ({_quoted(interfaces)}); "
            "import exactly one of them"
        )
    if verdict is Verdict.UNRESOLVABLE:
        return (
            f"`{name}` is declared in several modules ({_quoted(paths)}); "
            "import one of them explicitly"
        )
    return f"`{name}` is {verdict.value}"


def build_diagnostic(path: str, resolution: Resolution) -> DiagnosticRecord:
    span = resolution.reference.span
    symbol = resolution.reference.identifier_text
    return DiagnosticRecord(
        diagnostic_id=build_diagnostic_id(
            path, span.start_line, span.start_col, resolution.verdict.value, symbol
        ),
        path=path,
        span=DiagnosticSpan(
            start_byte=span.start_byte,
            end_byte=span.end_byte,
            start_line=span.start_line,
            start_col=span.start_col,
            end_line=span.end_line,
            end_col=span.end_col,
        ),
        verdict=resolution.verdict.value,
        symbol=symbol,
        message=diagnostic_message(resolution),
        expected=list(resolution.expected_paths),
    )


__all__ = ["build_diagnostic", "diagnostic_message"]
