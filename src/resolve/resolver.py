"""Import-conformance resolution of identifier references.

Each reference is looked up in the registry, narrowed to the candidates its
syntactic position can refer to, and checked against the bindings of the
file's import section. Every reference gets exactly one verdict; nothing here
raises for odd input.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from parse.imports import GLOB_NAME, UNNAMED_IMPORT
from parse.references import ReferenceContext, SyntacticRole
from registry.entries import SymbolKind, last_segment, parent_path

if TYPE_CHECKING:
    from collections.abc import Iterable

    from parse.imports import Binding, ImportSection
    from parse.references import Reference
    from registry.entries import RegistryEntry
    from registry.registry import Registry


class Verdict(str, Enum):
    CONFORMANT = "conformant"
    UNIMPORTED = "unimported"
    MISIMPORTED = "misimported"
    AMBIGUOUS_INTERFACE = "ambiguous_interface"
    UNRESOLVABLE = "unresolvable"
    UNKNOWN = "unknown"


FIXABLE_VERDICTS = frozenset({Verdict.UNIMPORTED, Verdict.MISIMPORTED})
REPORTED_VERDICTS = FIXABLE_VERDICTS | {
    Verdict.AMBIGUOUS_INTERFACE,
    Verdict.UNRESOLVABLE,
}

_VALUE_KINDS = frozenset({SymbolKind.FUNCTION, SymbolKind.STATIC, SymbolKind.TYPE})

_CONTEXT_KINDS: dict[ReferenceContext, frozenset[SymbolKind]] = {
    ReferenceContext.VALUE: _VALUE_KINDS,
    ReferenceContext.TYPE: frozenset({SymbolKind.TYPE}),
    ReferenceContext.MACRO: frozenset({SymbolKind.MACRO}),
    ReferenceContext.ATTRIBUTE: frozenset({SymbolKind.ATTRIBUTE}),
    ReferenceContext.PATH: frozenset({SymbolKind.MODULE, SymbolKind.TYPE}),
    ReferenceContext.METHOD: frozenset({SymbolKind.TRAIT_METHOD}),
}


@dataclass(frozen=True)
class Resolution:
    """The verdict for one reference plus what it was checked against."""

    reference: Reference
    verdict: Verdict
    expected_entries: frozenset[RegistryEntry] = frozenset()
    binding: Binding | None = None
    superseded: tuple[Binding, ...] = ()

    @property
    def is_violation(self) -> bool:
        return self.verdict in REPORTED_VERDICTS

    @property
    def expected_paths(self) -> tuple[str, ...]:
        """Distinct import paths that would satisfy this reference, sorted."""
        return tuple(sorted({entry.import_path for entry in self.expected_entries}))

    @property
    def expected_import_path(self) -> str | None:
        """The single import path a fix should use, or None when ambiguous."""
        paths = self.expected_paths
        return paths[0] if len(paths) == 1 else None


def compatible_candidates(
    candidates: Iterable[RegistryEntry],
    role: SyntacticRole,
    context: ReferenceContext,
) -> tuple[RegistryEntry, ...]:
    """Keep the candidates a reference in this position can denote.

    A method call never names a function, static or type, and a plain or
    qualified name never denotes a trait method.
    """
    if role is SyntacticRole.METHOD_RECEIVER_USE:
        allowed = _CONTEXT_KINDS[ReferenceContext.METHOD]
    else:
        allowed = _CONTEXT_KINDS.get(context, _VALUE_KINDS) - {SymbolKind.TRAIT_METHOD}
    return tuple(sorted(entry for entry in candidates if entry.kind in allowed))


def _is_interface_bound(
    interface: str,
    section: ImportSection,
    module_path: str | None,
) -> bool:
    if interface in section.bound_paths():
        return True
    interface_module = parent_path(interface)
    if any(glob.source_path == interface_module for glob in section.globs):
        return True
    return (
        module_path is not None
        and interface_module == module_path
        and last_segment(interface) in section.local_declarations
    )


def _resolve_method(
    reference: Reference,
    candidates: tuple[RegistryEntry, ...],
    section: ImportSection,
    module_path: str | None,
) -> Resolution:
    interfaces = sorted(
        {entry.owning_interface for entry in candidates if entry.owning_interface}
    )
    bound = [
        interface
        for interface in interfaces
        if _is_interface_bound(interface, section, module_path)
    ]
    expected = frozenset(candidates)

    if len(interfaces) > 1:
        verdict = (
            Verdict.CONFORMANT if len(bound) == 1 else Verdict.AMBIGUOUS_INTERFACE
        )
        return Resolution(reference, verdict, expected)

    if bound:
        return Resolution(reference, Verdict.CONFORMANT, expected)

    # A trait imported under its own name from elsewhere is a wrong path, not
    # a missing one.
    binding = section.binding_for(last_segment(interfaces[0]))
    if binding is not None:
        superseded = section.bindings_named(binding.local_name)[:-1]
        return Resolution(
            reference, Verdict.MISIMPORTED, expected, binding, superseded
        )
    return Resolution(reference, Verdict.UNIMPORTED, expected)


def _registered_sources(registry: Registry, name: str) -> frozenset[str]:
    """Modules that non-method registry entries called `name` live in."""
    return frozenset(
        entry.module_path
        for entry in registry.candidates(name)
        if entry.kind is not SymbolKind.TRAIT_METHOD
    )


def _deciding_binding(
    reference: Reference,
    bindings: tuple[Binding, ...],
    registry: Registry,
) -> Binding | None:
    """Latest binding of the name that can stand for this reference.

    A type and a macro may share a local name, so a binding that is the
    canonical import of a same-named item of an incompatible kind is passed
    over rather than shadowing the others.
    """
    for binding in reversed(bindings):
        compatible = compatible_candidates(
            registry.candidates(binding.imported_name),
            reference.syntactic_role,
            reference.context,
        )
        if any(entry.module_path == binding.source_path for entry in compatible):
            return binding
        if binding.source_path not in _registered_sources(
            registry, binding.imported_name
        ):
            return binding
    return None


def _resolve_name(
    reference: Reference,
    candidates: tuple[RegistryEntry, ...],
    binding: Binding | None,
    other_kind: Binding | None,
    registry: Registry,
    section: ImportSection,
    module_path: str | None,
) -> Resolution:
    expected = frozenset(candidates)
    candidate_paths = {entry.module_path for entry in candidates}

    if binding is not None and binding.source_path in candidate_paths:
        return Resolution(reference, Verdict.CONFORMANT, expected, binding)

    if len(candidate_paths) > 1:
        return Resolution(reference, Verdict.UNRESOLVABLE, expected, binding)

    if binding is not None:
        # Canonical imports of same-named items of other kinds stay.
        superseded = tuple(
            old
            for old in section.bindings_named(binding.local_name)
            if old != binding
            and old.source_path not in _registered_sources(registry, old.imported_name)
        )
        return Resolution(
            reference, Verdict.MISIMPORTED, expected, binding, superseded
        )

    if any(glob.source_path in candidate_paths for glob in section.globs):
        return Resolution(reference, Verdict.CONFORMANT, expected)

    if reference.identifier_text in section.local_declarations:
        # Declared in this file: either the canonical declaration itself or an
        # unrelated item shadowing the known import.
        if module_path is not None and module_path in candidate_paths:
            return Resolution(reference, Verdict.CONFORMANT, expected)
        return Resolution(reference, Verdict.UNKNOWN)

    return Resolution(reference, Verdict.UNIMPORTED, expected, other_kind)


def resolve_reference(
    reference: Reference,
    registry: Registry,
    section: ImportSection,
    *,
    module_path: str | None = None,
) -> Resolution:
    """Classify one reference against the registry and the file's bindings.

    Args:
        reference: The identifier use to check
        registry: Known imports
        section: Bindings of the file's import section
        module_path: The file's own module path (e.g. "crate::util"), if known

    Returns:
        Resolution with exactly one verdict. Identifiers absent from the
        registry, or whose candidates cannot appear in this syntactic
        position, are `unknown`. An `unimported` resolution carries the
        binding of a same-named item of another kind, if there is one, so
        the fix can reuse its alias.
    """
    text = reference.identifier_text
    is_method = reference.syntactic_role is SyntacticRole.METHOD_RECEIVER_USE

    bindings: tuple[Binding, ...] = ()
    if not is_method and text not in (GLOB_NAME, UNNAMED_IMPORT):
        bindings = section.bindings_named(text)
    binding = _deciding_binding(reference, bindings, registry)
    other_kind = bindings[-1] if bindings and binding is None else None

    looked_up = binding or other_kind
    lookup_name = looked_up.imported_name if looked_up is not None else text
    candidates = compatible_candidates(
        registry.candidates(lookup_name),
        reference.syntactic_role,
        reference.context,
    )
    if not candidates:
        return Resolution(reference, Verdict.UNKNOWN)

    if is_method:
        return _resolve_method(reference, candidates, section, module_path)
    return _resolve_name(
        reference, candidates, binding, other_kind, registry, section, module_path
    )


def resolve_references(
    references: Iterable[Reference],
    registry: Registry,
    section: ImportSection,
    *,
    module_path: str | None = None,
) -> tuple[Resolution, ...]:
    return tuple(
        resolve_reference(reference, registry, section, module_path=module_path)
        for reference in references
    )


__all__ = [
    "FIXABLE_VERDICTS",
    "REPORTED_VERDICTS",
    "Resolution",
    "Verdict",
    "compatible_candidates",
    "resolve_reference",
    "resolve_references",
]
