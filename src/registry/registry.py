"""Immutable symbol-name lookup table."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from registry.entries import RegistryEntry, normalize_path

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping


class Registry:
    """Maps a symbol name to every known declaring location for it.

    Built once and shared read-only between analyses. Names are not unique:
    the same text may be declared as several kinds in several modules, so
    lookups return sets and disambiguation is left to the resolver.
    """

    __slots__ = ("_by_name",)

    def __init__(self, entries: Iterable[RegistryEntry] = ()) -> None:
        grouped: dict[str, set[RegistryEntry]] = {}
        for entry in entries:
            normalized = RegistryEntry(
                name=entry.name,
                module_path=normalize_path(entry.module_path),
                kind=entry.kind,
                owning_interface=(
                    normalize_path(entry.owning_interface)
                    if entry.owning_interface is not None
                    else None
                ),
            )
            grouped.setdefault(normalized.name, set()).add(normalized)

        self._by_name: Mapping[str, tuple[RegistryEntry, ...]] = MappingProxyType(
            {name: tuple(sorted(group)) for name, group in sorted(grouped.items())}
        )

    def lookup(self, name: str) -> frozenset[RegistryEntry]:
        return frozenset(self._by_name.get(name, ()))

    def candidates(self, name: str) -> tuple[RegistryEntry, ...]:
        """Sorted candidates for `name`, for consumers that need stable order."""
        return self._by_name.get(name, ())

    def names(self) -> tuple[str, ...]:
        return tuple(self._by_name)

    def entries(self) -> Iterator[RegistryEntry]:
        for group in self._by_name.values():
            yield from group

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return sum(len(group) for group in self._by_name.values())

    def __repr__(self) -> str:
        return f"Registry(names={len(self._by_name)}, entries={len(self)})"


__all__ = ["Registry"]
