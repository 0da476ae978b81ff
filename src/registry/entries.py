"""Registry entry models for known-import conformance."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

PATH_SEPARATOR = "::"


class SymbolKind(str, Enum):
    """Declaration kinds a known import can have."""

    FUNCTION = "function"
    TYPE = "type"
    STATIC = "static"
    MACRO = "macro"
    MODULE = "module"
    ATTRIBUTE = "attribute"
    TRAIT_METHOD = "trait_method"


def normalize_path(path: str) -> str:
    """Normalize a `::` path for comparison.

    Examples:
        >>> normalize_path(" ::std :: collections ")
        'std::collections'
        >>> normalize_path("crate::kind")
        'crate::kind'
    """
    compact = "".join(path.split())
    while compact.startswith(PATH_SEPARATOR):
        compact = compact[len(PATH_SEPARATOR) :]
    return compact


def join_path(*parts: str) -> str:
    """Join path fragments with `::`, skipping empty ones."""
    return PATH_SEPARATOR.join(part for part in parts if part)


def parent_path(path: str) -> str:
    """Return everything before the last `::` segment ('' for a single segment)."""
    head, sep, _ = path.rpartition(PATH_SEPARATOR)
    return head if sep else ""


def last_segment(path: str) -> str:
    return path.rpartition(PATH_SEPARATOR)[2]


@dataclass(frozen=True, order=True)
class RegistryEntry:
    """One canonical declaring location for a symbol name."""

    name: str
    module_path: str
    kind: SymbolKind
    owning_interface: str | None = None

    def __post_init__(self) -> None:
        has_interface = self.owning_interface is not None
        if has_interface != (self.kind is SymbolKind.TRAIT_METHOD):
            msg = (
                f"Registry entry '{self.name}': owning_interface must be set "
                "exactly when kind is trait_method"
            )
            raise ValueError(msg)

    @property
    def import_path(self) -> str:
        """Path a `use` declaration must name to bring this symbol into scope."""
        if self.owning_interface is not None:
            return self.owning_interface
        return join_path(self.module_path, self.name)


__all__ = [
    "PATH_SEPARATOR",
    "RegistryEntry",
    "SymbolKind",
    "join_path",
    "last_segment",
    "normalize_path",
    "parent_path",
]
