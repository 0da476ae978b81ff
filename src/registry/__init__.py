"""Known-import registry."""

from registry.entries import RegistryEntry, SymbolKind
from registry.registry import Registry

__all__ = ["Registry", "RegistryEntry", "SymbolKind"]
