from __future__ import annotations

import pytest

from registry import Registry, RegistryEntry, SymbolKind
from registry.entries import join_path, last_segment, normalize_path, parent_path


def test_lookup_returns_every_kind_for_shared_name() -> None:
    registry = Registry(
        [
            RegistryEntry("Comment", "crate::ast", SymbolKind.TYPE),
            RegistryEntry(
                "Comment",
                "crate::ast",
                SymbolKind.TRAIT_METHOD,
                "crate::ast::CommentExt",
            ),
        ]
    )

    kinds = {entry.kind for entry in registry.lookup("Comment")}

    assert kinds == {SymbolKind.TYPE, SymbolKind.TRAIT_METHOD}
    assert len(registry) == 2


def test_lookup_unknown_name_is_empty() -> None:
    registry = Registry([RegistryEntry("Foo", "a::b", SymbolKind.FUNCTION)])

    assert registry.lookup("Bar") == frozenset()
    assert registry.candidates("Bar") == ()
    assert "Bar" not in registry
    assert "Foo" in registry


def test_registry_normalizes_module_paths() -> None:
    registry = Registry([RegistryEntry("Foo", " ::a :: b ", SymbolKind.FUNCTION)])

    (entry,) = registry.candidates("Foo")

    assert entry.module_path == "a::b"
    assert entry.import_path == "a::b::Foo"


def test_duplicate_entries_collapse() -> None:
    entry = RegistryEntry("Foo", "a::b", SymbolKind.FUNCTION)

    assert len(Registry([entry, entry])) == 1


def test_candidates_are_sorted_and_stable() -> None:
    entries = [
        RegistryEntry("Foo", "z", SymbolKind.FUNCTION),
        RegistryEntry("Foo", "a", SymbolKind.TYPE),
    ]

    assert Registry(entries).candidates("Foo") == Registry(
        list(reversed(entries))
    ).candidates("Foo")
    assert [entry.module_path for entry in Registry(entries).candidates("Foo")] == [
        "a",
        "z",
    ]


def test_trait_method_requires_owning_interface() -> None:
    with pytest.raises(ValueError, match="owning_interface"):
        RegistryEntry("go", "iface", SymbolKind.TRAIT_METHOD)


def test_owning_interface_rejected_for_other_kinds() -> None:
    with pytest.raises(ValueError, match="owning_interface"):
        RegistryEntry("go", "iface", SymbolKind.FUNCTION, "iface::Walk")


def test_trait_method_import_path_is_the_interface() -> None:
    entry = RegistryEntry("go", "iface::Walk", SymbolKind.TRAIT_METHOD, "iface::Walk")

    assert entry.import_path == "iface::Walk"


def test_path_helpers() -> None:
    assert normalize_path("::std::fmt") == "std::fmt"
    assert join_path("", "crate", "", "util") == "crate::util"
    assert parent_path("crate::util::helper") == "crate::util"
    assert parent_path("crate") == ""
    assert last_segment("crate::util::helper") == "helper"
