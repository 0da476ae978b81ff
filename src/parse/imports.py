"""Tree-sitter based `use` declaration analysis for Rust files.

Only the file's top-level import section is walked. Every imported name
becomes a :class:`Binding`; the shape of each declaration is kept as a small
use-tree so fixes can edit clauses without re-rendering the whole section.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from parse.treesitter_rust import SourceSpan, node_text
from registry.entries import SymbolKind, join_path, normalize_path

if TYPE_CHECKING:
    from tree_sitter import Node

GLOB_NAME = "*"
UNNAMED_IMPORT = "_"

_COMMENT_TYPES = frozenset({"line_comment", "block_comment"})

_ITEM_DECLARATION_TYPES = frozenset(
    {
        "function_item",
        "struct_item",
        "enum_item",
        "union_item",
        "trait_item",
        "type_item",
        "const_item",
        "static_item",
        "mod_item",
        "macro_definition",
    }
)

_HEADER_TYPES = frozenset({"inner_attribute_item", "shebang"})


@dataclass(frozen=True)
class Binding:
    """A local name bound by one clause of a `use` declaration."""

    local_name: str
    source_path: str
    imported_name: str
    span: SourceSpan
    declaration_index: int
    alias: str | None = None
    imported_kind: SymbolKind | None = None
    is_glob: bool = False

    @property
    def full_path(self) -> str:
        if self.is_glob:
            return self.source_path
        return join_path(self.source_path, self.imported_name)


@dataclass(frozen=True)
class UseClause:
    """A node of a declaration's use-tree: a single import or a `{...}` list."""

    start_byte: int
    end_byte: int
    binding: Binding | None = None
    children: tuple[UseClause, ...] = ()
    is_list: bool = False

    def iter_bindings(self) -> list[Binding]:
        if self.binding is not None:
            return [self.binding]
        collected: list[Binding] = []
        for child in self.children:
            collected.extend(child.iter_bindings())
        return collected


@dataclass(frozen=True)
class UseDeclaration:
    index: int
    start_byte: int
    end_byte: int
    argument_start: int
    argument_end: int
    visibility: str
    has_attributes: bool
    tree: UseClause

    @property
    def is_simple(self) -> bool:
        """True when the declaration imports exactly one non-glob name."""
        return self.tree.binding is not None and not self.tree.binding.is_glob


@dataclass(frozen=True)
class ImportBlock:
    """A run of consecutive top-level `use` declarations."""

    index: int
    start_byte: int
    end_byte: int
    declaration_indices: tuple[int, ...]


@dataclass(frozen=True)
class ImportSection:
    """Everything the file's import section binds, in source order."""

    bindings: tuple[Binding, ...] = ()
    declarations: tuple[UseDeclaration, ...] = ()
    blocks: tuple[ImportBlock, ...] = ()
    local_declarations: frozenset[str] = field(default_factory=frozenset)
    insertion_point: int = 0

    def bindings_named(self, local_name: str) -> tuple[Binding, ...]:
        return tuple(
            binding
            for binding in self.bindings
            if not binding.is_glob and binding.local_name == local_name
        )

    def binding_for(self, local_name: str) -> Binding | None:
        """Most recent binding of `local_name`; later imports win."""
        if local_name in (GLOB_NAME, UNNAMED_IMPORT):
            return None
        named = self.bindings_named(local_name)
        return named[-1] if named else None

    @property
    def globs(self) -> tuple[Binding, ...]:
        return tuple(binding for binding in self.bindings if binding.is_glob)

    def bound_paths(self) -> frozenset[str]:
        return frozenset(
            binding.full_path for binding in self.bindings if not binding.is_glob
        )

    def declaration_of(self, binding: Binding) -> UseDeclaration:
        return self.declarations[binding.declaration_index]

    def block_of(self, declaration: UseDeclaration) -> ImportBlock | None:
        for block in self.blocks:
            if declaration.index in block.declaration_indices:
                return block
        return None

    @property
    def insertion_block(self) -> ImportBlock | None:
        """First block that does not open with an attributed declaration."""
        for block in self.blocks:
            first = self.declarations[block.declaration_indices[0]]
            if not first.has_attributes:
                return block
        return None


def _path_segments(source_bytes: bytes, node: Node | None) -> list[str]:
    if node is None:
        return []
    normalized = normalize_path(node_text(source_bytes, node))
    return [segment for segment in normalized.split("::") if segment]


class _DeclarationScanner:
    def __init__(self, source_bytes: bytes, declaration_index: int) -> None:
        self.source_bytes = source_bytes
        self.declaration_index = declaration_index

    def _leaf(
        self,
        node: Node,
        segments: list[str],
        alias: str | None,
    ) -> UseClause:
        kind: SymbolKind | None = None
        if segments and segments[-1] == "self":
            segments = segments[:-1]
            kind = SymbolKind.MODULE

        binding: Binding | None = None
        if segments:
            imported_name = segments[-1]
            binding = Binding(
                local_name=alias or imported_name,
                source_path=join_path(*segments[:-1]),
                imported_name=imported_name,
                span=SourceSpan.from_node(node),
                declaration_index=self.declaration_index,
                alias=alias,
                imported_kind=kind,
            )
        return UseClause(node.start_byte, node.end_byte, binding=binding)

    def _glob(self, node: Node, prefix: list[str]) -> UseClause:
        path_node = next(iter(node.named_children), None)
        segments = prefix + _path_segments(self.source_bytes, path_node)
        binding = Binding(
            local_name=GLOB_NAME,
            source_path=join_path(*segments),
            imported_name=GLOB_NAME,
            span=SourceSpan.from_node(node),
            declaration_index=self.declaration_index,
            is_glob=True,
        )
        return UseClause(node.start_byte, node.end_byte, binding=binding)

    def _list(self, node: Node, list_node: Node | None, prefix: list[str]) -> UseClause:
        children: list[UseClause] = []
        if list_node is not None:
            for child in list_node.named_children:
                if child.type in _COMMENT_TYPES:
                    continue
                children.append(self.clause(child, prefix))
        return UseClause(
            node.start_byte,
            node.end_byte,
            children=tuple(children),
            is_list=True,
        )

    def clause(self, node: Node, prefix: list[str]) -> UseClause:
        if node.type == "scoped_use_list":
            path_segments = _path_segments(
                self.source_bytes, node.child_by_field_name("path")
            )
            return self._list(
                node, node.child_by_field_name("list"), prefix + path_segments
            )

        if node.type == "use_list":
            return self._list(node, node, prefix)

        if node.type == "use_wildcard":
            return self._glob(node, prefix)

        if node.type == "use_as_clause":
            segments = prefix + _path_segments(
                self.source_bytes, node.child_by_field_name("path")
            )
            alias_node = node.child_by_field_name("alias")
            alias = (
                node_text(self.source_bytes, alias_node).strip()
                if alias_node is not None
                else None
            )
            return self._leaf(node, segments, alias or None)

        return self._leaf(
            node, prefix + _path_segments(self.source_bytes, node), None
        )


def _has_outer_attributes(node: Node) -> bool:
    previous = node.prev_named_sibling
    while previous is not None and previous.type in _COMMENT_TYPES:
        previous = previous.prev_named_sibling
    return previous is not None and previous.type == "attribute_item"


def _visibility_prefix(source_bytes: bytes, node: Node) -> str:
    for child in node.named_children:
        if child.type == "visibility_modifier":
            return f"{node_text(source_bytes, child)} "
    return ""


def _scan_declaration(
    source_bytes: bytes, node: Node, index: int
) -> UseDeclaration | None:
    argument = node.child_by_field_name("argument")
    if argument is None:
        return None

    tree = _DeclarationScanner(source_bytes, index).clause(argument, [])
    return UseDeclaration(
        index=index,
        start_byte=node.start_byte,
        end_byte=node.end_byte,
        argument_start=argument.start_byte,
        argument_end=argument.end_byte,
        visibility=_visibility_prefix(source_bytes, node),
        has_attributes=_has_outer_attributes(node),
        tree=tree,
    )


def _is_header_node(source_bytes: bytes, node: Node) -> bool:
    if node.type in _HEADER_TYPES:
        return True
    if node.type in _COMMENT_TYPES:
        text = node_text(source_bytes, node)
        # Outer doc comments belong to the item that follows them.
        return not text.startswith(("///", "/**"))
    return False


def _insertion_point(source_bytes: bytes, root_node: Node) -> int:
    for child in root_node.children:
        if not _is_header_node(source_bytes, child):
            return child.start_byte
    return len(source_bytes)


def _local_declarations(source_bytes: bytes, root_node: Node) -> frozenset[str]:
    names: set[str] = set()
    for child in root_node.named_children:
        if child.type not in _ITEM_DECLARATION_TYPES:
            continue
        name_node = child.child_by_field_name("name")
        if name_node is not None:
            names.add(node_text(source_bytes, name_node))
    return frozenset(names)


def scan_imports(root_node: Node, source_bytes: bytes) -> ImportSection:
    """Collect the bindings, declarations and blocks of a file's import section.

    Args:
        root_node: The `source_file` node of a parsed Rust file
        source_bytes: The exact bytes the tree was parsed from

    Returns:
        ImportSection with bindings in source order. Block-local `use`
        declarations inside functions or modules are not modeled.
    """
    declarations: list[UseDeclaration] = []
    blocks: list[ImportBlock] = []
    current_run: list[UseDeclaration] = []

    def close_run() -> None:
        if current_run:
            blocks.append(
                ImportBlock(
                    index=len(blocks),
                    start_byte=current_run[0].start_byte,
                    end_byte=current_run[-1].end_byte,
                    declaration_indices=tuple(decl.index for decl in current_run),
                )
            )
            current_run.clear()

    for child in root_node.named_children:
        if child.type in _COMMENT_TYPES:
            continue
        if child.type != "use_declaration":
            close_run()
            continue

        declaration = _scan_declaration(source_bytes, child, len(declarations))
        if declaration is None:
            close_run()
            continue
        declarations.append(declaration)
        current_run.append(declaration)
    close_run()

    bindings: list[Binding] = []
    for declaration in declarations:
        bindings.extend(declaration.tree.iter_bindings())

    return ImportSection(
        bindings=tuple(bindings),
        declarations=tuple(declarations),
        blocks=tuple(blocks),
        local_declarations=_local_declarations(source_bytes, root_node),
        insertion_point=_insertion_point(source_bytes, root_node),
    )


__all__ = [
    "GLOB_NAME",
    "UNNAMED_IMPORT",
    "Binding",
    "ImportBlock",
    "ImportSection",
    "UseClause",
    "UseDeclaration",
    "scan_imports",
]
