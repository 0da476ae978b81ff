"""Tree-sitter based identifier reference collection for Rust files."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from parse.treesitter_rust import SourceSpan, is_field, node_text

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tree_sitter import Node


class SyntacticRole(str, Enum):
    NAME_USE = "name_use"
    QUALIFIED_PATH_USE = "qualified_path_use"
    METHOD_RECEIVER_USE = "method_receiver_use"


class ReferenceContext(str, Enum):
    """Syntactic position of a reference, used for kind compatibility."""

    VALUE = "value"
    TYPE = "type"
    MACRO = "macro"
    ATTRIBUTE = "attribute"
    PATH = "path"
    METHOD = "method"


@dataclass(frozen=True)
class Reference:
    identifier_text: str
    syntactic_role: SyntacticRole
    context: ReferenceContext
    span: SourceSpan


# Subtrees that never contain references worth checking.
_SKIPPED_SUBTREES = frozenset(
    {
        "use_declaration",
        "extern_crate_declaration",
        "macro_definition",
        "line_comment",
        "block_comment",
        "string_literal",
        "raw_string_literal",
        "char_literal",
        "lifetime",
        "label",
    }
)

# Parents whose `name` field declares rather than uses an identifier.
_DECLARING_PARENTS = frozenset(
    {
        "function_item",
        "function_signature_item",
        "struct_item",
        "enum_item",
        "enum_variant",
        "union_item",
        "trait_item",
        "type_item",
        "associated_type",
        "const_item",
        "static_item",
        "mod_item",
        "type_parameter",
        "const_parameter",
        "optional_type_parameter",
    }
)

_SCOPED_PARENTS = frozenset(
    {"scoped_identifier", "scoped_type_identifier", "scoped_use_list"}
)

_GENERIC_PATH_PARENTS = frozenset({"generic_type", "generic_type_with_turbofish"})

_PATTERN_WRAPPERS = frozenset(
    {
        "tuple_pattern",
        "mut_pattern",
        "ref_pattern",
        "reference_pattern",
        "slice_pattern",
        "captured_pattern",
        "or_pattern",
    }
)

# Parents whose `pattern` field introduces new local bindings.
_BINDING_PATTERN_OWNERS = frozenset(
    {"let_declaration", "parameter", "for_expression", "closure_parameters"}
)

_IDENTIFIER_TYPES = frozenset({"identifier", "type_identifier"})


def _is_declaration_name(node: Node, parent: Node) -> bool:
    if parent.type in _DECLARING_PARENTS and is_field(parent, "name", node):
        return True
    if parent.type == "constrained_type_parameter" and is_field(parent, "left", node):
        return True
    return parent.type == "type_parameters"


def _is_binding_pattern(node: Node) -> bool:
    """True for identifiers introduced by `let`, parameters, `for` or closures."""
    current = node
    parent = node.parent
    while parent is not None and parent.type in _PATTERN_WRAPPERS:
        current = parent
        parent = parent.parent
    if parent is None or parent.type not in _BINDING_PATTERN_OWNERS:
        return False
    if parent.type == "closure_parameters":
        return True
    return is_field(parent, "pattern", current)


def _is_path_root(node: Node, parent: Node) -> bool:
    """True when `node` is the first segment of a longer `::` path."""
    if parent.type in _SCOPED_PARENTS:
        return is_field(parent, "path", node)
    if parent.type in _GENERIC_PATH_PARENTS and is_field(parent, "type", node):
        grandparent = parent.parent
        return (
            grandparent is not None
            and grandparent.type in _SCOPED_PARENTS
            and is_field(grandparent, "path", parent)
        )
    return False


def _is_method_name(node: Node, parent: Node) -> bool:
    if parent.type != "field_expression" or not is_field(parent, "field", node):
        return False
    callee = parent
    outer = parent.parent
    if outer is not None and outer.type == "generic_function":
        callee = outer
        outer = outer.parent
    return (
        outer is not None
        and outer.type == "call_expression"
        and is_field(outer, "function", callee)
    )


def _token_tree_reference(
    node: Node, source_bytes: bytes
) -> tuple[SyntacticRole, ReferenceContext] | None:
    """Classify an identifier inside a macro token tree by its neighbor tokens.

    Macro arguments may be any token stream, including other languages, so
    only `name!`, `name::` and `.name(...)` count; a bare identifier is
    skipped.
    """
    previous = node.prev_sibling
    following = node.next_sibling
    previous_type = previous.type if previous is not None else ""
    following_type = following.type if following is not None else ""

    if previous_type in ("::", "'", "$"):
        return None
    if previous_type == ".":
        if (
            following is not None
            and following.type == "token_tree"
            and node_text(source_bytes, following).startswith("(")
        ):
            return SyntacticRole.METHOD_RECEIVER_USE, ReferenceContext.METHOD
        return None
    if following_type == "::":
        return SyntacticRole.QUALIFIED_PATH_USE, ReferenceContext.PATH
    if following_type == "!":
        return SyntacticRole.NAME_USE, ReferenceContext.MACRO
    return None


def _classify(
    node: Node, source_bytes: bytes
) -> tuple[SyntacticRole, ReferenceContext] | None:
    parent = node.parent
    if parent is None:
        return None

    if node.type == "field_identifier":
        if _is_method_name(node, parent):
            return SyntacticRole.METHOD_RECEIVER_USE, ReferenceContext.METHOD
        return None

    if node.type not in _IDENTIFIER_TYPES:
        return None

    if parent.type == "token_tree":
        return _token_tree_reference(node, source_bytes)

    if _is_path_root(node, parent):
        return SyntacticRole.QUALIFIED_PATH_USE, ReferenceContext.PATH

    if parent.type in _SCOPED_PARENTS:
        # Later path segments are assumed correct once the root resolves.
        return None

    if _is_declaration_name(node, parent) or _is_binding_pattern(node):
        return None

    if parent.type == "macro_invocation" and is_field(parent, "macro", node):
        return SyntacticRole.NAME_USE, ReferenceContext.MACRO

    if parent.type == "attribute" and parent.named_children[0] == node:
        return SyntacticRole.NAME_USE, ReferenceContext.ATTRIBUTE

    if node.type == "type_identifier":
        return SyntacticRole.NAME_USE, ReferenceContext.TYPE

    return SyntacticRole.NAME_USE, ReferenceContext.VALUE


def iter_references(root_node: Node, source_bytes: bytes) -> Iterator[Reference]:
    """Yield every checkable identifier reference of a file in source order.

    The walk is a lazy pre-order traversal; each call starts a fresh scan.
    Imports themselves are not references: the import section is handled by
    `parse.imports.scan_imports`.
    """
    stack: list[Node] = [root_node]
    while stack:
        node = stack.pop()
        if node.type in _SKIPPED_SUBTREES:
            continue

        classified = _classify(node, source_bytes)
        if classified is not None:
            role, context = classified
            yield Reference(
                identifier_text=node_text(source_bytes, node),
                syntactic_role=role,
                context=context,
                span=SourceSpan.from_node(node),
            )

        stack.extend(reversed(node.children))


__all__ = [
    "Reference",
    "ReferenceContext",
    "SyntacticRole",
    "iter_references",
]
