"""Tree-sitter plumbing shared by the Rust import and reference walkers."""

from __future__ import annotations

from dataclasses import dataclass

from tree_sitter import Language, Node, Parser, Tree
from tree_sitter_rust import language as get_rust_language

_PARSER: Parser | None = None


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with the Rust language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_rust_language())
        _PARSER = Parser(lang)

    return _PARSER


def parse_source(source_bytes: bytes) -> Tree:
    return _get_parser().parse(source_bytes)


def node_text(source_bytes: bytes, node: Node) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf8", errors="ignore")


def is_field(parent: Node | None, field_name: str, node: Node) -> bool:
    """Return True when `node` is the child stored under `field_name` of `parent`."""
    if parent is None:
        return False
    child = parent.child_by_field_name(field_name)
    return child is not None and child == node


@dataclass(frozen=True)
class SourceSpan:
    """Byte range plus 1-based line/column coordinates of a node."""

    start_byte: int
    end_byte: int
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    @classmethod
    def from_node(cls, node: Node) -> SourceSpan:
        return cls(
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            start_line=node.start_point[0] + 1,
            start_col=node.start_point[1] + 1,
            end_line=node.end_point[0] + 1,
            end_col=node.end_point[1] + 1,
        )


__all__ = ["SourceSpan", "is_field", "node_text", "parse_source"]
