from __future__ import annotations

from parse.references import Reference, ReferenceContext, SyntacticRole, iter_references
from parse.treesitter_rust import parse_source


def _references(source: str) -> list[Reference]:
    source_bytes = source.encode("utf8")
    return list(iter_references(parse_source(source_bytes).root_node, source_bytes))


def _named(source: str, name: str) -> list[Reference]:
    return [ref for ref in _references(source) if ref.identifier_text == name]


def test_function_call_is_a_value_name_use() -> None:
    (ref,) = _named("fn main() { foo(); }\n", "foo")

    assert ref.syntactic_role is SyntacticRole.NAME_USE
    assert ref.context is ReferenceContext.VALUE
    assert ref.span.start_line == 1
    assert ref.span.start_col == 13


def test_type_position_is_a_type_use() -> None:
    (ref,) = _named("fn main(x: Foo) {}\n", "Foo")

    assert ref.context is ReferenceContext.TYPE


def test_only_the_root_of_a_path_is_reported() -> None:
    source = "fn main() { a::b::c(); }\n"

    (ref,) = _named(source, "a")
    assert ref.syntactic_role is SyntacticRole.QUALIFIED_PATH_USE
    assert ref.context is ReferenceContext.PATH
    assert _named(source, "b") == []
    assert _named(source, "c") == []


def test_method_call_name_is_a_receiver_use() -> None:
    source = "fn main() { value.go(); }\n"

    (method,) = _named(source, "go")
    assert method.syntactic_role is SyntacticRole.METHOD_RECEIVER_USE
    assert method.context is ReferenceContext.METHOD
    (receiver,) = _named(source, "value")
    assert receiver.syntactic_role is SyntacticRole.NAME_USE


def test_field_access_is_not_a_method_use() -> None:
    assert _named("fn main() { let x = value.go; }\n", "go") == []


def test_macro_invocation_name() -> None:
    (ref,) = _named("fn main() { foo!(); }\n", "foo")

    assert ref.context is ReferenceContext.MACRO


def test_attribute_name() -> None:
    (ref,) = _named("#[derive_thing]\nstruct S;\n", "derive_thing")

    assert ref.context is ReferenceContext.ATTRIBUTE


def test_macro_arguments_report_only_structural_uses() -> None:
    source = (
        "fn main() {\n"
        "    rule_tests! { valid => [{ code => let f = Object(); Array.from(x); }] };\n"
        "    check!(helper(x), path::item, value.step(), inner!());\n"
        "}\n"
    )
    names = {
        (ref.identifier_text, ref.syntactic_role, ref.context)
        for ref in _references(source)
    }

    assert not {name for name, _, _ in names} & {"Object", "Array", "helper", "x"}
    assert ("path", SyntacticRole.QUALIFIED_PATH_USE, ReferenceContext.PATH) in names
    assert ("step", SyntacticRole.METHOD_RECEIVER_USE, ReferenceContext.METHOD) in names
    assert ("inner", SyntacticRole.NAME_USE, ReferenceContext.MACRO) in names


def test_declarations_and_bindings_are_not_references() -> None:
    source = (
        "struct Foo;\n"
        "fn make<T>(arg: T) -> T {\n"
        "    let local = arg;\n"
        "    local\n"
        "}\n"
    )
    names = [ref.identifier_text for ref in _references(source)]

    assert "Foo" not in names
    assert "make" not in names
    assert names.count("local") == 1
    assert names.count("arg") == 1


def test_use_declarations_are_not_references() -> None:
    assert _references("use a::b::Foo;\n") == []


def test_strings_and_comments_are_skipped() -> None:
    source = '// foo()\nfn main() { let s = "foo"; }\n'

    assert _named(source, "foo") == []


def test_references_are_in_source_order() -> None:
    source = "fn main() { first(); second(); third(); }\n"
    names = [ref.identifier_text for ref in _references(source)]

    assert names == ["first", "second", "third"]


def test_collection_is_restartable() -> None:
    source_bytes = b"fn main() { foo(); }\n"
    root = parse_source(source_bytes).root_node

    assert list(iter_references(root, source_bytes)) == list(
        iter_references(root, source_bytes)
    )
