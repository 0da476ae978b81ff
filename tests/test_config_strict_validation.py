from __future__ import annotations

from pathlib import Path

import pytest

from registry import SymbolKind
from rules.config import (
    ConfigError,
    build_registry,
    load_config,
    load_registry_file,
    resolve_output_dir,
)


def _write_config(repo_root: Path, toml_content: str) -> None:
    (repo_root / "known-imports.toml").write_text(toml_content, encoding="utf-8")


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.output_dir == ".known-imports"
    assert config.crate_root == "src"
    assert config.known_imports == {}


def test_empty_config_accepted(tmp_path: Path) -> None:
    _write_config(tmp_path, "")

    config = load_config(tmp_path)

    assert config.include == []
    assert config.exclude == []
    assert config.registry_files == []


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "bogus_key = true")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_toml_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "output_dir = ")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_unknown_known_import_key_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[known_imports.Foo]
module = "a::b"
kind = "function"
bogus = true
""".strip(),
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_kind_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[known_imports.Foo]
module = "a::b"
kind = "constant"
""".strip(),
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_trait_method_requires_trait(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[known_imports.go]
module = "iface"
kind = "trait_method"
""".strip(),
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_trait_rejected_for_plain_function(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[known_imports.go]
module = "iface"
kind = "function"
trait = "Walk"
""".strip(),
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_known_imports_build_registry(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[known_imports.Foo]
module = "a::b"
kind = "function"

[known_imports.go]
module = "iface"
kind = "trait_method"
trait = "Walk"

[known_imports.step]
module = "iface"
kind = "trait_method"
trait = "other::Step"

[[known_imports.Comment]]
module = "crate::ast"
kind = "type"

[[known_imports.Comment]]
module = "crate::ast"
kind = "trait_method"
trait = "CommentExt"
""".strip(),
    )

    registry = build_registry(load_config(tmp_path), tmp_path)

    (foo,) = registry.candidates("Foo")
    assert foo.import_path == "a::b::Foo"
    (go,) = registry.candidates("go")
    assert go.owning_interface == "iface::Walk"
    (step,) = registry.candidates("step")
    assert step.owning_interface == "other::Step"
    assert {entry.kind for entry in registry.lookup("Comment")} == {
        SymbolKind.TYPE,
        SymbolKind.TRAIT_METHOD,
    }


def test_registry_file_in_lint_format(tmp_path: Path) -> None:
    (tmp_path / "lint.yml").write_text(
        """
plugins:
  rust-known-imports:
    path: ../plugin
rules:
  rust-known-imports/known-imports:
    level: error
    options:
      known_imports:
        is_type_literal:
          module: crate::ast_helpers
          kind: function
        skip_parenthesized_types:
          module: crate::ast_helpers
          kind: trait_method
          trait: NodeExtTypescript
""".lstrip(),
        encoding="utf-8",
    )
    _write_config(tmp_path, 'registry_files = ["lint.yml"]')

    registry = build_registry(load_config(tmp_path), tmp_path)

    assert registry.names() == ("is_type_literal", "skip_parenthesized_types")
    (method,) = registry.candidates("skip_parenthesized_types")
    assert method.import_path == "crate::ast_helpers::NodeExtTypescript"


def test_registry_file_keeps_boolean_like_names_as_strings(tmp_path: Path) -> None:
    path = tmp_path / "lint.yml"
    path.write_text(
        """
known_imports:
  True:
    module: crate::kind
    kind: static
  False:
    module: crate::kind
    kind: static
  Null:
    module: crate::kind
    kind: static
  yes:
    module: crate::kind
    kind: static
""".lstrip(),
        encoding="utf-8",
    )

    table = load_registry_file(path)

    assert sorted(table) == ["False", "Null", "True", "yes"]
    assert table["Null"].kind is SymbolKind.STATIC


def test_registry_file_without_table_rejected(tmp_path: Path) -> None:
    path = tmp_path / "lint.yml"
    path.write_text("rules: {}\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="No known_imports table"):
        load_registry_file(path)


def test_missing_registry_file_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, 'registry_files = ["missing.yml"]')

    with pytest.raises(ConfigError, match="missing.yml"):
        build_registry(load_config(tmp_path), tmp_path)


def test_invalid_yaml_rejected(tmp_path: Path) -> None:
    path = tmp_path / "lint.yml"
    path.write_text("known_imports: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_registry_file(path)


def test_output_dir_must_stay_in_root(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="escapes"):
        resolve_output_dir(tmp_path, "../outside")

    with pytest.raises(ConfigError):
        resolve_output_dir(tmp_path, "/abs/path")

    assert resolve_output_dir(tmp_path, "reports") == (tmp_path / "reports").resolve()
