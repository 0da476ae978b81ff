from __future__ import annotations

from pathlib import Path
from typing import Any

import tomllib
import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from registry import Registry, RegistryEntry, SymbolKind
from registry.entries import PATH_SEPARATOR, join_path, normalize_path

CONFIG_FILENAME = "known-imports.toml"

# Rule key suffix used by tree-sitter-lint configuration files.
LINT_RULE_SUFFIX = "known-imports"


class KnownImportDef(BaseModel):
    """Declaration of one known importable name."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    module: str = Field(description="Canonical module path (e.g. 'crate::util')")
    kind: SymbolKind = Field(description="Kind of the declared symbol")
    trait_: str | None = Field(
        default=None,
        alias="trait",
        description="Owning trait for trait methods; bare name or full path",
    )

    @model_validator(mode="after")
    def validate_trait(self) -> KnownImportDef:
        if (self.kind is SymbolKind.TRAIT_METHOD) != (self.trait_ is not None):
            msg = "'trait' must be given exactly when kind is 'trait_method'"
            raise ValueError(msg)
        if not normalize_path(self.module):
            msg = "'module' must be a non-empty path"
            raise ValueError(msg)
        return self

    def to_entry(self, name: str) -> RegistryEntry:
        module = normalize_path(self.module)
        interface: str | None = None
        if self.trait_ is not None:
            trait = normalize_path(self.trait_)
            interface = trait if PATH_SEPARATOR in trait else join_path(module, trait)
        return RegistryEntry(
            name=name,
            module_path=module,
            kind=self.kind,
            owning_interface=interface,
        )


KnownImportsTable = dict[str, KnownImportDef | list[KnownImportDef]]


class KnownImportsConfig(BaseModel):
    """Configuration for known-import checking."""

    model_config = ConfigDict(extra="forbid")

    output_dir: str = Field(
        default=".known-imports",
        description="Output directory for report artifacts",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all Rust files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    crate_root: str = Field(
        default="src",
        description="Directory holding the crate's lib.rs/main.rs",
    )
    known_imports: KnownImportsTable = Field(
        default_factory=dict,
        description="Known importable names: name -> declaration(s)",
    )
    registry_files: list[str] = Field(
        default_factory=list,
        description="Extra tree-sitter-lint YAML files to read known imports from",
    )


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the repo root.

    The config output_dir must be a non-empty relative path that remains
    within the repository root after resolution. Absolute paths and paths
    that escape the root are rejected.
    """
    if not output_dir:
        msg = "output_dir must be a non-empty relative path"
        raise ConfigError(msg)

    if output_dir.startswith("~"):
        msg = "output_dir must be a relative path within the repo root"
        raise ConfigError(msg)

    output_path = Path(output_dir)
    if output_path.is_absolute():
        msg = "output_dir must be a relative path within the repo root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output_dir '{output_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_output.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"output_dir '{output_dir}' escapes the repository root"
        raise ConfigError(msg) from exc

    return resolved_output


def load_config(root: Path) -> KnownImportsConfig:
    """Load configuration from known-imports.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return KnownImportsConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return KnownImportsConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e


def _lint_known_imports(data: Any) -> Any:
    """Pull `known_imports` out of a tree-sitter-lint config document."""
    if not isinstance(data, dict):
        return None
    if "known_imports" in data:
        return data["known_imports"]
    rules = data.get("rules")
    if not isinstance(rules, dict):
        return None
    for rule_name, rule in rules.items():
        if not str(rule_name).endswith(LINT_RULE_SUFFIX) or not isinstance(rule, dict):
            continue
        options = rule.get("options")
        if isinstance(options, dict) and "known_imports" in options:
            return options["known_imports"]
    return None


def load_registry_file(path: Path) -> KnownImportsTable:
    """Read the known-imports table of a YAML registry file.

    Accepts either a tree-sitter-lint configuration (the table lives under
    the options of a rule named `*known-imports`) or a bare document with a
    top-level `known_imports` key.
    """
    try:
        with path.open(encoding="utf-8") as f:
            # Every scalar stays a string: symbol names such as `True`, `False`
            # and `Null` must not become YAML 1.1 booleans or null.
            data = yaml.load(f, Loader=yaml.BaseLoader)  # noqa: S506
    except OSError as e:
        msg = f"Failed to read registry file {path}: {e}"
        raise ConfigError(msg) from e
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {path}: {e}"
        raise ConfigError(msg) from e

    table = _lint_known_imports(data)
    if table is None:
        msg = f"No known_imports table found in {path}"
        raise ConfigError(msg)

    try:
        return KnownImportsConfig.model_validate({"known_imports": table}).known_imports
    except Exception as e:
        msg = f"Invalid known_imports in {path}: {e}"
        raise ConfigError(msg) from e


def _table_entries(table: KnownImportsTable) -> list[RegistryEntry]:
    entries: list[RegistryEntry] = []
    for name, defs in table.items():
        for definition in defs if isinstance(defs, list) else [defs]:
            entries.append(definition.to_entry(name))
    return entries


def build_registry(config: KnownImportsConfig, root: Path) -> Registry:
    """Merge the inline table and every registry file into one Registry.

    Registry file paths are relative to `root`.
    """
    entries = _table_entries(config.known_imports)
    for registry_file in config.registry_files:
        entries.extend(_table_entries(load_registry_file(Path(root) / registry_file)))
    return Registry(entries)


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "KnownImportDef",
    "KnownImportsConfig",
    "build_registry",
    "load_config",
    "load_registry_file",
    "resolve_output_dir",
]
