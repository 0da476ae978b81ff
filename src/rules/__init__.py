"""Configuration and registry sources for known-imports-core."""

from rules.config import (
    ConfigError,
    KnownImportDef,
    KnownImportsConfig,
    build_registry,
    load_config,
)

__all__ = [
    "ConfigError",
    "KnownImportDef",
    "KnownImportsConfig",
    "build_registry",
    "load_config",
]
