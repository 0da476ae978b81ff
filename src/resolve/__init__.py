"""Reference resolution against the known-import registry."""

from resolve.resolver import (
    Resolution,
    Verdict,
    resolve_reference,
    resolve_references,
)

__all__ = ["Resolution", "Verdict", "resolve_reference", "resolve_references"]
