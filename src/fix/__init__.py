"""Import-section fix synthesis."""

from fix.apply import FixEdit, apply_fix_edits
from fix.synthesizer import synthesize_fixes

__all__ = ["FixEdit", "apply_fix_edits", "synthesize_fixes"]
