"""Text-patching fix engine."""

from .engine import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    AppliedFix,
    FixEngine,
    FixResult,
    SkippedFix,
    apply_fixes,
)
from .strategies import FixAttempt, find_rule_block, insert_declaration

__all__ = [
    "DEFAULT_CONFIDENCE_THRESHOLD",
    "AppliedFix",
    "FixAttempt",
    "FixEngine",
    "FixResult",
    "SkippedFix",
    "apply_fixes",
    "find_rule_block",
    "insert_declaration",
]
