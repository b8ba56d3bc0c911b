"""Structured error types for the analysis engine.

Only input problems abort an analysis call. Everything that goes wrong after
the stylesheet has been parsed is reported as an issue or a skipped fix so
callers always receive a structurally valid result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Categories of engine errors."""

    SYNTAX = "syntax"  # Stylesheet cannot be parsed
    INPUT = "input"  # Empty or unusable input
    ANALYSIS = "analysis"  # Unexpected failure while analysing
    CONFIGURATION = "configuration"  # Invalid analysis options


@dataclass
class CSSInspectorError(Exception):
    """Base class for engine errors.

    Attributes:
        message: Human-readable error message.
        category: Error category for grouping.
        details: Optional additional details.
    """

    message: str
    category: ErrorCategory = ErrorCategory.ANALYSIS
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


@dataclass
class CSSSyntaxError(CSSInspectorError):
    """The stylesheet cannot be turned into a rule model.

    ``line`` and ``column`` are 1-based, or 0 when the position is unknown.
    """

    line: int = 0
    column: int = 0
    category: ErrorCategory = ErrorCategory.SYNTAX

    def __str__(self) -> str:
        if self.line:
            return f"{self.message} (line {self.line}, column {self.column})"
        return self.message


@dataclass
class EmptyInputError(CSSInspectorError):
    """Blank or whitespace-only stylesheet."""

    message: str = "CSS source is empty"
    category: ErrorCategory = ErrorCategory.INPUT


@dataclass
class AnalysisError(CSSInspectorError):
    """Unexpected failure outside the detector failure boundary."""

    category: ErrorCategory = ErrorCategory.ANALYSIS


@dataclass
class OptionsError(CSSInspectorError):
    """Analysis options failed validation."""

    category: ErrorCategory = ErrorCategory.CONFIGURATION
