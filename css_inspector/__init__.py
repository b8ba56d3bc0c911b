"""css-inspector: static analysis and auto-fixing for stylesheets."""

__version__ = "0.1.0"

from .analyzer import CSSAnalyzer, analyze  # noqa: E402
from .config import AnalysisOptions, load_options  # noqa: E402
from .errors import (  # noqa: E402
    AnalysisError,
    CSSInspectorError,
    CSSSyntaxError,
    EmptyInputError,
    OptionsError,
)
from .fixes import FixEngine, FixResult, apply_fixes  # noqa: E402
from .models import AnalysisResult, Issue, IssueKind, Severity  # noqa: E402
from .parser import parse_stylesheet  # noqa: E402
from .specificity import calculate_specificity  # noqa: E402

__all__ = [
    "AnalysisError",
    "AnalysisOptions",
    "AnalysisResult",
    "CSSAnalyzer",
    "CSSInspectorError",
    "CSSSyntaxError",
    "EmptyInputError",
    "FixEngine",
    "FixResult",
    "Issue",
    "IssueKind",
    "OptionsError",
    "Severity",
    "__version__",
    "analyze",
    "apply_fixes",
    "calculate_specificity",
    "load_options",
    "parse_stylesheet",
]
