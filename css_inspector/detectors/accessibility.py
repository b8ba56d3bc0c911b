"""Accessibility detector.

Heuristics only: colour contrast is not computed, the detector flags the
pure black / white literals that most often end up as unreadable pairs.
"""

import re

from ..config import AnalysisOptions
from ..models import Issue, IssueKind, RuleModel, Severity
from .base import CONTRAST_DOCS, issue_location, new_issue

COLOR_PROPERTIES = ("color", "background-color")
PX_RE = re.compile(r"(\d+(?:\.\d+)?)px")


def parse_font_size_px(value: str) -> float | None:
    """The first pixel length in ``value``, if any."""
    match = PX_RE.search(value)
    return float(match.group(1)) if match else None


def detect(model: RuleModel, options: AnalysisOptions) -> list[Issue]:
    heuristics = options.heuristics
    low_contrast = {_normalize_color(color) for color in heuristics.low_contrast_colors}
    issues: list[Issue] = []

    for rule in model.rules:
        for decl in rule.declarations:
            location = issue_location(model, rule, decl)

            if decl.property in COLOR_PROPERTIES and _normalize_color(decl.value) in low_contrast:
                issues.append(
                    new_issue(
                        IssueKind.ACCESSIBILITY_CONTRAST,
                        Severity.WARNING,
                        "accessibility.low-contrast",
                        "Possible insufficient colour contrast (heuristic)",
                        location,
                        description="Make sure text and background colours have enough contrast.",
                        fix=(
                            "Verify the colours with a contrast checker",
                            "/* aim for a contrast ratio of at least 4.5:1 (WCAG AA) */",
                            60,
                        ),
                        docs=[CONTRAST_DOCS],
                    )
                )

            if decl.property == "font-size":
                size = parse_font_size_px(decl.value)
                if size is not None and size < heuristics.min_font_size_px:
                    issues.append(
                        new_issue(
                            IssueKind.ACCESSIBILITY_CONTRAST,
                            Severity.WARNING,
                            "accessibility.small-font",
                            f"Font size is too small ({decl.value})",
                            location,
                            description="Very small text is hard to read.",
                            fix=(
                                "Use at least 14px or 0.875rem",
                                f"{rule.selector} {{\n  font-size: 14px; /* or 0.875rem */\n}}",
                                80,
                            ),
                        )
                    )

            if (
                ":focus" in rule.selector
                and decl.property == "outline"
                and decl.value.strip().lower() == "none"
            ):
                issues.append(
                    new_issue(
                        IssueKind.ACCESSIBILITY_CONTRAST,
                        Severity.ERROR,
                        "accessibility.focus-outline-removed",
                        "Removing the focus outline breaks keyboard navigation",
                        location,
                        description="Focused elements need a visible indicator.",
                        fix=(
                            "Provide a visible focus indicator",
                            f"{rule.selector} {{\n  outline: 2px solid #005fcc;\n  outline-offset: 2px;\n}}",
                            90,
                        ),
                    )
                )

    return issues


def _normalize_color(value: str) -> str:
    return "".join(value.split()).lower()
