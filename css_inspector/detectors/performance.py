"""Performance detector: file size, rule count and selector depth budgets."""

from ..config import AnalysisOptions
from ..models import Issue, IssueKind, IssueLocation, RuleModel, Severity
from .base import issue_location, new_issue


def nesting_level(selector: str) -> int:
    """Number of whitespace-separated parts of a selector."""
    return len(selector.split())


def detect(model: RuleModel, options: AnalysisOptions) -> list[Issue]:
    thresholds = options.thresholds
    issues: list[Issue] = []

    size = model.size_bytes
    if size > thresholds.max_file_size:
        issues.append(
            new_issue(
                IssueKind.PERFORMANCE_UNUSED_CSS,
                Severity.WARNING,
                "performance.file-size",
                f"Stylesheet is too large ({round(size / 1024)}KB)",
                IssueLocation(file=model.filename),
                description="Large stylesheets delay rendering of the page.",
                fix=(
                    "Split the stylesheet or remove unused rules",
                    "/* suggest splitting the CSS and loading it on demand */",
                    70,
                ),
            )
        )

    if model.selectors_count > thresholds.max_selectors:
        issues.append(
            new_issue(
                IssueKind.PERFORMANCE_UNUSED_CSS,
                Severity.WARNING,
                "performance.selector-count",
                f"Too many rules ({model.selectors_count})",
                IssueLocation(file=model.filename),
                description="A very large number of selectors slows down style matching.",
                fix=(
                    "Merge similar selectors and remove unused rules",
                    "/* use a coverage tool to find and remove unused CSS */",
                    65,
                ),
            )
        )

    for rule in model.rules:
        level = nesting_level(rule.selector)
        if level > thresholds.max_nesting:
            issues.append(
                new_issue(
                    IssueKind.PERFORMANCE_UNUSED_CSS,
                    Severity.WARNING,
                    "performance.deep-nesting",
                    f"Selector is nested too deeply ({level} levels)",
                    issue_location(model, rule),
                    description="Deep descendant chains are slow to match and fragile.",
                    fix=(
                        "Reduce the selector depth",
                        _flatter_selector(rule.selector),
                        75,
                    ),
                )
            )

    return issues


def _flatter_selector(selector: str) -> str:
    last = selector.split()[-1]
    name = last.lstrip("#.")
    return f"/* suggested simplification: */\n.{name} {{\n  /* ... */\n}}"
