"""Layout detector: flexbox, grid and positioning pitfalls.

All checks look at one rule at a time, on its last-wins declaration map.
"""

import re

from ..config import AnalysisOptions
from ..models import Issue, IssueKind, Rule, RuleModel, Severity
from .base import (
    ALIGN_ITEMS_DOCS,
    GRID_TEMPLATE_DOCS,
    find_declaration,
    issue_location,
    new_issue,
)

FLEX_DISPLAYS = ("flex", "inline-flex")
GRID_DISPLAYS = ("grid", "inline-grid")

HEIGHT_PROPERTIES = ("height", "min-height", "max-height")
GRID_TEMPLATE_PROPERTIES = (
    "grid-template-columns",
    "grid-template-rows",
    "grid-template-areas",
)
DEPRECATED_GAP_PROPERTIES = ("grid-gap", "grid-row-gap", "grid-column-gap")
GRID_PLACEMENT_PROPERTIES = ("grid-column", "grid-row", "grid-area")
OFFSET_PROPERTIES = ("top", "right", "bottom", "left")

LINE_NAME_RE = re.compile(r"\[[^\]]+\]")


def detect(model: RuleModel, options: AnalysisOptions) -> list[Issue]:
    """Run the flexbox, grid and positioning checks on every rule."""
    issues: list[Issue] = []
    for rule in model.rules:
        declarations = rule.declaration_map()
        display = declarations.get("display", "").strip().lower()

        if display in FLEX_DISPLAYS:
            issues.extend(_flexbox_issues(model, rule, declarations))
        if display in GRID_DISPLAYS:
            issues.extend(_grid_container_issues(model, rule, declarations))
        issues.extend(_grid_line_name_issues(model, rule, declarations))
        issues.extend(_positioning_issues(model, rule, declarations))
    return issues


def _has_explicit_height(declarations: dict[str, str]) -> bool:
    if any(declarations.get(prop) for prop in HEIGHT_PROPERTIES):
        return True
    return bool(declarations.get("flex-basis")) and (
        declarations.get("flex-direction", "").strip().lower() == "column"
    )


def _flexbox_issues(
    model: RuleModel, rule: Rule, declarations: dict[str, str]
) -> list[Issue]:
    issues = []
    selector = rule.selector

    if declarations.get("align-items") and not _has_explicit_height(declarations):
        issues.append(
            new_issue(
                IssueKind.FLEXBOX_ALIGNMENT_FAILED,
                Severity.WARNING,
                "flexbox.missing-height",
                "align-items may have no effect: the flex container has no explicit height",
                issue_location(model, rule, find_declaration(rule, "align-items")),
                description=(
                    "Without an explicit height on the flex container, "
                    "cross-axis alignment has no free space to work with."
                ),
                fix=(
                    "Give the flex container an explicit height",
                    f"{selector} {{\n  min-height: 100vh; /* or another suitable height */\n}}",
                    85,
                ),
                docs=[ALIGN_ITEMS_DOCS],
            )
        )

    wrap = declarations.get("flex-wrap", "").strip().lower()
    if declarations.get("align-content") and wrap in ("", "nowrap"):
        issues.append(
            new_issue(
                IssueKind.FLEXBOX_ALIGNMENT_FAILED,
                Severity.INFO,
                "flexbox.align-content-single-line",
                "align-content has no effect in a single-line flex container",
                issue_location(model, rule, find_declaration(rule, "align-content")),
                description="align-content only applies to multi-line flex containers; set flex-wrap: wrap.",
                fix=(
                    "Add flex-wrap: wrap to allow multiple lines",
                    f"{selector} {{\n  flex-wrap: wrap;\n}}",
                    90,
                ),
            )
        )

    if declarations.get("flex-grow") and not declarations.get("flex-basis"):
        issues.append(
            new_issue(
                IssueKind.FLEXBOX_ALIGNMENT_FAILED,
                Severity.HINT,
                "flexbox.grow-without-basis",
                "Consider setting flex-basis explicitly",
                issue_location(model, rule, find_declaration(rule, "flex-grow")),
                description="flex-grow without flex-basis makes the final size depend on content.",
                fix=(
                    "Add a flex-basis declaration",
                    f"{selector} {{\n  flex-basis: 0; /* or auto */\n}}",
                    75,
                ),
            )
        )

    return issues


def _grid_container_issues(
    model: RuleModel, rule: Rule, declarations: dict[str, str]
) -> list[Issue]:
    issues = []
    selector = rule.selector

    if not any(declarations.get(prop) for prop in GRID_TEMPLATE_PROPERTIES):
        issues.append(
            new_issue(
                IssueKind.GRID_TEMPLATE_MISSING,
                Severity.ERROR,
                "grid.missing-template",
                "Grid container has no template definition",
                issue_location(model, rule),
                description=(
                    "A grid container needs grid-template-columns, "
                    "grid-template-rows or grid-template-areas."
                ),
                fix=(
                    "Add a grid template",
                    f"{selector} {{\n  grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));\n}}",
                    80,
                ),
                docs=[GRID_TEMPLATE_DOCS],
            )
        )

    found = next((p for p in DEPRECATED_GAP_PROPERTIES if declarations.get(p)), None)
    if found:
        issues.append(
            new_issue(
                IssueKind.GRID_TEMPLATE_MISSING,
                Severity.WARNING,
                "grid.deprecated-gap",
                f"{found} is deprecated, use the gap properties instead",
                issue_location(model, rule, find_declaration(rule, found)),
                description="grid-gap, grid-row-gap and grid-column-gap were standardised as gap, row-gap and column-gap.",
                fix=(
                    "Use the standard gap properties",
                    f"{selector} {{\n  gap: {declarations[found]};\n}}",
                    95,
                ),
            )
        )

    return issues


def _grid_line_name_issues(
    model: RuleModel, rule: Rule, declarations: dict[str, str]
) -> list[Issue]:
    issues = []
    for prop in GRID_PLACEMENT_PROPERTIES:
        value = declarations.get(prop)
        if value and LINE_NAME_RE.search(value):
            issues.append(
                new_issue(
                    IssueKind.GRID_TEMPLATE_MISSING,
                    Severity.HINT,
                    "grid.line-name",
                    f"Make sure the grid line names used by {prop} are defined on the container",
                    issue_location(model, rule, find_declaration(rule, prop)),
                    description="Named grid lines must be declared in the container's grid-template.",
                )
            )
    return issues


def _positioning_issues(
    model: RuleModel, rule: Rule, declarations: dict[str, str]
) -> list[Issue]:
    issues = []
    selector = rule.selector
    position = declarations.get("position", "").strip().lower()
    if position not in ("", "static"):
        return issues

    if any(declarations.get(prop) for prop in OFFSET_PROPERTIES):
        issues.append(
            new_issue(
                IssueKind.POSITIONING_Z_INDEX,
                Severity.ERROR,
                "positioning.offset-without-position",
                "Offset properties need a non-static position",
                issue_location(model, rule),
                description="top, right, bottom and left only apply to positioned elements.",
                fix=(
                    "Set a position value on the element",
                    f"{selector} {{\n  position: relative;\n}}",
                    90,
                ),
            )
        )

    if declarations.get("z-index"):
        issues.append(
            new_issue(
                IssueKind.POSITIONING_Z_INDEX,
                Severity.WARNING,
                "positioning.z-index-static",
                "z-index has no effect on a statically positioned element",
                issue_location(model, rule, find_declaration(rule, "z-index")),
                description="z-index only applies to relative, absolute, fixed or sticky elements.",
                fix=(
                    "Position the element",
                    f"{selector} {{\n  position: relative;\n}}",
                    85,
                ),
            )
        )

    return issues
