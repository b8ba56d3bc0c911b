"""Shared helpers for detectors.

A detector is a plain function ``detect(model, options) -> list[Issue]``.
It must not mutate the model and must not depend on other detectors.
"""

from collections.abc import Callable

from ..config import AnalysisOptions
from ..models import (
    Declaration,
    Issue,
    IssueFix,
    IssueKind,
    IssueLocation,
    IssueResources,
    Rule,
    RuleModel,
    Severity,
    next_issue_id,
)

Detector = Callable[[RuleModel, AnalysisOptions], list[Issue]]

# Further reading attached to selected issues
ALIGN_ITEMS_DOCS = "https://developer.mozilla.org/en-US/docs/Web/CSS/align-items"
GRID_TEMPLATE_DOCS = "https://developer.mozilla.org/en-US/docs/Web/CSS/grid-template"
SPECIFICITY_DOCS = "https://developer.mozilla.org/en-US/docs/Web/CSS/Specificity"
CONTRAST_DOCS = "https://webaim.org/resources/contrastchecker/"


def issue_location(
    model: RuleModel,
    rule: Rule | None = None,
    declaration: Declaration | None = None,
    prop: str | None = None,
) -> IssueLocation:
    """Build a location pointing at a declaration, a rule, or the file."""
    position = None
    if declaration is not None and declaration.position is not None:
        position = declaration.position
    elif rule is not None:
        position = rule.position

    if prop is None and declaration is not None:
        prop = declaration.property

    return IssueLocation(
        file=model.filename,
        selector=rule.selector if rule is not None else None,
        property=prop,
        line=position.line if position else None,
        column=position.column if position else None,
    )


def new_issue(
    kind: IssueKind,
    severity: Severity,
    check: str,
    message: str,
    location: IssueLocation,
    description: str | None = None,
    fix: tuple[str, str, int] | None = None,
    docs: list[str] | None = None,
) -> Issue:
    """Create an issue with a fresh id.

    Args:
        fix: Optional ``(description, patch, confidence)``.
        docs: Optional documentation links.
    """
    return Issue(
        id=next_issue_id(kind),
        kind=kind,
        severity=severity,
        message=message,
        location=location,
        check=check,
        description=description,
        fix=IssueFix(*fix) if fix else None,
        resources=IssueResources(documentation=list(docs)) if docs else None,
    )


def find_declaration(rule: Rule, prop: str) -> Declaration | None:
    """The winning (last) declaration of ``prop`` in ``rule``."""
    for decl in reversed(rule.declarations):
        if decl.property == prop:
            return decl
    return None
