"""Specificity / maintainability detector.

Looks for selectors that will be hard to override: large specificity gaps
between rules setting the same property, equal-weight conflicts decided only
by source order, overly specific selectors and multiple ids.
"""

import re
from dataclasses import dataclass

from ..config import AnalysisOptions
from ..models import (
    Declaration,
    Issue,
    IssueKind,
    Rule,
    RuleModel,
    Severity,
    SpecificityScore,
)
from ..specificity import calculate_specificity
from .base import SPECIFICITY_DOCS, issue_location, new_issue

ID_RE = re.compile(r"#[\w-]+")
CLASS_RE = re.compile(r"\.[\w-]+")
ELEMENT_RE = re.compile(r"^[a-zA-Z][\w-]*$")
COMPOUND_SPLIT_RE = re.compile(r"\s*[>+~]\s*|\s+")

# Shapes of selectors that rarely match anything in practice
MIN_ELEMENT_RUN = 4
MIN_ID_COUNT = 2
MIN_CLASS_COUNT = 4


@dataclass
class _PropertyUse:
    rule: Rule
    declaration: Declaration
    score: SpecificityScore


def detect(model: RuleModel, options: AnalysisOptions) -> list[Issue]:
    """Run the specificity checks."""
    heuristics = options.heuristics
    issues: list[Issue] = []

    for prop, uses in _group_by_property(model).items():
        issues.extend(_conflict_issues(model, prop, uses, heuristics.specificity_gap))

    for rule in model.rules:
        score = calculate_specificity(rule.selector)

        if score.total > heuristics.high_specificity:
            issues.append(
                new_issue(
                    IssueKind.SPECIFICITY_CONFLICT,
                    Severity.WARNING,
                    "specificity.too-high",
                    f"Selector specificity is too high ({score.total})",
                    issue_location(model, rule),
                    description="Highly specific selectors are hard to maintain and override.",
                    fix=(
                        "Simplify the selector with fewer ids and less nesting",
                        f"/* suggested simplification: */\n{_simplify(rule.selector)} {{\n  /* ... */\n}}",
                        75,
                    ),
                )
            )

        if score.ids > 1:
            issues.append(
                new_issue(
                    IssueKind.SPECIFICITY_CONFLICT,
                    Severity.ERROR,
                    "specificity.multiple-ids",
                    "Selector contains more than one id",
                    issue_location(model, rule),
                    description="An element has a single id, so chaining ids is usually a mistake.",
                    fix=(
                        "Keep the first id and turn the others into classes",
                        _rule_text(_ids_to_classes(rule.selector), rule.declarations),
                        85,
                    ),
                )
            )

        if (
            _is_probably_unused(rule.selector)
            and score.total > heuristics.probably_unused_min_specificity
        ):
            issues.append(
                new_issue(
                    IssueKind.SPECIFICITY_CONFLICT,
                    Severity.HINT,
                    "specificity.probably-unused",
                    "Overly specific selector may be unused (heuristic)",
                    issue_location(model, rule),
                    description="The selector shape suggests it no longer matches the markup.",
                    fix=(
                        "Check whether the rule is still needed",
                        f"/* consider removing or simplifying this rule */\n/* {rule.selector} {{ ... }} */",
                        50,
                    ),
                )
            )

    return issues


def _group_by_property(model: RuleModel) -> dict[str, list[_PropertyUse]]:
    grouped: dict[str, list[_PropertyUse]] = {}
    for rule in model.rules:
        score = calculate_specificity(rule.selector)
        for decl in rule.declarations:
            grouped.setdefault(decl.property, []).append(
                _PropertyUse(rule=rule, declaration=decl, score=score)
            )
    return grouped


def _conflict_issues(
    model: RuleModel, prop: str, uses: list[_PropertyUse], max_gap: int
) -> list[Issue]:
    issues: list[Issue] = []
    if len(uses) < 2:
        return issues

    ordered = sorted(uses, key=lambda use: use.score.total, reverse=True)
    for current, following in zip(ordered, ordered[1:]):
        gap = current.score.total - following.score.total

        if gap > max_gap:
            issues.append(
                new_issue(
                    IssueKind.SPECIFICITY_CONFLICT,
                    Severity.WARNING,
                    "specificity.large-gap",
                    "Large specificity gap between rules setting the same property",
                    issue_location(model, current.rule, prop=prop),
                    description=(
                        f"{current.rule.selector} ({current.score.total}) is far more "
                        f"specific than {following.rule.selector} ({following.score.total})"
                    ),
                    fix=(
                        "Reduce the heavier selector or raise the lighter one",
                        f"/* suggested simplification */\n{_simplify(current.rule.selector)} {{\n  {prop}: value;\n}}",
                        70,
                    ),
                    docs=[SPECIFICITY_DOCS],
                )
            )

        if gap == 0 and current.declaration.value != following.declaration.value:
            issues.append(
                new_issue(
                    IssueKind.SPECIFICITY_CONFLICT,
                    Severity.INFO,
                    "specificity.equal-conflict",
                    "Selectors with equal specificity set different values",
                    issue_location(model, current.rule, prop=prop),
                    description=(
                        f"{current.rule.selector} and {following.rule.selector} share "
                        f"specificity {current.score.total}; source order decides the winner"
                    ),
                    fix=(
                        "Adjust specificity or reorder the rules",
                        "/* make sure the intended rule comes last, or raise its specificity */",
                        60,
                    ),
                )
            )

    return issues


def _is_probably_unused(selector: str) -> bool:
    if len(ID_RE.findall(selector)) >= MIN_ID_COUNT:
        return True
    if len(CLASS_RE.findall(selector)) >= MIN_CLASS_COUNT:
        return True

    run = longest = 0
    for part in COMPOUND_SPLIT_RE.split(selector.strip()):
        run = run + 1 if ELEMENT_RE.match(part) else 0
        longest = max(longest, run)
    return longest >= MIN_ELEMENT_RUN


def _ids_to_classes(selector: str) -> str:
    seen = 0

    def replace(match: re.Match) -> str:
        nonlocal seen
        seen += 1
        return match.group(0) if seen == 1 else "." + match.group(0)[1:]

    return ID_RE.sub(replace, selector)


def _simplify(selector: str) -> str:
    simplified = re.sub(r"\s*>\s*", " > ", selector)
    simplified = re.sub(r"(?<![\w.#:-])[a-zA-Z][\w-]*([.#][\w-]+)", r"\1", simplified)
    return simplified.strip()


def _rule_text(selector: str, declarations: tuple[Declaration, ...]) -> str:
    lines = [f"{selector} {{"]
    for decl in declarations:
        important = " !important" if decl.important else ""
        lines.append(f"  {decl.property}: {decl.value}{important};")
    lines.append("}")
    return "\n".join(lines)
