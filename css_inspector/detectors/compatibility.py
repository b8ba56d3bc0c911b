"""Compatibility detector.

A fixed table of modern features stands in for a browser support database.
Feature notices are only emitted when target browsers are configured.
"""

from ..config import AnalysisOptions
from ..models import Declaration, Issue, IssueKind, RuleModel, Severity
from .base import issue_location, new_issue

# Feature -> minimum support
MODERN_FEATURES = {
    "grid": "IE 10+",
    "flex": "IE 11+",
    "gap": "Chrome 84+",
    "aspect-ratio": "Chrome 88+",
    "clamp": "Chrome 79+",
}

PREFIXED_FEATURES = ("appearance", "user-select", "backdrop-filter", "clip-path")

FALLBACKS = {
    "display: grid": (
        "/* flexbox fallback */\ndisplay: flex;\nflex-wrap: wrap;\n"
        "/* then grid */\ndisplay: grid;"
    ),
    "gap": "/* margin fallback */\nmargin: -0.5rem;\n/* then gap */\ngap: 1rem;",
}


def uses_feature(decl: Declaration, feature: str) -> bool:
    if feature in decl.property:
        return True
    return decl.property == "display" and feature in decl.value


def detect(model: RuleModel, options: AnalysisOptions) -> list[Issue]:
    targets_browsers = bool(options.browsers)
    issues: list[Issue] = []

    for rule in model.rules:
        for decl in rule.declarations:
            location = issue_location(model, rule, decl)

            if targets_browsers:
                for feature, support in MODERN_FEATURES.items():
                    if not uses_feature(decl, feature):
                        continue
                    issues.append(
                        new_issue(
                            IssueKind.COMPATIBILITY_UNSUPPORTED,
                            Severity.INFO,
                            "compatibility.modern-feature",
                            f"Browser support of {feature}",
                            location,
                            description=f"{feature} requires {support}",
                            fix=(
                                "Add a fallback or use autoprefixer",
                                _fallback(decl),
                                70,
                            ),
                        )
                    )

            if any(
                feature in decl.property or feature in decl.value
                for feature in PREFIXED_FEATURES
            ):
                issues.append(
                    new_issue(
                        IssueKind.COMPATIBILITY_UNSUPPORTED,
                        Severity.HINT,
                        "compatibility.vendor-prefix",
                        "Vendor prefixes may be required",
                        location,
                        description="Some features still need vendor prefixes in older browsers.",
                        fix=(
                            "Let autoprefixer add vendor prefixes",
                            "/* suggest running autoprefixer for vendor prefixes */",
                            85,
                        ),
                    )
                )

    return issues


def _fallback(decl: Declaration) -> str:
    fallback = FALLBACKS.get(f"{decl.property}: {decl.value}") or FALLBACKS.get(
        decl.property
    )
    return fallback or f"/* add a suitable fallback for {decl.property} */"
