"""Data models for stylesheet analysis.

This module defines the core data structures shared by the parser, the
detectors, the analyzer and the fix engine: the rule model, specificity
scores, issues and the aggregated analysis result.
"""

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(Enum):
    """Severity levels for issues."""

    ERROR = "error"  # Build-breaking
    WARNING = "warning"  # Likely bug or maintenance problem
    INFO = "info"  # Informational only
    HINT = "hint"  # Style suggestion

    def __lt__(self, other: "Severity") -> bool:
        order = [Severity.HINT, Severity.INFO, Severity.WARNING, Severity.ERROR]
        return order.index(self) < order.index(other)

    def __le__(self, other: "Severity") -> bool:
        return self == other or self < other

    def __gt__(self, other: "Severity") -> bool:
        return not self <= other

    def __ge__(self, other: "Severity") -> bool:
        return not self < other


class IssueKind(Enum):
    """Problem categories an issue can belong to."""

    FLEXBOX_ALIGNMENT_FAILED = "flexbox-alignment-failed"
    GRID_TEMPLATE_MISSING = "grid-template-missing"
    SPECIFICITY_CONFLICT = "specificity-conflict"
    PERFORMANCE_UNUSED_CSS = "performance-unused-css"
    ACCESSIBILITY_CONTRAST = "accessibility-contrast"
    COMPATIBILITY_UNSUPPORTED = "compatibility-unsupported"
    POSITIONING_Z_INDEX = "positioning-z-index"
    LAYOUT_OVERFLOW = "layout-overflow"
    # Reserved, no detector emits these yet
    INHERITANCE_ISSUE = "inheritance-issue"
    RESPONSIVE_BREAKPOINT_CONFLICT = "responsive-breakpoint-conflict"
    # Carriers for failures of the engine itself
    SYNTAX_ERROR = "syntax-error"
    INTERNAL_ERROR = "internal-error"


_issue_sequence = itertools.count(1)


def next_issue_id(kind: IssueKind) -> str:
    """Return a process-unique issue id such as ``grid-template-missing-42``."""
    return f"{kind.value}-{next(_issue_sequence)}"


@dataclass(frozen=True)
class Position:
    """1-based source position."""

    line: int
    column: int

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "column": self.column}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Position":
        return cls(line=data["line"], column=data["column"])


@dataclass(frozen=True)
class Declaration:
    """One ``property: value`` pair of a rule."""

    property: str
    value: str
    important: bool = False
    position: Position | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "property": self.property,
            "value": self.value,
            "important": self.important,
            "position": self.position.to_dict() if self.position else None,
        }


@dataclass(frozen=True)
class Rule:
    """A selector and its declarations in source order.

    ``context`` holds the preludes of the enclosing at-rules and parent
    rules, outermost first, e.g. ``("@media (max-width: 600px)",)``.
    """

    selector: str
    declarations: tuple[Declaration, ...] = ()
    position: Position | None = None
    context: tuple[str, ...] = ()

    def declaration_map(self) -> dict[str, str]:
        """Property -> value, the last declaration of a property wins."""
        return {decl.property: decl.value for decl in self.declarations}

    def get(self, prop: str) -> str | None:
        """Value of the winning declaration for ``prop``, if any."""
        for decl in reversed(self.declarations):
            if decl.property == prop:
                return decl.value
        return None

    def has(self, prop: str) -> bool:
        return any(decl.property == prop for decl in self.declarations)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "selector": self.selector,
            "declarations": [d.to_dict() for d in self.declarations],
            "position": self.position.to_dict() if self.position else None,
            "context": list(self.context),
        }


@dataclass(frozen=True)
class RuleModel:
    """Parsed stylesheet: the source text and its flattened rules."""

    source: str
    rules: tuple[Rule, ...] = ()
    filename: str | None = None

    @property
    def size_bytes(self) -> int:
        """UTF-8 encoded size of the source."""
        return len(self.source.encode("utf-8"))

    @property
    def selectors_count(self) -> int:
        return len(self.rules)

    @property
    def properties_count(self) -> int:
        return sum(len(rule.declarations) for rule in self.rules)


@dataclass(frozen=True)
class SpecificityScore:
    """Selector weight split into id / class / element tiers.

    ``classes`` carries the whole class tier (classes, attributes and
    pseudo-classes) for the canonical calculator; the fallback counts
    pseudo-classes separately in ``pseudo_classes``.
    """

    total: int
    ids: int = 0
    classes: int = 0
    pseudo_classes: int = 0
    elements: int = 0
    calculator: str = "canonical"


@dataclass
class IssueLocation:
    """Where an issue was found. Every field is optional."""

    file: str | None = None
    selector: str | None = None
    property: str | None = None
    line: int | None = None
    column: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, dropping unset fields."""
        data = {
            "file": self.file,
            "selector": self.selector,
            "property": self.property,
            "line": self.line,
            "column": self.column,
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IssueLocation":
        """Create from dictionary."""
        return cls(
            file=data.get("file"),
            selector=data.get("selector"),
            property=data.get("property"),
            line=data.get("line"),
            column=data.get("column"),
        )

    def __str__(self) -> str:
        """Return file:line (selector) format for easy navigation."""
        parts = []
        if self.file:
            parts.append(self.file)
        if self.line:
            parts.append(str(self.line))
        location = ":".join(parts)
        if self.selector:
            location = f"{location} ({self.selector})" if location else self.selector
        return location


@dataclass
class IssueFix:
    """A suggested change. ``patch`` may be a comment-only suggestion."""

    description: str
    patch: str
    confidence: int  # 0 to 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "patch": self.patch,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IssueFix":
        return cls(
            description=data["description"],
            patch=data.get("patch", ""),
            confidence=int(data.get("confidence", 0)),
        )


@dataclass
class IssueResources:
    """Further reading for an issue."""

    documentation: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"documentation": list(self.documentation)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IssueResources":
        return cls(documentation=list(data.get("documentation", [])))


@dataclass
class Issue:
    """One detected problem.

    ``check`` names the heuristic that produced the issue (for example
    ``flexbox.missing-height``); it is stable across runs while ``id`` is
    only unique within one process.
    """

    id: str
    kind: IssueKind
    severity: Severity
    message: str
    location: IssueLocation = field(default_factory=IssueLocation)
    check: str = ""
    description: str | None = None
    fix: IssueFix | None = None
    resources: IssueResources | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
            "location": self.location.to_dict(),
            "check": self.check,
        }
        if self.description:
            result["description"] = self.description
        if self.fix:
            result["fix"] = self.fix.to_dict()
        if self.resources:
            result["resources"] = self.resources.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Issue":
        """Create from dictionary."""
        kind = IssueKind(data["kind"])
        fix = IssueFix.from_dict(data["fix"]) if data.get("fix") else None
        resources = None
        if data.get("resources"):
            resources = IssueResources.from_dict(data["resources"])

        return cls(
            id=data.get("id") or next_issue_id(kind),
            kind=kind,
            severity=Severity(data["severity"]),
            message=data["message"],
            location=IssueLocation.from_dict(data.get("location", {})),
            check=data.get("check", ""),
            description=data.get("description"),
            fix=fix,
            resources=resources,
        )


@dataclass
class AnalysisSummary:
    """Issue counts; always an exact partition of the issues by severity."""

    total_issues: int = 0
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0
    hint_count: int = 0

    @classmethod
    def from_issues(cls, issues: list[Issue]) -> "AnalysisSummary":
        """Count issues per severity."""
        counts = {severity: 0 for severity in Severity}
        for issue in issues:
            counts[issue.severity] += 1

        return cls(
            total_issues=len(issues),
            error_count=counts[Severity.ERROR],
            warning_count=counts[Severity.WARNING],
            info_count=counts[Severity.INFO],
            hint_count=counts[Severity.HINT],
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "total_issues": self.total_issues,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
            "hint_count": self.hint_count,
        }


@dataclass
class FileMetrics:
    """Size and specificity statistics of one stylesheet."""

    file_size_bytes: int = 0
    selectors_count: int = 0
    properties_count: int = 0
    max_specificity: int = 0
    avg_specificity: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "file_size_bytes": self.file_size_bytes,
            "selectors_count": self.selectors_count,
            "properties_count": self.properties_count,
            "max_specificity": self.max_specificity,
            "avg_specificity": self.avg_specificity,
        }


@dataclass
class Suggestions:
    """Human-facing follow-ups derived from the issues and metrics."""

    optimizations: list[str] = field(default_factory=list)
    refactoring: list[str] = field(default_factory=list)
    modernization: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.optimizations or self.refactoring or self.modernization)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "optimizations": list(self.optimizations),
            "refactoring": list(self.refactoring),
            "modernization": list(self.modernization),
        }


@dataclass
class AnalysisResult:
    """Complete result of one analysis call."""

    summary: AnalysisSummary
    issues: list[Issue] = field(default_factory=list)
    metrics: FileMetrics = field(default_factory=FileMetrics)
    suggestions: Suggestions = field(default_factory=Suggestions)
    filename: str | None = None
    analysis_time_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "filename": self.filename,
            "summary": self.summary.to_dict(),
            "issues": [issue.to_dict() for issue in self.issues],
            "metrics": self.metrics.to_dict(),
            "suggestions": self.suggestions.to_dict(),
            "analysis_time_ms": self.analysis_time_ms,
        }

    @property
    def has_errors(self) -> bool:
        return self.summary.error_count > 0

    def should_block(self) -> bool:
        """Any error-severity issue is treated as build-breaking."""
        return self.has_errors

    def issues_by_severity(self) -> dict[Severity, list[Issue]]:
        """Group issues by severity, most severe first."""
        grouped: dict[Severity, list[Issue]] = {
            severity: [] for severity in sorted(Severity, reverse=True)
        }
        for issue in self.issues:
            grouped[issue.severity].append(issue)
        return grouped
