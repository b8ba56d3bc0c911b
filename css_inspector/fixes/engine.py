"""Fix engine: applies selected issue fixes to stylesheet text.

Fixes are applied one after another, each on the output of the previous
one. A fix that cannot be applied is recorded as skipped with a reason;
the engine itself never raises for an individual fix.
"""

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ..inspector_logging import LogCategory, get_category_logger
from ..models import Issue, IssueKind
from .strategies import FixAttempt, strategy_for

logger = get_category_logger(LogCategory.FIXES)

DEFAULT_CONFIDENCE_THRESHOLD = 70


@dataclass
class AppliedFix:
    """Audit record of a fix that changed the text."""

    issue_id: str
    kind: str
    description: str
    confidence: int
    before: str = ""
    after: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "issue_id": self.issue_id,
            "kind": self.kind,
            "description": self.description,
            "confidence": self.confidence,
            "before": self.before,
            "after": self.after,
        }


@dataclass
class SkippedFix:
    """Audit record of a selected fix that was not applied."""

    issue_id: str
    kind: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"issue_id": self.issue_id, "kind": self.kind, "reason": self.reason}


@dataclass
class FixResult:
    """Outcome of a fix run.

    ``total_issues`` counts the selected issues, so it always equals
    ``fixed_count + skipped_count``.
    """

    original_source: str
    fixed_source: str
    applied_fixes: list[AppliedFix] = field(default_factory=list)
    skipped_fixes: list[SkippedFix] = field(default_factory=list)
    total_issues: int = 0

    @property
    def fixed_count(self) -> int:
        return len(self.applied_fixes)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_fixes)

    @property
    def changed(self) -> bool:
        return self.fixed_source != self.original_source

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "original_source": self.original_source,
            "fixed_source": self.fixed_source,
            "applied_fixes": [fix.to_dict() for fix in self.applied_fixes],
            "skipped_fixes": [fix.to_dict() for fix in self.skipped_fixes],
            "total_issues": self.total_issues,
            "fixed_count": self.fixed_count,
            "skipped_count": self.skipped_count,
        }


class FixEngine:
    """Applies the fixes attached to issues."""

    def select_issues(
        self,
        issues: Iterable[Issue],
        confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD,
        issue_types: Iterable[IssueKind | str] | None = None,
    ) -> list[Issue]:
        """Issues eligible for fixing, in the caller's order.

        Args:
            issues: Candidate issues.
            confidence_threshold: Minimum fix confidence (inclusive).
            issue_types: Optional kinds (enum members or their values).
        """
        kinds = None
        if issue_types is not None:
            kinds = {IssueKind(kind) for kind in issue_types}

        selected = []
        for issue in issues:
            if issue.fix is None:
                continue
            if issue.fix.confidence < confidence_threshold:
                continue
            if kinds and issue.kind not in kinds:
                continue
            selected.append(issue)
        return selected

    def apply_fixes(
        self,
        source: str,
        issues: Iterable[Issue],
        confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD,
        issue_types: Iterable[IssueKind | str] | None = None,
    ) -> FixResult:
        """Apply the selected fixes to ``source``.

        Args:
            source: Stylesheet text.
            issues: Issues, typically from an analysis of ``source``.
            confidence_threshold: Minimum fix confidence (inclusive).
            issue_types: Optional kinds to restrict fixing to.

        Returns:
            The fixed text together with the applied and skipped fixes.
        """
        start_time = time.time()
        selected = self.select_issues(issues, confidence_threshold, issue_types)

        current = source
        applied: list[AppliedFix] = []
        skipped: list[SkippedFix] = []

        for issue in selected:
            attempt = self._attempt(current, issue)
            if attempt.success:
                current = attempt.source
                applied.append(
                    AppliedFix(
                        issue_id=issue.id,
                        kind=issue.kind.value,
                        description=issue.fix.description,
                        confidence=issue.fix.confidence,
                        before=attempt.before,
                        after=attempt.after,
                    )
                )
            else:
                logger.debug(
                    f"Skipped fix for {issue.id}: {attempt.reason}",
                    extra={"issue_id": issue.id},
                )
                skipped.append(
                    SkippedFix(
                        issue_id=issue.id,
                        kind=issue.kind.value,
                        reason=attempt.reason or "Failed to apply fix",
                    )
                )

        logger.debug(
            f"Applied {len(applied)} of {len(selected)} fixes",
            extra={
                "operation": "fix",
                "issue_count": len(selected),
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            },
        )

        return FixResult(
            original_source=source,
            fixed_source=current,
            applied_fixes=applied,
            skipped_fixes=skipped,
            total_issues=len(selected),
        )

    def _attempt(self, source: str, issue: Issue) -> FixAttempt:
        """Run the strategy for one issue; exceptions become skips."""
        try:
            return strategy_for(issue)(source, issue)
        except Exception as e:
            logger.warning(
                f"Fix strategy failed for {issue.id}: {e}",
                extra={"issue_id": issue.id},
            )
            return FixAttempt.skipped(source, str(e) or type(e).__name__)


def apply_fixes(
    source: str,
    issues: Iterable[Issue],
    confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD,
    issue_types: Iterable[IssueKind | str] | None = None,
) -> FixResult:
    """Apply fixes with a default ``FixEngine``."""
    return FixEngine().apply_fixes(source, issues, confidence_threshold, issue_types)
