"""Analysis orchestrator.

Parses the stylesheet once, runs the enabled detectors, and aggregates the
merged issue list into a summary, metrics and suggestions.
"""

import re
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from .config import AnalysisOptions
from .detectors import DETECTORS, Detector
from .errors import AnalysisError, CSSSyntaxError, EmptyInputError
from .inspector_logging import LogCategory, get_category_logger
from .models import (
    AnalysisResult,
    AnalysisSummary,
    FileMetrics,
    Issue,
    IssueKind,
    IssueLocation,
    RuleModel,
    Severity,
    Suggestions,
    next_issue_id,
)
from .parser import parse_stylesheet
from .specificity import calculate_specificity

logger = get_category_logger(LogCategory.ANALYZER)

# Rough declaration count used when the stylesheet does not parse
RAW_DECLARATION_RE = re.compile(r"[\w-]+\s*:\s*[^;{}]+;")

AVG_SPECIFICITY_LIMIT = 50
LARGE_FILE_BYTES = 100_000


class CSSAnalyzer:
    """Runs the detector family over one stylesheet at a time.

    The analyzer holds only its options; ``analyze`` can be called
    concurrently from several threads.
    """

    def __init__(self, options: AnalysisOptions | None = None):
        self.options = options or AnalysisOptions()

    def analyze(self, source: str, filename: str | None = None) -> AnalysisResult:
        """Analyse a stylesheet.

        Args:
            source: Stylesheet text.
            filename: Optional name copied into issue locations.

        Returns:
            The analysis result. Syntax errors are reported as issues.

        Raises:
            EmptyInputError: If ``source`` is blank.
            AnalysisError: If the tokenizer fails unexpectedly.
        """
        if not source or not source.strip():
            raise EmptyInputError()

        start_time = time.time()

        try:
            model = parse_stylesheet(source, filename)
        except CSSSyntaxError as e:
            logger.debug(f"Syntax error in {filename or '<input>'}: {e}")
            return self._syntax_error_result(source, filename, e, start_time)
        except Exception as e:
            raise AnalysisError(
                message=f"Failed to read stylesheet {filename or '<input>'}: {e}",
                details={"file_path": filename},
            ) from e

        issues = self._run_detectors(self._scoped(model))
        metrics = compute_metrics(model)

        elapsed_ms = (time.time() - start_time) * 1000
        logger.debug(
            f"Analysed {filename or '<input>'}: {len(issues)} issues",
            extra={
                "operation": "analyze",
                "file_path": filename,
                "issue_count": len(issues),
                "duration_ms": round(elapsed_ms, 2),
            },
        )

        return AnalysisResult(
            summary=AnalysisSummary.from_issues(issues),
            issues=issues,
            metrics=metrics,
            suggestions=generate_suggestions(issues, metrics),
            filename=filename,
            analysis_time_ms=elapsed_ms,
        )

    def _enabled_detectors(self) -> list[tuple[str, Detector]]:
        checks = self.options.checks
        return [
            (name, detector)
            for name, detector in DETECTORS.items()
            if getattr(checks, name, False)
        ]

    def _run_detectors(self, model: RuleModel) -> list[Issue]:
        detectors = self._enabled_detectors()
        if not detectors:
            return []

        if self.options.parallel and len(detectors) > 1:
            with ThreadPoolExecutor(max_workers=len(detectors)) as executor:
                futures = [
                    executor.submit(self._execute_detector, name, detector, model)
                    for name, detector in detectors
                ]
                # Gathered in table order, not completion order
                results = [future.result() for future in futures]
        else:
            results = [
                self._execute_detector(name, detector, model)
                for name, detector in detectors
            ]

        issues: list[Issue] = []
        for found in results:
            issues.extend(found)
        return issues

    def _execute_detector(
        self, name: str, detector: Detector, model: RuleModel
    ) -> list[Issue]:
        """Run one detector; a failure becomes a single internal-error issue."""
        start_time = time.time()

        try:
            issues = list(detector(model, self.options))
        except Exception as e:
            logger.warning(
                f"Detector {name} failed: {e}",
                extra={"detector": name, "file_path": model.filename},
                exc_info=True,
            )
            return [
                Issue(
                    id=next_issue_id(IssueKind.INTERNAL_ERROR),
                    kind=IssueKind.INTERNAL_ERROR,
                    severity=Severity.ERROR,
                    message=f"Analysis failed in {name} detector: {e}",
                    location=IssueLocation(file=model.filename),
                    check=f"{name}.internal-error",
                )
            ]

        execution_time_ms = (time.time() - start_time) * 1000
        logger.debug(
            f"Detector {name} found {len(issues)} issues",
            extra={
                "detector": name,
                "issue_count": len(issues),
                "duration_ms": round(execution_time_ms, 2),
            },
        )
        return issues

    def _scoped(self, model: RuleModel) -> RuleModel:
        """Drop out-of-scope rules and declarations before detection."""
        scope = self.options.scope
        if scope.is_unrestricted:
            return model

        rules = []
        for rule in model.rules:
            if not scope.selector_in_scope(rule.selector):
                continue
            declarations = tuple(
                decl
                for decl in rule.declarations
                if scope.property_in_scope(decl.property)
            )
            rules.append(replace(rule, declarations=declarations))
        return replace(model, rules=tuple(rules))

    def _syntax_error_result(
        self,
        source: str,
        filename: str | None,
        error: CSSSyntaxError,
        start_time: float,
    ) -> AnalysisResult:
        issues = [
            Issue(
                id=next_issue_id(IssueKind.SYNTAX_ERROR),
                kind=IssueKind.SYNTAX_ERROR,
                severity=Severity.ERROR,
                message=error.message,
                location=IssueLocation(
                    file=filename,
                    line=error.line or None,
                    column=error.column or None,
                ),
                check="syntax.parse-error",
            )
        ]
        return AnalysisResult(
            summary=AnalysisSummary.from_issues(issues),
            issues=issues,
            metrics=raw_metrics(source),
            suggestions=Suggestions(),
            filename=filename,
            analysis_time_ms=(time.time() - start_time) * 1000,
        )


def compute_metrics(model: RuleModel) -> FileMetrics:
    """Size and specificity statistics of a parsed stylesheet."""
    scores = [calculate_specificity(rule.selector).total for rule in model.rules]
    return FileMetrics(
        file_size_bytes=model.size_bytes,
        selectors_count=model.selectors_count,
        properties_count=model.properties_count,
        max_specificity=max(scores, default=0),
        avg_specificity=round(sum(scores) / len(scores)) if scores else 0,
    )


def raw_metrics(source: str) -> FileMetrics:
    """Approximate metrics for a stylesheet that does not parse."""
    return FileMetrics(
        file_size_bytes=len(source.encode("utf-8")),
        selectors_count=source.count("{"),
        properties_count=len(RAW_DECLARATION_RE.findall(source)),
    )


def generate_suggestions(issues: list[Issue], metrics: FileMetrics) -> Suggestions:
    """Derive follow-up suggestions from the issue kinds and the metrics."""
    kinds = {issue.kind for issue in issues}
    suggestions = Suggestions()

    if IssueKind.PERFORMANCE_UNUSED_CSS in kinds:
        suggestions.optimizations.append("Remove unused CSS rules with a coverage tool")
        suggestions.optimizations.append("Consider splitting CSS and loading it on demand")

    if IssueKind.SPECIFICITY_CONFLICT in kinds:
        suggestions.refactoring.append("Refactor high-specificity selectors")
        suggestions.refactoring.append("Adopt a naming methodology such as BEM")

    if IssueKind.COMPATIBILITY_UNSUPPORTED in kinds:
        suggestions.modernization.append(
            "Add progressive-enhancement fallbacks for modern CSS features"
        )
        suggestions.modernization.append(
            "Use PostCSS with autoprefixer for vendor prefixes"
        )

    if metrics.avg_specificity > AVG_SPECIFICITY_LIMIT:
        suggestions.refactoring.append("Lower the average selector specificity")

    if metrics.file_size_bytes > LARGE_FILE_BYTES:
        suggestions.optimizations.append("Minify and compress the stylesheet")

    return suggestions


def analyze(
    source: str,
    filename: str | None = None,
    options: AnalysisOptions | None = None,
) -> AnalysisResult:
    """Analyse a stylesheet with the given (or default) options."""
    return CSSAnalyzer(options).analyze(source, filename)
