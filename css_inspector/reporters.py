"""Report formatters for analysis and fix results.

Reporters return strings; writing them to a stream or file is left to the
caller (the CLI writes to stdout or ``--output``).
"""

import json
from typing import Any

from .fixes import FixResult
from .models import AnalysisResult, Issue, Severity

SEVERITY_HEADINGS = {
    Severity.ERROR: "Errors",
    Severity.WARNING: "Warnings",
    Severity.INFO: "Info",
    Severity.HINT: "Hints",
}

SUGGESTION_HEADINGS = (
    ("optimizations", "Performance Optimizations"),
    ("refactoring", "Code Refactoring"),
    ("modernization", "Modernization"),
)


class MarkdownReporter:
    """Human-readable Markdown report.

    Issues are grouped by severity, most severe first, and numbered within
    each group.
    """

    def render(self, result: AnalysisResult, filename: str | None = None) -> str:
        """Render an analysis result.

        Args:
            result: Analysis result to render.
            filename: Name shown in the title; defaults to ``result.filename``.

        Returns:
            Markdown text.
        """
        name = filename or result.filename
        summary = result.summary
        metrics = result.metrics

        lines = [f"# CSS Analysis Report: {name}" if name else "# CSS Analysis Report", ""]

        lines += [
            "## Summary",
            f"- **Total Issues**: {summary.total_issues}",
            f"- **Errors**: {summary.error_count}",
            f"- **Warnings**: {summary.warning_count}",
            f"- **Info**: {summary.info_count}",
            f"- **Hints**: {summary.hint_count}",
            "",
            "## Metrics",
            f"- **File Size**: {metrics.file_size_bytes / 1024:.2f} KB",
            f"- **Selectors**: {metrics.selectors_count}",
            f"- **Properties**: {metrics.properties_count}",
            f"- **Max Specificity**: {metrics.max_specificity}",
            f"- **Avg Specificity**: {metrics.avg_specificity}",
            "",
        ]

        if result.issues:
            lines += ["## Issues Found", ""]
            for severity, issues in result.issues_by_severity().items():
                if not issues:
                    continue
                lines += [f"### {SEVERITY_HEADINGS[severity]} ({len(issues)})", ""]
                for index, issue in enumerate(issues, 1):
                    lines += self._format_issue(issue, index)
        else:
            lines += ["## No Issues Found", "", "No problems detected.", ""]

        if not result.suggestions.is_empty():
            lines += ["## Suggestions", ""]
            for attr, heading in SUGGESTION_HEADINGS:
                items = getattr(result.suggestions, attr)
                if items:
                    lines.append(f"### {heading}")
                    lines += [f"- {item}" for item in items]
                    lines.append("")

        return "\n".join(lines).rstrip() + "\n"

    def _format_issue(self, issue: Issue, index: int) -> list[str]:
        lines = [f"{index}. **{issue.message}** (`{issue.kind.value}`)"]
        if issue.description:
            lines.append(f"   {issue.description}")

        location = issue.location
        parts = []
        if location.selector:
            parts.append(f"selector `{location.selector}`")
        if location.property:
            parts.append(f"property `{location.property}`")
        if location.line:
            parts.append(f"line {location.line}")
        if parts:
            lines.append(f"   Location: {', '.join(parts)}")

        if issue.fix:
            lines.append(f"   **Fix**: {issue.fix.description}")
            if issue.fix.patch:
                lines.append("   ```css")
                lines += [f"   {line}" for line in issue.fix.patch.split("\n")]
                lines.append("   ```")
            lines.append(f"   Confidence: {issue.fix.confidence}%")

        if issue.resources and issue.resources.documentation:
            lines.append(f"   Documentation: {', '.join(issue.resources.documentation)}")

        lines.append("")
        return lines

    def render_fixes(self, fix_result: FixResult) -> str:
        """Render a fix run with its audit trail and the fixed stylesheet."""
        lines = [
            "# CSS Auto-Fix Report",
            "",
            "## Summary",
            f"- **Total Issues Analyzed**: {fix_result.total_issues}",
            f"- **Successfully Fixed**: {fix_result.fixed_count}",
            f"- **Skipped**: {fix_result.skipped_count}",
            "",
        ]

        if fix_result.applied_fixes:
            lines += ["## Applied Fixes", ""]
            for index, fix in enumerate(fix_result.applied_fixes, 1):
                lines += [
                    f"### {index}. {fix.description}",
                    f"**Issue Type**: {fix.kind}",
                    f"**Confidence**: {fix.confidence}%",
                    "",
                ]
                if fix.before:
                    lines += ["**Before**:", "```css", fix.before, "```", ""]
                if fix.after:
                    lines += ["**After**:", "```css", fix.after, "```", ""]

        if fix_result.skipped_fixes:
            lines += ["## Skipped Fixes", ""]
            for index, skip in enumerate(fix_result.skipped_fixes, 1):
                lines.append(f"{index}. **{skip.kind}**: {skip.reason}")
            lines.append("")

        lines += ["## Fixed CSS", "", "```css", fix_result.fixed_source, "```"]
        return "\n".join(lines) + "\n"


class JSONReporter:
    """Machine-readable JSON output."""

    def __init__(self, indent: int | None = 2):
        self.indent = indent

    def render(self, result: AnalysisResult) -> str:
        output: dict[str, Any] = result.to_dict()
        output["decision"] = "block" if result.should_block() else "approve"
        return json.dumps(output, indent=self.indent)

    def render_fixes(self, fix_result: FixResult) -> str:
        return json.dumps(fix_result.to_dict(), indent=self.indent)
