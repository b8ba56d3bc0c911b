"""Command line interface.

Exit codes of ``analyze``: 0 when no errors or warnings were found, 1 when
only warnings were found, 2 when errors were found, 3 when the analysis
itself failed (unreadable file, empty input, invalid options).
"""

import sys
from pathlib import Path
from typing import Any

import click

from . import __version__
from .analyzer import CSSAnalyzer
from .config import AnalysisOptions, load_options
from .errors import CSSInspectorError, ErrorCategory
from .fixes import DEFAULT_CONFIDENCE_THRESHOLD, FixEngine
from .inspector_logging import LogCategory, get_category_logger, setup_logging
from .models import AnalysisResult, IssueKind
from .reporters import JSONReporter, MarkdownReporter

logger = get_category_logger(LogCategory.CLI)

EXIT_OK = 0
EXIT_WARNINGS = 1
EXIT_ERRORS = 2
EXIT_FAILURE = 3

CHECK_NAMES = ("layout", "performance", "accessibility", "compatibility", "maintainability")


def exit_code_for(result: AnalysisResult) -> int:
    if result.summary.error_count > 0:
        return EXIT_ERRORS
    if result.summary.warning_count > 0:
        return EXIT_WARNINGS
    return EXIT_OK


def analysis_options(
    config_path: Path | None,
    browsers: str | None = None,
    disabled_checks: list[str] | None = None,
    parallel: bool = False,
) -> AnalysisOptions:
    """Options from the config file with command line overrides applied."""
    options = load_options(config_path)

    overrides: dict[str, Any] = {}
    if disabled_checks:
        overrides["checks"] = {name: False for name in disabled_checks}
    if browsers:
        overrides["browsers"] = [b.strip() for b in browsers.split(",") if b.strip()]
    if parallel:
        overrides["parallel"] = True

    return options.merged_with(overrides) if overrides else options


def check_options(f: Any) -> Any:
    """Options shared by the commands that run an analysis."""
    f = click.option(
        "--config",
        "config_path",
        type=click.Path(exists=True, path_type=Path),
        help="Config file or directory containing css-inspector.config.json",
    )(f)
    f = click.option(
        "--browsers", help="Comma-separated target browsers (enables support notices)"
    )(f)
    f = click.option(
        "--parallel", is_flag=True, help="Run detectors on a thread pool"
    )(f)
    for name in CHECK_NAMES:
        f = click.option(
            f"--no-{name}", f"no_{name}", is_flag=True, help=f"Disable {name} checks"
        )(f)
    return f


def _disabled_checks(kwargs: dict[str, Any]) -> list[str]:
    return [name for name in CHECK_NAMES if kwargs.get(f"no_{name}")]


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CSSInspectorError(
            message=f"Cannot read {path}: {e}", category=ErrorCategory.INPUT
        ) from e


def _fail(error: Exception) -> None:
    logger.debug(f"Command failed: {error}")
    click.echo(f"Error: {error}", err=True)
    sys.exit(EXIT_FAILURE)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Log output format",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, log_format: str) -> None:
    """css-inspector - static analysis and auto-fixing for stylesheets."""
    if quiet and verbose:
        click.echo("Error: --quiet and --verbose are mutually exclusive", err=True)
        sys.exit(EXIT_FAILURE)

    setup_logging(quiet=quiet, verbose=verbose, log_format=log_format)
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["markdown", "json"]),
    default="markdown",
    help="Report format",
)
@click.option(
    "--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write the report to a file"
)
@check_options
@click.pass_context
def analyze(
    ctx: click.Context,
    file: Path,
    output_format: str,
    output: Path | None,
    config_path: Path | None,
    browsers: str | None,
    parallel: bool,
    **kwargs: Any,
) -> None:
    """Analyse a stylesheet and report the issues found."""
    quiet = ctx.obj.get("quiet", False)

    try:
        options = analysis_options(config_path, browsers, _disabled_checks(kwargs), parallel)
        source = _read_source(file)
        result = CSSAnalyzer(options).analyze(source, filename=str(file))
    except CSSInspectorError as e:
        _fail(e)
        return

    if output_format == "json":
        report = JSONReporter().render(result)
    else:
        report = MarkdownReporter().render(result, str(file))

    if output:
        output.write_text(report, encoding="utf-8")
        if not quiet:
            click.echo(f"Report written to {output}", err=True)
    else:
        click.echo(report)

    if not quiet:
        summary = result.summary
        click.echo(
            f"{summary.total_issues} issue(s): {summary.error_count} errors, "
            f"{summary.warning_count} warnings, {summary.info_count} info, "
            f"{summary.hint_count} hints ({result.analysis_time_ms:.0f}ms)",
            err=True,
        )

    sys.exit(exit_code_for(result))


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--confidence",
    type=click.IntRange(0, 100),
    default=DEFAULT_CONFIDENCE_THRESHOLD,
    show_default=True,
    help="Minimum fix confidence",
)
@click.option(
    "--type",
    "issue_types",
    multiple=True,
    type=click.Choice([kind.value for kind in IssueKind]),
    help="Only fix issues of this kind (repeatable)",
)
@click.option(
    "--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write the fixed stylesheet to a file"
)
@click.option("--in-place", is_flag=True, help="Overwrite FILE with the fixed stylesheet")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["markdown", "json"]),
    default="markdown",
    help="Report format",
)
@check_options
@click.pass_context
def fix(
    ctx: click.Context,
    file: Path,
    confidence: int,
    issue_types: tuple[str, ...],
    output: Path | None,
    in_place: bool,
    output_format: str,
    config_path: Path | None,
    browsers: str | None,
    parallel: bool,
    **kwargs: Any,
) -> None:
    """Apply high-confidence fixes to a stylesheet."""
    if in_place and output:
        raise click.UsageError("--in-place and --output are mutually exclusive")
    quiet = ctx.obj.get("quiet", False)

    try:
        options = analysis_options(config_path, browsers, _disabled_checks(kwargs), parallel)
        source = _read_source(file)
        result = CSSAnalyzer(options).analyze(source, filename=str(file))
    except CSSInspectorError as e:
        _fail(e)
        return

    fix_result = FixEngine().apply_fixes(
        source,
        result.issues,
        confidence_threshold=confidence,
        issue_types=issue_types or None,
    )

    target = file if in_place else output
    if target and fix_result.changed:
        target.write_text(fix_result.fixed_source, encoding="utf-8")
        if not quiet:
            click.echo(f"Fixed stylesheet written to {target}", err=True)

    if output_format == "json":
        click.echo(JSONReporter().render_fixes(fix_result))
    else:
        click.echo(MarkdownReporter().render_fixes(fix_result))

    if not quiet:
        click.echo(
            f"{fix_result.fixed_count} fix(es) applied, {fix_result.skipped_count} skipped",
            err=True,
        )


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
