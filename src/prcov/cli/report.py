from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from prcov.adapters.coverage import find_project_root
from prcov.adapters.render import RenderOptions, render
from prcov.cli._shared import resolve_use_color
from prcov.cli.exit_codes import (
    EXIT_CONFIG,
    EXIT_DATAERR,
    EXIT_GENERIC,
    EXIT_NOINPUT,
    EXIT_OK,
    EXIT_THRESHOLD,
)
from prcov.config import Settings, load_pyproject_settings
from prcov.errors import ConfigError
from prcov.io import compute_io_policy, write_output
from prcov.model.report import ReviewReport
from prcov.model.thresholds import Threshold, parse_threshold
from prcov.model.types import OutputFormat
from prcov.pipeline import (
    DataError,
    NoInputError,
    ThresholdError,
    UnexpectedError,
    build_review_report,
    evaluate_thresholds_or_raise,
    thresholds_from_settings,
)

_BOOL_FALSE = False


def _resolve_settings(cwd: Path, **cli_values: object) -> Settings:
    try:
        return load_pyproject_settings(find_project_root(cwd)).merged(**cli_values)
    except ConfigError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_CONFIG) from exc


def _parse_thresholds(expressions: list[str]) -> list[Threshold]:
    parsed: list[Threshold] = []
    for expression in expressions:
        try:
            threshold = parse_threshold(expression)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--threshold") from exc
        if not threshold.is_empty():
            parsed.append(threshold)
    return parsed


def _build_report(settings: Settings, *, cwd: Path) -> ReviewReport:
    try:
        return build_review_report(settings, cwd=cwd)
    except NoInputError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_NOINPUT) from exc
    except DataError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_DATAERR) from exc
    except UnexpectedError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_GENERIC) from exc


def report_cmd(
    coverage_report: Annotated[
        Path | None,
        typer.Option(
            "-c",
            "--coverage-report",
            envvar="COVERAGE_REPORT_PATH",
            help="Coverage report (JSON or Cobertura XML). If omitted, discovery is used.",
        ),
    ] = None,
    base_ref: Annotated[
        str | None,
        typer.Option("--base-ref", envvar="BASE_REF", help="Diff against BASE...HEAD using git."),
    ] = None,
    diff_file: Annotated[
        Path | None,
        typer.Option("--diff-file", help="Read a unified diff from PATH ('-' for stdin) instead of git."),
    ] = None,
    source_dir: Annotated[
        Path | None,
        typer.Option(
            "--source-dir",
            envvar="SOURCE_DIR",
            help="Source root used to group uncovered lines by method.",
        ),
    ] = None,
    report_url: Annotated[
        str | None,
        typer.Option("--report-url", envvar="REPORT_URL", help="Base URL of the published HTML coverage report."),
    ] = None,
    commit_sha: Annotated[
        str | None,
        typer.Option("--commit-sha", envvar="COMMIT_SHA", help="Commit the comments refer to."),
    ] = None,
    fmt: Annotated[
        OutputFormat,
        typer.Option("--format", help="Output format.", case_sensitive=False),
    ] = OutputFormat.AUTO,
    output: Annotated[
        Path | None,
        typer.Option("--output", help="Write output to PATH (use '-' for stdout)."),
    ] = None,
    fail_under: Annotated[
        float | None,
        typer.Option("--fail-under", help="Fail if diff coverage % is below this value", min=0, max=100),
    ] = None,
    max_uncovered: Annotated[
        int | None,
        typer.Option("--max-uncovered", help="Fail if more changed lines than this are uncovered", min=0),
    ] = None,
    threshold: Annotated[
        list[str] | None,
        typer.Option("--threshold", help="Gate expression like 'pct=90,uncovered=5' (repeatable)."),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat an unreadable coverage report as an error."),
    ] = _BOOL_FALSE,
    color: Annotated[
        bool,
        typer.Option("--color", help="Force color output"),
    ] = _BOOL_FALSE,
    no_color: Annotated[
        bool,
        typer.Option("--no-color", help="Disable color output"),
    ] = _BOOL_FALSE,
) -> None:
    """Report changed lines that are not covered by tests."""
    cwd = Path.cwd()
    settings = _resolve_settings(
        cwd,
        coverage_report=coverage_report,
        base_ref=base_ref,
        diff_file=diff_file,
        source_dir=source_dir,
        report_url=report_url,
        commit_sha=commit_sha,
        fail_under=fail_under,
        max_uncovered=max_uncovered,
        strict=True if strict else None,
    )
    thresholds = thresholds_from_settings(settings, _parse_thresholds(threshold or []))

    render_fmt, is_tty_like, color_allowed = compute_io_policy(fmt=fmt, output=output)
    use_color = resolve_use_color(color=color, no_color=no_color, color_allowed=color_allowed)

    report = _build_report(settings, cwd=cwd)
    text = render(report, fmt=render_fmt, options=RenderOptions(color=use_color, is_tty=is_tty_like))
    write_output(text, output)

    _enforce_thresholds(report, thresholds=thresholds)
    raise typer.Exit(code=EXIT_OK)


def _enforce_thresholds(report: ReviewReport, *, thresholds: list[Threshold]) -> None:
    try:
        evaluate_thresholds_or_raise(report.plan.stats, thresholds=thresholds)
    except ThresholdError as exc:
        for failure in exc.result.failures:
            typer.echo(
                (
                    "Threshold failed: "
                    f"{failure.metric} {failure.comparison} {failure.required}"
                    f" (actual {failure.actual})"
                ),
                err=True,
            )
        raise typer.Exit(code=EXIT_THRESHOLD) from exc


def register(app: typer.Typer) -> None:
    app.command("report")(report_cmd)


__all__ = ["register", "report_cmd"]
