from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from prcov import logger as _package_logger
from prcov.adapters.coverage import (
    collate_reports,
    load_coverage_report,
    load_coverage_report_or_empty,
    resolve_coverage_report,
)
from prcov.adapters.diff import obtain_diff
from prcov.engine import (
    CoverageRangesExtractor,
    analyze,
    extract_modified_files,
    extract_modified_ranges,
    plan_annotations,
)
from prcov.errors import (
    CoverageReportError,
    CoverageReportNotFoundError,
    DiffSourceError,
)
from prcov.model.report import ReportMeta, ReviewReport
from prcov.model.thresholds import Threshold, ThresholdsResult
from prcov.model.thresholds import evaluate as evaluate_thresholds

if TYPE_CHECKING:
    from collections.abc import Sequence

    from prcov.config import Settings
    from prcov.model.analysis import CoverageStats
    from prcov.model.coverage import CoverageReport


class PipelineError(Exception):
    """Base class for errors emitted by the pipeline."""


class NoInputError(PipelineError):
    """Coverage report input was missing or could not be discovered."""


class DataError(PipelineError):
    """Coverage report data is malformed or could not be read (strict mode)."""


class ThresholdError(PipelineError):
    """Threshold evaluation failed."""

    def __init__(self, result: ThresholdsResult) -> None:
        super().__init__("threshold failed")
        self.result = result


class UnexpectedError(PipelineError):
    """Unexpected failure while building the report."""


def _load(settings: Settings, *, cwd: Path, log: logging.Logger) -> tuple[Path, CoverageReport]:
    path = resolve_coverage_report(settings.coverage_report, cwd=cwd)
    if settings.strict:
        return path, load_coverage_report(path, cwd=cwd, logger=log)
    return path, load_coverage_report_or_empty(path, cwd=cwd, logger=log)


def _diff_text_from(
    diff_file: Path | None,
    base_ref: str | None,
    *,
    cwd: Path,
    log: logging.Logger,
) -> str | None:
    try:
        return obtain_diff(diff_file=diff_file, base_ref=base_ref, cwd=cwd, logger=log)
    except DiffSourceError as exc:
        log.warning("%s; continuing with an empty diff", exc)
        return None


def build_review_report(
    settings: Settings,
    *,
    cwd: Path | None = None,
    logger: logging.Logger | None = None,
) -> ReviewReport:
    """Load coverage, read the diff, intersect them and plan the review comments."""
    log = logger or _package_logger.getChild("pipeline")
    cwd = cwd or Path.cwd()

    try:
        coverage_path, coverage = _load(settings, cwd=cwd, log=log)
        coverage_ranges = CoverageRangesExtractor(
            coverage,
            source_dir=settings.source_dir,
            logger=log,
        ).extract()
        diff = _diff_text_from(settings.diff_file, settings.base_ref, cwd=cwd, log=log)
        if diff is None:
            log.info("no diff available; no changed lines to review")
        modified = extract_modified_ranges(diff, logger=log)
        result = analyze(coverage_ranges, modified, logger=log)
        plan = plan_annotations(result, report_url=settings.report_url, commit_sha=settings.commit_sha)
    except CoverageReportNotFoundError as exc:
        raise NoInputError(str(exc)) from exc
    except CoverageReportError as exc:
        msg = f"failed to read coverage report: {exc}"
        raise DataError(msg) from exc
    except Exception as exc:
        log.exception("unexpected failure")
        raise UnexpectedError(str(exc)) from exc

    meta = ReportMeta(
        coverage_report=str(coverage_path),
        base_ref=settings.base_ref,
        commit_sha=settings.commit_sha,
        report_url=settings.report_url,
        modified_files=tuple(extract_modified_files(diff)),
    )
    return ReviewReport(
        meta=meta,
        plan=plan,
        intersections=result.intersections,
        coverage_ranges=coverage_ranges,
    )


def collate_coverage(
    coverage_dir: Path,
    *,
    modified_only: bool = False,
    diff_file: Path | None = None,
    base_ref: str | None = None,
    cwd: Path | None = None,
    logger: logging.Logger | None = None,
) -> CoverageReport:
    """Merge the resultset shards in *coverage_dir*, optionally keeping only files the diff touches."""
    log = logger or _package_logger.getChild("pipeline")
    cwd = cwd or Path.cwd()
    if not coverage_dir.is_absolute():
        coverage_dir = cwd / coverage_dir

    modified: list[str] = []
    if modified_only:
        modified = extract_modified_files(_diff_text_from(diff_file, base_ref, cwd=cwd, log=log))
        if not modified:
            log.warning("no modified files found in the diff; keeping every file")

    try:
        return collate_reports(coverage_dir, cwd=cwd, only=modified, logger=log)
    except CoverageReportNotFoundError as exc:
        raise NoInputError(str(exc)) from exc
    except CoverageReportError as exc:
        msg = f"failed to collate coverage: {exc}"
        raise DataError(msg) from exc
    except Exception as exc:
        log.exception("unexpected failure")
        raise UnexpectedError(str(exc)) from exc


def thresholds_from_settings(settings: Settings, extra: Sequence[Threshold] = ()) -> list[Threshold]:
    thresholds: list[Threshold] = []
    if settings.fail_under is not None:
        thresholds.append(Threshold(percentage=float(settings.fail_under)))
    if settings.max_uncovered is not None:
        thresholds.append(Threshold(uncovered=int(settings.max_uncovered)))
    thresholds.extend(extra)
    return thresholds


def evaluate_thresholds_or_raise(
    stats: CoverageStats,
    *,
    thresholds: Sequence[Threshold],
) -> None:
    """Raise ThresholdError if any configured thresholds fail."""
    if not thresholds:
        return
    result = evaluate_thresholds(stats, thresholds)
    if result.passed:
        return
    raise ThresholdError(result)


__all__ = [
    "DataError",
    "NoInputError",
    "PipelineError",
    "ThresholdError",
    "UnexpectedError",
    "build_review_report",
    "collate_coverage",
    "evaluate_thresholds_or_raise",
    "thresholds_from_settings",
]
