from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prcov.model.annotations import AnnotationPlan
    from prcov.model.coverage import FileCoverageRanges
    from prcov.model.types import LineRange


@dataclass(frozen=True, slots=True)
class ReportMeta:
    """Where the inputs came from (schema: meta)."""

    coverage_report: str | None = None
    base_ref: str | None = None
    commit_sha: str | None = None
    report_url: str | None = None
    modified_files: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReviewReport:
    """Result of one prcov run: the annotation plan plus the data it was derived from."""

    meta: ReportMeta
    plan: AnnotationPlan
    intersections: dict[str, list[LineRange]] = field(default_factory=dict)
    coverage_ranges: dict[str, FileCoverageRanges] = field(default_factory=dict)


__all__ = ["ReportMeta", "ReviewReport"]
