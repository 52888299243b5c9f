"""Intersect modified ranges with uncovered ranges and aggregate diff coverage.

Analysis inputs
---------------
uncovered_ranges:
    Mapping of file name to its uncovered ranges, e.g.
    ``{"app/models/user.rb": FileCoverageRanges(actual=((12, 14), (29, 30)))}``.
    A mapping with an ``"actual_ranges"`` key, or a bare list of ranges, is accepted too.
modified_ranges:
    Mapping of file name to the ranges added by the diff, e.g.
    ``{"app/services/foo.rb": [(100, 120)]}``.

Only files present in both mappings count towards the totals: a file without coverage
data cannot be judged and is left out rather than treated as covered or uncovered.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from prcov import logger as _package_logger
from prcov.engine.chunker import count_lines, validate_ranges
from prcov.model.analysis import AnalysisResult, CoverageStats
from prcov.model.coverage import FileCoverageRanges
from prcov.model.metrics import diff_coverage_percentage

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable

    from prcov.model.types import LineRange

UncoveredEntry = FileCoverageRanges | Mapping[str, object] | Sequence[Sequence[int]]


def _as_ranges(raw: Iterable[Sequence[int]] | None) -> list[LineRange]:
    return [(int(start), int(end)) for start, end in raw or ()]


def actual_ranges_of(entry: UncoveredEntry | None) -> list[LineRange]:
    """Return the actual uncovered ranges of one entry of the uncovered map."""
    if entry is None:
        return []
    if isinstance(entry, FileCoverageRanges):
        return list(entry.actual)
    if isinstance(entry, Mapping):
        return _as_ranges(entry.get("actual_ranges"))  # type: ignore[arg-type]
    return _as_ranges(entry)


def intersect_ranges(modified: Sequence[LineRange], uncovered: Sequence[LineRange]) -> list[LineRange]:
    """Two-pointer intersection of two sorted, disjoint range lists.

    Each step advances the pointer whose range ends first, so the loop runs at most
    ``len(modified) + len(uncovered)`` times.
    """
    i = j = 0
    result: list[LineRange] = []
    while i < len(modified) and j < len(uncovered):
        start = max(modified[i][0], uncovered[j][0])
        end = min(modified[i][1], uncovered[j][1])
        if start <= end:
            result.append((start, end))
        if modified[i][1] < uncovered[j][1]:
            i += 1
        else:
            j += 1
    return result


class CoverageAnalyzer:
    """Compute per-file intersections and the aggregate :class:`CoverageStats`."""

    def __init__(
        self,
        *,
        uncovered_ranges: Mapping[str, UncoveredEntry],
        modified_ranges: Mapping[str, Sequence[Sequence[int]] | None],
        logger: logging.Logger | None = None,
    ) -> None:
        self._uncovered_ranges = uncovered_ranges
        self._modified_ranges = modified_ranges
        self._logger = logger or _package_logger.getChild("analyze")

    def analyze(self) -> AnalysisResult:
        self._logger.debug("starting coverage analysis for %d modified files", len(self._modified_ranges))

        intersections: dict[str, list[LineRange]] = {}
        total = 0
        uncovered = 0

        for file, raw_modified in self._modified_ranges.items():
            if not raw_modified or file not in self._uncovered_ranges:
                continue

            modified = _as_ranges(raw_modified)
            actual = actual_ranges_of(self._uncovered_ranges[file])
            if __debug__:
                validate_ranges(modified, name=f"modified ranges of {file}")
                validate_ranges(actual, name=f"uncovered ranges of {file}")

            overlap = intersect_ranges(modified, actual)
            total += count_lines(modified)
            uncovered += count_lines(overlap)
            if overlap:
                intersections[file] = overlap

        covered = total - uncovered
        stats = CoverageStats(
            total_modified_lines=total,
            uncovered_modified_lines=uncovered,
            covered_modified_lines=covered,
            coverage_percentage=diff_coverage_percentage(covered, total),
        )
        self._logger.debug("modified uncovered intersection: %s", intersections)
        self._logger.debug(
            "coverage calculation: %d total lines, %d uncovered, %s%% covered",
            total,
            uncovered,
            stats.coverage_percentage,
        )
        return AnalysisResult(intersections=intersections, stats=stats)


def analyze(
    uncovered_ranges: Mapping[str, UncoveredEntry],
    modified_ranges: Mapping[str, Sequence[Sequence[int]] | None],
    *,
    logger: logging.Logger | None = None,
) -> AnalysisResult:
    """Functional shortcut for :meth:`CoverageAnalyzer.analyze`."""
    return CoverageAnalyzer(
        uncovered_ranges=uncovered_ranges,
        modified_ranges=modified_ranges,
        logger=logger,
    ).analyze()


__all__ = ["CoverageAnalyzer", "actual_ranges_of", "analyze", "intersect_ranges"]
