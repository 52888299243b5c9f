"""Turn per-line coverage vectors into uncovered, display and relevant ranges."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from prcov import logger as _package_logger
from prcov.engine.boundaries import locator_for
from prcov.engine.chunker import consolidate_sorted
from prcov.model.coverage import FileCoverageRanges

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from prcov.engine.boundaries import BoundaryLocator
    from prcov.model.coverage import CoverageReport, MethodBoundary
    from prcov.model.types import CoverageVector


@dataclass(slots=True)
class LineScan:
    """Line numbers collected by a single pass over a coverage vector."""

    actual: list[int] = field(default_factory=list)
    display: list[int] = field(default_factory=list)
    relevant: list[int] = field(default_factory=list)


def _bridges_to_miss(vector: CoverageVector, index: int) -> bool:
    # A non-executable line joins a run only when the very next line is a miss.
    return vector[index] is None and index + 1 < len(vector) and vector[index + 1] == 0


def scan_coverage_vector(vector: CoverageVector) -> LineScan:
    """Collect actual/display/relevant line numbers in one left-to-right pass.

    Every iteration of the outer loop advances the cursor by at least one entry.
    """
    scan = LineScan()
    index = 0
    while index < len(vector):
        value = vector[index]
        if value != 0:
            if value is not None:
                scan.relevant.append(index + 1)
            index += 1
            continue

        while index < len(vector):
            value = vector[index]
            if value == 0:
                scan.actual.append(index + 1)
                scan.display.append(index + 1)
                scan.relevant.append(index + 1)
            elif _bridges_to_miss(vector, index):
                scan.display.append(index + 1)
            else:
                break
            index += 1
    return scan


def _executable_lines(boundary: MethodBoundary, vector: CoverageVector) -> list[int]:
    last = min(boundary.end_line, len(vector))
    return [ln for ln in range(boundary.start_line, last + 1) if vector[ln - 1] is not None]


def _fully_uncovered(boundary: MethodBoundary, vector: CoverageVector) -> bool:
    executable = _executable_lines(boundary, vector)
    return bool(executable) and all(vector[ln - 1] == 0 for ln in executable)


def group_by_methods(
    actual: Sequence[int],
    display: Sequence[int],
    vector: CoverageVector,
    boundaries: Sequence[MethodBoundary],
) -> list[int]:
    """Widen display lines to whole methods that were never executed.

    A method containing at least one uncovered line contributes its full span when all
    of its executable lines are uncovered, and its original display lines otherwise.
    Display lines outside every method are kept as they are.
    """
    if not boundaries or not actual:
        return list(display)

    # Later (inner) boundaries overwrite outer ones, so nested defs map to the innermost.
    line_to_method: dict[int, MethodBoundary] = {}
    for boundary in sorted(boundaries, key=lambda b: b.start_line):
        for ln in range(boundary.start_line, boundary.end_line + 1):
            line_to_method[ln] = boundary

    grouped: set[int] = set()
    touched: dict[MethodBoundary, None] = {}
    for ln in actual:
        method = line_to_method.get(ln)
        if method is None:
            grouped.add(ln)
        else:
            touched.setdefault(method, None)

    for method in touched:
        if _fully_uncovered(method, vector):
            grouped.update(range(method.start_line, method.end_line + 1))
        else:
            grouped.update(ln for ln in display if ln in method)

    grouped.update(ln for ln in display if ln not in line_to_method)
    return sorted(grouped)


def extract_coverage_ranges(
    vector: CoverageVector,
    *,
    boundaries: Sequence[MethodBoundary] | None = None,
) -> FileCoverageRanges:
    """Compute the range sets for one file, optionally grouping display lines by method."""
    scan = scan_coverage_vector(vector)
    display = scan.display
    if boundaries:
        display = group_by_methods(scan.actual, scan.display, vector, boundaries)
    return FileCoverageRanges(
        actual=tuple(consolidate_sorted(scan.actual)),
        display=tuple(consolidate_sorted(display)),
        relevant=tuple(consolidate_sorted(scan.relevant)),
    )


class CoverageRangesExtractor:
    """Compute :class:`FileCoverageRanges` for every file of a coverage report.

    When *source_dir* is given and ``source_dir / <file>`` exists, the source text is
    handed to the boundary locator for that file type to group display ranges by method.
    """

    def __init__(
        self,
        report: CoverageReport,
        *,
        source_dir: Path | None = None,
        locator_factory: Callable[[str], BoundaryLocator] = locator_for,
        logger: logging.Logger | None = None,
    ) -> None:
        self._report = report
        self._source_dir = source_dir
        self._locator_factory = locator_factory
        self._logger = logger or _package_logger.getChild("coverage")

    def extract(self) -> dict[str, FileCoverageRanges]:
        ranges: dict[str, FileCoverageRanges] = {}
        for filename, vector in self._report.files.items():
            boundaries = self._boundaries_for(filename)
            ranges[filename] = extract_coverage_ranges(vector, boundaries=boundaries)
        self._logger.debug("extracted coverage ranges for %d files", len(ranges))
        return ranges

    def _boundaries_for(self, filename: str) -> list[MethodBoundary]:
        if self._source_dir is None:
            return []
        source_path = self._source_dir / filename
        if not source_path.is_file():
            return []
        try:
            source = source_path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            self._logger.debug("skipping method grouping for %s: %s", filename, exc)
            return []
        return self._locator_factory(filename).locate(source)


__all__ = [
    "CoverageRangesExtractor",
    "LineScan",
    "extract_coverage_ranges",
    "group_by_methods",
    "scan_coverage_vector",
]
