from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from prcov.model.types import FULL_COVERAGE

if TYPE_CHECKING:
    from prcov.model.types import LineRange


@dataclass(frozen=True, slots=True)
class CoverageStats:
    """Aggregate diff-coverage counts across all analysed files."""

    total_modified_lines: int = 0
    uncovered_modified_lines: int = 0
    covered_modified_lines: int = 0
    coverage_percentage: float = float(FULL_COVERAGE)

    def __post_init__(self) -> None:
        """Validate that the counts add up."""
        if min(self.total_modified_lines, self.uncovered_modified_lines, self.covered_modified_lines) < 0:
            msg = "CoverageStats counts must be >= 0"
            raise ValueError(msg)
        if self.covered_modified_lines + self.uncovered_modified_lines != self.total_modified_lines:
            msg = "CoverageStats covered + uncovered must equal total"
            raise ValueError(msg)

    @property
    def fully_covered(self) -> bool:
        return self.coverage_percentage >= FULL_COVERAGE

    def to_dict(self) -> dict[str, int | float]:
        return {
            "total_modified_lines": self.total_modified_lines,
            "uncovered_modified_lines": self.uncovered_modified_lines,
            "covered_modified_lines": self.covered_modified_lines,
            "coverage_percentage": self.coverage_percentage,
        }


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Modified-and-uncovered ranges per file, plus the aggregate stats."""

    intersections: dict[str, list[LineRange]] = field(default_factory=dict)
    stats: CoverageStats = field(default_factory=CoverageStats)


__all__ = ["AnalysisResult", "CoverageStats"]
