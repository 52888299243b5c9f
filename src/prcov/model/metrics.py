from __future__ import annotations

from prcov.model.types import FULL_COVERAGE


def pct(covered: int, total: int, *, full: float = float(FULL_COVERAGE)) -> float:
    """Return the coverage percentage, defaulting to `full` when no total exists."""
    return full if total == 0 else (covered / total) * full


def diff_coverage_percentage(covered: int, total: int) -> float:
    """Percentage of changed lines that are covered, rounded to two decimals."""
    return round(pct(covered, total), 2)


__all__ = ["diff_coverage_percentage", "pct"]
