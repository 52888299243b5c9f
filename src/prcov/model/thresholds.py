from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from prcov.model.types import FULL_COVERAGE

if TYPE_CHECKING:
    from collections.abc import Sequence

    from prcov.model.analysis import CoverageStats

_THRESHOLD_PATTERN = re.compile(r"^[a-zA-Z_-]+=")


@dataclass(frozen=True, slots=True)
class Threshold:
    """User-defined diff-coverage gates.

    Fields
    ------
    percentage:
        Minimum percentage of changed lines that must be covered (0..100).
    uncovered:
        Maximum allowed number of changed lines left uncovered.
    """

    percentage: float | None = None
    uncovered: int | None = None

    def is_empty(self) -> bool:
        return self.percentage is None and self.uncovered is None


@dataclass(frozen=True, slots=True)
class ThresholdFailure:
    """Details of a failed threshold evaluation."""

    metric: str
    required: float | int
    actual: float | int
    comparison: str


@dataclass(frozen=True, slots=True)
class ThresholdsResult:
    """Outcome of evaluating a collection of thresholds."""

    passed: bool
    failures: list[ThresholdFailure]


def parse_threshold(expression: str) -> Threshold:
    """Parse a threshold expression like 'pct=90,uncovered=5'."""
    if not expression or not expression.strip():
        msg = "threshold expression must be non-empty"
        raise ValueError(msg)

    percentage: float | None = None
    uncovered: int | None = None

    tokens = [token.strip() for token in re.split(r"[,\s]+", expression) if token.strip()]
    for token in tokens:
        if "=" not in token or not _THRESHOLD_PATTERN.match(token):
            msg = f"invalid threshold token: {token!r}"
            raise ValueError(msg)

        key, raw_value = token.split("=", 1)
        key = key.strip().lower()
        value = raw_value.strip().rstrip("%")

        if key in {"pct", "percent", "percentage", "coverage"}:
            percentage = _parse_percentage(value, existing=percentage, token=token)
        elif key in {"uncovered", "miss", "misses"}:
            uncovered = _parse_int(value, existing=uncovered, token=token)
        else:
            msg = f"unknown threshold metric: {key!r}"
            raise ValueError(msg)

    return Threshold(percentage=percentage, uncovered=uncovered)


def evaluate(stats: CoverageStats, thresholds: Sequence[Threshold]) -> ThresholdsResult:
    """Evaluate thresholds against the diff-coverage stats of one run."""
    failures: list[ThresholdFailure] = []
    for t in thresholds:
        if t.percentage is not None and stats.coverage_percentage < t.percentage:
            failures.append(
                ThresholdFailure(
                    metric="percentage",
                    required=t.percentage,
                    actual=stats.coverage_percentage,
                    comparison=">=",
                )
            )
        if t.uncovered is not None and stats.uncovered_modified_lines > t.uncovered:
            failures.append(
                ThresholdFailure(
                    metric="uncovered",
                    required=t.uncovered,
                    actual=stats.uncovered_modified_lines,
                    comparison="<=",
                )
            )
    return ThresholdsResult(passed=not failures, failures=failures)


def _parse_percentage(value: str, *, existing: float | None, token: str) -> float:
    if existing is not None:
        msg = f"duplicate percentage constraint in {token!r}"
        raise ValueError(msg)
    try:
        percent = float(value)
    except ValueError as exc:
        msg = f"invalid percentage value in {token!r}: {value!r}"
        raise ValueError(msg) from exc
    if percent < 0 or percent > float(FULL_COVERAGE):
        msg = f"percentage out of range in {token!r}: {percent}"
        raise ValueError(msg)
    return percent


def _parse_int(value: str, *, existing: int | None, token: str) -> int:
    if existing is not None:
        msg = f"duplicate numeric constraint in {token!r}"
        raise ValueError(msg)
    try:
        number = int(value)
    except ValueError as exc:
        msg = f"invalid integer value in {token!r}: {value!r}"
        raise ValueError(msg) from exc
    if number < 0:
        msg = f"numeric threshold must be non-negative in {token!r}: {number}"
        raise ValueError(msg)
    return number


__all__ = [
    "Threshold",
    "ThresholdFailure",
    "ThresholdsResult",
    "evaluate",
    "parse_threshold",
]
