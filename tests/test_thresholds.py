import pytest

from prcov.model import CoverageStats
from prcov.model.thresholds import (
    Threshold,
    ThresholdFailure,
    ThresholdsResult,
    evaluate,
    parse_threshold,
)


def _stats(total: int, uncovered: int) -> CoverageStats:
    covered = total - uncovered
    pct = 100.0 if total == 0 else round(covered / total * 100, 2)
    return CoverageStats(
        total_modified_lines=total,
        uncovered_modified_lines=uncovered,
        covered_modified_lines=covered,
        coverage_percentage=pct,
    )


@pytest.mark.parametrize(
    ("expression", "expected"),
    [
        ("pct=80", Threshold(percentage=80.0)),
        ("coverage=75% uncovered=10", Threshold(percentage=75.0, uncovered=10)),
        ("pct=90, miss=5", Threshold(percentage=90.0, uncovered=5)),
        ("PERCENT=100 MISSES=0", Threshold(percentage=100.0, uncovered=0)),
    ],
)
def test_parse_threshold(expression: str, expected: Threshold) -> None:
    assert parse_threshold(expression) == expected


@pytest.mark.parametrize(
    ("expression", "pattern"),
    [
        ("", "non-empty"),
        (" ", "non-empty"),
        ("pct", "invalid threshold token"),
        ("branches=10", "unknown threshold metric"),
        ("pct=-1", "percentage out of range"),
        ("pct=101", "percentage out of range"),
        ("pct=abc", "invalid percentage value"),
        ("uncovered=-5", "must be non-negative"),
        ("pct=80 pct=90", "duplicate percentage constraint"),
        ("miss=1 uncovered=2", "duplicate numeric constraint"),
    ],
)
def test_parse_threshold_rejects_invalid_input(expression: str, pattern: str) -> None:
    with pytest.raises(ValueError, match=pattern):
        parse_threshold(expression)


def test_evaluate_passes_at_boundaries() -> None:
    result = evaluate(_stats(10, 2), [parse_threshold("pct=80 uncovered=2")])
    assert result == ThresholdsResult(passed=True, failures=[])


def test_evaluate_reports_failures() -> None:
    result = evaluate(_stats(4, 3), [parse_threshold("pct=50 uncovered=2")])
    assert not result.passed
    assert result.failures == [
        ThresholdFailure(metric="percentage", required=50.0, actual=25.0, comparison=">="),
        ThresholdFailure(metric="uncovered", required=2, actual=3, comparison="<="),
    ]


def test_nothing_to_measure_always_passes() -> None:
    assert evaluate(_stats(0, 0), [Threshold(percentage=100.0, uncovered=0)]).passed


def test_empty_threshold() -> None:
    assert Threshold().is_empty()
    assert not Threshold(uncovered=0).is_empty()
