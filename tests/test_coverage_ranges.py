from pathlib import Path

import pytest

from prcov.engine.coverage_ranges import (
    CoverageRangesExtractor,
    extract_coverage_ranges,
    group_by_methods,
    scan_coverage_vector,
)
from prcov.model import ArrayForm, CoverageReport, FileCoverageRanges, MethodBoundary, SparseMapForm


def test_simple_vector() -> None:
    ranges = extract_coverage_ranges((None, 1, 0, 2))
    assert ranges.actual == ((3, 3),)
    assert ranges.display == ((3, 3),)
    assert ranges.relevant == ((2, 4),)


def test_non_executable_line_bridges_two_misses() -> None:
    ranges = extract_coverage_ranges((1, 0, None, 0, 1))
    assert ranges.actual == ((2, 2), (4, 4))
    assert ranges.display == ((2, 4),)
    assert ranges.relevant == ((1, 2), (4, 5))


def test_trailing_non_executable_lines_are_not_bridged() -> None:
    scan = scan_coverage_vector((0, None, None, 1, 0, None))
    assert scan.actual == [1, 5]
    assert scan.display == [1, 5]
    assert scan.relevant == [1, 4, 5]


def test_two_blank_lines_do_not_bridge() -> None:
    ranges = extract_coverage_ranges((0, None, None, 0))
    assert ranges.display == ((1, 1), (4, 4))


@pytest.mark.parametrize("vector", [(), (None, None), (1, 2, 3)])
def test_nothing_uncovered(vector: tuple[int | None, ...]) -> None:
    ranges = extract_coverage_ranges(vector)
    assert ranges.actual == ()
    assert ranges.display == ()


def test_actual_is_subset_of_display_and_relevant() -> None:
    vector = (None, 0, 0, None, 0, 3, None, 0, None, None, 1, 0)
    scan = scan_coverage_vector(vector)
    assert set(scan.actual) <= set(scan.display)
    assert set(scan.actual) <= set(scan.relevant)
    assert scan.actual == [i + 1 for i, v in enumerate(vector) if v == 0]


def test_fully_uncovered_method_widens_to_whole_span() -> None:
    # def on line 2, body 3-4, end on 5; line 7 is an uncovered top-level statement
    vector = (1, 0, 0, 0, None, 1, 0)
    ranges = extract_coverage_ranges(vector, boundaries=[MethodBoundary(2, 5)])
    assert ranges.actual == ((2, 4), (7, 7))
    assert ranges.display == ((2, 5), (7, 7))


def test_partially_covered_method_keeps_display_lines() -> None:
    vector = (1, 1, 0, None, 1)
    ranges = extract_coverage_ranges(vector, boundaries=[MethodBoundary(1, 5)])
    assert ranges.display == ((3, 3),)


def test_innermost_method_wins() -> None:
    vector = (1, 1, 0, 0, None, 1, None)
    outer = MethodBoundary(1, 7)
    inner = MethodBoundary(3, 5)
    display = group_by_methods([3, 4], [3, 4], vector, [outer, inner])
    assert display == [3, 4, 5]


def test_grouping_without_boundaries_is_identity() -> None:
    assert group_by_methods([2], [2, 3], (1, 0, None, 0), []) == [2, 3]


def test_file_coverage_ranges_to_dict() -> None:
    ranges = FileCoverageRanges(actual=((3, 3),), display=((3, 4),), relevant=((1, 4),))
    assert ranges.to_dict() == {
        "actual_ranges": [[3, 3]],
        "display_ranges": [[3, 4]],
        "relevant_ranges": [[1, 4]],
    }


def test_extractor_groups_with_python_sources(tmp_path: Path) -> None:
    source = tmp_path / "pkg" / "mod.py"
    source.parent.mkdir()
    source.write_text("def f():\n    a = 1\n    return a\n\n\nx = f\n", encoding="utf-8")
    report = CoverageReport.from_forms(
        {
            "pkg/mod.py": SparseMapForm({1: 0, 2: 0, 3: 0, 6: 1}),
            "missing.py": ArrayForm((0, 1)),
        }
    )

    ranges = CoverageRangesExtractor(report, source_dir=tmp_path).extract()

    assert ranges["pkg/mod.py"].actual == ((1, 3),)
    assert ranges["pkg/mod.py"].display == ((1, 3),)
    assert ranges["missing.py"].actual == ((1, 1),)


def test_extractor_uses_injected_locator() -> None:
    class FixedLocator:
        def locate(self, source: str) -> list[MethodBoundary]:
            return [MethodBoundary(1, 4)]

    report = CoverageReport.from_forms({"lib/a.rb": ArrayForm((0, 0, None, None))})

    # no source_dir: the locator is never consulted
    ranges = CoverageRangesExtractor(report, locator_factory=lambda _name: FixedLocator()).extract()
    assert ranges["lib/a.rb"].display == ((1, 2),)
