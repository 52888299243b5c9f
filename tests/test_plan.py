import pytest

from prcov.engine.plan import (
    GLOBAL_COMMENT_MARKER,
    INLINE_COMMENT_MARKER,
    SUMMARY_TITLE,
    build_inline_annotations,
    build_summary,
    coverage_index_link,
    coverage_link_for,
    ensure_marker,
    format_ranges,
    inline_message,
    plan_annotations,
)
from prcov.model import AnalysisResult, CoverageStats

REPORT_URL = "https://ci.example.com/artifacts/coverage"


@pytest.mark.parametrize(
    "body",
    [
        "hello",
        f"{INLINE_COMMENT_MARKER}\nhello",
        f"hello {INLINE_COMMENT_MARKER} world {INLINE_COMMENT_MARKER}",
    ],
)
def test_ensure_marker_is_idempotent(body: str) -> None:
    once = ensure_marker(body, INLINE_COMMENT_MARKER)
    assert once.startswith(INLINE_COMMENT_MARKER + "\n")
    assert once.count(INLINE_COMMENT_MARKER) == 1
    assert ensure_marker(once, INLINE_COMMENT_MARKER) == once


def test_inline_message() -> None:
    assert inline_message(5, 5) == "❌ Line 5 is not covered by tests."
    assert inline_message(3, 7) == "❌ Lines 3–7 are not covered by tests."


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        (REPORT_URL, f"{REPORT_URL}/index.html"),
        (f"{REPORT_URL}/", f"{REPORT_URL}/index.html"),
        ("https://ci.example.com/report.html", "https://ci.example.com/report.html"),
    ],
)
def test_coverage_index_link(url: str, expected: str) -> None:
    assert coverage_index_link(url) == expected


def test_coverage_link_for() -> None:
    assert coverage_link_for(REPORT_URL, "app/a.rb", 12) == f"{REPORT_URL}/index.html#app/a.rb:12"


def test_format_ranges() -> None:
    assert format_ranges([(3, 3), (10, 12)]) == "3, 10-12"
    assert format_ranges([]) == ""


def test_inline_annotations_are_ordered_and_tagged() -> None:
    annotations = build_inline_annotations(
        {"b.rb": [(2, 2)], "a.rb": [(1, 3), (9, 9)]},
        report_url=REPORT_URL,
        commit_sha="abc123",
    )
    assert [(a.file, a.start_line, a.end_line) for a in annotations] == [
        ("a.rb", 1, 3),
        ("a.rb", 9, 9),
        ("b.rb", 2, 2),
    ]
    first = annotations[0]
    assert first.message == "❌ Lines 1–3 are not covered by tests."
    assert first.body.startswith(INLINE_COMMENT_MARKER + "\n")
    assert first.body.count(INLINE_COMMENT_MARKER) == 1
    assert f"📊 [View coverage]({REPORT_URL}/index.html#a.rb:1)" in first.body
    assert first.body.endswith("_File: a.rb, line 1_\n_Commit: abc123_")
    assert not first.single_line
    assert annotations[1].single_line


def test_inline_annotation_without_url_or_commit() -> None:
    (annotation,) = build_inline_annotations({"x.py": [(4, 4)]})
    assert annotation.body == (
        f"{INLINE_COMMENT_MARKER}\n❌ Line 4 is not covered by tests.\n\n_File: x.py, line 4_"
    )


def test_summary_for_full_coverage() -> None:
    summary = build_summary(100.0)
    assert summary.body.startswith(GLOBAL_COMMENT_MARKER + "\n")
    assert SUMMARY_TITLE in summary.body
    assert "✅ **100.0%** of changed lines are covered." in summary.body
    assert "| File |" not in summary.body


def test_summary_lists_uncovered_files() -> None:
    summary = build_summary(
        50.0,
        {"b.rb": [(7, 7)], "a.rb": [(1, 1), (3, 4)]},
        report_url=REPORT_URL,
        commit_sha="abc123",
    )
    body = summary.body
    assert summary.coverage_percentage == 50.0
    assert body.count(GLOBAL_COMMENT_MARKER) == 1
    assert "❌ **50.0%** of changed lines are covered." in body
    assert body.index("| `a.rb` | 1, 3-4 |") < body.index("| `b.rb` | 7 |")
    assert f"📊 [View full report]({REPORT_URL}/index.html)" in body
    assert "_Commit: abc123_" in body


def test_plan_annotations() -> None:
    stats = CoverageStats(
        total_modified_lines=4,
        uncovered_modified_lines=1,
        covered_modified_lines=3,
        coverage_percentage=75.0,
    )
    plan = plan_annotations(AnalysisResult(intersections={"a.rb": [(2, 2)]}, stats=stats))
    assert len(plan.annotations) == 1
    assert plan.summary.coverage_percentage == 75.0
    assert plan.stats is stats


def test_plan_for_nothing_uncovered() -> None:
    plan = plan_annotations(AnalysisResult())
    assert plan.annotations == ()
    assert "✅ **100.0%**" in plan.summary.body
