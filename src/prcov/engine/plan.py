"""Build review-comment bodies for the uncovered changed lines."""

from __future__ import annotations

from typing import TYPE_CHECKING

from prcov.model.annotations import AnnotationPlan, AnnotationRequest, SummaryComment
from prcov.model.types import FULL_COVERAGE

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from prcov.model.analysis import AnalysisResult
    from prcov.model.types import LineRange

INLINE_COMMENT_MARKER = "<!-- coverage-inline-marker -->"
GLOBAL_COMMENT_MARKER = "<!-- coverage-comment-marker -->"

SUMMARY_TITLE = "🧪 **Test Coverage Summary**"
PASS_GLYPH = "✅"
FAIL_GLYPH = "❌"


def ensure_marker(body: str, marker: str) -> str:
    """Return *body* starting with exactly one occurrence of *marker*."""
    stripped = body.replace(marker, "").lstrip("\n")
    return f"{marker}\n{stripped}"


def coverage_index_link(report_url: str) -> str:
    if report_url.endswith(".html"):
        return report_url
    return f"{report_url.rstrip('/')}/index.html"


def coverage_link_for(report_url: str, file: str, line: int) -> str:
    return f"{coverage_index_link(report_url)}#{file}:{line}"


def format_ranges(ranges: Sequence[LineRange]) -> str:
    """Render ranges as ``"3, 10-12"``: single lines bare, longer spans as ``start-end``."""
    return ", ".join(str(start) if start == end else f"{start}-{end}" for start, end in ranges)


def inline_message(start_line: int, end_line: int) -> str:
    if start_line == end_line:
        return f"{FAIL_GLYPH} Line {start_line} is not covered by tests."
    return f"{FAIL_GLYPH} Lines {start_line}–{end_line} are not covered by tests."


def _inline_body(
    *,
    file: str,
    start_line: int,
    message: str,
    report_url: str | None,
    commit_sha: str | None,
) -> str:
    parts = [message]
    if report_url:
        parts.append(f"📊 [View coverage]({coverage_link_for(report_url, file, start_line)})")
    footer = f"_File: {file}, line {start_line}_"
    if commit_sha:
        footer += f"\n_Commit: {commit_sha}_"
    parts.append(footer)
    return ensure_marker("\n\n".join(parts), INLINE_COMMENT_MARKER)


def build_inline_annotations(
    intersections: Mapping[str, Sequence[LineRange]],
    *,
    report_url: str | None = None,
    commit_sha: str | None = None,
) -> list[AnnotationRequest]:
    """One annotation per contiguous uncovered range, in file then line order."""
    annotations: list[AnnotationRequest] = []
    for file in sorted(intersections):
        for start_line, end_line in intersections[file]:
            message = inline_message(start_line, end_line)
            annotations.append(
                AnnotationRequest(
                    file=file,
                    start_line=start_line,
                    end_line=end_line,
                    message=message,
                    body=_inline_body(
                        file=file,
                        start_line=start_line,
                        message=message,
                        report_url=report_url,
                        commit_sha=commit_sha,
                    ),
                )
            )
    return annotations


def _uncovered_table(intersections: Mapping[str, Sequence[LineRange]]) -> str:
    rows = [f"| `{file}` | {format_ranges(intersections[file])} |" for file in sorted(intersections)]
    return "\n".join(["| File | Uncovered lines |", "|------|-----------------|", *rows])


def build_summary(
    coverage_percentage: float,
    intersections: Mapping[str, Sequence[LineRange]] | None = None,
    *,
    report_url: str | None = None,
    commit_sha: str | None = None,
) -> SummaryComment:
    """Build the single summary comment body."""
    glyph = PASS_GLYPH if coverage_percentage >= FULL_COVERAGE else FAIL_GLYPH
    parts = [
        SUMMARY_TITLE,
        f"{glyph} **{coverage_percentage}%** of changed lines are covered.",
    ]
    if intersections:
        parts.append(_uncovered_table(intersections))
    if report_url:
        parts.append(f"📊 [View full report]({coverage_index_link(report_url)})")
    if commit_sha:
        parts.append(f"_Commit: {commit_sha}_")

    body = ensure_marker("\n\n".join(parts) + "\n", GLOBAL_COMMENT_MARKER)
    return SummaryComment(coverage_percentage=coverage_percentage, body=body)


def plan_annotations(
    result: AnalysisResult,
    *,
    report_url: str | None = None,
    commit_sha: str | None = None,
) -> AnnotationPlan:
    """Turn an analysis result into inline annotations plus one summary comment."""
    return AnnotationPlan(
        annotations=tuple(
            build_inline_annotations(result.intersections, report_url=report_url, commit_sha=commit_sha)
        ),
        summary=build_summary(
            result.stats.coverage_percentage,
            result.intersections,
            report_url=report_url,
            commit_sha=commit_sha,
        ),
        stats=result.stats,
    )


__all__ = [
    "GLOBAL_COMMENT_MARKER",
    "INLINE_COMMENT_MARKER",
    "build_inline_annotations",
    "build_summary",
    "coverage_index_link",
    "coverage_link_for",
    "ensure_marker",
    "format_ranges",
    "inline_message",
    "plan_annotations",
]
