from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prcov.model.report import ReviewReport


def render_markdown(report: ReviewReport) -> str:
    """Summary comment body followed by every inline comment, as they would be posted."""
    parts = [report.plan.summary.body.rstrip()]
    for annotation in report.plan.annotations:
        span = (
            str(annotation.start_line)
            if annotation.single_line
            else f"{annotation.start_line}-{annotation.end_line}"
        )
        parts.append(f"---\n\n### `{annotation.file}` line {span}\n\n{annotation.body}")
    return "\n\n".join(parts)


__all__ = ["render_markdown"]
