from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from prcov.adapters.render.table import render_table
from prcov.engine.plan import format_ranges
from prcov.model.types import FULL_COVERAGE

if TYPE_CHECKING:
    from prcov.adapters.render.render import RenderOptions
    from prcov.model.report import ReviewReport

_NO_UNCOVERED = "No uncovered changed lines."


def _heading(text: str, options: RenderOptions) -> str:
    return f"\x1b[1m{text}\x1b[0m" if (options.color and options.is_tty) else text


def _percent(value: float, options: RenderOptions) -> str:
    text = f"{value}%"
    if not options.color:
        return text
    colour = "32" if value >= FULL_COVERAGE else "31"
    return f"\x1b[{colour}m{text}\x1b[0m"


def render_human(report: ReviewReport, options: RenderOptions) -> str:
    stats = report.plan.stats
    lines = [
        _heading("Diff coverage", options),
        (
            f"{_percent(stats.coverage_percentage, options)} of changed lines covered "
            f"({stats.covered_modified_lines}/{stats.total_modified_lines}, "
            f"{stats.uncovered_modified_lines} uncovered)"
        ),
        "",
    ]

    if not report.intersections:
        lines.append(_NO_UNCOVERED)
        return "\n".join(lines)

    table = Table(show_header=True, header_style="bold")
    table.add_column("File", style="cyan", overflow="fold")
    table.add_column("Uncovered lines", justify="right")
    table.add_column("# Lines", justify="right")
    for file in sorted(report.intersections):
        ranges = report.intersections[file]
        table.add_row(file, format_ranges(ranges), str(sum(e - s + 1 for s, e in ranges)))
    lines.append(render_table(table, color=options.color))
    return "\n".join(lines)


__all__ = ["render_human"]
