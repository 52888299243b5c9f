from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from prcov.adapters.render.human import render_human
from prcov.adapters.render.json import format_json
from prcov.adapters.render.markdown import render_markdown
from prcov.model.types import OutputFormat

if TYPE_CHECKING:
    from prcov.model.report import ReviewReport


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Options that affect *presentation* only (not report content)."""

    color: bool = False
    is_tty: bool = False


def render(report: ReviewReport, *, fmt: str, options: RenderOptions | None = None) -> str:
    """Render a report to text.

    Parameters
    ----------
    report:
        Built review report.
    fmt:
        One of: "human", "markdown", "json".
    options:
        Presentation options (color/tty); only the human format uses them.
    """
    options = options or RenderOptions()
    f = (fmt or "").strip().lower()

    if f == OutputFormat.HUMAN:
        return render_human(report, options)
    if f == OutputFormat.MARKDOWN:
        return render_markdown(report)
    if f == OutputFormat.JSON:
        return format_json(report)
    msg = f"Unsupported format: {fmt!r}. Expected one of: human, markdown, json."
    raise ValueError(msg)


__all__ = ["RenderOptions", "render"]
