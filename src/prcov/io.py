import sys
from pathlib import Path

import click.utils as click_utils

from prcov.model.types import OutputFormat


def write_output(text: str, destination: Path | None) -> None:
    """Write output to stdout or a file (PATH or '-' for stdout)."""
    if destination is None or destination == Path("-"):
        print(text)
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(text + "\n", encoding="utf-8")


def compute_io_policy(
    *,
    fmt: OutputFormat,
    output: Path | None,
) -> tuple[str, bool, bool]:
    """Return (render_fmt, is_tty_like, color_allowed)."""
    allow_tty_output = output in {None, Path("-")}
    stdout = sys.stdout

    stdout_is_tty = allow_tty_output and bool(getattr(stdout, "isatty", lambda: False)())
    ansi_allowed = not click_utils.should_strip_ansi(stdout)

    if fmt == OutputFormat.AUTO:
        fmt_resolved = OutputFormat.HUMAN if stdout_is_tty else OutputFormat.JSON
    else:
        fmt_resolved = fmt

    render_fmt = str(fmt_resolved)

    # Only the human format reacts to a terminal; markdown and JSON are always plain.
    is_tty_like = bool(stdout_is_tty and fmt_resolved == OutputFormat.HUMAN)
    color_allowed = bool(is_tty_like and ansi_allowed)

    return render_fmt, is_tty_like, color_allowed


__all__ = ["compute_io_policy", "write_output"]
