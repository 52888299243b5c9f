"""Obtain unified-diff text from a file, stdin, or ``git diff``."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from prcov import logger as _package_logger
from prcov.errors import DiffSourceError

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

STDIN = Path("-")


def git_diff_command(base_ref: str) -> list[str]:
    """Zero-context diff of added/modified files between *base_ref* and ``HEAD``."""
    return ["git", "diff", "--unified=0", f"{base_ref}...HEAD", "--diff-filter=AM", "--no-color"]


def read_diff_file(path: Path) -> str:
    """Return diff text from *path*, or from stdin when *path* is ``-``."""
    if path == STDIN:
        return sys.stdin.read()
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        msg = f"cannot read diff file {path}: {exc}"
        raise DiffSourceError(msg) from exc


def git_diff(
    base_ref: str,
    *,
    cwd: Path | None = None,
    run: Callable[..., subprocess.CompletedProcess[str]] = subprocess.run,
    logger: logging.Logger | None = None,
) -> str:
    """Run ``git diff`` against *base_ref* and return its output."""
    log = logger or _package_logger.getChild("diff")
    cmd = git_diff_command(base_ref)
    log.debug("running %s", " ".join(cmd))
    try:
        proc = run(cmd, cwd=cwd, capture_output=True, text=True, check=False)
    except OSError as exc:
        msg = f"cannot run git: {exc}"
        raise DiffSourceError(msg) from exc
    if proc.returncode != 0:
        msg = f"git diff against {base_ref!r} failed: {proc.stderr.strip() or proc.returncode}"
        raise DiffSourceError(msg)
    return proc.stdout


def obtain_diff(
    *,
    diff_file: Path | None,
    base_ref: str | None,
    cwd: Path | None = None,
    logger: logging.Logger | None = None,
) -> str | None:
    """Return diff text from *diff_file* if given, else from ``git diff`` if *base_ref* is given."""
    if diff_file is not None:
        return read_diff_file(diff_file)
    if base_ref:
        return git_diff(base_ref, cwd=cwd, logger=logger)
    return None


__all__ = ["STDIN", "git_diff", "git_diff_command", "obtain_diff", "read_diff_file"]
