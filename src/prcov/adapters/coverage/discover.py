from __future__ import annotations

from typing import TYPE_CHECKING

from prcov.errors import CoverageReportNotFoundError

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_CANDIDATES: tuple[str, ...] = (
    "coverage/coverage.json",
    "coverage.json",
    "coverage.xml",
)


def find_project_root(start: Path) -> Path:
    """Heuristic project root finder: walks upward looking for pyproject.toml or .git."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if (p / "pyproject.toml").exists():
            return p
        if (p / ".git").exists():
            return p
    return cur


def discover_coverage_report(*, cwd: Path) -> Path:
    """Find a coverage report by convention in *cwd* and the project root."""
    root = find_project_root(cwd)
    bases = (cwd,) if root == cwd.resolve() else (cwd, root)
    for base in bases:
        for name in DEFAULT_CANDIDATES:
            candidate = (base / name).resolve()
            if candidate.is_file():
                return candidate

    msg = (
        "no coverage report provided and none discovered.\n"
        f"Tried: {', '.join(DEFAULT_CANDIDATES)} in {cwd} and {root}"
    )
    raise CoverageReportNotFoundError(msg)


def resolve_coverage_report(path: Path | None, *, cwd: Path) -> Path:
    """Resolve an explicit report path or discover one if none is given."""
    if path is None:
        return discover_coverage_report(cwd=cwd)
    resolved = path if path.is_absolute() else cwd / path
    if not resolved.is_file():
        msg = f"Coverage report not found: {path}"
        raise CoverageReportNotFoundError(msg)
    return resolved.resolve()


__all__ = ["discover_coverage_report", "find_project_root", "resolve_coverage_report"]
