"""Shared type aliases and enumerations used across prcov."""

from __future__ import annotations

from enum import StrEnum
from typing import TypeAlias

# ---------------------------------------------------------------------------
# Common type aliases
# ---------------------------------------------------------------------------

LineRange: TypeAlias = tuple[int, int]
"""Inclusive ``(start, end)`` pair of 1-based line numbers."""

CoverageVector: TypeAlias = tuple[int | None, ...]
"""Per-line hit counts; index ``i`` is line ``i + 1`` and ``None`` marks a non-executable line."""

FULL_COVERAGE: int = 100


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class OutputFormat(StrEnum):
    """Supported output formats."""

    AUTO = "auto"
    HUMAN = "human"
    MARKDOWN = "markdown"
    JSON = "json"


__all__ = [
    "FULL_COVERAGE",
    "CoverageVector",
    "LineRange",
    "OutputFormat",
]
