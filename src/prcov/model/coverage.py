"""Coverage input forms and the per-file range sets derived from them.

Coverage tools disagree on how per-line data is shaped: SimpleCov emits one array entry
per source line, Cobertura and sparse JSON maps list only the instrumented lines. Both
are resolved once, at the loading boundary, into a :data:`CoverageVector` so that the
range extraction never has to care where the data came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import zip_longest
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from prcov.model.types import CoverageVector, LineRange


def _hit_count(value: object) -> int | None:
    # bool is an int subclass; SimpleCov never emits it, so treat it as "no data".
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        return None
    return value if value >= 0 else None


@dataclass(frozen=True, slots=True)
class ArrayForm:
    """One entry per source line (SimpleCov ``lines`` array)."""

    values: tuple[object, ...]

    def to_vector(self) -> CoverageVector:
        return tuple(_hit_count(v) for v in self.values)


@dataclass(frozen=True, slots=True)
class SparseMapForm:
    """Only instrumented lines, keyed by 1-based line number (Cobertura, sparse JSON)."""

    hits: Mapping[int, int]

    def to_vector(self) -> CoverageVector:
        numbered = {ln: _hit_count(h) for ln, h in self.hits.items() if ln >= 1}
        if not numbered:
            return ()
        vector: list[int | None] = [None] * max(numbered)
        for ln, hits in numbered.items():
            vector[ln - 1] = hits
        return tuple(vector)


CoverageForm: TypeAlias = ArrayForm | SparseMapForm


def _merge_hits(first: int | None, second: int | None) -> int | None:
    total = (first or 0) + (second or 0)
    if total == 0 and (first is None or second is None):
        return None
    return total


def merge_vectors(first: CoverageVector, second: CoverageVector) -> CoverageVector:
    """Sum two runs of the same file line by line.

    A line stays ``None`` unless one of the runs executed it or both instrumented it, so
    a zero only survives where every run agreed the line was executable.
    """
    return tuple(_merge_hits(a, b) for a, b in zip_longest(first, second))


@dataclass(frozen=True, slots=True)
class CoverageReport:
    """Per-file coverage vectors loaded from a single report."""

    files: Mapping[str, CoverageVector] = field(default_factory=dict)
    source: Path | None = None

    @classmethod
    def from_forms(cls, forms: Mapping[str, CoverageForm], *, source: Path | None = None) -> CoverageReport:
        return cls(files={name: form.to_vector() for name, form in forms.items()}, source=source)

    @classmethod
    def combine(cls, reports: Iterable[CoverageReport], *, source: Path | None = None) -> CoverageReport:
        """Merge several reports; files present in more than one have their vectors summed."""
        files: dict[str, CoverageVector] = {}
        for report in reports:
            for name, vector in report.files.items():
                files[name] = merge_vectors(files[name], vector) if name in files else vector
        return cls(files=files, source=source)

    def only(self, names: Iterable[str]) -> CoverageReport:
        """Return a copy restricted to *names*."""
        wanted = set(names)
        return CoverageReport(
            files={name: vector for name, vector in self.files.items() if name in wanted},
            source=self.source,
        )

    def __len__(self) -> int:
        return len(self.files)


@dataclass(frozen=True, slots=True)
class MethodBoundary:
    """Inclusive line span of one function or method definition."""

    start_line: int
    end_line: int

    def __post_init__(self) -> None:
        """Validate that the boundary is a sane inclusive span."""
        if self.start_line < 1:
            msg = "MethodBoundary.start_line must be >= 1"
            raise ValueError(msg)
        if self.end_line < self.start_line:
            msg = "MethodBoundary.end_line must be >= start_line"
            raise ValueError(msg)

    def __contains__(self, line: object) -> bool:
        return isinstance(line, int) and self.start_line <= line <= self.end_line


@dataclass(frozen=True, slots=True)
class FileCoverageRanges:
    """Uncovered, display and relevant line ranges for one file.

    Fields
    ------
    actual:
        Lines with a hit count of exactly zero.
    display:
        ``actual`` plus non-executable lines bridging two uncovered lines, possibly widened
        to whole never-executed methods. Readability only; never used for percentages.
    relevant:
        Every line that carries coverage data, executed or not.
    """

    actual: tuple[LineRange, ...] = ()
    display: tuple[LineRange, ...] = ()
    relevant: tuple[LineRange, ...] = ()

    def to_dict(self) -> dict[str, list[list[int]]]:
        return {
            "actual_ranges": [list(r) for r in self.actual],
            "display_ranges": [list(r) for r in self.display],
            "relevant_ranges": [list(r) for r in self.relevant],
        }


__all__ = [
    "ArrayForm",
    "CoverageForm",
    "CoverageReport",
    "FileCoverageRanges",
    "MethodBoundary",
    "SparseMapForm",
    "merge_vectors",
]
