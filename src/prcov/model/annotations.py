from __future__ import annotations

from dataclasses import dataclass, field

from prcov.model.analysis import CoverageStats


@dataclass(frozen=True, slots=True)
class AnnotationRequest:
    """One inline review comment covering a contiguous uncovered range."""

    file: str
    start_line: int
    end_line: int
    message: str
    body: str

    @property
    def single_line(self) -> bool:
        return self.start_line == self.end_line

    def to_dict(self) -> dict[str, object]:
        return {
            "file": self.file,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "message": self.message,
            "body": self.body,
        }


@dataclass(frozen=True, slots=True)
class SummaryComment:
    """The single marker-tagged summary comment for a pull request."""

    coverage_percentage: float
    body: str


@dataclass(frozen=True, slots=True)
class AnnotationPlan:
    """Everything the publisher needs: inline requests, the summary and the stats."""

    annotations: tuple[AnnotationRequest, ...]
    summary: SummaryComment
    stats: CoverageStats = field(default_factory=CoverageStats)


__all__ = ["AnnotationPlan", "AnnotationRequest", "SummaryComment"]
