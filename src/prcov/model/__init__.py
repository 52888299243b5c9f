"""Domain model for prcov (pure types + policy; no IO)."""

from .analysis import AnalysisResult, CoverageStats
from .annotations import AnnotationPlan, AnnotationRequest, SummaryComment
from .coverage import (
    ArrayForm,
    CoverageForm,
    CoverageReport,
    FileCoverageRanges,
    MethodBoundary,
    SparseMapForm,
    merge_vectors,
)
from .metrics import diff_coverage_percentage, pct
from .report import ReportMeta, ReviewReport
from .thresholds import Threshold, ThresholdFailure, ThresholdsResult, evaluate, parse_threshold
from .types import FULL_COVERAGE, CoverageVector, LineRange, OutputFormat

__all__ = [
    "FULL_COVERAGE",
    "AnalysisResult",
    "AnnotationPlan",
    "AnnotationRequest",
    "ArrayForm",
    "CoverageForm",
    "CoverageReport",
    "CoverageStats",
    "CoverageVector",
    "FileCoverageRanges",
    "LineRange",
    "MethodBoundary",
    "OutputFormat",
    "ReportMeta",
    "ReviewReport",
    "SparseMapForm",
    "SummaryComment",
    "Threshold",
    "ThresholdFailure",
    "ThresholdsResult",
    "diff_coverage_percentage",
    "evaluate",
    "merge_vectors",
    "parse_threshold",
    "pct",
]
