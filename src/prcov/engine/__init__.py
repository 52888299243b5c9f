"""Pure range arithmetic: coverage and diff extraction, intersection, comment planning."""

from .analyze import CoverageAnalyzer, analyze, intersect_ranges
from .chunker import chunks, consolidate_sorted, count_lines, expand_ranges, to_ranges, validate_ranges
from .coverage_ranges import CoverageRangesExtractor, extract_coverage_ranges, group_by_methods
from .diff import extract_modified_files, extract_modified_ranges
from .plan import GLOBAL_COMMENT_MARKER, INLINE_COMMENT_MARKER, plan_annotations

__all__ = [
    "GLOBAL_COMMENT_MARKER",
    "INLINE_COMMENT_MARKER",
    "CoverageAnalyzer",
    "CoverageRangesExtractor",
    "analyze",
    "chunks",
    "consolidate_sorted",
    "count_lines",
    "expand_ranges",
    "extract_coverage_ranges",
    "extract_modified_files",
    "extract_modified_ranges",
    "group_by_methods",
    "intersect_ranges",
    "plan_annotations",
    "to_ranges",
    "validate_ranges",
]
