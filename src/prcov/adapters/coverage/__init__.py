from .collate import collate_reports, find_resultsets, format_coverage_json
from .discover import discover_coverage_report, find_project_root, resolve_coverage_report
from .load import (
    load_coverage_report,
    load_coverage_report_or_empty,
    normalize_file_key,
    parse_cobertura_root,
    parse_coverage_json,
)

__all__ = [
    "collate_reports",
    "discover_coverage_report",
    "find_project_root",
    "find_resultsets",
    "format_coverage_json",
    "load_coverage_report",
    "load_coverage_report_or_empty",
    "normalize_file_key",
    "parse_cobertura_root",
    "parse_coverage_json",
    "resolve_coverage_report",
]
