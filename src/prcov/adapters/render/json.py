from __future__ import annotations

import json
from dataclasses import asdict
from functools import cache
from importlib import resources
from typing import TYPE_CHECKING

from jsonschema import validate

from prcov import __version__

if TYPE_CHECKING:
    from prcov.model.report import ReviewReport

_SCHEMA_FILES: dict[str, str] = {
    "v1": "schema.json",
}


@cache
def get_schema(version: str = "v1") -> dict[str, object]:
    """Load and cache the JSON schema for structured output."""
    try:
        filename = _SCHEMA_FILES[version]
    except KeyError as exc:
        choices = ", ".join(sorted(_SCHEMA_FILES))
        msg = f"Unsupported schema version: {version!r}. Available versions: {choices}"
        raise ValueError(msg) from exc

    text = resources.files("prcov.data").joinpath(filename).read_text(encoding="utf-8")
    return json.loads(text)


def _prune_none(obj: object) -> object:
    """Recursively drop dict keys with None values and turn tuples into lists."""
    if isinstance(obj, dict):
        return {k: _prune_none(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, (list, tuple)):
        return [_prune_none(v) for v in obj]
    return obj


def _changed_file_ranges(report: ReviewReport) -> dict[str, object]:
    """Actual, display and relevant ranges for every changed file that has coverage data."""
    return {
        file: report.coverage_ranges[file].to_dict()
        for file in sorted(report.meta.modified_files)
        if file in report.coverage_ranges
    }


def build_payload(report: ReviewReport) -> dict[str, object]:
    return {
        "schema": str(get_schema()["$id"]),
        "schema_version": 1,
        "tool": {"name": "prcov", "version": __version__},
        "meta": _prune_none(asdict(report.meta)),
        "stats": report.plan.stats.to_dict(),
        "intersections": {
            file: [list(r) for r in ranges] for file, ranges in sorted(report.intersections.items())
        },
        "annotations": [a.to_dict() for a in report.plan.annotations],
        "files": _changed_file_ranges(report),
        "summary": report.plan.summary.body,
    }


def format_json(report: ReviewReport) -> str:
    """Render a report as JSON validated against the bundled schema."""
    payload = build_payload(report)
    validate(payload, get_schema())
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)


__all__ = ["build_payload", "format_json", "get_schema"]
