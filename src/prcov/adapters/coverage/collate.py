"""Merge sharded SimpleCov resultsets (``coverage/resultset-*.json``) into one report."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

from jsonschema import validate

from prcov import logger as _package_logger
from prcov.adapters.coverage.load import get_input_schema, load_coverage_report
from prcov.errors import CoverageReportNotFoundError
from prcov.model.coverage import CoverageReport

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable

DEFAULT_COVERAGE_DIR = Path("coverage")
RESULTSET_PATTERN = "resultset-*.json"
COLLATED_FILENAME = "coverage.json"


def find_resultsets(coverage_dir: Path) -> list[Path]:
    """Return the resultset shards under *coverage_dir*, sorted by name."""
    shards = sorted(coverage_dir.glob(RESULTSET_PATTERN))
    if not shards:
        msg = f"No coverage JSON files found to collate in {coverage_dir}"
        raise CoverageReportNotFoundError(msg)
    return shards


def collate_reports(
    coverage_dir: Path,
    *,
    cwd: Path | None = None,
    only: Iterable[str] | None = None,
    logger: logging.Logger | None = None,
) -> CoverageReport:
    """Load every shard in *coverage_dir* and sum their line hits per file.

    With *only*, the result keeps just those files. An empty *only* keeps everything,
    since there is nothing to narrow the report down to.
    """
    log = logger or _package_logger.getChild("collate")
    shards = find_resultsets(coverage_dir)
    log.debug("collating %s", ", ".join(str(s) for s in shards))

    merged = CoverageReport.combine(
        (load_coverage_report(shard, cwd=cwd, logger=log) for shard in shards),
        source=coverage_dir,
    )
    wanted = sorted(set(only or ()))
    if wanted:
        merged = merged.only(wanted)
        log.info("kept %d of the %d modified files", len(merged), len(wanted))
    log.info("collated %d files from %d resultsets", len(merged), len(shards))
    return merged


def coverage_payload(report: CoverageReport) -> dict[str, object]:
    """SimpleCov ``coverage.json`` shape, readable back by :func:`load_coverage_report`."""
    payload: dict[str, object] = {
        "meta": {"collated_by": "prcov"},
        "coverage": {name: {"lines": list(vector)} for name, vector in sorted(report.files.items())},
    }
    validate(payload, get_input_schema())
    return payload


def format_coverage_json(report: CoverageReport) -> str:
    return json.dumps(coverage_payload(report), indent=2, sort_keys=True)


__all__ = [
    "COLLATED_FILENAME",
    "DEFAULT_COVERAGE_DIR",
    "RESULTSET_PATTERN",
    "collate_reports",
    "coverage_payload",
    "find_resultsets",
    "format_coverage_json",
]
