"""Load coverage reports (SimpleCov-style JSON or Cobertura XML) into a CoverageReport."""

from __future__ import annotations

import json
from functools import cache
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

from defusedxml import ElementTree
from jsonschema import ValidationError, validate

from prcov import logger as _package_logger
from prcov.errors import (
    CoverageReportError,
    CoverageReportNotFoundError,
    InvalidCoverageReportError,
)
from prcov.model.coverage import ArrayForm, CoverageForm, CoverageReport, SparseMapForm

if TYPE_CHECKING:
    import logging
    from collections.abc import Mapping
    from xml.etree.ElementTree import Element as XmlElement  # noqa: S405

XML_SUFFIXES = frozenset({".xml"})


@cache
def get_input_schema() -> dict[str, object]:
    """Load and cache the JSON schema describing accepted coverage JSON shapes."""
    text = resources.files("prcov.data").joinpath("coverage.schema.json").read_text(encoding="utf-8")
    return json.loads(text)


def normalize_file_key(filename: str, *, cwd: Path | None = None) -> str:
    """Return *filename* relative to *cwd* when possible, never with a leading slash."""
    if cwd is not None:
        root = cwd.as_posix().rstrip("/") + "/"
        if filename.startswith(root):
            filename = filename[len(root) :]
    return filename.lstrip("/")


def _form_for(entry: object) -> CoverageForm:
    lines = entry.get("lines") if isinstance(entry, dict) else entry
    if isinstance(lines, dict):
        return SparseMapForm({int(k): cast("int", v) for k, v in lines.items() if v is not None})
    return ArrayForm(tuple(cast("list[object]", lines)))


def _file_maps(mapping: dict[str, Any]) -> list[dict[str, Any]]:
    if isinstance(mapping.get("coverage"), dict):
        return [mapping["coverage"]]
    # SimpleCov resultset: {"<suite>": {"coverage": {...}, "timestamp": ...}, ...}
    if mapping and all(isinstance(run, dict) and "coverage" in run for run in mapping.values()):
        return [run["coverage"] for run in mapping.values()]
    return [mapping]


def parse_coverage_json(
    data: object,
    *,
    cwd: Path | None = None,
    source: Path | None = None,
) -> CoverageReport:
    """Validate decoded JSON and resolve every file entry to a coverage vector.

    Resultsets holding several test suites are merged into one report.

    Raises :class:`InvalidCoverageReportError` when *data* has none of the accepted shapes.
    """
    try:
        validate(data, get_input_schema())
    except ValidationError as exc:
        msg = f"unsupported coverage JSON shape: {exc.message}"
        raise InvalidCoverageReportError(msg) from exc

    runs = (
        CoverageReport.from_forms(
            {normalize_file_key(name, cwd=cwd): _form_for(entry) for name, entry in files.items()},
        )
        for files in _file_maps(cast("dict[str, Any]", data))
    )
    return CoverageReport.combine(runs, source=source)


def _merge_hits(hits: dict[int, int], line_elem: XmlElement) -> None:
    try:
        number = int(line_elem.get("number", ""))
        count = int(line_elem.get("hits", ""))
    except ValueError:
        return
    hits[number] = max(hits.get(number, 0), count)


def parse_cobertura_root(
    root: XmlElement,
    *,
    cwd: Path | None = None,
    source: Path | None = None,
) -> CoverageReport:
    """Collect per-file hit counts from a Cobertura ``<coverage>`` element."""
    if root.tag != "coverage":
        msg = f"expected <coverage> root element, found <{root.tag}>"
        raise InvalidCoverageReportError(msg)

    per_file: dict[str, dict[int, int]] = {}
    for cls in root.iter("class"):
        filename = cls.get("filename")
        if not filename:
            continue
        hits = per_file.setdefault(normalize_file_key(filename, cwd=cwd), {})
        for line_elem in cls.iter("line"):
            _merge_hits(hits, line_elem)

    forms: Mapping[str, CoverageForm] = {name: SparseMapForm(hits) for name, hits in per_file.items()}
    return CoverageReport.from_forms(forms, source=source)


def load_coverage_report(
    path: Path,
    *,
    cwd: Path | None = None,
    logger: logging.Logger | None = None,
) -> CoverageReport:
    """Read *path* and return its coverage vectors.

    ``.xml`` files are parsed as Cobertura, everything else as JSON.
    """
    log = logger or _package_logger.getChild("load")
    try:
        if path.suffix.lower() in XML_SUFFIXES:
            report = parse_cobertura_root(ElementTree.parse(path).getroot(), cwd=cwd, source=path)
        else:
            data = json.loads(path.read_text(encoding="utf-8"))
            report = parse_coverage_json(data, cwd=cwd, source=path)
    except FileNotFoundError as exc:
        msg = f"Coverage report not found: {path}"
        raise CoverageReportNotFoundError(msg) from exc
    except PermissionError as exc:
        msg = f"Permission denied reading coverage report: {path}"
        raise CoverageReportError(msg) from exc
    except (json.JSONDecodeError, UnicodeDecodeError, ElementTree.ParseError) as exc:
        msg = f"Invalid coverage report {path}: {exc}"
        raise InvalidCoverageReportError(msg) from exc
    except OSError as exc:
        msg = f"Unexpected error reading coverage report {path}: {exc}"
        raise CoverageReportError(msg) from exc

    log.info("loaded coverage for %d files from %s", len(report), path)
    return report


def load_coverage_report_or_empty(
    path: Path,
    *,
    cwd: Path | None = None,
    logger: logging.Logger | None = None,
) -> CoverageReport:
    """Like :func:`load_coverage_report`, but unreadable content degrades to an empty report.

    A missing file is still an error: there is nothing to degrade from.
    """
    log = logger or _package_logger.getChild("load")
    try:
        return load_coverage_report(path, cwd=cwd, logger=log)
    except CoverageReportNotFoundError:
        raise
    except CoverageReportError as exc:
        log.warning("%s; continuing with an empty coverage report", exc)
        return CoverageReport(source=path)


__all__ = [
    "get_input_schema",
    "load_coverage_report",
    "load_coverage_report_or_empty",
    "normalize_file_key",
    "parse_cobertura_root",
    "parse_coverage_json",
]
