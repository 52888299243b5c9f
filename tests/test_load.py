import json
import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from prcov.adapters.coverage import (
    load_coverage_report,
    load_coverage_report_or_empty,
    normalize_file_key,
    parse_coverage_json,
)
from prcov.errors import CoverageReportNotFoundError, InvalidCoverageReportError


@pytest.mark.parametrize(
    ("name", "cwd", "expected"),
    [
        ("/repo/app/a.rb", Path("/repo"), "app/a.rb"),
        ("/repo/app/a.rb", Path("/repo/"), "app/a.rb"),
        ("/elsewhere/a.rb", Path("/repo"), "elsewhere/a.rb"),
        ("lib/b.rb", None, "lib/b.rb"),
    ],
)
def test_normalize_file_key(name: str, cwd: Path | None, expected: str) -> None:
    assert normalize_file_key(name, cwd=cwd) == expected


def test_simplecov_json_shape() -> None:
    data = {
        "meta": {"simplecov_version": "0.22.0"},
        "coverage": {"/repo/app/a.rb": {"lines": [None, 1, 0, 2], "branches": {}}},
    }
    report = parse_coverage_json(data, cwd=Path("/repo"))
    assert report.files == {"app/a.rb": (None, 1, 0, 2)}


def test_legacy_bare_arrays_with_ignored_lines() -> None:
    report = parse_coverage_json({"a.rb": [0, "ignored", 1]})
    assert report.files == {"a.rb": (0, None, 1)}


def test_sparse_line_map() -> None:
    report = parse_coverage_json({"a.rb": {"lines": {"3": 0, "1": 2}}})
    assert report.files == {"a.rb": (2, None, 0)}


def test_integral_float_hit_counts() -> None:
    assert parse_coverage_json({"a.rb": {"lines": [None, 0.0, 1]}}).files == {"a.rb": (None, 0, 1)}
    assert parse_coverage_json({"a.rb": {"lines": {"2": 0.0}}}).files == {"a.rb": (None, 0)}


def test_simplecov_resultset_shape() -> None:
    data = {"RSpec": {"coverage": {"/repo/a.rb": {"lines": [0, None]}}, "timestamp": 1}}
    report = parse_coverage_json(data, cwd=Path("/repo"))
    assert report.files == {"a.rb": (0, None)}


def test_resultset_suites_are_merged() -> None:
    data = {
        "RSpec": {"coverage": {"a.rb": {"lines": [0, 1, None]}}, "timestamp": 1},
        "Minitest": {"coverage": {"a.rb": {"lines": [2, 0, None]}, "b.rb": {"lines": [0]}}, "timestamp": 2},
    }
    report = parse_coverage_json(data)
    assert report.files == {"a.rb": (2, 1, None), "b.rb": (0,)}


@pytest.mark.parametrize(
    "data",
    [
        [1, 2, 3],
        {"a.rb": {"lines": [-1]}},
        {"a.rb": {"covered": [1]}},
        {"coverage": {"a.rb": "nope"}},
    ],
)
def test_unsupported_shapes_are_rejected(data: object) -> None:
    with pytest.raises(InvalidCoverageReportError, match="unsupported coverage JSON shape"):
        parse_coverage_json(data)


def test_load_json_file(coverage_json_file: Callable[..., Path], tmp_path: Path) -> None:
    path = coverage_json_file({f"{tmp_path}/lib/x.rb": [1, 0, None]})
    report = load_coverage_report(path, cwd=tmp_path)
    assert report.files == {"lib/x.rb": (1, 0, None)}
    assert report.source == path
    assert len(report) == 1


def test_load_cobertura_xml(coverage_xml_file: Callable[..., Path]) -> None:
    path = coverage_xml_file({"pkg/mod.py": {1: 1, 2: 0, 5: 3}})
    report = load_coverage_report(path)
    assert report.files == {"pkg/mod.py": (1, 0, None, None, 3)}


def test_cobertura_merges_classes_of_one_file(tmp_path: Path) -> None:
    path = tmp_path / "coverage.xml"
    path.write_text(
        "<coverage><packages><package><classes>"
        '<class filename="a.py"><lines><line number="1" hits="0"/><line number="2" hits="0"/></lines></class>'
        '<class filename="a.py"><lines><line number="1" hits="4"/><line number="x" hits="1"/></lines></class>'
        "</classes></package></packages></coverage>",
        encoding="utf-8",
    )
    assert load_coverage_report(path).files == {"a.py": (4, 0)}


def test_xml_with_wrong_root_is_invalid(tmp_path: Path) -> None:
    path = tmp_path / "report.xml"
    path.write_text("<report/>", encoding="utf-8")
    with pytest.raises(InvalidCoverageReportError, match="<coverage>"):
        load_coverage_report(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(CoverageReportNotFoundError):
        load_coverage_report(tmp_path / "nope.json")
    with pytest.raises(CoverageReportNotFoundError):
        load_coverage_report_or_empty(tmp_path / "nope.json")


@pytest.mark.parametrize(
    ("filename", "content"),
    [
        ("coverage.json", "{not json"),
        ("coverage.json", json.dumps({"a.rb": {"lines": "bad"}})),
        ("coverage.xml", "<coverage><unclosed>"),
    ],
)
def test_malformed_content(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
    filename: str,
    content: str,
) -> None:
    path = tmp_path / filename
    path.write_text(content, encoding="utf-8")

    with pytest.raises(InvalidCoverageReportError):
        load_coverage_report(path)

    with caplog.at_level(logging.WARNING, logger="prcov"):
        report = load_coverage_report_or_empty(path)
    assert report.files == {}
    assert report.source == path
    assert "continuing with an empty coverage report" in caplog.text
