from pathlib import Path

import pytest

from prcov.adapters.coverage import discover_coverage_report, find_project_root, resolve_coverage_report
from prcov.errors import CoverageReportNotFoundError


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'demo'\n", encoding="utf-8")
    return tmp_path


def test_find_project_root_from_subdirectory(project: Path) -> None:
    sub = project / "src" / "pkg"
    sub.mkdir(parents=True)
    assert find_project_root(sub) == project.resolve()


def test_discovery_order(project: Path) -> None:
    (project / "coverage.xml").write_text("<coverage/>", encoding="utf-8")
    assert discover_coverage_report(cwd=project) == (project / "coverage.xml").resolve()

    (project / "coverage").mkdir()
    (project / "coverage" / "coverage.json").write_text("{}", encoding="utf-8")
    assert discover_coverage_report(cwd=project) == (project / "coverage" / "coverage.json").resolve()


def test_discovery_falls_back_to_project_root(project: Path) -> None:
    (project / "coverage.json").write_text("{}", encoding="utf-8")
    sub = project / "app"
    sub.mkdir()
    assert discover_coverage_report(cwd=sub) == (project / "coverage.json").resolve()


def test_nothing_to_discover(project: Path) -> None:
    with pytest.raises(CoverageReportNotFoundError, match="Tried: coverage/coverage.json"):
        discover_coverage_report(cwd=project)


def test_resolve_explicit_relative_path(project: Path) -> None:
    (project / "out.json").write_text("{}", encoding="utf-8")
    assert resolve_coverage_report(Path("out.json"), cwd=project) == (project / "out.json").resolve()


def test_resolve_missing_explicit_path(project: Path) -> None:
    with pytest.raises(CoverageReportNotFoundError, match="not found"):
        resolve_coverage_report(Path("absent.json"), cwd=project)
