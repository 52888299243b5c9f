from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

import pytest
from typer.testing import CliRunner

LinesSpec = Mapping[int, int] | Iterable[int]
HunkSpec = Iterable[tuple[int, int]]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI runner for invoking the command-line interface."""
    return CliRunner()


@pytest.fixture
def coverage_json_file(tmp_path: Path) -> Callable[..., Path]:
    """Write a SimpleCov-style ``coverage.json`` (``{"coverage": {file: {"lines": [...]}}}``)."""

    def write(
        mapping: Mapping[str, list[int | None]],
        *,
        filename: str = "coverage.json",
    ) -> Path:
        payload = {
            "meta": {"simplecov_version": "0.22.0"},
            "coverage": {name: {"lines": lines} for name, lines in mapping.items()},
        }
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return write


@pytest.fixture
def coverage_xml_content() -> Callable[..., str]:
    def build(mapping: Mapping[str, LinesSpec]) -> str:
        classes: list[str] = []
        for file, lines in mapping.items():
            items = lines.items() if isinstance(lines, Mapping) else ((ln, 0) for ln in lines)
            lines_xml = "".join(f'<line number="{ln}" hits="{hits}"/>' for ln, hits in items)
            classes.append(f'<class filename="{file}"><lines>{lines_xml}</lines></class>')
        classes_xml = "".join(classes)
        return f"<coverage><packages><package><classes>{classes_xml}</classes></package></packages></coverage>"

    return build


@pytest.fixture
def coverage_xml_file(
    tmp_path: Path,
    coverage_xml_content: Callable[..., str],
) -> Callable[..., Path]:
    def write(mapping: Mapping[str, LinesSpec], *, filename: str = "coverage.xml") -> Path:
        xml_file = tmp_path / filename
        xml_file.write_text(coverage_xml_content(mapping), encoding="utf-8")
        return xml_file

    return write


def build_diff(files: Mapping[str, HunkSpec], *, deleted: Iterable[str] = ()) -> str:
    """Build a zero-context unified diff adding ``count`` lines at ``start`` per hunk."""
    chunks: list[str] = []
    for name, hunks in files.items():
        chunks += [f"diff --git a/{name} b/{name}", f"--- a/{name}", f"+++ b/{name}"]
        for start, count in hunks:
            chunks.append(f"@@ -{max(start - 1, 0)},0 +{start},{count} @@")
            chunks += [f"+added line {start + i}" for i in range(count)]
    for name in deleted:
        chunks += [
            f"diff --git a/{name} b/{name}",
            "deleted file mode 100644",
            f"--- a/{name}",
            "+++ /dev/null",
            "@@ -1,2 +0,0 @@",
            "-gone",
            "-gone too",
        ]
    return "\n".join(chunks) + "\n"


@pytest.fixture
def diff_file(tmp_path: Path) -> Callable[..., Path]:
    def write(files: Mapping[str, HunkSpec], *, deleted: Iterable[str] = (), filename: str = "changes.diff") -> Path:
        path = tmp_path / filename
        path.write_text(build_diff(files, deleted=deleted), encoding="utf-8")
        return path

    return write


@pytest.fixture
def unified_diff() -> Callable[..., str]:
    return build_diff
