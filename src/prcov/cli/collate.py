from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from prcov.adapters.coverage.collate import COLLATED_FILENAME, DEFAULT_COVERAGE_DIR, format_coverage_json
from prcov.cli.exit_codes import EXIT_DATAERR, EXIT_GENERIC, EXIT_NOINPUT, EXIT_OK
from prcov.io import write_output
from prcov.model.coverage import CoverageReport
from prcov.pipeline import DataError, NoInputError, UnexpectedError, collate_coverage

_BOOL_FALSE = False


def _collate(
    coverage_dir: Path,
    *,
    modified_only: bool,
    diff_file: Path | None,
    base_ref: str | None,
) -> CoverageReport:
    try:
        return collate_coverage(
            coverage_dir,
            modified_only=modified_only,
            diff_file=diff_file,
            base_ref=base_ref,
        )
    except NoInputError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_NOINPUT) from exc
    except DataError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_DATAERR) from exc
    except UnexpectedError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_GENERIC) from exc


def collate_cmd(
    coverage_dir: Annotated[
        Path,
        typer.Option("--coverage-dir", help="Directory containing resultset-*.json shards."),
    ] = DEFAULT_COVERAGE_DIR,
    modified_only: Annotated[
        bool,
        typer.Option("--modified-only", help="Keep only files touched by the diff."),
    ] = _BOOL_FALSE,
    base_ref: Annotated[
        str | None,
        typer.Option("--base-ref", envvar="BASE_REF", help="Diff against BASE...HEAD using git."),
    ] = None,
    diff_file: Annotated[
        Path | None,
        typer.Option("--diff-file", help="Read a unified diff from PATH ('-' for stdin) instead of git."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            help="Write the merged report to PATH ('-' for stdout). Defaults to DIR/coverage.json.",
        ),
    ] = None,
) -> None:
    """Merge sharded coverage resultsets into a single coverage.json."""
    report = _collate(coverage_dir, modified_only=modified_only, diff_file=diff_file, base_ref=base_ref)
    write_output(format_coverage_json(report), output or coverage_dir / COLLATED_FILENAME)
    raise typer.Exit(code=EXIT_OK)


def register(app: typer.Typer) -> None:
    app.command("collate")(collate_cmd)


__all__ = ["collate_cmd", "register"]
