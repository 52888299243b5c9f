from __future__ import annotations

from typing import Annotated

import typer
from typer.main import get_command

from prcov import __version__
from prcov.cli import collate, report
from prcov.cli._shared import configure_runtime


def create_app() -> typer.Typer:
    app = typer.Typer(
        help="Annotate pull requests with the changed lines your tests do not cover.",
        no_args_is_help=True,
    )

    @app.callback(invoke_without_command=True)
    def _root(
        ctx: typer.Context,
        *,
        version: Annotated[
            bool,
            typer.Option("--version", help="Show version and exit"),
        ] = False,
        verbose: Annotated[
            bool,
            typer.Option("-v", "--verbose", help="Emit diagnostic logging"),
        ] = False,
        quiet: Annotated[
            bool,
            typer.Option("-q", "--quiet", help="Suppress INFO logs, emit only errors"),
        ] = False,
    ) -> None:
        if version:
            typer.echo(f"prcov {__version__}")
            raise typer.Exit
        configure_runtime(quiet=quiet, verbose=verbose)
        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help())
            raise typer.Exit

    report.register(app)
    collate.register(app)

    return app


# Click-compatible object for tooling that imports it
cli = get_command(create_app())


def main() -> None:
    cli()


__all__ = ["cli", "create_app", "main"]
