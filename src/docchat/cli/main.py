"""docchat CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from docchat.cli.ask import ask_cmd
from docchat.cli.ingest import ingest_cmd
from docchat.cli.init import init_cmd
from docchat.cli.remove import remove_cmd
from docchat.cli.status import status_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("docchat")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"docchat {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="docchat",
    help=(
        "docchat — ask questions about your documents.\n\n"
        "  docchat ingest  Chunk, embed and index a text document for a user.\n"
        "  docchat ask     Answer a question from that user's documents, with sources."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log debug output to stderr."),
    ] = False,
) -> None:
    """docchat — ask questions about your documents."""
    ctx.obj = {"verbose": verbose}


app.command("init")(init_cmd)
app.command("ingest")(ingest_cmd)
app.command("ask")(ask_cmd)
app.command("status")(status_cmd)
app.command("remove")(remove_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed docchat version."""
    typer.echo(f"docchat {_installed_version()}")


if __name__ == "__main__":
    app()
