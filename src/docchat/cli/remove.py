"""docchat remove — delete a document's vectors from the index.

Removes every vector whose documentId matches, in every namespace. Cached
embeddings of the document's chunk text are not purged; the cache only saves
embedding calls and never feeds retrieval on its own.

Usage:
  docchat remove --document doc_1234
  docchat remove --document doc_1234 --yes
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from docchat.bootstrap import open_index_connection
from docchat.cli.errors import err_document_not_found, err_no_index
from docchat.cli.options import load_cli_config
from docchat.db.index import VectorIndex
from docchat.errors import IndexDeleteError

console = Console()


def remove_cmd(
    ctx: typer.Context,
    document: Annotated[
        str,
        typer.Option("--document", "-d", help="Document id to remove."),
    ],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove a document and all its vectors from the index."""
    cfg = load_cli_config(ctx, console, db)
    db_path = Path(cfg.index.path)

    if not db_path.exists():
        console.print(err_no_index(str(db_path)))
        raise typer.Exit(1)

    conn = open_index_connection(db_path)
    index = VectorIndex(conn)

    try:
        vector_count = index.count(document_id=document)
        if vector_count == 0:
            console.print(err_document_not_found(document))
            raise typer.Exit(0)

        console.print(f"\nRemove document: [bold]{document}[/]")
        console.print(f"  Vectors: {vector_count}")

        if not yes:
            if not typer.confirm("Confirm removal?", default=False):
                console.print("[dim]Cancelled.[/]")
                raise typer.Exit(0)

        try:
            deleted = index.delete_by_document(document)
        except IndexDeleteError as exc:
            console.print(f"[red]Error:[/] {exc}")
            raise typer.Exit(1)

        console.print(f"\n[green]✓[/] Removed: {document}")
        console.print(f"  {deleted} vectors deleted")
    finally:
        conn.close()
