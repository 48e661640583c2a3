"""docchat status — show what a user's namespace holds."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from docchat.bootstrap import open_index_connection
from docchat.cli.errors import err_no_index
from docchat.cli.options import load_cli_config
from docchat.db.index import VectorIndex

console = Console()


def status_cmd(
    ctx: typer.Context,
    user: Annotated[
        str,
        typer.Option("--user", "-u", help="Owner id to report on."),
    ],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database."),
    ] = None,
) -> None:
    """List a user's indexed documents and vector counts."""
    cfg = load_cli_config(ctx, console, db)
    db_path = Path(cfg.index.path)

    if not db_path.exists():
        console.print(err_no_index(str(db_path)))
        raise typer.Exit(1)

    conn = open_index_connection(db_path)
    try:
        index = VectorIndex(conn)
        documents = index.list_documents(user)
        stored_model = index.stored_embedding_model() or "(none yet)"
        total = index.count()
    finally:
        conn.close()

    size_mb = db_path.stat().st_size / (1024 * 1024)
    console.print(
        Panel(
            f"Index:      {db_path} ({size_mb:.1f} MB)\n"
            f"Embedding:  {stored_model}\n"
            f"Vectors:    [bold]{total:,}[/] total",
            title="[bold]Index[/]",
            expand=False,
        )
    )

    if not documents:
        console.print(f"[yellow]No documents indexed for user '{user}'.[/]")
        return

    table = Table(title=f"Documents for {user}", show_header=True, header_style="bold")
    table.add_column("Document")
    table.add_column("File")
    table.add_column("Chunks", justify="right")
    for doc in documents:
        table.add_row(doc.document_id, doc.filename or "-", str(doc.vector_count))
    console.print(table)
