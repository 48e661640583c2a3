"""docchat ingest — chunk, embed, and index one document for a user.

Pipeline:
  file → normalized text → PlainTextChunker → EmbeddingWriter
       → VectorIndex.upsert (namespace = user id)

Only text-like files are accepted (.txt .text .log .md .markdown .rst .csv).
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from docchat.bootstrap import build_services, chunker_from_config
from docchat.cli.errors import (
    err_embedding_failed,
    err_embedding_model_mismatch,
    err_partial_write,
    err_unsupported_input,
)
from docchat.cli.options import load_cli_config, require_api_keys
from docchat.errors import EmbeddingServiceError, IndexWriteError, UnsupportedInputError
from docchat.ingest.loader import load_document

console = Console()

_PHASES = {"embedding": "Embedding chunks…", "writing": "Writing to index…"}


def ingest_cmd(
    ctx: typer.Context,
    file: Annotated[
        Path,
        typer.Option("--file", "-f", help="Text document to ingest."),
    ],
    user: Annotated[
        str,
        typer.Option("--user", "-u", help="Owner id; vectors go into this user's namespace."),
    ],
    document_id: Annotated[
        str | None,
        typer.Option("--document-id", help="Document id to use (default: doc_<uuid>)."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database (created if missing)."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Chunk only; do not embed or write."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Ingest a document into a user's searchable index."""
    cfg = load_cli_config(ctx, console, db)

    console.print(f"\n[bold]→ {file}[/]")
    try:
        text, metadata = load_document(file, document_id=document_id)
    except UnsupportedInputError as exc:
        console.print(err_unsupported_input(str(exc)))
        raise typer.Exit(1)

    chunks = chunker_from_config(cfg).chunk(metadata.document_id, text)
    if not chunks:
        console.print(err_unsupported_input(f"'{file.name}' contains no text."))
        raise typer.Exit(1)

    console.print(f"  [green]✓[/] {len(chunks)} chunks")

    if dry_run:
        console.print("  [dim]Dry run — nothing embedded or written[/]")
        return

    require_api_keys(console, cfg.embedding.model)

    if not yes:
        if not typer.confirm(
            f"  Embed {len(chunks)} chunks with {cfg.embedding.model}?", default=True
        ):
            console.print("  [dim]Skipped.[/]")
            return

    services = build_services(cfg)
    try:
        stored_model = services.index.stored_embedding_model()
        if stored_model and stored_model != cfg.embedding.model:
            console.print(err_embedding_model_mismatch(stored_model, cfg.embedding.model))
            raise typer.Exit(1)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=console,
        ) as prog:
            task = prog.add_task("Embedding chunks…", total=None)

            def _on_phase(phase: str) -> None:
                prog.update(task, description=_PHASES.get(phase, phase))

            try:
                written = services.writer.write(
                    chunks, user, metadata, on_progress=_on_phase
                )
            except EmbeddingServiceError as exc:
                console.print(err_embedding_failed(str(exc)))
                raise typer.Exit(1)
            except IndexWriteError as exc:
                console.print(
                    err_partial_write(exc.written, len(chunks), metadata.document_id)
                )
                raise typer.Exit(1)
    finally:
        services.close()

    console.print(
        f"  [green]✓[/] Indexed {written} chunks as document [bold]{metadata.document_id}[/]"
    )
