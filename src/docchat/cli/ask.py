"""docchat ask — answer a question from a user's indexed documents.

Retrieves the top-K chunks from the user's namespace (optionally limited to
--document ids), asks the completion model, and prints the answer with its
deduplicated (document, page) sources.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from docchat.bootstrap import build_services
from docchat.cli.errors import err_no_index, err_pipeline_failed, err_timeout
from docchat.cli.options import load_cli_config, require_api_keys
from docchat.errors import PipelineError, PipelineTimeoutError
from docchat.models import GeneratedAnswer
from docchat.rag.pipeline import answer_with_timeout

console = Console()


def ask_cmd(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Question to answer.")],
    user: Annotated[
        str,
        typer.Option("--user", "-u", help="Owner id whose documents are searched."),
    ],
    document: Annotated[
        list[str] | None,
        typer.Option(
            "--document", "-d", help="Limit search to this document id (repeatable)."
        ),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database."),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", min=0.1, help="Give up after this many seconds."),
    ] = None,
) -> None:
    """Answer a question using the user's documents as context."""
    cfg = load_cli_config(ctx, console, db)

    if not Path(cfg.index.path).exists():
        console.print(err_no_index(cfg.index.path))
        raise typer.Exit(1)

    require_api_keys(console, cfg.embedding.model, cfg.generation.model)

    scope = document or []
    services = build_services(cfg)
    abandoned = False
    try:
        with console.status("Thinking…"):
            if timeout:
                answer = answer_with_timeout(
                    services.pipeline, query, scope, user, timeout=timeout
                )
            else:
                answer = services.pipeline.answer(query, scope, user)
    except PipelineTimeoutError:
        # The abandoned call may still be using the connection; exit releases it.
        abandoned = True
        console.print(err_timeout(timeout or 0))
        raise typer.Exit(1)
    except PipelineError as exc:
        console.print(err_pipeline_failed(str(exc)))
        raise typer.Exit(1)
    finally:
        if not abandoned:
            services.close()

    _show_answer(answer)


def _show_answer(answer: GeneratedAnswer) -> None:
    console.print(Panel(answer.text, title="[bold]Answer[/]", expand=False))
    if not answer.sources:
        console.print("[dim]No sources were retrieved.[/]")
        return
    table = Table(title="Sources", show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Document")
    table.add_column("Page", justify="right")
    for i, src in enumerate(answer.sources, 1):
        table.add_row(str(i), src.document_id, str(src.page_number))
    console.print(table)
