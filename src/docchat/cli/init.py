"""docchat init — create config files and an empty index.

Creates:
  docchat.yaml             — project config with the current defaults
  .docchat.db              — empty index with schema (or the --db path)
  ~/.docchat/config.yaml   — global model config (created once, mode 0o600)
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.console import Console

from docchat.bootstrap import open_index_connection
from docchat.config import DocChatConfig, ensure_global_config

console = Console()

_DEFAULT_PROJECT_DIR = Path(".")


def init_cmd(
    project_dir: Annotated[
        Path,
        typer.Argument(help="Directory to initialize. Defaults to current directory."),
    ] = _DEFAULT_PROJECT_DIR,
) -> None:
    """Create docchat.yaml, an empty index, and the global config."""
    project_dir = project_dir.resolve()
    project_dir.mkdir(parents=True, exist_ok=True)

    defaults = DocChatConfig()
    db_path = project_dir / defaults.index.path

    if db_path.exists():
        console.print(f"[yellow]⚠[/]  {db_path} already exists — existing data is preserved.")

    conn = open_index_connection(db_path)
    conn.close()
    console.print(f"  [green]✓[/] {db_path.name}")

    project_cfg = project_dir / "docchat.yaml"
    if project_cfg.exists():
        console.print("  [dim]docchat.yaml already exists — skipped[/]")
    else:
        project_cfg.write_text(_project_yaml(defaults), encoding="utf-8")
        console.print("  [green]✓[/] docchat.yaml")

    global_path = ensure_global_config()
    console.print(f"  [green]✓[/] {global_path}")

    console.print(
        "\n[bold]Next:[/] docchat ingest --file notes.txt --user alice"
    )


def _project_yaml(cfg: DocChatConfig) -> str:
    data = {
        "generation": {
            "model": cfg.generation.model,
            "temperature": cfg.generation.temperature,
            "max_tokens": cfg.generation.max_tokens,
        },
        "retrieval": {"top_k": cfg.retrieval.top_k},
        "chunking": {
            "max_chunk_size": cfg.chunking.max_chunk_size,
            "overlap": cfg.chunking.overlap,
            "sentence_lookahead": cfg.chunking.sentence_lookahead,
        },
        "index": {"path": cfg.index.path, "batch_size": cfg.index.batch_size},
    }
    return "# docchat project configuration\n" + yaml.safe_dump(data, sort_keys=False)
