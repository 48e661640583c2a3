"""Config loading and key checks shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from docchat.cli.errors import err_config, err_no_api_key
from docchat.config import ConfigError, DocChatConfig, load_config
from docchat.log import configure_logging
from docchat.rag.llm_client import provider_of, validate_api_key


def load_cli_config(ctx: typer.Context, console: Console, db: Path | None) -> DocChatConfig:
    """Load config, apply the --db override, and configure logging.

    Exits with code 1 on a config error.
    """
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)

    if db is not None:
        cfg.index.path = str(db)

    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    configure_logging("DEBUG" if verbose else cfg.logging.level)
    return cfg


def require_api_keys(console: Console, *models: str) -> None:
    """Exit with code 1 unless every provider in *models* has its API key set."""
    for model in models:
        try:
            validate_api_key(model)
        except EnvironmentError:
            console.print(err_no_api_key(provider_of(model)))
            raise typer.Exit(1)
