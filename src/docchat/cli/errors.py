"""docchat rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from docchat.cli.errors import err_no_api_key, err_no_index
    console.print(err_no_api_key("openai"))
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_no_api_key(provider: str) -> str:
    """No API key for *provider*.

    Example:
        No API key for 'openai'. Set:  export OPENAI_API_KEY=sk-...
    """
    env_map = {
        "openai": "OPENAI_API_KEY",
        "anthropic": "ANTHROPIC_API_KEY",
        "cohere": "COHERE_API_KEY",
        "gemini": "GEMINI_API_KEY",
        "mistral": "MISTRAL_API_KEY",
        "azure": "AZURE_API_KEY",
    }
    env_var = env_map.get(provider.lower(), f"{provider.upper()}_API_KEY")
    return (
        f"[red]Error:[/] No API key for '{provider}'.\n"
        f"  Set:  export {env_var}=sk-..."
    )


def err_no_index(db_path: str = ".docchat.db") -> str:
    """No index database at *db_path*."""
    return (
        f"[red]Error:[/] No index found at '{db_path}'.\n"
        "  Run:  docchat ingest --file <path> --user <id>"
    )


def err_config(message: str) -> str:
    """Config file could not be loaded."""
    return f"[red]Error:[/] Invalid configuration.\n  {message}"


def err_unsupported_input(message: str) -> str:
    """Document type not supported or document has no text."""
    return (
        f"[red]Error:[/] {message}\n"
        "  Convert the document to plain text (.txt or .md) and ingest that file."
    )


def err_embedding_model_mismatch(db_model: str, config_model: str) -> str:
    """Embedding model stored in the index does not match current config."""
    return (
        f"[red]Error:[/] Embedding model mismatch.\n"
        f"  Index uses:  {db_model}\n"
        f"  Config has:  {config_model}\n"
        "  Use a new --db for the new model or set embedding.model to match the index."
    )


def err_embedding_failed(message: str) -> str:
    """Embedding service call failed during ingest."""
    return (
        f"[red]Error:[/] {message}\n"
        "  Nothing was written. Check the provider status and retry."
    )


def err_partial_write(written: int, total: int, document_id: str) -> str:
    """An upsert batch failed after earlier batches were committed."""
    return (
        f"[red]Error:[/] Index write failed after {written} of {total} chunks were stored.\n"
        f"  Remove the partial document and retry:\n"
        f"    docchat remove --document {document_id} --yes"
    )


def err_document_not_found(document_id: str) -> str:
    """Document not present in the index."""
    return (
        f"[yellow]Document not found:[/] '{document_id}' has no vectors in the index.\n"
        "  Run:  docchat status --user <id>  to see indexed documents."
    )


def err_pipeline_failed(message: str) -> str:
    """Question could not be answered."""
    return (
        f"[red]Error:[/] {message}\n"
        "  No answer was produced. Check provider status and API keys, then retry."
    )


def err_timeout(seconds: float) -> str:
    """Answer did not arrive within --timeout."""
    return (
        f"[red]Error:[/] No answer within {seconds:g}s.\n"
        "  Retry, or raise the limit with --timeout."
    )
