"""docchat configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (DOCCHAT_GENERATION_MODEL, DOCCHAT_EMBEDDING_MODEL,
     DOCCHAT_INDEX_PATH)
  3. Per-project docchat.yaml  (current directory)
  4. Global ~/.docchat/config.yaml  (model defaults only — no API keys)
  5. Hardcoded defaults

Global config must never contain API keys; use environment variables instead.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from docchat.ingest.base import MAX_CHUNK_SIZE, OVERLAP_SIZE, SENTENCE_LOOKAHEAD

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".docchat"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "docchat.yaml"

# Fields that suggest an API key — forbidden in global config.
# Does NOT match legitimate config keys like max_tokens or top_k.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"  # api_key, api-key, api_secret, apikey
    r"|_token$"                  # github_token, access_token (suffix)
    r"|^token$"                  # exactly "token"
    r"|_secret$"                 # client_secret (suffix)
    r"|^secret$"                 # exactly "secret"
    r"|passw(?:ord|d)"           # password, passwd
    r"|credential",              # credential, credentials
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["embedding", "generation", "retrieval", "chunking", "index", "logging"]
)

_LOG_LEVELS: frozenset[str] = frozenset(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class EmbeddingCfg:
    """Embedding service configuration (docchat.yaml: embedding:)."""

    model: str = "openai/text-embedding-ada-002"
    max_workers: int = 8
    num_retries: int = 0


@dataclass
class GenerationCfg:
    """Completion service configuration (docchat.yaml: generation:)."""

    model: str = "openai/gpt-4"
    temperature: float = 0.7
    max_tokens: int = 1000
    num_retries: int = 0


@dataclass
class RetrievalCfg:
    """Retrieval configuration (docchat.yaml: retrieval:)."""

    top_k: int = 5


@dataclass
class ChunkingCfg:
    """Chunker window configuration, in characters (docchat.yaml: chunking:)."""

    max_chunk_size: int = MAX_CHUNK_SIZE
    overlap: int = OVERLAP_SIZE
    sentence_lookahead: int = SENTENCE_LOOKAHEAD


@dataclass
class IndexCfg:
    """Vector index location and write batching (docchat.yaml: index:)."""

    path: str = ".docchat.db"
    batch_size: int = 100


@dataclass
class LoggingCfg:
    level: str = "WARNING"


@dataclass
class DocChatConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    generation: GenerationCfg = field(default_factory=GenerationCfg)
    retrieval: RetrievalCfg = field(default_factory=RetrievalCfg)
    chunking: ChunkingCfg = field(default_factory=ChunkingCfg)
    index: IndexCfg = field(default_factory=IndexCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate(cfg: DocChatConfig) -> None:
    """Reject values that would break the chunker loop or the index."""
    ch = cfg.chunking
    if ch.max_chunk_size < 1:
        raise ConfigError(f"chunking.max_chunk_size must be >= 1, got {ch.max_chunk_size}")
    if not 0 <= ch.overlap < ch.max_chunk_size:
        raise ConfigError(
            f"chunking.overlap must be in [0, max_chunk_size), got {ch.overlap}"
        )
    if ch.sentence_lookahead < 0:
        raise ConfigError(
            f"chunking.sentence_lookahead must be >= 0, got {ch.sentence_lookahead}"
        )
    if cfg.retrieval.top_k < 1:
        raise ConfigError(f"retrieval.top_k must be >= 1, got {cfg.retrieval.top_k}")
    if cfg.index.batch_size < 1:
        raise ConfigError(f"index.batch_size must be >= 1, got {cfg.index.batch_size}")
    if cfg.embedding.max_workers < 1:
        raise ConfigError(
            f"embedding.max_workers must be >= 1, got {cfg.embedding.max_workers}"
        )
    if cfg.logging.level not in _LOG_LEVELS:
        raise ConfigError(
            f"logging.level must be one of {', '.join(sorted(_LOG_LEVELS))}, "
            f"got '{cfg.logging.level}'"
        )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> DocChatConfig:
    """Build a *DocChatConfig* from a merged raw YAML dict."""
    cfg = DocChatConfig()

    if "embedding" in data:
        e = data["embedding"] or {}
        cfg.embedding = EmbeddingCfg(
            model=str(e.get("model", cfg.embedding.model)),
            max_workers=int(e.get("max_workers", cfg.embedding.max_workers)),
            num_retries=int(e.get("num_retries", cfg.embedding.num_retries)),
        )

    if "generation" in data:
        g = data["generation"] or {}
        cfg.generation = GenerationCfg(
            model=str(g.get("model", cfg.generation.model)),
            temperature=float(g.get("temperature", cfg.generation.temperature)),
            max_tokens=int(g.get("max_tokens", cfg.generation.max_tokens)),
            num_retries=int(g.get("num_retries", cfg.generation.num_retries)),
        )

    if "retrieval" in data:
        r = data["retrieval"] or {}
        cfg.retrieval = RetrievalCfg(top_k=int(r.get("top_k", cfg.retrieval.top_k)))

    if "chunking" in data:
        ch = data["chunking"] or {}
        cfg.chunking = ChunkingCfg(
            max_chunk_size=int(ch.get("max_chunk_size", cfg.chunking.max_chunk_size)),
            overlap=int(ch.get("overlap", cfg.chunking.overlap)),
            sentence_lookahead=int(
                ch.get("sentence_lookahead", cfg.chunking.sentence_lookahead)
            ),
        )

    if "index" in data:
        i = data["index"] or {}
        cfg.index = IndexCfg(
            path=str(i.get("path", cfg.index.path)),
            batch_size=int(i.get("batch_size", cfg.index.batch_size)),
        )

    if "logging" in data:
        lg = data["logging"] or {}
        cfg.logging = LoggingCfg(level=str(lg.get("level", cfg.logging.level)).upper())

    return cfg


def _apply_env_overrides(cfg: DocChatConfig) -> DocChatConfig:
    """Apply DOCCHAT_* environment variable overrides."""
    if model := os.environ.get("DOCCHAT_GENERATION_MODEL"):
        cfg.generation.model = model
    if model := os.environ.get("DOCCHAT_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    if path := os.environ.get("DOCCHAT_INDEX_PATH"):
        cfg.index.path = path
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> DocChatConfig:
    """Load and return a merged *DocChatConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *docchat.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If global config contains API-key-like fields, or a value
            is out of range (e.g. chunking.overlap >= chunking.max_chunk_size).
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _apply_env_overrides(_cfg_from_dict(merged))
    _validate(cfg)
    return cfg


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.docchat/config.yaml`` with defaults if it does not exist.

    Creates parent directory with mode 0o700 and the config file with
    mode 0o600 (owner-readable only).
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    if not target.exists():
        content = (
            "# docchat global configuration — model defaults only.\n"
            "# NEVER store API keys here — use environment variables:\n"
            "#   export OPENAI_API_KEY=sk-...\n"
            "\n"
            "embedding:\n"
            "  model: openai/text-embedding-ada-002\n"
            "\n"
            "generation:\n"
            "  model: openai/gpt-4\n"
        )
        target.write_text(content, encoding="utf-8")
        target.chmod(0o600)

    return target
