"""docchat vector index layer."""

from docchat.db.connection import Database
from docchat.db.index import UPSERT_BATCH_SIZE, VectorIndex
from docchat.db.migrations import MIGRATIONS, run_migrations
from docchat.db.schema import initialize
from docchat.db.vectors import compile_filter, encode_vector

__all__ = [
    "Database",
    "MIGRATIONS",
    "UPSERT_BATCH_SIZE",
    "VectorIndex",
    "compile_filter",
    "encode_vector",
    "initialize",
    "run_migrations",
]
