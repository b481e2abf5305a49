"""Store adapters - Expiring key-value implementations."""

from .memory import InMemoryKeyValueStore
from .postgres import PostgresKeyValueStore, run_migrations

__all__ = ["InMemoryKeyValueStore", "PostgresKeyValueStore", "run_migrations"]
