from maids.store.base import InsertOutcome, Store
from maids.store.memory import InMemoryStore
from maids.store.postgres import PostgresStore

__all__ = [
    "InMemoryStore",
    "InsertOutcome",
    "PostgresStore",
    "Store",
]
