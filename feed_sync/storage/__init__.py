"""Storage layer for feed_sync.

Importing this package registers the built-in backends.
"""

from .base import Store
from .selector import (
    available_backends,
    register_backend,
    register_pending_backend,
    resolve,
    unregister_backend,
)
from .memory import MemoryStore
from .database import SQLiteStore, init_database

__all__ = [
    "Store",
    "available_backends",
    "register_backend",
    "register_pending_backend",
    "resolve",
    "unregister_backend",
    "MemoryStore",
    "SQLiteStore",
    "init_database",
]
