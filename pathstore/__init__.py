"""
SQLite-backed key-value store with path access into JSON values.

This package provides a persistent store with:
- get(key, path) - Read a value, or the node at a path inside it
- set(key, value, path) - Write a whole value, or one node inside it
- ensure(key, default, path) - Read, writing a default first if absent
- delete(key, path) - Remove an entry, or one node inside it
- delete_all() - Remove every entry
- indices - Every stored key

Reads are served from a full in-memory mirror unless the store is opened
with in_memory=False.
"""

from pathstore.engine.store import Store
from pathstore.models.exceptions import (
    InvalidKeyError,
    InvalidPathError,
    InvalidValueError,
    MissingDefaultError,
    StoreConfigError,
    StoreError,
)
from pathstore.models.options import StoreOptions

__all__ = [
    "Store",
    "StoreOptions",
    "StoreError",
    "InvalidKeyError",
    "InvalidPathError",
    "InvalidValueError",
    "MissingDefaultError",
    "StoreConfigError",
]
