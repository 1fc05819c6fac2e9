"""
Data models for the key-value store.
"""

from pathstore.models.cache_mirror import CacheMirror
from pathstore.models.durable_store import DurableStore
from pathstore.models.options import StoreOptions
from pathstore.models.path import Accessor, parse_path, read_at_path, remove_at_path, write_at_path
from pathstore.models.value import MISSING, ValueKind, decode_value, encode_value, kind_of

__all__ = [
    "MISSING",
    "Accessor",
    "CacheMirror",
    "DurableStore",
    "StoreOptions",
    "ValueKind",
    "decode_value",
    "encode_value",
    "kind_of",
    "parse_path",
    "read_at_path",
    "remove_at_path",
    "write_at_path",
]
