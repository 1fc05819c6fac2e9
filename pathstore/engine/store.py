"""
Store - Public key-value API with path access into stored values.
"""

import copy
import logging
import math
from collections.abc import Mapping
from typing import Any

from pathstore.engine.initializer import StoreInitializer
from pathstore.models.cache_mirror import CacheMirror
from pathstore.models.durable_store import DurableStore
from pathstore.models.exceptions import InvalidKeyError, MissingDefaultError
from pathstore.models.options import StoreOptions
from pathstore.models.path import parse_path, read_at_path, remove_at_path, write_at_path
from pathstore.models.value import MISSING, canonicalize, is_utf8_encodable

logger = logging.getLogger(__name__)


class Store:
    """
    Persistent key-value store with path-addressed access into values.

    Provides:
    - get(key, path): Read a value or a node inside it
    - set(key, value, path): Replace a value or a node inside it
    - ensure(key, default, path): Read, writing default first if absent
    - delete(key, path): Remove an entry or a node inside it
    - delete_all(): Remove every entry
    - indices: Every stored key

    Architecture:
    - Every write goes to the DurableStore (SQLite, one row per key)
    - In mirrored mode (in_memory=True) a CacheMirror holds every entry,
      loaded at startup and updated after each durable write; reads are
      served from it
    - In direct mode every read goes to the DurableStore

    Single-threaded: share a Store across threads only behind a lock.
    """

    def __init__(
        self,
        name: str,
        data_dir: str = "data",
        in_memory: bool = True,
    ) -> None:
        """
        Open (creating if needed) the named store.

        Args:
            name: Table holding this store's entries.
            data_dir: Directory of the database file.
            in_memory: Keep a full in-memory mirror for reads.
        """
        self._options = StoreOptions(name=name, data_dir=data_dir, in_memory=in_memory)
        self._durable: DurableStore
        self._mirror: CacheMirror | None = None
        self._initialize()

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None) -> "Store":
        """
        Open a store from an options dictionary.

        Args:
            options: See StoreOptions.from_mapping.

        Returns:
            The opened Store.
        """
        opts = StoreOptions.from_mapping(options)
        return cls(opts.name, data_dir=opts.data_dir, in_memory=opts.in_memory)

    def _initialize(self) -> None:
        with StoreInitializer(self._options) as initializer:
            self._durable, _ = initializer.open_store()
            # A failed load closes the connection on the way out
            if self._options.in_memory:
                self._mirror = CacheMirror().load(self._durable)

        logger.info(
            "Opened store %s (in_memory=%s)", self._options.name, self._options.in_memory
        )

    @property
    def name(self) -> str:
        return self._options.name

    @property
    def options(self) -> StoreOptions:
        return self._options

    @property
    def in_memory(self) -> bool:
        return self._mirror is not None

    def fetch_everything(self) -> "Store":
        """Reload the in-memory mirror from disk. No-op in direct mode."""
        if self._mirror is not None:
            self._mirror.load(self._durable)
        return self

    @staticmethod
    def _normalize_key(key: Any) -> str:
        """
        Convert a key to its stored text form.

        Raises:
            InvalidKeyError: If key is not a str, int or finite float.
        """
        if isinstance(key, str):
            if not is_utf8_encodable(key):
                raise InvalidKeyError(key, f"Key {key!r} is not valid UTF-8 (lone surrogate)")
            return key
        if isinstance(key, bool):
            raise InvalidKeyError(key)
        if isinstance(key, int):
            return str(key)
        if isinstance(key, float) and math.isfinite(key):
            # 1.0 and 1 address the same entry
            return str(int(key)) if key.is_integer() else repr(key)
        raise InvalidKeyError(key)

    def _resolve(self, key: str) -> Any:
        """Current value for a normalized key, or MISSING."""
        if self._mirror is not None:
            return self._mirror.get(key)
        return self._durable.read_one(key)

    def _write(self, key: str, value: Any) -> None:
        """Persist a canonical value, then mirror it."""
        self._durable.write_one(key, value)
        if self._mirror is not None:
            self._mirror.put(key, value)

    def get(self, key: Any, path: Any = None) -> Any:
        """
        Retrieve a value, or the node at path inside it.

        Args:
            key: Text or numeric key. None yields None.
            path: Optional path into the value.

        Returns:
            A copy of the value found, or None if the key or path is absent.
        """
        if key is None:
            return None

        value = read_at_path(self._resolve(self._normalize_key(key)), path)
        if value is MISSING:
            return None
        if self._mirror is not None:
            # Callers must not be able to mutate the mirror
            return copy.deepcopy(value)
        return value

    def set(self, key: Any, value: Any, path: Any = None) -> None:
        """
        Store a value, or replace the node at path inside the stored value.

        Args:
            key: Text or numeric key.
            value: Value tree to store.
            path: Optional path into the existing value. Missing or
                non-container nodes along it are replaced by containers.

        Raises:
            InvalidKeyError: If key is not text or numeric.
            InvalidValueError: If value is not a storable tree.
            InvalidPathError: If path is malformed.
        """
        normalized = self._normalize_key(key)
        accessors = parse_path(path)

        if accessors:
            new_value = write_at_path(self._resolve(normalized), accessors, value)
        else:
            new_value = canonicalize(value)

        self._write(normalized, new_value)

    def ensure(self, key: Any, default: Any, path: Any = None) -> Any:
        """
        Return the value at (key, path), writing default there first if absent.

        Args:
            key: Text or numeric key.
            default: Value to store when nothing exists yet. Required.
            path: Optional path into the value.

        Returns:
            The existing value, or default once it has been written.

        Raises:
            MissingDefaultError: If default is None.
        """
        if default is None:
            raise MissingDefaultError(key, self.name)

        normalized = self._normalize_key(key)
        accessors = parse_path(path)
        stored = canonicalize(default)

        current = self._resolve(normalized)

        if not accessors:
            if current is not MISSING:
                return self.get(normalized)
            self.set(normalized, stored)
            return stored

        if read_at_path(current, accessors) is not MISSING:
            return self.get(normalized, accessors)

        # A missing key gets its {} root from the same single write
        self.set(normalized, stored, accessors)
        return stored

    def delete(self, key: Any, path: Any = None) -> bool:
        """
        Delete an entry, or the node at path inside its value.

        Sequence elements are spliced out, shifting later elements down.

        Args:
            key: Text or numeric key. None deletes nothing.
            path: Optional path into the value.

        Returns:
            True if the entry (or the node at path) existed.
        """
        if key is None:
            return False

        normalized = self._normalize_key(key)
        accessors = parse_path(path)

        if not accessors:
            existed = self._durable.delete_one(normalized)
            if self._mirror is not None:
                self._mirror.remove(normalized)
            logger.debug("Deleted %s from %s (existed=%s)", normalized, self.name, existed)
            return existed

        new_value, removed = remove_at_path(self._resolve(normalized), accessors)
        if removed:
            self.set(normalized, new_value)
        return removed

    def delete_all(self) -> None:
        """Delete every entry of this store."""
        self._durable.delete_all()
        if self._mirror is not None:
            self._mirror.clear()
        logger.debug("Deleted all entries from %s", self.name)

    @property
    def indices(self) -> list[str]:
        """Every stored key, in unspecified order."""
        if self._mirror is not None:
            return self._mirror.keys()
        return self._durable.list_keys()

    def close(self) -> None:
        """Close the underlying database connection."""
        self._durable.close()
        logger.info("Closed store %s", self.name)

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        mode = "mirrored" if self._mirror is not None else "direct"
        return f"Store(name={self.name!r}, mode={mode})"
