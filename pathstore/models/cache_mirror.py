"""
CacheMirror - In-memory copy of every entry of a DurableStore.
"""

import logging
from typing import Any

from pathstore.interfaces.entry_source import EntrySource
from pathstore.models.value import MISSING

logger = logging.getLogger(__name__)


class CacheMirror:
    """
    Full in-memory mirror of a store's entries.

    Never touches durable storage itself: the owner applies every write to
    the durable store first and then to the mirror. Not thread-safe.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def load(self, source: EntrySource) -> "CacheMirror":
        """
        Replace the mirror's contents with every entry of source.

        Args:
            source: Where to read entries from.

        Returns:
            This mirror.
        """
        self.clear()
        for key, value in source.read_all():
            self._entries[key] = value
        logger.debug("Loaded %d entries into cache mirror", len(self._entries))
        return self

    def get(self, key: str) -> Any:
        """
        Look up key.

        Returns:
            The mirrored value, or MISSING.
        """
        return self._entries.get(key, MISSING)

    def put(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def remove(self, key: str) -> bool:
        """
        Remove key.

        Returns:
            True if key was present.
        """
        return self._entries.pop(key, MISSING) is not MISSING

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
