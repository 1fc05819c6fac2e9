"""
EntrySource abstract base class for anything that can enumerate stored entries.
"""

from abc import ABC, abstractmethod
from typing import Any


class EntrySource(ABC):
    """
    Abstract base class for a readable set of (key, value) entries.

    Implementations:
    - DurableStore: entries persisted in SQLite
    """

    @abstractmethod
    def read_all(self) -> list[tuple[str, Any]]:
        """
        Return every entry.

        Returns:
            List of (key, value) tuples in unspecified order.
        """
        pass

    @abstractmethod
    def list_keys(self) -> list[str]:
        """
        Return every stored key.

        Returns:
            List of keys in unspecified order.
        """
        pass
