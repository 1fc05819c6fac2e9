"""
Abstract base classes for the key-value store.
"""

from pathstore.interfaces.entry_source import EntrySource

__all__ = ["EntrySource"]
