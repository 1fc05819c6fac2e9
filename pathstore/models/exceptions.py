"""
Custom exceptions for the key-value store.

Storage failures are not wrapped: ``sqlite3.Error`` and ``OSError`` reach the
caller unchanged.
"""


class StoreError(Exception):
    """Base class for errors raised by the store itself."""


class InvalidKeyError(StoreError, TypeError):
    """
    Raised when a key is absent or is neither text nor a number.

    Raised before any mutation is attempted.
    """

    def __init__(self, key: object, reason: str | None = None):
        """
        Initialize invalid key error.

        Args:
            key: The rejected key.
            reason: Why a key of an accepted type was still rejected.
        """
        self.key = key
        if reason is None:
            reason = f"The store requires keys to be strings or numbers, got {type(key).__name__}"
        super().__init__(reason)


class MissingDefaultError(StoreError, ValueError):
    """Raised when ensure() is called without a usable default value."""

    def __init__(self, key: object, store_name: str):
        self.key = key
        self.store_name = store_name
        super().__init__(
            f'No default value provided on ensure for "{key}" in "{store_name}"'
        )


class InvalidValueError(StoreError, TypeError):
    """Raised when a value cannot be represented as a null/bool/number/text/list/dict tree."""


class InvalidPathError(StoreError, ValueError):
    """Raised for malformed path strings or paths an operation cannot accept."""


class StoreConfigError(StoreError, ValueError):
    """Raised when construction options are missing or invalid."""
