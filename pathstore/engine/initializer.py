"""
StoreInitializer - Prepare the data directory and open the durable store.
"""

import logging
import os
import sqlite3
from pathlib import Path

from pathstore.models.durable_store import DurableStore
from pathstore.models.options import StoreOptions

logger = logging.getLogger(__name__)


class StoreInitializer:
    """
    Handles store startup.

    Responsibilities:
    - Check and create the data directory
    - Open the SQLite database file
    - Ensure the schema of the named table
    """

    def __init__(self, options: StoreOptions) -> None:
        """
        Initialize the store initializer.

        Args:
            options: Validated store options.
        """
        self.options = options
        self.data_dir = options.resolved_data_dir
        self._opened: DurableStore | None = None

    def _check_writable(self) -> None:
        """
        Fail early when the data directory cannot be written.

        Raises:
            PermissionError: If the directory, or the closest existing
                ancestor it would be created under, is not writable.
        """
        if os.path.exists(self.data_dir):
            if not os.access(self.data_dir, os.W_OK):
                raise PermissionError(f"data_dir not writable: {self.data_dir}")
            return

        ancestor = os.path.dirname(self.data_dir)
        while not os.path.exists(ancestor):
            ancestor = os.path.dirname(ancestor)
        if not os.access(ancestor, os.W_OK):
            raise PermissionError(
                f"Cannot create data_dir: {self.data_dir}. "
                f"Parent directory not writable: {ancestor}"
            )

    def open_store(self) -> tuple[DurableStore, bool]:
        """
        Open the database file and ensure the table exists.

        Returns:
            Tuple of:
            - The DurableStore for options.name
            - Whether its table was created by this call
        """
        connection = sqlite3.connect(self.options.database_path, isolation_level=None)
        store = DurableStore(connection, self.options.name)
        try:
            created = store.ensure_schema()
        except sqlite3.Error:
            connection.close()
            raise

        if created:
            logger.info("Created store %s in %s", self.options.name, self.options.database_path)
        self._opened = store
        return store, created

    def __enter__(self) -> "StoreInitializer":
        """Context manager entry."""
        self._check_writable()
        Path(self.data_dir).mkdir(parents=True, exist_ok=True)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit, closing the opened store if startup failed."""
        if exc_type is not None and self._opened is not None:
            self._opened.close()
            logger.debug("Closed store %s after failed startup", self.options.name)
