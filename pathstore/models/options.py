"""
StoreOptions - Construction-time configuration for a Store.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pathstore.models.exceptions import StoreConfigError

DATABASE_FILENAME = "base.sqlite"

# Accepted spellings for each option, snake_case first
_ALIASES = {
    "name": ("name",),
    "data_dir": ("data_dir", "dataDir"),
    "in_memory": ("in_memory", "inMemory", "hasMapInMemory"),
}


@dataclass(frozen=True)
class StoreOptions:
    """
    Options for opening a Store.

    Attributes:
        name: Primary table to use. Several stores may share one data_dir.
        data_dir: Directory holding the database file, relative paths are
            resolved against the current working directory.
        in_memory: Whether to keep a full CacheMirror of the table.
    """

    name: str
    data_dir: str | os.PathLike[str] = "data"
    in_memory: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise StoreConfigError("You should give a name to your store")
        if not isinstance(self.data_dir, (str, os.PathLike)) or not os.fspath(self.data_dir).strip():
            raise StoreConfigError("data_dir cannot be empty")
        if not isinstance(self.in_memory, bool):
            raise StoreConfigError(
                f"in_memory must be a bool, got {type(self.in_memory).__name__}"
            )

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> "StoreOptions":
        """
        Build options from a dictionary.

        Accepts the camelCase keys ``dataDir``, ``inMemory`` and
        ``hasMapInMemory`` as well as the snake_case field names.

        Args:
            options: Option dictionary, must contain ``name``.

        Returns:
            Validated StoreOptions.

        Raises:
            StoreConfigError: If options is missing, has unknown keys, or
                gives conflicting values for one option.
        """
        if options is None:
            raise StoreConfigError("Expected an options mapping")

        known = {alias for aliases in _ALIASES.values() for alias in aliases}
        unknown = sorted(set(options) - known)
        if unknown:
            raise StoreConfigError(f"Unknown store options: {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for field_name, aliases in _ALIASES.items():
            given = [options[alias] for alias in aliases if alias in options]
            if not given:
                continue
            if any(value != given[0] for value in given[1:]):
                raise StoreConfigError(f"Conflicting values for option {field_name!r}")
            kwargs[field_name] = given[0]

        if "name" not in kwargs:
            raise StoreConfigError("You should give a name to your store")
        return cls(**kwargs)

    @property
    def resolved_data_dir(self) -> str:
        return os.path.abspath(os.fspath(self.data_dir))

    @property
    def database_path(self) -> str:
        return os.path.join(self.resolved_data_dir, DATABASE_FILENAME)
