"""
ValueKind and the canonical codec for values stored in the database.

Values are plain Python trees (None, bool, int/float, str, list, dict) that
are persisted as JSON text.
"""

import json
import math
from collections.abc import Mapping
from enum import IntEnum
from typing import Any

from pathstore.models.exceptions import InvalidValueError


class ValueKind(IntEnum):
    """Kind of a node inside a stored value tree."""

    NULL = 0
    BOOLEAN = 1
    NUMBER = 2
    TEXT = 3
    SEQUENCE = 4
    MAPPING = 5

    @property
    def is_container(self) -> bool:
        return self in (ValueKind.SEQUENCE, ValueKind.MAPPING)


class _Missing:
    """Marker for "no value here", distinct from a stored null."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def kind_of(node: Any) -> ValueKind:
    """
    Classify a node of a value tree.

    Args:
        node: Any node of a value tree.

    Returns:
        The ValueKind of the node.

    Raises:
        InvalidValueError: If the node is not a tree type.
    """
    # bool is an int subclass, check it first
    if node is None:
        return ValueKind.NULL
    if isinstance(node, bool):
        return ValueKind.BOOLEAN
    if isinstance(node, (int, float)):
        return ValueKind.NUMBER
    if isinstance(node, str):
        return ValueKind.TEXT
    if isinstance(node, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(node, Mapping):
        return ValueKind.MAPPING
    raise InvalidValueError(
        f"Unsupported value type {type(node).__name__}: values must be "
        f"null, bool, number, str, list or dict"
    )


def canonicalize(value: Any) -> Any:
    """
    Validate a value and return a fresh canonical copy of it.

    Tuples become lists, mappings become dicts and integer mapping keys
    become text, so that the copy equals what decode_value(encode_value(value))
    yields.

    Args:
        value: The value tree to validate.

    Returns:
        A new tree sharing no containers with the input.

    Raises:
        InvalidValueError: If any node is not representable.
    """
    kind = kind_of(value)

    if kind == ValueKind.NUMBER:
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidValueError(f"Non-finite number {value!r} cannot be stored")
        return value

    if kind == ValueKind.SEQUENCE:
        return [canonicalize(item) for item in value]

    if kind == ValueKind.MAPPING:
        result = {}
        for key, item in value.items():
            if isinstance(key, bool) or not isinstance(key, (str, int)):
                raise InvalidValueError(
                    f"Mapping keys must be text, got {type(key).__name__}"
                )
            text_key = canonicalize(key) if isinstance(key, str) else str(key)
            if text_key in result:
                # {1: ..., "1": ...} would collapse into one key
                raise InvalidValueError(f"Duplicate mapping key {text_key!r}")
            result[text_key] = canonicalize(item)
        return result

    if kind == ValueKind.TEXT and not is_utf8_encodable(value):
        raise InvalidValueError(f"Text {value!r} is not valid UTF-8 (lone surrogate)")

    return value


def is_utf8_encodable(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def encode_value(value: Any) -> str:
    """Serialize a value tree to its persisted JSON text."""
    return json.dumps(
        canonicalize(value),
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
    )


def decode_value(text: str | None) -> Any:
    """Deserialize persisted JSON text; a SQL NULL column decodes to None."""
    if text is None:
        return None
    return json.loads(text)
