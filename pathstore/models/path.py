"""
Path parsing and path-addressed read/write/remove on value trees.

A path is a sequence of accessors. Accessors made only of ASCII digits are
index accessors, everything else addresses a mapping key. At runtime the
node's actual kind decides how an accessor is applied: a mapping is always
looked up by the accessor's text, a sequence only by index accessors.

None of the functions here mutate their inputs.
"""

from dataclasses import dataclass
from typing import Any

from pathstore.models.exceptions import InvalidPathError
from pathstore.models.value import MISSING, ValueKind, canonicalize, kind_of

_QUOTES = ("'", '"')


@dataclass(frozen=True)
class Accessor:
    """
    One step of a path.

    Attributes:
        name: The accessor text, used as the key on mapping nodes.
        is_index: Whether the accessor addresses sequence elements.
    """

    name: str
    is_index: bool = False

    @classmethod
    def from_segment(cls, segment: str | int) -> "Accessor":
        if isinstance(segment, bool):
            raise InvalidPathError("Path segments must be text or integers, got bool")
        if isinstance(segment, int):
            return cls(name=str(segment), is_index=segment >= 0)
        if isinstance(segment, str):
            return cls(name=segment, is_index=segment.isascii() and segment.isdigit())
        raise InvalidPathError(
            f"Path segments must be text or integers, got {type(segment).__name__}"
        )

    @property
    def position(self) -> int:
        """Sequence position of an index accessor."""
        if not self.is_index:
            raise InvalidPathError(f"Accessor {self.name!r} is not an index")
        return int(self.name)

    def __str__(self) -> str:
        return self.name


def parse_path(path: Any) -> tuple[Accessor, ...]:
    """
    Turn a path argument into a tuple of accessors.

    Accepted forms:
    - None or "": the empty path.
    - int: a single accessor.
    - str: dotted and bracketed notation, e.g. "a.b.0", "a[0].b", 'a["x.y"]'.
    - a list or tuple of str/int/Accessor: taken literally, one accessor per item.

    Args:
        path: The path argument.

    Returns:
        Tuple of accessors, empty for the whole value.

    Raises:
        InvalidPathError: On malformed strings or unsupported types.
    """
    if path is None:
        return ()

    if isinstance(path, str):
        if path == "":
            return ()
        return tuple(Accessor.from_segment(segment) for segment in _split(path))

    if isinstance(path, int) and not isinstance(path, bool):
        return (Accessor.from_segment(path),)

    if isinstance(path, (list, tuple)):
        accessors = []
        for segment in path:
            if isinstance(segment, Accessor):
                accessors.append(segment)
            else:
                accessors.append(Accessor.from_segment(segment))
        return tuple(accessors)

    raise InvalidPathError(f"Unsupported path type {type(path).__name__}")


def _split(text: str) -> list[str]:
    """Split dotted/bracketed path text into raw segments."""
    segments: list[str] = []
    buffer: list[str] = []
    just_closed = False
    i = 0

    while i < len(text):
        char = text[i]
        if char == ".":
            # "a[0].b": the dot after a bracket does not open an empty segment
            if buffer or not just_closed:
                segments.append("".join(buffer))
            buffer = []
            just_closed = False
            i += 1
        elif char == "[":
            if buffer:
                segments.append("".join(buffer))
                buffer = []
            segment, i = _read_bracket(text, i + 1)
            segments.append(segment)
            just_closed = True
        else:
            buffer.append(char)
            just_closed = False
            i += 1

    if buffer or not just_closed:
        segments.append("".join(buffer))
    return segments


def _read_bracket(text: str, start: int) -> tuple[str, int]:
    """
    Read a bracketed segment.

    Args:
        text: The full path text.
        start: Offset just past the opening bracket.

    Returns:
        Tuple of (segment, offset just past the closing bracket).
    """
    if start < len(text) and text[start] in _QUOTES:
        quote = text[start]
        chars: list[str] = []
        i = start + 1
        while i < len(text):
            char = text[i]
            if char == "\\" and i + 1 < len(text):
                chars.append(text[i + 1])
                i += 2
                continue
            if char == quote:
                break
            chars.append(char)
            i += 1
        else:
            raise InvalidPathError(f"Unterminated quote in path {text!r}")

        if i + 1 >= len(text) or text[i + 1] != "]":
            raise InvalidPathError(f"Expected ']' after quoted segment in path {text!r}")
        return "".join(chars), i + 2

    end = text.find("]", start)
    if end == -1:
        raise InvalidPathError(f"Unclosed '[' in path {text!r}")
    return text[start:end], end + 1


def _child(node: Any, accessor: Accessor) -> Any:
    """Look up one accessor on a node, MISSING when it cannot be followed."""
    if node is MISSING:
        return MISSING

    kind = kind_of(node)
    if kind == ValueKind.MAPPING:
        return node.get(accessor.name, MISSING)
    if kind == ValueKind.SEQUENCE:
        if accessor.is_index and accessor.position < len(node):
            return node[accessor.position]
    return MISSING


def _coerce_container(node: Any, accessor: Accessor) -> Any:
    """
    Return node if it can hold accessor, else a fresh container that can.

    Destructive: a scalar, a null, or a sequence addressed by a property
    accessor is replaced.
    """
    if node is not MISSING:
        kind = kind_of(node)
        if kind == ValueKind.MAPPING:
            return node
        if kind == ValueKind.SEQUENCE and accessor.is_index:
            return node
    return [] if accessor.is_index else {}


def _assign(node: Any, accessor: Accessor, child: Any) -> None:
    if isinstance(node, dict):
        node[accessor.name] = child
        return

    position = accessor.position
    if position >= len(node):
        node.extend([None] * (position - len(node) + 1))
    node[position] = child


def read_at_path(value: Any, path: Any) -> Any:
    """
    Read the node at path.

    Args:
        value: Root of the value tree, or MISSING.
        path: Any form accepted by parse_path.

    Returns:
        The node at path, or MISSING if the path cannot be followed.
    """
    node = value
    for accessor in parse_path(path):
        node = _child(node, accessor)
        if node is MISSING:
            return MISSING
    return node


def write_at_path(value: Any, path: Any, leaf: Any) -> Any:
    """
    Return a copy of value with leaf written at path.

    Missing or non-container intermediate nodes are replaced by a sequence
    when the next accessor is an index, otherwise by a mapping. An absent or
    null root becomes an empty mapping. Writing past the end of a sequence
    pads it with nulls.

    Args:
        value: Root of the value tree, or MISSING.
        path: Any form accepted by parse_path.
        leaf: The value to write.

    Returns:
        The new root. An empty path returns a copy of leaf.
    """
    accessors = parse_path(path)
    if not accessors:
        return canonicalize(leaf)

    if value is MISSING or value is None:
        root: Any = {}
    else:
        root = _coerce_container(canonicalize(value), accessors[0])

    node = root
    for accessor, following in zip(accessors, accessors[1:]):
        child = _coerce_container(_child(node, accessor), following)
        _assign(node, accessor, child)
        node = child

    _assign(node, accessors[-1], canonicalize(leaf))
    return root


def remove_at_path(value: Any, path: Any) -> tuple[Any, bool]:
    """
    Return a copy of value with the node at path removed.

    Sequence elements are spliced out, shifting later elements down.

    Args:
        value: Root of the value tree, or MISSING.
        path: Any non-empty form accepted by parse_path.

    Returns:
        Tuple of (new root, whether the node existed before removal).

    Raises:
        InvalidPathError: If path is empty.
    """
    accessors = parse_path(path)
    if not accessors:
        raise InvalidPathError("Cannot remove at an empty path")

    if value is MISSING:
        return MISSING, False

    root = canonicalize(value)
    parent = read_at_path(root, accessors[:-1])
    last = accessors[-1]

    if isinstance(parent, dict):
        if last.name in parent:
            del parent[last.name]
            return root, True
    elif isinstance(parent, list):
        if last.is_index and last.position < len(parent):
            del parent[last.position]
            return root, True

    return root, False
