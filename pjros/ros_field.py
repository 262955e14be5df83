"""One field line of a message definition."""

from __future__ import annotations

import re

from pjros.ros_type import ROSType

_TYPE_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9_]*(/[a-zA-Z][a-zA-Z0-9_]*)?(\[[0-9]*\])?")
_FIELD_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9_]*")
_ARRAY_RE = re.compile(r"(.+)(\[([0-9]*)\])")
_NON_SPACE_RE = re.compile(r"\S")
_COMMENT_RE = re.compile(r"\s*#")


class ROSField:
    """A field or constant declared in a message definition.

    ``array_size`` is 1 for a scalar, -1 for a variable length array and the
    element count for a fixed size array. A constant has a non-empty ``value``.
    """

    __slots__ = ("name", "type", "value", "array_size")

    def __init__(self, definition: str) -> None:
        match = _TYPE_RE.search(definition)
        if match is None:
            raise ValueError(f"Bad type when parsing field: {definition}")
        type_name = match.group(0)
        pos = match.end()

        match = _FIELD_RE.search(definition, pos)
        if match is None:
            raise ValueError(f"Bad field when parsing field: {definition}")
        self.name: str = match.group(0)
        pos = match.end()

        self.array_size = 1
        array_match = _ARRAY_RE.search(type_name)
        if array_match is not None:
            type_name = array_match.group(1)
            size = array_match.group(3)
            self.array_size = int(size) if size else -1

        value = ""
        match = _NON_SPACE_RE.search(definition, pos)
        if match is not None:
            char = match.group(0)
            if char == "=":
                rest = definition[match.end():]
                if type_name != "string":
                    comment = _COMMENT_RE.search(rest)
                    if comment is not None:
                        rest = rest[: comment.start()]
                value = rest.strip()
            elif char != "#":
                raise ValueError(f"Unexpected character after type and field: {definition}")

        self.type = ROSType(type_name)
        self.value: str = value

    @property
    def is_array(self) -> bool:
        return self.array_size != 1

    @property
    def is_constant(self) -> bool:
        return bool(self.value)

    def __repr__(self) -> str:
        return f"ROSField(type={self.type.base_name!r}, name={self.name!r}, array_size={self.array_size})"