"""Names of message types and the builtin types they may denote."""

from __future__ import annotations

from enum import Enum


class BuiltinType(Enum):
    """Primitive field types of the message format."""

    BOOL = "bool"
    BYTE = "byte"
    CHAR = "char"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    TIME = "time"
    DURATION = "duration"
    STRING = "string"
    OTHER = "other"


_BY_NAME = {t.value: t for t in BuiltinType if t is not BuiltinType.OTHER}

_SIZES = {
    BuiltinType.BOOL: 1,
    BuiltinType.BYTE: 1,
    BuiltinType.CHAR: 1,
    BuiltinType.UINT8: 1,
    BuiltinType.UINT16: 2,
    BuiltinType.UINT32: 4,
    BuiltinType.UINT64: 8,
    BuiltinType.INT8: 1,
    BuiltinType.INT16: 2,
    BuiltinType.INT32: 4,
    BuiltinType.INT64: 8,
    BuiltinType.FLOAT32: 4,
    BuiltinType.FLOAT64: 8,
    BuiltinType.TIME: 8,
    BuiltinType.DURATION: 8,
}


def to_builtin_type(name: str) -> BuiltinType:
    """Return the builtin type called ``name``, or OTHER for a message type."""
    return _BY_NAME.get(name, BuiltinType.OTHER)


def builtin_size(type_id: BuiltinType) -> int | None:
    """Return the serialized size in bytes, or None when it is not fixed."""
    return _SIZES.get(type_id)


class ROSType:
    """A type name such as ``geometry_msgs/Pose`` or ``float64``."""

    __slots__ = ("_base_name", "_pkg_name", "_msg_name", "_id")

    def __init__(self, name: str) -> None:
        self._set_name(name)

    def _set_name(self, name: str) -> None:
        self._base_name = name
        pkg, sep, msg = name.partition("/")
        if sep:
            self._pkg_name, self._msg_name = pkg, msg
        else:
            self._pkg_name, self._msg_name = "", name
        self._id = to_builtin_type(self._msg_name)

    @property
    def base_name(self) -> str:
        return self._base_name

    @property
    def pkg_name(self) -> str:
        return self._pkg_name

    @property
    def msg_name(self) -> str:
        return self._msg_name

    @property
    def type_id(self) -> BuiltinType:
        return self._id

    @property
    def is_builtin(self) -> bool:
        return self._id is not BuiltinType.OTHER

    @property
    def type_size(self) -> int | None:
        return builtin_size(self._id)

    def set_pkg_name(self, new_pkg: str) -> None:
        """Prefix the package name onto a type that has none."""
        if self._pkg_name:
            raise ValueError(f"type {self._base_name!r} already has a package name")
        self._set_name(f"{new_pkg}/{self._base_name}")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ROSType):
            return self._base_name == other._base_name
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._base_name)

    def __str__(self) -> str:
        return self._base_name

    def __repr__(self) -> str:
        return f"ROSType({self._base_name!r})"