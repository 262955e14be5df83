"""Plot data storage, parser settings, the wire reader and the parser base classes."""

from __future__ import annotations

import re
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterator

from pjros.ros_type import BuiltinType


class DeserializationError(ValueError):
    """Raised when a buffer does not hold what the message definition says."""


@dataclass
class Series:
    """A named list of (x, y) samples."""

    name: str
    points: list[tuple[float, Any]] = field(default_factory=list)

    def push_back(self, x: float, y: Any) -> None:
        self.points.append((x, y))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[tuple[float, Any]]:
        return iter(self.points)

    def __getitem__(self, index: int) -> tuple[float, Any]:
        return self.points[index]


class PlotDataMap:
    """All the numeric and string series produced by the parsers."""

    def __init__(self) -> None:
        self.numeric: dict[str, Series] = {}
        self.strings: dict[str, Series] = {}

    def get_or_create_numeric(self, name: str) -> Series:
        series = self.numeric.get(name)
        if series is None:
            series = self.numeric[name] = Series(name)
        return series

    def get_or_create_string_series(self, name: str) -> Series:
        series = self.strings.get(name)
        if series is None:
            series = self.strings[name] = Series(name)
        return series


@dataclass
class ParserConfig:
    """Settings shared by all parsers."""

    use_header_stamp: bool = False
    remove_suffix_from_strings: bool = False
    boolean_strings_to_number: bool = False
    max_array_size: int = 100
    discard_large_arrays: bool = True


_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_double(text: str, remove_suffix: bool, boolean_to_number: bool) -> float | None:
    """Read a number from ``text``; return None when it holds none.

    With ``boolean_to_number`` the words true and false read as 1 and 0.
    With ``remove_suffix`` a number followed by other text, such as a unit, is accepted.
    """
    stripped = text.strip()
    if _NUMBER_RE.fullmatch(stripped):
        return float(stripped)
    if boolean_to_number:
        lowered = stripped.lower()
        if lowered == "true":
            return 1.0
        if lowered == "false":
            return 0.0
    if remove_suffix:
        match = _NUMBER_RE.match(stripped)
        if match:
            return float(match.group(0))
    return None


_FORMATS = {
    BuiltinType.BOOL: "?",
    BuiltinType.BYTE: "b",
    BuiltinType.CHAR: "B",
    BuiltinType.UINT8: "B",
    BuiltinType.UINT16: "H",
    BuiltinType.UINT32: "I",
    BuiltinType.UINT64: "Q",
    BuiltinType.INT8: "b",
    BuiltinType.INT16: "h",
    BuiltinType.INT32: "i",
    BuiltinType.INT64: "q",
    BuiltinType.FLOAT32: "f",
    BuiltinType.FLOAT64: "d",
}


class Ros1Reader:
    """Reads little-endian values from a serialized message, front to back."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def _unpack(self, fmt: str) -> tuple[Any, ...]:
        size = struct.calcsize(fmt)
        if size > self.remaining:
            raise DeserializationError(
                f"buffer overrun: need {size} bytes at offset {self._offset}, "
                f"{self.remaining} left"
            )
        values = struct.unpack_from(fmt, self._data, self._offset)
        self._offset += size
        return values

    def read_bytes(self, count: int) -> bytes:
        if count < 0 or count > self.remaining:
            raise DeserializationError(
                f"buffer overrun: need {count} bytes at offset {self._offset}, "
                f"{self.remaining} left"
            )
        chunk = self._data[self._offset : self._offset + count]
        self._offset += count
        return chunk

    def read(self, type_id: BuiltinType) -> Any:
        """Read one value of a builtin type; time and duration come back in seconds."""
        if type_id is BuiltinType.STRING:
            return self.read_string()
        if type_id is BuiltinType.TIME:
            return self.read_time()
        if type_id is BuiltinType.DURATION:
            sec, nsec = self._unpack("<ii")
            return sec + nsec * 1e-9
        fmt = _FORMATS.get(type_id)
        if fmt is None:
            raise ValueError(f"{type_id} is not a builtin type")
        return self._unpack("<" + fmt)[0]

    def read_string(self) -> str:
        length = self._unpack("<I")[0]
        return self.read_bytes(length).decode("utf-8", errors="replace")

    def read_time(self) -> float:
        sec, nsec = self._unpack("<II")
        return sec + nsec * 1e-9

    def read_array(self, type_id: BuiltinType) -> list[Any]:
        """Read a length-prefixed array of a builtin type."""
        count = self._unpack("<I")[0]
        return self.read_fixed_array(type_id, count)

    def read_fixed_array(self, type_id: BuiltinType, count: int) -> list[Any]:
        """Read ``count`` values of a builtin type without a length prefix."""
        fmt = _FORMATS.get(type_id)
        if fmt is not None:
            return list(self._unpack(f"<{count}{fmt}"))
        return [self.read(type_id) for _ in range(count)]


class MessageParser(ABC):
    """Turns serialized messages of one topic into samples of the plot data."""

    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        self.topic_name = topic_name
        self.plot_data = plot_data
        self.config = ParserConfig()

    def get_series(self, key: str) -> Series:
        return self.plot_data.get_or_create_numeric(key)

    def get_string_series(self, key: str) -> Series:
        return self.plot_data.get_or_create_string_series(key)

    @abstractmethod
    def parse_message(self, data: bytes, timestamp: float) -> float:
        """Store the samples of one message; return the timestamp that was used."""


class BuiltinMessageParser(MessageParser):
    """A parser for a message type whose layout is known in advance."""

    def parse_message(self, data: bytes, timestamp: float) -> float:
        msg = self.decode(Ros1Reader(data))
        return self.parse_message_impl(msg, timestamp)

    @abstractmethod
    def decode(self, reader: Ros1Reader) -> Any:
        """Read one message from ``reader``."""

    @abstractmethod
    def parse_message_impl(self, msg: Any, timestamp: float) -> float:
        """Store the samples of a decoded message; return the timestamp used."""