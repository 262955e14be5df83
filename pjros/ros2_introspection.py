"""Decoding of CDR encoded messages described by member tables into flat lists of values."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pjros.base import DeserializationError
from pjros.tree import NUM_PLACEHOLDER, StringTreeLeaf, Tree, TreeNode


class FieldType(Enum):
    """Types a member of a message may have."""

    FLOAT = 1
    DOUBLE = 2
    BOOLEAN = 6
    UINT8 = 8
    INT8 = 9
    UINT16 = 10
    INT16 = 11
    UINT32 = 12
    INT32 = 13
    UINT64 = 14
    INT64 = 15
    STRING = 16
    MESSAGE = 18


_FORMATS = {
    FieldType.FLOAT: "f",
    FieldType.DOUBLE: "d",
    FieldType.BOOLEAN: "?",
    FieldType.UINT8: "B",
    FieldType.INT8: "b",
    FieldType.UINT16: "H",
    FieldType.INT16: "h",
    FieldType.UINT32: "I",
    FieldType.INT32: "i",
    FieldType.UINT64: "Q",
    FieldType.INT64: "q",
}


@dataclass
class MessageMember:
    """One member of a message. ``array_size`` 0 with ``is_array`` means unbounded."""

    name: str
    type_id: FieldType
    is_array: bool = False
    array_size: int = 0
    members: MessageMembers | None = None


@dataclass
class MessageMembers:
    """The description of a message type: where it lives, its name and its members."""

    message_namespace: str
    message_name: str
    members: list[MessageMember] = field(default_factory=list)


class MaxArrayPolicy(Enum):
    """What to do with arrays longer than the size limit."""

    DISCARD_LARGE_ARRAYS = True
    KEEP_LARGE_ARRAYS = False


class CdrReader:
    """Reads values from a CDR buffer that starts with its encapsulation header."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        if len(self._data) < 4:
            raise DeserializationError("buffer too short for the CDR encapsulation header")
        self._endian = "<" if self._data[1] & 1 else ">"
        self._origin = 4
        self._offset = 4

    @property
    def position(self) -> int:
        return self._offset

    @property
    def little_endian(self) -> bool:
        return self._endian == "<"

    def _take(self, count: int) -> bytes:
        if count < 0 or self._offset + count > len(self._data):
            raise DeserializationError(
                f"buffer overrun: need {count} bytes at offset {self._offset}, "
                f"{len(self._data) - self._offset} left"
            )
        chunk = self._data[self._offset : self._offset + count]
        self._offset += count
        return chunk

    def _align(self, size: int) -> None:
        padding = -(self._offset - self._origin) % size
        if padding:
            self._take(padding)

    def read(self, field_type: FieldType) -> Any:
        """Read one value of a primitive type, aligned to its size."""
        if field_type is FieldType.STRING:
            return self.read_string()
        fmt = _FORMATS.get(field_type)
        if fmt is None:
            raise ValueError(f"{field_type} is not a primitive type")
        size = struct.calcsize(fmt)
        self._align(size)
        return struct.unpack(self._endian + fmt, self._take(size))[0]

    def read_string(self) -> str:
        length = self.read(FieldType.UINT32)
        if length == 0:
            return ""
        raw = self._take(length)
        if raw.endswith(b"\x00"):
            raw = raw[:-1]
        return raw.decode("utf-8", errors="replace")

    def jump(self, count: int) -> bytes:
        """Move ``count`` bytes forward without alignment; return the bytes passed over."""
        return self._take(count)


def type_has_header(members: MessageMembers) -> bool:
    """True when the first member of the message is a standard header."""
    if not members.members:
        return False
    first = members.members[0].members
    if first is None:
        return False
    return first.message_name == "Header" and first.message_namespace == "std_msgs::msg"


@dataclass
class TopicInfo:
    """The type of a topic and the description of its messages."""

    topic_type: str
    introspection_support: MessageMembers
    has_header_stamp: bool = field(init=False)

    def __post_init__(self) -> None:
        self.has_header_stamp = type_has_header(self.introspection_support)


@dataclass
class FlatMessage:
    """Numbers, strings and large byte arrays of one message, addressed by tree leaves."""

    tree: Tree[str] | None = None
    values: list[tuple[StringTreeLeaf, float]] = field(default_factory=list)
    strings: list[tuple[StringTreeLeaf, str]] = field(default_factory=list)
    blobs: list[tuple[StringTreeLeaf, bytes]] = field(default_factory=list)


class Parser:
    """Decodes the messages of one topic."""

    MAX_ARRAY_SIZE = 9999

    def __init__(self, topic_name: str, topic_info: TopicInfo) -> None:
        self._discard_policy = MaxArrayPolicy.DISCARD_LARGE_ARRAYS
        self._max_array_size = self.MAX_ARRAY_SIZE
        self._topic_info = topic_info
        self._field_tree: Tree[str] = Tree(topic_name)
        self._build_tree(self._field_tree.root, topic_info.introspection_support)

    def _build_tree(self, node: TreeNode[str], members: MessageMembers) -> None:
        for member in members.members:
            new_node = node.add_child(member.name)
            if member.is_array:
                new_node = new_node.add_child(NUM_PLACEHOLDER)
            if member.type_id is FieldType.MESSAGE:
                if member.members is None:
                    raise ValueError(f"member {member.name!r} has no message description")
                self._build_tree(new_node, member.members)

    @property
    def topic_info(self) -> TopicInfo:
        return self._topic_info

    @property
    def field_tree(self) -> Tree[str]:
        return self._field_tree

    @property
    def max_array_policy(self) -> MaxArrayPolicy:
        return self._discard_policy

    @property
    def max_array_size(self) -> int:
        return self._max_array_size

    def set_max_array_policy(self, discard_policy: MaxArrayPolicy, max_size: int) -> None:
        self._discard_policy = discard_policy
        self._max_array_size = max_size

    def deserialize_into_flat_message(self, data: bytes | bytearray | memoryview) -> FlatMessage:
        """Decode one serialized message.

        Byte arrays longer than MAX_ARRAY_SIZE become blobs. Once an array breaks
        the size limit, it and the members after it in the same message are read
        but not stored.
        """
        reader = CdrReader(data)
        flat = FlatMessage(tree=self._field_tree)
        discard = self._discard_policy is MaxArrayPolicy.DISCARD_LARGE_ARRAYS
        limit = self._max_array_size

        def visit(
            members: MessageMembers, node: TreeNode[str], indices: list[int], skip_save: bool
        ) -> None:
            for index, member in enumerate(members.members):
                child = node.child(index)
                index_array = list(indices)

                array_size = 1
                if member.is_array:
                    array_size = member.array_size or reader.read(FieldType.UINT32)

                if array_size > self.MAX_ARRAY_SIZE and member.type_id in (
                    FieldType.INT8,
                    FieldType.UINT8,
                ):
                    blob = reader.jump(array_size)
                    if not skip_save:
                        flat.blobs.append((StringTreeLeaf(child, index_array), blob))
                    continue

                if member.is_array:
                    index_array.append(0)
                    child = child.child(0)

                for a in range(array_size):
                    if member.is_array:
                        index_array[-1] = a
                    if (discard and array_size >= limit) or (not discard and a >= limit):
                        skip_save = True

                    if member.type_id is FieldType.MESSAGE:
                        if member.members is None:
                            raise ValueError(
                                f"member {member.name!r} has no message description"
                            )
                        visit(member.members, child, index_array, skip_save)
                    elif member.type_id is FieldType.STRING:
                        text = reader.read_string()
                        if not skip_save:
                            flat.strings.append((StringTreeLeaf(child, list(index_array)), text))
                    else:
                        value = float(reader.read(member.type_id))
                        if not skip_save:
                            flat.values.append((StringTreeLeaf(child, list(index_array)), value))

        visit(self._topic_info.introspection_support, self._field_tree.root, [], False)
        return flat