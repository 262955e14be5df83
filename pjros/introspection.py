"""Registration of message definitions and decoding of buffers into flat lists of values."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping

from pjros.base import DeserializationError, Ros1Reader
from pjros.ros_message import ROSMessage
from pjros.ros_type import BuiltinType, ROSType, builtin_size
from pjros.tree import NUM_PLACEHOLDER, StringTreeLeaf, Tree, TreeNode

_SEPARATOR_RE = re.compile(r"^\s*=+\n+", re.MULTILINE)


class BlobPolicy(Enum):
    """How the bytes of a large byte array are kept in a flat message."""

    STORE_BLOB_AS_COPY = "copy"
    STORE_BLOB_AS_REFERENCE = "reference"


@dataclass
class ROSMessageInfo:
    """Everything known about one registered message: its types and its trees."""

    string_tree: Tree[str]
    message_tree: Tree[ROSMessage]
    type_list: list[ROSMessage]


@dataclass
class FlatMessage:
    """The values of one decoded message, each addressed by a leaf of the string tree.

    ``value`` holds (leaf, builtin type, value) for every number, time or duration,
    ``name`` holds (leaf, text) for every string and ``blob`` holds (leaf, bytes)
    for every byte array larger than the array limit. ``complete`` is false when
    some large array was not stored in full.
    """

    tree: Tree[str] | None = None
    value: list[tuple[StringTreeLeaf, BuiltinType, Any]] = field(default_factory=list)
    name: list[tuple[StringTreeLeaf, str]] = field(default_factory=list)
    blob: list[tuple[StringTreeLeaf, bytes | memoryview]] = field(default_factory=list)
    complete: bool = True


VisitingCallback = Callable[[ROSType, memoryview], None]


class Parser:
    """Keeps registered message definitions and decodes buffers of those messages."""

    def __init__(
        self,
        blob_policy: BlobPolicy = BlobPolicy.STORE_BLOB_AS_COPY,
        discard_large_arrays: bool = True,
    ) -> None:
        self.blob_policy = blob_policy
        self.discard_large_arrays = discard_large_arrays
        self._registered_messages: dict[str, ROSMessageInfo] = {}

    @property
    def registered_messages(self) -> Mapping[str, ROSMessageInfo]:
        return MappingProxyType(self._registered_messages)

    def register_message_definition(
        self, msg_identifier: str, main_type: ROSType | str, definition: str
    ) -> None:
        """Parse ``definition`` and register it under ``msg_identifier``; repeats are ignored."""
        if msg_identifier in self._registered_messages:
            return
        if isinstance(main_type, str):
            main_type = ROSType(main_type)

        type_list: list[ROSMessage] = []
        for position, section in enumerate(_SEPARATOR_RE.split(definition)):
            msg = ROSMessage(section)
            if position == 0:
                msg.mutate_type(main_type)
            type_list.append(msg)

        all_types = [msg.type for msg in type_list]
        for msg in type_list:
            msg.update_missing_pkg_names(all_types)

        info = ROSMessageInfo(Tree(msg_identifier), Tree(type_list[0]), type_list)
        self._create_trees(info)
        self._registered_messages[msg_identifier] = info

    def _create_trees(self, info: ROSMessageInfo) -> None:
        def build(
            msg_def: ROSMessage, string_node: TreeNode[str], msg_node: TreeNode[ROSMessage]
        ) -> None:
            for fld in msg_def.fields:
                if fld.is_constant:
                    continue
                new_string_node = string_node.add_child(fld.name)
                if fld.is_array:
                    new_string_node = new_string_node.add_child(NUM_PLACEHOLDER)
                if not fld.type.is_builtin:
                    next_msg = self.get_message_by_type(fld.type, info)
                    if next_msg is None:
                        raise ValueError(f"This type was not registered: {fld.type.base_name}")
                    new_msg_node = msg_node.add_child(next_msg)
                    build(next_msg, new_string_node, new_msg_node)

        build(info.type_list[0], info.string_tree.root, info.message_tree.root)

    def get_message_info(self, msg_identifier: str) -> ROSMessageInfo | None:
        return self._registered_messages.get(msg_identifier)

    def get_message_by_type(self, type: ROSType, info: ROSMessageInfo) -> ROSMessage | None:
        """Return the message of ``info`` whose type is ``type``, or None."""
        for msg in info.type_list:
            if msg.type == type:
                return msg
        return None

    def _require_info(self, msg_identifier: str) -> ROSMessageInfo:
        info = self.get_message_info(msg_identifier)
        if info is None:
            raise KeyError(
                f"message {msg_identifier!r} is not registered; "
                "use register_message_definition"
            )
        return info

    def apply_visitor_to_buffer(
        self,
        msg_identifier: str,
        monitored_type: ROSType | str,
        buffer: bytes | bytearray | memoryview,
        callback: VisitingCallback,
    ) -> None:
        """Call ``callback`` with the bytes of every part of ``buffer`` of ``monitored_type``.

        With a bytearray the view handed to the callback is writable.
        """
        info = self._require_info(msg_identifier)
        if isinstance(monitored_type, str):
            monitored_type = ROSType(monitored_type)
        if self.get_message_by_type(monitored_type, info) is None:
            return

        reader = Ros1Reader(buffer)
        view = memoryview(buffer)

        def visit(msg_node: TreeNode[ROSMessage]) -> None:
            msg_def = msg_node.value
            matching = msg_def.type == monitored_type
            start = reader.offset
            index_m = 0
            for fld in msg_def.fields:
                if fld.is_constant:
                    continue
                array_size = fld.array_size
                if array_size == -1:
                    array_size = reader.read(BuiltinType.INT32)
                if fld.type.is_builtin:
                    for _ in range(array_size):
                        reader.read(fld.type.type_id)
                else:
                    for _ in range(array_size):
                        visit(msg_node.child(index_m))
                    index_m += 1
            if matching:
                callback(monitored_type, view[start : reader.offset])

        visit(info.message_tree.root)

    def deserialize_into_flat_container(
        self,
        msg_identifier: str,
        buffer: bytes | bytearray | memoryview,
        max_array_size: int = 100,
    ) -> FlatMessage:
        """Decode ``buffer`` into a flat message.

        Byte arrays longer than ``max_array_size`` become blobs; other long arrays
        are dropped or cut to ``max_array_size`` elements depending on
        ``discard_large_arrays``.
        """
        info = self._require_info(msg_identifier)
        reader = Ros1Reader(buffer)
        view = memoryview(buffer)
        flat = FlatMessage(tree=info.string_tree)

        def visit(
            msg_node: TreeNode[ROSMessage],
            string_node: TreeNode[str],
            indices: list[int],
            store: bool,
        ) -> None:
            index_s = 0
            index_m = 0
            for fld in msg_node.value.fields:
                if fld.is_constant:
                    continue
                do_store = store
                type_id = fld.type.type_id

                node = string_node.child(index_s)
                index_array = list(indices)

                array_size = fld.array_size
                if array_size == -1:
                    array_size = reader.read(BuiltinType.INT32)
                if fld.is_array:
                    index_array.append(0)
                    node = node.child(0)

                is_blob = False
                if array_size > max_array_size and type_id is not BuiltinType.OTHER:
                    if builtin_size(type_id) == 1:
                        is_blob = True
                    else:
                        if self.discard_large_arrays:
                            do_store = False
                        flat.complete = False

                if is_blob:
                    start = reader.offset
                    chunk = reader.read_bytes(array_size)
                    if do_store:
                        if self.blob_policy is BlobPolicy.STORE_BLOB_AS_COPY:
                            blob: bytes | memoryview = chunk
                        else:
                            blob = view[start : start + array_size]
                        flat.blob.append((StringTreeLeaf(node, list(index_array)), blob))
                else:
                    store_array = do_store
                    for i in range(array_size):
                        if store_array and i >= max_array_size:
                            store_array = False
                        if fld.is_array and store_array:
                            index_array[-1] = i

                        if type_id is BuiltinType.STRING:
                            text = reader.read_string()
                            if store_array:
                                flat.name.append((StringTreeLeaf(node, list(index_array)), text))
                        elif fld.type.is_builtin:
                            value = reader.read(type_id)
                            if store_array:
                                flat.value.append(
                                    (StringTreeLeaf(node, list(index_array)), type_id, value)
                                )
                        else:
                            visit(msg_node.child(index_m), node, index_array, store_array)

                if type_id is BuiltinType.OTHER:
                    index_m += 1
                index_s += 1

        visit(info.message_tree.root, info.string_tree.root, [], True)

        # Messages written by some serial bridges carry one trailing byte.
        if reader.remaining > 1:
            raise DeserializationError(
                "There was an error parsing the buffer. "
                f"Size {reader.offset} != {reader.offset + reader.remaining}, "
                f"while parsing [{msg_identifier}]"
            )
        return flat