"""A single message definition: its type and the list of its fields."""

from __future__ import annotations

import re
from typing import Iterable

from pjros.ros_field import ROSField
from pjros.ros_type import ROSType

_SKIP_RE = re.compile(r"\s*$|\s*#")


class ROSMessage:
    """Fields parsed from the text of one message definition."""

    __slots__ = ("type", "fields")

    def __init__(self, msg_def: str) -> None:
        self.type = ROSType("")
        self.fields: list[ROSField] = []
        for line in msg_def.split("\n"):
            if _SKIP_RE.match(line):
                continue
            line = line.lstrip()
            if line.startswith("MSG: "):
                self.type = ROSType(line[5:])
            else:
                self.fields.append(ROSField(line))

    def mutate_type(self, new_type: ROSType) -> None:
        """Replace the type of this message."""
        self.type = new_type

    def update_missing_pkg_names(self, all_types: Iterable[ROSType]) -> None:
        """Give fields without a package the package of a known type of the same name."""
        known = list(all_types)
        for field in self.fields:
            if field.type.pkg_name:
                continue
            for known_type in known:
                if field.type.msg_name == known_type.msg_name:
                    field.type.set_pkg_name(known_type.pkg_name)
                    break

    def __repr__(self) -> str:
        return f"ROSMessage({self.type.base_name!r}, fields={[f.name for f in self.fields]})"