"""Rules that rename array elements by the value of a sibling string field."""

from __future__ import annotations

import re


def str_split(text: str, delimiters: str) -> list[str]:
    """Split ``text`` at every character found in ``delimiters``; empty parts are kept."""
    if not delimiters:
        return [text]
    return re.split("[" + re.escape(delimiters) + "]", text)


class SubstitutionRule:
    """A pattern, the alias that names its elements, and the substitution to produce."""

    __slots__ = (
        "full_pattern",
        "full_alias",
        "full_substitution",
        "pattern",
        "alias",
        "substitution",
    )

    def __init__(self, pattern: str, alias: str, substitution: str) -> None:
        self.full_pattern = pattern
        self.full_alias = alias
        self.full_substitution = substitution
        self.pattern = tuple(str_split(pattern, "./"))
        self.alias = tuple(str_split(alias, "./"))
        self.substitution = tuple(str_split(substitution, "./"))

    def _key(self) -> tuple[str, str, str]:
        return (self.full_pattern, self.full_alias, self.full_substitution)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SubstitutionRule):
            return self._key() == other._key()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"SubstitutionRule({self.full_pattern!r}, {self.full_alias!r}, "
            f"{self.full_substitution!r})"
        )