"""Renaming of array elements in a flat message by means of substitution rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from pjros.introspection import BlobPolicy, FlatMessage, Parser
from pjros.ros_type import BuiltinType, ROSType
from pjros.substitution_rule import SubstitutionRule
from pjros.tree import NUM_PLACEHOLDER, StringTreeLeaf, TreeNode, create_string_from_tree_leaf

SUBSTITUTION_PLACEHOLDER = "@"


def find_pattern(pattern: Sequence[str], tail: TreeNode[str]) -> TreeNode[str] | None:
    """Search the tree below ``tail`` for a chain of nodes spelling ``pattern``.

    Return the node holding the last element of the pattern, or None.
    """
    if not pattern:
        raise ValueError("pattern must not be empty")
    head: TreeNode[str] | None = None

    def search(index: int, node: TreeNode[str]) -> bool:
        nonlocal head
        if node.value == pattern[index]:
            index += 1
        elif index > 0:
            # a partial match broke off: restart the match from this node
            search(0, node)
            return False
        if index == len(pattern):
            head = node
            return True
        return any(search(index, child) for child in node.children)

    search(0, tail)
    return head


def pattern_match_and_index_position(leaf: StringTreeLeaf, pattern_head: TreeNode[str]) -> int:
    """Return the position in ``leaf.index_array`` of the array index at ``pattern_head``.

    Return -1 when ``pattern_head`` is not on the branch of the leaf.
    """
    pos = len(leaf.index_array) - 1
    node = leaf.node
    while node is not None:
        if node is pattern_head:
            return pos
        if node.value == NUM_PLACEHOLDER:
            pos -= 1
        node = node.parent
    return -1


@dataclass
class RulesCache:
    """A rule with the tree nodes where its pattern and its alias end."""

    rule: SubstitutionRule
    pattern_head: TreeNode[str] | None = None
    alias_head: TreeNode[str] | None = None


def _index_at(leaf: StringTreeLeaf, position: int) -> int:
    if position < 0 or position >= len(leaf.index_array):
        raise ValueError("leaf has fewer indices than the rule requires")
    return leaf.index_array[position]


class RenamingParser(Parser):
    """A parser that can also rename the values of a flat message with substitution rules."""

    def __init__(
        self,
        blob_policy: BlobPolicy = BlobPolicy.STORE_BLOB_AS_COPY,
        discard_large_arrays: bool = True,
    ) -> None:
        super().__init__(blob_policy, discard_large_arrays)
        self._registered_rules: dict[ROSType, list[SubstitutionRule]] = {}
        self._rule_caches: dict[str, list[RulesCache]] = {}
        self._rule_cache_dirty = False

    def register_message_definition(
        self, msg_identifier: str, main_type: ROSType | str, definition: str
    ) -> None:
        if msg_identifier in self.registered_messages:
            return
        super().register_message_definition(msg_identifier, main_type, definition)
        self._rule_cache_dirty = True

    def register_renaming_rules(
        self, type: ROSType | str, rules: Iterable[SubstitutionRule]
    ) -> None:
        """Add ``rules`` for messages that contain ``type``; repeated rules are ignored."""
        if isinstance(type, str):
            type = ROSType(type)
        rule_list = self._registered_rules.setdefault(type, [])
        for rule in rules:
            if rule not in rule_list:
                rule_list.append(rule)
                self._rule_cache_dirty = True

    def _update_rule_cache(self) -> None:
        if not self._rule_cache_dirty:
            return
        self._rule_cache_dirty = False
        for type, rule_list in self._registered_rules.items():
            for msg_identifier, info in self.registered_messages.items():
                if self.get_message_by_type(type, info) is None:
                    continue
                cache_list = self._rule_caches.setdefault(msg_identifier, [])
                root = info.string_tree.root
                for rule in rule_list:
                    cache = RulesCache(
                        rule, find_pattern(rule.pattern, root), find_pattern(rule.alias, root)
                    )
                    if (
                        cache.pattern_head is not None
                        and cache.alias_head is not None
                        and cache not in cache_list
                    ):
                        cache_list.append(cache)

    def apply_name_transform(
        self, msg_identifier: str, container: FlatMessage, skip_topicname: bool = False
    ) -> list[tuple[str, BuiltinType, Any]]:
        """Return (name, builtin type, value) for every value and then every string.

        Values matched by a rule are named after the alias string of the same
        array index; all others keep the name of their leaf.
        """
        self._update_rule_cache()
        values = container.value
        names = container.name
        renamed: list[tuple[str, BuiltinType, Any] | None] = [None] * len(values)

        for cache in self._rule_caches.get(msg_identifier, []):
            pattern_head, alias_head = cache.pattern_head, cache.alias_head
            if pattern_head is None or alias_head is None:
                continue
            alias_positions = [
                pattern_match_and_index_position(leaf, alias_head) for leaf, _ in names
            ]
            for value_index, (leaf, type_id, value) in enumerate(values):
                if renamed[value_index] is not None:
                    continue
                pattern_pos = pattern_match_and_index_position(leaf, pattern_head)
                if pattern_pos < 0:
                    continue
                new_name = ""
                for (alias_leaf, text), alias_pos in zip(names, alias_positions):
                    if alias_pos >= 0 and (
                        alias_leaf.index_array[alias_pos] == leaf.index_array[pattern_pos]
                    ):
                        new_name = text
                        break
                if not new_name:
                    continue
                name = self._substituted_name(
                    leaf, pattern_head, cache.rule, new_name, skip_topicname
                )
                renamed[value_index] = (name, type_id, value)

        result: list[tuple[str, BuiltinType, Any]] = []
        for entry, (leaf, type_id, value) in zip(renamed, values):
            if entry is None:
                entry = (create_string_from_tree_leaf(leaf, skip_topicname), type_id, value)
            result.append(entry)
        for leaf, text in names:
            result.append(
                (create_string_from_tree_leaf(leaf, skip_topicname), BuiltinType.STRING, text)
            )
        return result

    @staticmethod
    def _substituted_name(
        leaf: StringTreeLeaf,
        pattern_head: TreeNode[str],
        rule: SubstitutionRule,
        new_name: str,
        skip_topicname: bool,
    ) -> str:
        parts: list[str] = []
        position = len(leaf.index_array) - 1
        node = leaf.node

        def take(stop: TreeNode[str] | None) -> TreeNode[str] | None:
            nonlocal position
            current = node
            while current is not None and current is not stop:
                if current.value == NUM_PLACEHOLDER:
                    parts.append(str(_index_at(leaf, position)))
                    position -= 1
                else:
                    parts.append(current.value)
                current = current.parent
            return current

        node = take(pattern_head)

        for piece in reversed(rule.substitution):
            if piece == SUBSTITUTION_PLACEHOLDER:
                parts.append(new_name)
                position -= 1
            else:
                parts.append(piece)

        for _ in range(len(rule.pattern)):
            if node is None:
                break
            node = node.parent

        take(None)

        if skip_topicname and parts:
            parts.pop()
        parts.reverse()
        return "/".join(parts)