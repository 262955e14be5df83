"""Tree of names and leaves that address one value inside a message."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")

SEPARATOR = "/"
NUM_PLACEHOLDER = "#"


class TreeNode(Generic[T]):
    """A node of a tree: one parent and any number of children."""

    __slots__ = ("parent", "value", "children")

    def __init__(self, parent: TreeNode[T] | None = None, value: T | None = None) -> None:
        self.parent = parent
        self.value = value
        self.children: list[TreeNode[T]] = []

    def add_child(self, value: T) -> TreeNode[T]:
        """Append a child holding ``value`` and return it."""
        node = TreeNode(self, value)
        self.children.append(node)
        return node

    def child(self, index: int) -> TreeNode[T]:
        """Return the child at ``index``."""
        if index < 0:
            raise IndexError(f"child index {index} out of range")
        return self.children[index]

    def is_leaf(self) -> bool:
        return not self.children

    def ancestors(self) -> Iterator[TreeNode[T]]:
        """Yield this node and then each parent up to the root."""
        node: TreeNode[T] | None = self
        while node is not None:
            yield node
            node = node.parent

    def __repr__(self) -> str:
        return f"TreeNode({self.value!r}, children={len(self.children)})"


class Tree(Generic[T]):
    """A tree with a single root node."""

    def __init__(self, root_value: T | None = None) -> None:
        self.root: TreeNode[T] = TreeNode(None, root_value)

    def format(self) -> str:
        """Return the tree as text, one node per line, indented by depth."""
        lines: list[str] = []

        def visit(node: TreeNode[T], indent: int) -> None:
            lines.append(" " * indent + str(node.value))
            for child in node.children:
                visit(child, indent + 3)

        visit(self.root, 0)
        return "".join(line + "\n" for line in lines)

    def __str__(self) -> str:
        return self.format()


StringTreeNode = TreeNode[str]
StringTree = Tree[str]


@dataclass
class StringTreeLeaf:
    """A terminal node of a string tree plus the indices standing for each ``#``.

    The branch ``foo -> # -> bar -> # -> hello`` with ``index_array`` ``[2, 3]``
    reads as ``foo.2/bar.3/hello``.
    """

    node: TreeNode[str] | None = None
    index_array: list[int] = field(default_factory=list)

    def to_str(self) -> str:
        """Return the full path of the leaf, from the root down."""
        if self.node is None:
            raise ValueError("leaf does not point to any node")
        return _join_chain(self, _chain(self.node, skip_root=False))

    def __str__(self) -> str:
        return self.to_str()


def _chain(node: TreeNode[str], skip_root: bool) -> list[str]:
    values = [n.value for n in node.ancestors() if not (skip_root and n.parent is None)]
    values.reverse()
    return values


def _join_chain(leaf: StringTreeLeaf, chain: list[str]) -> str:
    parts: list[str] = []
    indices = iter(leaf.index_array)
    for position, value in enumerate(chain):
        if value == NUM_PLACEHOLDER:
            try:
                number = next(indices)
            except StopIteration:
                raise ValueError("leaf has fewer indices than array placeholders") from None
            parts.append(f".{number}")
        else:
            if position != 0:
                parts.append(SEPARATOR)
            parts.append(value)
    return "".join(parts)


def create_string_from_tree_leaf(leaf: StringTreeLeaf, skip_root: bool) -> str:
    """Return the path of ``leaf``, leaving out the root when ``skip_root`` is true.

    A leaf that points to no node gives an empty string.
    """
    if leaf.node is None:
        return ""
    return _join_chain(leaf, _chain(leaf.node, skip_root))