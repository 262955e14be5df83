import pytest

from pjros.tree import StringTreeLeaf, Tree, TreeNode, create_string_from_tree_leaf


def _array_tree():
    tree = Tree("topic")
    arr = tree.root.add_child("arr")
    item = arr.add_child("#")
    x = item.add_child("x")
    return tree, x


def test_add_child_links_parent_and_value():
    root = TreeNode(None, "root")
    child = root.add_child("a")
    assert child.parent is root
    assert child.value == "a"
    assert root.child(0) is child


def test_is_leaf():
    root = TreeNode(None, "root")
    assert root.is_leaf()
    root.add_child("a")
    assert not root.is_leaf()


def test_child_out_of_range():
    root = TreeNode(None, "root")
    root.add_child("a")
    with pytest.raises(IndexError):
        root.child(1)
    with pytest.raises(IndexError):
        root.child(-1)


def test_format_indents_by_depth():
    tree = Tree("root")
    tree.root.add_child("a").add_child("b")
    assert tree.format() == "root\n   a\n      b\n"
    assert str(tree) == tree.format()


def test_format_line_count_matches_nodes():
    tree = Tree("root")
    for name in ("a", "b", "c"):
        tree.root.add_child(name).add_child(name + "1")
    assert len(tree.format().splitlines()) == 7


def test_to_str_with_array_index():
    _, x = _array_tree()
    leaf = StringTreeLeaf(x, [3])
    assert leaf.to_str() == "topic/arr.3/x"
    assert str(leaf) == leaf.to_str()


def test_create_string_matches_to_str_without_skip():
    _, x = _array_tree()
    leaf = StringTreeLeaf(x, [7])
    assert create_string_from_tree_leaf(leaf, False) == leaf.to_str()


def test_create_string_skip_root():
    _, x = _array_tree()
    leaf = StringTreeLeaf(x, [3])
    skipped = create_string_from_tree_leaf(leaf, True)
    assert skipped == "arr.3/x"
    assert leaf.to_str() == "topic/" + skipped


def test_large_index_printed_whole():
    tree = Tree("topic")
    item = tree.root.add_child("#")
    leaf = StringTreeLeaf(item, [12345])
    assert leaf.to_str().endswith(".12345")


def test_nested_arrays_use_indices_in_order():
    tree = Tree("t")
    inner = tree.root.add_child("a").add_child("#").add_child("b").add_child("#")
    leaf = StringTreeLeaf(inner, [1, 2])
    text = leaf.to_str()
    assert text.index(".1") < text.index(".2")
    assert text.count(".") == 2


def test_leaf_without_node():
    leaf = StringTreeLeaf()
    with pytest.raises(ValueError):
        leaf.to_str()
    assert create_string_from_tree_leaf(leaf, True) == ""


def test_missing_index_raises():
    _, x = _array_tree()
    with pytest.raises(ValueError):
        StringTreeLeaf(x, []).to_str()