import struct

import pytest

from pjros.renaming import (
    RenamingParser,
    RulesCache,
    find_pattern,
    pattern_match_and_index_position,
)
from pjros.ros_type import BuiltinType
from pjros.substitution_rule import SubstitutionRule
from pjros.tree import StringTreeLeaf, TreeNode

DEFINITION = "string[] name\nfloat64[] position\n"
TOPIC = "js"


def _u32(n):
    return struct.pack("<I", n)


def _str(s):
    data = s.encode()
    return _u32(len(data)) + data


def _message(names, positions):
    buf = _u32(len(names)) + b"".join(_str(n) for n in names)
    buf += _u32(len(positions)) + struct.pack(f"<{len(positions)}d", *positions)
    return buf


def _parser():
    parser = RenamingParser()
    parser.register_message_definition(TOPIC, "sensor_msgs/JointState", DEFINITION)
    return parser


JOINT_RULE = SubstitutionRule("position.#", "name.#", "@.position")


def _tree():
    root = TreeNode(None, "t")
    a = root.add_child("a")
    a_hash = a.add_child("#")
    b = root.add_child("b")
    b_hash = b.add_child("#")
    return root, a, a_hash, b, b_hash


def test_find_pattern_finds_last_node():
    root, _, _, _, b_hash = _tree()
    assert find_pattern(("b", "#"), root) is b_hash


def test_find_pattern_missing():
    root, *_ = _tree()
    assert find_pattern(("x",), root) is None


def test_find_pattern_empty_raises():
    root, *_ = _tree()
    with pytest.raises(ValueError):
        find_pattern((), root)


def test_pattern_match_position_at_head():
    _, _, a_hash, _, _ = _tree()
    leaf = StringTreeLeaf(a_hash, [3])
    assert pattern_match_and_index_position(leaf, a_hash) == 0


def test_pattern_match_position_not_on_branch():
    _, _, a_hash, b, _ = _tree()
    leaf = StringTreeLeaf(a_hash, [3])
    assert pattern_match_and_index_position(leaf, b) == -1


def test_pattern_match_position_nested():
    root = TreeNode(None, "t")
    outer = root.add_child("arr").add_child("#")
    inner = outer.add_child("inner").add_child("#")
    leaf = StringTreeLeaf(inner, [1, 2])
    assert pattern_match_and_index_position(leaf, outer) == 0
    assert pattern_match_and_index_position(leaf, inner) == 1


def test_rules_cache_equality_by_identity_of_nodes():
    root, *_ = _tree()
    assert RulesCache(JOINT_RULE, root, root) == RulesCache(JOINT_RULE, root, root)
    assert not RulesCache(JOINT_RULE, root, None) == RulesCache(JOINT_RULE, root, root)


def test_without_rules_names_come_from_leaves():
    parser = _parser()
    flat = parser.deserialize_into_flat_container(TOPIC, _message(["a", "b"], [1.0, 2.0]))
    renamed = parser.apply_name_transform(TOPIC, flat)
    names = [name for name, _, _ in renamed]
    assert names == [
        f"{TOPIC}/position.0",
        f"{TOPIC}/position.1",
        f"{TOPIC}/name.0",
        f"{TOPIC}/name.1",
    ]


def test_rule_renames_values_by_alias():
    parser = _parser()
    parser.register_renaming_rules("sensor_msgs/JointState", [JOINT_RULE])
    flat = parser.deserialize_into_flat_container(TOPIC, _message(["a", "b"], [1.5, 2.5]))
    renamed = parser.apply_name_transform(TOPIC, flat)
    assert renamed[0] == (f"{TOPIC}/a/position", BuiltinType.FLOAT64, 1.5)
    assert renamed[1] == (f"{TOPIC}/b/position", BuiltinType.FLOAT64, 2.5)
    assert renamed[2] == (f"{TOPIC}/name.0", BuiltinType.STRING, "a")
    assert len(renamed) == 4


def test_rule_with_skip_topicname():
    parser = _parser()
    parser.register_renaming_rules("sensor_msgs/JointState", [JOINT_RULE])
    flat = parser.deserialize_into_flat_container(TOPIC, _message(["a"], [3.0]))
    renamed = parser.apply_name_transform(TOPIC, flat, skip_topicname=True)
    assert renamed[0][0] == "a/position"
    assert renamed[1][0] == "name.0"


def test_rule_for_other_type_is_not_applied():
    parser = _parser()
    parser.register_renaming_rules("other_msgs/Foo", [JOINT_RULE])
    flat = parser.deserialize_into_flat_container(TOPIC, _message(["a"], [3.0]))
    renamed = parser.apply_name_transform(TOPIC, flat)
    assert renamed[0][0] == f"{TOPIC}/position.0"


def test_value_without_alias_keeps_leaf_name():
    parser = _parser()
    parser.register_renaming_rules("sensor_msgs/JointState", [JOINT_RULE])
    flat = parser.deserialize_into_flat_container(TOPIC, _message(["a"], [1.0, 2.0]))
    renamed = parser.apply_name_transform(TOPIC, flat)
    assert renamed[0][0] == f"{TOPIC}/a/position"
    assert renamed[1][0] == f"{TOPIC}/position.1"


def test_duplicate_rules_give_same_result():
    parser = _parser()
    parser.register_renaming_rules("sensor_msgs/JointState", [JOINT_RULE, JOINT_RULE])
    parser.register_renaming_rules("sensor_msgs/JointState", [JOINT_RULE])
    flat = parser.deserialize_into_flat_container(TOPIC, _message(["a", "b"], [1.0, 2.0]))
    first = parser.apply_name_transform(TOPIC, flat)
    second = parser.apply_name_transform(TOPIC, flat)
    assert first == second
    assert [n for n, _, _ in first[:2]] == [f"{TOPIC}/a/position", f"{TOPIC}/b/position"]


def test_rules_registered_before_message():
    parser = RenamingParser()
    parser.register_renaming_rules("sensor_msgs/JointState", [JOINT_RULE])
    parser.register_message_definition(TOPIC, "sensor_msgs/JointState", DEFINITION)
    flat = parser.deserialize_into_flat_container(TOPIC, _message(["z"], [4.0]))
    renamed = parser.apply_name_transform(TOPIC, flat)
    assert renamed[0] == (f"{TOPIC}/z/position", BuiltinType.FLOAT64, 4.0)