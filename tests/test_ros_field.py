import pytest

from pjros.ros_field import ROSField
from pjros.ros_type import BuiltinType


def test_scalar_field():
    field = ROSField("float64 x")
    assert field.name == "x"
    assert field.type.base_name == "float64"
    assert field.type.type_id is BuiltinType.FLOAT64
    assert field.array_size == 1
    assert not field.is_array
    assert not field.is_constant


def test_variable_array():
    field = ROSField("int32[] data")
    assert field.type.base_name == "int32"
    assert field.array_size == -1
    assert field.is_array


def test_fixed_array():
    field = ROSField("uint8[16] bytes")
    assert field.type.base_name == "uint8"
    assert field.array_size == 16
    assert field.is_array


def test_message_type_with_package():
    field = ROSField("geometry_msgs/Point position")
    assert field.type.pkg_name == "geometry_msgs"
    assert field.type.msg_name == "Point"
    assert field.name == "position"
    assert not field.type.is_builtin


def test_numeric_constant_drops_comment():
    field = ROSField("int32 FOO=42 # the answer")
    assert field.name == "FOO"
    assert field.value == "42"
    assert field.is_constant


def test_string_constant_keeps_hash():
    field = ROSField("string NAME= hello # world ")
    assert field.value == "hello # world"
    assert field.is_constant


def test_trailing_comment_is_ignored():
    field = ROSField("float64 x   # metres")
    assert field.value == ""
    assert not field.is_constant


@pytest.mark.parametrize("line", ["123", "float64", "float64 x ! bad"])
def test_bad_lines_raise(line):
    with pytest.raises(ValueError):
        ROSField(line)