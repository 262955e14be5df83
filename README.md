# pjros

`pjros` decodes serialized ROS messages into flat lists of named values. Each
value is addressed by its path in the message, such as `/point/x` or
`/joints/position.3`, which makes the result easy to turn into time series for
plotting.

The package depends only on the standard library.

## Modules

- `pjros.tree` has the trees of field names. It provides `TreeNode`, `Tree` and
  `StringTreeLeaf`. The leaf is a node plus the indices that stand for each `#`
  array placeholder. It also has `create_string_from_tree_leaf`.
- `pjros.ros_type`, `pjros.ros_field` and `pjros.ros_message` parse the text
  of ROS 1 message definitions. They handle type names, fields, fixed and
  variable arrays, and constants.
- `pjros.introspection.Parser` registers a full message definition, including
  the `MSG:` sections of nested types, and flattens a serialized ROS 1 buffer
  into a `FlatMessage`:
  - `value` holds numbers, times and durations;
  - `name` holds strings;
  - `blob` holds byte arrays longer than `max_array_size`.

  Other long arrays are either dropped or cut to `max_array_size` elements,
  depending on `discard_large_arrays`. `apply_visitor_to_buffer` calls back with
  the bytes of every part of a buffer that has a given type.
- `pjros.renaming.RenamingParser` adds `SubstitutionRule`s (from
  `pjros.substitution_rule`). A rule renames the elements of one array after the
  string of the same index in another array.
- `pjros.ros2_introspection.Parser` decodes CDR payloads. You describe the type
  with `MessageMembers` and `MessageMember`, wrap it in a `TopicInfo`, and read
  the result as a `FlatMessage` with `values`, `strings` and `blobs`.
  `MaxArrayPolicy` and `set_max_array_policy` control what happens to long
  arrays.
- `pjros.base` has the building blocks for parsers that fill time series:
  - `Series` and `PlotDataMap` store the samples;
  - `ParserConfig` holds the parser settings;
  - `parse_double` reads numbers from text, optionally dropping a unit suffix or
    reading `true`/`false` as 1 and 0;
  - `Ros1Reader` reads little-endian values;
  - the abstract classes `MessageParser` and `BuiltinMessageParser` are the base
    for such parsers.

## Usage

### ROS 1, from a message definition

```python
import struct
from pjros.introspection import Parser

parser = Parser()
parser.register_message_definition(
    "/point", "my_pkg/Point", "float64 x\nfloat64 y\nstring label\n"
)

buffer = struct.pack("<dd", 1.5, 2.5) + struct.pack("<I", 3) + b"abc"
flat = parser.deserialize_into_flat_container("/point", buffer)

for leaf, type_id, value in flat.value:
    print(leaf.to_str(), value)   # /point/x 1.5, then /point/y 2.5
for leaf, text in flat.name:
    print(leaf.to_str(), text)    # /point/label abc
```

### Renaming array elements

```python
import struct
from pjros.renaming import RenamingParser
from pjros.substitution_rule import SubstitutionRule

parser = RenamingParser()
parser.register_message_definition(
    "/js", "my_pkg/Joints", "string[] name\nfloat64[] position\n"
)
parser.register_renaming_rules(
    "my_pkg/Joints", [SubstitutionRule("position.#", "name.#", "@.position")]
)

buffer = (
    struct.pack("<i", 2)
    + struct.pack("<I", 5) + b"elbow"
    + struct.pack("<I", 5) + b"wrist"
    + struct.pack("<i", 2) + struct.pack("<dd", 0.1, 0.2)
)
flat = parser.deserialize_into_flat_container("/js", buffer)
for name, type_id, value in parser.apply_name_transform("/js", flat):
    print(name, value)
# /js/elbow/position 0.1
# /js/wrist/position 0.2
# /js/name.0 elbow
# /js/name.1 wrist
```

### ROS 2, CDR payloads

```python
import struct
from pjros.ros2_introspection import (
    FieldType, MessageMember, MessageMembers, Parser, TopicInfo,
)

members = MessageMembers("my_pkg::msg", "Point", [
    MessageMember("x", FieldType.DOUBLE),
    MessageMember("y", FieldType.DOUBLE),
])
parser = Parser("/point", TopicInfo("my_pkg/msg/Point", members))

payload = b"\x00\x01\x00\x00" + struct.pack("<dd", 1.0, 2.0)
flat = parser.deserialize_into_flat_message(payload)
print([(leaf.to_str(), value) for leaf, value in flat.values])
# [('/point/x', 1.0), ('/point/y', 2.0)]
```

## What it does not do

- It provides no ready-made parsers for particular message types, such as
  headers, poses, IMU or TF.
- It provides no parser that takes a topic name and a type and fills a
  `PlotDataMap` by itself. The flat messages that the parsers return must be
  turned into series by the caller, for example by subclassing
  `MessageParser`.
- It does not find ROS 2 type descriptions on its own. The `MessageMembers`
  for each type must be supplied.
- It has no command-line interface and no plotting.

## Running the tests

```
pip install .[test]
pytest
```