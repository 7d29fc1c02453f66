"""Tree subpackage: the jar's data model and the operations over it.

Re-exports the public API for the tree module:
- Node, NodeKind and the payload variants (Text, Number, Boolean,
  Dictionary, List, Expression)
- resolve / split_path / scope_for_path: dotted-path addressing
- deep_set, add_node, update_value, delete: immutable-update mutations
"""

from data_jar.tree.mutator import (
    add_node,
    deep_set,
    deep_set_with_outcome,
    delete,
    scope_nodes,
    scope_parent,
    update_value,
)
from data_jar.tree.nodes import (
    Boolean,
    Dictionary,
    Expression,
    List,
    Node,
    NodeKind,
    Number,
    Payload,
    Text,
    format_number,
    make_payload,
    new_id,
)
from data_jar.tree.path import children_of, find_child, resolve, scope_for_path, split_path

__all__ = [
    "Boolean",
    "Dictionary",
    "Expression",
    "List",
    "Node",
    "NodeKind",
    "Number",
    "Payload",
    "Text",
    "add_node",
    "children_of",
    "deep_set",
    "deep_set_with_outcome",
    "delete",
    "find_child",
    "format_number",
    "make_payload",
    "new_id",
    "resolve",
    "scope_for_path",
    "scope_nodes",
    "scope_parent",
    "split_path",
    "update_value",
]
