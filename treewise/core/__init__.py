"""Core abstractions for treewise.

This package contains the node type, the traversal algorithms and the
event registry that the Forest container is built from.
"""

from .node import TreeNode, get_value_id, value_fields
from .traverser import (
    TreeTraverser,
    PreOrderTraverser,
    PostOrderTraverser,
    BreadthFirstTraverser,
    create_traverser,
)
from .events import ForestEvent, EventRegistry

__all__ = [
    "TreeNode",
    "get_value_id",
    "value_fields",
    "TreeTraverser",
    "PreOrderTraverser",
    "PostOrderTraverser",
    "BreadthFirstTraverser",
    "create_traverser",
    "ForestEvent",
    "EventRegistry",
]
