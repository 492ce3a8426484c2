"""treewise - In-memory forest (multi-root tree) library.

treewise provides a Forest container with O(1) id lookup, safe structural
edits (add, remove, move with cycle prevention), depth-bounded traversal,
path and sibling queries, validation, change events and three
serialization formats.

Quick start:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from treewise import Forest

    forest = Forest({"id": 1, "name": "CEO"})
    cto = forest.add_child(forest.roots[0], {"id": 2, "name": "CTO"})
    forest.find_by_id(2) is cto
━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

__version__ = "1.0.0"

from .errors import (
    ForestError,
    InvalidArgumentError,
    NodeNotFoundError,
    CircularReferenceError,
    VersionMismatchError,
    MalformedDataError,
)
from ._common.config import (
    TraversalStrategy,
    OrphanPolicy,
    DepthConfig,
    ForestConfig,
    DEFAULT_FORMAT_VERSION,
)
from .core import (
    TreeNode,
    get_value_id,
    value_fields,
    TreeTraverser,
    PreOrderTraverser,
    PostOrderTraverser,
    BreadthFirstTraverser,
    create_traverser,
    ForestEvent,
    EventRegistry,
)
from .cloning import deep_copy, iter_batches
from .validation import ValidationResult, validate_forest
from .forest import Forest
from .api import (
    build_forest,
    load_forest,
    traverse_forest,
    find_nodes,
    get_forest_stats,
)

__all__ = [
    "__version__",
    # Errors
    "ForestError",
    "InvalidArgumentError",
    "NodeNotFoundError",
    "CircularReferenceError",
    "VersionMismatchError",
    "MalformedDataError",
    # Config
    "TraversalStrategy",
    "OrphanPolicy",
    "DepthConfig",
    "ForestConfig",
    "DEFAULT_FORMAT_VERSION",
    # Core
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
    # Utilities
    "deep_copy",
    "iter_batches",
    "ValidationResult",
    "validate_forest",
    # Container
    "Forest",
    # API
    "build_forest",
    "load_forest",
    "traverse_forest",
    "find_nodes",
    "get_forest_stats",
]
