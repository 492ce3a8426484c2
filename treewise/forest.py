"""The Forest container.

A Forest owns an ordered list of root nodes, an id -> node index covering
exactly the nodes reachable from those roots, and a registry of change
handlers. Every public mutation keeps the index consistent with the
linked structure before it returns.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Tuple, TypeVar, Union

from ._common.config import ForestConfig, TraversalStrategy
from .core.events import EventHandler, EventRegistry, ForestEvent
from .core.node import TreeNode, get_value_id
from .core.traverser import BreadthFirstTraverser, create_traverser
from .errors import (
    CircularReferenceError,
    InvalidArgumentError,
    NodeNotFoundError,
)
from . import serialization
from .validation import ValidationResult, validate_forest

logger = logging.getLogger(__name__)

U = TypeVar('U')
NodeCallback = Callable[[TreeNode, int], None]
NodePredicate = Callable[[TreeNode], bool]


class Forest:
    """Multi-root tree container with O(1) id lookup.

    Example:
        >>> forest = Forest({"id": 1, "name": "CEO"})
        >>> cto = forest.add_child(forest.roots[0], {"id": 2, "name": "CTO"})
        >>> [n.id for n in forest.get_path(cto)]
        [1, 2]

    Not thread-safe. Event handlers must not mutate the forest that is
    calling them.
    """

    def __init__(self, root_value: Any = None, config: Optional[ForestConfig] = None):
        """Create a forest, optionally holding a single root.

        Args:
            root_value: If given, becomes the value of the first root
            config: Forest configuration (defaults to ForestConfig())

        Raises:
            InvalidArgumentError: If the configuration is invalid
        """
        self.config = config or ForestConfig()
        config_errors = self.config.validate()
        if config_errors:
            raise InvalidArgumentError(
                f"Invalid configuration: {'; '.join(config_errors)}"
            )

        self.roots: List[TreeNode] = []
        self._index: Dict[Any, TreeNode] = {}
        self._events = EventRegistry()

        if root_value is not None:
            self.add_root(TreeNode(root_value))

    @property
    def format_version(self) -> int:
        return self.config.format_version

    # Indexing

    def _index_subtree(self, node: TreeNode, index: Optional[Dict[Any, TreeNode]] = None) -> None:
        # Colliding ids overwrite; validate_tree reports the duplicates
        index = self._index if index is None else index
        for current in node.iter_subtree():
            for child in current.children:
                child.parent = current
            index[current.id] = current

    def _unindex_subtree(self, node: TreeNode) -> None:
        for current in node.iter_subtree():
            if self._index.get(current.id) is current:
                del self._index[current.id]

    def _replace_roots(self, roots: List[TreeNode]) -> None:
        """Install freshly decoded trees, swapping roots and index together."""
        index: Dict[Any, TreeNode] = {}
        for root in roots:
            root.parent = None
            self._index_subtree(root, index)
        self.roots = list(roots)
        self._index = index

    def _require_member(self, node: TreeNode, role: str) -> None:
        if node is None:
            raise InvalidArgumentError(f"{role} must be provided.")
        if self._index.get(node.id) is not node:
            raise NodeNotFoundError(f"{role} {node!r} is not part of this forest.")

    # Mutation

    def add_root(self, node: TreeNode) -> TreeNode:
        """Append ``node`` (and its subtree) as a new root.

        The node's parent link is cleared and the children below it are
        linked back to their parents. No event is emitted.

        Returns:
            The node, for chaining

        Raises:
            InvalidArgumentError: If node is not a TreeNode or is already
                part of this forest (use move_node to relocate it)
        """
        if not isinstance(node, TreeNode):
            raise InvalidArgumentError("Root must be a TreeNode.")
        for current in node.iter_subtree():
            if self._index.get(current.id) is current or self._position_in(self.roots, current) is not None:
                raise InvalidArgumentError(f"Node {current!r} is already part of this forest.")
        node.parent = None
        self.roots.append(node)
        self._index_subtree(node)
        logger.debug(f"Added root {node!r}")
        return node

    def remove_all_roots(self) -> None:
        """Drop every tree and clear the index."""
        for root in self.roots:
            self._unindex_subtree(root)
        self.roots = []

    def add_child(self, parent: TreeNode, value: Any) -> TreeNode:
        """Create a node holding ``value`` as the last child of ``parent``.

        Emits NODE_ADDED with the new node.

        Returns:
            The new node

        Raises:
            InvalidArgumentError: If parent or value is missing, or the
                value carries no id
            NodeNotFoundError: If parent is not part of this forest
        """
        if parent is None or value is None:
            raise InvalidArgumentError('Parent node and child value must be provided.')
        self._require_member(parent, 'Parent')
        get_value_id(value)

        child = TreeNode(value, parent=parent)
        parent.children.append(child)
        self._index_subtree(child)
        self._events.emit(ForestEvent.NODE_ADDED, child)
        return child

    def add_children(self, parent: TreeNode, values: List[Any]) -> List[TreeNode]:
        """Add several children to ``parent``, in order.

        Arguments are checked before anything is added. After that the
        additions are sequential: if an event handler raises part way
        through, earlier children stay in place.

        Returns:
            The new nodes, in order
        """
        if parent is None or not isinstance(values, (list, tuple)):
            raise InvalidArgumentError('Invalid parent node or child values list.')
        self._require_member(parent, 'Parent')
        for value in values:
            if value is None:
                raise InvalidArgumentError('Child values must not contain None.')
            get_value_id(value)
        return [self.add_child(parent, value) for value in values]

    def remove_node(self, node: TreeNode) -> TreeNode:
        """Detach ``node`` and its subtree from the forest.

        Emits NODE_REMOVED with the removed subtree's root. The removed
        node keeps its children but loses its parent link.

        Returns:
            The removed node

        Raises:
            InvalidArgumentError: If node is missing
            NodeNotFoundError: If node is neither a root nor listed among
                its recorded parent's children
        """
        if node is None:
            raise InvalidArgumentError('Target node cannot be None.')

        root_position = self._position_in(self.roots, node)
        if root_position is not None:
            del self.roots[root_position]
        else:
            parent = node.parent
            if parent is None:
                raise NodeNotFoundError(
                    f"Node {node!r} is not a root and has no parent."
                )
            position = self._position_in(parent.children, node)
            if position is None:
                raise NodeNotFoundError(
                    f"Node {node!r} does not exist in its parent's children."
                )
            del parent.children[position]
            node.parent = None

        self._unindex_subtree(node)
        logger.debug(f"Removed {node!r}")
        self._events.emit(ForestEvent.NODE_REMOVED, node)
        return node

    def remove_children(self, parent: TreeNode, nodes: List[TreeNode]) -> None:
        """Remove several children of ``parent``.

        Raises:
            InvalidArgumentError: If any node does not belong to parent;
                nothing is removed in that case
        """
        if parent is None or not isinstance(nodes, (list, tuple)):
            raise InvalidArgumentError('Invalid parent node or nodes list.')
        if any(node is None or node.parent is not parent for node in nodes):
            raise InvalidArgumentError('One or more nodes do not belong to the specified parent.')
        for node in nodes:
            self.remove_node(node)

    def move_node(self, node: TreeNode, new_parent: TreeNode) -> None:
        """Re-attach ``node`` as the last child of ``new_parent``.

        Emits NODE_MOVED with the node.

        Raises:
            InvalidArgumentError: If either argument is missing
            NodeNotFoundError: If either node is not part of this forest
            CircularReferenceError: If new_parent is node itself or one of
                its descendants; the forest is left unchanged
        """
        self._require_member(node, 'Node')
        self._require_member(new_parent, 'New parent')

        if new_parent is node or self.is_ancestor_of(node, new_parent):
            raise CircularReferenceError('Cannot move node: would create circular reference.')

        root_position = self._position_in(self.roots, node)
        if root_position is not None:
            del self.roots[root_position]
        elif node.parent is not None:
            position = self._position_in(node.parent.children, node)
            if position is not None:
                del node.parent.children[position]

        node.parent = new_parent
        new_parent.children.append(node)
        logger.debug(f"Moved {node!r} under {new_parent!r}")
        self._events.emit(ForestEvent.NODE_MOVED, node)

    def transform(self, fn: Callable[[TreeNode], None]) -> None:
        """Apply ``fn`` to every node, pre-order. No events are emitted."""
        for node, _ in self.iter_nodes():
            fn(node)

    def batch_update(self, predicate: NodePredicate, fn: Callable[[TreeNode], None]) -> List[TreeNode]:
        """Apply ``fn`` to every node matching ``predicate``.

        Matches are collected first, then updated one by one; NODE_UPDATED
        is emitted after each update.

        Returns:
            The updated nodes
        """
        matching = self.filter_nodes(predicate)
        for node in matching:
            fn(node)
            self._events.emit(ForestEvent.NODE_UPDATED, node)
        return matching

    @staticmethod
    def _position_in(sequence: List[TreeNode], node: TreeNode) -> Optional[int]:
        # Identity, not equality: list.index would compare values
        for position, candidate in enumerate(sequence):
            if candidate is node:
                return position
        return None

    # Traversal

    def iter_nodes(self,
                   strategy: Union[TraversalStrategy, str, None] = None,
                   max_depth: Optional[int] = None) -> Iterator[Tuple[TreeNode, int]]:
        """Lazily yield (node, depth) pairs over every root in order.

        Args:
            strategy: Traversal order (defaults to config.default_strategy)
            max_depth: Inclusive depth bound (None = unlimited)
        """
        if max_depth is not None and max_depth < 0:
            raise InvalidArgumentError("max_depth cannot be negative")
        try:
            traverser = create_traverser(strategy or self.config.default_strategy)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e
        return traverser.traverse(self.roots, max_depth)

    def traverse(self,
                 callback: NodeCallback,
                 strategy: Union[TraversalStrategy, str, None] = None,
                 max_depth: Optional[int] = None) -> None:
        """Call ``callback(node, depth)`` for every node, depth-first.

        Args:
            callback: Called once per visited node
            strategy: "pre-order" (default) or "post-order"
            max_depth: Inclusive depth bound (None = unlimited)
        """
        for node, depth in self.iter_nodes(strategy, max_depth):
            callback(node, depth)

    def traverse_breadth_first(self, callback: NodeCallback, max_depth: Optional[int] = None) -> None:
        """Call ``callback(node, depth)`` for every node, level by level."""
        if max_depth is not None and max_depth < 0:
            raise InvalidArgumentError("max_depth cannot be negative")
        for node, depth in BreadthFirstTraverser().traverse(self.roots, max_depth):
            callback(node, depth)

    def __iter__(self) -> Iterator[TreeNode]:
        return (node for node, _ in self.iter_nodes())

    def __len__(self) -> int:
        return self.count_nodes()

    def __contains__(self, node_id: Any) -> bool:
        return node_id in self._index

    # Path & relationship queries

    def get_path(self, node: TreeNode) -> List[TreeNode]:
        """Return the nodes from the root down to ``node`` (root first)."""
        path = []
        current = node
        while current is not None:
            path.append(current)
            current = current.parent
        path.reverse()
        return path

    def get_ancestors(self, node: TreeNode) -> List[TreeNode]:
        """Return parent, grandparent, ..., root (nearest first)."""
        return self.get_path(node)[-2::-1]

    def get_descendants(self, node: TreeNode) -> List[TreeNode]:
        """Return every node below ``node``, pre-order."""
        subtree = node.iter_subtree()
        next(subtree)  # skip node itself
        return list(subtree)

    def find_path(self, source: TreeNode, target: TreeNode) -> Optional[List[TreeNode]]:
        """Return the path from ``source`` up to the common ancestor and down to ``target``.

        The common ancestor appears once. Returns None when the nodes
        live in different trees.
        """
        source_path = self.get_path(source)
        target_path = self.get_path(target)

        shared = 0
        for up, down in zip(source_path, target_path):
            if up is not down:
                break
            shared += 1

        if shared == 0:
            return None  # Different trees

        path_up = source_path[shared - 1:][::-1]
        path_down = target_path[shared:]
        return path_up + path_down

    def is_ancestor_of(self, ancestor: TreeNode, descendant: TreeNode) -> bool:
        current = descendant.parent
        while current is not None:
            if current is ancestor:
                return True
            current = current.parent
        return False

    def _sibling_list(self, node: TreeNode) -> List[TreeNode]:
        parent = node.parent
        return parent.children if parent is not None else self.roots

    def get_siblings(self, node: TreeNode) -> List[TreeNode]:
        """Return the other children of node's parent (other roots for a root)."""
        return [sibling for sibling in self._sibling_list(node) if sibling is not node]

    def get_next_sibling(self, node: TreeNode) -> Optional[TreeNode]:
        siblings = self._sibling_list(node)
        position = self._position_in(siblings, node)
        if position is None or position == len(siblings) - 1:
            return None
        return siblings[position + 1]

    def get_previous_sibling(self, node: TreeNode) -> Optional[TreeNode]:
        siblings = self._sibling_list(node)
        position = self._position_in(siblings, node)
        if not position:
            return None
        return siblings[position - 1]

    # Search, filter, map

    def find(self, predicate: NodePredicate) -> Optional[TreeNode]:
        """Return the first node matching ``predicate`` in pre-order, or None."""
        for node, _ in self.iter_nodes(TraversalStrategy.PRE_ORDER):
            if predicate(node):
                return node
        return None

    def find_by_id(self, node_id: Any) -> Optional[TreeNode]:
        return self._index.get(node_id)

    def filter_nodes(self, predicate: NodePredicate) -> List[TreeNode]:
        return [node for node, _ in self.iter_nodes(TraversalStrategy.PRE_ORDER) if predicate(node)]

    def map_nodes(self, fn: Callable[[TreeNode, int], U]) -> List[U]:
        return [fn(node, depth) for node, depth in self.iter_nodes(TraversalStrategy.PRE_ORDER)]

    def find_leaf_nodes(self) -> List[TreeNode]:
        return self.filter_nodes(TreeNode.is_leaf)

    def to_array(self) -> List[TreeNode]:
        """Return every indexed node."""
        return list(self._index.values())

    # Validation

    def validate_tree(self) -> ValidationResult:
        """Check for cycles, inconsistent parent links and duplicate ids.

        Problems are returned as data, never raised.
        """
        return validate_forest(self.roots)

    def has_circular_reference(self) -> bool:
        """True only if validation finds a node on its own ancestor path."""
        return self.validate_tree().has_cycles

    # Statistics

    def get_depth(self) -> int:
        """Maximum node depth (a lone root has depth 0)."""
        return max((depth for _, depth in self.iter_nodes()), default=0)

    def count_nodes(self) -> int:
        return len(self._index)

    def _level_counts(self) -> Dict[int, int]:
        counts: Dict[int, int] = {}
        for _, depth in self.iter_nodes():
            counts[depth] = counts.get(depth, 0) + 1
        return counts

    def get_width(self) -> int:
        """Largest number of nodes sharing one depth."""
        return max(self._level_counts().values(), default=0)

    def get_nodes_at_depth(self, target_depth: int) -> List[TreeNode]:
        return [node for node, depth in self.iter_nodes() if depth == target_depth]

    def get_statistics(self) -> Dict[str, int]:
        return {
            'depth': self.get_depth(),
            'width': self.get_width(),
            'node_count': self.count_nodes(),
            'leaf_count': len(self.find_leaf_nodes()),
            'root_count': len(self.roots),
        }

    # Cloning & visualization

    def clone_node(self, node: TreeNode) -> TreeNode:
        """Deep-copy ``node`` and its subtree.

        Values go through ``config.cloner``. The clone root has no parent;
        links inside the cloned subtree are preserved.
        """
        cloner = self.config.cloner
        clone_root = TreeNode(cloner(node.value))
        stack = [(node, clone_root)]
        while stack:
            original, copied = stack.pop()
            for child in original.children:
                child_copy = TreeNode(cloner(child.value), parent=copied)
                copied.children.append(child_copy)
                stack.append((child, child_copy))
        return clone_root

    def clone_forest(self) -> 'Forest':
        """Return an independent Forest with cloned trees and the same config."""
        cloned = Forest(config=self.config)
        for root in self.roots:
            cloned.add_root(self.clone_node(root))
        return cloned

    def visualize(self) -> str:
        """ASCII outline of the forest, mainly for debugging."""
        return '\n'.join(f"{'  ' * depth}- {node.id}" for node, depth in self.iter_nodes())

    # Serialization

    def serialize(self, **json_kwargs) -> str:
        """Serialize to versioned JSON text (parent links omitted)."""
        return serialization.encode_versioned(self.roots, self.format_version, **json_kwargs)

    async def deserialize(self, payload: Union[Awaitable[Any], str, bytes]) -> None:
        """Replace the forest with the trees in versioned JSON text.

        ``payload`` is normally an awaitable producing the text (for
        example a pending fetch); the forest is not touched until it
        resolves and parses. Plain text is accepted as well.

        Raises:
            VersionMismatchError: If the payload's version differs from
                ``format_version``
            MalformedDataError: If the payload is not JSON or has no
                "roots" list, or a node value carries no id
        """
        text = await payload if inspect.isawaitable(payload) else payload
        roots = serialization.decode_versioned(text, self.format_version, self.config.value_factory)

        self._replace_roots(roots)
        logger.debug(f"Deserialized {len(self.roots)} root(s), {self.count_nodes()} node(s)")

    def serialize_flat(self) -> List[Dict[str, Any]]:
        """One record per node, pre-order, each with a ``parentId`` field."""
        return serialization.encode_flat(node for node, _ in self.iter_nodes(TraversalStrategy.PRE_ORDER))

    def deserialize_flat(self, records: List[Dict[str, Any]]) -> None:
        """Replace the forest with trees rebuilt from flat records.

        Unresolvable records follow ``config.orphan_policy``.
        """
        roots = serialization.decode_flat(records, self.config.value_factory, self.config.orphan_policy)
        self._replace_roots(roots)

    def to_json(self) -> List[Dict[str, Any]]:
        """Export as plain nested dicts (no version tag, no parent ids)."""
        return serialization.encode_nested(self.roots)

    def from_json(self, data: List[Dict[str, Any]]) -> None:
        """Replace the forest with trees from the plain nested format."""
        roots = serialization.decode_nested(data, self.config.value_factory)
        self._replace_roots(roots)

    # Events

    def on(self, event: Union[ForestEvent, str], handler: EventHandler) -> None:
        """Register ``handler`` for ``event``; handlers run in registration order."""
        self._events.subscribe(event, handler)

    def off(self, event: Union[ForestEvent, str], handler: EventHandler) -> bool:
        """Unregister a previously registered handler.

        Returns:
            True if a registration was removed
        """
        return self._events.unsubscribe(event, handler)

    def __repr__(self) -> str:
        return f"Forest(roots={len(self.roots)}, nodes={self.count_nodes()})"
