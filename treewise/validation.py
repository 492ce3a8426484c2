"""Structural validation for treewise forests.

Validation is advisory: problems are collected and returned as data in a
ValidationResult, never raised, and the walk never stops at the first one.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Set, Tuple

from .core.node import TreeNode, get_value_id
from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Outcome of ``Forest.validate_tree``.

    Attributes:
        errors: Human-readable description of every problem found
        circular_ids: Ids of nodes found on their own ancestor path
        duplicate_ids: Id -> occurrence count, for ids seen more than once
    """

    errors: List[str] = field(default_factory=list)
    circular_ids: List[Any] = field(default_factory=list)
    duplicate_ids: Dict[Any, int] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def has_cycles(self) -> bool:
        return bool(self.circular_ids)

    def __bool__(self) -> bool:
        return self.valid

    def as_dict(self) -> Dict[str, Any]:
        return {'valid': self.valid, 'errors': list(self.errors)}


def _describe(node: TreeNode) -> Any:
    try:
        return get_value_id(node.value)
    except InvalidArgumentError:
        return repr(node.value)


def validate_forest(roots: Iterable[TreeNode]) -> ValidationResult:
    """Check a forest for cycles, bad parent links and duplicate ids.

    The depth-first walk keeps the current root-to-node path as a set, so a
    node reappearing on its own path is reported even though a global
    visited set stops already-checked subtrees from being walked twice.

    Args:
        roots: Root nodes of the forest

    Returns:
        ValidationResult listing every problem found
    """
    result = ValidationResult()
    visited: Set[int] = set()
    id_counts: Counter = Counter()

    for root in roots:
        if root.parent is not None:
            result.errors.append(f"Root node {_describe(root)} has a parent reference")

        on_path: Set[int] = set()
        # (node, leaving) pairs; the leaving marker pops the node off the path
        stack: List[Tuple[TreeNode, bool]] = [(root, False)]
        while stack:
            node, leaving = stack.pop()
            key = id(node)
            if leaving:
                on_path.discard(key)
                continue

            if key in on_path:
                node_id = _describe(node)
                result.errors.append(f"Circular reference detected at node {node_id}")
                result.circular_ids.append(node_id)
                continue

            id_counts[_describe(node)] += 1
            if key in visited:
                continue  # Already checked this subtree
            visited.add(key)
            on_path.add(key)

            stack.append((node, True))
            for child in node.children:
                if child.parent is not node:
                    result.errors.append(
                        f"Inconsistent parent reference at node {_describe(child)}"
                    )
            stack.extend((child, False) for child in reversed(node.children))

    for node_id, count in id_counts.items():
        if count > 1:
            result.errors.append(f"Duplicate ID {node_id} found {count} times")
            result.duplicate_ids[node_id] = count

    if result.errors:
        logger.debug(f"Forest validation found {len(result.errors)} problem(s)")
    return result
