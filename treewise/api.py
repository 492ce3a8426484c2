"""High-level API for treewise.

This module provides simple, functional interfaces for common forest
operations. These functions wrap the Forest class for ease of use in
simple cases.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Union

from ._common.config import ForestConfig, TraversalStrategy
from .core.node import TreeNode
from .forest import Forest

logger = logging.getLogger(__name__)


def build_forest(records: List[Dict[str, Any]],
                 config: Optional[ForestConfig] = None) -> Forest:
    """Build a forest from flat parent-pointer records.

    Args:
        records: Dicts carrying an "id" and a "parentId" (None for roots)
        config: Optional forest configuration

    Returns:
        New Forest holding the rebuilt trees

    Example:
        >>> forest = build_forest([{"id": 1, "parentId": None},
        ...                        {"id": 2, "parentId": 1}])
        >>> forest.count_nodes()
        2
    """
    forest = Forest(config=config)
    forest.deserialize_flat(records)
    return forest


async def load_forest(payload: Union[Awaitable[Any], str, bytes],
                      config: Optional[ForestConfig] = None) -> Forest:
    """Create a forest from versioned JSON text, awaiting it if needed.

    Args:
        payload: Awaitable producing the JSON text, or the text itself
        config: Optional forest configuration (its format_version must
            match the payload)

    Returns:
        New Forest holding the deserialized trees
    """
    forest = Forest(config=config)
    await forest.deserialize(payload)
    validation = forest.validate_tree()
    if not validation.valid:
        logger.warning(f"load_forest: loaded forest has problems: {validation.errors}")
    return forest


def traverse_forest(forest: Forest,
                    strategy: Union[TraversalStrategy, str] = TraversalStrategy.PRE_ORDER,
                    max_depth: Optional[int] = None,
                    include_filter: Optional[Callable[[TreeNode], bool]] = None) -> Iterator[TreeNode]:
    """Simple interface for forest traversal.

    Args:
        forest: Forest to walk
        strategy: pre-order, post-order or breadth-first
        max_depth: Inclusive depth bound
        include_filter: Only yield nodes for which this returns True

    Yields:
        TreeNode instances that match the criteria
    """
    for node, _ in forest.iter_nodes(strategy, max_depth):
        if include_filter is None or include_filter(node):
            yield node


def find_nodes(forest: Forest, predicate: Callable[[TreeNode], bool],
               max_results: Optional[int] = None) -> List[TreeNode]:
    """Find nodes matching a predicate, pre-order.

    Args:
        forest: Forest to search
        predicate: Function returning True for wanted nodes
        max_results: Stop after this many matches (None = all)

    Returns:
        Matching nodes
    """
    results = []
    for node in traverse_forest(forest, include_filter=predicate):
        results.append(node)
        if max_results is not None and len(results) >= max_results:
            break
    return results


def get_forest_stats(forest: Forest) -> Dict[str, Any]:
    """Get statistics about a forest, including whether it validates.

    Returns:
        The keys of ``Forest.get_statistics`` plus ``valid`` and
        ``error_count``
    """
    stats: Dict[str, Any] = dict(forest.get_statistics())
    validation = forest.validate_tree()
    stats['valid'] = validation.valid
    stats['error_count'] = len(validation.errors)
    return stats
