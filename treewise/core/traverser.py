"""Traversal strategies for treewise.

Traversers implement the algorithms for walking a forest in different
orders. All of them are iterative (explicit stack or queue) so very deep
trees never hit the interpreter's recursion limit.
"""

from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Iterable, Iterator, List, Optional, Tuple, Union

from .._common.config import DepthConfig, TraversalStrategy
from .node import TreeNode


class TreeTraverser(ABC):
    """Abstract base class for forest traversal strategies.

    A traverser never mutates the structure. Mutating children from inside
    a traversal has no ordering guarantees.
    """

    @abstractmethod
    def traverse(self,
                 roots: Iterable[TreeNode],
                 max_depth: Optional[int] = None) -> Iterator[Tuple[TreeNode, int]]:
        """Traverse every tree in ``roots``.

        Args:
            roots: Root nodes, visited in the given order
            max_depth: Inclusive depth bound (None = unlimited). Nodes at
                this depth are yielded but their children are not.

        Yields:
            Tuples of (node, depth) where roots have depth 0
        """
        pass

    def _should_explore(self, depth: int, max_depth: Optional[int]) -> bool:
        return DepthConfig(max_depth=max_depth).should_explore(depth)


class PreOrderTraverser(TreeTraverser):
    """Depth-first pre-order traversal strategy.

    Visits parent before children, siblings in their stored order.
    """

    def traverse(self,
                 roots: Iterable[TreeNode],
                 max_depth: Optional[int] = None) -> Iterator[Tuple[TreeNode, int]]:
        for root in list(roots):
            stack: List[Tuple[TreeNode, int]] = [(root, 0)]
            while stack:
                node, depth = stack.pop()
                yield (node, depth)

                if not self._should_explore(depth, max_depth):
                    continue
                # Reverse push so the leftmost child is popped next
                for child in reversed(node.children):
                    stack.append((child, depth + 1))


class PostOrderTraverser(TreeTraverser):
    """Depth-first post-order traversal strategy.

    Visits children before parent. Each root's subtree is finished before
    the next root is started. Good for deletion or aggregation.
    """

    def traverse(self,
                 roots: Iterable[TreeNode],
                 max_depth: Optional[int] = None) -> Iterator[Tuple[TreeNode, int]]:
        for root in list(roots):
            # First pass records a reversed post-order, second pass replays it
            pending: List[Tuple[TreeNode, int]] = [(root, 0)]
            recorded: List[Tuple[TreeNode, int]] = []
            while pending:
                node, depth = pending.pop()
                recorded.append((node, depth))
                if not self._should_explore(depth, max_depth):
                    continue
                pending.extend((child, depth + 1) for child in node.children)

            while recorded:
                yield recorded.pop()


class BreadthFirstTraverser(TreeTraverser):
    """Breadth-first traversal strategy.

    A single FIFO queue is seeded with every root in order, so all nodes at
    depth N across the forest are visited before any node at depth N+1.
    """

    def traverse(self,
                 roots: Iterable[TreeNode],
                 max_depth: Optional[int] = None) -> Iterator[Tuple[TreeNode, int]]:
        queue: Deque[Tuple[TreeNode, int]] = deque((root, 0) for root in roots)

        while queue:
            node, depth = queue.popleft()
            yield (node, depth)

            if self._should_explore(depth, max_depth):
                for child in node.children:
                    queue.append((child, depth + 1))


# Factory function for creating traversers by strategy
def create_traverser(strategy: Union[TraversalStrategy, str]) -> TreeTraverser:
    """Create a traverser instance for a strategy.

    Args:
        strategy: TraversalStrategy or its string value
            ("pre-order", "post-order", "breadth-first")

    Returns:
        TreeTraverser instance

    Raises:
        ValueError: If strategy name is not recognized
    """
    strategies = {
        TraversalStrategy.PRE_ORDER: PreOrderTraverser,
        TraversalStrategy.POST_ORDER: PostOrderTraverser,
        TraversalStrategy.BREADTH_FIRST: BreadthFirstTraverser,
    }
    return strategies[TraversalStrategy.parse(strategy)]()
