"""Test fixtures for treewise consumers.

These fixtures check the structural invariants of a Forest from the
outside, so consumer test suites can assert them after every mutation
without reaching into private state.
"""

from typing import Any, Dict, List, Optional

from ..core.node import TreeNode
from ..forest import Forest
from .._common.config import ForestConfig


class ForestTestHelper:
    """Public test fixture for forest invariant verification.

    Example:
        forest = Forest({"id": 1})
        helper = ForestTestHelper(forest)

        forest.add_child(forest.roots[0], {"id": 2})
        helper.assert_consistent()
    """

    def __init__(self, forest: Forest):
        self._forest = forest

    def reachable_nodes(self) -> List[Any]:
        """Every node reachable from the roots, pre-order."""
        return [node for root in self._forest.roots for node in root.iter_subtree()]

    def reachable_ids(self) -> List[Any]:
        return [node.id for node in self.reachable_nodes()]

    def check_invariants(self) -> List[str]:
        """Check index/reachability agreement, parent links and root links.

        Returns:
            List of violated invariants (empty if all hold)
        """
        problems = []
        forest = self._forest
        reachable = self.reachable_nodes()
        reachable_keys = {id(node) for node in reachable}

        # Index covers exactly the reachable set
        for node in reachable:
            if forest.find_by_id(node.id) is not node:
                problems.append(f"Reachable node {node.id!r} is not indexed")
        for node in forest.to_array():
            if id(node) not in reachable_keys:
                problems.append(f"Indexed node {node.id!r} is not reachable from any root")

        # Parent links
        for root in forest.roots:
            if root.parent is not None:
                problems.append(f"Root {root.id!r} has a parent")
        for node in reachable:
            for child in node.children:
                if child.parent is not node:
                    problems.append(f"Child {child.id!r} does not point back to {node.id!r}")
            parent = node.parent
            if parent is not None:
                occurrences = sum(1 for sibling in parent.children if sibling is node)
                if occurrences != 1:
                    problems.append(
                        f"Node {node.id!r} appears {occurrences} times among its parent's children"
                    )

        if forest.has_circular_reference():
            problems.append("Forest contains a circular reference")

        return problems

    def assert_consistent(self) -> None:
        """Raise AssertionError listing every violated invariant."""
        problems = self.check_invariants()
        assert not problems, "Forest invariants violated:\n  " + "\n  ".join(problems)

    def id_to_parent_id(self) -> Dict[Any, Optional[Any]]:
        """Map every reachable id to its parent's id (None for roots)."""
        return {
            node.id: (node.parent.id if node.parent is not None else None)
            for node in self.reachable_nodes()
        }


def sample_forest(config: Optional[ForestConfig] = None) -> Forest:
    """Create a small two-tree forest for tests.

    Structure:
        1
        ├── 2
        │   ├── 4
        │   └── 5
        └── 3
            └── 6
        10
        └── 11
    """
    forest = Forest({"id": 1, "name": "root"}, config=config)
    root = forest.roots[0]
    two, three = forest.add_children(root, [{"id": 2, "name": "a"}, {"id": 3, "name": "b"}])
    forest.add_children(two, [{"id": 4, "name": "a1"}, {"id": 5, "name": "a2"}])
    forest.add_child(three, {"id": 6, "name": "b1"})

    second = forest.add_root(TreeNode({"id": 10, "name": "second"}))
    forest.add_child(second, {"id": 11, "name": "second-a"})
    return forest
