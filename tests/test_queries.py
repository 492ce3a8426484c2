"""Tests for path, relationship, search and statistics queries."""

import pytest

from treewise import Forest, TreeNode
from treewise.testing import sample_forest


@pytest.fixture
def forest():
    """Sample forest.

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
    return sample_forest()


def ids(nodes):
    return [node.id for node in nodes]


class TestPaths:

    def test_get_path(self, forest):
        assert ids(forest.get_path(forest.find_by_id(5))) == [1, 2, 5]

    def test_get_path_for_root(self, forest):
        root = forest.roots[0]
        assert forest.get_path(root) == [root]

    def test_find_path_between_cousins(self, forest):
        path = forest.find_path(forest.find_by_id(4), forest.find_by_id(6))
        assert ids(path) == [4, 2, 1, 3, 6]

    def test_find_path_between_siblings(self, forest):
        path = forest.find_path(forest.find_by_id(4), forest.find_by_id(5))
        assert ids(path) == [4, 2, 5]

    def test_find_path_to_descendant(self, forest):
        assert ids(forest.find_path(forest.find_by_id(1), forest.find_by_id(5))) == [1, 2, 5]
        assert ids(forest.find_path(forest.find_by_id(5), forest.find_by_id(1))) == [5, 2, 1]

    def test_find_path_to_self(self, forest):
        node = forest.find_by_id(3)
        assert forest.find_path(node, node) == [node]

    def test_find_path_different_trees(self, forest):
        assert forest.find_path(forest.find_by_id(4), forest.find_by_id(11)) is None

    def test_get_ancestors(self, forest):
        assert ids(forest.get_ancestors(forest.find_by_id(5))) == [2, 1]

    def test_get_ancestors_of_root(self, forest):
        assert forest.get_ancestors(forest.roots[0]) == []

    def test_get_descendants(self, forest):
        assert ids(forest.get_descendants(forest.roots[0])) == [2, 4, 5, 3, 6]
        assert forest.get_descendants(forest.find_by_id(6)) == []

    def test_is_ancestor_of(self, forest):
        assert forest.is_ancestor_of(forest.find_by_id(1), forest.find_by_id(5))
        assert not forest.is_ancestor_of(forest.find_by_id(3), forest.find_by_id(5))
        assert not forest.is_ancestor_of(forest.find_by_id(5), forest.find_by_id(5))


class TestSiblings:

    def test_get_siblings(self, forest):
        assert ids(forest.get_siblings(forest.find_by_id(2))) == [3]

    def test_get_siblings_of_root(self, forest):
        assert ids(forest.get_siblings(forest.roots[0])) == [10]

    def test_only_child_has_no_siblings(self, forest):
        assert forest.get_siblings(forest.find_by_id(6)) == []

    def test_next_sibling(self, forest):
        assert forest.get_next_sibling(forest.find_by_id(4)) is forest.find_by_id(5)
        assert forest.get_next_sibling(forest.find_by_id(5)) is None
        assert forest.get_next_sibling(forest.roots[0]) is forest.roots[1]

    def test_previous_sibling(self, forest):
        assert forest.get_previous_sibling(forest.find_by_id(5)) is forest.find_by_id(4)
        assert forest.get_previous_sibling(forest.find_by_id(4)) is None
        assert forest.get_previous_sibling(forest.roots[0]) is None

    def test_detached_node_has_no_neighbours(self, forest):
        stranger = TreeNode({"id": 99})
        assert forest.get_next_sibling(stranger) is None
        assert forest.get_previous_sibling(stranger) is None


class TestSearch:

    def test_find_by_id(self, forest):
        assert forest.find_by_id(6).value["name"] == "b1"
        assert forest.find_by_id(404) is None

    def test_find_returns_first_in_pre_order(self, forest):
        found = forest.find(lambda node: node.value["name"].startswith("a"))
        assert found is forest.find_by_id(2)

    def test_find_returns_none(self, forest):
        assert forest.find(lambda node: node.id > 1000) is None

    def test_filter_nodes(self, forest):
        assert ids(forest.filter_nodes(lambda node: node.id % 2 == 0)) == [2, 4, 6, 10]
        assert forest.filter_nodes(lambda node: False) == []

    def test_map_nodes(self, forest):
        mapped = forest.map_nodes(lambda node, depth: {"id": node.id, "depth": depth})
        assert mapped[0] == {"id": 1, "depth": 0}
        assert mapped[2] == {"id": 4, "depth": 2}
        assert len(mapped) == 8

    def test_find_leaf_nodes(self, forest):
        assert ids(forest.find_leaf_nodes()) == [4, 5, 6, 11]

    def test_to_array(self, forest):
        assert sorted(ids(forest.to_array())) == [1, 2, 3, 4, 5, 6, 10, 11]


class TestStatistics:

    def test_get_depth(self, forest):
        assert forest.get_depth() == 2
        assert Forest({"id": 1}).get_depth() == 0
        assert Forest().get_depth() == 0

    def test_get_width(self, forest):
        # depth 0: 1, 10; depth 1: 2, 3, 11; depth 2: 4, 5, 6
        assert forest.get_width() == 3
        assert Forest().get_width() == 0

    def test_get_nodes_at_depth(self, forest):
        assert ids(forest.get_nodes_at_depth(1)) == [2, 3, 11]
        assert forest.get_nodes_at_depth(7) == []

    def test_get_statistics(self, forest):
        assert forest.get_statistics() == {
            'depth': 2,
            'width': 3,
            'node_count': 8,
            'leaf_count': 4,
            'root_count': 2,
        }

    def test_visualize(self):
        forest = Forest({"id": 1})
        child = forest.add_child(forest.roots[0], {"id": 2})
        forest.add_child(child, {"id": 3})

        assert forest.visualize() == "- 1\n  - 2\n    - 3"
