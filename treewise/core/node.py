"""TreeNode abstraction for treewise.

The TreeNode is intentionally kept simple - it's a value holder with an
owned list of children and a non-owning back-link to its parent.
All structural editing goes through the Forest, which keeps its id index
consistent with the links stored here.
"""

import dataclasses
import weakref
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional

from ..errors import InvalidArgumentError


def get_value_id(value: Any) -> Any:
    """Return the identifier carried by a node value.

    A value is either a mapping with an ``"id"`` key or any object with an
    ``id`` attribute.

    Raises:
        InvalidArgumentError: If the value carries no id
    """
    if isinstance(value, Mapping):
        if 'id' in value:
            return value['id']
    elif hasattr(value, 'id'):
        return value.id
    raise InvalidArgumentError(f"Node value {value!r} does not expose an 'id'")


def value_fields(value: Any) -> Dict[str, Any]:
    """Return the value's own fields as a fresh plain dict.

    Used by the flat and plain-nested formats, which splice extra keys
    (``parentId``, ``children``) next to the value's fields.
    """
    if isinstance(value, Mapping):
        return dict(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    to_dict = getattr(value, 'to_dict', None)
    if callable(to_dict):
        return dict(to_dict())
    try:
        return dict(vars(value))
    except TypeError:
        raise InvalidArgumentError(
            f"Cannot extract fields from node value of type {type(value).__name__}"
        ) from None


class TreeNode:
    """A vertex of the forest.

    Children are owned: a node appears in exactly one children list (or in
    the forest's roots). The parent link is a weak reference so the
    parent/child pair never forms a strong reference cycle.

    Nodes compare by identity. Two nodes carrying the same id are still
    distinct vertices, which is what lets validation report duplicates.
    """

    __slots__ = ('value', 'children', '_parent_ref', '__weakref__')

    def __init__(self, value: Any, children: Optional[Iterable['TreeNode']] = None,
                 parent: Optional['TreeNode'] = None):
        self.value = value
        self.children: List['TreeNode'] = list(children) if children else []
        for child in self.children:
            child.parent = self
        self._parent_ref = None
        self.parent = parent

    @property
    def parent(self) -> Optional['TreeNode']:
        """The owning parent node, or None for a root or detached node."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @parent.setter
    def parent(self, node: Optional['TreeNode']) -> None:
        self._parent_ref = weakref.ref(node) if node is not None else None

    @property
    def id(self) -> Any:
        return get_value_id(self.value)

    def is_leaf(self) -> bool:
        return not self.children

    def iter_subtree(self):
        """Yield this node and every descendant, pre-order, without recursion."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        try:
            node_id = self.id
        except InvalidArgumentError:
            node_id = '?'
        return f"{self.__class__.__name__}(id={node_id!r}, children={len(self.children)})"
