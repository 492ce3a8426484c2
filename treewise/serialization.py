"""Serialization formats for treewise forests.

Three independent, non-interchangeable formats:

Versioned nested (text):
    {"version": 1, "roots": [{"value": {...}, "children": [...]}, ...]}
    The durable wire format. Parent back-links are never written.

Flat (list of dicts):
    [{"id": 1, ..., "parentId": None}, {"id": 2, ..., "parentId": 1}]
    One record per node, pre-order, each carrying its parent's id.

Plain nested (list of dicts):
    [{"id": 1, ..., "children": [{"id": 2, ...}]}]
    The value's own fields plus a "children" key on non-leaf nodes.

Decoders here only build detached node structures. Installing them into a
Forest (and rebuilding its index) is the Forest's job, which is what keeps
a failed decode from touching the live forest.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from ._common.config import OrphanPolicy
from .core.node import TreeNode, get_value_id, value_fields
from .errors import InvalidArgumentError, MalformedDataError, VersionMismatchError

logger = logging.getLogger(__name__)

PARENT_ID_KEY = "parentId"
CHILDREN_KEY = "children"

ValueFactory = Callable[[Dict[str, Any]], Any]


def _make_value(fields: Dict[str, Any], value_factory: ValueFactory) -> Any:
    value = value_factory(fields)
    try:
        get_value_id(value)
    except InvalidArgumentError as e:
        raise MalformedDataError(f"Decoded node value has no id: {fields!r}") from e
    return value


# Versioned nested format

def _node_record(node: TreeNode) -> Dict[str, Any]:
    return {
        "value": value_fields(node.value),
        CHILDREN_KEY: [_node_record(child) for child in node.children],
    }


def encode_versioned(roots: Iterable[TreeNode], version: int, **json_kwargs) -> str:
    """Serialize roots into versioned JSON text.

    Args:
        roots: Root nodes to write
        version: Format version tag to embed
        **json_kwargs: Passed through to json.dumps (e.g. indent)

    Returns:
        JSON text
    """
    data = {
        "version": version,
        "roots": [_node_record(root) for root in roots],
    }
    return json.dumps(data, **json_kwargs)


def _build_from_record(record: Any, parent: Optional[TreeNode],
                       value_factory: ValueFactory) -> TreeNode:
    if not isinstance(record, Mapping) or not isinstance(record.get("value"), Mapping):
        raise MalformedDataError(f"Invalid node record: {record!r}")
    children = record.get(CHILDREN_KEY) or []
    if not isinstance(children, list):
        raise MalformedDataError(f"Invalid '{CHILDREN_KEY}' in node record: {children!r}")

    node = TreeNode(_make_value(dict(record["value"]), value_factory), parent=parent)
    node.children = [_build_from_record(child, node, value_factory) for child in children]
    return node


def decode_versioned(text: Any, expected_version: int,
                     value_factory: ValueFactory = dict) -> List[TreeNode]:
    """Parse versioned JSON text into detached root nodes.

    Parent links are rebuilt top-down while the structure is built.

    Args:
        text: JSON text (str, bytes or bytearray)
        expected_version: Version tag the payload must carry exactly
        value_factory: Rebuilds each value from its field dict

    Returns:
        List of root nodes

    Raises:
        MalformedDataError: If the text is not JSON or lacks a "roots" list
        VersionMismatchError: If the version tag differs
    """
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedDataError(f"Invalid format: not a JSON document ({e})") from e

    if not isinstance(parsed, Mapping):
        raise MalformedDataError("Invalid format: expected a JSON object.")

    found = parsed.get("version")
    # bool is an int subclass; True must not pass for version 1
    if isinstance(found, bool) or found != expected_version:
        raise VersionMismatchError(found, expected_version)

    roots = parsed.get("roots")
    if not isinstance(roots, list):
        raise MalformedDataError('Invalid format: missing "roots" array.')

    return [_build_from_record(record, None, value_factory) for record in roots]


# Flat format

def encode_flat(nodes: Iterable[TreeNode]) -> List[Dict[str, Any]]:
    """Produce one record per node, in the order given.

    Each record holds the value's own fields plus ``parentId`` (None for
    roots). A value field named ``parentId`` is overwritten.
    """
    flat = []
    for node in nodes:
        record = value_fields(node.value)
        parent = node.parent
        record[PARENT_ID_KEY] = parent.id if parent is not None else None
        flat.append(record)
    return flat


def decode_flat(records: Iterable[Any],
                value_factory: ValueFactory = dict,
                orphan_policy: OrphanPolicy = OrphanPolicy.DROP) -> List[TreeNode]:
    """Rebuild detached root nodes from flat parent-pointer records.

    Two passes: the first materializes every node, the second links each
    one to its parent by id. Records may appear in any order. A record
    missing ``parentId`` (or holding None) is a root.

    Records that end up unreachable from any root (unknown parent id, or a
    parent chain that never reaches a root) are orphans. Under
    OrphanPolicy.DROP they are left out with a warning; under
    OrphanPolicy.RAISE the whole decode fails.

    Raises:
        MalformedDataError: On a non-mapping record, a record without "id",
            or orphans under OrphanPolicy.RAISE
    """
    if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Iterable):
        raise MalformedDataError("Invalid flat format: expected a list of records.")

    # First pass: create all nodes, unlinked
    pairs: List[Tuple[Any, TreeNode]] = []
    by_id: Dict[Any, TreeNode] = {}
    for record in records:
        if not isinstance(record, Mapping) or "id" not in record:
            raise MalformedDataError(f"Invalid flat record: {record!r}")
        fields = {key: value for key, value in record.items() if key != PARENT_ID_KEY}
        node = TreeNode(_make_value(fields, value_factory))
        pairs.append((record.get(PARENT_ID_KEY), node))
        by_id[record["id"]] = node

    # Second pass: establish relationships
    roots: List[TreeNode] = []
    for parent_id, node in pairs:
        if parent_id is None:
            roots.append(node)
            continue
        parent = by_id.get(parent_id)
        if parent is not None and parent is not node:
            node.parent = parent
            parent.children.append(node)

    reachable: Set[int] = {id(node) for root in roots for node in root.iter_subtree()}
    orphans = [(parent_id, node) for parent_id, node in pairs if id(node) not in reachable]
    if orphans:
        if orphan_policy == OrphanPolicy.RAISE:
            raise MalformedDataError(
                f"{len(orphans)} flat record(s) do not resolve to a root: "
                f"{[node.id for _, node in orphans]}"
            )
        for parent_id, node in orphans:
            logger.warning(
                f"decode_flat: dropping record {node.id!r}; "
                f"parent {parent_id!r} does not resolve to a root"
            )

    return roots


# Plain nested format

def _nested_record(node: TreeNode) -> Dict[str, Any]:
    record = value_fields(node.value)
    if node.children:
        record[CHILDREN_KEY] = [_nested_record(child) for child in node.children]
    return record


def encode_nested(roots: Iterable[TreeNode]) -> List[Dict[str, Any]]:
    """Mirror each tree as nested dicts: value fields plus "children"."""
    return [_nested_record(root) for root in roots]


def _build_nested(data: Any, parent: Optional[TreeNode],
                  value_factory: ValueFactory) -> TreeNode:
    if not isinstance(data, Mapping):
        raise MalformedDataError(f"Invalid nested record: {data!r}")
    fields = {key: value for key, value in data.items() if key != CHILDREN_KEY}
    children = data.get(CHILDREN_KEY) or []
    if not isinstance(children, list):
        raise MalformedDataError(f"Invalid '{CHILDREN_KEY}' in nested record: {children!r}")

    node = TreeNode(_make_value(fields, value_factory), parent=parent)
    node.children = [_build_nested(child, node, value_factory) for child in children]
    return node


def decode_nested(data: Any, value_factory: ValueFactory = dict) -> List[TreeNode]:
    """Build detached root nodes from the plain nested format.

    Raises:
        MalformedDataError: If data is not a list of mappings
    """
    if not isinstance(data, list):
        raise MalformedDataError("Invalid nested format: expected a list of root records.")
    return [_build_nested(entry, None, value_factory) for entry in data]
