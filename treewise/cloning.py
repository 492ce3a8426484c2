"""Value cloning and batching utilities.

``deep_copy`` is the default value cloner used by ``Forest.clone_node`` and
``Forest.clone_forest``. It rebuilds the container and timestamp types it
knows about instead of sharing them, and falls back to ``copy.deepcopy``
for anything else.
"""

import copy
import datetime
import re
from collections import OrderedDict, defaultdict
from collections.abc import Mapping
from typing import Any, Iterator, List, Sequence, TypeVar

from .errors import InvalidArgumentError

T = TypeVar('T')


def deep_copy(value: Any) -> Any:
    """Return a structurally independent copy of ``value``.

    Handles:
    - datetime/date/time: rebuilt via ``replace()``
    - compiled regular expressions: recompiled from pattern and flags
    - set/frozenset: rebuilt with copied members
    - mappings (dict, OrderedDict, defaultdict): rebuilt with copied values
    - lists and tuples (including namedtuples): rebuilt with copied items

    Scalars are returned as-is; anything else goes through copy.deepcopy.
    """
    if value is None or isinstance(value, (bool, int, float, complex, str, bytes)):
        return value

    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.replace()

    if isinstance(value, re.Pattern):
        return re.compile(value.pattern, value.flags)

    if isinstance(value, (set, frozenset)):
        return type(value)(deep_copy(item) for item in value)

    if isinstance(value, defaultdict):
        result = defaultdict(value.default_factory)
        for key, item in value.items():
            result[key] = deep_copy(item)
        return result

    if isinstance(value, OrderedDict):
        return OrderedDict((key, deep_copy(item)) for key, item in value.items())

    if isinstance(value, dict):
        return {key: deep_copy(item) for key, item in value.items()}

    if isinstance(value, Mapping):
        return copy.deepcopy(value)

    if isinstance(value, list):
        return [deep_copy(item) for item in value]

    if isinstance(value, tuple):
        items = [deep_copy(item) for item in value]
        if hasattr(value, '_fields'):  # namedtuple
            return type(value)(*items)
        return tuple(items)

    return copy.deepcopy(value)


def iter_batches(items: Sequence[T], batch_size: int) -> Iterator[List[T]]:
    """Yield consecutive slices of ``items`` of at most ``batch_size``.

    Raises:
        InvalidArgumentError: If batch_size is not positive
    """
    if batch_size <= 0:
        raise InvalidArgumentError("Batch size must be greater than zero.")
    for start in range(0, len(items), batch_size):
        yield list(items[start:start + batch_size])
