"""Change notification for treewise.

Handlers subscribe per event kind and are called synchronously, in
registration order, with the affected node.
"""

import logging
from enum import Enum
from typing import Callable, Dict, List, Union

from ..errors import InvalidArgumentError
from .node import TreeNode

logger = logging.getLogger(__name__)

EventHandler = Callable[[TreeNode], None]


class ForestEvent(Enum):
    """Kinds of structural change a Forest reports."""
    NODE_ADDED = "node_added"
    NODE_REMOVED = "node_removed"
    NODE_UPDATED = "node_updated"
    NODE_MOVED = "node_moved"

    @classmethod
    def parse(cls, event: Union['ForestEvent', str]) -> 'ForestEvent':
        if isinstance(event, cls):
            return event
        try:
            return cls(event)
        except ValueError:
            raise InvalidArgumentError(
                f"Unknown forest event: {event!r}. "
                f"Choose from: {', '.join(e.value for e in cls)}"
            ) from None


class EventRegistry:
    """Observer lists keyed by event kind.

    Removal matches a handler by equality, which is identity for plain
    functions and (function, instance) for bound methods.
    """

    def __init__(self):
        self._handlers: Dict[ForestEvent, List[EventHandler]] = {
            event: [] for event in ForestEvent
        }

    def subscribe(self, event: Union[ForestEvent, str], handler: EventHandler) -> None:
        if not callable(handler):
            raise InvalidArgumentError("Event handler must be callable")
        self._handlers[ForestEvent.parse(event)].append(handler)

    def unsubscribe(self, event: Union[ForestEvent, str], handler: EventHandler) -> bool:
        """Remove one registration of ``handler``.

        Returns:
            True if a registration was removed, False if none matched
        """
        handlers = self._handlers[ForestEvent.parse(event)]
        try:
            handlers.remove(handler)
        except ValueError:
            return False
        return True

    def emit(self, event: ForestEvent, node: TreeNode) -> None:
        # Snapshot so a handler may unsubscribe itself while being called
        handlers = list(self._handlers[event])
        if handlers:
            logger.debug(f"Emitting {event.value} for {node!r} to {len(handlers)} handler(s)")
        for handler in handlers:
            handler(node)

    def handler_count(self, event: Union[ForestEvent, str]) -> int:
        return len(self._handlers[ForestEvent.parse(event)])
