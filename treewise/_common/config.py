"""Configuration system for treewise.

This module defines how users tune a Forest: which serialization format
version it speaks, how lossy flat imports are handled, how values are
rebuilt and cloned, and which traversal order is used by default.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Callable, Any, Dict, List, Union

from ..cloning import deep_copy


DEFAULT_FORMAT_VERSION = 1


class TraversalStrategy(Enum):
    """How to traverse the forest.

    Depth-first strategies walk one root's subtree completely before
    moving to the next root.
    """
    PRE_ORDER = "pre-order"          # Parent before children
    POST_ORDER = "post-order"        # Children before parent
    BREADTH_FIRST = "breadth-first"  # Level by level across all roots

    @classmethod
    def parse(cls, strategy: Union['TraversalStrategy', str]) -> 'TraversalStrategy':
        """Accept either an enum member or its string value.

        Args:
            strategy: Strategy enum or string such as "pre-order"

        Returns:
            Matching TraversalStrategy

        Raises:
            ValueError: If the string names no known strategy
        """
        if isinstance(strategy, cls):
            return strategy
        normalized = str(strategy).lower().replace('_', '-')
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(
            f"Unknown traversal strategy: {strategy}. "
            f"Choose from: {', '.join(m.value for m in cls)}"
        )


class OrphanPolicy(Enum):
    """What to do with flat records whose parent id resolves to nothing."""
    DROP = "drop"    # Leave the record out, with a warning
    RAISE = "raise"  # Fail the whole import


@dataclass
class DepthConfig:
    """Configuration for depth-bounded traversal.

    The bound is inclusive: a node at ``max_depth`` is visited, its
    children are not.
    """

    max_depth: Optional[int] = None  # None = unlimited

    def should_explore(self, depth: int) -> bool:
        """Check if children of a node at this depth should be visited.

        Args:
            depth: Depth of the node being expanded

        Returns:
            True if we should go deeper
        """
        if self.max_depth is None:
            return True
        return depth < self.max_depth

    def validate(self) -> List[str]:
        errors = []
        if self.max_depth is not None and self.max_depth < 0:
            errors.append("max_depth cannot be negative")
        return errors


@dataclass
class ForestConfig:
    """Complete configuration for a Forest.

    Attributes:
        format_version: Version tag written by ``serialize`` and required
            by ``deserialize``
        orphan_policy: Handling of unresolved parent ids in flat imports
        value_factory: Rebuilds a node value from its plain field dict
            during any deserialization
        cloner: Deep-copies a value for ``clone_node``/``clone_forest``
        default_strategy: Order used by traverse() when none is given
    """

    format_version: int = DEFAULT_FORMAT_VERSION
    orphan_policy: OrphanPolicy = OrphanPolicy.DROP
    value_factory: Callable[[Dict[str, Any]], Any] = dict
    cloner: Callable[[Any], Any] = deep_copy
    default_strategy: TraversalStrategy = TraversalStrategy.PRE_ORDER

    @classmethod
    def strict(cls, **kwargs) -> 'ForestConfig':
        """Create config that refuses lossy flat imports.

        Returns:
            ForestConfig with OrphanPolicy.RAISE
        """
        return cls(orphan_policy=OrphanPolicy.RAISE, **kwargs)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not isinstance(self.format_version, int) or isinstance(self.format_version, bool):
            errors.append("format_version must be an integer")

        if not isinstance(self.orphan_policy, OrphanPolicy):
            errors.append("orphan_policy must be an OrphanPolicy")

        if not callable(self.value_factory):
            errors.append("value_factory must be callable")

        if not callable(self.cloner):
            errors.append("cloner must be callable")

        if not isinstance(self.default_strategy, TraversalStrategy):
            errors.append("default_strategy must be a TraversalStrategy")

        return errors
