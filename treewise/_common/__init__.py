"""Common components shared across the treewise package.

This internal package contains configuration and other pure-data pieces
used by both the core and the forest container. It should NOT be
imported directly by users.

Important: This package must NEVER import from treewise.forest to avoid
circular dependencies.
"""

from .config import (
    TraversalStrategy,
    OrphanPolicy,
    DepthConfig,
    ForestConfig,
    DEFAULT_FORMAT_VERSION,
)

__all__ = [
    'TraversalStrategy',
    'OrphanPolicy',
    'DepthConfig',
    'ForestConfig',
    'DEFAULT_FORMAT_VERSION',
]
