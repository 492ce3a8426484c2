"""Exception taxonomy for treewise.

Every failure raised by a Forest operation derives from ForestError.
Each class also inherits the closest builtin so that callers catching
ValueError or LookupError keep working.
"""

from typing import Any


class ForestError(Exception):
    """Base class for all treewise errors."""
    pass


class InvalidArgumentError(ForestError, ValueError):
    """Raised when a required argument is missing or malformed."""
    pass


class NodeNotFoundError(ForestError, LookupError):
    """Raised when a node is absent from its claimed owner.

    Also covers malformed nodes whose parent chain cannot be followed.
    """
    pass


class CircularReferenceError(ForestError, ValueError):
    """Raised when a move would make a node its own ancestor."""
    pass


class VersionMismatchError(ForestError):
    """Raised when serialized data carries a different format version.

    Attributes:
        found: Version tag read from the payload
        expected: Version tag the forest is configured for
    """

    def __init__(self, found: Any, expected: Any):
        self.found = found
        self.expected = expected
        super().__init__(
            f"Tree version mismatch. Got {found!r}, expected {expected!r}."
        )


class MalformedDataError(ForestError, ValueError):
    """Raised when a parsed payload lacks the required structure."""
    pass


__all__ = [
    'ForestError',
    'InvalidArgumentError',
    'NodeNotFoundError',
    'CircularReferenceError',
    'VersionMismatchError',
    'MalformedDataError',
]
