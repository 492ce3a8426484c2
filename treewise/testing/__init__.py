"""Testing utilities for treewise consumers."""

from .fixtures import ForestTestHelper, sample_forest

__all__ = ['ForestTestHelper', 'sample_forest']
