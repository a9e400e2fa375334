"""
Exceptions raised while loading, building or rendering graphs.
"""

from __future__ import annotations


class NnvizError(Exception):
    """Base class for all nnviz failures."""


class GraphLoadError(NnvizError):
    """The serialized graph definition could not be parsed or imported."""


class NodeEncodingError(NnvizError, ValueError):
    """An operation name or type is not valid text."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Operation {field} {value!r} is not valid text: {reason}")


class GraphFrozenError(NnvizError, RuntimeError):
    """A graph was mutated after construction completed."""
