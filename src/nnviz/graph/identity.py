"""
Map raw operations onto canonical ``Node`` identities.
"""

from __future__ import annotations

from typing import Optional

from nnviz.errors import NodeEncodingError

from .ir import BlockKind, Node, OpKind
from .operations import Operation

DEFAULT_SEPARATOR = "/"


def as_text(value: object, field: str) -> str:
    """Return ``value`` as a ``str``, requiring well-formed UTF-8."""
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise NodeEncodingError(field, value, str(exc)) from exc
    if isinstance(value, str):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise NodeEncodingError(field, value, str(exc)) from exc
        return value
    raise NodeEncodingError(field, value, f"expected str or bytes, got {type(value).__name__}")


def check_max_depth(max_depth: Optional[int]) -> Optional[int]:
    if max_depth is None:
        return None
    if isinstance(max_depth, bool) or not isinstance(max_depth, int):
        raise ValueError(f"max_depth must be a non-negative integer, got {max_depth!r}.")
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}.")
    return max_depth


def resolve_node(
    op: Operation,
    *,
    max_depth: Optional[int] = None,
    separator: str = DEFAULT_SEPARATOR,
) -> Node:
    """
    Resolve ``op`` to its canonical ``Node``.

    Args:
        op: Operation exposing ``name`` and ``type``.
        max_depth: When set, names with more than ``max_depth`` segments are
            truncated to their first ``max_depth`` segments and become a
            collapsed block node. Shorter names are left untouched.
        separator: Path separator used to split hierarchical names.

    Raises:
        NodeEncodingError: if the name or type is not valid text.
    """
    if not separator:
        raise ValueError("separator must be a non-empty string.")
    max_depth = check_max_depth(max_depth)

    name = as_text(op.name, "name")
    op_type = as_text(op.type, "type")
    segments = tuple(name.split(separator))

    if max_depth is not None and len(segments) > max_depth:
        return Node(name=segments[:max_depth], kind=BlockKind())
    return Node(name=segments, kind=OpKind(op_type))
