"""
Stable node and edge orderings used when serializing a graph.
"""

from __future__ import annotations

from typing import List, Tuple

from .ir import Edge, Graph

ORDERS = ("insertion", "sorted")

EdgeEntry = Tuple[int, int, Edge]


def node_order(graph: Graph, order: str = "insertion") -> List[int]:
    """
    Node indices in rendering order.

    ``insertion`` follows the order nodes were first resolved; ``sorted``
    orders by name path, then type, so the output does not depend on the
    order the loader yielded operations in.
    """
    indices = list(range(graph.num_nodes))
    if order == "insertion":
        return indices
    if order == "sorted":
        return sorted(indices, key=lambda idx: graph.node_at(idx).sort_key())
    raise ValueError(f"Unknown order `{order}`; expected one of {ORDERS}.")


def edge_order(graph: Graph, order: str = "insertion") -> List[EdgeEntry]:
    edges = list(graph.iter_edges())
    if order == "insertion":
        return edges
    if order == "sorted":
        return sorted(
            edges,
            key=lambda entry: (
                graph.node_at(entry[0]).sort_key(),
                graph.node_at(entry[1]).sort_key(),
            ),
        )
    raise ValueError(f"Unknown order `{order}`; expected one of {ORDERS}.")
