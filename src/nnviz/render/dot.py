"""
Graphviz DOT rendering of a built ``Graph``.
"""

from __future__ import annotations

from typing import Optional

from graphviz import Digraph

from nnviz.graph.ir import ControlEdge, DataEdge, Edge, Graph, Node
from nnviz.graph.topo import edge_order, node_order


def node_label(node: Node, separator: str = "/") -> str:
    return f"{node.qualified_name(separator)} : {node.type}"


def edge_label(edge: Edge) -> Optional[str]:
    if isinstance(edge, ControlEdge):
        return None
    label = f"{edge.output_index}:{edge.input_index}"
    if edge.dim:
        dims = ", ".join("?" if size is None else str(size) for size in edge.dim)
        label += f" [{dims}]"
    return label


def to_digraph(
    graph: Graph,
    *,
    order: str = "insertion",
    name: str = "nnviz",
    rankdir: Optional[str] = None,
    separator: str = "/",
) -> Digraph:
    """
    Build a ``graphviz.Digraph`` with one statement per node and per edge.

    Node ids are the graph's stable indices. Collapsed blocks are drawn as
    boxes, control dependencies as dashed edges.
    """
    graph_attr = {"rankdir": rankdir} if rankdir else None
    dot = Digraph(name=name, graph_attr=graph_attr)

    for idx in node_order(graph, order):
        node = graph.node_at(idx)
        attrs = {"shape": "box"} if node.is_block else {}
        dot.node(str(idx), label=node_label(node, separator), **attrs)

    for src, dst, edge in edge_order(graph, order):
        if isinstance(edge, DataEdge):
            dot.edge(str(src), str(dst), label=edge_label(edge))
        else:
            dot.edge(str(src), str(dst), style="dashed")

    return dot


def render_dot(
    graph: Graph,
    *,
    order: str = "insertion",
    name: str = "nnviz",
    rankdir: Optional[str] = None,
    separator: str = "/",
) -> str:
    """Return the DOT source text for ``graph``."""
    return to_digraph(
        graph, order=order, name=name, rankdir=rankdir, separator=separator
    ).source
