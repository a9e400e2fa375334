"""
nnviz

Render framework computation graphs as Graphviz DOT, optionally collapsing
deeply nested scopes into blocks.
"""

from .errors import GraphFrozenError, GraphLoadError, NnvizError, NodeEncodingError
from .graph.ir import BlockKind, ControlEdge, DataEdge, Graph, Node, OpKind
from .graph.builders import GraphBuilder, build_graph
from .graph.identity import resolve_node
from .render.dot import render_dot

__all__ = [
    "BlockKind",
    "ControlEdge",
    "DataEdge",
    "Graph",
    "GraphBuilder",
    "GraphFrozenError",
    "GraphLoadError",
    "NnvizError",
    "Node",
    "NodeEncodingError",
    "OpKind",
    "build_graph",
    "render_dot",
    "resolve_node",
]
