"""
Graph intermediate representation and construction.

- `Node`, `DataEdge`, `ControlEdge` and `Graph` (see `ir.py`)
- The operation contract loaders produce (`operations.py`)
- Identity resolution with optional depth collapsing (`identity.py`)
- The graph builder (`builders.py`) and rendering orders (`topo.py`)
"""

from .ir import BlockKind, ControlEdge, DataEdge, Graph, Node, OpKind
from .identity import resolve_node
from .builders import GraphBuilder, build_graph
from .operations import Operation, RawOperation, add_control_dependency, connect
from . import topo

__all__ = [
    "BlockKind",
    "ControlEdge",
    "DataEdge",
    "Graph",
    "GraphBuilder",
    "Node",
    "OpKind",
    "Operation",
    "RawOperation",
    "add_control_dependency",
    "build_graph",
    "connect",
    "resolve_node",
    "topo",
]
