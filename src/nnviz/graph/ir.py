from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import networkx as nx

from nnviz.errors import GraphFrozenError

BLOCK_LABEL = "Block"


@dataclass(frozen=True)
class OpKind:
    """Node kind for a single framework operation."""

    op_type: str

    @property
    def label(self) -> str:
        return self.op_type


@dataclass(frozen=True)
class BlockKind:
    """Node kind for a collapsed group of operations sharing a name prefix."""

    @property
    def label(self) -> str:
        return BLOCK_LABEL


NodeKind = Union[OpKind, BlockKind]


@dataclass(frozen=True)
class Node:
    """
    Canonical identity of an operation (or of a collapsed block).

    Two nodes are the same entity iff both ``name`` and ``kind`` are equal.
    """

    name: Tuple[str, ...]
    kind: NodeKind

    def __post_init__(self) -> None:
        if not isinstance(self.name, tuple):
            object.__setattr__(self, "name", tuple(self.name))

    @property
    def type(self) -> str:
        return self.kind.label

    @property
    def is_block(self) -> bool:
        return isinstance(self.kind, BlockKind)

    @property
    def depth(self) -> int:
        return len(self.name)

    def qualified_name(self, separator: str = "/") -> str:
        return separator.join(self.name)

    def sort_key(self) -> Tuple[Tuple[str, ...], str, bool]:
        return (self.name, self.type, self.is_block)


@dataclass(frozen=True)
class DataEdge:
    """Value flowing from a producer output slot into a consumer input slot."""

    input_index: int
    output_index: int
    dim: Tuple[Optional[int], ...] = ()

    def __post_init__(self) -> None:
        if self.input_index < 0 or self.output_index < 0:
            raise ValueError(
                f"Edge slots must be non-negative, got input={self.input_index} "
                f"output={self.output_index}."
            )
        if not isinstance(self.dim, tuple):
            object.__setattr__(self, "dim", tuple(self.dim))


@dataclass(frozen=True)
class ControlEdge:
    """Ordering-only dependency; carries no value and no slots."""


Edge = Union[DataEdge, ControlEdge]


@dataclass
class GraphSummary:
    nodes: int
    blocks: int
    data_edges: int
    control_edges: int

    @property
    def edges(self) -> int:
        return self.data_edges + self.control_edges


@dataclass
class Graph:
    """
    Directed graph of deduplicated nodes and edges.

    Nodes are stored in a ``networkx.MultiDiGraph`` under stable integer
    indices assigned in insertion order. The graph enforces:

    - one index per distinct ``Node``
    - no self loops
    - at most one edge per ordered (source, target) pair
    """

    metadata: Dict[str, Any] = field(default_factory=dict)
    _graph: nx.MultiDiGraph = field(default_factory=nx.MultiDiGraph, init=False, repr=False)
    _index: Dict[Node, int] = field(default_factory=dict, init=False, repr=False)
    _frozen: bool = field(default=False, init=False, repr=False)

    # ------------------------------------------------------------------ build

    def add_node(self, node: Node) -> int:
        """Insert ``node`` if unseen; return its (possibly existing) index."""
        self._check_mutable()
        existing = self._index.get(node)
        if existing is not None:
            return existing
        idx = len(self._index)
        self._graph.add_node(idx, node=node)
        self._index[node] = idx
        return idx

    def add_edge(self, source: Node, target: Node, edge: Edge) -> bool:
        """
        Connect ``source`` to ``target`` unless that would create a self loop
        or a second edge for the same ordered pair.

        Returns:
            ``True`` if the edge was inserted.
        """
        self._check_mutable()
        if source == target:
            return False
        src = self.add_node(source)
        dst = self.add_node(target)
        if self._graph.has_edge(src, dst):
            return False
        self._graph.add_edge(src, dst, edge=edge)
        return True

    def freeze(self) -> "Graph":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise GraphFrozenError("Graph is frozen; construction has completed.")

    # ---------------------------------------------------------------- queries

    @property
    def num_nodes(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def num_edges(self) -> int:
        return self._graph.number_of_edges()

    @property
    def nodes(self) -> List[Node]:
        """Nodes in index (insertion) order."""
        return [data["node"] for _, data in self._graph.nodes(data=True)]

    def __contains__(self, node: object) -> bool:
        return node in self._index

    def __len__(self) -> int:
        return self.num_nodes

    def index_of(self, node: Node) -> int:
        return self._index[node]

    def node_at(self, idx: int) -> Node:
        return self._graph.nodes[idx]["node"]

    def iter_edges(self) -> Iterator[Tuple[int, int, Edge]]:
        """Yield ``(source_index, target_index, edge)`` grouped by source index, then insertion order."""
        for src, dst, data in self._graph.edges(data=True):
            yield src, dst, data["edge"]

    def edges(self) -> List[Tuple[Node, Node, Edge]]:
        return [
            (self.node_at(src), self.node_at(dst), edge)
            for src, dst, edge in self.iter_edges()
        ]

    def has_edge(self, source: Node, target: Node) -> bool:
        if source not in self._index or target not in self._index:
            return False
        return self._graph.has_edge(self._index[source], self._index[target])

    def edge_between(self, source: Node, target: Node) -> Edge:
        if not self.has_edge(source, target):
            raise KeyError(f"No edge {source.qualified_name()} -> {target.qualified_name()}.")
        data = self._graph.get_edge_data(self._index[source], self._index[target])
        # Single edge per ordered pair, so the first key is the only one.
        return next(iter(data.values()))["edge"]

    def successors(self, node: Node) -> List[Node]:
        return [self.node_at(i) for i in self._graph.successors(self.index_of(node))]

    def predecessors(self, node: Node) -> List[Node]:
        return [self.node_at(i) for i in self._graph.predecessors(self.index_of(node))]

    def summary(self) -> GraphSummary:
        edges = [edge for _, _, edge in self.iter_edges()]
        return GraphSummary(
            nodes=self.num_nodes,
            blocks=sum(1 for node in self.nodes if node.is_block),
            data_edges=sum(1 for edge in edges if isinstance(edge, DataEdge)),
            control_edges=sum(1 for edge in edges if isinstance(edge, ControlEdge)),
        )

    def to_networkx(self) -> nx.MultiDiGraph:
        """Return a frozen copy of the underlying networkx graph."""
        return nx.freeze(self._graph.copy())
