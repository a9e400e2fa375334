"""
Build a deduplicated ``Graph`` from a sequence of framework operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from nnviz.utils.logging import get_logger

from .identity import DEFAULT_SEPARATOR, check_max_depth, resolve_node
from .ir import ControlEdge, DataEdge, Edge, Graph, Node
from .operations import Operation

log = get_logger(__name__)


@dataclass
class BuildStats:
    operations: int = 0
    edges_added: int = 0
    self_loops_skipped: int = 0
    duplicates_skipped: int = 0


class GraphBuilder:
    """
    Single-use builder owning the in-progress graph and its identity map.

    Example::

        graph = GraphBuilder(max_depth=2).build(operations)
    """

    def __init__(
        self,
        *,
        max_depth: Optional[int] = None,
        separator: str = DEFAULT_SEPARATOR,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.max_depth = check_max_depth(max_depth)
        self.separator = separator
        self.graph = Graph(metadata=dict(metadata or {}))
        self.stats = BuildStats()
        self._built = False

    def resolve(self, op: Operation) -> Node:
        """Resolve ``op`` and make sure its node exists in the graph."""
        node = resolve_node(op, max_depth=self.max_depth, separator=self.separator)
        self.graph.add_node(node)
        return node

    def connect(self, source: Node, target: Node, edge: Edge) -> bool:
        if source == target:
            self.stats.self_loops_skipped += 1
            return False
        if not self.graph.add_edge(source, target, edge):
            self.stats.duplicates_skipped += 1
            return False
        self.stats.edges_added += 1
        return True

    def add_operation(self, op: Operation) -> None:
        node = self.resolve(op)

        for input_index, (producer, output_index) in enumerate(op.inputs):
            self.connect(
                self.resolve(producer),
                node,
                DataEdge(input_index=input_index, output_index=output_index),
            )

        # Same producer -> consumer relationship as above, seen from the
        # producer; whichever side is visited first wins the dedup.
        for output_index, consumers in enumerate(op.output_consumers):
            for consumer, input_index in consumers:
                self.connect(
                    node,
                    self.resolve(consumer),
                    DataEdge(input_index=input_index, output_index=output_index),
                )

        for dependent in op.control_outputs:
            self.connect(self.resolve(dependent), node, ControlEdge())

        for predecessor in op.control_inputs:
            self.connect(node, self.resolve(predecessor), ControlEdge())

        self.stats.operations += 1

    def build(self, operations: Iterable[Operation]) -> Graph:
        if self._built:
            raise RuntimeError("GraphBuilder instances are single use.")
        self._built = True

        for op in operations:
            self.add_operation(op)

        self.graph.metadata.setdefault("max_depth", self.max_depth)
        self.graph.freeze()
        log.debug(
            "Built graph from %d operations: %d nodes, %d edges "
            "(%d self loops and %d duplicate edges skipped)",
            self.stats.operations,
            self.graph.num_nodes,
            self.graph.num_edges,
            self.stats.self_loops_skipped,
            self.stats.duplicates_skipped,
        )
        return self.graph


def build_graph(
    operations: Iterable[Operation],
    *,
    max_depth: Optional[int] = None,
    separator: str = DEFAULT_SEPARATOR,
    metadata: Optional[Dict[str, Any]] = None,
) -> Graph:
    """
    Convert ``operations`` into a frozen ``Graph``.

    Args:
        operations: Operations in source order.
        max_depth: Optional collapsing depth (see ``resolve_node``).
        separator: Hierarchical name separator.
        metadata: Extra provenance stored on ``Graph.metadata``.
    """
    builder = GraphBuilder(max_depth=max_depth, separator=separator, metadata=metadata)
    return builder.build(operations)
