from __future__ import annotations

import random
from collections import Counter
from typing import List

import pytest

from nnviz.errors import NodeEncodingError
from nnviz.graph.builders import GraphBuilder, build_graph
from nnviz.graph.identity import resolve_node
from nnviz.graph.ir import BlockKind, ControlEdge, DataEdge, Node, OpKind
from nnviz.graph.operations import RawOperation, add_control_dependency, connect


def _node(name: str, op_type: str) -> Node:
    return Node(name=tuple(name.split("/")), kind=OpKind(op_type))


def test_scenario_single_data_edge() -> None:
    a = RawOperation(name="a", type="Const")
    b = RawOperation(name="b", type="Add")
    connect(a, 0, b)

    graph = build_graph([a, b])

    assert graph.nodes == [_node("a", "Const"), _node("b", "Add")]
    assert graph.num_edges == 1
    assert graph.edge_between(_node("a", "Const"), _node("b", "Add")) == DataEdge(
        input_index=0, output_index=0
    )


def test_scenario_collapsing_suppresses_self_loop() -> None:
    x = RawOperation(name="grp/x", type="Const")
    y = RawOperation(name="grp/y", type="Add")
    connect(x, 0, y)

    graph = build_graph([x, y], max_depth=1)

    assert graph.nodes == [Node(name=("grp",), kind=BlockKind())]
    assert graph.num_edges == 0


def test_scenario_control_input_points_to_predecessor() -> None:
    a = RawOperation(name="a", type="NoOp")
    b = RawOperation(name="b", type="NoOp")
    add_control_dependency(a, b)

    graph = build_graph([a, b])

    assert graph.num_nodes == 2
    assert graph.edges() == [(_node("b", "NoOp"), _node("a", "NoOp"), ControlEdge())]


def test_scenario_shared_output_consumers() -> None:
    a = RawOperation(name="a", type="Const")
    b = RawOperation(name="b", type="Relu")
    c = RawOperation(name="c", type="Tanh")
    connect(a, 0, b)
    connect(a, 0, c)

    graph = build_graph([a, b, c])

    assert graph.num_nodes == 3
    assert [(s.name, t.name) for s, t, _ in graph.edges()] == [(("a",), ("b",)), (("a",), ("c",))]
    for _, _, edge in graph.edges():
        assert edge == DataEdge(input_index=0, output_index=0)


def test_consumer_pass_alone_discovers_producer_to_consumer_edges() -> None:
    a = RawOperation(name="a", type="Split")
    b = RawOperation(name="b", type="Relu")
    c = RawOperation(name="c", type="Add")
    connect(a, 1, b)
    connect(b, 0, c)
    connect(a, 0, c)

    # Only `a` is yielded; `b` and `c` are reached through its consumer lists.
    graph = build_graph([a])

    assert graph.nodes == [_node("a", "Split"), _node("c", "Add"), _node("b", "Relu")]
    assert graph.edge_between(_node("a", "Split"), _node("b", "Relu")) == DataEdge(
        input_index=0, output_index=1
    )
    assert graph.edge_between(_node("a", "Split"), _node("c", "Add")) == DataEdge(
        input_index=1, output_index=0
    )
    assert not graph.has_edge(_node("b", "Relu"), _node("c", "Add"))


def test_control_output_alone_yields_dependent_to_op_edge() -> None:
    a = RawOperation(name="init", type="NoOp")
    b = RawOperation(name="train", type="NoOp")
    add_control_dependency(a, b)

    graph = build_graph([a])

    assert graph.edges() == [(_node("train", "NoOp"), _node("init", "NoOp"), ControlEdge())]


def test_first_discovered_edge_wins() -> None:
    a = RawOperation(name="a", type="Split")
    b = RawOperation(name="b", type="Concat")
    connect(a, 1, b)
    connect(a, 0, b)

    graph = build_graph([b, a])

    assert graph.num_edges == 1
    assert graph.edge_between(_node("a", "Split"), _node("b", "Concat")) == DataEdge(
        input_index=0, output_index=1
    )


def test_data_and_control_edges_in_opposite_directions_coexist() -> None:
    a = RawOperation(name="a", type="Const")
    b = RawOperation(name="b", type="Add")
    connect(a, 0, b)
    add_control_dependency(a, b)

    graph = build_graph([a, b])

    assert graph.edges() == [
        (_node("a", "Const"), _node("b", "Add"), DataEdge(input_index=0, output_index=0)),
        (_node("b", "Add"), _node("a", "Const"), ControlEdge()),
    ]


def test_control_edge_colliding_with_data_edge_is_dropped() -> None:
    a = RawOperation(name="a", type="Const")
    b = RawOperation(name="b", type="Add")
    connect(a, 0, b)
    # a waits on b, which maps onto the same ordered pair as the data edge.
    add_control_dependency(b, a)

    graph = build_graph([a, b])

    assert graph.num_edges == 1
    assert graph.edge_between(_node("a", "Const"), _node("b", "Add")) == DataEdge(
        input_index=0, output_index=0
    )
    assert graph.summary().control_edges == 0


def test_isolated_operations_still_become_nodes() -> None:
    graph = build_graph([RawOperation(name="lonely", type="Placeholder")])
    assert graph.nodes == [_node("lonely", "Placeholder")]
    assert graph.num_edges == 0


def test_collapsing_keeps_edges_between_blocks() -> None:
    x = RawOperation(name="enc/a/x", type="Const")
    y = RawOperation(name="enc/b/y", type="MatMul")
    z = RawOperation(name="dec/z", type="Relu")
    connect(x, 0, y)
    connect(y, 0, z)

    graph = build_graph([x, y, z], max_depth=1)

    enc = Node(name=("enc",), kind=BlockKind())
    dec = Node(name=("dec",), kind=BlockKind())
    assert graph.nodes == [enc, dec]
    assert graph.edges() == [(enc, dec, DataEdge(input_index=0, output_index=0))]


def test_collapsing_leaves_shallow_names_alone() -> None:
    x = RawOperation(name="input", type="Placeholder")
    y = RawOperation(name="model/layer/dense", type="MatMul")
    connect(x, 0, y)

    graph = build_graph([x, y], max_depth=2)

    assert graph.nodes == [
        _node("input", "Placeholder"),
        Node(name=("model", "layer"), kind=BlockKind()),
    ]


def test_builder_counts_skipped_edges() -> None:
    x = RawOperation(name="grp/x", type="Const")
    y = RawOperation(name="grp/y", type="Add")
    z = RawOperation(name="out", type="Identity")
    connect(x, 0, y)
    connect(y, 0, z)

    builder = GraphBuilder(max_depth=1)
    graph = builder.build([x, y, z])

    assert graph.num_edges == 1
    assert builder.stats.operations == 3
    assert builder.stats.edges_added == 1
    # x->y seen from both sides collapses to a self loop twice.
    assert builder.stats.self_loops_skipped == 2
    # y->z seen from both sides; the second sighting is a duplicate.
    assert builder.stats.duplicates_skipped == 1


def test_builder_is_single_use_and_graph_is_frozen() -> None:
    builder = GraphBuilder()
    graph = builder.build([RawOperation(name="a", type="Const")])

    assert graph.frozen
    assert graph.metadata["max_depth"] is None
    with pytest.raises(RuntimeError):
        builder.build([])


def test_metadata_is_copied_onto_graph() -> None:
    meta = {"framework": "test"}
    graph = build_graph([], metadata=meta, max_depth=3)
    assert graph.metadata == {"framework": "test", "max_depth": 3}
    assert meta == {"framework": "test"}


def test_encoding_failure_aborts_build() -> None:
    a = RawOperation(name="a", type="Const")
    bad = RawOperation(name=b"\xff", type="Add")
    connect(a, 0, bad)
    with pytest.raises(NodeEncodingError):
        build_graph([a, bad])


def test_invalid_max_depth_rejected_up_front() -> None:
    with pytest.raises(ValueError):
        GraphBuilder(max_depth=-3)


def _random_operations(seed: int, count: int = 40) -> List[RawOperation]:
    rng = random.Random(seed)
    scopes = ["enc", "dec", "head"]
    ops: List[RawOperation] = []
    for idx in range(count):
        depth = rng.randint(1, 4)
        path = [rng.choice(scopes) for _ in range(depth - 1)] + [f"op{idx % 7}"]
        op = RawOperation(name="/".join(path), type=rng.choice(["Add", "MatMul", "Relu"]))
        op.ensure_outputs(2)
        if ops:
            for _ in range(rng.randint(0, 3)):
                connect(rng.choice(ops), rng.randint(0, 1), op)
            if rng.random() < 0.3:
                add_control_dependency(rng.choice(ops), op)
        ops.append(op)
    rng.shuffle(ops)
    return ops


@pytest.mark.parametrize("offset", [0, 1, 2, 3])
@pytest.mark.parametrize("max_depth", [None, 0, 1, 2])
def test_random_graphs_respect_invariants(graph_seed: int, offset: int, max_depth) -> None:
    ops = _random_operations(graph_seed + offset)
    graph = build_graph(ops, max_depth=max_depth)

    expected_nodes = {resolve_node(op, max_depth=max_depth) for op in ops}
    assert set(graph.nodes) == expected_nodes
    assert len(graph.nodes) == len(expected_nodes)

    pairs = Counter((src, dst) for src, dst, _ in graph.iter_edges())
    assert all(count == 1 for count in pairs.values())
    assert all(src != dst for src, dst in pairs)

    for op in ops:
        target = resolve_node(op, max_depth=max_depth)
        for producer, _ in op.inputs:
            source = resolve_node(producer, max_depth=max_depth)
            if source != target:
                assert graph.has_edge(source, target)
        for predecessor in op.control_inputs:
            source = resolve_node(predecessor, max_depth=max_depth)
            if source != target:
                assert graph.has_edge(target, source)
