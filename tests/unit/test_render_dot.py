from __future__ import annotations

import pytest

from nnviz.graph.builders import build_graph
from nnviz.graph.ir import BlockKind, ControlEdge, DataEdge, Node, OpKind
from nnviz.graph.operations import RawOperation, add_control_dependency, connect
from nnviz.graph.topo import edge_order, node_order
from nnviz.render.dot import edge_label, node_label, render_dot, to_digraph


def _build_ops():
    const = RawOperation(name="model/const", type="Const")
    dense = RawOperation(name="model/dense/MatMul", type="MatMul")
    init = RawOperation(name="init", type="NoOp")
    out = RawOperation(name="output", type="Identity")
    connect(const, 0, dense)
    connect(dense, 0, out)
    add_control_dependency(init, out)
    return [out, dense, const, init]


def test_node_and_edge_labels() -> None:
    assert node_label(Node(name=("a", "b"), kind=OpKind("Add"))) == "a/b : Add"
    assert node_label(Node(name=("grp",), kind=BlockKind())) == "grp : Block"
    assert edge_label(DataEdge(input_index=2, output_index=1)) == "1:2"
    assert edge_label(DataEdge(input_index=0, output_index=0, dim=(None, 3))) == "0:0 [?, 3]"
    assert edge_label(ControlEdge()) is None


def test_render_contains_every_node_and_edge() -> None:
    a = RawOperation(name="a", type="Const")
    b = RawOperation(name="b", type="Add")
    connect(a, 0, b)

    source = render_dot(build_graph([a, b]))

    assert source.startswith("digraph nnviz {")
    assert 'label="a : Const"' in source
    assert 'label="b : Add"' in source
    assert "0 -> 1" in source
    assert 'label="0:0"' in source
    assert source.rstrip().endswith("}")


def test_blocks_are_boxes_and_control_edges_dashed() -> None:
    graph = build_graph(_build_ops(), max_depth=1)
    source = render_dot(graph)

    assert 'label="model : Block"' in source
    assert "shape=box" in source
    assert "style=dashed" in source


def test_render_is_reproducible() -> None:
    first = render_dot(build_graph(_build_ops(), max_depth=2))
    second = render_dot(build_graph(_build_ops(), max_depth=2))
    assert first == second


def test_sorted_order_is_independent_of_operation_order() -> None:
    ops = _build_ops()
    forward = build_graph(ops)
    backward = build_graph(list(reversed(ops)))

    def labels(graph):
        return [node_label(graph.node_at(i)) for i in node_order(graph, "sorted")]

    assert labels(forward) == labels(backward)
    assert labels(forward) == [
        "init : NoOp",
        "model/const : Const",
        "model/dense/MatMul : MatMul",
        "output : Identity",
    ]

    def edge_names(graph):
        return [
            (graph.node_at(s).qualified_name(), graph.node_at(d).qualified_name())
            for s, d, _ in edge_order(graph, "sorted")
        ]

    assert edge_names(forward) == edge_names(backward)


def test_rankdir_and_name_are_applied() -> None:
    graph = build_graph([RawOperation(name="a", type="Const")])
    dot = to_digraph(graph, name="net", rankdir="LR")

    assert dot.source.startswith("digraph net {")
    assert "rankdir=LR" in dot.source


def test_unknown_order_rejected() -> None:
    graph = build_graph([RawOperation(name="a", type="Const")])
    with pytest.raises(ValueError):
        render_dot(graph, order="random")
