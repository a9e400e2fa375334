"""
FX-based capture of PyTorch computation graphs.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import torch
import torch.fx as fx

from nnviz.graph.builders import build_graph
from nnviz.graph.ir import Graph
from nnviz.graph.operations import RawOperation, connect


def _fx_op_name(node: fx.Node) -> str:
    # The parent module path is the scope so depth collapsing groups a
    # submodule's calls; the FX node name keeps repeated calls distinct.
    if node.op == "call_module":
        return "/".join(str(node.target).split(".")[:-1] + [node.name])
    return node.name


def _fx_op_type(gm: fx.GraphModule, node: fx.Node) -> str:
    if node.op == "call_module":
        return type(gm.get_submodule(str(node.target))).__name__
    if node.op == "call_function":
        return getattr(node.target, "__name__", str(node.target))
    if node.op == "call_method":
        return str(node.target)
    return node.op


def operations_from_fx(fx_graph_module: Any) -> List[RawOperation]:
    """
    Convert a ``torch.fx.GraphModule`` into operations.

    Each FX node becomes one operation with a single output slot; its
    ``all_input_nodes`` fill the input slots in order.
    """
    if not isinstance(fx_graph_module, fx.GraphModule):
        raise TypeError(
            "operations_from_fx expects a torch.fx.GraphModule. "
            f"Received: {type(fx_graph_module)!r}"
        )

    gm: fx.GraphModule = fx_graph_module
    ops: Dict[fx.Node, RawOperation] = {}
    for fx_node in gm.graph.nodes:
        op = RawOperation(name=_fx_op_name(fx_node), type=_fx_op_type(gm, fx_node))
        op.ensure_outputs(1)
        for input_node in fx_node.all_input_nodes:
            connect(ops[input_node], 0, op)
        ops[fx_node] = op
    return list(ops.values())


def capture_graph(
    module: torch.nn.Module,
    *,
    max_depth: Optional[int] = None,
) -> Graph:
    """
    Trace ``module`` with FX and build the deduplicated ``Graph``.

    Args:
        module: The PyTorch module to trace.
        max_depth: Optional collapsing depth over module paths.
    """
    traced = fx.symbolic_trace(module)
    return build_graph(
        operations_from_fx(traced),
        max_depth=max_depth,
        metadata={
            "framework": "torch_fx",
            "module_type": module.__class__.__qualname__,
        },
    )
