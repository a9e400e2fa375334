from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from nnviz.graph.builders import build_graph
from nnviz.graph.ir import Graph
from nnviz.graph.operations import RawOperation, connect


def _jax_core() -> Any:
    try:
        try:
            from jax import core as jax_core
        except ModuleNotFoundError:
            from jax._src import core as jax_core  # type: ignore[attr-defined]
        else:
            if not hasattr(jax_core, "ClosedJaxpr"):
                from jax._src import core as jax_core  # type: ignore[attr-defined]
    except ModuleNotFoundError as exc:  # pragma: no cover
        raise ModuleNotFoundError(
            "operations_from_jaxpr requires JAX to be installed."
        ) from exc
    return jax_core


def _scope(eqn: Any) -> str:
    source_info = getattr(eqn, "source_info", None)
    name_stack = getattr(source_info, "name_stack", None)
    return str(name_stack) if name_stack is not None else ""


def operations_from_jaxpr(jaxpr: Any) -> List[RawOperation]:
    """
    Convert a ``jax.core.ClosedJaxpr`` (or ``Jaxpr``) into operations.

    Constants become ``const`` operations, inputs become ``input``
    operations and every equation becomes one operation named
    ``<scope>/<primitive>_<idx>``; each out-var is one output slot.
    Literal operands carry no producer and are skipped.
    """
    jax_core = _jax_core()
    ClosedJaxpr = getattr(jax_core, "ClosedJaxpr", None)
    Jaxpr = getattr(jax_core, "Jaxpr", None)
    Literal = getattr(jax_core, "Literal", None)

    if ClosedJaxpr is None or Jaxpr is None:
        raise RuntimeError("Unsupported JAX version: core types not available.")

    if isinstance(jaxpr, ClosedJaxpr):
        inner = jaxpr.jaxpr
    elif isinstance(jaxpr, Jaxpr):
        inner = jaxpr
    else:
        raise TypeError(
            "operations_from_jaxpr expects a jax.core.ClosedJaxpr or Jaxpr. "
            f"Received: {type(jaxpr)!r}"
        )

    def _is_literal(var: Any) -> bool:
        return Literal is not None and isinstance(var, Literal)

    ops: List[RawOperation] = []
    producers: Dict[Any, Tuple[RawOperation, int]] = {}

    for idx, var in enumerate(inner.constvars):
        op = RawOperation(name=f"const_{idx}", type="const")
        op.ensure_outputs(1)
        producers[var] = (op, 0)
        ops.append(op)

    for pos, var in enumerate(inner.invars):
        op = RawOperation(name=f"input_{pos}", type="input")
        op.ensure_outputs(1)
        producers[var] = (op, 0)
        ops.append(op)

    for idx, eqn in enumerate(inner.eqns):
        primitive = str(eqn.primitive.name)
        scope = _scope(eqn)
        base = f"{primitive}_{idx}"
        op = RawOperation(name=f"{scope}/{base}" if scope else base, type=primitive)
        op.ensure_outputs(len(eqn.outvars))

        for invar in eqn.invars:
            if _is_literal(invar):
                continue
            producer = producers.get(invar)
            if producer is None:
                raise KeyError(
                    f"JAXPR contains var `{invar}` with no registered producer."
                )
            connect(producer[0], producer[1], op)

        for slot, outvar in enumerate(eqn.outvars):
            producers[outvar] = (op, slot)
        ops.append(op)

    return ops


def capture_graph_jaxpr(
    fn,
    example_inputs: Sequence[Any],
    *,
    max_depth: Optional[int] = None,
) -> Graph:
    """
    Trace ``fn`` with ``jax.make_jaxpr`` and build the deduplicated Graph.

    Args:
        fn: Callable to trace.
        example_inputs: Sample inputs passed to ``jax.make_jaxpr``.
        max_depth: Optional collapsing depth over name-stack scopes.
    """
    try:
        import jax
    except ModuleNotFoundError as exc:  # pragma: no cover - handled in tests
        raise ModuleNotFoundError(
            "capture_graph_jaxpr requires JAX to be installed."
        ) from exc

    if not isinstance(example_inputs, (list, tuple)):
        example_inputs = (example_inputs,)

    closed_jaxpr = jax.make_jaxpr(fn)(*example_inputs)
    return build_graph(
        operations_from_jaxpr(closed_jaxpr),
        max_depth=max_depth,
        metadata={
            "framework": "jaxpr",
            "function_name": getattr(fn, "__name__", "<lambda>"),
        },
    )
