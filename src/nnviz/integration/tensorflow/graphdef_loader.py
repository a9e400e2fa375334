"""
Load TensorFlow ``GraphDef`` files and expose their operations.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from nnviz.errors import GraphLoadError, NodeEncodingError
from nnviz.graph.builders import build_graph
from nnviz.graph.ir import Graph
from nnviz.graph.operations import RawOperation, add_control_dependency, connect
from nnviz.utils.logging import get_logger

log = get_logger(__name__)

TEXT_SUFFIXES = (".pbtxt", ".pbtext")


def _import_tensorflow() -> Any:
    try:
        import tensorflow as tf
    except ModuleNotFoundError as exc:  # pragma: no cover - handled in tests
        raise ModuleNotFoundError(
            "Loading GraphDef files requires TensorFlow to be installed."
        ) from exc
    return tf


def parse_graph_def(data: bytes, *, text_format: bool = False) -> Any:
    """Parse serialized bytes into a ``tf.compat.v1.GraphDef``."""
    tf = _import_tensorflow()
    from google.protobuf import text_format as pb_text_format
    from google.protobuf.message import DecodeError

    graph_def = tf.compat.v1.GraphDef()
    if text_format:
        try:
            pb_text_format.Parse(data.decode("utf-8"), graph_def)
        except (UnicodeDecodeError, pb_text_format.ParseError) as exc:
            raise GraphLoadError(f"Invalid text GraphDef: {exc}") from exc
    else:
        try:
            graph_def.ParseFromString(data)
        except DecodeError as exc:
            raise GraphLoadError(f"Invalid binary GraphDef: {exc}") from exc
    return graph_def


def import_graph_def(graph_def: Any) -> Any:
    """Import a ``GraphDef`` into a fresh ``tf.Graph``."""
    tf = _import_tensorflow()
    graph = tf.Graph()
    try:
        with graph.as_default():
            tf.compat.v1.import_graph_def(graph_def, name="")
    except ValueError as exc:
        raise GraphLoadError(f"GraphDef could not be imported: {exc}") from exc
    return graph


def load_graph_def(path: Union[str, Path]) -> Any:
    """
    Read ``path`` and import it as a ``tf.Graph``.

    Binary ``GraphDef`` is assumed unless the file ends in ``.pbtxt`` or
    ``.pbtext``. ``OSError`` from reading the file propagates unchanged.
    """
    path = Path(path)
    data = path.read_bytes()
    text = path.suffix.lower() in TEXT_SUFFIXES
    graph = import_graph_def(parse_graph_def(data, text_format=text))
    log.info("Loaded %d operations from %s", len(graph.get_operations()), path)
    return graph


def _op_text(tf_op: Any, attr: str) -> Union[str, bytes]:
    try:
        return getattr(tf_op, attr)
    except UnicodeDecodeError as exc:
        raise NodeEncodingError(attr, "<undecodable>", str(exc)) from exc


def operations_from_tf_graph(tf_graph: Any) -> List[RawOperation]:
    """
    Translate every operation of ``tf_graph`` into a ``RawOperation``.

    Data edges are wired from each op's input tensors (producer op plus
    ``value_index``). Control outputs are derived by inverting control
    inputs rather than read from TensorFlow internals.
    """
    tf_ops = tf_graph.get_operations()
    ops: Dict[str, RawOperation] = {}
    for tf_op in tf_ops:
        ops[tf_op.name] = RawOperation(
            name=_op_text(tf_op, "name"), type=_op_text(tf_op, "type")
        )

    for tf_op in tf_ops:
        op = ops[tf_op.name]
        op.ensure_outputs(len(tf_op.outputs))
        for tensor in tf_op.inputs:
            connect(ops[tensor.op.name], tensor.value_index, op)
        for before in tf_op.control_inputs:
            add_control_dependency(ops[before.name], op)

    return list(ops.values())


def graph_from_graph_def(
    path: Union[str, Path],
    *,
    max_depth: Optional[int] = None,
    separator: str = "/",
) -> Graph:
    """Load ``path`` and build the deduplicated ``Graph`` in one call."""
    tf_graph = load_graph_def(path)
    return build_graph(
        operations_from_tf_graph(tf_graph),
        max_depth=max_depth,
        separator=separator,
        metadata={"framework": "tensorflow", "source": str(path)},
    )
