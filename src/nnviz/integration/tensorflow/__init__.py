"""
TensorFlow GraphDef loading.
"""

from .graphdef_loader import (
    graph_from_graph_def,
    import_graph_def,
    load_graph_def,
    operations_from_tf_graph,
    parse_graph_def,
)

__all__ = [
    "graph_from_graph_def",
    "import_graph_def",
    "load_graph_def",
    "operations_from_tf_graph",
    "parse_graph_def",
]
