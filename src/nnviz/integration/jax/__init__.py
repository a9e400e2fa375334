"""
JAX integration helpers.
"""

from .jaxpr_capture import capture_graph_jaxpr, operations_from_jaxpr

__all__ = ["capture_graph_jaxpr", "operations_from_jaxpr"]
