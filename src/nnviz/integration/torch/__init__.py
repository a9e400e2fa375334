"""
PyTorch integration: build graphs from ``torch.fx`` traces.
"""

from .fx_capture import capture_graph, operations_from_fx

__all__ = ["capture_graph", "operations_from_fx"]
