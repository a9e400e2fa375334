"""
Renderers for built graphs.
"""

from .dot import edge_label, node_label, render_dot, to_digraph

__all__ = ["edge_label", "node_label", "render_dot", "to_digraph"]
