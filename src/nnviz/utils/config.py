"""
Run configuration for a single conversion.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from nnviz.graph.identity import DEFAULT_SEPARATOR, check_max_depth
from nnviz.graph.topo import ORDERS

RANKDIRS = ("TB", "LR", "BT", "RL")


@dataclass
class VizConfig:
    input: Path
    output: Optional[Path] = None
    max_depth: Optional[int] = None
    separator: str = DEFAULT_SEPARATOR
    order: str = "insertion"
    rankdir: Optional[str] = None
    debug: bool = False

    def __post_init__(self) -> None:
        self.input = Path(self.input)
        if self.output is not None:
            self.output = Path(self.output)
        check_max_depth(self.max_depth)
        if not self.separator:
            raise ValueError("separator must be a non-empty string.")
        if self.order not in ORDERS:
            raise ValueError(f"order must be one of {ORDERS}, got `{self.order}`.")
        if self.rankdir is not None and self.rankdir not in RANKDIRS:
            raise ValueError(f"rankdir must be one of {RANKDIRS}, got `{self.rankdir}`.")
