"""
Render a TensorFlow GraphDef as Graphviz DOT text.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from nnviz.errors import NnvizError
from nnviz.graph.builders import build_graph
from nnviz.integration.tensorflow.graphdef_loader import (
    load_graph_def,
    operations_from_tf_graph,
)
from nnviz.render.dot import render_dot
from nnviz.utils.config import RANKDIRS, VizConfig
from nnviz.utils.logging import configure_logging, get_logger

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nnviz", description=__doc__)
    parser.add_argument("-i", "--input", type=Path, required=True,
                        help="GraphDef file to render (.pb, or .pbtxt for text format)")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="write DOT text here instead of stdout")
    parser.add_argument("-d", "--max-depth", type=int, default=None,
                        help="collapse names deeper than this many segments into blocks")
    parser.add_argument("--separator", default="/",
                        help="hierarchical name separator (default: /)")
    parser.add_argument("--sorted", action="store_true",
                        help="emit nodes and edges sorted by name instead of load order")
    parser.add_argument("--rankdir", choices=RANKDIRS, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def parse_config(argv: Optional[Sequence[str]] = None) -> VizConfig:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return VizConfig(
            input=args.input,
            output=args.output,
            max_depth=args.max_depth,
            separator=args.separator,
            order="sorted" if args.sorted else "insertion",
            rankdir=args.rankdir,
            debug=args.verbose,
        )
    except ValueError as exc:
        parser.error(str(exc))
        raise  # pragma: no cover - parser.error exits


def render(config: VizConfig) -> str:
    """Load, build and render according to ``config``; no output is written."""
    tf_graph = load_graph_def(config.input)
    graph = build_graph(
        operations_from_tf_graph(tf_graph),
        max_depth=config.max_depth,
        separator=config.separator,
        metadata={"framework": "tensorflow", "source": str(config.input)},
    )
    summary = graph.summary()
    log.info(
        "Graph has %d nodes (%d blocks), %d data edges, %d control edges",
        summary.nodes,
        summary.blocks,
        summary.data_edges,
        summary.control_edges,
    )
    return render_dot(
        graph,
        order=config.order,
        rankdir=config.rankdir,
        separator=config.separator,
    )


def write_output(text: str, output: Optional[Path]) -> None:
    if output is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    log.info("Wrote %s", output)


def main(argv: Optional[Sequence[str]] = None) -> int:
    config = parse_config(argv)
    configure_logging(config.debug)
    try:
        text = render(config)
        write_output(text, config.output)
    except (NnvizError, OSError, ImportError) as exc:
        log.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
