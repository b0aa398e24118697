#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
"""
Load a graph document, optionally validate it, and print it as a summary,
JSON, YAML or Graphviz DOT.
"""

import argparse
import logging
import sys
from pathlib import Path

from mlcore.graphs.ir import IRGraph, from_json, from_yaml, to_dot, to_json, to_yaml
from mlcore.graphs.ir.dot import RANKDIRS

logger = logging.getLogger(__name__)

FORMATS = ("summary", "json", "yaml", "dot")


def load_graph(path: Path) -> IRGraph:
    text = path.read_text()
    if path.suffix in (".yaml", ".yml"):
        logger.debug("loading YAML graph document: %s", path)
        return from_yaml(text)
    logger.debug("loading JSON graph document: %s", path)
    return from_json(text)


def format_graph(graph: IRGraph, fmt: str, rankdir: str = "TB") -> str:
    match fmt:
        case "json":
            return to_json(graph)
        case "yaml":
            return to_yaml(graph)
        case "dot":
            return to_dot(graph, rankdir=rankdir)
    return f"{graph!r}\n{graph}"


def run(args: argparse.Namespace) -> int:
    graph = load_graph(Path(args.file))
    logger.info("loaded %r", graph)
    if args.validate:
        errors = graph.validate_inputs()
        for error in errors:
            print(f"error: {error}", file=sys.stderr)
        if len(errors) > 0:
            return 1
    print(format_graph(graph, args.format, args.rankdir))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Inspect and convert graph documents",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--format", type=str, choices=FORMATS, default="summary", help="output format"
    )
    parser.add_argument(
        "--rankdir", type=str, choices=RANKDIRS, default="TB", help="DOT layout"
    )
    parser.add_argument(
        "--validate",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="validate graph structure",
    )
    parser.add_argument(
        "--debug", action=argparse.BooleanOptionalAction, help="debug mode"
    )
    parser.add_argument("file", help="graph document, YAML or JSON")
    args = parser.parse_args(argv)

    logging.basicConfig()
    root_logger = logging.getLogger("mlcore")
    root_logger.setLevel(logging.INFO)
    if args.debug:
        root_logger.setLevel(logging.DEBUG)

    return run(args)


if __name__ == "__main__":
    sys.exit(main())
