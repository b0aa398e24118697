#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from mlcore.exceptions import GraphError

from .graph import IRGraph
from .node import IRNode, NodeKind

__all__ = [
    "RANKDIRS",
    "to_dot",
]

RANKDIRS = ("TB", "LR", "BT", "RL")

_NODE_STYLES = {
    NodeKind.INPUT: ("ellipse", "green"),
    NodeKind.CONST: ("box", "gray"),
    NodeKind.OP: ("box", "blue"),
    NodeKind.OUTPUT: ("ellipse", "red"),
}


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _quote(text: str) -> str:
    return f'"{_escape(text)}"'


def _label(node: IRNode) -> str:
    match node.kind:
        case NodeKind.OP:
            head = "OP" if node.operation is None else node.operation.kind.value
        case _:
            head = node.kind.value.upper()
    # DOT escaped newline
    return f'"{head}\\n{_escape(node.name)}"'


def to_dot(graph: IRGraph, rankdir: str = "TB") -> str:
    """Graphviz description of graph, one statement per node and per edge."""
    if rankdir not in RANKDIRS:
        raise GraphError(f"invalid rankdir {rankdir!r}, expected one of {RANKDIRS}")
    lines = [
        f"digraph {_quote(graph.name or 'G')} {{",
        f"  rankdir={rankdir};",
        "  node [shape=box];",
    ]
    nodes = graph.nodes
    for name, node in nodes.items():
        shape, color = _NODE_STYLES[node.kind]
        lines.append(
            f"  {_quote(name)} [label={_label(node)}, shape={shape}, color={color}];"
        )
    for name, node in nodes.items():
        for pred in node.inputs:
            lines.append(f"  {_quote(pred)} -> {_quote(name)};")
    lines.append("}")
    return "\n".join(lines)
