#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable
import logging
from typing_extensions import override

from mlcore.data import TensorRef
from mlcore.exceptions import GraphError, GraphValidationError
from mlcore.itf.graph import Graph

from .node import IRNode, NodeKind

__all__ = [
    "IRGraph",
    "merge",
]

logger = logging.getLogger(__name__)


class IRGraph(Graph):
    """
    Mutable computation graph of IRNode.

    Nodes live in an arena where each node gets a stable integer handle on
    insertion, the name index maps node names to handles. Removed nodes
    leave an empty slot so that insertion order is preserved. The arena is
    compacted once empty slots outnumber the nodes, which renumbers the
    handles but keeps the order.
    """

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._arena: list[IRNode | None] = []
        self._index: dict[str, int] = {}
        self._removed = 0
        self._inputs: list[str] = []
        self._outputs: list[str] = []
        self.metadata: dict[str, str] = {}

    @property
    @override
    def name(self) -> str:
        return self._name

    @property
    @override
    def nodes(self) -> dict[str, IRNode]:
        return {node.name: node for node in self._nodes()}

    @property
    @override
    def inputs(self) -> list[str]:
        return list(self._inputs)

    @property
    @override
    def outputs(self) -> list[str]:
        return list(self._outputs)

    @property
    def node_count(self) -> int:
        return len(self._index)

    @property
    def op_count(self) -> int:
        return sum(1 for node in self._nodes() if node.kind == NodeKind.OP)

    def _nodes(self) -> list[IRNode]:
        return [node for node in self._arena if node is not None]

    def _compact(self) -> None:
        self._arena = [node for node in self._arena if node is not None]
        self._index = {node.name: handle for handle, node in enumerate(self._arena)}
        self._removed = 0

    def _insert(self, node: IRNode) -> None:
        self._index[node.name] = len(self._arena)
        self._arena.append(node)

    def _register(self, node: IRNode) -> None:
        match node.kind:
            case NodeKind.INPUT:
                self._inputs.append(node.name)
            case NodeKind.OUTPUT:
                self._outputs.append(node.name)

    def add_node(self, node: IRNode) -> None:
        """
        Insert node and append it to the successors of its existing
        predecessors. Input and output nodes are also registered as graph
        inputs and outputs.
        """
        if node.name in self._index:
            raise GraphError(f"node with id '{node.name}' already exists")
        self._insert(node)
        for pred in dict.fromkeys(node._inputs):
            pred_node = self.get_node(pred)
            if pred_node is not None:
                pred_node._outputs.append(node.name)
        self._register(node)
        logger.debug("added node %s: %s", node.name, node)

    def remove_node(self, name: str) -> None:
        """Detach and remove node name, nothing is done if absent."""
        handle = self._index.pop(name, None)
        if handle is None:
            return
        node = self._arena[handle]
        assert node is not None
        self._arena[handle] = None
        self._removed += 1
        for pred in node._inputs:
            pred_node = self.get_node(pred)
            if pred_node is not None:
                pred_node._outputs = [n for n in pred_node._outputs if n != name]
        for succ in node._outputs:
            succ_node = self.get_node(succ)
            if succ_node is not None:
                succ_node._inputs = [n for n in succ_node._inputs if n != name]
        self._inputs = [n for n in self._inputs if n != name]
        self._outputs = [n for n in self._outputs if n != name]
        if self._removed > len(self._index):
            self._compact()
        logger.debug("removed node %s", name)

    def get_node(self, name: str) -> IRNode | None:
        handle = self._index.get(name)
        return None if handle is None else self._arena[handle]

    def has_node(self, name: str) -> bool:
        return name in self._index

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def get_inputs(self, name: str) -> list[IRNode]:
        """Existing direct predecessors of node name."""
        node = self.get_node(name)
        if node is None:
            return []
        return self._existing(node._inputs)

    def get_outputs(self, name: str) -> list[IRNode]:
        """Existing direct successors of node name."""
        node = self.get_node(name)
        if node is None:
            return []
        return self._existing(node._outputs)

    def _existing(self, names: Iterable[str]) -> list[IRNode]:
        nodes = [self.get_node(name) for name in names]
        return [node for node in nodes if node is not None]

    def _walk(self, name: str, edges: Callable[[IRNode], list[str]]) -> list[str]:
        start = self.get_node(name)
        if start is None:
            return []
        seen = {name}
        walk: list[str] = []
        stack = list(reversed(edges(start)))
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            node = self.get_node(current)
            if node is None:
                continue
            walk.append(current)
            stack.extend(reversed(edges(node)))
        return walk

    def predecessors(self, name: str) -> list[str]:
        """All nodes node name transitively depends on."""
        return self._walk(name, lambda node: node._inputs)

    def successors(self, name: str) -> list[str]:
        """All nodes transitively depending on node name."""
        return self._walk(name, lambda node: node._outputs)

    @override
    def topological_sort(self) -> list[str]:
        """
        Kahn's algorithm, the in-degree of a node is its number of existing
        predecessors. Raise GraphValidationError on cycles.
        """
        nodes = self._nodes()
        in_degree = {node.name: 0 for node in nodes}
        consumers: dict[str, list[str]] = {node.name: [] for node in nodes}
        for node in nodes:
            for pred in node._inputs:
                if pred in in_degree:
                    in_degree[node.name] += 1
                    consumers[pred].append(node.name)
        queue = deque(name for name, degree in in_degree.items() if degree == 0)
        order: list[str] = []
        while queue:
            name = queue.popleft()
            order.append(name)
            for succ in consumers[name]:
                in_degree[succ] -= 1
                if in_degree[succ] == 0:
                    queue.append(succ)
        if len(order) < len(nodes):
            raise GraphValidationError(f"graph {self._name!r} contains cycles")
        return order

    def reverse_topological_sort(self) -> list[str]:
        return self.topological_sort()[::-1]

    def has_cycles(self) -> bool:
        try:
            self.topological_sort()
        except GraphValidationError:
            return True
        return False

    def validate(self) -> bool:
        return len(self.validate_inputs()) == 0

    def validate_inputs(self) -> list[str]:
        """Diagnostic messages for each structural violation, empty if valid."""
        errors: list[str] = []
        if self.has_cycles():
            errors.append("graph contains cycles")
        for node in self._nodes():
            for pred in node._inputs:
                if pred not in self._index:
                    errors.append(
                        f"node '{node.name}' references non-existent input '{pred}'"
                    )
            for succ in node._outputs:
                if succ not in self._index:
                    errors.append(
                        f"node '{node.name}' references non-existent output '{succ}'"
                    )
        for name in self._inputs:
            node = self.get_node(name)
            if node is not None and len(node._inputs) > 0:
                errors.append(f"input node '{name}' has inputs")
        for name in self._outputs:
            node = self.get_node(name)
            if node is not None and len(node._inputs) == 0:
                errors.append(f"output node '{name}' has no inputs")
        return errors

    def clone(self) -> IRGraph:
        """Structural copy sharing the nodes tensor references."""
        graph = IRGraph(self._name)
        graph.metadata = dict(self.metadata)
        for node in self._nodes():
            graph._insert(node.copy())
        graph._inputs = list(self._inputs)
        graph._outputs = list(self._outputs)
        return graph

    def subgraph(self, names: Iterable[str]) -> IRGraph:
        """
        Graph restricted to the given node names, edges to nodes outside
        of the selection are dropped.
        """
        selected = [name for name in dict.fromkeys(names) if name in self._index]
        keep = set(selected)
        graph = IRGraph(f"{self._name}_subgraph")
        for name in selected:
            node = self.get_node(name)
            assert node is not None
            sub_node = node.copy(
                inputs=[n for n in node._inputs if n in keep],
                outputs=[n for n in node._outputs if n in keep],
            )
            graph._insert(sub_node)
            graph._register(sub_node)
        return graph

    def merge(self, other: IRGraph, prefix: str | None = None) -> IRGraph:
        """
        New graph with the nodes of self and other.
        With a prefix, names of other nodes and of their edges are rewritten
        as prefix_name. Raise GraphError on a name collision.
        """

        def rename(name: str) -> str:
            return f"{prefix}_{name}" if prefix else name

        graph = self.clone()
        for node in other._nodes():
            new_node = node.copy(
                name=rename(node.name),
                inputs=[rename(n) for n in node._inputs],
                outputs=[rename(n) for n in node._outputs],
            )
            if new_node.name in graph._index:
                raise GraphError(
                    f"cannot merge graph {other.name!r}: node with id "
                    f"'{new_node.name}' already exists"
                )
            graph._insert(new_node)
        graph._inputs += [rename(n) for n in other._inputs]
        graph._outputs += [rename(n) for n in other._outputs]
        logger.debug(
            "merged graph %r into %r, %d nodes", other.name, self.name, graph.node_count
        )
        return graph

    @override
    def forward_types(self) -> dict[str, TensorRef]:
        """
        Propagate tensor types in topological order: input and const nodes
        give their tensor, op nodes infer their output from their
        predecessors, output nodes forward their predecessor type.
        """
        types: dict[str, TensorRef] = {}
        for name in self.topological_sort():
            node = self.get_node(name)
            assert node is not None
            match node.kind:
                case NodeKind.INPUT | NodeKind.CONST:
                    if node.tensor is None:
                        raise GraphError(f"{node.kind} node '{name}' has no tensor")
                    types[name] = node.tensor
                case NodeKind.OUTPUT:
                    preds = [types[n] for n in node._inputs if n in types]
                    if len(preds) == 0:
                        raise GraphError(f"output node '{name}' has no input type")
                    types[name] = preds[0]
                case NodeKind.OP:
                    if node.operation is None:
                        raise GraphError(f"op node '{name}' has no operation")
                    op = node.operation.copy()
                    op.inputs = [types.get(n) for n in node._inputs]
                    types[name] = op.infer_output()
        logger.debug("propagated types of graph %r", self._name)
        return types

    @override
    def __str__(self) -> str:
        if self.has_cycles():
            names = [node.name for node in self._nodes()]
        else:
            names = self.topological_sort()
        graph_str = "graph:\n"
        if self._name != "":
            graph_str += f"  name: {self._name}\n"
        if len(self._inputs) > 0:
            graph_str += "  inputs:\n"
            for name in self._inputs:
                graph_str += f"  - {name}\n"
        else:
            graph_str += "  inputs: []\n"
        if len(self._outputs) > 0:
            graph_str += "  outputs:\n"
            for name in self._outputs:
                graph_str += f"  - {name}\n"
        else:
            graph_str += "  outputs: []\n"
        if len(names) > 0:
            graph_str += "  nodes:\n"
            for name in names:
                graph_str += f"    {name}: {self.get_node(name)}\n"
        else:
            graph_str += "  nodes: {}\n"
        return graph_str

    @override
    def __repr__(self) -> str:
        return f"IRGraph({self._name}, nodes={self.node_count}, ops={self.op_count})"


def merge(g1: IRGraph, g2: IRGraph, prefix: str | None = None) -> IRGraph:
    """Union of g1 and g2, see IRGraph.merge."""
    return g1.merge(g2, prefix)
