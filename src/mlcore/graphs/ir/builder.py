#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from mlcore.data import DType, Shape, TensorRef
from mlcore.exceptions import GraphError
from mlcore.ops import OpKind, OpSpec

from .graph import IRGraph
from .node import IRNode

__all__ = [
    "IRGraphBuilder",
]


class IRGraphBuilder:
    """
    Incremental IRGraph construction.

    Node names default to <prefix>_<counter> where the prefix is the node
    kind, or the op kind for op nodes. Can be used as a context manager:

        with IRGraphBuilder("mlp") as gb:
            x = gb.add_input(TensorRef.empty(Shape(4, 8), DType.FLOAT32))
            gb.add_output(gb.add_op(OpKind.RELU, [x]))
        graph = gb.build()
    """

    def __init__(self, name: str = "") -> None:
        self._graph = IRGraph(name)
        self._counter = 0

    def __enter__(self) -> IRGraphBuilder:
        return self

    def __exit__(self, *_: Any) -> None:
        pass

    @property
    def graph(self) -> IRGraph:
        return self._graph

    def _gen_name(self, prefix: str) -> str:
        name = f"{prefix}_{self._counter}"
        self._counter += 1
        return name

    def _tensor_of(self, name: str) -> TensorRef | None:
        node = self._graph.get_node(name)
        if node is None:
            raise GraphError(f"unknown node '{name}' in graph {self._graph.name!r}")
        return node.tensor

    def add_input(self, tensor: TensorRef, name: str = "") -> str:
        node = IRNode.input(name or self._gen_name("input"), tensor)
        self._graph.add_node(node)
        return node.name

    def add_const(self, tensor: TensorRef, name: str = "") -> str:
        node = IRNode.const(name or self._gen_name("const"), tensor)
        self._graph.add_node(node)
        return node.name

    def add_op(
        self,
        kind: OpKind,
        inputs: Sequence[str],
        shape: Shape | None = None,
        dtype: DType | None = None,
        attrs: Mapping[str, Any] | None = None,
        name: str = "",
    ) -> str:
        """
        Add an op node consuming the outputs of the inputs nodes.
        The output shape and dtype are inferred when not given.
        """
        name = name or self._gen_name(kind.value)
        refs = [self._tensor_of(inp) for inp in inputs]
        op = OpSpec(kind, refs, attrs, id=name, dtype=dtype)
        out_shape = op.infer_output_shape() if shape is None else shape
        out_dtype = op.infer_output_dtype() if dtype is None else dtype
        op.output = TensorRef.empty(out_shape, out_dtype)
        self._graph.add_node(IRNode.op(name, op, inputs, op.output))
        return name

    def add_output(self, input: str, name: str = "") -> str:
        tensor = self._tensor_of(input)
        node = IRNode.output(name or self._gen_name("output"), input, tensor)
        self._graph.add_node(node)
        return node.name

    def build(self) -> IRGraph:
        return self._graph
