#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
import pytest

from mlcore.data import DType, Shape
from mlcore.exceptions import GraphError, OpError
from mlcore.graphs.ir import IRGraphBuilder, NodeKind
from mlcore.ops import OpKind

from graph_utils import mlp_graph, tensor


def test_generated_names():
    gb = IRGraphBuilder("g")
    x = gb.add_input(tensor(2, 3))
    c = gb.add_const(tensor(3))
    y = gb.add_op(OpKind.MUL, [x, c])
    out = gb.add_output(y)
    assert [x, c, y, out] == ["input_0", "const_1", "mul_2", "output_3"]
    graph = gb.build()
    assert graph.name == "g"
    assert graph.inputs == ["input_0"]
    assert graph.outputs == ["output_3"]
    assert graph.nodes["const_1"].kind == NodeKind.CONST


def test_inferred_output():
    graph = mlp_graph()
    node = graph.nodes["matmul_0"]
    assert node.tensor is not None
    assert node.tensor.shape == Shape(4, 16)
    assert node.operation is not None
    assert node.operation.id == "matmul_0"
    assert node.operation.output is node.tensor
    assert node.operation.inputs[0] is graph.nodes["x"].tensor
    assert graph.nodes["y"].tensor is graph.nodes["relu_2"].tensor


def test_explicit_output():
    gb = IRGraphBuilder()
    x = gb.add_input(tensor(2, 3), name="x")
    y = gb.add_op(
        OpKind.CAST, [x], dtype=DType.INT8, attrs={"dtype": "int8"}, name="y"
    )
    z = gb.add_op(OpKind.RESHAPE, [y], shape=Shape(6), name="z")
    graph = gb.build()
    assert graph.nodes[y].tensor.dtype == DType.INT8
    assert graph.nodes[z].tensor.shape == Shape(6)
    assert graph.nodes[z].tensor.dtype == DType.INT8
    assert graph.nodes[y].operation.get_attr("dtype", "") == "int8"


def test_builder_errors():
    gb = IRGraphBuilder()
    x = gb.add_input(tensor(2, 3))
    with pytest.raises(GraphError):
        gb.add_op(OpKind.RELU, ["missing"])
    with pytest.raises(GraphError):
        gb.add_output("missing")
    with pytest.raises(OpError):
        gb.add_op(OpKind.ADD, [x])
    with pytest.raises(GraphError):
        gb.add_input(tensor(1), name=x)
