#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
import json
import re

import numpy as np
import pytest

from mlcore.data import DType, Shape, TensorData
from mlcore.exceptions import GraphError, GraphValidationError, TensorError
from mlcore.graphs.ir import (
    IRGraph,
    IRGraphBuilder,
    IRNode,
    from_dict,
    from_json,
    from_yaml,
    to_dict,
    to_dot,
    to_json,
    to_yaml,
)
from mlcore.ops import OpKind

from graph_utils import chain_graph, cycle_graph, mlp_graph, tensor


def attrs_graph():
    weight = TensorData.from_numpy(np.ones((8, 4), dtype=np.float32)).to_ref()
    with IRGraphBuilder("attrs") as gb:
        x = gb.add_input(tensor(2, 8), name="x")
        w = gb.add_const(weight, name="w")
        mm = gb.add_op(OpKind.MATMUL, [x, w], name="mm")
        t = gb.add_op(OpKind.PERMUTE, [mm], attrs={"dims": [1, 0]}, name="t")
        lr = gb.add_op(
            OpKind.LEAKY_RELU,
            [t],
            attrs={"negative_slope": 0.01, "inplace": False, "mode": "none", "n": 3},
            name="lr",
        )
        gb.add_output(lr, name="y")
    graph = gb.build()
    graph.nodes["lr"].metadata["note"] = "activation"
    return graph


def test_to_dict():
    doc = to_dict(chain_graph())
    assert doc["name"] == "chain"
    assert [node["id"] for node in doc["nodes"]] == ["x", "neg", "relu", "out"]
    assert doc["inputs"] == ["x"]
    assert doc["outputs"] == ["out"]
    assert "metadata" not in doc
    neg = doc["nodes"][1]
    assert neg == {
        "id": "neg",
        "kind": "op",
        "inputs": ["x"],
        "outputs": ["relu"],
        "op": {"kind": "neg", "attrs": {}},
        "tensor": {"shape": [2, 3], "dtype": "float32"},
    }


def test_to_dict_materialized_tensor():
    doc = to_dict(attrs_graph())
    w = next(node for node in doc["nodes"] if node["id"] == "w")
    assert len(w["tensor"]["hash"]) == 64
    lr = next(node for node in doc["nodes"] if node["id"] == "lr")
    assert lr["metadata"] == {"note": "activation"}
    assert lr["op"]["attrs"]["negative_slope"] == 0.01


def test_to_dict_rejects_cycles():
    with pytest.raises(GraphValidationError):
        to_dict(cycle_graph())


def check_same_graph(graph, loaded):
    assert loaded.name == graph.name
    assert loaded.inputs == graph.inputs
    assert loaded.outputs == graph.outputs
    assert loaded.metadata == graph.metadata
    assert loaded.topological_sort() == graph.topological_sort()
    for name, node in graph.nodes.items():
        other = loaded.nodes[name]
        assert other.kind == node.kind
        assert other.inputs == node.inputs
        assert other.outputs == node.outputs
        assert other.metadata == node.metadata
        assert other.tensor == node.tensor
        assert other.tensor.shape == node.tensor.shape
        assert other.tensor.dtype == node.tensor.dtype
        if node.operation is not None:
            assert other.operation.to_dict() == node.operation.to_dict()


def test_json_document():
    graph = attrs_graph()
    text = to_json(graph)
    assert json.loads(text)["name"] == "attrs"
    check_same_graph(graph, from_json(text))


def test_yaml_document():
    for graph in (mlp_graph(), attrs_graph()):
        check_same_graph(graph, from_yaml(to_yaml(graph)))


def test_yaml_attr_types():
    loaded = from_yaml(to_yaml(attrs_graph()))
    op = loaded.nodes["lr"].operation
    assert op.get_attr("negative_slope", 0.0) == 0.01
    assert op.get_attr("inplace", True) is False
    assert op.get_attr("mode", "") == "none"
    assert op.get_attr("n", 0) == 3
    assert loaded.nodes["t"].operation.get_attr("dims", ()) == (1, 0)


def test_yaml_empty_graph():
    loaded = from_yaml(to_yaml(IRGraph()))
    assert loaded.name == ""
    assert loaded.node_count == 0
    assert loaded.inputs == []
    assert loaded.outputs == []


def test_yaml_empty_values():
    with IRGraphBuilder("empty_values") as gb:
        x = gb.add_input(tensor(2, 3), name="x")
        t = gb.add_op(OpKind.TRANSPOSE, [x], attrs={"perm": []}, name="t")
        s = gb.add_op(OpKind.SUM, [t], name="s")
        gb.add_output(s, name="y")
    graph = gb.build()
    graph.nodes["t"].metadata["note"] = ""
    graph.metadata["origin"] = ""
    loaded = from_yaml(to_yaml(graph))
    check_same_graph(graph, loaded)
    assert loaded.nodes["t"].operation.get_attr("perm", (1,)) == ()
    assert loaded.nodes["t"].metadata == {"note": ""}
    assert loaded.nodes["s"].tensor.shape == Shape()


def test_yaml_string_attrs():
    attrs = {"mode": "y", "label": "1", "flag": "true", "empty": "", "n": 1}
    with IRGraphBuilder("strings") as gb:
        x = gb.add_input(tensor(4), name="x")
        gb.add_output(gb.add_op(OpKind.RELU, [x], attrs=attrs, name="r"), name="y")
    op = from_yaml(to_yaml(gb.build())).nodes["r"].operation
    assert op.get_attr("mode", "") == "y"
    assert op.get_attr("label", "") == "1"
    assert op.get_attr("flag", "") == "true"
    assert op.get_attr("empty", "?") == ""
    assert op.get_attr("n", 0) == 1
    assert op.to_dict()["attrs"] == attrs


def test_yaml_invalid_attr_record():
    # Two variants for the same attribute
    text = re.sub(r"( *)int: 3", r"\1int: 3\n\1str: x", to_yaml(attrs_graph()))
    with pytest.raises(GraphError):
        from_yaml(text)


def test_from_dict_restores_links():
    doc = to_dict(chain_graph())
    doc["nodes"].reverse()
    graph = from_dict(doc)
    assert graph.nodes["x"].outputs == ["neg"]
    assert graph.nodes["neg"].outputs == ["relu"]
    assert graph.topological_sort() == ["x", "neg", "relu", "out"]
    assert graph.forward_types()["out"].shape == Shape(2, 3)


def test_from_dict_errors():
    with pytest.raises(GraphError):
        from_dict({"nodes": [{"kind": "input"}]})
    with pytest.raises(GraphError):
        from_dict({"nodes": [{"id": "x", "kind": "variable"}]})
    with pytest.raises(GraphError):
        from_dict({"nodes": [{"id": "x", "kind": "op", "op": {"kind": "frobnicate"}}]})
    with pytest.raises(TensorError):
        from_dict(
            {
                "nodes": [
                    {"id": "x", "kind": "input", "tensor": {"shape": [2], "dtype": "f7"}}
                ]
            }
        )


def test_dot():
    dot = to_dot(chain_graph(), rankdir="LR")
    lines = dot.splitlines()
    assert lines[0] == 'digraph "chain" {'
    assert lines[1] == "  rankdir=LR;"
    assert '  "x" [label="INPUT\\nx", shape=ellipse, color=green];' in lines
    assert '  "neg" [label="neg\\nneg", shape=box, color=blue];' in lines
    assert '  "out" [label="OUTPUT\\nout", shape=ellipse, color=red];' in lines
    assert '  "x" -> "neg";' in lines
    assert '  "relu" -> "out";' in lines
    assert len([line for line in lines if "->" in line]) == 3
    assert lines[-1] == "}"


def test_dot_const_and_rankdir():
    dot = to_dot(mlp_graph())
    assert '  "w" [label="CONST\\nw", shape=box, color=gray];' in dot
    assert "  rankdir=TB;" in dot
    with pytest.raises(GraphError):
        to_dot(mlp_graph(), rankdir="XY")


def test_dot_escapes_ids():
    graph = IRGraph('my"g')
    graph.add_node(IRNode.input('a"b', tensor(2)))
    graph.add_node(IRNode.output("c\\d", 'a"b', tensor(2)))
    lines = to_dot(graph).splitlines()
    assert lines[0] == 'digraph "my\\"g" {'
    assert '  "a\\"b" [label="INPUT\\na\\"b", shape=ellipse, color=green];' in lines
    assert '  "c\\\\d" [label="OUTPUT\\nc\\\\d", shape=ellipse, color=red];' in lines
    assert '  "a\\"b" -> "c\\\\d";' in lines
