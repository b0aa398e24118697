#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
"""Structured document export and import of IRGraph.

A graph document is:

    name: <graph name>
    nodes:                       # in topological order
    - id: <node name>
      kind: input | const | op | output
      inputs: [<predecessor names>]
      outputs: [<successor names>]
      op: {kind, attrs, id?, dtype?, device?}      # op nodes only
      tensor: {shape, dtype, hash?}                # when known
      metadata: {<key>: <value>}                   # when not empty
    inputs: [<input node names>]
    outputs: [<output node names>]
    metadata: {<key>: <value>}                     # when not empty

In the YAML rendition each attribute value is a single key record naming its
variant, for instance `perm: {ints: [1, 0]}` or `mode: {str: "1"}`, such that
strings spelled like numbers or booleans keep their type. On import,
successor lists are rebuilt from predecessor lists and graph inputs and
outputs follow the node kinds.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

import strictyaml
from strictyaml import (
    Bool,
    EmptyDict,
    EmptyList,
    Float,
    Int,
    Map,
    MapPattern,
    Optional,
    Seq,
    Str,
)

from mlcore.data import DType, Hash256, Shape, TensorRef
from mlcore.exceptions import GraphError
from mlcore.ops import OpKind, OpSpec

from .graph import IRGraph
from .node import IRNode, NodeKind

__all__ = [
    "to_dict",
    "to_json",
    "to_yaml",
    "from_dict",
    "from_json",
    "from_yaml",
]

logger = logging.getLogger(__name__)

# Empty collections are only serializable through the Empty* validators
_INTS = EmptyList() | Seq(Int())
_NAMES = EmptyList() | Seq(Str())
_STR_MAP = EmptyDict() | MapPattern(Str(), Str())

_ATTR_VARIANTS = ("int", "float", "bool", "str", "ints")

_ATTR_SCHEMA = Map(
    {
        Optional("int"): Int(),
        Optional("float"): Float(),
        Optional("bool"): Bool(),
        Optional("str"): Str(),
        Optional("ints"): _INTS,
    }
)

_TENSOR_SCHEMA = Map(
    {
        Optional("shape"): _INTS,
        "dtype": Str(),
        Optional("hash"): Str(),
    }
)

_OP_SCHEMA = Map(
    {
        "kind": Str(),
        Optional("attrs"): EmptyDict() | MapPattern(Str(), _ATTR_SCHEMA),
        Optional("id"): Str(),
        Optional("dtype"): Str(),
        Optional("device"): Str(),
    }
)

_NODE_SCHEMA = Map(
    {
        "id": Str(),
        "kind": Str(),
        Optional("inputs"): _NAMES,
        Optional("outputs"): _NAMES,
        Optional("op"): _OP_SCHEMA,
        Optional("tensor"): _TENSOR_SCHEMA,
        Optional("metadata"): _STR_MAP,
    }
)

_GRAPH_SCHEMA = Map(
    {
        Optional("name"): Str(),
        Optional("nodes"): EmptyList() | Seq(_NODE_SCHEMA),
        Optional("inputs"): _NAMES,
        Optional("outputs"): _NAMES,
        Optional("metadata"): _STR_MAP,
    }
)


def _tensor_to_dict(tensor: TensorRef) -> dict[str, Any]:
    record: dict[str, Any] = {
        "shape": list(tensor.shape.dims),
        "dtype": tensor.dtype.value,
    }
    if tensor.is_materialized:
        record["hash"] = str(tensor.hash)
    return record


def _node_to_dict(node: IRNode) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": node.name,
        "kind": node.kind.value,
        "inputs": node.inputs,
        "outputs": node.outputs,
    }
    if node.operation is not None:
        record["op"] = node.operation.to_dict()
    if node.tensor is not None:
        record["tensor"] = _tensor_to_dict(node.tensor)
    if len(node.metadata) > 0:
        record["metadata"] = dict(node.metadata)
    return record


def _sorted_nodes(graph: IRGraph) -> list[IRNode]:
    nodes = [graph.get_node(name) for name in graph.topological_sort()]
    return [node for node in nodes if node is not None]


def to_dict(graph: IRGraph) -> dict[str, Any]:
    """Document of graph, raise GraphValidationError if it has cycles."""
    doc: dict[str, Any] = {
        "name": graph.name,
        "nodes": [_node_to_dict(node) for node in _sorted_nodes(graph)],
        "inputs": graph.inputs,
        "outputs": graph.outputs,
    }
    if len(graph.metadata) > 0:
        doc["metadata"] = dict(graph.metadata)
    logger.debug("exported graph %r, %d nodes", graph.name, len(doc["nodes"]))
    return doc


def to_json(graph: IRGraph, indent: int | None = 2) -> str:
    return json.dumps(to_dict(graph), indent=indent)


def _typed_attr(value: Any) -> dict[str, Any]:
    match value:
        case bool():
            return {"bool": value}
        case int():
            return {"int": value}
        case float():
            return {"float": value}
        case str():
            return {"str": value}
    return {"ints": list(value)}


def _untyped_attr(key: str, record: Mapping[str, Any]) -> Any:
    if len(record) != 1 or next(iter(record)) not in _ATTR_VARIANTS:
        raise GraphError(
            f"invalid record for attribute '{key}', expected a single key "
            f"among {_ATTR_VARIANTS}: {dict(record)}"
        )
    return next(iter(record.values()))


def _map_attrs(
    doc: Mapping[str, Any], convert: Callable[[str, Any], Any]
) -> dict[str, Any]:
    nodes = []
    for record in doc.get("nodes", []):
        if "attrs" in record.get("op", {}):
            attrs = {k: convert(k, v) for k, v in record["op"]["attrs"].items()}
            record = {**record, "op": {**record["op"], "attrs": attrs}}
        nodes.append(record)
    return {**doc, "nodes": nodes}


def to_yaml(graph: IRGraph) -> str:
    doc = _map_attrs(to_dict(graph), lambda _, value: _typed_attr(value))
    return strictyaml.as_document(doc, _GRAPH_SCHEMA).as_yaml()


def _tensor_from_dict(record: Mapping[str, Any]) -> TensorRef:
    hash_text = record.get("hash")
    return TensorRef(
        Shape(list(record.get("shape", []))),
        DType.parse(record.get("dtype", "")),
        None if hash_text is None else Hash256.parse(hash_text),
    )


def _op_from_dict(record: Mapping[str, Any], inputs: list[TensorRef | None]) -> OpSpec:
    try:
        kind = OpKind.parse(record["kind"])
    except ValueError as e:
        raise GraphError(str(e)) from e
    dtype = record.get("dtype")
    return OpSpec(
        kind,
        inputs,
        record.get("attrs"),
        id=record.get("id", ""),
        dtype=None if dtype is None else DType.parse(dtype),
        device=record.get("device", ""),
    )


def _node_from_dict(record: Mapping[str, Any], graph: IRGraph) -> IRNode:
    name = record.get("id")
    if not name:
        raise GraphError(f"missing node id in graph document record: {record}")
    try:
        kind = NodeKind(record.get("kind"))
    except ValueError as e:
        raise GraphError(f"invalid kind for node '{name}': {e}") from e
    inputs = list(record.get("inputs", []))
    tensor = None
    if "tensor" in record:
        tensor = _tensor_from_dict(record["tensor"])
    op = None
    if "op" in record:
        preds = [graph.get_node(inp) for inp in inputs]
        refs = [None if pred is None else pred.tensor for pred in preds]
        op = _op_from_dict(record["op"], refs)
        op.output = tensor
    return IRNode(
        name,
        kind,
        op=op,
        inputs=inputs,
        tensor=tensor,
        metadata=record.get("metadata"),
    )


def from_dict(doc: Mapping[str, Any]) -> IRGraph:
    """
    Graph from a document as produced by to_dict.
    Nodes are added in document order and successor lists are rebuilt, so
    nodes listed before their predecessors are accepted.
    """
    graph = IRGraph(doc.get("name", ""))
    graph.metadata.update(doc.get("metadata", {}))
    for record in doc.get("nodes", []):
        graph.add_node(_node_from_dict(record, graph))
    for node in graph.nodes.values():
        for pred in graph.get_inputs(node.name):
            if node.name not in pred._outputs:
                pred._outputs.append(node.name)
    logger.debug("imported graph %r, %d nodes", graph.name, graph.node_count)
    return graph


def from_json(text: str) -> IRGraph:
    return from_dict(json.loads(text))


def from_yaml(text: str) -> IRGraph:
    doc = strictyaml.load(text, _GRAPH_SCHEMA).data
    return from_dict(_map_attrs(doc, _untyped_attr))
