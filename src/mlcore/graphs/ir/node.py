#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing_extensions import override

from mlcore.data import TensorRef
from mlcore.itf.graph import Node
from mlcore.ops import OpSpec

__all__ = [
    "NodeKind",
    "IRNode",
]


class NodeKind(Enum):
    INPUT = "input"
    CONST = "const"
    OP = "op"
    OUTPUT = "output"

    def __str__(self) -> str:
        return self.value


class IRNode(Node):
    """
    Graph node, edges are stored as the names of predecessor (inputs) and
    successor (outputs) nodes. Successors are maintained by the owning
    graph when nodes are added or removed.
    """

    def __init__(
        self,
        name: str,
        kind: NodeKind,
        op: OpSpec | None = None,
        inputs: Sequence[str] = (),
        tensor: TensorRef | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> None:
        self._name = name
        self._kind = kind
        self._op = op
        self._inputs: list[str] = list(inputs)
        self._outputs: list[str] = []
        self.tensor_ref = tensor
        self.metadata: dict[str, str] = dict(metadata or {})

    @classmethod
    def input(cls, name: str, tensor: TensorRef) -> IRNode:
        return cls(name, NodeKind.INPUT, tensor=tensor)

    @classmethod
    def const(cls, name: str, tensor: TensorRef) -> IRNode:
        return cls(name, NodeKind.CONST, tensor=tensor)

    @classmethod
    def op(
        cls,
        name: str,
        op: OpSpec,
        inputs: Sequence[str],
        tensor: TensorRef | None = None,
    ) -> IRNode:
        return cls(name, NodeKind.OP, op=op, inputs=inputs, tensor=tensor)

    @classmethod
    def output(cls, name: str, input: str, tensor: TensorRef | None = None) -> IRNode:
        return cls(name, NodeKind.OUTPUT, inputs=[input], tensor=tensor)

    @property
    @override
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> NodeKind:
        return self._kind

    @property
    @override
    def inputs(self) -> list[str]:
        return list(self._inputs)

    @property
    @override
    def outputs(self) -> list[str]:
        return list(self._outputs)

    @property
    @override
    def operation(self) -> OpSpec | None:
        return self._op

    @property
    @override
    def tensor(self) -> TensorRef | None:
        return self.tensor_ref

    def copy(
        self,
        name: str | None = None,
        inputs: Sequence[str] | None = None,
        outputs: Sequence[str] | None = None,
    ) -> IRNode:
        """
        Copy with independent edge lists, metadata and operation.
        The tensor reference is shared. Name and edges can be overridden.
        """
        node = IRNode(
            self._name if name is None else name,
            self._kind,
            op=None if self._op is None else self._op.copy(),
            inputs=self._inputs if inputs is None else inputs,
            tensor=self.tensor_ref,
            metadata=self.metadata,
        )
        node._outputs = list(self._outputs if outputs is None else outputs)
        return node

    @override
    def __str__(self) -> str:
        args = ", ".join(self._inputs)
        match self._kind:
            case NodeKind.OP:
                head = "op" if self._op is None else self._op.kind.value
                node_str = f"{head}({args})"
            case NodeKind.OUTPUT:
                node_str = f"output({args})"
            case _:
                node_str = self._kind.value
        if self.tensor_ref is not None:
            node_str += f" -> {self.tensor_ref.shape}:{self.tensor_ref.dtype}"
        return node_str

    @override
    def __repr__(self) -> str:
        return f"IRNode({self._name!r}, {self._kind.value}, inputs={self._inputs})"
