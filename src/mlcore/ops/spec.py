#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from typing_extensions import override

from mlcore.data import DType, Shape, TensorRef
from mlcore.itf.graph import Operation

from .attrs import OpAttrs, T
from .kinds import OpKind, VARIADIC

__all__ = [
    "OpSpec",
]


class OpSpec(Operation):
    """
    Specification of one computation step: an op kind applied to ordered
    input tensor references, with attributes and optional target hints.
    The output reference is unset until inference or execution assigns it.
    """

    def __init__(
        self,
        kind: OpKind,
        inputs: Sequence[TensorRef | None] | TensorRef = (),
        attrs: OpAttrs | Mapping[str, Any] | None = None,
        output: TensorRef | None = None,
        id: str = "",
        dtype: DType | None = None,
        device: str = "",
    ) -> None:
        self.kind = kind
        if isinstance(inputs, TensorRef):
            inputs = (inputs,)
        self._inputs: list[TensorRef | None] = list(inputs)
        self._attrs = attrs.copy() if isinstance(attrs, OpAttrs) else OpAttrs(attrs)
        self.output = output
        self.id = id
        self.dtype = dtype
        self.device = device

    @property
    @override
    def name(self) -> str:
        return self.kind.value

    @property
    @override
    def attrs(self) -> OpAttrs:
        return self._attrs

    @property
    @override
    def inputs(self) -> list[TensorRef | None]:
        return self._inputs

    @inputs.setter
    def inputs(self, inputs: Sequence[TensorRef | None]) -> None:
        self._inputs = list(inputs)

    def get_attr(self, key: str, default: T) -> T:
        return self._attrs.get(key, default)

    def set_attr(self, key: str, value: Any) -> None:
        self._attrs.set(key, value)

    @override
    def validate(self) -> bool:
        expected = self.kind.num_inputs
        if expected != VARIADIC and len(self.inputs) != expected:
            return False
        return all(inp is not None for inp in self.inputs)

    @override
    def infer_output_shape(self) -> Shape:
        from .inference import infer_output_shape

        return infer_output_shape(self)

    @override
    def infer_output_dtype(self) -> DType:
        from .inference import infer_output_dtype

        return infer_output_dtype(self)

    def infer_output(self) -> TensorRef:
        """Placeholder output reference with the inferred shape and dtype."""
        return TensorRef.empty(self.infer_output_shape(), self.infer_output_dtype())

    def copy(self) -> OpSpec:
        """Copy with independent inputs and attributes, references are shared."""
        return OpSpec(
            self.kind,
            self.inputs,
            self._attrs,
            output=self.output,
            id=self.id,
            dtype=self.dtype,
            device=self.device,
        )

    def to_dict(self) -> dict[str, Any]:
        op: dict[str, Any] = {
            "kind": self.kind.value,
            "attrs": self._attrs.to_dict(),
        }
        if self.id:
            op["id"] = self.id
        if self.dtype is not None:
            op["dtype"] = self.dtype.value
        if self.device:
            op["device"] = self.device
        return op

    @override
    def __repr__(self) -> str:
        params = [
            "?" if inp is None else f"{inp.shape}:{inp.dtype}" for inp in self.inputs
        ]
        params += [f"{key}={value}" for key, value in self._attrs.items()]
        return f"{self.kind.value}({', '.join(params)})"
