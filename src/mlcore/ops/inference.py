#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
"""Output shape and dtype inference for operation specifications.

Shape inference requires at least one input and raises OpError otherwise.
Dtype inference never fails on an empty input list: it returns the operation
dtype hint if set, else the configured default dtype.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mlcore.data import DType, Shape, TensorRef, broadcast, matmul_shape, promote
from mlcore.data.shape import PairAttr, conv_output_shape, to_pair
from mlcore.exceptions import OpError, ShapeError, ShapeIndexError

from .kinds import OpCategory, OpKind

if TYPE_CHECKING:
    from .spec import OpSpec

__all__ = [
    "infer_output_shape",
    "infer_output_dtype",
]

_TWO_INPUTS_KINDS = (
    OpKind.MATMUL,
    OpKind.BATCH_MATMUL,
    OpKind.DOT,
    OpKind.OUTER,
    OpKind.CONV2D,
    OpKind.LINEAR,
    OpKind.EMBEDDING,
)


def _requires_two_inputs(kind: OpKind) -> bool:
    match kind.category:
        case OpCategory.BINARY | OpCategory.COMPARISON:
            return True
        case OpCategory.LOGICAL:
            return kind != OpKind.NOT
    return kind in _TWO_INPUTS_KINDS


def _input_refs(spec: OpSpec) -> list[TensorRef]:
    refs: list[TensorRef] = []
    for idx, inp in enumerate(spec.inputs):
        if inp is None:
            raise OpError(f"missing input {idx} for op {spec.kind.value}")
        refs.append(inp)
    return refs


def _reduce_shape(spec: OpSpec, shape: Shape) -> Shape:
    axis = spec.get_attr("axis", -1)
    keepdims = spec.get_attr("keepdims", False)
    if axis < 0:
        return Shape([1] * shape.rank) if keepdims else Shape()
    if axis >= shape.rank:
        raise ShapeIndexError(
            f"reduction axis {axis} out of range for shape {shape} "
            f"in op {spec.kind.value}"
        )
    dims = list(shape.dims)
    if keepdims:
        dims[axis] = 1
    else:
        del dims[axis]
    return Shape(dims)


def _concat_shape(spec: OpSpec, shapes: list[Shape]) -> Shape:
    first = shapes[0]
    dim = first.normalize_axis(spec.get_attr("dim", 0))
    for shape in shapes[1:]:
        if shape.rank != first.rank or any(
            a != b for i, (a, b) in enumerate(zip(shape, first)) if i != dim
        ):
            raise ShapeError(
                f"cat inputs must match except along dim {dim}: {first}, {shape}"
            )
    dims = list(first.dims)
    dims[dim] = sum(shape.dims[dim] for shape in shapes)
    return Shape(dims)


def _stack_shape(spec: OpSpec, shapes: list[Shape]) -> Shape:
    first = shapes[0]
    for shape in shapes[1:]:
        if shape != first:
            raise ShapeError(f"stack inputs must have equal shapes: {first}, {shape}")
    dim = first.normalize_axis(spec.get_attr("dim", 0), first.rank + 1)
    return Shape(first.dims[:dim] + (len(shapes),) + first.dims[dim:])


def _int_or_pair_attr(spec: OpSpec, key: str, default: PairAttr) -> PairAttr:
    value = spec.attrs.get_value(key)
    match value:
        case None:
            return default
        case bool():
            pass
        case int() | tuple():
            return value
    raise OpError(
        f"attribute {key} of op {spec.kind.value} must be an int or an int "
        f"sequence: {value!r}"
    )


def _conv2d_shape(spec: OpSpec, inp: Shape, weight: Shape) -> Shape:
    if weight.rank != 4 or inp.rank < 3:
        raise ShapeError(
            f"conv2d expects (N, C, H, W) input and (F, C, KH, KW) weight: "
            f"{inp}, {weight}"
        )
    out_h, out_w = conv_output_shape(
        inp,
        weight.dims[-2:],
        stride=_int_or_pair_attr(spec, "stride", 1),
        padding=_int_or_pair_attr(spec, "padding", 0),
        dilation=_int_or_pair_attr(spec, "dilation", 1),
    )
    return Shape(*inp.dims[:-3], weight.dims[0], out_h, out_w)


def _pool2d_shape(spec: OpSpec, inp: Shape) -> Shape:
    if "kernel_size" not in spec.attrs:
        raise OpError(f"missing kernel_size attribute for op {spec.kind.value}")
    kernel = _int_or_pair_attr(spec, "kernel_size", 1)
    # Non overlapping windows by default
    out_h, out_w = conv_output_shape(
        inp,
        kernel,
        stride=_int_or_pair_attr(spec, "stride", kernel),
        padding=_int_or_pair_attr(spec, "padding", 0),
        dilation=_int_or_pair_attr(spec, "dilation", 1),
    )
    return Shape(*inp.dims[:-2], out_h, out_w)


def _adaptive_pool2d_shape(spec: OpSpec, inp: Shape) -> Shape:
    if inp.rank < 2:
        raise ShapeError(f"adaptive pooling input must be at least 2D: {inp}")
    out_h, out_w = to_pair(_int_or_pair_attr(spec, "output_size", 1), "output_size")
    return Shape(*inp.dims[:-2], out_h, out_w)


def _memory_shape(spec: OpSpec, shapes: list[Shape]) -> Shape:
    shape = shapes[0]
    match spec.kind:
        case OpKind.RESHAPE | OpKind.VIEW:
            return shape.reshape(spec.get_attr("shape", ()))
        case OpKind.FLATTEN:
            return shape.flatten(
                spec.get_attr("start_dim", 0), spec.get_attr("end_dim", -1)
            )
        case OpKind.SQUEEZE:
            if "dim" not in spec.attrs:
                return shape.squeeze()
            return shape.squeeze(spec.get_attr("dim", 0))
        case OpKind.UNSQUEEZE:
            return shape.unsqueeze(spec.get_attr("dim", 0))
        case OpKind.PERMUTE:
            return shape.transpose(spec.get_attr("dims", ()))
        case OpKind.CAT:
            return _concat_shape(spec, shapes)
        case OpKind.STACK:
            return _stack_shape(spec, shapes)
    return shape


def infer_output_shape(spec: OpSpec) -> Shape:
    """Output shape of spec, computed from its inputs shapes and attributes."""
    if len(spec.inputs) == 0:
        raise OpError(f"cannot infer shape of op {spec.kind.value} without inputs")
    if _requires_two_inputs(spec.kind) and len(spec.inputs) < 2:
        raise OpError(
            f"op {spec.kind.value} requires 2 inputs, got {len(spec.inputs)}"
        )
    shapes = [ref.shape for ref in _input_refs(spec)]
    kind = spec.kind
    match kind.category:
        case OpCategory.UNARY | OpCategory.ACTIVATION:
            return shapes[0]
        case OpCategory.BINARY | OpCategory.COMPARISON:
            return broadcast(shapes[0], shapes[1])
        case OpCategory.LOGICAL:
            if kind == OpKind.NOT:
                return shapes[0]
            return broadcast(shapes[0], shapes[1])
        case OpCategory.REDUCTION:
            return _reduce_shape(spec, shapes[0])
        case OpCategory.MATRIX:
            match kind:
                case OpKind.MATMUL | OpKind.BATCH_MATMUL:
                    return matmul_shape(shapes[0], shapes[1])
                case OpKind.TRANSPOSE:
                    perm = spec.get_attr("perm", ())
                    return shapes[0].transpose(perm if perm else None)
                case OpKind.DOT:
                    return Shape()
                case OpKind.OUTER:
                    return Shape(shapes[0].size, shapes[1].size)
        case OpCategory.NEURAL:
            match kind:
                case OpKind.CONV2D:
                    return _conv2d_shape(spec, shapes[0], shapes[1])
                case OpKind.MAX_POOL2D | OpKind.AVG_POOL2D:
                    return _pool2d_shape(spec, shapes[0])
                case OpKind.ADAPTIVE_AVG_POOL2D:
                    return _adaptive_pool2d_shape(spec, shapes[0])
                case OpKind.LINEAR:
                    inp, weight = shapes[0], shapes[1]
                    if inp.rank < 1 or weight.rank != 2 or weight[1] != inp[-1]:
                        raise ShapeError(
                            f"linear expects (..., in) input and (out, in) weight: "
                            f"{inp}, {weight}"
                        )
                    return Shape(*inp.dims[:-1], weight[0])
                case OpKind.EMBEDDING:
                    weight = shapes[1]
                    if weight.rank != 2:
                        raise ShapeError(
                            f"embedding weight must be (num, dim): {weight}"
                        )
                    return Shape(*shapes[0].dims, weight[1])
        case OpCategory.LOSS:
            if spec.get_attr("reduction", "mean") == "none":
                return shapes[0]
            return Shape()
        case OpCategory.MEMORY:
            return _memory_shape(spec, shapes)
    return shapes[0]


def infer_output_dtype(spec: OpSpec) -> DType:
    """Output dtype of spec, computed from its inputs dtypes and attributes."""
    if len(spec.inputs) == 0:
        return spec.dtype if spec.dtype is not None else DType.default()
    dtypes = [ref.dtype for ref in _input_refs(spec)]
    kind = spec.kind
    match kind.category:
        case OpCategory.COMPARISON | OpCategory.LOGICAL:
            return DType.BOOL
        case OpCategory.BINARY:
            if len(dtypes) >= 2:
                return promote(dtypes[0], dtypes[1])
            return dtypes[0]
    match kind:
        case OpKind.ARGMAX | OpKind.ARGMIN:
            return DType.INT64
        case OpKind.ALL | OpKind.ANY:
            return DType.BOOL
        case OpKind.CAST:
            target = DType.try_parse(spec.get_attr("dtype", ""))
            return dtypes[0] if target is None else target
    return dtypes[0]


