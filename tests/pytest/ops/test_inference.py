#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
import pytest

from mlcore.data import DType, Shape, TensorRef
from mlcore.exceptions import OpError, ShapeError, ShapeIndexError
from mlcore.ops import OpKind, OpSpec, infer_output_dtype, infer_output_shape


def ref(*dims, dtype=DType.FLOAT32):
    return TensorRef.empty(Shape(dims), dtype)


def shape_of(kind, *inputs, **attrs):
    return infer_output_shape(OpSpec(kind, inputs, attrs))


def dtype_of(kind, *inputs, **attrs):
    return infer_output_dtype(OpSpec(kind, inputs, attrs))


def test_elementwise_shapes():
    assert shape_of(OpKind.EXP, ref(2, 3)) == Shape(2, 3)
    assert shape_of(OpKind.GELU, ref(2, 3)) == Shape(2, 3)
    assert shape_of(OpKind.ADD, ref(5, 1, 4), ref(3, 1)) == Shape(5, 3, 4)
    assert shape_of(OpKind.LT, ref(4, 1), ref(3)) == Shape(4, 3)
    assert shape_of(OpKind.AND, ref(2, 1), ref(1, 2)) == Shape(2, 2)
    assert shape_of(OpKind.NOT, ref(2, 1)) == Shape(2, 1)
    with pytest.raises(ShapeError):
        shape_of(OpKind.MUL, ref(2, 3), ref(4, 3))


def test_shape_requires_inputs():
    with pytest.raises(OpError):
        shape_of(OpKind.RELU)
    with pytest.raises(OpError):
        shape_of(OpKind.ADD, ref(2))
    with pytest.raises(OpError):
        shape_of(OpKind.MATMUL, ref(2, 2))
    with pytest.raises(OpError):
        infer_output_shape(OpSpec(OpKind.RELU, [None]))


def test_reduction_shapes():
    assert shape_of(OpKind.SUM, ref(2, 3, 4)) == Shape()
    assert shape_of(OpKind.SUM, ref(2, 3, 4), keepdims=True) == Shape(1, 1, 1)
    assert shape_of(OpKind.MEAN, ref(2, 3, 4), axis=1) == Shape(2, 4)
    assert shape_of(OpKind.MEAN, ref(2, 3, 4), axis=1, keepdims=True) == Shape(
        2, 1, 4
    )
    with pytest.raises(ShapeIndexError):
        shape_of(OpKind.ARGMAX, ref(2, 3), axis=2)


def test_matrix_shapes():
    assert shape_of(OpKind.MATMUL, ref(2, 3), ref(3, 4)) == Shape(2, 4)
    assert shape_of(OpKind.BATCH_MATMUL, ref(8, 2, 3), ref(8, 3, 4)) == Shape(
        8, 2, 4
    )
    assert shape_of(OpKind.TRANSPOSE, ref(2, 3)) == Shape(3, 2)
    assert shape_of(OpKind.TRANSPOSE, ref(2, 3, 4), perm=[2, 0, 1]) == Shape(4, 2, 3)
    assert shape_of(OpKind.DOT, ref(3), ref(3)) == Shape()
    assert shape_of(OpKind.OUTER, ref(3), ref(2, 2)) == Shape(3, 4)
    with pytest.raises(ShapeError):
        shape_of(OpKind.MATMUL, ref(2, 3), ref(2, 3))


def test_neural_shapes():
    inp = ref(8, 3, 32, 32)
    weight = ref(16, 3, 3, 3)
    assert shape_of(OpKind.CONV2D, inp, weight) == Shape(8, 16, 30, 30)
    assert shape_of(OpKind.CONV2D, inp, weight, padding=1, stride=2) == Shape(
        8, 16, 16, 16
    )
    assert shape_of(OpKind.MAX_POOL2D, inp, kernel_size=2) == Shape(8, 3, 16, 16)
    assert shape_of(
        OpKind.AVG_POOL2D, inp, kernel_size=[3, 3], stride=1, padding=1
    ) == Shape(8, 3, 32, 32)
    assert shape_of(OpKind.ADAPTIVE_AVG_POOL2D, inp, output_size=1) == Shape(
        8, 3, 1, 1
    )
    assert shape_of(OpKind.LINEAR, ref(4, 10, 64), ref(32, 64)) == Shape(4, 10, 32)
    assert shape_of(OpKind.EMBEDDING, ref(4, 10), ref(1000, 64)) == Shape(4, 10, 64)
    assert shape_of(OpKind.DROPOUT, ref(4, 10)) == Shape(4, 10)
    with pytest.raises(OpError):
        shape_of(OpKind.MAX_POOL2D, inp)
    with pytest.raises(OpError):
        shape_of(OpKind.CONV2D, inp, weight, stride="two")
    with pytest.raises(ShapeError):
        shape_of(OpKind.LINEAR, ref(4, 10), ref(32, 64))


def test_adaptive_pool_output_size():
    inp = ref(8, 3, 32, 32)
    assert shape_of(OpKind.ADAPTIVE_AVG_POOL2D, inp, output_size=[7]) == Shape(
        8, 3, 7, 7
    )
    assert shape_of(OpKind.ADAPTIVE_AVG_POOL2D, inp, output_size=[4, 2]) == Shape(
        8, 3, 4, 2
    )
    with pytest.raises(ShapeError):
        shape_of(OpKind.ADAPTIVE_AVG_POOL2D, inp, output_size=[])
    with pytest.raises(ShapeError):
        shape_of(OpKind.ADAPTIVE_AVG_POOL2D, inp, output_size=[1, 2, 3])


def test_loss_shapes():
    assert shape_of(OpKind.MSE_LOSS, ref(4, 10), ref(4, 10)) == Shape()
    assert shape_of(OpKind.L1_LOSS, ref(4, 10), ref(4, 10), reduction="none") == (
        Shape(4, 10)
    )


def test_memory_shapes():
    x = ref(2, 3, 4)
    assert shape_of(OpKind.RESHAPE, x, shape=[-1, 4]) == Shape(6, 4)
    assert shape_of(OpKind.VIEW, x, shape=[24]) == Shape(24)
    assert shape_of(OpKind.FLATTEN, x, start_dim=1) == Shape(2, 12)
    assert shape_of(OpKind.SQUEEZE, ref(1, 3, 1)) == Shape(3)
    assert shape_of(OpKind.SQUEEZE, ref(1, 3, 1), dim=0) == Shape(3, 1)
    assert shape_of(OpKind.UNSQUEEZE, x, dim=-1) == Shape(2, 3, 4, 1)
    assert shape_of(OpKind.PERMUTE, x, dims=[1, 2, 0]) == Shape(3, 4, 2)
    assert shape_of(OpKind.CAT, ref(2, 3), ref(5, 3), dim=0) == Shape(7, 3)
    assert shape_of(OpKind.STACK, ref(2, 3), ref(2, 3), dim=1) == Shape(2, 2, 3)
    assert shape_of(OpKind.CONTIGUOUS, x) == Shape(2, 3, 4)
    with pytest.raises(ShapeError):
        shape_of(OpKind.RESHAPE, x, shape=[5, 5])
    with pytest.raises(ShapeError):
        shape_of(OpKind.CAT, ref(2, 3), ref(2, 4), dim=0)
    with pytest.raises(ShapeError):
        shape_of(OpKind.STACK, ref(2, 3), ref(3, 2))


def test_dtype_inference():
    f32, i64 = DType.FLOAT32, DType.INT64
    assert dtype_of(OpKind.EQ, ref(2), ref(2)) == DType.BOOL
    assert dtype_of(OpKind.NOT, ref(2, dtype=DType.BOOL)) == DType.BOOL
    assert dtype_of(OpKind.ADD, ref(2, dtype=f32), ref(2, dtype=i64)) == DType.FLOAT64
    assert dtype_of(OpKind.MUL, ref(2, dtype=DType.INT8), ref(2, dtype=DType.UINT8)) == (
        DType.INT16
    )
    assert dtype_of(OpKind.ARGMAX, ref(2, 3)) == DType.INT64
    assert dtype_of(OpKind.ANY, ref(2, 3)) == DType.BOOL
    assert dtype_of(OpKind.RELU, ref(2, dtype=DType.FLOAT16)) == DType.FLOAT16
    assert dtype_of(OpKind.CAST, ref(2), dtype="int32") == DType.INT32
    # Unknown target dtype falls back to the input dtype
    assert dtype_of(OpKind.CAST, ref(2), dtype="float7") == DType.FLOAT32


def test_empty_inputs(monkeypatch):
    monkeypatch.delenv("MLCORE_DEFAULT_DTYPE", raising=False)
    spec = OpSpec(OpKind.ZEROS, attrs={"shape": [2, 2]})
    # Dtype inference falls back to a default where shape inference fails
    assert infer_output_dtype(spec) == DType.FLOAT32
    with pytest.raises(OpError):
        infer_output_shape(spec)
    spec.dtype = DType.INT8
    assert infer_output_dtype(spec) == DType.INT8
    monkeypatch.setenv("MLCORE_DEFAULT_DTYPE", "bfloat16")
    assert infer_output_dtype(OpSpec(OpKind.RAND)) == DType.BFLOAT16
