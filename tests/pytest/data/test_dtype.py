#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
import itertools

import numpy as np
import pytest

from mlcore.data import DType, DTypeCategory, may_lose_precision, promote
from mlcore.exceptions import TensorError


def test_sizes_and_categories():
    assert DType.BOOL.size == 1
    assert DType.BFLOAT16.size == 2
    assert DType.COMPLEX128.size == 16
    assert DType.UINT32.category == DTypeCategory.UNSIGNED
    assert DType.FLOAT16.is_floating
    assert DType.INT8.is_integer and DType.INT8.is_signed
    assert DType.UINT8.is_integer and not DType.UINT8.is_signed
    assert not DType.BOOL.is_integer
    assert DType.COMPLEX64.is_complex


def test_codes_are_distinct():
    codes = [dtype.code for dtype in DType]
    assert len(set(codes)) == len(DType) == 15


def test_parse():
    assert DType.parse("float32") == DType.FLOAT32
    assert DType.parse("Int64") == DType.INT64
    assert DType.parse("dtUInt8") == DType.UINT8
    assert DType.try_parse("float128") is None
    with pytest.raises(TensorError):
        DType.parse("half")
    assert str(DType.COMPLEX64) == "complex64"


def test_numpy_dtype():
    assert DType.FLOAT32.numpy_dtype == np.dtype(np.float32)
    assert DType.BOOL.numpy_dtype == np.dtype(np.bool_)
    assert DType.BFLOAT16.numpy_dtype is None


def test_promote_examples():
    assert promote(DType.INT8, DType.UINT8) == DType.INT16
    assert promote(DType.FLOAT32, DType.INT64) == DType.FLOAT64
    assert promote(DType.BOOL, DType.FLOAT32) == DType.FLOAT32


def test_promote_rules():
    assert promote(DType.UINT16, DType.INT16) == DType.INT32
    assert promote(DType.UINT32, DType.INT8) == DType.INT64
    assert promote(DType.INT16, DType.INT32) == DType.INT32
    assert promote(DType.UINT8, DType.UINT64) == DType.UINT64
    assert promote(DType.FLOAT16, DType.INT32) == DType.FLOAT16
    assert promote(DType.FLOAT16, DType.FLOAT32) == DType.FLOAT32
    assert promote(DType.FLOAT64, DType.COMPLEX64) == DType.COMPLEX64
    assert promote(DType.COMPLEX64, DType.COMPLEX128) == DType.COMPLEX128
    assert promote(DType.BOOL, DType.INT8) == DType.INT8
    assert promote(DType.BOOL, DType.BOOL) == DType.BOOL


def test_promote_commutative():
    for a, b in itertools.product(DType, DType):
        assert promote(a, b) == promote(b, a), (a, b)


def test_may_lose_precision():
    assert not may_lose_precision(DType.FLOAT32, DType.FLOAT32)
    assert may_lose_precision(DType.FLOAT64, DType.FLOAT32)
    assert may_lose_precision(DType.FLOAT32, DType.INT64)
    assert may_lose_precision(DType.COMPLEX64, DType.FLOAT64)
    assert not may_lose_precision(DType.INT8, DType.INT32)


def test_default_dtype(monkeypatch):
    monkeypatch.delenv("MLCORE_DEFAULT_DTYPE", raising=False)
    assert DType.default() == DType.FLOAT32
    monkeypatch.setenv("MLCORE_DEFAULT_DTYPE", "float64")
    assert DType.default() == DType.FLOAT64
    monkeypatch.setenv("MLCORE_DEFAULT_DTYPE", "float7")
    with pytest.raises(RuntimeError):
        DType.default()
