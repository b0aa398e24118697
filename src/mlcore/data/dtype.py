#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
"""Scalar element types and the promotion rule for mixed-type operations."""

from enum import Enum
import numpy as np

from mlcore.exceptions import TensorError

__all__ = [
    "DType",
    "DTypeCategory",
    "promote",
    "can_cast",
    "may_lose_precision",
]


class DTypeCategory(Enum):
    FLOAT = "float"
    INTEGER = "integer"
    UNSIGNED = "unsigned"
    BOOL = "bool"
    COMPLEX = "complex"


class DType(Enum):
    FLOAT16 = "float16"
    BFLOAT16 = "bfloat16"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    BOOL = "bool"
    COMPLEX64 = "complex64"
    COMPLEX128 = "complex128"

    @property
    def size(self) -> int:
        """Size in bytes of one element."""
        return _DTYPE_SIZES[self]

    @property
    def category(self) -> DTypeCategory:
        return _DTYPE_CATEGORIES[self]

    @property
    def code(self) -> int:
        """Stable ordinal of the dtype, used as its tag in content hashes."""
        return _DTYPE_CODES[self]

    @property
    def is_floating(self) -> bool:
        return self.category == DTypeCategory.FLOAT

    @property
    def is_integer(self) -> bool:
        return self.category in (DTypeCategory.INTEGER, DTypeCategory.UNSIGNED)

    @property
    def is_signed(self) -> bool:
        return self.category in (
            DTypeCategory.FLOAT,
            DTypeCategory.INTEGER,
            DTypeCategory.COMPLEX,
        )

    @property
    def is_complex(self) -> bool:
        return self.category == DTypeCategory.COMPLEX

    @property
    def numpy_dtype(self) -> np.dtype | None:
        """The equivalent numpy dtype, None when numpy has no equivalent."""
        if self == DType.BFLOAT16:
            return None
        return np.dtype(self.value)

    @classmethod
    def try_parse(cls, name: str) -> "DType | None":
        """
        Return the dtype for the given name or None.
        Accepted forms are the canonical name in any case ("float32",
        "Float32") and the prefixed form ("dtFloat32").
        """
        key = name.strip().lower()
        if key.startswith("dt"):
            key = key[2:]
        return _DTYPE_NAMES.get(key)

    @classmethod
    def parse(cls, name: str) -> "DType":
        dtype = cls.try_parse(name)
        if dtype is None:
            raise TensorError(f"unknown dtype name: {name!r}")
        return dtype

    @classmethod
    def default(cls) -> "DType":
        """The default element type, configurable through MLCORE_DEFAULT_DTYPE."""
        from mlcore.utils.config import get_default_dtype_name

        return cls(get_default_dtype_name())

    def __str__(self) -> str:
        return self.value


_DTYPE_SIZES = {
    DType.FLOAT16: 2,
    DType.BFLOAT16: 2,
    DType.FLOAT32: 4,
    DType.FLOAT64: 8,
    DType.INT8: 1,
    DType.INT16: 2,
    DType.INT32: 4,
    DType.INT64: 8,
    DType.UINT8: 1,
    DType.UINT16: 2,
    DType.UINT32: 4,
    DType.UINT64: 8,
    DType.BOOL: 1,
    DType.COMPLEX64: 8,
    DType.COMPLEX128: 16,
}

_DTYPE_CATEGORIES = {
    DType.FLOAT16: DTypeCategory.FLOAT,
    DType.BFLOAT16: DTypeCategory.FLOAT,
    DType.FLOAT32: DTypeCategory.FLOAT,
    DType.FLOAT64: DTypeCategory.FLOAT,
    DType.INT8: DTypeCategory.INTEGER,
    DType.INT16: DTypeCategory.INTEGER,
    DType.INT32: DTypeCategory.INTEGER,
    DType.INT64: DTypeCategory.INTEGER,
    DType.UINT8: DTypeCategory.UNSIGNED,
    DType.UINT16: DTypeCategory.UNSIGNED,
    DType.UINT32: DTypeCategory.UNSIGNED,
    DType.UINT64: DTypeCategory.UNSIGNED,
    DType.BOOL: DTypeCategory.BOOL,
    DType.COMPLEX64: DTypeCategory.COMPLEX,
    DType.COMPLEX128: DTypeCategory.COMPLEX,
}

_DTYPE_CODES = {dtype: idx for idx, dtype in enumerate(DType)}
_DTYPE_NAMES = {dtype.value: dtype for dtype in DType}

# Rank inside a category, bfloat16 sits above float16
_DTYPE_PRIORITY = {
    DType.BOOL: 0,
    DType.INT8: 1,
    DType.INT16: 2,
    DType.INT32: 3,
    DType.INT64: 4,
    DType.UINT8: 1,
    DType.UINT16: 2,
    DType.UINT32: 3,
    DType.UINT64: 4,
    DType.FLOAT16: 10,
    DType.BFLOAT16: 11,
    DType.FLOAT32: 20,
    DType.FLOAT64: 30,
    DType.COMPLEX64: 40,
    DType.COMPLEX128: 50,
}

_SIGNED_FOR_MIXED_SIZE = {
    1: DType.INT16,
    2: DType.INT32,
    4: DType.INT64,
    8: DType.INT64,
}


def _higher(a: DType, b: DType) -> DType:
    return a if _DTYPE_PRIORITY[a] >= _DTYPE_PRIORITY[b] else b


def promote(a: DType, b: DType) -> DType:
    """
    Result dtype of a binary operation over a and b.
    Complex dominates float, float dominates integers and bool, a 64-bit
    integer paired with a float widens to float64, mixed signedness goes to
    the next larger signed integer and bool yields the other operand.
    """
    if a == b:
        return a
    cat_a, cat_b = a.category, b.category
    if DTypeCategory.COMPLEX in (cat_a, cat_b):
        if DType.COMPLEX128 in (a, b):
            return DType.COMPLEX128
        return DType.COMPLEX64
    if DTypeCategory.FLOAT in (cat_a, cat_b):
        if cat_a == cat_b:
            return _higher(a, b)
        flt, other = (a, b) if cat_a == DTypeCategory.FLOAT else (b, a)
        if other in (DType.INT64, DType.UINT64):
            return DType.FLOAT64
        return flt
    if a.is_integer and b.is_integer:
        if cat_a != cat_b:
            return _SIGNED_FOR_MIXED_SIZE[max(a.size, b.size)]
        return _higher(a, b)
    if cat_a == DTypeCategory.BOOL:
        return b
    return a


def can_cast(src: DType, dst: DType) -> bool:
    """All casts are allowed, some of them may lose precision."""
    return True


def may_lose_precision(src: DType, dst: DType) -> bool:
    if src == dst:
        return False
    if dst.size < src.size:
        return True
    if src.is_floating and dst.is_integer:
        return True
    if src.is_complex and not dst.is_complex:
        return True
    # bfloat16 has fewer mantissa bits than float16
    if src == DType.FLOAT16 and dst == DType.BFLOAT16:
        return True
    return False
