#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
"""Tensor shapes with broadcasting, strides and shape rewriting.

A Shape is immutable: every rewriting operation (reshape, squeeze,
transpose, ...) returns a new Shape.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from enum import Enum
from typing import TypeAlias, overload
from typing_extensions import override

from mlcore.exceptions import ShapeError, ShapeIndexError
from mlcore.utils.math import mulall

__all__ = [
    "MemoryLayout",
    "Shape",
    "broadcastable",
    "broadcast",
    "matmul_shape",
    "conv_output_shape",
    "to_pair",
]

PairAttr: TypeAlias = int | Sequence[int]


class MemoryLayout(Enum):
    ROW_MAJOR = "row_major"  # C-style, last dimension varies fastest
    COLUMN_MAJOR = "column_major"  # Fortran-style, first dimension varies fastest


class Shape:
    def __init__(self, *dims: int | Sequence[int]) -> None:
        if len(dims) == 1 and not isinstance(dims[0], int):
            values = tuple(dims[0])
        else:
            values = tuple(dims)
        for d in values:
            if not isinstance(d, int) or isinstance(d, bool):
                raise ShapeError(f"shape dimensions must be integers: {values}")
            if d < 0:
                raise ShapeError(f"shape dimensions must be non-negative: {values}")
        self._dims: tuple[int, ...] = values

    @property
    def dims(self) -> tuple[int, ...]:
        return self._dims

    @property
    def rank(self) -> int:
        return len(self._dims)

    @property
    def size(self) -> int:
        """Number of elements, 1 for a scalar."""
        return mulall(self._dims)

    def is_scalar(self) -> bool:
        return self.rank == 0

    def is_vector(self) -> bool:
        return self.rank == 1

    def is_matrix(self) -> bool:
        return self.rank == 2

    def normalize_axis(self, index: int, extent: int | None = None) -> int:
        extent = self.rank if extent is None else extent
        idx = index + extent if index < 0 else index
        if idx < 0 or idx >= extent:
            raise ShapeIndexError(
                f"dimension index out of range for shape {self}: {index}"
            )
        return idx

    @overload
    def __getitem__(self, key: int) -> int: ...

    @overload
    def __getitem__(self, key: slice) -> tuple[int, ...]: ...

    def __getitem__(self, key: int | slice) -> int | tuple[int, ...]:
        if isinstance(key, slice):
            return self._dims[key]
        return self._dims[self.normalize_axis(key)]

    def __len__(self) -> int:
        return self.rank

    def __iter__(self) -> Iterator[int]:
        return iter(self._dims)

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Shape):
            return NotImplemented
        return self._dims == other._dims

    @override
    def __hash__(self) -> int:
        return hash(self._dims)

    @override
    def __str__(self) -> str:
        return "(" + ", ".join(str(d) for d in self._dims) + ")"

    @override
    def __repr__(self) -> str:
        return f"Shape{self}"

    def strides(self, layout: MemoryLayout = MemoryLayout.ROW_MAJOR) -> tuple[int, ...]:
        """Element strides of a dense buffer with this shape in the given layout."""
        if self.rank == 0:
            return ()
        strides = [1] * self.rank
        if layout == MemoryLayout.ROW_MAJOR:
            for i in range(self.rank - 2, -1, -1):
                strides[i] = strides[i + 1] * self._dims[i + 1]
        else:
            for i in range(1, self.rank):
                strides[i] = strides[i - 1] * self._dims[i - 1]
        return tuple(strides)

    def is_contiguous(
        self,
        strides: Sequence[int],
        layout: MemoryLayout = MemoryLayout.ROW_MAJOR,
    ) -> bool:
        """
        Check that strides describe a dense buffer in the given layout.
        Dimensions of size 1 accept any stride.
        """
        if self.rank == 0:
            return True
        if len(strides) != self.rank:
            return False
        expected = self.strides(layout)
        return all(
            d <= 1 or s == e for d, s, e in zip(self._dims, strides, expected)
        )

    def broadcastable(self, other: Shape) -> bool:
        return broadcastable(self, other)

    def broadcast(self, other: Shape) -> Shape:
        return broadcast(self, other)

    def broadcast_to(self, target: Shape) -> Shape:
        """Check that this shape broadcasts to exactly target and return target."""
        if not broadcastable(self, target):
            raise ShapeError(f"cannot broadcast {self} to {target}")
        result = broadcast(self, target)
        if result != target:
            raise ShapeError(
                f"cannot broadcast {self} to {target}, result would be {result}"
            )
        return target

    def squeeze(self, dim: int | None = None) -> Shape:
        """
        Remove dimensions of size 1.
        With dim, only that dimension is removed, and only if it is of size 1,
        otherwise the shape is returned unchanged.
        """
        if dim is None:
            return Shape([d for d in self._dims if d != 1])
        idx = self.normalize_axis(dim)
        if self._dims[idx] != 1:
            return self
        return Shape(self._dims[:idx] + self._dims[idx + 1 :])

    def unsqueeze(self, dim: int) -> Shape:
        """Insert a dimension of size 1 at dim, in [-(rank+1), rank]."""
        idx = self.normalize_axis(dim, self.rank + 1)
        return Shape(self._dims[:idx] + (1,) + self._dims[idx:])

    def reshape(self, *dims: int | Sequence[int]) -> Shape:
        """Reshape to dims, one of which may be -1 to be inferred."""
        if len(dims) == 1 and not isinstance(dims[0], int):
            target = list(dims[0])
        else:
            target = list(dims)
        infer_idx = None
        known_size = 1
        for i, d in enumerate(target):
            if d == -1:
                if infer_idx is not None:
                    raise ShapeError(
                        f"only one inferred dimension (-1) allowed in reshape: {target}"
                    )
                infer_idx = i
            elif d < 0:
                raise ShapeError(f"invalid dimension in reshape: {d}")
            else:
                known_size *= d
        if infer_idx is not None:
            if known_size == 0 or self.size % known_size != 0:
                raise ShapeError(
                    f"cannot reshape {self} to {tuple(target)}: inferred dimension "
                    f"is not an exact divisor"
                )
            target[infer_idx] = self.size // known_size
        shape = Shape(target)
        if shape.size != self.size:
            raise ShapeError(
                f"cannot reshape {self} (size {self.size}) to {shape} "
                f"(size {shape.size})"
            )
        return shape

    def transpose(self, perm: Sequence[int] | None = None) -> Shape:
        """
        Permute dimensions according to perm.
        Without perm, swap the last two dimensions.
        """
        if perm is None:
            if self.rank < 2:
                raise ShapeError(
                    f"cannot transpose shape with less than 2 dimensions: {self}"
                )
            order = list(range(self.rank))
            order[-1], order[-2] = order[-2], order[-1]
            perm = order
        if len(perm) != self.rank:
            raise ShapeError(
                f"permutation length must match rank {self.rank}: {tuple(perm)}"
            )
        seen: set[int] = set()
        for p in perm:
            if p < 0 or p >= self.rank:
                raise ShapeError(f"invalid permutation index: {p}")
            if p in seen:
                raise ShapeError(f"duplicate index in permutation: {p}")
            seen.add(p)
        return Shape([self._dims[p] for p in perm])

    def flatten(self, start: int = 0, end: int = -1) -> Shape:
        """Collapse dimensions start..end (inclusive) into one dimension."""
        start_idx = self.normalize_axis(start)
        end_idx = self.normalize_axis(end)
        if start_idx > end_idx:
            raise ShapeError(
                f"flatten start must be <= end, got start={start}, end={end}"
            )
        flat = mulall(self._dims[start_idx : end_idx + 1])
        return Shape(self._dims[:start_idx] + (flat,) + self._dims[end_idx + 1 :])


def _aligned_dims(a: Shape, b: Shape) -> Iterator[tuple[int, int]]:
    # From the trailing dimension, missing dimensions count as 1
    rank = max(a.rank, b.rank)
    for i in range(1, rank + 1):
        dim_a = a.dims[-i] if i <= a.rank else 1
        dim_b = b.dims[-i] if i <= b.rank else 1
        yield dim_a, dim_b


def broadcastable(a: Shape, b: Shape) -> bool:
    """Check that aligned dimensions are equal or one of them is 1."""
    return all(
        dim_a == dim_b or dim_a == 1 or dim_b == 1
        for dim_a, dim_b in _aligned_dims(a, b)
    )


def broadcast(a: Shape, b: Shape) -> Shape:
    """Result shape of broadcasting a and b together."""
    if not broadcastable(a, b):
        raise ShapeError(f"shapes {a} and {b} are not broadcastable")
    dims = [max(dim_a, dim_b) for dim_a, dim_b in _aligned_dims(a, b)]
    return Shape(dims[::-1])


def matmul_shape(a: Shape, b: Shape) -> Shape:
    """
    Result shape of a matrix product with batch broadcasting.
    A 1D left operand is a row vector, a 1D right operand a column vector,
    the added dimension being dropped from the result.
    """
    if a.rank < 1 or b.rank < 1:
        raise ShapeError(f"matmul requires at least 1D operands: {a}, {b}")
    m, k1 = (1, a.dims[0]) if a.rank == 1 else a.dims[-2:]
    k2, n = (b.dims[0], 1) if b.rank == 1 else b.dims[-2:]
    if k1 != k2:
        raise ShapeError(
            f"matmul inner dimension mismatch: {k1} != {k2} for {a} and {b}"
        )
    batch: tuple[int, ...] = ()
    if a.rank > 2 or b.rank > 2:
        batch_a = Shape(a.dims[:-2]) if a.rank > 2 else Shape(1)
        batch_b = Shape(b.dims[:-2]) if b.rank > 2 else Shape(1)
        batch = broadcast(batch_a, batch_b).dims
    dims = list(batch)
    if a.rank > 1:
        dims.append(m)
    if b.rank > 1:
        dims.append(n)
    return Shape(dims)


def to_pair(value: PairAttr, name: str) -> tuple[int, int]:
    """Normalize an int or a one or two element sequence to a pair."""
    if isinstance(value, int):
        return (value, value)
    values = tuple(value)
    if len(values) == 1:
        return (values[0], values[0])
    if len(values) != 2:
        raise ShapeError(f"{name} must be an int or a pair, got: {values}")
    return (values[0], values[1])


def conv_output_shape(
    input: Shape,
    kernel_size: PairAttr,
    stride: PairAttr = 1,
    padding: PairAttr = 0,
    dilation: PairAttr = 1,
) -> tuple[int, int]:
    """
    Output height and width of a 2D convolution or pooling window.
    The last two dimensions of input are the height and width.
    """
    if input.rank < 2:
        raise ShapeError(f"convolution input must have at least 2 dimensions: {input}")
    kernel = to_pair(kernel_size, "kernel_size")
    strides = to_pair(stride, "stride")
    pads = to_pair(padding, "padding")
    dilations = to_pair(dilation, "dilation")
    if min(strides) <= 0 or min(dilations) <= 0:
        raise ShapeError(
            f"stride and dilation must be positive: stride={strides}, "
            f"dilation={dilations}"
        )
    out = []
    for size, k, s, p, d in zip(input.dims[-2:], kernel, strides, pads, dilations):
        extent = (size + 2 * p - d * (k - 1) - 1) // s + 1
        if extent < 1:
            raise ShapeError(
                f"convolution window {kernel} larger than padded input {input}"
            )
        out.append(extent)
    return (out[0], out[1])
