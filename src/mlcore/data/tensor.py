#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
"""Content-addressed tensor references and owned tensor buffers.

Instead of moving tensor bytes around, the computation layer exchanges
TensorRef values: a content hash plus the shape and dtype needed for
inference, and the location tags of the workers holding the bytes.
The bytes themselves live in a TensorData, from which the hash is derived.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing_extensions import override
import numpy as np
import numpy.typing

from mlcore.exceptions import TensorError
from mlcore.itf.data import TensorType

from .dtype import DType
from .hash import Hash256, compute_hash
from .shape import MemoryLayout, Shape

__all__ = [
    "LocationTag",
    "TensorRef",
    "TensorData",
]


@dataclass(frozen=True)
class LocationTag:
    """Where a copy of the tensor bytes is stored."""

    worker_id: str
    store_path: str = ""
    is_primary: bool = False


class TensorRef(TensorType):
    """
    Immutable, content-addressed descriptor of a tensor.
    Two references are equal iff their hashes are equal, shape and dtype are
    informative only. Location tags and metadata are placement side tables
    which do not take part in the identity.
    """

    def __init__(self, shape: Shape, dtype: DType, hash: Hash256 | None = None) -> None:
        self._shape = shape
        self._dtype = dtype
        self._hash = Hash256.zero() if hash is None else hash
        self._location_tags: list[LocationTag] = []
        self._metadata: dict[str, str] = {}

    @classmethod
    def empty(cls, shape: Shape, dtype: DType) -> TensorRef:
        """Placeholder for a tensor not materialized yet."""
        return cls(shape, dtype)

    @classmethod
    def from_data(cls, data: TensorData) -> TensorRef:
        return cls(data.shape, data.dtype, data.compute_hash())

    @property
    def hash(self) -> Hash256:
        return self._hash

    @property
    @override
    def shape(self) -> Shape:
        return self._shape

    @property
    @override
    def dtype(self) -> DType:
        return self._dtype

    @property
    def is_materialized(self) -> bool:
        return not self._hash.is_zero

    @property
    def location_tags(self) -> tuple[LocationTag, ...]:
        return tuple(self._location_tags)

    @property
    def metadata(self) -> dict[str, str]:
        return dict(self._metadata)

    def add_location(self, tag: LocationTag) -> None:
        self._location_tags.append(tag)

    def remove_location(self, worker_id: str) -> None:
        """Remove all the location tags of the given worker."""
        self._location_tags = [
            tag for tag in self._location_tags if tag.worker_id != worker_id
        ]

    def has_location(self, worker_id: str) -> bool:
        return any(tag.worker_id == worker_id for tag in self._location_tags)

    def primary_location(self) -> LocationTag | None:
        """The first tag marked primary, None if there is none."""
        for tag in self._location_tags:
            if tag.is_primary:
                return tag
        return None

    def set_meta(self, key: str, value: str) -> None:
        self._metadata[key] = value

    def get_meta(self, key: str) -> str | None:
        return self._metadata.get(key)

    def has_meta(self, key: str) -> bool:
        return key in self._metadata

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TensorRef):
            return NotImplemented
        return self._hash == other._hash

    @override
    def __hash__(self) -> int:
        return hash(self._hash)

    @override
    def __repr__(self) -> str:
        return f"TensorRef(hash={self._hash}, shape={self._shape}, dtype={self._dtype})"


class TensorData(TensorType):
    """
    Owned tensor bytes with their shape, dtype and layout.
    The buffer length always equals shape.size * dtype.size.
    """

    def __init__(
        self,
        shape: Shape,
        dtype: DType,
        data: bytes | bytearray | None = None,
        layout: MemoryLayout = MemoryLayout.ROW_MAJOR,
    ) -> None:
        expected = shape.size * dtype.size
        if data is None:
            buffer = bytearray(expected)
        else:
            if len(data) != expected:
                raise TensorError(
                    f"data size mismatch for {dtype} tensor of shape {shape}: "
                    f"expected {expected} bytes but got {len(data)}"
                )
            buffer = bytearray(data)
        self._shape = shape
        self._dtype = dtype
        self._data = buffer
        self._layout = layout
        self._strides = shape.strides(layout)

    @classmethod
    def zeros(
        cls,
        shape: Shape,
        dtype: DType,
        layout: MemoryLayout = MemoryLayout.ROW_MAJOR,
    ) -> TensorData:
        return cls(shape, dtype, layout=layout)

    @classmethod
    def from_bytes(
        cls,
        shape: Shape,
        dtype: DType,
        data: bytes | bytearray,
        layout: MemoryLayout = MemoryLayout.ROW_MAJOR,
    ) -> TensorData:
        return cls(shape, dtype, data, layout)

    @classmethod
    def from_numpy(cls, array: numpy.typing.ArrayLike) -> TensorData:
        """Copy a numpy array into a row-major tensor buffer."""
        nparray = np.ascontiguousarray(array)
        dtype = DType.try_parse(str(nparray.dtype))
        if dtype is None:
            raise TensorError(f"unsupported numpy dtype: {nparray.dtype}")
        return cls(Shape(*[int(d) for d in nparray.shape]), dtype, nparray.tobytes())

    @property
    @override
    def shape(self) -> Shape:
        return self._shape

    @property
    @override
    def dtype(self) -> DType:
        return self._dtype

    @property
    def data(self) -> bytearray:
        return self._data

    @property
    def layout(self) -> MemoryLayout:
        return self._layout

    @property
    def strides(self) -> tuple[int, ...]:
        return self._strides

    @property
    @override
    def byte_size(self) -> int:
        return len(self._data)

    def is_contiguous(self) -> bool:
        return self._shape.is_contiguous(self._strides, self._layout)

    def clone(self) -> TensorData:
        """Deep copy, the clone owns an independent buffer."""
        return TensorData(self._shape, self._dtype, bytes(self._data), self._layout)

    def compute_hash(self) -> Hash256:
        return compute_hash(self._shape, self._dtype, self._data)

    def verify(self, expected: Hash256) -> bool:
        """Recompute the content hash and compare it with expected."""
        return self.compute_hash() == expected

    def to_ref(self) -> TensorRef:
        return TensorRef.from_data(self)

    def as_array(self, dtype: DType) -> numpy.typing.NDArray[Any]:
        """
        Writable numpy view over the buffer, typed as dtype.
        Raise if dtype is not the tensor dtype or has no numpy equivalent.
        """
        if dtype != self._dtype:
            raise TensorError(f"tensor is {self._dtype}, not {dtype}")
        np_dtype = dtype.numpy_dtype
        if np_dtype is None:
            raise TensorError(f"no numpy view available for {dtype} tensors")
        order = "C" if self._layout == MemoryLayout.ROW_MAJOR else "F"
        flat = np.frombuffer(self._data, dtype=np_dtype)
        return flat.reshape(self._shape.dims, order=order)

    def fill(self, value: Any, dtype: DType) -> None:
        self.as_array(dtype)[...] = value

    @override
    def __repr__(self) -> str:
        return (
            f"TensorData(shape={self._shape}, dtype={self._dtype}, "
            f"layout={self._layout.value})"
        )
