#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from __future__ import annotations

from dataclasses import dataclass
import hashlib
import re
from typing import TYPE_CHECKING
from typing_extensions import override
import numpy as np

from mlcore.exceptions import TensorError

if TYPE_CHECKING:
    from .dtype import DType
    from .shape import Shape

__all__ = [
    "Hash256",
    "compute_hash",
]

HASH_SIZE = 32

_HEX_PATTERN = re.compile(r"[0-9a-fA-F]{64}")


@dataclass(frozen=True)
class Hash256:
    """A 256-bit content digest, the all-zero digest means not materialized."""

    digest: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.digest, bytes) or len(self.digest) != HASH_SIZE:
            raise TensorError(f"hash digest must be {HASH_SIZE} bytes")

    @classmethod
    def zero(cls) -> Hash256:
        return cls(bytes(HASH_SIZE))

    @classmethod
    def parse(cls, text: str) -> Hash256:
        """Parse 64 hexadecimal characters, in either case."""
        if len(text) != 2 * HASH_SIZE:
            raise TensorError(
                f"invalid hash string length, expected {2 * HASH_SIZE}: {len(text)}"
            )
        if not _HEX_PATTERN.fullmatch(text):
            raise TensorError(f"invalid hex character in hash string: {text!r}")
        return cls(bytes.fromhex(text))

    @property
    def is_zero(self) -> bool:
        return not any(self.digest)

    @override
    def __str__(self) -> str:
        return self.digest.hex()

    @override
    def __repr__(self) -> str:
        return f"Hash256({self})"


def compute_hash(shape: Shape, dtype: DType, data: bytes | bytearray) -> Hash256:
    """
    SHA-256 of the canonical encoding of a tensor content:
    rank and dimensions as little-endian int64, dtype code byte, raw bytes.
    """
    header = np.array([shape.rank, *shape.dims], dtype="<i8").tobytes()
    sha = hashlib.sha256()
    sha.update(header)
    sha.update(bytes([dtype.code]))
    sha.update(data)
    return Hash256(sha.digest())
