#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mlcore.data.dtype import DType
    from mlcore.data.shape import Shape


class TensorType(ABC):
    """An abstract representation of a tensor's type information.

    TensorType defines the shape and element type of a tensor, which is all
    the information needed by shape and dtype inference. Both tensor
    references and owned tensor buffers expose it.
    """

    @property
    @abstractmethod
    def shape(self) -> Shape:
        """Returns the tensor's shape.

        Returns:
            The size of each dimension in the tensor
        """
        ...

    @property
    @abstractmethod
    def dtype(self) -> DType:
        """Returns the tensor's element type.

        Returns:
            The scalar kind of the tensor elements
        """
        ...

    @property
    def ndim(self) -> int:
        """Returns the number of dimensions in the tensor."""
        return self.shape.rank

    @property
    def size(self) -> int:
        """Returns the number of elements in the tensor."""
        return self.shape.size

    @property
    def byte_size(self) -> int:
        """Returns the expected size in bytes of the tensor content."""
        return self.shape.size * self.dtype.size
