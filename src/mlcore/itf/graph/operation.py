#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mlcore.data import DType, Shape, TensorRef


class Operation(ABC):
    """An abstract representation of one computation step.

    An Operation names what is computed (its kind and attributes) over which
    tensors (its ordered input references). It can infer the shape and dtype
    of its output from its inputs, without any access to tensor bytes.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Returns the wire name of the operation kind.

        Returns:
            The operation kind name, e.g. "matmul"
        """
        ...

    @property
    @abstractmethod
    def attrs(self) -> Mapping[str, Any]:
        """Returns the attributes of the operation.

        Returns:
            Mapping from attribute name to attribute value
        """
        ...

    @property
    @abstractmethod
    def inputs(self) -> Sequence[TensorRef | None]:
        """Returns the ordered input tensor references.

        Returns:
            The input references, None for a missing input
        """
        ...

    @abstractmethod
    def validate(self) -> bool:
        """Checks the input arity and that no input is missing.

        Returns:
            True if the operation is well formed
        """
        ...

    @abstractmethod
    def infer_output_shape(self) -> Shape:
        """Infers the output shape from the inputs shapes and the attributes.

        Returns:
            The inferred output shape
        """
        ...

    @abstractmethod
    def infer_output_dtype(self) -> DType:
        """Infers the output element type from the inputs and the attributes.

        Returns:
            The inferred output dtype
        """
        ...
