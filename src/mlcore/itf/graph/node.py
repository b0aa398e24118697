#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mlcore.data import TensorRef
    from .operation import Operation


class Node(ABC):
    """An abstract representation of a node in a computation graph.

    A Node is either a graph input, a constant, an operation or a graph
    output. Each node has a unique name within its graph, the names of its
    predecessor and successor nodes, an optional Operation (for operation
    nodes only) and a reference to the tensor it produces.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Returns the unique name of this node.

        Returns:
            The node's unique identifier within its graph
        """
        ...

    @property
    @abstractmethod
    def inputs(self) -> list[str]:
        """Returns the names of the predecessor nodes.

        Returns:
            List of predecessor node names
        """
        ...

    @property
    @abstractmethod
    def outputs(self) -> list[str]:
        """Returns the names of the successor nodes.

        Returns:
            List of successor node names
        """
        ...

    @property
    @abstractmethod
    def operation(self) -> Operation | None:
        """Returns the operation computed by this node.

        Returns:
            The operation for operation nodes, None otherwise
        """
        ...

    @property
    @abstractmethod
    def tensor(self) -> TensorRef | None:
        """Returns the reference of the tensor produced by this node.

        Returns:
            The output tensor reference, None if unknown
        """
        ...
