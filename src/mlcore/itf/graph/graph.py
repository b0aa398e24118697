#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mlcore.data import TensorRef
    from .node import Node


class Graph(ABC):
    """An abstract representation of a computation graph over tensors.

    A Graph is a directed acyclic graph (DAG) over Node objects with
    designated input and output nodes. From the graph inputs tensor types,
    all node outputs shapes and dtypes can be inferred.

    A Graph only describes a computation, execution is left to an external
    engine which orders the nodes with a topological sort.

    Nodes in the graph are keyed by their name which is unique within the graph.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Returns the name of this graph.

        Returns:
            The graph's name, possibly empty
        """
        ...

    @property
    @abstractmethod
    def nodes(self) -> dict[str, Node]:
        """Returns a dictionary of all nodes in the graph, keyed by node name.

        Returns:
            Dictionary mapping node names to Node objects, in insertion order
        """
        ...

    @property
    @abstractmethod
    def inputs(self) -> list[str]:
        """Returns the list of input node names for this graph.

        Returns:
            List of input node names
        """
        ...

    @property
    @abstractmethod
    def outputs(self) -> list[str]:
        """Returns the list of output node names for the graph.

        Returns:
            List of output node names
        """
        ...

    @abstractmethod
    def topological_sort(self) -> list[str]:
        """Orders the nodes such that each node follows its predecessors.

        Returns:
            List of node names in topological order
        """
        ...

    @abstractmethod
    def forward_types(self) -> dict[str, TensorRef]:
        """Infers all nodes output tensor types from the graph inputs.

        Returns:
            Dictionary mapping node names to their output tensor reference
        """
        ...
