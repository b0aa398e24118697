#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
"""Error taxonomy shared by the shape, tensor, operation and graph layers."""


class ShapeError(RuntimeError):
    """Raised on invalid dimensions, broadcasting or shape rewriting."""

    pass


class ShapeIndexError(ShapeError, IndexError):
    """Raised when a dimension index or axis is out of range."""

    pass


class TensorError(RuntimeError):
    """Raised on buffer size mismatch, dtype accessor mismatch or bad hash text."""

    pass


class OpError(RuntimeError):
    """Raised on operation arity violations or missing inputs during inference."""

    pass


class GraphError(RuntimeError):
    """Raised on invalid graph mutations such as duplicate node ids."""

    pass


class GraphValidationError(GraphError):
    """Raised when the graph structure is invalid, e.g. it contains a cycle."""

    pass
