#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from .ir import (
    IRGraph,  # type: ignore
    IRGraphBuilder,  # type: ignore
    IRNode,  # type: ignore
    NodeKind,  # type: ignore
    merge,  # type: ignore
)
