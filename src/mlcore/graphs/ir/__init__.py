#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from .node import (
    IRNode,  # type: ignore
    NodeKind,  # type: ignore
)
from .graph import (
    IRGraph,  # type: ignore
    merge,  # type: ignore
)
from .builder import IRGraphBuilder  # type: ignore
from .document import (
    to_dict,  # type: ignore
    to_json,  # type: ignore
    to_yaml,  # type: ignore
    from_dict,  # type: ignore
    from_json,  # type: ignore
    from_yaml,  # type: ignore
)
from .dot import to_dot  # type: ignore
