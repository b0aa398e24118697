#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from .dtype import (
    DType,  # type: ignore
    DTypeCategory,  # type: ignore
    promote,  # type: ignore
    can_cast,  # type: ignore
    may_lose_precision,  # type: ignore
)
from .shape import (
    MemoryLayout,  # type: ignore
    Shape,  # type: ignore
    broadcastable,  # type: ignore
    broadcast,  # type: ignore
    matmul_shape,  # type: ignore
    conv_output_shape,  # type: ignore
    to_pair,  # type: ignore
)
from .hash import (
    Hash256,  # type: ignore
    compute_hash,  # type: ignore
)
from .tensor import (
    LocationTag,  # type: ignore
    TensorRef,  # type: ignore
    TensorData,  # type: ignore
)
