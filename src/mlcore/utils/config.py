#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
import os

from mlcore.exceptions import TensorError

__all__ = [
    "DEFAULT_DTYPE_VAR",
    "get_default_dtype_name",
]

DEFAULT_DTYPE_VAR = "MLCORE_DEFAULT_DTYPE"


def get_default_dtype_name() -> str:
    """
    Return the name of the default tensor element type.
    Defined in order as:
    - env var MLCORE_DEFAULT_DTYPE if set and not empty
    - float32
    Raise on an unknown dtype name.
    """
    from mlcore.data.dtype import DType

    name = os.environ.get(DEFAULT_DTYPE_VAR)
    if not name:
        return DType.FLOAT32.value
    try:
        return DType.parse(name).value
    except TensorError as e:
        raise RuntimeError(f"invalid {DEFAULT_DTYPE_VAR} value: {name}") from e
