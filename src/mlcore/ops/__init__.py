#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from .kinds import (
    OpCategory,  # type: ignore
    OpKind,  # type: ignore
    VARIADIC,  # type: ignore
)
from .attrs import (
    AttrValue,  # type: ignore
    OpAttrs,  # type: ignore
)
from .spec import OpSpec  # type: ignore
from .inference import (
    infer_output_shape,  # type: ignore
    infer_output_dtype,  # type: ignore
)
