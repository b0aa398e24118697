#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
import functools
import operator
from collections.abc import Iterable


def mulall(values: Iterable[int]) -> int:
    """Product of all values, 1 for an empty iterable."""
    return functools.reduce(operator.mul, values, 1)
