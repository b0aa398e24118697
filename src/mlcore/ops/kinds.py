#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
from enum import Enum

__all__ = [
    "OpCategory",
    "OpKind",
    "VARIADIC",
]

VARIADIC = -1


class OpCategory(Enum):
    UNARY = "unary"
    BINARY = "binary"
    COMPARISON = "comparison"
    LOGICAL = "logical"
    REDUCTION = "reduction"
    MATRIX = "matrix"
    ACTIVATION = "activation"
    NORMALIZATION = "normalization"
    NEURAL = "neural"
    LOSS = "loss"
    MEMORY = "memory"
    COLLECTIVE = "collective"
    MISC = "misc"


class OpKind(Enum):
    # Unary
    NEG = "neg"
    ABS = "abs"
    EXP = "exp"
    LOG = "log"
    LOG2 = "log2"
    LOG10 = "log10"
    SQRT = "sqrt"
    RSQRT = "rsqrt"
    SQUARE = "square"
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    SINH = "sinh"
    COSH = "cosh"
    TANH = "tanh"
    FLOOR = "floor"
    CEIL = "ceil"
    ROUND = "round"
    SIGN = "sign"
    RECIPROCAL = "reciprocal"
    ERF = "erf"

    # Binary
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    POW = "pow"
    MOD = "mod"
    MAX = "max"
    MIN = "min"

    # Comparison
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"

    # Logical
    AND = "and"
    OR = "or"
    XOR = "xor"
    NOT = "not"

    # Reduction
    SUM = "sum"
    MEAN = "mean"
    PROD = "prod"
    REDUCE_MAX = "reduce_max"
    REDUCE_MIN = "reduce_min"
    ARGMAX = "argmax"
    ARGMIN = "argmin"
    ALL = "all"
    ANY = "any"
    VARIANCE = "variance"
    STD = "std"

    # Matrix
    MATMUL = "matmul"
    BATCH_MATMUL = "batch_matmul"
    TRANSPOSE = "transpose"
    DOT = "dot"
    OUTER = "outer"
    EINSUM = "einsum"

    # Activation
    RELU = "relu"
    LEAKY_RELU = "leaky_relu"
    GELU = "gelu"
    SILU = "silu"
    MISH = "mish"
    SIGMOID = "sigmoid"
    SOFTMAX = "softmax"
    LOG_SOFTMAX = "log_softmax"
    SOFTPLUS = "softplus"
    HARDSWISH = "hardswish"

    # Normalization
    BATCH_NORM = "batch_norm"
    LAYER_NORM = "layer_norm"
    GROUP_NORM = "group_norm"
    INSTANCE_NORM = "instance_norm"
    RMS_NORM = "rms_norm"

    # Neural network
    CONV2D = "conv2d"
    CONV1D = "conv1d"
    CONV3D = "conv3d"
    CONV_TRANSPOSE2D = "conv_transpose2d"
    MAX_POOL2D = "max_pool2d"
    AVG_POOL2D = "avg_pool2d"
    ADAPTIVE_AVG_POOL2D = "adaptive_avg_pool2d"
    DROPOUT = "dropout"
    LINEAR = "linear"
    EMBEDDING = "embedding"
    ATTENTION = "attention"
    MULTI_HEAD_ATTENTION = "multi_head_attention"

    # Loss
    MSE_LOSS = "mse_loss"
    CROSS_ENTROPY_LOSS = "cross_entropy_loss"
    BCE_LOSS = "bce_loss"
    NLL_LOSS = "nll_loss"
    L1_LOSS = "l1_loss"
    HUBER_LOSS = "huber_loss"
    KL_DIV_LOSS = "kl_div_loss"

    # Memory / reshape
    RESHAPE = "reshape"
    VIEW = "view"
    FLATTEN = "flatten"
    SQUEEZE = "squeeze"
    UNSQUEEZE = "unsqueeze"
    PERMUTE = "permute"
    CONTIGUOUS = "contiguous"
    CLONE = "clone"
    CAT = "cat"
    STACK = "stack"
    SPLIT = "split"
    CHUNK = "chunk"
    SLICE = "slice"
    GATHER = "gather"
    SCATTER = "scatter"
    WHERE = "where"
    PAD = "pad"

    # Collective
    ALL_REDUCE = "all_reduce"
    ALL_GATHER = "all_gather"
    REDUCE_SCATTER = "reduce_scatter"
    BROADCAST = "broadcast"
    ALL_TO_ALL = "all_to_all"

    # Misc
    CAST = "cast"
    FILL = "fill"
    ZEROS = "zeros"
    ONES = "ones"
    RAND = "rand"
    RANDN = "randn"
    ARANGE = "arange"
    LINSPACE = "linspace"
    CLAMP = "clamp"
    MASKED_FILL = "masked_fill"
    TRIL = "tril"
    TRIU = "triu"
    DIAG = "diag"
    EYE = "eye"

    @property
    def category(self) -> OpCategory:
        return _KIND_CATEGORIES[self]

    @property
    def num_inputs(self) -> int:
        """Expected number of inputs, VARIADIC (-1) when variable."""
        if self in _KIND_ARITY:
            return _KIND_ARITY[self]
        return _CATEGORY_ARITY[self.category]

    @property
    def is_elementwise(self) -> bool:
        return self.category in _ELEMENTWISE_CATEGORIES

    @property
    def is_inplace(self) -> bool:
        return self.is_elementwise

    @property
    def requires_grad(self) -> bool:
        return self.category not in (OpCategory.COMPARISON, OpCategory.LOGICAL)

    @classmethod
    def parse(cls, name: str) -> "OpKind":
        """Op kind from its wire name ("reduce_max") or member name ("REDUCE_MAX")."""
        try:
            return cls(name)
        except ValueError:
            pass
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"unknown op kind: {name!r}") from None

    def __str__(self) -> str:
        return self.value


def _kinds_range(first: OpKind, last: OpKind) -> list[OpKind]:
    kinds = list(OpKind)
    return kinds[kinds.index(first) : kinds.index(last) + 1]


_CATEGORY_RANGES = [
    (OpCategory.UNARY, OpKind.NEG, OpKind.ERF),
    (OpCategory.BINARY, OpKind.ADD, OpKind.MIN),
    (OpCategory.COMPARISON, OpKind.EQ, OpKind.GE),
    (OpCategory.LOGICAL, OpKind.AND, OpKind.NOT),
    (OpCategory.REDUCTION, OpKind.SUM, OpKind.STD),
    (OpCategory.MATRIX, OpKind.MATMUL, OpKind.EINSUM),
    (OpCategory.ACTIVATION, OpKind.RELU, OpKind.HARDSWISH),
    (OpCategory.NORMALIZATION, OpKind.BATCH_NORM, OpKind.RMS_NORM),
    (OpCategory.NEURAL, OpKind.CONV2D, OpKind.MULTI_HEAD_ATTENTION),
    (OpCategory.LOSS, OpKind.MSE_LOSS, OpKind.KL_DIV_LOSS),
    (OpCategory.MEMORY, OpKind.RESHAPE, OpKind.PAD),
    (OpCategory.COLLECTIVE, OpKind.ALL_REDUCE, OpKind.ALL_TO_ALL),
    (OpCategory.MISC, OpKind.CAST, OpKind.EYE),
]

_KIND_CATEGORIES = {
    kind: category
    for category, first, last in _CATEGORY_RANGES
    for kind in _kinds_range(first, last)
}
assert len(_KIND_CATEGORIES) == len(OpKind)

_CATEGORY_ARITY = {
    OpCategory.UNARY: 1,
    OpCategory.BINARY: 2,
    OpCategory.COMPARISON: 2,
    OpCategory.LOGICAL: 2,
    OpCategory.REDUCTION: 1,
    OpCategory.MATRIX: 1,
    OpCategory.ACTIVATION: 1,
    OpCategory.NORMALIZATION: 1,
    OpCategory.NEURAL: VARIADIC,
    OpCategory.LOSS: 2,
    OpCategory.MEMORY: VARIADIC,
    OpCategory.COLLECTIVE: VARIADIC,
    OpCategory.MISC: VARIADIC,
}

_KIND_ARITY = {
    OpKind.NOT: 1,
    OpKind.MATMUL: 2,
    OpKind.BATCH_MATMUL: 2,
    OpKind.DOT: 2,
    OpKind.OUTER: 2,
    OpKind.EINSUM: VARIADIC,
}

_ELEMENTWISE_CATEGORIES = (
    OpCategory.UNARY,
    OpCategory.BINARY,
    OpCategory.COMPARISON,
    OpCategory.LOGICAL,
    OpCategory.ACTIVATION,
)
