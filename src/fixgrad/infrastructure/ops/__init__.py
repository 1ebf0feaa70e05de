from .apply_cpu import apply_function, apply_function_inplace
from .bias_add_cpu import add_bias, bias_grad
from .elementwise_cpu import (
    absolute,
    all_close,
    all_of,
    exp,
    log,
    logical_and,
    logical_not,
    logical_or,
    sigmoid,
    sign,
    sqrt,
    sum_all,
    tanh,
)
from .matmul_cpu import matrix_product, matrix_product_transposed
from .stack_cpu import split_along, stack_along

__all__ = [
    "apply_function",
    "apply_function_inplace",
    "add_bias",
    "bias_grad",
    "absolute",
    "all_close",
    "all_of",
    "exp",
    "log",
    "logical_and",
    "logical_not",
    "logical_or",
    "sigmoid",
    "sign",
    "sqrt",
    "sum_all",
    "tanh",
    "matrix_product",
    "matrix_product_transposed",
    "split_along",
    "stack_along",
]
