"""
fixgrad: fixed-shape tensors with a reverse-mode autograd graph.

Public API
----------
- `Tensor`: fixed-shape NumPy-backed array with value semantics.
- `Variable`: handle to a node of the autograd graph.
- Differentiable operations (`add`, `matrix_product`, `sigmoid`, ...).
- Tensor-level kernels (`apply_function`, `stack_along`, `all_close`, ...).
- Serialization field walkers (`dump_fields`, `load_fields`).
- Errors (`ShapeMismatchError`, `ElementCountMismatchError`, `RankError`).
"""

from .domain import (
    ElementCountMismatchError,
    Function,
    INode,
    ISerializable,
    ITensor,
    RankError,
    ShapeMismatchError,
)
from .infrastructure import Context, LeafNode, Node, OperationNode, Tensor, Variable
from .infrastructure import _function as functional
from .infrastructure.module import dump_fields, load_fields
from .infrastructure.ops import (
    add_bias,
    all_close,
    all_of,
    apply_function,
    apply_function_inplace,
    logical_and,
    logical_not,
    logical_or,
    matrix_product,
    matrix_product_transposed,
    split_along,
    stack_along,
)

__version__ = "0.1.0a0"

__all__ = [
    "ElementCountMismatchError",
    "Function",
    "INode",
    "ISerializable",
    "ITensor",
    "RankError",
    "ShapeMismatchError",
    "Context",
    "LeafNode",
    "Node",
    "OperationNode",
    "Tensor",
    "Variable",
    "functional",
    "dump_fields",
    "load_fields",
    "add_bias",
    "all_close",
    "all_of",
    "apply_function",
    "apply_function_inplace",
    "logical_and",
    "logical_not",
    "logical_or",
    "matrix_product",
    "matrix_product_transposed",
    "split_along",
    "stack_along",
]
