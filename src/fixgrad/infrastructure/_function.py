"""
Differentiable operations for the autograd graph.

This module contains the infrastructure-level implementations of every
differentiable operation, expressed in a function-style autograd API:

- Each operation is a `Function` subclass with static
  ``forward(ctx, *values, **meta)`` and ``backward(ctx, grad_out, *grad_slots)``.
- A `Context` instance stores tensors and metadata required by the backward
  rule (`save_for_backward`, `saved_meta`), and exposes the node's own value
  as ``ctx.output`` while the rule runs.
- Public factory functions (e.g., `exp`) are responsible for:
  - lifting tensors and numbers into non-differentiable leaves,
  - validating non-tensor arguments,
  - constructing the `OperationNode`, which runs `forward` eagerly,
  - wrapping the node in a `Variable`.

Notes
-----
- Parent values are saved *by reference*. If a leaf's value is modified in
  place between the forward and the backward pass, the backward rule sees the
  modified value.
- Backward rules accumulate into their slots with in-place operators and skip
  slots that are ``None`` (parents that do not require gradients).
- Elementwise operations require identical shapes; there is no broadcasting
  beyond tensor-with-scalar.
"""

from typing import Any, Optional, Union

import numpy as np

from ..domain._errors import RankError
from ..domain._function import Function
from ._node import LeafNode, Node, OperationNode
from ._variable import Variable
from .ops.bias_add_cpu import add_bias as _add_bias_values, bias_grad
from .ops.matmul_cpu import matrix_product as _matrix_product_values
from .ops.matmul_cpu import matrix_product_transposed
from .ops.stack_cpu import split_along, stack_along as _stack_values
from .tensor import Tensor

Number = Union[int, float, bool]
Operand = Union[Variable, Tensor, Number]

_SCALAR_TYPES = (int, float, bool, np.number, np.bool_)


# ----------------------------
# Operand lifting
# ----------------------------
def _node_of(x: Operand, like: Optional[Tensor] = None) -> Node:
    """
    Return the graph node for an operand.

    Variables contribute their own node. Tensors become non-differentiable
    leaves. Numbers become non-differentiable leaves filled with that number,
    shaped and typed like `like`.
    """
    if isinstance(x, Variable):
        return x.node
    if isinstance(x, Tensor):
        return LeafNode(x, False)
    if isinstance(x, _SCALAR_TYPES) and like is not None:
        return LeafNode(Tensor.full(like.shape, x, dtype=like.dtype), False)
    raise TypeError(f"Expected a Variable, Tensor or number, got {type(x).__name__}")


def _node_pair(l: Operand, r: Operand) -> tuple[Node, Node]:
    if isinstance(l, _SCALAR_TYPES):
        rn = _node_of(r)
        return _node_of(l, like=rn.value), rn
    ln = _node_of(l)
    return ln, _node_of(r, like=ln.value)


def _apply(function: type, *parents: Node, **meta: Any) -> Variable:
    return Variable._from_node(OperationNode(function, *parents, **meta))


# ----------------------------
# Elementwise arithmetic
# ----------------------------
class AddFn(Function):
    """
    Elementwise addition.

    Backward:

        l.grad += g
        r.grad += g
    """

    @staticmethod
    def forward(ctx, l: Tensor, r: Tensor) -> Tensor:
        return l + r

    @staticmethod
    def backward(ctx, grad_out: Tensor, l_grad: Optional[Tensor], r_grad: Optional[Tensor]) -> None:
        if l_grad is not None:
            l_grad += grad_out
        if r_grad is not None:
            r_grad += grad_out


class SubtractFn(Function):
    """
    Elementwise subtraction.

    Backward:

        l.grad += g
        r.grad -= g
    """

    @staticmethod
    def forward(ctx, l: Tensor, r: Tensor) -> Tensor:
        return l - r

    @staticmethod
    def backward(ctx, grad_out: Tensor, l_grad: Optional[Tensor], r_grad: Optional[Tensor]) -> None:
        if l_grad is not None:
            l_grad += grad_out
        if r_grad is not None:
            r_grad -= grad_out


class MultiplyFn(Function):
    """
    Elementwise (Hadamard) multiplication.

    Backward:

        l.grad += g * r
        r.grad += g * l
    """

    @staticmethod
    def forward(ctx, l: Tensor, r: Tensor) -> Tensor:
        ctx.save_for_backward(l, r)
        return l * r

    @staticmethod
    def backward(ctx, grad_out: Tensor, l_grad: Optional[Tensor], r_grad: Optional[Tensor]) -> None:
        l, r = ctx.saved_tensors
        if l_grad is not None:
            l_grad += grad_out * r
        if r_grad is not None:
            r_grad += grad_out * l


class DivideFn(Function):
    """
    Elementwise division.

    Backward:

        l.grad += g / r
        r.grad -= g * l / (r * r)
    """

    @staticmethod
    def forward(ctx, l: Tensor, r: Tensor) -> Tensor:
        ctx.save_for_backward(l, r)
        return l / r

    @staticmethod
    def backward(ctx, grad_out: Tensor, l_grad: Optional[Tensor], r_grad: Optional[Tensor]) -> None:
        l, r = ctx.saved_tensors
        if l_grad is not None:
            l_grad += grad_out / r
        if r_grad is not None:
            r_grad -= grad_out * l / (r * r)


class NegateFn(Function):
    """Elementwise negation; ``v.grad -= g``."""

    @staticmethod
    def forward(ctx, v: Tensor) -> Tensor:
        return -v

    @staticmethod
    def backward(ctx, grad_out: Tensor, v_grad: Optional[Tensor]) -> None:
        if v_grad is not None:
            v_grad -= grad_out


def add(l: Operand, r: Operand) -> Variable:
    """Differentiable ``l + r``."""
    return _apply(AddFn, *_node_pair(l, r))


def subtract(l: Operand, r: Operand) -> Variable:
    """Differentiable ``l - r``."""
    return _apply(SubtractFn, *_node_pair(l, r))


def multiply(l: Operand, r: Operand) -> Variable:
    """Differentiable elementwise ``l * r``."""
    return _apply(MultiplyFn, *_node_pair(l, r))


def divide(l: Operand, r: Operand) -> Variable:
    """Differentiable elementwise ``l / r``."""
    return _apply(DivideFn, *_node_pair(l, r))


def negate(v: Operand) -> Variable:
    """Differentiable ``-v``."""
    return _apply(NegateFn, _node_of(v))


# ----------------------------
# Linear algebra and layout
# ----------------------------
class MatrixProductFn(Function):
    """
    Matrix product of two matrices.

    Implements:

        out = l @ r          (m, k) x (k, n) -> (m, n)

    Backward:

        l.grad += g @ r.T
        r.grad += l.T @ g

    Both gradient products accumulate straight into the parents'
    accumulators.
    """

    @staticmethod
    def forward(ctx, l: Tensor, r: Tensor) -> Tensor:
        if l.dimension_count != 2:
            raise RankError("matrix_product", 2, l.dimension_count)
        if r.dimension_count != 2:
            raise RankError("matrix_product", 2, r.dimension_count)
        ctx.save_for_backward(l, r)
        return _matrix_product_values(l, r)

    @staticmethod
    def backward(ctx, grad_out: Tensor, l_grad: Optional[Tensor], r_grad: Optional[Tensor]) -> None:
        l, r = ctx.saved_tensors
        if l_grad is not None:
            matrix_product_transposed(grad_out, r, out=l_grad)
        if r_grad is not None:
            _matrix_product_values(l.T, grad_out, out=r_grad)


class TransposeFn(Function):
    """2-D transpose; ``v.grad += g.T``."""

    @staticmethod
    def forward(ctx, v: Tensor) -> Tensor:
        return v.T

    @staticmethod
    def backward(ctx, grad_out: Tensor, v_grad: Optional[Tensor]) -> None:
        if v_grad is not None:
            v_grad += grad_out.T


class ViewFn(Function):
    """
    Reshape to a new shape of equal element count.

    The gradient is reshaped back to the source shape, which is exact because
    a view is a bijection on elements.
    """

    @staticmethod
    def forward(ctx, v: Tensor, *, shape: tuple) -> Tensor:
        ctx.saved_meta["source_shape"] = v.shape
        return v.view(shape, copy=True)

    @staticmethod
    def backward(ctx, grad_out: Tensor, v_grad: Optional[Tensor]) -> None:
        if v_grad is not None:
            v_grad += grad_out.view(ctx.saved_meta["source_shape"])


class StackAlongFn(Function):
    """
    Concatenation along one axis.

    Backward splits the upstream gradient at the first operand's size along
    the same axis and routes each part to its operand.
    """

    @staticmethod
    def forward(ctx, l: Tensor, r: Tensor, *, axis: int) -> Tensor:
        out = _stack_values(l, r, axis=axis)
        ctx.saved_meta["axis"] = axis
        ctx.saved_meta["split_size"] = l.shape[axis]
        return out

    @staticmethod
    def backward(ctx, grad_out: Tensor, l_grad: Optional[Tensor], r_grad: Optional[Tensor]) -> None:
        first, second = split_along(
            grad_out, ctx.saved_meta["split_size"], axis=ctx.saved_meta["axis"]
        )
        if l_grad is not None:
            l_grad += first
        if r_grad is not None:
            r_grad += second


def matrix_product(l: Operand, r: Operand) -> Variable:
    """
    Differentiable matrix product of two 2-D operands.

    Raises
    ------
    RankError
        If either operand is not 2-D.
    ShapeMismatchError
        If the inner dimensions differ.
    """
    return _apply(MatrixProductFn, _node_of(l), _node_of(r))


def transpose(v: Operand) -> Variable:
    """Differentiable 2-D transpose."""
    return _apply(TransposeFn, _node_of(v))


def view(v: Operand, *dims: Any) -> Variable:
    """
    Differentiable reshape. Accepts ``view(v, 2, 3)`` or ``view(v, (2, 3))``;
    one dimension may be ``-1``.
    """
    if len(dims) == 1 and not isinstance(dims[0], int):
        dims = tuple(dims[0])
    return _apply(ViewFn, _node_of(v), shape=tuple(dims))


def stack_along(l: Operand, r: Operand, *, axis: int = 0) -> Variable:
    """Differentiable concatenation of `l` and `r` along `axis`."""
    return _apply(StackAlongFn, _node_of(l), _node_of(r), axis=axis)


# ----------------------------
# Reductions and unary math
# ----------------------------
class SumFn(Function):
    """
    Sum of all elements into a rank-0 value.

    Backward: every element of ``v.grad`` receives the scalar gradient.
    """

    @staticmethod
    def forward(ctx, v: Tensor) -> Tensor:
        return v.sum()

    @staticmethod
    def backward(ctx, grad_out: Tensor, v_grad: Optional[Tensor]) -> None:
        if v_grad is not None:
            v_grad += grad_out.item()


class LogFn(Function):
    """Natural logarithm; ``v.grad += g / v``."""

    @staticmethod
    def forward(ctx, v: Tensor) -> Tensor:
        ctx.save_for_backward(v)
        return v.log()

    @staticmethod
    def backward(ctx, grad_out: Tensor, v_grad: Optional[Tensor]) -> None:
        (v,) = ctx.saved_tensors
        if v_grad is not None:
            v_grad += grad_out / v


class SqrtFn(Function):
    """
    Square root.

    Backward is expressed through the output ``o = sqrt(v)``:

        v.grad += g * 0.5 / o
    """

    @staticmethod
    def forward(ctx, v: Tensor) -> Tensor:
        return v.sqrt()

    @staticmethod
    def backward(ctx, grad_out: Tensor, v_grad: Optional[Tensor]) -> None:
        if v_grad is not None:
            v_grad += grad_out * 0.5 / ctx.output


class ExpFn(Function):
    """
    Elementwise exponential function.

    Implements:

        out = exp(x)

    Backward:

        d(exp(x))/dx = exp(x) = out
    """

    @staticmethod
    def forward(ctx, v: Tensor) -> Tensor:
        return v.exp()

    @staticmethod
    def backward(ctx, grad_out: Tensor, v_grad: Optional[Tensor]) -> None:
        if v_grad is not None:
            v_grad += grad_out * ctx.output


class TanhFn(Function):
    """Hyperbolic tangent; ``v.grad += g * (1 - o * o)`` with ``o`` the output."""

    @staticmethod
    def forward(ctx, v: Tensor) -> Tensor:
        return v.tanh()

    @staticmethod
    def backward(ctx, grad_out: Tensor, v_grad: Optional[Tensor]) -> None:
        if v_grad is not None:
            o = ctx.output
            v_grad += grad_out * (1 - o * o)


class SigmoidFn(Function):
    """
    Sigmoid activation function.

    Implements:

        out = 1 / (1 + exp(-x))

    Backward:

        d(sigmoid(x))/dx = out * (1 - out)
    """

    @staticmethod
    def forward(ctx, v: Tensor) -> Tensor:
        return v.sigmoid()

    @staticmethod
    def backward(ctx, grad_out: Tensor, v_grad: Optional[Tensor]) -> None:
        if v_grad is not None:
            o = ctx.output
            v_grad += grad_out * o * (1 - o)


def sum(v: Operand) -> Variable:
    """Differentiable sum of all elements (rank-0 result)."""
    return _apply(SumFn, _node_of(v))


def log(v: Operand) -> Variable:
    """Differentiable natural logarithm."""
    return _apply(LogFn, _node_of(v))


def sqrt(v: Operand) -> Variable:
    """Differentiable square root."""
    return _apply(SqrtFn, _node_of(v))


def exp(v: Operand) -> Variable:
    """
    Compute the elementwise exponential of a variable with autograd support.

    Parameters
    ----------
    v : Variable or Tensor
        Input value. Tensors are lifted into non-differentiable leaves.

    Returns
    -------
    Variable
        ``exp(v)``.
    """
    return _apply(ExpFn, _node_of(v))


def tanh(v: Operand) -> Variable:
    """Differentiable hyperbolic tangent."""
    return _apply(TanhFn, _node_of(v))


def sigmoid(v: Operand) -> Variable:
    """Differentiable logistic sigmoid."""
    return _apply(SigmoidFn, _node_of(v))


# ----------------------------
# Layer helpers
# ----------------------------
class AddBiasFn(Function):
    """
    Per-feature bias addition for inputs of shape (N, F, ...).

    Backward:

        t.grad += g
        b.grad[f] += sum of g[:, f, ...]
    """

    @staticmethod
    def forward(ctx, t: Tensor, bias: Tensor) -> Tensor:
        return _add_bias_values(t, bias)

    @staticmethod
    def backward(ctx, grad_out: Tensor, t_grad: Optional[Tensor], b_grad: Optional[Tensor]) -> None:
        if t_grad is not None:
            t_grad += grad_out
        if b_grad is not None:
            b_grad += bias_grad(grad_out)


class DropoutFn(Function):
    """
    Inverted dropout over whole ``x[i][j]`` sub-tensors.

    A keep decision is drawn per (sample, feature) position of the first two
    axes; kept positions are scaled by ``1 / (1 - p)`` so the expected value
    is unchanged, dropped positions become zero.

    Backward applies the same per-position factors to the upstream gradient.
    """

    @staticmethod
    def forward(ctx, x: Tensor, *, p: float, generator: np.random.Generator) -> Tensor:
        keep = generator.random(x.shape[:2]) >= p
        factors = Tensor.from_nested(np.where(keep, 1.0 / (1.0 - p), 0.0), dtype=x.dtype)
        ctx.save_for_backward(factors)
        return _scale(x, factors)

    @staticmethod
    def backward(ctx, grad_out: Tensor, x_grad: Optional[Tensor]) -> None:
        if x_grad is not None:
            (factors,) = ctx.saved_tensors
            x_grad += _scale(grad_out, factors)


def _scale(t: Tensor, factors: Tensor) -> Tensor:
    """Multiply every ``t[i][j]`` sub-tensor by ``factors[i][j]``."""
    trailing = (1,) * (t.dimension_count - 2)
    return Tensor._from_result(
        t.data * factors.data.reshape(factors.shape + trailing), dtype=t.dtype
    )


def add_bias(t: Operand, bias: Operand) -> Variable:
    """
    Differentiable per-feature bias addition.

    Parameters
    ----------
    t : Variable or Tensor
        Input of shape (N, F, ...).
    bias : Variable or Tensor
        Bias of shape (F,).
    """
    return _apply(AddBiasFn, _node_of(t), _node_of(bias))


def dropout(
    x: Operand,
    p: float,
    *,
    generator: Optional[np.random.Generator] = None,
    training: bool = True,
) -> Variable:
    """
    Differentiable inverted dropout.

    Parameters
    ----------
    x : Variable or Tensor
        Floating-point input of rank >= 2, laid out as (N, F, ...).
    p : float
        Drop probability in ``[0, 1)``.
    generator : Optional[np.random.Generator], optional
        Source of randomness. A fresh `np.random.default_rng()` is used when
        omitted; pass a seeded generator for reproducible masks.
    training : bool, optional
        When False, `x` is returned unchanged (as a Variable).

    Raises
    ------
    ValueError
        If `p` is outside ``[0, 1)``.
    RankError
        If `x` has rank below 2.
    TypeError
        If `x` does not have a floating-point dtype; the ``1 / (1 - p)``
        scale would be truncated.
    """
    if not 0.0 <= p < 1.0:
        raise ValueError(f"dropout probability must be in [0, 1), got {p}")

    node = _node_of(x)
    if node.value.dimension_count < 2:
        raise RankError("dropout", ">= 2", node.value.dimension_count)
    if node.value.dtype.kind != "f":
        raise TypeError(f"dropout requires a floating-point input, got {node.value.dtype}")
    if not training:
        return x if isinstance(x, Variable) else Variable._from_node(node)

    rng = np.random.default_rng() if generator is None else generator
    return _apply(DropoutFn, node, p=float(p), generator=rng)
