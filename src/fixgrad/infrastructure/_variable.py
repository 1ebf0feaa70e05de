"""
User-facing autograd handle.

This module defines `Variable`, the object users build expressions with. A
`Variable` is a thin handle over a graph node (`LeafNode` or
`OperationNode`):

- constructing a `Variable` from a value creates a leaf;
- applying an operation to variables creates an operation node and returns a
  new `Variable` wrapping it;
- copying the Python reference (``w = v``) aliases the same node, so both
  names observe the same `value` and `grad`.

Design notes
------------
- Operators dispatch to the factory functions in `fixgrad.infrastructure._function`,
  which are imported lazily to keep the module graph acyclic.
- Tensor and scalar operands are lifted into non-differentiable leaves, so
  ``v * 2`` and ``tensor + v`` both work.
"""

from __future__ import annotations

import warnings
from typing import Any, Union

import numpy as np

from ..domain._errors import RankError, ShapeMismatchError
from ..domain._serialization import ISerializable
from ._node import LeafNode, Node
from .tensor import Tensor

Number = Union[int, float, bool]


class Variable(ISerializable):
    """
    Handle to a node of the autograd graph.

    Parameters
    ----------
    value : Tensor or nested sequence or Number
        Initial value. Tensors are copied; nested sequences and numbers are
        converted with `dtype`.
    requires_grad : bool, optional
        Whether gradients should be accumulated for this leaf. Defaults to
        False.
    dtype : np.dtype, optional
        Element dtype used when `value` is not already a `Tensor`. Defaults
        to np.float32.

    Notes
    -----
    The gradient accumulator has the dtype of the value. For an integral
    leaf, fractional gradient contributions (e.g. from `log` or `sqrt`) are
    truncated toward zero when accumulated; use a floating dtype for leaves
    that should receive exact gradients.

    `Variable` deliberately does not define ``__eq__``; two handles compare
    equal only if they are the same object. Compare ``a.value == b.value``
    for value equality.
    """

    __array_ufunc__ = None

    def __init__(
        self,
        value: Union[Tensor, Any],
        requires_grad: bool = False,
        *,
        dtype: Any = np.float32,
    ) -> None:
        if isinstance(value, Tensor):
            tensor = value.copy()
        else:
            tensor = Tensor.from_nested(value, dtype=dtype)
        self._node: Node = LeafNode(tensor, requires_grad)

    @classmethod
    def _from_node(cls, node: Node) -> "Variable":
        """Wrap an existing node without creating a new leaf."""
        obj = cls.__new__(cls)
        obj._node = node
        return obj

    # ----------------------------
    # Node access
    # ----------------------------
    @property
    def node(self) -> Node:
        """The graph node this handle refers to."""
        return self._node

    @property
    def value(self) -> Tensor:
        """
        Return the current value of this variable.

        Returns
        -------
        Tensor
            The node's value. Mutating it in place mutates the node.
        """
        return self._node.value

    @value.setter
    def value(self, new_value: Union[Tensor, Any]) -> None:
        """
        Overwrite the value in place.

        The existing storage is reused, so operation nodes that saved this
        value for their backward rule observe the new contents.

        Raises
        ------
        ShapeMismatchError
            If the new value has a different shape.
        """
        current = self._node.value
        if not isinstance(new_value, Tensor):
            new_value = Tensor.from_nested(new_value, dtype=current.dtype)
        if new_value.shape != current.shape:
            raise ShapeMismatchError("Variable.value", current.shape, new_value.shape)
        current.copy_from(new_value)

    @property
    def grad(self) -> Tensor:
        """
        Return the accumulated gradient.

        Returns
        -------
        Tensor
            Gradient accumulator with the shape and dtype of `value`. For
            leaves it holds the result of the latest backward passes (they
            accumulate until `zero_grad` is called).
        """
        return self._node.grad

    @property
    def requires_grad(self) -> bool:
        """
        Indicate whether this variable participates in gradient computation.

        Returns
        -------
        bool
            True if gradients flow into this variable.
        """
        return self._node.requires_grad

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None:
        """
        Enable or disable gradient accumulation on a leaf.

        Raises
        ------
        ValueError
            If this variable is the result of an operation; its flag is
            derived from its parents.
        """
        if not self.is_leaf():
            raise ValueError("requires_grad can only be changed on leaf variables")
        self._node.requires_grad = bool(value)

    @property
    def shape(self) -> tuple[int, ...]:
        return self._node.value.shape

    @property
    def dtype(self) -> np.dtype:
        return self._node.value.dtype

    def is_leaf(self) -> bool:
        """Return True if this variable wraps a leaf node."""
        return isinstance(self._node, LeafNode)

    def copy(self) -> "Variable":
        """
        Return a detached leaf holding a copy of the current value.

        The copy keeps the `requires_grad` flag but has no history and a
        fresh zero gradient.
        """
        return Variable(self._node.value, requires_grad=self._node.requires_grad)

    def zero_grad(self) -> None:
        """Reset the gradient accumulator to zero."""
        self._node.zero_grad()

    def backward(self) -> None:
        """
        Compute gradients of this scalar with respect to every ancestor that
        requires gradients.

        Raises
        ------
        RankError
            If the value is not a rank-0 tensor.

        Warns
        -----
        UserWarning
            If this variable does not require gradients; nothing is computed.
        """
        if self.value.dimension_count != 0:
            raise RankError("backward", 0, self.value.dimension_count)
        if not self.requires_grad:
            warnings.warn(
                "backward() called on a Variable that does not require gradients; "
                "no gradients were computed.",
                UserWarning,
                stacklevel=2,
            )
            return
        self._node.backward()

    def serialization_fields(self) -> tuple[Any, ...]:
        return (self._node.value,)

    def item(self) -> Number:
        """Return the value of a rank-0 variable as a Python number."""
        return self._node.value.item()

    # ----------------------------
    # Differentiable operators
    # ----------------------------
    def __add__(self, other: Any) -> "Variable":
        from ._function import add

        return add(self, other)

    def __radd__(self, other: Any) -> "Variable":
        from ._function import add

        return add(other, self)

    def __sub__(self, other: Any) -> "Variable":
        from ._function import subtract

        return subtract(self, other)

    def __rsub__(self, other: Any) -> "Variable":
        from ._function import subtract

        return subtract(other, self)

    def __mul__(self, other: Any) -> "Variable":
        from ._function import multiply

        return multiply(self, other)

    def __rmul__(self, other: Any) -> "Variable":
        from ._function import multiply

        return multiply(other, self)

    def __truediv__(self, other: Any) -> "Variable":
        from ._function import divide

        return divide(self, other)

    def __rtruediv__(self, other: Any) -> "Variable":
        from ._function import divide

        return divide(other, self)

    def __neg__(self) -> "Variable":
        from ._function import negate

        return negate(self)

    def __matmul__(self, other: Any) -> "Variable":
        from ._function import matrix_product

        return matrix_product(self, other)

    def __rmatmul__(self, other: Any) -> "Variable":
        from ._function import matrix_product

        return matrix_product(other, self)

    @property
    def T(self) -> "Variable":
        """Differentiable 2-D transpose."""
        from ._function import transpose

        return transpose(self)

    def view(self, *dims: Any) -> "Variable":
        """Differentiable reshape; one dimension may be ``-1``."""
        from ._function import view

        return view(self, *dims)

    def sum(self) -> "Variable":
        """Differentiable sum of all elements."""
        from ._function import sum as sum_

        return sum_(self)

    def log(self) -> "Variable":
        from ._function import log

        return log(self)

    def sqrt(self) -> "Variable":
        from ._function import sqrt

        return sqrt(self)

    def exp(self) -> "Variable":
        from ._function import exp

        return exp(self)

    def tanh(self) -> "Variable":
        from ._function import tanh

        return tanh(self)

    def sigmoid(self) -> "Variable":
        from ._function import sigmoid

        return sigmoid(self)

    def __repr__(self) -> str:
        kind = "leaf" if self.is_leaf() else self._node.function.__name__
        return (
            f"Variable(shape={self.shape}, dtype={self.dtype}, "
            f"requires_grad={self.requires_grad}, node={kind})"
        )
