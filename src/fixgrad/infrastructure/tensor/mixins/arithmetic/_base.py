"""
Arithmetic mixin implementing elementwise Tensor arithmetic.

This module defines :class:`TensorMixinArithmetic`, which provides the
elementwise binary operators (``+``, ``-``, ``*``, ``/``), their reflected
and in-place forms, unary negation, and the ``@`` matrix product.

Semantics
---------
- Tensor-tensor operands must have exactly the same shape; there is no
  general broadcasting.
- A Python (or NumPy) scalar operand is broadcast to every element, on either
  side of the operator. The scalar is first converted to the tensor's dtype.
- The result has the dtype of the tensor operand on the left (or of the only
  tensor operand when the scalar is on the left).
- Division of integral tensors truncates toward zero.
- Floating-point domain errors (division by zero, overflow) produce IEEE
  values without raising or warning.
- In-place operators write into the existing storage, so every view sharing
  that storage observes the update.
"""

from abc import ABC
from typing import Any, Callable, Union

import numpy as np

from .....domain._errors import ShapeMismatchError
from .....domain._tensor import ITensor

Number = Union[int, float, bool]
"""Scalar types accepted by Tensor arithmetic operators."""

_SCALAR_TYPES = (int, float, bool, np.number, np.bool_)


class TensorMixinArithmetic(ABC):
    """
    Mixin providing elementwise arithmetic operators for Tensor.

    Notes
    -----
    Operators return ``NotImplemented`` for operand types they do not
    recognize, so that Python can try the reflected operator of the other
    operand (this is how ``tensor + variable`` reaches the autograd layer).
    """

    # ----------------------------
    # Operand handling
    # ----------------------------
    def _coerce_operand(self, other: Any, op: str) -> Any:
        """
        Convert the right-hand operand of a binary op into a NumPy operand.

        Returns
        -------
        numpy.ndarray or numpy scalar or NotImplemented
            The other tensor's storage (after an exact shape check), the
            scalar converted to this tensor's dtype, or ``NotImplemented``.

        Raises
        ------
        ShapeMismatchError
            If `other` is a tensor of a different shape.
        """
        if isinstance(other, type(self)):
            if self.shape != other.shape:
                raise ShapeMismatchError(op, self.shape, other.shape)
            return other.data
        if isinstance(other, _SCALAR_TYPES):
            with np.errstate(all="ignore"):
                return np.asarray(other).astype(self.dtype)
        return NotImplemented

    def _is_integral(self) -> bool:
        return self.dtype.kind in "biu"

    def _binary(
        self,
        other: Any,
        op: str,
        ufunc: Callable[..., Any],
        reflected: bool = False,
    ) -> "ITensor":
        """
        Evaluate ``ufunc`` elementwise and wrap the result as a new tensor.

        The result is always cast back to ``self.dtype``.
        """
        rhs = self._coerce_operand(other, op)
        if rhs is NotImplemented:
            return NotImplemented
        lhs, rhs = (rhs, self.data) if reflected else (self.data, rhs)
        with np.errstate(all="ignore"):
            if ufunc is np.true_divide and self._is_integral():
                out = np.trunc(np.true_divide(lhs, rhs))
            else:
                out = ufunc(lhs, rhs)
            return self._from_result(out, dtype=self.dtype)

    def _inplace(self, other: Any, op: str, ufunc: Callable[..., Any]) -> "ITensor":
        """
        Evaluate ``ufunc`` elementwise, writing into this tensor's storage.

        Returns
        -------
        ITensor
            ``self``.
        """
        rhs = self._coerce_operand(other, op)
        if rhs is NotImplemented:
            return NotImplemented
        data = self.data
        with np.errstate(all="ignore"):
            if ufunc is np.true_divide and self._is_integral():
                np.copyto(data, np.trunc(np.true_divide(data, rhs)), casting="unsafe")
            else:
                ufunc(data, rhs, out=data, casting="unsafe")
        return self

    # ----------------------------
    # Binary operators
    # ----------------------------
    def __add__(self, other: Union["ITensor", Number]) -> "ITensor":
        """
        Elementwise addition.

        Parameters
        ----------
        other : Union[ITensor, Number]
            A tensor of identical shape, or a scalar.

        Returns
        -------
        ITensor
            A new tensor containing ``self + other``.
        """
        return self._binary(other, "add", np.add)

    def __radd__(self, other: Number) -> "ITensor":
        return self._binary(other, "add", np.add, reflected=True)

    def __sub__(self, other: Union["ITensor", Number]) -> "ITensor":
        """
        Elementwise subtraction.

        Returns
        -------
        ITensor
            A new tensor containing ``self - other``.
        """
        return self._binary(other, "subtract", np.subtract)

    def __rsub__(self, other: Number) -> "ITensor":
        return self._binary(other, "subtract", np.subtract, reflected=True)

    def __mul__(self, other: Union["ITensor", Number]) -> "ITensor":
        """
        Elementwise (Hadamard) multiplication.

        Returns
        -------
        ITensor
            A new tensor containing ``self * other``.
        """
        return self._binary(other, "multiply", np.multiply)

    def __rmul__(self, other: Number) -> "ITensor":
        return self._binary(other, "multiply", np.multiply, reflected=True)

    def __truediv__(self, other: Union["ITensor", Number]) -> "ITensor":
        """
        Elementwise division.

        Returns
        -------
        ITensor
            A new tensor containing ``self / other``.

        Notes
        -----
        Integral tensors divide with truncation toward zero. Division by zero
        follows IEEE semantics for floating-point tensors.
        """
        return self._binary(other, "divide", np.true_divide)

    def __rtruediv__(self, other: Number) -> "ITensor":
        return self._binary(other, "divide", np.true_divide, reflected=True)

    def __neg__(self) -> "ITensor":
        """Elementwise negation, equivalent to multiplying by -1."""
        with np.errstate(all="ignore"):
            return self._from_result(np.negative(self.data), dtype=self.dtype)

    # ----------------------------
    # In-place operators
    # ----------------------------
    def __iadd__(self, other: Union["ITensor", Number]) -> "ITensor":
        return self._inplace(other, "add", np.add)

    def __isub__(self, other: Union["ITensor", Number]) -> "ITensor":
        return self._inplace(other, "subtract", np.subtract)

    def __imul__(self, other: Union["ITensor", Number]) -> "ITensor":
        return self._inplace(other, "multiply", np.multiply)

    def __itruediv__(self, other: Union["ITensor", Number]) -> "ITensor":
        return self._inplace(other, "divide", np.true_divide)

    # ----------------------------
    # Matrix product
    # ----------------------------
    def __matmul__(self, other: "ITensor") -> "ITensor":
        """
        Generalized matrix product, see
        :func:`fixgrad.infrastructure.ops.matmul_cpu.matrix_product`.
        """
        if not isinstance(other, type(self)):
            return NotImplemented
        from ....ops.matmul_cpu import matrix_product

        return matrix_product(self, other)
