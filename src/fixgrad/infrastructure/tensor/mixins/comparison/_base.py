"""
Comparison mixin for Tensor.

Defines :class:`TensorMixinComparison`, which provides:

- elementwise ordering comparisons (``<``, ``>``, ``<=``, ``>=``) that return
  boolean tensors of the operand shape;
- logical combinators on boolean tensors (``~``, ``&``, ``|``);
- whole-tensor equality (``==``/``!=``), which returns a Python ``bool``.

Comparisons never participate in autograd.
"""

from abc import ABC
from typing import Any, Callable, Union

import numpy as np

from .....domain._errors import ShapeMismatchError
from .....domain._tensor import ITensor

Number = Union[int, float, bool]

_SCALAR_TYPES = (int, float, bool, np.number, np.bool_)


class TensorMixinComparison(ABC):
    """
    Mixin providing comparison and logical operators for Tensor.
    """

    def _compare(self, other: Any, op: str, ufunc: Callable[..., Any]) -> "ITensor":
        """
        Apply a boolean-valued ufunc against a same-shape tensor or a scalar.

        Returns
        -------
        ITensor
            A bool tensor of shape ``self.shape``, or ``NotImplemented``.
        """
        if isinstance(other, type(self)):
            if self.shape != other.shape:
                raise ShapeMismatchError(op, self.shape, other.shape)
            rhs = other.data
        elif isinstance(other, _SCALAR_TYPES):
            rhs = other
        else:
            return NotImplemented
        with np.errstate(invalid="ignore"):
            return self._from_result(ufunc(self.data, rhs), dtype=np.bool_)

    def __lt__(self, other: Union["ITensor", Number]) -> "ITensor":
        """
        Elementwise less-than comparison.

        Returns
        -------
        ITensor
            A bool tensor with ``True`` where ``self < other``.
        """
        return self._compare(other, "lt", np.less)

    def __gt__(self, other: Union["ITensor", Number]) -> "ITensor":
        """
        Elementwise greater-than comparison.

        Returns
        -------
        ITensor
            A bool tensor with ``True`` where ``self > other``.
        """
        return self._compare(other, "gt", np.greater)

    def __le__(self, other: Union["ITensor", Number]) -> "ITensor":
        return self._compare(other, "le", np.less_equal)

    def __ge__(self, other: Union["ITensor", Number]) -> "ITensor":
        return self._compare(other, "ge", np.greater_equal)

    # ----------------------------
    # Logical combinators
    # ----------------------------
    def __invert__(self) -> "ITensor":
        """Elementwise logical NOT (non-zero elements count as ``True``)."""
        return self._from_result(np.logical_not(self.data), dtype=np.bool_)

    def __and__(self, other: Union["ITensor", bool]) -> "ITensor":
        """Elementwise logical AND."""
        return self._compare(other, "and", np.logical_and)

    def __rand__(self, other: bool) -> "ITensor":
        return self._compare(other, "and", np.logical_and)

    def __or__(self, other: Union["ITensor", bool]) -> "ITensor":
        """Elementwise logical OR."""
        return self._compare(other, "or", np.logical_or)

    def __ror__(self, other: bool) -> "ITensor":
        return self._compare(other, "or", np.logical_or)

    # ----------------------------
    # Whole-tensor equality
    # ----------------------------
    def __eq__(self, other: Any) -> bool:
        """
        Return True if both tensors have the same shape and equal elements.

        A rank-0 tensor also compares equal to a number holding its value.
        Tensors of different dtypes compare by value.
        """
        if isinstance(other, type(self)):
            return self.shape == other.shape and bool(
                np.array_equal(self.data, other.data)
            )
        if isinstance(other, _SCALAR_TYPES) and self.dimension_count == 0:
            return bool(self.data == other)
        return NotImplemented

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result
