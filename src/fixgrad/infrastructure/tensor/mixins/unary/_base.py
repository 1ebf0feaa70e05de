"""
Unary operation mixin implementing elementwise Tensor math.

This module defines :class:`TensorMixinUnary`, which provides ``log``,
``sqrt``, ``abs``, ``exp``, ``tanh``, ``sigmoid`` and ``sign``.

All functions are computed with NumPy and return a new tensor of the same
shape. The result dtype is the one NumPy produces for the input dtype (e.g.
``float32 -> float32``, integral inputs promote to floating point except for
``abs`` and ``sign``). Domain errors produce NaN or infinities silently.
"""

from abc import ABC
from typing import Any, Callable

import numpy as np

from .....domain._tensor import ITensor


def _sigmoid(x: np.ndarray) -> np.ndarray:
    return 1.0 / (1.0 + np.exp(-x))


class TensorMixinUnary(ABC):
    """
    Mixin providing elementwise unary math for Tensor.

    Notes
    -----
    These are value-level operations with no gradient tracking. The
    differentiable counterparts live on `Variable`.
    """

    def _unary(self, fn: Callable[[np.ndarray], Any]) -> "ITensor":
        with np.errstate(all="ignore"):
            return self._from_result(fn(self.data))

    def log(self) -> "ITensor":
        """
        Compute the elementwise natural logarithm.

        Returns
        -------
        ITensor
            ``log(self)``; zero maps to ``-inf`` and negatives to NaN.
        """
        return self._unary(np.log)

    def sqrt(self) -> "ITensor":
        """
        Compute the elementwise square root.

        Returns
        -------
        ITensor
            ``sqrt(self)``; negatives map to NaN.
        """
        return self._unary(np.sqrt)

    def abs(self) -> "ITensor":
        """Compute the elementwise absolute value."""
        return self._unary(np.abs)

    def __abs__(self) -> "ITensor":
        return self.abs()

    def exp(self) -> "ITensor":
        """
        Compute the elementwise exponential.

        Notes
        -----
        Backward rule (see ``Variable.exp``):
            ``d(exp(x)) / dx = exp(x)``
        """
        return self._unary(np.exp)

    def tanh(self) -> "ITensor":
        """Compute the elementwise hyperbolic tangent."""
        return self._unary(np.tanh)

    def sigmoid(self) -> "ITensor":
        """
        Compute the elementwise logistic sigmoid ``1 / (1 + exp(-x))``.

        Large negative inputs saturate to 0 without raising overflow errors.
        """
        return self._unary(_sigmoid)

    def sign(self) -> "ITensor":
        """Compute the elementwise sign (-1, 0 or 1), keeping the dtype."""
        return self._unary(np.sign)
