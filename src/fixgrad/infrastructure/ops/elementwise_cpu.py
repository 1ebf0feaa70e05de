"""
Free-function forms of elementwise tensor math and logic.

These mirror the methods on `Tensor` for code that reads better in
functional style (``log(x)`` rather than ``x.log()``), and add the
whole-tensor predicates `all_of` and `all_close`.
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

from ...domain.utils._shape_inference import assert_same_shape
from ..tensor._tensor import Tensor

Number = Union[int, float, bool]


def log(t: Tensor) -> Tensor:
    """Elementwise natural logarithm."""
    return t.log()


def sqrt(t: Tensor) -> Tensor:
    """Elementwise square root."""
    return t.sqrt()


def absolute(t: Tensor) -> Tensor:
    """Elementwise absolute value."""
    return t.abs()


def exp(t: Tensor) -> Tensor:
    """Elementwise exponential."""
    return t.exp()


def tanh(t: Tensor) -> Tensor:
    """Elementwise hyperbolic tangent."""
    return t.tanh()


def sigmoid(t: Tensor) -> Tensor:
    """Elementwise logistic sigmoid."""
    return t.sigmoid()


def sign(t: Tensor) -> Tensor:
    """Elementwise sign."""
    return t.sign()


def sum_all(t: Tensor, rank: Optional[int] = None) -> Tensor:
    """Sum over trailing dimensions, see `Tensor.sum`."""
    return t.sum(rank=rank)


def logical_not(t: Tensor) -> Tensor:
    return ~t


def logical_and(a: Tensor, b: Union[Tensor, bool]) -> Tensor:
    return a & b


def logical_or(a: Tensor, b: Union[Tensor, bool]) -> Tensor:
    return a | b


def all_of(t: Tensor) -> bool:
    """
    Return True if every element of `t` is truthy.

    An empty tensor yields True.
    """
    return bool(np.all(t.data))


def all_close(a: Tensor, b: Tensor, eps: float = 1e-6) -> bool:
    """
    Return True if ``|a - b| <= eps`` holds elementwise.

    Parameters
    ----------
    a, b : Tensor
        Tensors of identical shape.
    eps : float, optional
        Absolute tolerance. Defaults to 1e-6.

    Returns
    -------
    bool
        False as soon as any difference exceeds `eps` or is NaN.

    Raises
    ------
    ShapeMismatchError
        If the shapes differ.
    """
    assert_same_shape("all_close", a.shape, b.shape)
    with np.errstate(all="ignore"):
        diff = np.abs(a.data.astype(np.float64) - b.data.astype(np.float64))
    return bool(np.all(diff <= eps))
