"""
Per-feature bias addition (CPU).

The bias has one entry per feature, where the feature axis is axis 1 of the
input (``(batch, features, ...)``). Every trailing position receives the bias
of its feature, which covers both dense layers ``(N, F)`` and channel-first
activations ``(N, C, H, W)``.
"""

from __future__ import annotations

import numpy as np

from ...domain._errors import RankError, ShapeMismatchError
from ..tensor._tensor import Tensor


def _check(t: Tensor, bias: Tensor) -> None:
    if t.dimension_count < 2:
        raise RankError("add_bias", ">= 2", t.dimension_count)
    if bias.shape != (t.shape[1],):
        raise ShapeMismatchError("add_bias", t.shape, bias.shape)


def add_bias(t: Tensor, bias: Tensor) -> Tensor:
    """
    Return ``t`` with ``bias[f]`` added to every element of feature ``f``.

    Parameters
    ----------
    t : Tensor
        Input of shape (N, F, ...).
    bias : Tensor
        Bias of shape (F,).

    Returns
    -------
    Tensor
        New tensor of ``t``'s shape and dtype.
    """
    _check(t, bias)
    b = bias.data.reshape((1, t.shape[1]) + (1,) * (t.dimension_count - 2))
    with np.errstate(all="ignore"):
        return Tensor._from_result(t.data + b, dtype=t.dtype)


def bias_grad(grad_out: Tensor) -> Tensor:
    """
    Reduce an upstream gradient of shape (N, F, ...) to the bias shape (F,).

    Sums trailing positions within each (sample, feature) pair, then sums
    over the batch.
    """
    if grad_out.dimension_count < 2:
        raise RankError("bias_grad", ">= 2", grad_out.dimension_count)
    return grad_out.sum(rank=2).T.sum(rank=1)
