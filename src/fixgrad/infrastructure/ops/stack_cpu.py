"""
Concatenation and splitting along one axis (CPU).

`stack_along` joins two tensors of equal rank along an existing axis and
`split_along` is its inverse. Both always return tensors with their own
storage.
"""

from __future__ import annotations

import numpy as np

from ...domain.utils._shape_inference import normalize_axis, split_shapes, stack_shape
from ..tensor._tensor import Tensor


def stack_along(a: Tensor, b: Tensor, *, axis: int = 0) -> Tensor:
    """
    Concatenate `a` and `b` along `axis`.

    Parameters
    ----------
    a, b : Tensor
        Tensors of equal rank whose shapes agree everywhere except `axis`.
    axis : int, optional
        Axis to join along; negative values count from the end.

    Returns
    -------
    Tensor
        A tensor whose `axis` dimension is ``a.shape[axis] + b.shape[axis]``,
        in the dtype of `a`.

    Raises
    ------
    RankError
        If the ranks differ.
    ShapeMismatchError
        If any other dimension differs.
    """
    stack_shape(axis, a.shape, b.shape)
    ax = normalize_axis(axis, a.dimension_count, "stack_along")
    return Tensor._from_result(np.concatenate((a.data, b.data), axis=ax), dtype=a.dtype)


def split_along(t: Tensor, split_size: int, *, axis: int = 0) -> tuple[Tensor, Tensor]:
    """
    Split `t` into two parts along `axis`.

    The first part holds the first `split_size` entries along `axis`, the
    second part holds the rest.

    Examples
    --------
    >>> t = Tensor.from_nested([[1, 2, 3], [4, 5, 6]])
    >>> a, b = split_along(t, 1, axis=1)
    >>> a.shape, b.shape
    ((2, 1), (2, 2))
    """
    split_shapes(axis, split_size, t.shape)
    ax = normalize_axis(axis, t.dimension_count, "split_along")
    first, second = np.split(t.data, [split_size], axis=ax)
    return (
        Tensor._from_result(first, dtype=t.dtype),
        Tensor._from_result(second, dtype=t.dtype),
    )
