"""
CPU implementations of the generalized matrix product (NumPy backend).

The generalized product contracts the last axis of the left operand with the
first axis of the right operand, so it covers every case of the classic
``A x B`` family with a single rule:

- matrix  x matrix : (m, k) x (k, n)    -> (m, n)
- tensor  x vector : (a, b, k) x (k,)   -> (a, b)
- vector  x matrix : (k,) x (k, n)      -> (n,)
- vector  x vector : (k,) x (k,)        -> ()

Both functions accept an optional `out` tensor. When given, the product is
*accumulated* into `out` (``out += product``) and `out` is returned; this is
how backward rules add into gradient accumulators without a temporary tensor
surviving the call.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ...domain.utils._shape_inference import (
    assert_same_shape,
    matrix_product_shape,
    matrix_product_transposed_shape,
)
from ..tensor._tensor import Tensor


def _finish(op: str, product: np.ndarray, like: Tensor, out: Optional[Tensor]) -> Tensor:
    if out is None:
        with np.errstate(all="ignore"):
            return Tensor._from_result(product, dtype=like.dtype)
    assert_same_shape(op, out.shape, np.shape(product))
    with np.errstate(all="ignore"):
        np.add(out.data, product, out=out.data, casting="unsafe")
    return out


def matrix_product(a: Tensor, b: Tensor, out: Optional[Tensor] = None) -> Tensor:
    """
    Contract the last axis of `a` with the first axis of `b`.

    Parameters
    ----------
    a : Tensor
        Left operand of rank >= 1.
    b : Tensor
        Right operand of rank >= 1. ``b.shape[0]`` must equal ``a.shape[-1]``.
    out : Optional[Tensor], optional
        Accumulation target of the result shape.

    Returns
    -------
    Tensor
        Result of shape ``a.shape[:-1] + b.shape[1:]``, in the dtype of `a`.
        If `out` was given, `out` itself after accumulation.

    Raises
    ------
    ShapeMismatchError
        If the contracted dimensions differ, or `out` has the wrong shape.
    RankError
        If either operand is a scalar.
    """
    matrix_product_shape(a.shape, b.shape)
    with np.errstate(all="ignore"):
        product = np.tensordot(a.data, b.data, axes=1)
    return _finish("matrix_product", product, a, out)


def matrix_product_transposed(
    a: Tensor, b_t: Tensor, out: Optional[Tensor] = None
) -> Tensor:
    """
    Compute ``a @ b_t.T`` for two matrices without materializing the transpose.

    Parameters
    ----------
    a : Tensor
        Matrix of shape (m, k).
    b_t : Tensor
        Matrix of shape (n, k), i.e. the transpose of the right factor.
    out : Optional[Tensor], optional
        Accumulation target of shape (m, n).

    Returns
    -------
    Tensor
        Result of shape (m, n), or `out` after accumulation.
    """
    matrix_product_transposed_shape(a.shape, b_t.shape)
    with np.errstate(all="ignore"):
        product = np.einsum("ik,jk->ij", a.data, b_t.data)
    return _finish("matrix_product_transposed", product, a, out)
