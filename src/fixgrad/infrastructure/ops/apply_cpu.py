"""
Per-sub-tensor function application (CPU).

`apply_function` loops over the leading dimensions of its first argument and
calls a user function once per position, passing the trailing sub-tensors of
every argument at that position. It is the building block for operations
that have no dedicated kernel (per-row normalization, masking, ...).

Calling convention
------------------
For ``apply_function(rank_to_keep, fn, x, y, ...)``:

- the loop runs over ``x.shape[:x.rank - rank_to_keep]`` (the *leading* shape);
- every other argument must start with the same leading shape;
- at each position, each argument contributes its remaining sub-tensor, which
  aliases that argument's storage. When nothing remains (the argument's
  rank equals the leading rank), the element is passed as a NumPy scalar;
- results may be tensors or numbers; all results must share one shape, and
  they are assembled into a tensor of shape ``leading + result shape``.
"""

from __future__ import annotations

from typing import Any, Callable, Union

import numpy as np

from ...domain._errors import ShapeMismatchError
from ...domain.utils._shape_inference import leading_shape
from ..tensor._tensor import Tensor


def _sub(t: Tensor, idx: tuple[int, ...]) -> Union[Tensor, np.generic]:
    if len(idx) == t.dimension_count:
        return t.data[idx]
    if not idx:
        return t
    return t[idx]


def _zero_sub(t: Tensor, lead_rank: int) -> Union[Tensor, np.generic]:
    trailing = t.shape[lead_rank:]
    if not trailing:
        return t.dtype.type(0)
    return Tensor.zeros(trailing, dtype=t.dtype)


def _as_array(result: Any) -> np.ndarray:
    if isinstance(result, Tensor):
        return result.data
    return np.asarray(result)


def apply_function(rank_to_keep: int, function: Callable[..., Any], *tensors: Tensor) -> Tensor:
    """
    Apply `function` to each trailing sub-tensor of rank `rank_to_keep`.

    Parameters
    ----------
    rank_to_keep : int
        Rank of the sub-tensors of the first argument handed to `function`.
        ``0`` visits every element; the first argument's rank hands the
        whole tensor to a single call.
    function : Callable
        Called as ``function(*subs)`` once per leading position.
    *tensors : Tensor
        At least one tensor. Others must share the leading shape.

    Returns
    -------
    Tensor
        Results assembled row-major into shape ``leading + result.shape``.

    Raises
    ------
    ShapeMismatchError
        If leading shapes differ or results have inconsistent shapes.
    RankError
        If `rank_to_keep` exceeds the rank of the first tensor.

    Examples
    --------
    >>> t = Tensor.from_nested([[1, 2], [3, 4]])
    >>> apply_function(1, lambda row: row.sum(), t).to_numpy().tolist()
    [3, 7]
    """
    lead = leading_shape(rank_to_keep, [t.shape for t in tensors])

    results = []
    for idx in np.ndindex(*lead):
        results.append(_as_array(function(*(_sub(t, idx) for t in tensors))))

    if not results:
        # Empty leading shape: call once on zero-filled trailing slices so the
        # result shape is still ``lead + inner``.
        sample = _as_array(function(*(_zero_sub(t, len(lead)) for t in tensors)))
        return Tensor.zeros(lead + sample.shape, dtype=sample.dtype)

    inner = results[0].shape
    for r in results[1:]:
        if r.shape != inner:
            raise ShapeMismatchError(
                "apply_function", inner, r.shape, detail="results differ in shape"
            )
    return Tensor._from_result(np.stack(results).reshape(lead + inner))


def apply_function_inplace(
    rank_to_keep: int, function: Callable[[Any], Any], tensor: Tensor
) -> Tensor:
    """
    Replace each trailing sub-tensor of `tensor` by ``function(sub)``.

    Each result must have the shape of the sub-tensor it replaces (or be a
    number, which fills it). Values are converted to the tensor's dtype.

    Returns
    -------
    Tensor
        `tensor` itself.
    """
    lead = leading_shape(rank_to_keep, [tensor.shape])
    data = tensor.data
    for idx in np.ndindex(*lead):
        result = _as_array(function(_sub(tensor, idx)))
        target_shape = tensor.shape[len(idx):]
        if result.shape not in (target_shape, ()):
            raise ShapeMismatchError("apply_function_inplace", target_shape, result.shape)
        with np.errstate(all="ignore"):
            data[idx] = result
    return tensor
