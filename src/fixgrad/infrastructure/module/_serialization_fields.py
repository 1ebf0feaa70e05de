"""
Field-by-field walk over persistable objects.

A persistable object exposes ``serialization_fields()``, an ordered tuple of
its fields. Fields are tensors, variables (which contribute their value),
nested persistable objects, or numeric primitives. The two walkers below are
the whole persistence-facing surface of the library: a file format only has
to store the flat list produced by `dump_fields` and hand it back to
`load_fields` in the same order.

Notes
-----
- Loading copies into the existing tensors in place, so every alias of a
  restored tensor (views, saved references in a graph) observes the loaded
  values.
- Numeric primitive fields can be dumped but not loaded: Python numbers are
  immutable, so an object that needs a restorable scalar should expose it as
  a rank-0 tensor.
"""

from __future__ import annotations

from typing import Any, Iterator, Sequence

import numpy as np

from ...domain._errors import ShapeMismatchError
from ...domain._serialization import ISerializable
from .._variable import Variable
from ..tensor import Tensor

_SCALAR_TYPES = (int, float, bool, np.number, np.bool_)


def _leaves(obj: Any) -> Iterator[Any]:
    """Yield the tensors and numeric primitives of `obj`, depth-first in order."""
    if isinstance(obj, Tensor) or isinstance(obj, _SCALAR_TYPES):
        yield obj
    elif isinstance(obj, Variable):
        yield obj.value
    elif isinstance(obj, ISerializable):
        for field in obj.serialization_fields():
            yield from _leaves(field)
    else:
        raise TypeError(f"Cannot serialize field of type {type(obj).__name__}")


def dump_fields(obj: Any) -> list[Any]:
    """
    Flatten a persistable object into an ordered list of values.

    Parameters
    ----------
    obj : ISerializable or Tensor or Variable
        Root object to walk.

    Returns
    -------
    list
        One entry per leaf field: a NumPy array copy for every tensor (or
        variable value), the number itself for numeric primitives.

    Raises
    ------
    TypeError
        If a field is neither a tensor, a variable, a number nor a
        persistable object.
    """
    out: list[Any] = []
    for leaf in _leaves(obj):
        if isinstance(leaf, Tensor):
            out.append(leaf.to_numpy())
        else:
            out.append(leaf)
    return out


def load_fields(obj: Any, values: Sequence[Any]) -> None:
    """
    Restore a persistable object from the list produced by `dump_fields`.

    Parameters
    ----------
    obj : ISerializable or Tensor or Variable
        Root object to walk; its tensors are overwritten in place.
    values : Sequence
        Values in `dump_fields` order (NumPy arrays or array-likes).

    Raises
    ------
    ValueError
        If the number of values differs from the number of leaf fields.
    ShapeMismatchError
        If a value's shape differs from its tensor's shape.
    TypeError
        If the walk reaches a numeric primitive field, which cannot be
        restored in place.
    """
    leaves = list(_leaves(obj))
    if len(leaves) != len(values):
        raise ValueError(
            f"load_fields: expected {len(leaves)} values, got {len(values)}"
        )
    arrays = []
    for i, (leaf, value) in enumerate(zip(leaves, values)):
        if not isinstance(leaf, Tensor):
            raise TypeError(
                f"load_fields: field {i} is an immutable {type(leaf).__name__}; "
                "expose restorable scalars as rank-0 tensors"
            )
        arr = np.asarray(value)
        if arr.shape != leaf.shape:
            raise ShapeMismatchError("load_fields", leaf.shape, arr.shape)
        arrays.append(arr)

    # Nothing is written until every field has been validated.
    for leaf, arr in zip(leaves, arrays):
        leaf.copy_from_numpy(arr)
