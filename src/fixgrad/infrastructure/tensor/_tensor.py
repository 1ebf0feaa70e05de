"""
Concrete fixed-shape Tensor implementation (NumPy backend).

This module provides the concrete `Tensor` that satisfies the domain-level
`ITensor` protocol. A tensor owns (or, for views, aliases) a C-contiguous
NumPy array whose shape and dtype never change after construction.

Design notes
------------
- Storage is always row-major and contiguous, so any tensor can be
  reinterpreted as another shape of equal element count without copying
  (see `view`).
- Arithmetic results are new tensors (value semantics). In-place operators
  and `fill_with` write into existing storage, which is what makes views and
  gradient accumulators observable through every alias.
- Broadcasting is intentionally not implemented; binary ops require exact
  shape matches, and the only broadcast is tensor-with-scalar.
- Operation families live in mixins (`mixins/`), mirroring how the class is
  documented: arithmetic, comparison, unary math, reductions, memory.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional, Union

import numpy as np

from ...domain._tensor import ITensor
from ...domain._errors import ElementCountMismatchError, RankError
from ...domain.utils._shape_inference import ShapeLike, normalize_shape, numel

from .mixins.arithmetic import TensorMixinArithmetic
from .mixins.comparison import TensorMixinComparison
from .mixins.memory import TensorMixinMemory
from .mixins.reduction import TensorMixinReduction
from .mixins.unary import TensorMixinUnary

Number = Union[int, float, bool]
IndexKey = Union[int, tuple[int, ...]]


class Tensor(
    TensorMixinArithmetic,
    TensorMixinComparison,
    TensorMixinUnary,
    TensorMixinReduction,
    TensorMixinMemory,
    ITensor,
):
    """
    Fixed-shape multidimensional numeric array.

    Parameters
    ----------
    shape : int or Iterable[int]
        Tensor shape. The empty shape ``()`` denotes a scalar.
    fill : Number, optional
        Value every element is initialized to. Defaults to 0.
    dtype : np.dtype, optional
        Element dtype. Defaults to np.float32.

    Notes
    -----
    - `_data` is a C-contiguous NumPy ndarray of dtype `self.dtype`.
    - Indexing with an integer (or a tuple of integers) returns a sub-tensor
      that aliases this tensor's storage.
    - Use `from_nested`, `from_iterable` or `from_numpy` to construct from
      existing values.
    """

    __hash__ = None
    __array_ufunc__ = None

    def __init__(
        self,
        shape: ShapeLike,
        fill: Number = 0,
        *,
        dtype: Any = np.float32,
    ) -> None:
        """
        Construct a tensor of the given shape filled with `fill`.

        Parameters
        ----------
        shape : int or Iterable[int]
            Shape of the tensor.
        fill : Number, optional
            Initial value of every element.
        dtype : np.dtype, optional
            Element dtype for this tensor. Defaults to np.float32.
        """
        self._data: np.ndarray = np.full(
            normalize_shape(shape), fill, dtype=np.dtype(dtype)
        )

    # ----------------------------
    # Construction
    # ----------------------------
    @classmethod
    def _from_array(cls, arr: np.ndarray) -> "Tensor":
        """
        Wrap an existing C-contiguous ndarray without copying.

        This is the internal hook used for views and for results that were
        already freshly allocated.
        """
        obj = cls.__new__(cls)  # bypass __init__
        obj._data = arr
        return obj

    @classmethod
    def _from_result(cls, result: Any, dtype: Any = None) -> "Tensor":
        """Own a freshly computed NumPy result as a contiguous tensor."""
        return cls._from_array(np.array(result, dtype=dtype, order="C"))

    @classmethod
    def from_nested(cls, data: Any, *, dtype: Any = None) -> "Tensor":
        """
        Construct a tensor from a nested initializer.

        Parameters
        ----------
        data : Any
            Nested lists/tuples of numbers, a NumPy array, a Tensor, or a
            single number (which yields a rank-0 tensor).
        dtype : np.dtype, optional
            Element dtype. If omitted, it is inferred the way NumPy infers it.

        Raises
        ------
        ValueError
            If the nesting is ragged.
        TypeError
            If the values are not numeric.
        """
        arr = np.array(data, dtype=dtype, order="C")
        if arr.dtype.kind not in "biuf":
            raise TypeError(f"Tensor elements must be numeric, got dtype {arr.dtype}")
        return cls._from_array(arr)

    @classmethod
    def from_iterable(
        cls, shape: ShapeLike, values: Iterable[Number], *, dtype: Any = np.float32
    ) -> "Tensor":
        """
        Construct a tensor from a flat iterable of exactly `numel(shape)` values.

        Values are consumed in row-major order.

        Raises
        ------
        ElementCountMismatchError
            If the iterable does not yield exactly the required number of
            elements.
        """
        dims = normalize_shape(shape)
        flat = np.fromiter(values, dtype=np.dtype(dtype))
        if flat.size != numel(dims):
            raise ElementCountMismatchError("from_iterable", numel(dims), flat.size)
        return cls._from_array(flat.reshape(dims))

    @classmethod
    def from_numpy(cls, arr: Any, *, dtype: Any = None) -> "Tensor":
        """
        Construct a tensor holding a copy of a NumPy array.

        Parameters
        ----------
        arr : array_like
            Source values.
        dtype : np.dtype, optional
            Element dtype. Defaults to the source dtype.
        """
        return cls.from_nested(np.asarray(arr), dtype=dtype)

    @classmethod
    def zeros(cls, shape: ShapeLike, *, dtype: Any = np.float32) -> "Tensor":
        """Construct a tensor filled with zeros."""
        return cls(shape, 0, dtype=dtype)

    @classmethod
    def ones(cls, shape: ShapeLike, *, dtype: Any = np.float32) -> "Tensor":
        """Construct a tensor filled with ones."""
        return cls(shape, 1, dtype=dtype)

    @classmethod
    def full(cls, shape: ShapeLike, fill: Number, *, dtype: Any = np.float32) -> "Tensor":
        """Construct a tensor filled with `fill`."""
        return cls(shape, fill, dtype=dtype)

    @classmethod
    def zeros_like(cls, other: "Tensor") -> "Tensor":
        """Construct a zero tensor with the shape and dtype of `other`."""
        return cls(other.shape, 0, dtype=other.dtype)

    # ----------------------------
    # Shape and element type queries
    # ----------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the tensor shape.

        Returns
        -------
        tuple[int, ...]
            The tensor's shape.
        """
        return self._data.shape

    @property
    def dimensions(self) -> tuple[int, ...]:
        """Alias of `shape`."""
        return self._data.shape

    @property
    def dimension_count(self) -> int:
        """Return the rank of the tensor (0 for scalars)."""
        return self._data.ndim

    @property
    def dtype(self) -> np.dtype:
        """
        Return the element dtype of this tensor.

        Returns
        -------
        np.dtype
            NumPy dtype representing the tensor element type.
        """
        return self._data.dtype

    @property
    def data(self) -> np.ndarray:
        """
        Return the underlying storage for this tensor.

        Returns
        -------
        numpy.ndarray
            The contiguous ndarray backing the tensor. Writing into it writes
            into the tensor (and into every view sharing the storage).
        """
        return self._data

    def size(self) -> int:
        """
        Return the length of the first dimension.

        Raises
        ------
        RankError
            If the tensor is a scalar.
        """
        if self._data.ndim == 0:
            raise RankError("size", ">= 1", 0)
        return self._data.shape[0]

    def numel(self) -> int:
        """
        Return the total number of elements in the tensor.

        Returns
        -------
        int
            Product of all dimensions in the tensor shape.
        """
        return numel(self._data.shape)

    # ----------------------------
    # Element access
    # ----------------------------
    def _normalize_key(self, key: IndexKey) -> tuple[int, ...]:
        """Validate an integer index (or tuple of integer indices)."""
        idx = key if isinstance(key, tuple) else (key,)
        if len(idx) > self._data.ndim:
            raise IndexError(
                f"too many indices: {len(idx)} for tensor of rank {self._data.ndim}"
            )
        out = []
        for axis, i in enumerate(idx):
            if isinstance(i, (bool, np.bool_)) or not isinstance(i, (int, np.integer)):
                raise TypeError(f"Tensor indices must be integers, got {i!r}")
            if not 0 <= i < self._data.shape[axis]:
                raise IndexError(
                    f"index {i} is out of bounds for axis {axis} "
                    f"with size {self._data.shape[axis]}"
                )
            out.append(int(i))
        return tuple(out)

    def __getitem__(self, key: IndexKey) -> "Tensor":
        """
        Return the sub-tensor at `key`, aliasing this tensor's storage.

        Indexing all the way down yields a rank-0 tensor; use `item()` (or
        `float(...)`/`int(...)`) to obtain the Python number.
        """
        idx = self._normalize_key(key)
        return type(self)._from_array(self._data[idx + (Ellipsis,)])

    def __setitem__(self, key: IndexKey, value: Union["Tensor", Number]) -> None:
        """
        Assign into the sub-tensor at `key`.

        A tensor value must match the sub-tensor shape exactly; a number fills
        the whole sub-tensor.
        """
        self[key].assign(value)

    def __iter__(self) -> Iterator["Tensor"]:
        """Iterate over the sub-tensors along the first dimension."""
        for i in range(self.size()):
            yield self[i]

    def __len__(self) -> int:
        """Return the length of the first dimension."""
        if self._data.ndim == 0:
            raise TypeError("len() of a rank-0 tensor")
        return self._data.shape[0]

    def item(self) -> Number:
        """
        Return the single element of a rank-0 tensor as a Python number.

        Raises
        ------
        RankError
            If the tensor is not a scalar.
        """
        if self._data.ndim != 0:
            raise RankError("item", 0, self._data.ndim)
        return self._data.item()

    def __float__(self) -> float:
        return float(self.item())

    def __int__(self) -> int:
        return int(self.item())

    def __bool__(self) -> bool:
        if self._data.ndim != 0:
            raise ValueError(
                "The truth value of a non-scalar tensor is ambiguous; use all_of()."
            )
        return bool(self._data)

    def __array__(self, dtype: Any = None, copy: Optional[bool] = None) -> np.ndarray:
        """Expose the storage to NumPy (`np.asarray(tensor)`)."""
        if copy:
            return np.array(self._data, dtype=dtype, copy=True)
        return np.asarray(self._data, dtype=dtype)

    def __repr__(self) -> str:
        """
        Return a human-readable string representation of the tensor.

        Returns
        -------
        str
            A string describing the tensor's shape, dtype, and values.
        """
        return (
            f"Tensor(shape={self.shape}, dtype={self.dtype}, "
            f"data={self._data.tolist()})"
        )
