"""
Memory and layout mixin for Tensor.

Defines :class:`TensorMixinMemory`, which groups the operations that move
data into and out of a tensor or reinterpret its layout:

- in-place filling and assignment (`fill_with`, `assign`, `copy_from`,
  `copy_from_numpy`);
- copies (`copy`/`clone`, `to`, `to_numpy`);
- layout (`view`, `transpose`/`T`).

Backward-compatibility guarantees
---------------------------------
- `copy_from_numpy` accepts array-like inputs (NumPy arrays, NumPy scalars,
  Python scalars, lists), normalizes them with `np.asarray(..., dtype=self.dtype)`
  and enforces a strict shape match, including scalar tensors with shape `()`.
- In-place methods never reallocate storage; views keep observing writes.
"""

from abc import ABC
from typing import Any, Union

import numpy as np
from typing_extensions import Self

from .....domain._errors import ShapeMismatchError
from .....domain._tensor import ITensor
from .....domain.utils._shape_inference import resolve_view_shape, transpose_shape

Number = Union[int, float, bool]


class TensorMixinMemory(ABC):
    """
    Mixin providing data movement and layout operations for Tensor.
    """

    # ----------------------------
    # In-place writes
    # ----------------------------
    def fill_with(self, value: Number) -> Self:
        """
        Set every element to `value` in place.

        Parameters
        ----------
        value : Number
            Scalar value, converted to the tensor dtype.

        Returns
        -------
        Self
            This tensor, to allow chaining.
        """
        self.data.fill(value)
        return self

    def assign(self, value: Union["ITensor", Number]) -> Self:
        """
        Overwrite this tensor's elements with `value`.

        A tensor value must have exactly this tensor's shape; a number fills
        every element.

        Raises
        ------
        ShapeMismatchError
            If `value` is a tensor of a different shape.
        """
        if isinstance(value, type(self)):
            return self.copy_from(value)
        return self.fill_with(value)

    def copy_from(self, other: "ITensor") -> Self:
        """
        Copy the elements of a same-shape tensor into this tensor's storage.

        Values are converted to this tensor's dtype.
        """
        if self.shape != other.shape:
            raise ShapeMismatchError("copy_from", self.shape, other.shape)
        np.copyto(self.data, other.data, casting="unsafe")
        return self

    def copy_from_numpy(self, arr: Any) -> None:
        """
        Copy data from a NumPy array (or array-like / scalar) into this tensor.

        Parameters
        ----------
        arr : array_like
            Source data, normalized with ``np.asarray(arr, dtype=self.dtype)``.

        Raises
        ------
        ShapeMismatchError
            If the source shape differs from ``self.shape``.
        """
        src = np.asarray(arr, dtype=self.dtype)
        if src.shape != self.shape:
            raise ShapeMismatchError("copy_from_numpy", self.shape, src.shape)
        self.data[...] = src

    # ----------------------------
    # Copies
    # ----------------------------
    def copy(self) -> Self:
        """
        Return an independent deep copy of this tensor.

        The copy has its own storage; writes to either tensor are not visible
        through the other.
        """
        return self._from_result(self.data, dtype=self.dtype)

    def clone(self) -> Self:
        """Alias of `copy`."""
        return self.copy()

    def to(self, dtype: Any) -> Self:
        """
        Return a copy converted elementwise to another dtype.

        Conversions follow NumPy casting (floats truncate toward zero when
        converted to integers).
        """
        with np.errstate(all="ignore"):
            return self._from_result(self.data.astype(np.dtype(dtype)))

    def to_numpy(self) -> np.ndarray:
        """
        Return a NumPy copy of the tensor contents.

        Returns
        -------
        np.ndarray
            An array of shape ``self.shape`` and dtype ``self.dtype`` that does
            not share memory with the tensor.
        """
        return np.array(self.data, copy=True)

    # ----------------------------
    # Layout
    # ----------------------------
    def view(self, *dims: Any, copy: bool = False) -> Self:
        """
        Reinterpret the tensor with a different shape of equal element count.

        Parameters
        ----------
        *dims : int or a single iterable of ints
            Target shape. One entry may be ``-1`` to infer it.
        copy : bool, optional
            When False (default) the result aliases this tensor's storage.
            When True the result owns a copy of the data.

        Raises
        ------
        ElementCountMismatchError
            If the element count would change.

        Examples
        --------
        >>> Tensor.zeros((2, 3, 4)).view(6, 4).shape
        (6, 4)
        >>> Tensor.zeros((2, 3)).view(-1).shape
        (6,)
        """
        if len(dims) == 1 and not isinstance(dims[0], int):
            dims = tuple(dims[0])
        new_shape = resolve_view_shape(self.shape, dims)
        arr = self.data.reshape(new_shape)
        if copy:
            return self._from_result(arr, dtype=self.dtype)
        return self._from_array(arr)

    def transpose(self) -> Self:
        """
        Return the transpose of a 2-D tensor as a new tensor.

        Raises
        ------
        RankError
            If the tensor is not 2-D.
        """
        transpose_shape(self.shape)
        return self._from_result(self.data.T, dtype=self.dtype)

    @property
    def T(self) -> Self:
        """
        Convenience property for 2D transpose.

        Returns
        -------
        Self
            Transposed tensor.
        """
        return self.transpose()
