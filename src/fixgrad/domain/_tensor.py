"""
Tensor interface definitions.

This module defines the domain-level interface for fixed-shape tensors using
structural typing. The interface captures what the autograd layer and the
serialization contract need from a tensor: its shape and element type, access
to contiguous storage, in-place filling, and the elementwise arithmetic used to
accumulate gradients.

Notes
-----
The concrete NumPy-backed implementation lives in
`fixgrad.infrastructure.tensor`. Code in the domain layer types against
`ITensor` only.
"""

from __future__ import annotations

from typing import Any, Protocol, Union, runtime_checkable

Number = Union[int, float, bool]


@runtime_checkable
class ITensor(Protocol):
    """
    Fixed-shape tensor interface.

    An `ITensor` is a row-major, contiguous, multidimensional array whose
    shape and element type never change after construction.

    Notes
    -----
    - The total element count equals the product of `shape` and is fixed.
    - The empty shape ``()`` denotes a scalar tensor.
    - In-place operators (``+=``, ``-=``, ...) mutate storage without
      reallocating it, which is how gradient accumulators are updated.
    """

    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the shape of the tensor.

        Returns
        -------
        tuple[int, ...]
            The tensor's dimension sizes, outermost first.
        """
        ...

    @property
    def dtype(self) -> Any:
        """
        Return the element type of the tensor.

        Returns
        -------
        numpy.dtype
            Element dtype shared by every element.
        """
        ...

    @property
    def dimension_count(self) -> int:
        """Return the number of dimensions (0 for scalars)."""
        ...

    @property
    def data(self) -> Any:
        """Return the underlying contiguous storage."""
        ...

    def numel(self) -> int:
        """Return the total number of elements."""
        ...

    def fill_with(self, value: Number) -> "ITensor":
        """
        Set every element to `value` in place.

        Returns
        -------
        ITensor
            The tensor itself, to allow chaining.
        """
        ...

    def copy(self) -> "ITensor":
        """Return an independent copy with its own storage."""
        ...

    def to_numpy(self) -> Any:
        """Return a NumPy array copy of the tensor contents."""
        ...

    def __iadd__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __isub__(self, other: Union["ITensor", Number]) -> "ITensor": ...
