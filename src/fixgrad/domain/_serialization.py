"""
Persistence-facing interface definitions.

The core does not define a file format. It only promises that persistable
objects expose an ordered tuple of their fields, so that an external
serializer can walk tensors, nested objects and numeric primitives
field-by-field, in a stable order, both when saving and when restoring.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ISerializable(Protocol):
    """
    Interface for objects that can be walked field-by-field.

    Notes
    -----
    - Fields may be tensors, variables, other `ISerializable` objects, or
      numeric primitives.
    - The order of the returned tuple defines the on-disk order; it must not
      depend on runtime state.
    """

    def serialization_fields(self) -> tuple[Any, ...]:
        """
        Return the persistable fields of this object, in a fixed order.

        Returns
        -------
        tuple[Any, ...]
            Ordered persistable fields.
        """
        ...
