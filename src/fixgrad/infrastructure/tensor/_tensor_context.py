from typing import Any, Optional
from dataclasses import dataclass, field

from ...domain._tensor import ITensor


@dataclass
class Context:
    """
    Backward context owned by an operation node.

    A `Context` records the information a `Function` needs in order to compute
    gradients for one application of that function.

    Attributes
    ----------
    saved_tensors : list[ITensor]
        Tensors explicitly saved during the forward pass for use in backward.
        They may be the parents' values (saved by reference, so they reflect
        the values at backward time) or transformed values such as masks.
    saved_meta : dict[str, Any]
        Non-tensor metadata required for backward (e.g., shapes, axes, scales).
    output : Optional[ITensor]
        The owning node's current value. Set by the node immediately before
        every backward call and cleared right after it, so the context never
        keeps the node's value alive on its own.

    Notes
    -----
    `saved_tensors` and `saved_meta` are intentionally generic to support a wide
    range of operations without coupling the Context type to specific kernels.
    """

    saved_tensors: list["ITensor"] = field(default_factory=list)
    saved_meta: dict[str, Any] = field(default_factory=dict)
    output: Optional["ITensor"] = None

    def save_for_backward(self, *tensors: "ITensor") -> None:
        """
        Save tensors for use during the backward computation.

        Parameters
        ----------
        *tensors : Tensor
            Any number of tensors to be stored in `saved_tensors`.
        """
        self.saved_tensors.extend(tensors)

    def release(self) -> None:
        """Drop everything saved for backward."""
        self.saved_tensors.clear()
        self.saved_meta.clear()
        self.output = None
