"""
Autograd function interface definitions.

This module defines the abstract base class for differentiable operations
used by the autograd graph. A concrete `Function` describes one operation as a
pair of static methods:

- `forward(ctx, *values)` computes the output tensor from the parents'
  values and saves whatever the backward rule needs on `ctx`;
- `backward(ctx, grad_out, *grad_slots)` accumulates the local gradient into
  each parent's gradient accumulator.

Every backward rule is written against the same calling convention: one
optional accumulator per parent (``None`` when that parent does not require
gradients), with the node's own post-forward value available as
``ctx.output``.

This design is inspired by function-level autograd systems (e.g., PyTorch's
`autograd.Function`) while remaining lightweight and framework-agnostic.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Union

from ._tensor import ITensor


class Function(ABC):
    """
    Abstract base class for differentiable operations.

    A `Function` is the operation descriptor owned by an operation node. It
    carries no per-call state itself; anything computed during the forward
    pass and needed during the backward pass is stored on the `ctx` object.

    Notes
    -----
    - Methods are declared as `@staticmethod` to avoid implicit state on the
      function object itself.
    - The `ctx` argument is a per-node context, allowing safe reuse of
      `Function` classes across multiple computation graphs.
    - Backward rules accumulate with in-place operators (``slot += ...``).
      A parent reachable through several edges (e.g. ``v + v``) receives one
      contribution per edge, which is only correct if no rule overwrites.
    """

    @staticmethod
    @abstractmethod
    def forward(ctx, *inputs: Union[ITensor, Any]) -> ITensor:
        """
        Perform the forward computation.

        Parameters
        ----------
        ctx : Context
            A mutable context object used to store intermediate values
            required for gradient computation.
        *inputs : ITensor
            The parents' current values, in argument order.

        Returns
        -------
        ITensor
            The output tensor resulting from the forward computation.
        """
        ...

    @staticmethod
    @abstractmethod
    def backward(ctx, grad_out: ITensor, *grad_slots: Optional[ITensor]) -> None:
        """
        Accumulate gradients into the parents' accumulators.

        Parameters
        ----------
        ctx : Context
            The context populated during the forward pass. ``ctx.output``
            holds the node's current value.
        grad_out : ITensor
            Gradient of the final scalar with respect to this node's value.
        *grad_slots : Optional[ITensor]
            One entry per parent: the parent's gradient accumulator if it
            requires gradients, ``None`` otherwise.
        """
        ...
