"""
Computation-graph node interface definitions.

A node is the unit of the autograd graph: it pairs a forward value with a
gradient accumulator and knows how to forward its accumulated gradient to the
nodes it was computed from.

The interface is deliberately closed: the traversal in `Node.backward` only
ever calls `get_children()` and `push_gradient()`, so nodes of any arity and
any value shape can live behind the same handle.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class INode(Protocol):
    """
    Autograd graph node interface.

    Attributes
    ----------
    value : ITensor
        The forward result held by this node.
    grad : ITensor
        The accumulated upstream gradient, same shape and dtype as `value`.
    requires_grad : bool
        Whether this node participates in gradient computation.

    Notes
    -----
    State machine per backward pass:

        Idle -> GradientAccumulating -> Pushed -> Idle

    A node receives ``+=`` contributions from any number of consumers, is
    pushed exactly once, and leaves its own accumulator zeroed afterwards.
    """

    value: ITensor
    grad: ITensor
    requires_grad: bool

    def get_children(self) -> Sequence["INode"]:
        """
        Return the nodes this node was computed from.

        Returns
        -------
        Sequence[INode]
            Parent nodes used for graph traversal. Empty for leaves and for
            operation nodes that do not require gradients.
        """
        ...

    def push_gradient(self) -> None:
        """
        Propagate the accumulated gradient into the parents' accumulators.

        Implementations must accumulate (never overwrite) into parents and
        clear their own accumulator afterwards.
        """
        ...
