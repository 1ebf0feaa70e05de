"""
Concrete autograd graph nodes.

This module implements the two node kinds of the computation graph:

- `LeafNode`: a value supplied by the user (inputs, trainable weights).
- `OperationNode`: the result of applying a `Function` to parent nodes.

Both derive from `Node`, which owns the value, the gradient accumulator and
the reverse traversal used by `backward()`.

Notes
-----
- Forward computation is eager: an `OperationNode` evaluates its function in
  the constructor.
- An `OperationNode` whose parents all have ``requires_grad == False`` keeps
  neither its parents nor its saved context, so non-trainable sub-expressions
  do not retain the graph that produced them.
- Cycles cannot form: a node can only reference nodes that already existed
  when it was constructed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence, Type

from ..domain._function import Function
from ..domain._node import INode
from .tensor import Context, Tensor


class Node(ABC, INode):
    """
    Base class for graph nodes.

    Parameters
    ----------
    value : Tensor
        The forward value held by the node.
    requires_grad : bool
        Whether the node participates in gradient computation.

    Attributes
    ----------
    value : Tensor
        Forward value.
    grad : Tensor
        Gradient accumulator, zero-initialized with the shape and dtype of
        `value`.
    requires_grad : bool
        Gradient participation flag.
    """

    def __init__(self, value: Tensor, requires_grad: bool) -> None:
        self.value = value
        self.grad = Tensor.zeros_like(value)
        self.requires_grad = bool(requires_grad)

    @abstractmethod
    def get_children(self) -> Sequence["Node"]: ...

    @abstractmethod
    def push_gradient(self) -> None: ...

    def zero_grad(self) -> None:
        """Reset the gradient accumulator to zero."""
        self.grad.fill_with(0)

    def _topological_order(self) -> list["Node"]:
        """
        Return the nodes reachable through gradient-requiring edges in
        post-order (each node after all of its discovered children).

        The traversal is iterative and keys its visited set by identity, so a
        node reachable along several paths appears exactly once.
        """
        order: list[Node] = []
        visited: set[int] = set()
        stack: list[tuple[Node, bool]] = [(self, False)]

        while stack:
            node, expanded = stack.pop()
            if expanded:
                order.append(node)
                continue
            if id(node) in visited:
                continue
            visited.add(id(node))
            stack.append((node, True))
            for child in reversed(node.get_children()):
                if child.requires_grad and id(child) not in visited:
                    stack.append((child, False))

        return order

    def backward(self) -> None:
        """
        Run one reverse pass from this node.

        Seeds this node's gradient with 1 and pushes gradients through every
        reachable node in reverse topological order, so every consumer of a
        node has accumulated into it before the node propagates. Leaf nodes
        keep their accumulated gradient; operation nodes end with a zeroed
        accumulator.
        """
        order = self._topological_order()
        self.grad.fill_with(1)
        for node in reversed(order):
            node.push_gradient()


class LeafNode(Node):
    """
    Graph leaf holding a user-provided value.

    Leaves have no children and their `push_gradient` does nothing; their
    accumulated `grad` is the externally observable gradient.
    """

    def get_children(self) -> Sequence[Node]:
        return ()

    def push_gradient(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"LeafNode(shape={self.value.shape}, requires_grad={self.requires_grad})"


class OperationNode(Node):
    """
    Graph node produced by applying a `Function` to parent nodes.

    Parameters
    ----------
    function : Type[Function]
        Operation descriptor whose static `forward`/`backward` are used.
    *parents : Node
        Parent nodes, in the order `function.forward` expects their values.
    **meta : Any
        Non-tensor arguments forwarded to `function.forward` as keywords.
    """

    def __init__(self, function: Type[Function], *parents: Node, **meta: Any) -> None:
        ctx = Context()
        value = function.forward(ctx, *(p.value for p in parents), **meta)
        super().__init__(value, any(p.requires_grad for p in parents))

        self._function = function
        if self.requires_grad:
            self._parents: tuple[Node, ...] = tuple(parents)
            self._ctx = ctx
        else:
            ctx.release()
            self._parents = ()
            self._ctx = None

    @property
    def function(self) -> Type[Function]:
        return self._function

    def get_children(self) -> Sequence[Node]:
        return self._parents

    def push_gradient(self) -> None:
        """
        Call the function's backward rule, then clear the own accumulator.

        Each parent contributes its gradient accumulator when it requires
        gradients and ``None`` otherwise.
        """
        if self._ctx is None:
            return
        slots = [p.grad if p.requires_grad else None for p in self._parents]
        self._ctx.output = self.value
        try:
            self._function.backward(self._ctx, self.grad, *slots)
        finally:
            self._ctx.output = None
        self.grad.fill_with(0)

    def __repr__(self) -> str:
        return (
            f"OperationNode(function={self._function.__name__}, "
            f"shape={self.value.shape}, requires_grad={self.requires_grad})"
        )
