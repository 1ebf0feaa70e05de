from .tensor import Context, Tensor
from ._node import LeafNode, Node, OperationNode
from ._variable import Variable

__all__ = [
    Context.__name__,
    Tensor.__name__,
    LeafNode.__name__,
    Node.__name__,
    OperationNode.__name__,
    Variable.__name__,
]
