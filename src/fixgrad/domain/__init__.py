from ._errors import ElementCountMismatchError, RankError, ShapeMismatchError
from ._function import Function
from ._node import INode
from ._serialization import ISerializable
from ._tensor import ITensor

__all__ = [
    ElementCountMismatchError.__name__,
    RankError.__name__,
    ShapeMismatchError.__name__,
    Function.__name__,
    INode.__name__,
    ISerializable.__name__,
    ITensor.__name__,
]
