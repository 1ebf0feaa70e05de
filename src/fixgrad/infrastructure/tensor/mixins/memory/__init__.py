"""
Memory and layout mixin for Tensor.

Public API
----------
- ``TensorMixinMemory``
"""

from ._base import TensorMixinMemory

__all__ = [
    TensorMixinMemory.__name__,
]
