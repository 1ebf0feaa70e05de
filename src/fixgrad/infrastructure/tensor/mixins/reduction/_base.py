"""
Reduction mixin for Tensor.

Defines :class:`TensorMixinReduction`, which provides summation over trailing
dimensions.
"""

from abc import ABC
from typing import Optional

import numpy as np

from .....domain._tensor import ITensor
from .....domain.utils._shape_inference import reduced_shape


class TensorMixinReduction(ABC):
    """
    Mixin providing reductions for Tensor.
    """

    def sum(self, rank: Optional[int] = None) -> "ITensor":
        """
        Sum over trailing dimensions.

        Parameters
        ----------
        rank : Optional[int], optional
            Number of leading dimensions to keep. ``None`` (default) or ``0``
            sums every element into a rank-0 tensor. ``rank`` equal to the
            tensor's rank returns a copy.

        Returns
        -------
        ITensor
            A tensor of shape ``self.shape[:rank]``. The dtype matches the
            input dtype, except that boolean tensors count their ``True``
            elements as int64.

        Raises
        ------
        RankError
            If ``rank`` exceeds the tensor's rank.

        Examples
        --------
        >>> t = Tensor.from_nested([[1, 2], [3, 4]])
        >>> t.sum().item()
        10
        >>> t.sum(rank=1).to_numpy().tolist()
        [3, 7]
        """
        keep = 0 if rank is None else rank
        reduced_shape(self.shape, keep)
        axes = tuple(range(keep, self.dimension_count))
        dtype = np.int64 if self.dtype.kind == "b" else self.dtype
        return self._from_result(np.sum(self.data, axis=axes, dtype=dtype))
