"""
Shape arithmetic shared by the tensor engine and the autograd layer.

Every fixgrad tensor carries a fixed shape, so derived shapes (views, matrix
products, transposes, stacks, splits, reductions) are computed up front and
validated before any data is touched. The helpers in this module are pure
functions over shape tuples; they never allocate tensors.
"""

from __future__ import annotations

from typing import Iterable, Sequence, Union

from .._errors import ElementCountMismatchError, RankError, ShapeMismatchError

Shape = tuple[int, ...]
ShapeLike = Union[int, Iterable[int]]


def numel(shape: Sequence[int]) -> int:
    """
    Return the total element count of a shape.

    The empty shape denotes a scalar and therefore holds exactly one element.
    """
    n = 1
    for d in shape:
        n *= int(d)
    return n


def normalize_shape(shape_like: ShapeLike) -> Shape:
    """
    Convert an int or an iterable of ints into a validated shape tuple.

    Raises
    ------
    ValueError
        If any dimension is negative.
    TypeError
        If a dimension is not an integer.
    """
    if isinstance(shape_like, int):
        dims: tuple = (shape_like,)
    else:
        dims = tuple(shape_like)

    out = []
    for d in dims:
        if isinstance(d, bool) or not isinstance(d, int):
            try:
                d = int(d.__index__())
            except AttributeError:
                raise TypeError(f"Dimensions must be integers, got {d!r}") from None
        if d < 0:
            raise ValueError(f"Dimensions must be non-negative, got {dims!r}")
        out.append(int(d))
    return tuple(out)


def resolve_view_shape(source_shape: Sequence[int], new_shape: Iterable[int]) -> Shape:
    """
    Validate and resolve the target shape of a view.

    A single ``-1`` entry is inferred from the remaining dimensions, so
    ``view(-1)`` flattens any tensor.

    Raises
    ------
    ElementCountMismatchError
        If the total element count would change.
    ValueError
        If more than one ``-1`` is given or another entry is negative.
    """
    total = numel(source_shape)
    dims = [int(d) for d in new_shape]

    inferred = [i for i, d in enumerate(dims) if d == -1]
    if len(inferred) > 1:
        raise ValueError(f"view: only one dimension can be inferred, got {dims}")
    if any(d < -1 for d in dims):
        raise ValueError(f"view: invalid dimensions {dims}")

    if inferred:
        known = numel(d for d in dims if d != -1)
        if known == 0 or total % known != 0:
            raise ElementCountMismatchError("view", total, known)
        dims[inferred[0]] = total // known

    resolved = tuple(dims)
    if numel(resolved) != total:
        raise ElementCountMismatchError("view", total, numel(resolved))
    return resolved


def normalize_axis(axis: int, rank: int, op: str = "axis") -> int:
    """
    Map a possibly negative axis onto ``[0, rank)``.

    Raises
    ------
    ValueError
        If the axis does not exist for the given rank.
    """
    a = axis + rank if axis < 0 else axis
    if not 0 <= a < rank:
        raise ValueError(f"{op}: axis {axis} is out of range for rank {rank}")
    return a


def assert_same_shape(op: str, a: Sequence[int], b: Sequence[int]) -> None:
    """Raise `ShapeMismatchError` unless `a` and `b` are identical shapes."""
    if tuple(a) != tuple(b):
        raise ShapeMismatchError(op, tuple(a), tuple(b))


def transpose_shape(shape: Sequence[int]) -> Shape:
    """Return the transposed shape of a matrix."""
    if len(shape) != 2:
        raise RankError("transpose", 2, len(shape))
    return (shape[1], shape[0])


def matrix_product_shape(a: Sequence[int], b: Sequence[int]) -> Shape:
    """
    Result shape of contracting the last axis of `a` with the first of `b`.

    Examples
    --------
    (2, 3) x (3, 4) -> (2, 4); (2, 3, 2) x (2,) -> (2, 3); (3,) x (3,) -> ()
    """
    if len(a) == 0:
        raise RankError("matrix_product", ">= 1", 0)
    if len(b) == 0:
        raise RankError("matrix_product", ">= 1", 0)
    if a[-1] != b[0]:
        raise ShapeMismatchError(
            "matrix_product",
            tuple(a),
            tuple(b),
            detail=f"contracted dimensions {a[-1]} and {b[0]} differ",
        )
    return tuple(a[:-1]) + tuple(b[1:])


def matrix_product_transposed_shape(a: Sequence[int], b_t: Sequence[int]) -> Shape:
    """Result shape of ``a @ b_t.T`` for two matrices."""
    if len(a) != 2:
        raise RankError("matrix_product_transposed", 2, len(a))
    if len(b_t) != 2:
        raise RankError("matrix_product_transposed", 2, len(b_t))
    if a[1] != b_t[1]:
        raise ShapeMismatchError("matrix_product_transposed", tuple(a), tuple(b_t))
    return (a[0], b_t[0])


def stack_shape(axis: int, a: Sequence[int], b: Sequence[int]) -> Shape:
    """Result shape of concatenating `a` and `b` along `axis`."""
    if len(a) != len(b):
        raise RankError("stack_along", len(a), len(b))
    ax = normalize_axis(axis, len(a), "stack_along")
    for i, (da, db) in enumerate(zip(a, b)):
        if i != ax and da != db:
            raise ShapeMismatchError(
                "stack_along", tuple(a), tuple(b), detail=f"axis {i} differs"
            )
    out = list(a)
    out[ax] = a[ax] + b[ax]
    return tuple(out)


def split_shapes(axis: int, split_size: int, shape: Sequence[int]) -> tuple[Shape, Shape]:
    """Shapes of the two parts produced by splitting `shape` along `axis`."""
    ax = normalize_axis(axis, len(shape), "split_along")
    if not 0 <= split_size <= shape[ax]:
        raise ShapeMismatchError(
            "split_along",
            tuple(shape),
            detail=f"split size {split_size} outside [0, {shape[ax]}]",
        )
    first = list(shape)
    second = list(shape)
    first[ax] = split_size
    second[ax] = shape[ax] - split_size
    return tuple(first), tuple(second)


def reduced_shape(shape: Sequence[int], rank: int) -> Shape:
    """Shape kept by a restricted sum that folds trailing axes down to `rank`."""
    if not 0 <= rank <= len(shape):
        raise RankError("sum", f"<= {len(shape)}", rank)
    return tuple(shape[:rank])


def leading_shape(rank_to_keep: int, shapes: Sequence[Sequence[int]]) -> Shape:
    """
    Shape of the outer loop of `apply_function`.

    The first shape decides the leading dimensions (everything except its
    trailing `rank_to_keep` axes); every other shape must start with them.
    """
    if not shapes:
        raise ValueError("apply_function requires at least one tensor")
    first = tuple(shapes[0])
    if not 0 <= rank_to_keep <= len(first):
        raise RankError("apply_function", f"<= {len(first)}", rank_to_keep)
    lead = first[: len(first) - rank_to_keep]
    for other in shapes[1:]:
        if tuple(other[: len(lead)]) != lead:
            raise ShapeMismatchError(
                "apply_function",
                first,
                tuple(other),
                detail=f"leading dimensions {lead} are not shared",
            )
    return lead
