"""
Shape- and rank-related exceptions for fixgrad.

Tensor shapes in fixgrad are fixed for the lifetime of a tensor, so almost
every contract violation is a shape or rank mismatch detected when an
operation is invoked. These exceptions make such violations fail fast with a
message naming the operation and the offending shapes.

All of them derive from `ValueError` so callers that already guard numeric
code with `except ValueError` keep working.
"""

from __future__ import annotations

from typing import Any


class ShapeMismatchError(ValueError):
    """
    Raised when operand shapes are incompatible for an operation.

    Attributes
    ----------
    op : str
        The name of the operation that was attempted (e.g., "add", "stack").
    shapes : tuple[tuple[int, ...], ...]
        The operand shapes involved, in argument order.
    """

    def __init__(self, op: str, *shapes: tuple[int, ...], detail: str = "") -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        op : str
            The operation name.
        *shapes : tuple[int, ...]
            Operand shapes, in argument order.
        detail : str, optional
            Additional explanation appended to the message.
        """
        listed = " vs ".join(str(tuple(s)) for s in shapes)
        msg = f"{op}: shape mismatch {listed}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)
        self.op = op
        self.shapes = tuple(tuple(s) for s in shapes)


class ElementCountMismatchError(ShapeMismatchError):
    """
    Raised when a reinterpretation or construction changes the element count.

    Views, reshapes and iterable-range construction require the total number
    of elements to be preserved exactly.
    """

    def __init__(self, op: str, expected: int, got: int) -> None:
        """
        Initialize the ElementCountMismatchError.

        Parameters
        ----------
        op : str
            The operation name.
        expected : int
            Element count required by the target shape.
        got : int
            Element count actually supplied.
        """
        ValueError.__init__(
            self, f"{op}: expected {expected} elements, got {got}"
        )
        self.op = op
        self.shapes = ()
        self.expected = expected
        self.got = got


class RankError(ValueError):
    """
    Raised when an operation is only defined for a specific rank.

    Examples are transposing a non-matrix, calling `backward()` on a
    non-scalar variable, or requesting a restricted sum to an invalid rank.
    """

    def __init__(self, op: str, expected: Any, got: int) -> None:
        """
        Initialize the RankError.

        Parameters
        ----------
        op : str
            The operation name.
        expected : Any
            Description of the accepted rank(s), e.g. ``2`` or ``"<= 3"``.
        got : int
            The rank that was supplied.
        """
        super().__init__(f"{op}: expected rank {expected}, got rank {got}")
        self.op = op
        self.expected = expected
        self.got = got
