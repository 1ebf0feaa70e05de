import unittest
from unittest import TestCase

import numpy as np

from src.fixgrad.domain._errors import (
    ElementCountMismatchError,
    RankError,
    ShapeMismatchError,
)
from src.fixgrad.domain.utils._shape_inference import (
    leading_shape,
    matrix_product_shape,
    matrix_product_transposed_shape,
    normalize_axis,
    normalize_shape,
    numel,
    reduced_shape,
    resolve_view_shape,
    split_shapes,
    stack_shape,
    transpose_shape,
)


class TestNumelAndNormalize(TestCase):
    def test_numel(self):
        self.assertEqual(numel((2, 3, 4)), 24)
        self.assertEqual(numel(()), 1)
        self.assertEqual(numel((5, 0)), 0)

    def test_normalize_shape_accepts_int_and_iterables(self):
        self.assertEqual(normalize_shape(3), (3,))
        self.assertEqual(normalize_shape([2, np.int64(3)]), (2, 3))
        self.assertEqual(normalize_shape(()), ())

    def test_normalize_shape_rejects_negative(self):
        with self.assertRaises(ValueError):
            normalize_shape((2, -1))

    def test_normalize_shape_rejects_non_integers(self):
        with self.assertRaises(TypeError):
            normalize_shape((2, 1.5))


class TestViewShape(TestCase):
    def test_explicit_shape(self):
        self.assertEqual(resolve_view_shape((2, 3, 4), (6, 4)), (6, 4))

    def test_inferred_dimension(self):
        self.assertEqual(resolve_view_shape((2, 3, 4), (6, -1)), (6, 4))
        self.assertEqual(resolve_view_shape((2, 3), (-1,)), (6,))

    def test_element_count_must_match(self):
        with self.assertRaises(ElementCountMismatchError):
            resolve_view_shape((2, 3), (4,))
        with self.assertRaises(ElementCountMismatchError):
            resolve_view_shape((2, 3), (4, -1))

    def test_only_one_inferred_dimension(self):
        with self.assertRaises(ValueError):
            resolve_view_shape((2, 3), (-1, -1))


class TestMatrixShapes(TestCase):
    def test_matrix_product_shapes(self):
        self.assertEqual(matrix_product_shape((2, 3), (3, 4)), (2, 4))
        self.assertEqual(matrix_product_shape((2, 3, 2), (2,)), (2, 3))
        self.assertEqual(matrix_product_shape((3,), (3, 2)), (2,))
        self.assertEqual(matrix_product_shape((3,), (3,)), ())

    def test_matrix_product_contracted_dimension_mismatch(self):
        with self.assertRaises(ShapeMismatchError) as cm:
            matrix_product_shape((2, 3), (4, 2))
        self.assertEqual(cm.exception.op, "matrix_product")
        self.assertEqual(cm.exception.shapes, ((2, 3), (4, 2)))

    def test_matrix_product_rejects_scalars(self):
        with self.assertRaises(RankError):
            matrix_product_shape((), (3,))

    def test_matrix_product_transposed_shape(self):
        self.assertEqual(matrix_product_transposed_shape((2, 3), (4, 3)), (2, 4))
        with self.assertRaises(ShapeMismatchError):
            matrix_product_transposed_shape((2, 3), (3, 4))

    def test_transpose_shape(self):
        self.assertEqual(transpose_shape((2, 3)), (3, 2))
        with self.assertRaises(RankError):
            transpose_shape((2, 3, 4))


class TestStackSplitReduce(TestCase):
    def test_stack_shape(self):
        self.assertEqual(stack_shape(0, (2, 3), (4, 3)), (6, 3))
        self.assertEqual(stack_shape(1, (2, 3), (2, 4)), (2, 7))
        self.assertEqual(stack_shape(-1, (2, 3), (2, 4)), (2, 7))

    def test_stack_shape_rejects_other_axis_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            stack_shape(0, (2, 3), (2, 4))

    def test_stack_shape_rejects_rank_mismatch(self):
        with self.assertRaises(RankError):
            stack_shape(0, (2, 3), (2,))

    def test_split_shapes(self):
        self.assertEqual(split_shapes(1, 2, (2, 5)), ((2, 2), (2, 3)))
        self.assertEqual(split_shapes(0, 0, (2, 5)), ((0, 5), (2, 5)))
        with self.assertRaises(ShapeMismatchError):
            split_shapes(1, 6, (2, 5))

    def test_normalize_axis(self):
        self.assertEqual(normalize_axis(-1, 3), 2)
        with self.assertRaises(ValueError):
            normalize_axis(3, 3)

    def test_reduced_shape(self):
        self.assertEqual(reduced_shape((2, 3, 4), 0), ())
        self.assertEqual(reduced_shape((2, 3, 4), 1), (2,))
        self.assertEqual(reduced_shape((2, 3, 4), 3), (2, 3, 4))
        with self.assertRaises(RankError):
            reduced_shape((2, 3, 4), 4)

    def test_leading_shape(self):
        self.assertEqual(leading_shape(1, [(2, 3, 2)]), (2, 3))
        self.assertEqual(leading_shape(3, [(2, 3, 2)]), ())
        self.assertEqual(leading_shape(0, [(2, 3), (2, 3)]), (2, 3))
        self.assertEqual(leading_shape(1, [(2, 3, 4), (2, 3)]), (2, 3))

    def test_leading_shape_must_be_shared(self):
        with self.assertRaises(ShapeMismatchError):
            leading_shape(1, [(2, 3, 4), (3, 3)])
        with self.assertRaises(RankError):
            leading_shape(4, [(2, 3, 4)])
        with self.assertRaises(ValueError):
            leading_shape(0, [])


class TestErrorHierarchy(TestCase):
    def test_errors_are_value_errors(self):
        self.assertTrue(issubclass(ShapeMismatchError, ValueError))
        self.assertTrue(issubclass(ElementCountMismatchError, ShapeMismatchError))
        self.assertTrue(issubclass(RankError, ValueError))

    def test_messages_name_the_operation(self):
        self.assertIn("add", str(ShapeMismatchError("add", (2,), (3,))))
        self.assertIn("expected 6 elements, got 5", str(ElementCountMismatchError("view", 6, 5)))
        err = RankError("backward", 0, 2)
        self.assertEqual((err.op, err.expected, err.got), ("backward", 0, 2))


if __name__ == "__main__":
    unittest.main()
