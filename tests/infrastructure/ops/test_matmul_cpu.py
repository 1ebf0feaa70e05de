import unittest
from unittest import TestCase

import numpy as np

from src.fixgrad.domain._errors import RankError, ShapeMismatchError
from src.fixgrad.infrastructure.tensor._tensor import Tensor
from src.fixgrad.infrastructure.ops.matmul_cpu import (
    matrix_product,
    matrix_product_transposed,
)


class TestMatrixProduct(TestCase):
    def setUp(self):
        self.data1 = Tensor.from_nested([[4, 7, 1, 3], [9, 0, 8, 8], [3, 2, 6, 0]])
        self.data3 = Tensor.from_nested([[4, 2, 7], [2, 5, 4], [5, 3, 1], [0, 3, 6]])

    def test_matrix_matrix(self):
        mul1 = Tensor.from_nested([[35, 55, 75], [76, 66, 119], [46, 34, 35]])
        mul2 = Tensor.from_nested(
            [[55, 42, 62, 28], [65, 22, 66, 46], [50, 37, 35, 39], [45, 12, 60, 24]]
        )
        self.assertTrue(matrix_product(self.data1, self.data3) == mul1)
        self.assertTrue(self.data3 @ self.data1 == mul2)

    def test_tensor_vector(self):
        t = Tensor.from_nested([[[1, 2], [3, 4], [5, 6]], [[3, 2], [1, 6], [5, 4]]])
        v = Tensor.from_nested([1, 2])
        out = matrix_product(t, v)
        self.assertEqual(out.shape, (2, 3))
        self.assertTrue(out == Tensor.from_nested([[5, 11, 17], [7, 13, 13]]))

    def test_vector_matrix(self):
        v = Tensor.from_nested([1, 2, 3])
        m = Tensor.from_nested([[3, 2], [2, 4], [3, 9]])
        self.assertTrue(v @ m == Tensor.from_nested([16, 37]))

    def test_vector_vector(self):
        out = Tensor.from_nested([1, 2, 3]) @ Tensor.from_nested([3, 2, 1])
        self.assertEqual(out.shape, ())
        self.assertEqual(out.item(), 10)

    def test_identity(self):
        a = Tensor.from_nested([[1.5, -2.0], [0.25, 4.0]])
        eye = Tensor.from_numpy(np.eye(2, dtype=np.float32))
        self.assertTrue(a @ eye == a)

    def test_result_dtype_follows_left_operand(self):
        a = Tensor.from_nested([[1.0, 2.0]], dtype=np.float32)
        b = Tensor.from_nested([[1], [1]], dtype=np.int64)
        self.assertEqual((a @ b).dtype, np.float32)

    def test_out_accumulates(self):
        a = Tensor.from_nested([[1.0, 2.0], [3.0, 4.0]])
        out = Tensor.ones((2, 2), dtype=np.float64)
        result = matrix_product(a, a, out=out)
        self.assertIs(result, out)
        np.testing.assert_array_equal(out.to_numpy(), [[8, 11], [16, 23]])

    def test_errors(self):
        with self.assertRaises(ShapeMismatchError):
            matrix_product(self.data1, self.data1)
        with self.assertRaises(RankError):
            matrix_product(Tensor(()), self.data1)
        with self.assertRaises(ShapeMismatchError):
            matrix_product(self.data1, self.data3, out=Tensor((2, 2)))


class TestMatrixProductTransposed(TestCase):
    def test_matches_explicit_transpose(self):
        rng = np.random.default_rng(7)
        a = Tensor.from_numpy(rng.standard_normal((3, 4)), dtype=np.float64)
        b_t = Tensor.from_numpy(rng.standard_normal((5, 4)), dtype=np.float64)
        out = matrix_product_transposed(a, b_t)
        self.assertEqual(out.shape, (3, 5))
        np.testing.assert_allclose(
            out.to_numpy(), a.to_numpy() @ b_t.to_numpy().T, rtol=1e-12
        )

    def test_out_accumulates(self):
        a = Tensor.from_nested([[1.0, 0.0], [0.0, 1.0]])
        b_t = Tensor.from_nested([[2.0, 3.0], [4.0, 5.0]])
        out = Tensor.full((2, 2), 1.0)
        matrix_product_transposed(a, b_t, out=out)
        np.testing.assert_array_equal(out.to_numpy(), [[3, 5], [4, 6]])

    def test_requires_matrices(self):
        with self.assertRaises(RankError):
            matrix_product_transposed(Tensor((3,)), Tensor((2, 3)))
        with self.assertRaises(ShapeMismatchError):
            matrix_product_transposed(Tensor((2, 3)), Tensor((3, 2)))


if __name__ == "__main__":
    unittest.main()
