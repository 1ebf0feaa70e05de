import unittest
from unittest import TestCase

import numpy as np

from src.fixgrad.domain._errors import RankError, ShapeMismatchError
from src.fixgrad.domain._function import Function
from src.fixgrad.infrastructure import _function as F
from src.fixgrad.infrastructure._variable import Variable
from src.fixgrad.infrastructure.tensor._tensor import Tensor
from src.fixgrad.infrastructure.tensor._tensor_context import Context


def _leaf(arr, requires_grad: bool = True) -> Variable:
    return Variable(np.asarray(arr, dtype=np.float32), requires_grad=requires_grad)


def _weights(shape, seed: int = 0) -> Tensor:
    rng = np.random.default_rng(seed)
    return Tensor.from_numpy(rng.uniform(0.5, 1.5, size=shape).astype(np.float32))


class TestContext(TestCase):
    def test_save_for_backward_and_release(self):
        ctx = Context()
        a, b = Tensor((1,)), Tensor((2,))
        ctx.save_for_backward(a, b)
        ctx.saved_meta["axis"] = 0
        ctx.output = a
        self.assertEqual(ctx.saved_tensors, [a, b])
        ctx.release()
        self.assertEqual((ctx.saved_tensors, ctx.saved_meta, ctx.output), ([], {}, None))

    def test_function_is_abstract(self):
        with self.assertRaises(TypeError):
            Function()


class TestArithmeticGradients(TestCase):
    def test_subtract_and_negate(self):
        l = _leaf([1.0, 2.0])
        r = _leaf([5.0, 7.0])
        (-(l - r)).sum().backward()
        np.testing.assert_array_equal(l.grad.to_numpy(), [-1.0, -1.0])
        np.testing.assert_array_equal(r.grad.to_numpy(), [1.0, 1.0])

    def test_divide(self):
        l_np = np.array([1.0, 2.0, 3.0], dtype=np.float32)
        r_np = np.array([2.0, 4.0, 5.0], dtype=np.float32)
        l, r = _leaf(l_np), _leaf(r_np)
        F.divide(l, r).sum().backward()
        np.testing.assert_allclose(l.grad.to_numpy(), 1.0 / r_np, rtol=1e-6)
        np.testing.assert_allclose(r.grad.to_numpy(), -l_np / (r_np * r_np), rtol=1e-6)

    def test_factories_match_operators(self):
        a = _leaf([1.0, 2.0], requires_grad=False)
        b = _leaf([3.0, 4.0], requires_grad=False)
        self.assertTrue(F.add(a, b).value == (a + b).value)
        self.assertTrue(F.subtract(a, b).value == (a - b).value)
        self.assertTrue(F.multiply(a, b).value == (a * b).value)
        self.assertTrue(F.negate(a).value == (-a).value)


class TestLayoutGradients(TestCase):
    def test_transpose(self):
        v = _leaf([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        w = _weights((3, 2))
        (v.T * w).sum().backward()
        self.assertTrue(v.grad == w.T)

    def test_view(self):
        v = _leaf(np.arange(6).reshape(2, 3))
        w = _weights((3, 2), seed=1)
        out = v.view(3, 2)
        self.assertEqual(out.shape, (3, 2))
        (out * w).sum().backward()
        self.assertTrue(v.grad == w.view(2, 3))

    def test_view_result_does_not_alias_parent(self):
        v = _leaf([[1.0, 2.0], [3.0, 4.0]])
        out = F.view(v, (-1,))
        out.value.fill_with(0)
        self.assertEqual(v.value.sum().item(), 10.0)

    def test_stack_along(self):
        a = _leaf([[1.0, 2.0]])
        b = _leaf([[3.0, 4.0], [5.0, 6.0]])
        w = _weights((3, 2), seed=2)
        s = F.stack_along(a, b, axis=0)
        self.assertEqual(s.shape, (3, 2))
        (s * w).sum().backward()
        np.testing.assert_array_equal(a.grad.to_numpy(), w.to_numpy()[:1])
        np.testing.assert_array_equal(b.grad.to_numpy(), w.to_numpy()[1:])

    def test_stack_along_last_axis(self):
        a = _leaf([[1.0], [2.0]])
        b = _leaf([[3.0, 4.0], [5.0, 6.0]])
        w = _weights((2, 3), seed=3)
        (F.stack_along(a, b, axis=1) * w).sum().backward()
        np.testing.assert_array_equal(a.grad.to_numpy(), w.to_numpy()[:, :1])
        np.testing.assert_array_equal(b.grad.to_numpy(), w.to_numpy()[:, 1:])

    def test_matrix_product_requires_matrices(self):
        a = _leaf(np.ones((2, 3, 2)))
        b = _leaf(np.ones((2, 2)))
        with self.assertRaises(RankError):
            F.matrix_product(a, b)
        with self.assertRaises(ShapeMismatchError):
            F.matrix_product(_leaf(np.ones((2, 3))), _leaf(np.ones((2, 3))))


class TestUnaryGradients(TestCase):
    def setUp(self):
        self.x_np = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]], dtype=np.float32)

    def test_log(self):
        v = _leaf(self.x_np)
        v.log().sum().backward()
        np.testing.assert_allclose(
            v.grad.to_numpy(),
            [[1.0, 0.5, 0.3333333], [0.25, 0.2, 0.1666667]],
            rtol=1e-6,
        )

    def test_sqrt(self):
        v = _leaf(self.x_np)
        v.sqrt().sum().backward()
        np.testing.assert_allclose(v.grad.to_numpy(), 0.5 / np.sqrt(self.x_np), rtol=1e-6)

    def test_exp(self):
        v = _leaf(self.x_np / 4)
        v.exp().sum().backward()
        np.testing.assert_allclose(v.grad.to_numpy(), np.exp(self.x_np / 4), rtol=1e-6)

    def test_tanh(self):
        v = _leaf(self.x_np / 4)
        v.tanh().sum().backward()
        o = np.tanh(self.x_np / 4)
        np.testing.assert_allclose(v.grad.to_numpy(), 1 - o * o, rtol=1e-5)

    def test_sigmoid(self):
        v = _leaf(self.x_np - 3)
        v.sigmoid().sum().backward()
        o = 1.0 / (1.0 + np.exp(-(self.x_np - 3)))
        np.testing.assert_allclose(v.grad.to_numpy(), o * (1 - o), rtol=1e-5)

    def test_integral_leaf_gradient_takes_leaf_dtype(self):
        v = Variable([[1, 2, 3], [4, 5, 6]], requires_grad=True, dtype=np.int64)
        v.log().sum().backward()
        self.assertEqual(v.grad.dtype, np.int64)
        np.testing.assert_array_equal(v.grad.to_numpy(), [[1, 0, 0], [0, 0, 0]])

    def test_chain_rule_through_unary_ops(self):
        # d/dx sum(exp(2x)) = 2 exp(2x)
        v = _leaf([0.0, 0.5])
        (v * 2).exp().sum().backward()
        np.testing.assert_allclose(v.grad.to_numpy(), 2 * np.exp([0.0, 1.0]), rtol=1e-6)


class TestAddBiasGradients(TestCase):
    def test_dense(self):
        t = _leaf([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        b = _leaf([0.1, 0.2, 0.3])
        w = _weights((2, 3), seed=4)
        out = F.add_bias(t, b)
        np.testing.assert_allclose(
            out.value.to_numpy(), [[1.1, 2.2, 3.3], [4.1, 5.2, 6.3]], rtol=1e-6
        )
        (out * w).sum().backward()
        self.assertTrue(t.grad == w)
        np.testing.assert_allclose(b.grad.to_numpy(), w.to_numpy().sum(axis=0), rtol=1e-6)

    def test_channels_first(self):
        t = _leaf(np.zeros((2, 3, 2, 2)))
        b = _leaf([1.0, 2.0, 3.0])
        w = _weights((2, 3, 2, 2), seed=5)
        (F.add_bias(t, b) * w).sum().backward()
        np.testing.assert_allclose(
            b.grad.to_numpy(), w.to_numpy().sum(axis=(0, 2, 3)), rtol=1e-6
        )

    def test_bias_without_grad(self):
        t = _leaf([[1.0, 2.0]])
        b = Tensor.from_nested([1.0, 1.0], dtype=np.float32)
        F.add_bias(t, b).sum().backward()
        self.assertTrue(t.grad == Tensor.ones((1, 2)))


class TestDropout(TestCase):
    def test_invalid_p_raises(self):
        x = _leaf(np.ones((2, 2)))
        with self.assertRaises(ValueError):
            F.dropout(x, -0.1)
        with self.assertRaises(ValueError):
            F.dropout(x, 1.0)

    def test_requires_rank_two(self):
        with self.assertRaises(RankError):
            F.dropout(_leaf([1.0, 2.0]), 0.5)

    def test_requires_floating_input(self):
        x = Variable([[1, 2], [3, 4]], dtype=np.int64)
        with self.assertRaises(TypeError):
            F.dropout(x, 0.25)

    def test_empty_batch_keeps_shape(self):
        x = _leaf(np.zeros((0, 3, 2)))
        y = F.dropout(x, 0.5, generator=np.random.default_rng(0))
        self.assertEqual(y.shape, (0, 3, 2))
        y.sum().backward()
        self.assertEqual(x.grad.shape, (0, 3, 2))

    def test_backward_scales_trailing_dimensions(self):
        x = _leaf(np.ones((3, 4, 2)))
        y = F.dropout(x, 0.4, generator=np.random.default_rng(5))
        y.sum().backward()
        self.assertTrue(x.grad == y.value)

    def test_eval_mode_is_identity(self):
        x = _leaf(np.ones((2, 2)))
        self.assertIs(F.dropout(x, 0.5, training=False), x)

    def test_p_zero_keeps_everything(self):
        x = _leaf(np.arange(6).reshape(2, 3))
        y = F.dropout(x, 0.0, generator=np.random.default_rng(0))
        self.assertTrue(y.value == x.value)

    def test_mask_matches_generator_and_scales(self):
        p = 0.5
        x_np = np.ones((4, 5), dtype=np.float32)
        x = _leaf(x_np)
        y = F.dropout(x, p, generator=np.random.default_rng(123))

        keep = np.random.default_rng(123).random((4, 5)) >= p
        expected = np.where(keep, np.float32(1.0 / (1.0 - p)), np.float32(0.0))
        np.testing.assert_allclose(y.value.to_numpy(), expected, rtol=1e-6)

        y.sum().backward()
        np.testing.assert_allclose(x.grad.to_numpy(), expected, rtol=1e-6)

    def test_mask_covers_trailing_dimensions(self):
        p = 0.25
        x = _leaf(np.ones((3, 4, 2)))
        y = F.dropout(x, p, generator=np.random.default_rng(9))

        keep = np.random.default_rng(9).random((3, 4)) >= p
        out = y.value.to_numpy()
        for i in range(3):
            for j in range(4):
                value = 1.0 / (1.0 - p) if keep[i, j] else 0.0
                np.testing.assert_allclose(out[i, j], [value, value], rtol=1e-6)


if __name__ == "__main__":
    unittest.main()
