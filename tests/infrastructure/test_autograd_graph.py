import unittest
from unittest import TestCase

import numpy as np

from src.fixgrad.domain._node import INode
from src.fixgrad.infrastructure._node import LeafNode, OperationNode
from src.fixgrad.infrastructure._function import AddFn, MultiplyFn, SumFn
from src.fixgrad.infrastructure._variable import Variable
from src.fixgrad.infrastructure.tensor._tensor import Tensor


class TestBackwardTraversal(TestCase):
    def test_matrix_product_gradients(self):
        a = Variable([[1, 2, 3], [4, 5, 6]], requires_grad=True)
        b = Variable([[9, 8], [7, 6], [5, 4]], requires_grad=True)

        (a @ b).sum().backward()

        np.testing.assert_array_equal(a.grad.to_numpy(), [[17, 13, 9], [17, 13, 9]])
        np.testing.assert_array_equal(b.grad.to_numpy(), [[5, 5], [7, 7], [9, 9]])

    def test_sum_gradient_is_ones(self):
        v = Variable(np.arange(6).reshape(2, 3), requires_grad=True)
        v.sum().backward()
        self.assertTrue(v.grad == Tensor.ones((2, 3)))

    def test_self_reference_accumulates_both_edges(self):
        v = Variable([[1.0, 2.0], [3.0, 4.0]], requires_grad=True)
        (v + v).sum().backward()
        self.assertTrue(v.grad == Tensor.full((2, 2), 2.0))

    def test_multiplication_gradient(self):
        a = Variable([1.0, 2.0, 3.0], requires_grad=True)
        b = Variable([4.0, 5.0, 6.0], requires_grad=True)
        (a * b).sum().backward()
        self.assertTrue(a.grad == b.value)
        self.assertTrue(b.grad == a.value)

    def test_diamond_graph_visits_shared_node_once(self):
        # L = sum(x*x + (x*x)*x) -> dL/dx = 2x + 3x^2
        x = Variable([3.0], requires_grad=True)
        y = x * x
        loss = (y + y * x).sum()
        loss.backward()
        np.testing.assert_allclose(x.grad.to_numpy(), [33.0])

    def test_operation_node_gradients_are_cleared_after_push(self):
        x = Variable([1.0, 2.0], requires_grad=True)
        y = x * 3
        loss = y.sum()
        loss.backward()
        self.assertTrue(y.grad == Tensor.zeros((2,)))
        self.assertTrue(loss.grad == Tensor.zeros(()))
        self.assertTrue(x.grad == Tensor.full((2,), 3.0))

    def test_leaf_gradients_accumulate_across_passes(self):
        x = Variable([1.0, 2.0], requires_grad=True)
        loss = (x * x).sum()
        loss.backward()
        loss.backward()
        np.testing.assert_array_equal(x.grad.to_numpy(), [4.0, 8.0])

        x.zero_grad()
        self.assertTrue(x.grad == Tensor.zeros((2,)))

    def test_requires_grad_false_parent_keeps_zero_grad(self):
        a = Variable([1.0, 2.0], requires_grad=True)
        b = Variable([3.0, 4.0])
        (a * b + b).sum().backward()
        self.assertTrue(a.grad == b.value)
        self.assertTrue(b.grad == Tensor.zeros((2,)))

    def test_long_chain_does_not_hit_recursion_limit(self):
        x = Variable([0.0], requires_grad=True)
        v = x
        for _ in range(3000):
            v = v + 1.0
        v.sum().backward()
        np.testing.assert_array_equal(x.grad.to_numpy(), [1.0])
        self.assertEqual(v.value.item(), 3000.0)


class TestNodes(TestCase):
    def test_leaf_node(self):
        leaf = LeafNode(Tensor.from_nested([1.0, 2.0]), True)
        self.assertIsInstance(leaf, INode)
        self.assertEqual(tuple(leaf.get_children()), ())
        self.assertTrue(leaf.grad == Tensor.zeros((2,)))
        leaf.push_gradient()
        self.assertTrue(leaf.grad == Tensor.zeros((2,)))

    def test_operation_node_evaluates_eagerly(self):
        a = LeafNode(Tensor.from_nested([1.0, 2.0]), True)
        b = LeafNode(Tensor.from_nested([3.0, 4.0]), False)
        node = OperationNode(AddFn, a, b)
        self.assertTrue(node.value == Tensor.from_nested([4.0, 6.0]))
        self.assertTrue(node.requires_grad)
        self.assertEqual(tuple(node.get_children()), (a, b))
        self.assertIs(node.function, AddFn)

    def test_operation_node_without_grad_drops_parents(self):
        a = LeafNode(Tensor.from_nested([1.0, 2.0]), False)
        node = OperationNode(MultiplyFn, a, a)
        self.assertFalse(node.requires_grad)
        self.assertEqual(tuple(node.get_children()), ())
        node.push_gradient()
        self.assertTrue(node.value == Tensor.from_nested([1.0, 4.0]))

    def test_node_backward_seeds_root(self):
        a = LeafNode(Tensor.from_nested([1.0, 2.0]), True)
        root = OperationNode(SumFn, a)
        root.backward()
        self.assertTrue(a.grad == Tensor.ones((2,)))
        self.assertIn("SumFn", repr(root))


if __name__ == "__main__":
    unittest.main()
