import unittest
from unittest import TestCase

import numpy as np

from src.fixgrad.domain._errors import ShapeMismatchError
from src.fixgrad.infrastructure._variable import Variable
from src.fixgrad.infrastructure.module import dump_fields, load_fields
from src.fixgrad.infrastructure.tensor._tensor import Tensor


class _Dense:
    def __init__(self, in_features: int, out_features: int):
        self.weight = Variable(np.zeros((in_features, out_features)), requires_grad=True)
        self.bias = Variable(np.zeros((out_features,)), requires_grad=True)

    def serialization_fields(self):
        return (self.weight, self.bias)


class _Model:
    def __init__(self):
        self.hidden = _Dense(2, 3)
        self.output = _Dense(3, 1)
        self.scale = Tensor.full((), 1.0)

    def serialization_fields(self):
        return (self.hidden, self.output, self.scale)


class _WithLearningRate:
    def __init__(self):
        self.weight = Tensor.zeros((2,))
        self.learning_rate = 0.01

    def serialization_fields(self):
        return (self.weight, self.learning_rate)


class TestDumpFields(TestCase):
    def test_order_is_depth_first(self):
        model = _Model()
        model.hidden.bias.value = [1.0, 2.0, 3.0]
        model.scale.fill_with(4.0)

        values = dump_fields(model)

        self.assertEqual([v.shape for v in values], [(2, 3), (3,), (3, 1), (1,), ()])
        np.testing.assert_array_equal(values[1], [1.0, 2.0, 3.0])
        self.assertEqual(values[4], 4.0)

    def test_dumped_arrays_are_copies(self):
        v = Variable([1.0, 2.0])
        (arr,) = dump_fields(v)
        arr[0] = 99.0
        self.assertEqual(v.value[0].item(), 1.0)

    def test_numeric_primitives_are_dumped_as_is(self):
        values = dump_fields(_WithLearningRate())
        self.assertEqual(values[1], 0.01)

    def test_unsupported_field_raises(self):
        class _Bad:
            def serialization_fields(self):
                return ("weights.bin",)

        with self.assertRaises(TypeError):
            dump_fields(_Bad())


class TestLoadFields(TestCase):
    def test_round_trip_restores_in_place(self):
        src = _Model()
        rng = np.random.default_rng(0)
        for v in (src.hidden.weight, src.hidden.bias, src.output.weight, src.output.bias):
            v.value = rng.standard_normal(v.shape)
        src.scale.fill_with(0.5)

        dst = _Model()
        weight_storage = dst.hidden.weight.value.data
        load_fields(dst, dump_fields(src))

        self.assertIs(dst.hidden.weight.value.data, weight_storage)
        for a, b in zip(dump_fields(src), dump_fields(dst)):
            np.testing.assert_array_equal(a, b)

    def test_restored_values_reach_the_graph(self):
        layer = _Dense(2, 1)
        x = Tensor.from_nested([[1.0, 1.0]], dtype=np.float32)
        out = x @ layer.weight
        load_fields(layer, [np.array([[2.0], [3.0]]), np.array([0.0])])
        self.assertTrue((x @ layer.weight).value == Tensor.from_nested([[5.0]]))
        self.assertTrue(out.value == Tensor.from_nested([[0.0]]))

    def test_count_mismatch(self):
        with self.assertRaises(ValueError):
            load_fields(_Dense(2, 3), [np.zeros((2, 3))])

    def test_shape_mismatch_writes_nothing(self):
        layer = _Dense(2, 3)
        with self.assertRaises(ShapeMismatchError):
            load_fields(layer, [np.ones((2, 3)), np.ones((4,))])
        self.assertTrue(layer.weight.value == Tensor.zeros((2, 3)))

    def test_numeric_field_cannot_be_loaded(self):
        with self.assertRaises(TypeError):
            load_fields(_WithLearningRate(), [np.ones((2,)), 0.1])


if __name__ == "__main__":
    unittest.main()
