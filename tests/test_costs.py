import math

import numpy as np
import pytest

from clear_gan.constants import EPSILON
from clear_gan.costs import BinaryCrossEntropy, MeanSquaredError, get_cost
from clear_gan.errors import ShapeMismatchError
from clear_gan.matrix import Matrix


def test_mse_forward():
    loss = MeanSquaredError().forward(Matrix.from_data([1, 2, 3, 4], 2, 2), Matrix.zeroes(2, 2))
    assert loss.shape == (1, 1)
    assert loss[0] == pytest.approx(7.5)


def test_mse_backward_single():
    grad = MeanSquaredError().backward(Matrix.from_data([0.5], 1, 1), Matrix.from_data([1.0], 1, 1))
    assert list(grad.data) == [-1.0]


def test_mse_backward_scales_by_rows():
    predictions = Matrix.from_data([1, 2, 3, 4], 4, 1)
    grad = MeanSquaredError().backward(predictions, Matrix.zeroes(4, 1))
    assert list(grad.data) == pytest.approx([0.5, 1.0, 1.5, 2.0])


def test_mse_count_mismatch():
    with pytest.raises(ShapeMismatchError):
        MeanSquaredError().forward(Matrix(2, 1), Matrix(3, 1))


def test_bce_forward():
    loss = BinaryCrossEntropy().forward(Matrix.from_data([0.5, 0.5], 2, 1), Matrix.from_data([1.0, 0.0], 2, 1))
    assert loss[0] == pytest.approx(math.log(2.0))


def test_bce_forward_clips_predictions():
    cost = BinaryCrossEntropy()
    confident_right = cost.forward(Matrix.from_data([0.0], 1, 1), Matrix.from_data([0.0], 1, 1))
    confident_wrong = cost.forward(Matrix.from_data([1.0], 1, 1), Matrix.from_data([0.0], 1, 1))
    assert confident_right[0] == pytest.approx(-math.log(1 - EPSILON))
    assert confident_wrong[0] == pytest.approx(-math.log(EPSILON))


def test_bce_backward():
    grad = BinaryCrossEntropy().backward(Matrix.from_data([0.5, 0.25], 2, 1), Matrix.from_data([1.0, 0.0], 2, 1))
    # (p - l) / (p (1 - p)), not divided by the batch size
    assert list(grad.data) == pytest.approx([-2.0, 0.25 / (0.25 * 0.75)])


def test_bce_backward_is_finite_at_saturated_predictions():
    grad = BinaryCrossEntropy().backward(Matrix.from_data([0.0, 1.0], 2, 1), Matrix.from_data([1.0, 0.0], 2, 1))
    assert np.all(np.isfinite(grad.data))
    assert grad[0] < 0
    assert grad[1] > 0


def test_bce_backward_matches_finite_difference():
    cost = BinaryCrossEntropy()
    label = Matrix.from_data([1.0], 1, 1)
    p, h = 0.3, 1e-6
    numeric = (cost.forward(Matrix.from_data([p + h], 1, 1), label)[0]
               - cost.forward(Matrix.from_data([p - h], 1, 1), label)[0]) / (2 * h)
    assert cost.backward(Matrix.from_data([p], 1, 1), label)[0] == pytest.approx(numeric, rel=1e-5)


def test_get_cost():
    assert isinstance(get_cost("mse"), MeanSquaredError)
    assert get_cost("binary_cross_entropy").name == "binary cross entropy"
    with pytest.raises(ValueError):
        get_cost("hinge")
