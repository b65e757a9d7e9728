import numpy as np
import pytest

from clear_gan.datasets import (
    MNIST_TEST_FILE,
    MNIST_TRAIN_FILE,
    load_dataset,
    load_digits_dataset,
    load_mnist,
    load_mnist_csv,
    to_matrices,
)

CSV_ROWS = "7,0,255,51,102\n2,255,0,0,0\n7,255,255,255,255\n"


@pytest.fixture
def mnist_directory(tmp_path):
    (tmp_path / MNIST_TRAIN_FILE).write_text(CSV_ROWS)
    (tmp_path / MNIST_TEST_FILE).write_text("1,0,0,0,0\n")
    return tmp_path


def test_to_matrices_scales_and_one_hot_encodes():
    X, y = to_matrices(np.array([[0, 255], [255, 0]]), np.array([3, 1]), 255.0, -1.0, 1.0)
    assert X.shape == (2, 2)
    assert list(X.data) == pytest.approx([-1.0, 1.0, 1.0, -1.0])
    assert y.shape == (2, 10)
    assert np.argmax(y.to_numpy(), axis=1).tolist() == [3, 1]
    assert float(np.sum(y.data)) == 2.0


def test_to_matrices_filters_digits():
    X, y = to_matrices(np.eye(3), np.array([0, 1, 2]), 1.0, digit_filter=[2, 0])
    assert X.shape == (2, 3)
    assert np.argmax(y.to_numpy(), axis=1).tolist() == [0, 2]


def test_to_matrices_empty_filter_keeps_everything():
    X, _ = to_matrices(np.eye(3), np.array([0, 1, 2]), 1.0, digit_filter=[])
    assert X.rows == 3


def test_to_matrices_errors():
    with pytest.raises(ValueError):
        to_matrices(np.eye(3), np.array([0, 1, 2]), 1.0, digit_filter=[5])
    with pytest.raises(ValueError):
        to_matrices(np.eye(3), np.array([0, 1]), 1.0)


def test_load_mnist_csv(mnist_directory):
    X, y = load_mnist_csv(str(mnist_directory / MNIST_TRAIN_FILE))
    assert X.shape == (3, 4)
    assert list(X.slice_rows(0, 1).data) == pytest.approx([0.0, 1.0, 0.2, 0.4])
    assert np.argmax(y.to_numpy(), axis=1).tolist() == [7, 2, 7]


def test_load_mnist_csv_with_filter(mnist_directory):
    X, _ = load_mnist_csv(str(mnist_directory / MNIST_TRAIN_FILE), -1.0, 1.0, digit_filter=[2])
    assert X.shape == (1, 4)
    assert list(X.data) == pytest.approx([1.0, -1.0, -1.0, -1.0])


def test_load_mnist_prefers_local_csv(mnist_directory):
    X_train, _ = load_mnist(True, directory=str(mnist_directory))
    X_test, y_test = load_mnist(False, directory=str(mnist_directory))
    assert X_train.rows == 3
    assert X_test.rows == 1
    assert np.argmax(y_test.to_numpy(), axis=1).tolist() == [1]


def test_load_digits_split():
    X_train, y_train = load_digits_dataset(True)
    X_test, y_test = load_digits_dataset(False)
    assert X_train.shape == (1437, 64)
    assert y_train.shape == (1437, 10)
    assert X_test.shape == (360, 64)
    assert y_test.rows == 360
    assert np.min(X_train.data) >= 0.0
    assert np.max(X_train.data) <= 1.0


def test_load_dataset_dispatch():
    X, y = load_dataset("digits", False, -1.0, 1.0, digit_filter=[0, 1])
    assert np.min(X.data) >= -1.0
    assert set(np.argmax(y.to_numpy(), axis=1).tolist()) == {0, 1}
    with pytest.raises(ValueError):
        load_dataset("cifar10")
