"""
Dataset providers.

Every loader returns ``(X, y)`` as matrices: X holds one flattened image per row
with pixel values scaled linearly into [scale_min, scale_max]; y holds the
one-hot class of each row. An optional ``digit_filter`` keeps only the listed
classes (None or empty keeps everything).

MNIST is read from local CSV files (``MNIST_DATA/mnist_train.csv`` and
``MNIST_DATA/mnist_test.csv``, label first, then 784 pixels) when present, and
fetched from OpenML otherwise. The 8x8 scikit-learn digits set needs no
download and is handy for quick runs.
"""

import os
import logging
from typing import Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from .config import NUM_CLASSES
from .matrix import Matrix

MNIST_DIRECTORY = "MNIST_DATA"
MNIST_TRAIN_FILE = "mnist_train.csv"
MNIST_TEST_FILE = "mnist_test.csv"
MNIST_TRAIN_SIZE = 60000
MNIST_MAX_PIXEL = 255.0
DIGITS_MAX_PIXEL = 16.0


def to_matrices(
    images: np.ndarray,
    targets: np.ndarray,
    max_pixel: float,
    scale_min: float = 0.0,
    scale_max: float = 1.0,
    digit_filter: Optional[Iterable[int]] = None,
    num_classes: int = NUM_CLASSES,
) -> Tuple[Matrix, Matrix]:
    """
    Scales raw pixels and one-hot encodes targets.

    Args:
        images: Raw pixel values (N, F) in [0, max_pixel].
        targets: Integer class of each row (N,).
        max_pixel: Largest raw pixel value.
        scale_min: Value a 0 pixel maps to.
        scale_max: Value a max_pixel pixel maps to.
        digit_filter: Classes to keep; None or empty keeps every row.
        num_classes: Width of the one-hot label matrix.

    Returns:
        (X, y) matrices of shape (kept, F) and (kept, num_classes).

    Raises:
        ValueError: If shapes disagree or no rows survive the filter.
    """
    images = np.asarray(images, dtype=float)
    targets = np.asarray(targets).astype(int)
    if images.ndim != 2 or targets.shape[0] != images.shape[0]:
        raise ValueError(f"Expected (N, F) images and (N,) targets, got {images.shape} and {targets.shape}.")

    digit_filter = list(digit_filter) if digit_filter else []
    if digit_filter:
        keep = np.isin(targets, digit_filter)
        images, targets = images[keep], targets[keep]
    if images.shape[0] == 0:
        raise ValueError(f"No rows left after applying filter {digit_filter}.")

    scaled = images / max_pixel * (scale_max - scale_min) + scale_min
    one_hot = np.zeros((targets.shape[0], num_classes), dtype=float)
    one_hot[np.arange(targets.shape[0]), targets] = 1.0

    logging.info(f"Loaded {images.shape[0]} images in total")
    return Matrix.from_numpy(scaled), Matrix.from_numpy(one_hot)


def load_mnist_csv(path: str, scale_min: float = 0.0, scale_max: float = 1.0,
                   digit_filter: Optional[Iterable[int]] = None) -> Tuple[Matrix, Matrix]:
    """Loads an MNIST CSV file (label, then pixels, no header)."""
    logging.info(f"Reading MNIST data from {path}...")
    frame = pd.read_csv(path, header=None)
    values = frame.values
    return to_matrices(values[:, 1:], values[:, 0], MNIST_MAX_PIXEL, scale_min, scale_max, digit_filter)


def load_mnist(train: bool = True, scale_min: float = 0.0, scale_max: float = 1.0,
               digit_filter: Optional[Iterable[int]] = None, directory: str = MNIST_DIRECTORY,
               data_home: Optional[str] = None) -> Tuple[Matrix, Matrix]:
    """
    Loads the MNIST training (60000 rows) or testing (10000 rows) split.

    Local CSV files in ``directory`` take precedence; otherwise the data is
    fetched (and cached by scikit-learn) from OpenML.
    """
    csv_path = os.path.join(directory, MNIST_TRAIN_FILE if train else MNIST_TEST_FILE)
    if os.path.exists(csv_path):
        return load_mnist_csv(csv_path, scale_min, scale_max, digit_filter)

    from sklearn.datasets import fetch_openml

    logging.info("Fetching mnist_784 from OpenML...")
    X, y = fetch_openml("mnist_784", version=1, return_X_y=True, as_frame=False, data_home=data_home)
    if train:
        X, y = X[:MNIST_TRAIN_SIZE], y[:MNIST_TRAIN_SIZE]
    else:
        X, y = X[MNIST_TRAIN_SIZE:], y[MNIST_TRAIN_SIZE:]
    return to_matrices(X, y.astype(int), MNIST_MAX_PIXEL, scale_min, scale_max, digit_filter)


def load_digits_dataset(train: bool = True, scale_min: float = 0.0, scale_max: float = 1.0,
                        digit_filter: Optional[Iterable[int]] = None, test_size: float = 0.2,
                        random_state: int = 42) -> Tuple[Matrix, Matrix]:
    """Loads the scikit-learn 8x8 digits with a stratified train/test split."""
    from sklearn.datasets import load_digits
    from sklearn.model_selection import train_test_split

    digits = load_digits()
    X_train, X_test, y_train, y_test = train_test_split(
        digits.data, digits.target, test_size=test_size, random_state=random_state, stratify=digits.target
    )
    if train:
        return to_matrices(X_train, y_train, DIGITS_MAX_PIXEL, scale_min, scale_max, digit_filter)
    return to_matrices(X_test, y_test, DIGITS_MAX_PIXEL, scale_min, scale_max, digit_filter)


DATASETS = {
    "mnist": load_mnist,
    "digits": load_digits_dataset,
}


def load_dataset(name: str, train: bool = True, scale_min: float = 0.0, scale_max: float = 1.0,
                 digit_filter: Optional[Iterable[int]] = None) -> Tuple[Matrix, Matrix]:
    """Dispatches to a loader in ``DATASETS`` by name."""
    if name not in DATASETS:
        raise ValueError(f"Unknown dataset '{name}'. Available datasets: {list(DATASETS.keys())}")
    return DATASETS[name](train=train, scale_min=scale_min, scale_max=scale_max, digit_filter=digit_filter)
