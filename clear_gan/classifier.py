"""
MNIST classifiers: one hidden dense layer and a sigmoid output layer trained
with mean squared error against one-hot labels.

Six presets combine a hidden activation (Sigmoid, LeakyReLU(0.05) or Tanh)
with an optimiser (SGD at 0.1, or Adam with beta1 = 0.5). Tanh presets expect
inputs scaled to [-1, 1]; the others to [0, 1].
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np

from .activations import get_activation
from .config import ClassifierConfig, IMAGE_SIZE, NUM_CLASSES
from .console import batch_end_logger, epoch_end_logger
from .costs import MeanSquaredError
from .datasets import load_dataset
from .layer import DenseLayer
from .matrix import Matrix
from .model import Model
from .optimisers import get_optimiser
from .prng import PRNG


@dataclass(frozen=True)
class ClassifierPreset:
    description: str
    hidden_activation: str
    optimiser: str
    learning_rate: float
    hidden_activation_kwargs: Dict[str, float] = field(default_factory=dict)
    optimiser_kwargs: Dict[str, float] = field(default_factory=dict)
    scale_min: float = 0.0
    scale_max: float = 1.0


CLASSIFIER_PRESETS: Dict[str, ClassifierPreset] = {
    "sigmoid_sigmoid_sgd": ClassifierPreset(
        "Two Sigmoid, Mean Squared Error, and Stochastic Gradient Descent.",
        "sigmoid", "sgd", 0.1),
    "leaky_relu_sigmoid_sgd": ClassifierPreset(
        "LeakyReLU, Sigmoid, Mean Squared Error, and Stochastic Gradient Descent.",
        "leaky_relu", "sgd", 0.1, hidden_activation_kwargs={"alpha": 0.05}),
    "tanh_sigmoid_sgd": ClassifierPreset(
        "TanH, Sigmoid, Mean Squared Error, and Stochastic Gradient Descent.",
        "tanh", "sgd", 0.1, scale_min=-1.0),
    "sigmoid_sigmoid_adam": ClassifierPreset(
        "Two Sigmoid, Mean Squared Error, and Adam.",
        "sigmoid", "adam", 2e-2, optimiser_kwargs={"beta1": 0.5}),
    "leaky_relu_sigmoid_adam": ClassifierPreset(
        "LeakyReLU, Sigmoid, Mean Squared Error, and Adam.",
        "leaky_relu", "adam", 2e-3, hidden_activation_kwargs={"alpha": 0.05}, optimiser_kwargs={"beta1": 0.5}),
    "tanh_sigmoid_adam": ClassifierPreset(
        "TanH, Sigmoid, Mean Squared Error, and Adam.",
        "tanh", "adam", 2e-3, optimiser_kwargs={"beta1": 0.5}, scale_min=-1.0),
}


def build_classifier(preset: ClassifierPreset, input_dim: int = IMAGE_SIZE * IMAGE_SIZE,
                     hidden_neurons: int = 100, num_classes: int = NUM_CLASSES) -> Model:
    optimiser = get_optimiser(preset.optimiser, learning_rate=preset.learning_rate, **preset.optimiser_kwargs)
    model = Model(optimiser, MeanSquaredError())
    model.add(DenseLayer(input_dim, hidden_neurons,
                         get_activation(preset.hidden_activation, **preset.hidden_activation_kwargs),
                         name="hidden"))
    model.add(DenseLayer(hidden_neurons, num_classes, get_activation("sigmoid"), name="output"))
    return model


def evaluate_accuracy(model: Model, X: Matrix, y: Matrix) -> float:
    """Fraction of rows whose highest prediction matches the highest label."""
    predictions = model.predict(X).to_numpy()
    predicted_labels = np.argmax(predictions, axis=1)
    actual_labels = np.argmax(y.to_numpy(), axis=1)
    return float(np.mean(predicted_labels == actual_labels))


def run_classifier(config: ClassifierConfig,
                   data: Optional[Tuple[Matrix, Matrix, Matrix, Matrix]] = None) -> Tuple[Model, float]:
    """
    Builds, trains and evaluates the classifier selected by ``config.preset``.

    Args:
        config: Run settings.
        data: Optional (X_train, y_train, X_test, y_test), already scaled for the
              preset. Loaded from ``config.dataset`` when omitted.

    Returns:
        The trained model and its test accuracy.
    """
    if config.preset not in CLASSIFIER_PRESETS:
        raise ValueError(f"Unknown preset '{config.preset}'. Available presets: {list(CLASSIFIER_PRESETS.keys())}")
    preset = CLASSIFIER_PRESETS[config.preset]
    logger = logging.getLogger("Classifier")
    logger.info(preset.description)

    PRNG.seed_basic(config.seed)

    if data is None:
        X_train, y_train = load_dataset(config.dataset, True, preset.scale_min, preset.scale_max, config.digits)
        X_test, y_test = load_dataset(config.dataset, False, preset.scale_min, preset.scale_max, config.digits)
    else:
        X_train, y_train, X_test, y_test = data

    model = build_classifier(preset, X_train.columns, config.hidden_neurons, y_train.columns)
    logger.debug(model.summary())

    logger.info("Training...")
    on_batch_end = batch_end_logger(config.log_every, logger)
    on_epoch_end = epoch_end_logger(logger)
    model.add_batch_end_listener(on_batch_end)
    model.add_epoch_end_listener(on_epoch_end)
    try:
        model.train(X_train, y_train, config.epochs, config.batch_size)
    finally:
        model.remove_batch_end_listener(on_batch_end)
        model.remove_epoch_end_listener(on_epoch_end)
    logger.info("Completed.")

    logger.info("Evaluating...")
    accuracy = evaluate_accuracy(model, X_test, y_test)
    logger.info(f"Completed: {accuracy}.")
    return model, accuracy
