import numpy as np
import logging

from .constants import EPSILON
from .matrix import Matrix


class Cost:
    """Base class for cost (loss) functions.

    ``forward`` returns the scalar loss as a 1x1 matrix; ``backward`` returns the
    gradient of the loss with respect to the predictions. Costs hold no state.
    """

    def __init__(self, name: str):
        self.name = name

    def forward(self, predictions: Matrix, labels: Matrix) -> Matrix:
        raise NotImplementedError

    def backward(self, predictions: Matrix, labels: Matrix) -> Matrix:
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}(name={self.name!r})"


class MeanSquaredError(Cost):
    """
    Mean Squared Error.

    Loss = (1/N) * Σ(prediction_i - label_i)^2 over every element
    Gradient (dL/dPrediction) = (2/rows) * (prediction - label)
    """

    def __init__(self, name: str = "mean squared error"):
        super().__init__(name)

    def forward(self, predictions: Matrix, labels: Matrix) -> Matrix:
        error_squared = Matrix.apply_elementwise(predictions, labels, lambda p, l: (p - l) ** 2)
        return error_squared.average()

    def backward(self, predictions: Matrix, labels: Matrix) -> Matrix:
        norm = 2.0 / predictions.rows
        return Matrix.apply_elementwise(predictions, labels, lambda p, l: norm * (p - l))


class BinaryCrossEntropy(Cost):
    """
    Binary Cross-Entropy for sigmoid outputs.

    Loss = mean( -(label * log(p) + (1 - label) * log(1 - p)) )
    Gradient (dL/dp) = (p - label) / (p * (1 - p))

    Predictions are clipped into [EPSILON, 1 - EPSILON] in both passes, so neither
    the log nor the gradient's denominator can reach zero. The gradient is not
    divided by the batch size.
    """

    def __init__(self, name: str = "binary cross entropy"):
        super().__init__(name)

    @staticmethod
    def _clip(predictions: Matrix) -> Matrix:
        return Matrix.apply_elementwise(predictions, lambda p: np.clip(p, EPSILON, 1 - EPSILON))

    def forward(self, predictions: Matrix, labels: Matrix) -> Matrix:
        clipped = self._clip(predictions)
        return Matrix.apply_elementwise(
            clipped, labels, lambda c, l: -(l * np.log(c) + (1 - l) * np.log(1 - c))
        ).average()

    def backward(self, predictions: Matrix, labels: Matrix) -> Matrix:
        clipped = self._clip(predictions)
        gradient = Matrix.apply_elementwise(clipped, labels, lambda p, l: (p - l) / (p * (1 - p)))
        logging.debug(f"BCE backward - max |gradient|: {np.max(np.abs(gradient.data)):.4g}")
        return gradient


# Dictionary mapping cost names to their classes
COST_FUNCTIONS = {
    "mse": MeanSquaredError,
    "binary_cross_entropy": BinaryCrossEntropy,
}


def get_cost(name: str) -> Cost:
    """Returns a cost instance by name ('mse' or 'binary_cross_entropy').

    Raises:
        ValueError: If the name is not recognized.
    """
    if name not in COST_FUNCTIONS:
        raise ValueError(f"Unsupported cost '{name}'. "
                         f"Valid options: {list(COST_FUNCTIONS.keys())}")
    return COST_FUNCTIONS[name]()
