import numpy as np
from typing import Optional
import logging

from .matrix import Matrix


class Activation:
    """Base class for all activation functions.

    An activation is applied by a layer after its weighted sum. ``forward`` caches
    its output, which ``backward`` uses to turn the upstream gradient into the
    gradient with respect to the activation's input.
    """

    def __init__(self, name: str):
        self.name = name
        self.input: Optional[Matrix] = None
        self.output: Optional[Matrix] = None
        self.input_gradient: Optional[Matrix] = None

    def forward(self, input: Matrix) -> Matrix:
        """Compute the activation of `input` and cache the result.

        Args:
            input: Pre-activation values (batch_size, neurons).

        Returns:
            Activated output of the same shape.
        """
        raise NotImplementedError

    def backward(self, gradient: Matrix) -> Matrix:
        """Compute dLoss/dInput from dLoss/dOutput using the cached output.

        Args:
            gradient: Gradient of the loss with respect to this activation's output.

        Returns:
            Gradient of the loss with respect to this activation's input.

        Raises:
            RuntimeError: If forward() has not been called yet.
        """
        raise NotImplementedError

    def _require_output(self) -> Matrix:
        if self.output is None:
            raise RuntimeError(f"Activation {self.name}: Must call forward() before backward().")
        return self.output

    def __repr__(self):
        return f"{self.__class__.__name__}(name={self.name!r})"


class LeakyReLU(Activation):
    """Leaky Rectified Linear Unit activation function.

    Mathematical form:
        forward: f(x) = x if x > 0 else alpha * x
        backward: f'(x) = 1 if f(x) > 0 else alpha
    """

    def __init__(self, alpha: float = 0.0, name: str = "relu"):
        super().__init__(f"{name} ({alpha})")
        self.alpha = alpha

    def forward(self, input: Matrix) -> Matrix:
        """Compute LeakyReLU activation"""
        logging.debug(f"LeakyReLU forward - input shape: {input.shape}")
        self.input = input
        alpha = self.alpha
        self.output = Matrix.apply_elementwise(input, lambda i: np.where(i > 0, i, i * alpha))
        return self.output

    def backward(self, gradient: Matrix) -> Matrix:
        """Compute LeakyReLU derivative from the cached output"""
        output = self._require_output()
        alpha = self.alpha
        self.input_gradient = Matrix.apply_elementwise(
            gradient, output, lambda g, o: g * np.where(o > 0, 1.0, alpha)
        )
        logging.debug(f"LeakyReLU backward - gradient shape: {self.input_gradient.shape}")
        return self.input_gradient


class Sigmoid(Activation):
    """Sigmoid activation function.

    Mathematical form:
        forward: f(x) = e^x / (1 + e^x)
        backward: f'(x) = f(x) * (1 - f(x))
    """

    def __init__(self, name: str = "sigmoid"):
        super().__init__(name)

    def forward(self, input: Matrix) -> Matrix:
        """Compute sigmoid activation with clipping for numerical stability."""
        logging.debug(f"Sigmoid forward - input shape: {input.shape}")
        self.input = input
        # Clip input so exp(x) cannot overflow to inf (inf / inf is nan)
        exp = Matrix.apply_elementwise(input, lambda i: np.exp(np.clip(i, -500, 500)))
        self.output = Matrix.apply_elementwise(exp, lambda ex: ex / (1 + ex))
        return self.output

    def backward(self, gradient: Matrix) -> Matrix:
        """Compute sigmoid derivative using the activation's output."""
        output = self._require_output()
        self.input_gradient = Matrix.apply_elementwise(gradient, output, lambda g, o: g * o * (1 - o))
        logging.debug(f"Sigmoid backward - gradient shape: {self.input_gradient.shape}")
        return self.input_gradient


class Tanh(Activation):
    """Hyperbolic tangent activation function.

    Mathematical form:
        forward: f(x) = tanh(x) = (e^x - e^-x)/(e^x + e^-x)
        backward: f'(x) = 1 - tanh^2(x)
    """

    def __init__(self, name: str = "tanh"):
        super().__init__(name)

    def forward(self, input: Matrix) -> Matrix:
        """Compute tanh activation"""
        logging.debug(f"Tanh forward - input shape: {input.shape}")
        self.input = input
        self.output = Matrix.apply_elementwise(input, np.tanh)
        return self.output

    def backward(self, gradient: Matrix) -> Matrix:
        """Compute tanh derivative: 1 - tanh^2(x)"""
        output = self._require_output()
        self.input_gradient = Matrix.apply_elementwise(gradient, output, lambda g, o: g * (1 - o ** 2))
        logging.debug(f"Tanh backward - gradient shape: {self.input_gradient.shape}")
        return self.input_gradient


# Dictionary mapping activation function names to their classes
ACTIVATION_FUNCTIONS = {
    'leaky_relu': LeakyReLU,
    'sigmoid': Sigmoid,
    'tanh': Tanh,
}


def get_activation(name: str, **kwargs) -> Activation:
    """Factory function to get an activation function instance by name.

    Args:
        name: Name of the activation function (case-insensitive).
        **kwargs: Additional arguments to pass to the activation function's constructor
                  (e.g., 'alpha' for LeakyReLU).

    Returns:
        An instance of the requested Activation class.

    Raises:
        ValueError: If the activation function name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in ACTIVATION_FUNCTIONS:
        raise ValueError(
            f"Unknown activation function '{name}'. "
            f"Available functions: {list(ACTIVATION_FUNCTIONS.keys())}"
        )
    return ACTIVATION_FUNCTIONS[name_lower](**kwargs)
