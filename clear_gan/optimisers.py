import numpy as np
from typing import Dict, Tuple
import logging
import uuid

from .constants import EPSILON
from .layer import Layer
from .matrix import Matrix


class Optimiser:
    """Base class for parameter-update rules.

    ``update(layer)`` reads ``layer.gradients`` and mutates the matching
    ``layer.parameters`` matrices in place.
    """

    def __init__(self, name: str, learning_rate: float):
        self.name = name
        self.learning_rate = learning_rate

    def update(self, layer: Layer):
        raise NotImplementedError

    @staticmethod
    def _gradients_for(layer: Layer) -> Dict[str, Matrix]:
        """Gradient of every parameter, checked before any parameter is touched."""
        missing = [name for name in layer.parameters if name not in layer.gradients]
        if missing:
            raise RuntimeError(f"Layer {layer.name}: no gradient for {missing}; call backward() before update().")
        return {name: layer.gradients[name] for name in layer.parameters}

    def __repr__(self):
        return f"{self.__class__.__name__}(learning_rate={self.learning_rate})"


class SGD(Optimiser):
    """Plain stochastic gradient descent: w <- w - learning_rate * g."""

    def __init__(self, learning_rate: float = 0.01):
        super().__init__("stochastic gradient descent", learning_rate)

    def update(self, layer: Layer):
        gradients = self._gradients_for(layer)
        lr = self.learning_rate
        for param_name, weights in layer.parameters.items():
            gradient = gradients[param_name]
            updated = Matrix.apply_elementwise(weights, gradient, lambda w, g: w - lr * g)
            weights.data[:] = updated.data
            logging.debug(f"SGD updated {layer.name}.{param_name} {weights.shape}")


class Adam(Optimiser):
    """
    Adam optimiser.

    Keeps first (m) and second (v) moment estimates for every parameter, keyed by
    (layer uid, parameter name) and created lazily as zero matrices. The iteration
    counter t is shared by every layer and parameter this optimiser manages and is
    incremented once per update() call.

        m <- beta1 * m + (1 - beta1) * g
        v <- beta2 * v + (1 - beta2) * g^2
        lr_t <- learning_rate * sqrt(1 - beta2^t) / (1 - beta1^t)
        w <- w - lr_t * m / (sqrt(v) + EPSILON)
    """

    def __init__(self, learning_rate: float = 0.01, beta1: float = 0.9, beta2: float = 0.999):
        super().__init__("adam", learning_rate)
        self.beta1 = beta1
        self.beta2 = beta2
        self.ms: Dict[Tuple[uuid.UUID, str], Matrix] = {}
        self.vs: Dict[Tuple[uuid.UUID, str], Matrix] = {}
        self.iteration = 0

    def update(self, layer: Layer):
        gradients = self._gradients_for(layer)
        self.iteration += 1
        t = self.iteration
        beta1, beta2 = self.beta1, self.beta2
        lr_t = self.learning_rate * np.sqrt(1 - beta2 ** t) / (1 - beta1 ** t)

        for param_name, weights in layer.parameters.items():
            gradient = gradients[param_name]
            key = (layer.uid, param_name)
            if key not in self.ms:
                self.ms[key] = Matrix.zeroes(weights.rows, weights.columns)
                self.vs[key] = Matrix.zeroes(weights.rows, weights.columns)

            m = Matrix.apply_elementwise(self.ms[key], gradient, lambda m, g: beta1 * m + (1 - beta1) * g)
            v = Matrix.apply_elementwise(self.vs[key], gradient, lambda v, g: beta2 * v + (1 - beta2) * g ** 2)
            self.ms[key], self.vs[key] = m, v

            updated = Matrix.apply_elementwise(
                weights, m, v, lambda w, m, v: w - lr_t * m / (np.sqrt(v) + EPSILON)
            )
            weights.data[:] = updated.data

        logging.debug(f"Adam step {t} on layer {layer.name} (lr_t={lr_t:.6g})")

    def __repr__(self):
        return f"Adam(learning_rate={self.learning_rate}, beta1={self.beta1}, beta2={self.beta2})"


# Dictionary mapping optimiser names to their classes
OPTIMISERS = {
    "sgd": SGD,
    "adam": Adam,
}


def get_optimiser(name: str, **kwargs) -> Optimiser:
    """Returns an optimiser instance by name, forwarding kwargs to its constructor.

    Raises:
        ValueError: If the name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in OPTIMISERS:
        raise ValueError(f"Unknown optimiser '{name}'. Available optimisers: {list(OPTIMISERS.keys())}")
    return OPTIMISERS[name_lower](**kwargs)
