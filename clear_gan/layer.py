import math
import uuid
from typing import Dict, Optional, Union
import logging

from .activations import Activation, get_activation
from .matrix import Matrix


class Layer:
    """
    Base class for layers with learnable parameters.

    Key Attributes:
        name (str): Display name; several layers may share it.
        uid (uuid.UUID): Unique identity assigned at construction. Optimisers key
                         their per-parameter state on it rather than on ``name``.
        parameters (Dict[str, Matrix]): Learnable parameters by name (e.g. "weights").
        gradients (Dict[str, Matrix]): Gradient of the loss for each parameter, filled by
                                       backward() with exactly the keys of ``parameters``.
        input (Matrix): Input received by the last forward() call.
        output (Matrix): Output produced by the last forward() call.
        input_gradient (Matrix): Gradient with respect to ``input`` from the last backward()
                                 call; this is what gets passed to the previous layer.
    """

    def __init__(self, name: str):
        self.name = name
        self.uid = uuid.uuid4()
        self.parameters: Dict[str, Matrix] = {}
        self.gradients: Dict[str, Matrix] = {}
        self.input: Optional[Matrix] = None
        self.output: Optional[Matrix] = None
        self.input_gradient: Optional[Matrix] = None

    def forward(self, input: Matrix) -> Matrix:
        """Stores the input. Subclasses compute and return ``self.output``."""
        self.input = input
        return input

    def backward(self, gradient: Matrix) -> Matrix:
        """
        Computes parameter gradients and ``input_gradient`` from the upstream gradient.

        Args:
            gradient: Gradient of the loss with respect to this layer's output.

        Returns:
            Gradient of the loss with respect to this layer's input.
        """
        raise NotImplementedError("Each layer must implement its own backward pass.")

    def parameter_count(self) -> int:
        return sum(p.count for p in self.parameters.values())

    def __repr__(self):
        return f"{self.__class__.__name__}(name={self.name!r}, uid={self.uid})"


class DenseLayer(Layer):
    """
    Fully connected layer without a bias term.

    Computes ``output = activation(input @ weights)``. The weight matrix has shape
    (input_dim, output_neurons) and is initialised Glorot-uniform in
    [-sqrt(6 / (input_dim + output_neurons)), +sqrt(...)).
    """

    def __init__(
        self,
        input_dim: int,
        output_neurons: int,
        activation: Union[str, Activation, None] = None,
        name: str = "dense",
    ):
        """
        Args:
            input_dim: Number of input features (size of the previous layer).
            output_neurons: Number of neurons in this layer.
            activation: Activation applied after the weighted sum, given as an
                        Activation instance, a name understood by get_activation(),
                        or None for a purely linear layer.
            name: Display name.
        """
        super().__init__(name)
        self.input_dim = input_dim
        self.output_neurons = output_neurons

        if isinstance(activation, str):
            self.activation: Optional[Activation] = get_activation(activation)
        else:
            self.activation = activation

        # Xavier/Glorot uniform limits: sqrt(6 / (fan_in + fan_out))
        limit = math.sqrt(6.0 / (input_dim + output_neurons))
        self.parameters["weights"] = Matrix.uniform_randomised(-limit, limit, input_dim, output_neurons)

        logging.debug(
            f"Layer {self.name} created: input_dim={input_dim}, output_neurons={output_neurons}, "
            f"activation={self.activation.__class__.__name__ if self.activation else None}, "
            f"glorot_limit={limit:.4f}"
        )

    @property
    def weights(self) -> Matrix:
        return self.parameters["weights"]

    def forward(self, input: Matrix) -> Matrix:
        """
        Forward pass: Z = X @ W followed by A = activation(Z).

        Args:
            input: Input matrix of shape (batch_size, input_dim).

        Returns:
            Output matrix of shape (batch_size, output_neurons).

        Raises:
            ShapeMismatchError: If input.columns != input_dim.
        """
        super().forward(input)  # stores the input
        logging.debug(f"Layer {self.name} forward - input shape: {input.shape}")
        output = input.matrix_multiply(self.weights)
        if self.activation is not None:
            output = self.activation.forward(output)
        self.output = output
        return output

    def backward(self, gradient: Matrix) -> Matrix:
        """
        Backward pass.

        1. dL/dZ = activation.backward(dL/dA) (skipped without an activation)
        2. dL/dX = dL/dZ @ W.T, handed to the previous layer
        3. dL/dW = X.T @ dL/dZ, summed over the batch (not divided by batch size)

        Raises:
            RuntimeError: If forward() hasn't been called.
        """
        if self.input is None:
            raise RuntimeError(f"Layer {self.name}: Must call forward() before backward().")

        if self.activation is not None:
            gradient = self.activation.backward(gradient)

        self.input_gradient = gradient.matrix_multiply(self.weights.transpose())
        self.gradients["weights"] = self.input.transpose().matrix_multiply(gradient)
        logging.debug(f"Layer {self.name} backward - passing gradient shape: {self.input_gradient.shape}")
        return self.input_gradient

    def summary(self) -> str:
        """Returns a string summary of the layer's configuration."""
        return (
            f"Layer Summary ({self.name}):\n"
            f"  Type: Dense\n"
            f"  Input size: {self.input_dim}\n"
            f"  Output size: {self.output_neurons}\n"
            f"  Activation: {self.activation.name if self.activation else 'None'}\n"
            f"  Weights shape: {self.weights.shape}\n"
            f"  Parameters: {self.parameter_count():,} parameters\n"
        )

    def __repr__(self):
        return (f"DenseLayer(name={self.name!r}, input_dim={self.input_dim}, "
                f"output_neurons={self.output_neurons}, "
                f"activation={self.activation.__class__.__name__ if self.activation else None})")
