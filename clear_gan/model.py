import numpy as np
from dataclasses import dataclass
from typing import Callable, List
import logging
import time

from .costs import Cost
from .errors import ShapeMismatchError
from .layer import Layer
from .matrix import Matrix
from .optimisers import Optimiser


@dataclass(frozen=True)
class BatchEndEvent:
    """Raised after every training batch. Batches are numbered from 1 within an epoch."""
    epoch: int
    batch: int
    loss: float

    def __str__(self):
        return f"Epoch {self.epoch} Batch {self.batch} Loss {self.loss}."


@dataclass(frozen=True)
class EpochEndEvent:
    """Raised after every epoch with the rounded mean batch loss."""
    epoch: int
    loss: float

    def __str__(self):
        return f"Epoch {self.epoch} Loss {self.loss}"


BatchEndListener = Callable[[BatchEndEvent], None]
EpochEndListener = Callable[[EpochEndEvent], None]


class Model:
    """
    A feed-forward network: an ordered stack of layers, a cost and an optimiser.

    Manages the forward pass, the backward pass (backpropagation), mini-batch
    training and progress notifications. Listeners registered with
    add_batch_end_listener / add_epoch_end_listener are called synchronously.
    """

    def __init__(self, optimiser: Optimiser, cost: Cost):
        self.layers: List[Layer] = []
        self.optimiser = optimiser
        self.cost = cost
        self.training_loss: List[float] = []
        self._batch_end_listeners: List[BatchEndListener] = []
        self._epoch_end_listeners: List[EpochEndListener] = []

        logging.info(f"Created model with optimiser={optimiser!r}, cost={cost.name}")

    def add(self, layer: Layer) -> "Model":
        """Appends a layer; insertion order is network order."""
        self.layers.append(layer)
        logging.debug(f"Added layer #{len(self.layers) - 1}: {layer!r}")
        return self

    # --- Listeners ---

    def add_batch_end_listener(self, listener: BatchEndListener):
        self._batch_end_listeners.append(listener)

    def remove_batch_end_listener(self, listener: BatchEndListener):
        self._batch_end_listeners.remove(listener)

    def add_epoch_end_listener(self, listener: EpochEndListener):
        self._epoch_end_listeners.append(listener)

    def remove_epoch_end_listener(self, listener: EpochEndListener):
        self._epoch_end_listeners.remove(listener)

    # --- Passes ---

    def forward(self, input: Matrix) -> Matrix:
        """
        Performs a forward pass through all layers of the network.

        Args:
            input: Input matrix of shape (batch_size, input_dim).

        Returns:
            Output of the last layer, shape (batch_size, output_dim).
        """
        if not self.layers:
            raise RuntimeError("Model has no layers.")
        current_output = input
        for i, layer in enumerate(self.layers):
            current_output = layer.forward(current_output)
            logging.debug(f"Forward pass - Layer {i} output shape: {current_output.shape}")
        return current_output

    def predict(self, input: Matrix) -> Matrix:
        """Alias for forward(); it updates the same per-layer caches."""
        return self.forward(input)

    def backward(self, cost_gradient: Matrix) -> Matrix:
        """
        Performs a backward pass (backpropagation) through all layers.

        Each layer receives the input gradient produced by the layer after it.

        Args:
            cost_gradient: Gradient of the cost with respect to the network's output.

        Returns:
            Input gradient of the first layer (dL/dInput of the whole network).
        """
        current_gradient = cost_gradient
        for i in range(len(self.layers) - 1, -1, -1):
            current_gradient = self.layers[i].backward(current_gradient)
            logging.debug(f"Backward pass - Layer {i} passing gradient shape: {current_gradient.shape}")
        return current_gradient

    def update(self):
        """Applies the optimiser to every layer in forward order."""
        for layer in self.layers:
            self.optimiser.update(layer)

    # --- Training ---

    def train_batch(self, x_batch: Matrix, y_batch: Matrix) -> float:
        """
        Forward, cost, backward and update for a single batch.

        Returns:
            The unrounded cost for this batch.
        """
        predictions = self.forward(x_batch)
        loss = self.cost.forward(predictions, y_batch)[0]
        gradient = self.cost.backward(predictions, y_batch)
        self.backward(gradient)
        self.update()
        return loss

    def train(self, training_data: Matrix, labels: Matrix, epochs: int, batch_size: int) -> List[float]:
        """
        Trains the network with mini-batches taken in data order.

        The data is not shuffled here; call ``shuffle_rows`` beforehand if wanted
        (on a combined data/label matrix, so rows stay paired). A final batch
        smaller than ``batch_size`` is dropped.

        Args:
            training_data: Inputs (num_samples, input_dim).
            labels: Targets (num_samples, output_dim).
            epochs: Number of passes over the data.
            batch_size: Rows per batch.

        Returns:
            The per-epoch mean losses accumulated so far (``training_loss``).

        Raises:
            ShapeMismatchError: If data and labels have different row counts.
            ValueError: If not even one full batch fits in the data.
        """
        if labels.rows != training_data.rows:
            raise ShapeMismatchError(
                f"Number of samples in data ({training_data.rows}) and labels ({labels.rows}) must match."
            )
        if not training_data.can_slice_rows(0, batch_size):
            raise ValueError(f"batch_size {batch_size} does not fit {training_data.rows} training rows.")

        logging.info(f"Training on {training_data.rows} samples for {epochs} epochs, batch size {batch_size}.")
        for epoch in range(1, epochs + 1):
            epoch_start_time = time.time()
            epoch_loss = self._train_batches(training_data, labels, batch_size, epoch)
            self.training_loss.append(epoch_loss)

            event = EpochEndEvent(epoch, epoch_loss)
            for listener in list(self._epoch_end_listeners):
                listener(event)
            logging.debug(f"Epoch {epoch} took {time.time() - epoch_start_time:.2f}s")

        logging.info("Training finished.")
        return self.training_loss

    def _train_batches(self, training_data: Matrix, labels: Matrix, batch_size: int, epoch: int) -> float:
        current_index = 0
        current_batch = 1
        batch_losses: List[float] = []

        while training_data.can_slice_rows(current_index, batch_size):
            x_train = training_data.slice_rows(current_index, batch_size)
            y_train = labels.slice_rows(current_index, batch_size)

            loss = self.train_batch(x_train, y_train)
            batch_losses.append(loss)

            event = BatchEndEvent(epoch, current_batch, round(loss, 3))
            for listener in list(self._batch_end_listeners):
                listener(event)

            current_index += batch_size
            current_batch += 1

        return round(float(np.mean(batch_losses)), 3)

    def summary(self) -> str:
        """
        Generates a text summary of the network architecture and parameters.
        """
        summary_str = "\n" + "=" * 50 + "\n"
        summary_str += "Model Summary\n"
        summary_str += "=" * 50 + "\n"
        total_params = 0
        for i, layer in enumerate(self.layers):
            layer_params = layer.parameter_count()
            total_params += layer_params
            summary_str += f"Layer {i}: {layer!r}\n"
            for param_name, param in layer.parameters.items():
                summary_str += f"  {param_name}: {param.rows}x{param.columns}\n"
            summary_str += f"  Parameters: {layer_params}\n"
            summary_str += "-" * 50 + "\n"
        summary_str += f"Cost: {self.cost.name}\n"
        summary_str += f"Optimiser: {self.optimiser.name}\n"
        summary_str += f"Total Parameters: {total_params}\n"
        summary_str += "=" * 50 + "\n"
        return summary_str
