"""
Run configuration for the classifier and GAN drivers.

Defaults reproduce the reference runs: a 784-100-10 MNIST classifier trained
for one epoch with batches of 20, and a fully connected GAN trained for 500
epochs with batches of 256 and 100-dimensional noise.
"""

from dataclasses import dataclass, field
from typing import List, Optional

# --- Shared ---
IMAGE_SIZE = 28
NUM_CLASSES = 10

# --- Classifier defaults ---
CLASSIFIER_EPOCHS = 1
CLASSIFIER_BATCH_SIZE = 20
CLASSIFIER_HIDDEN_NEURONS = 100
LOG_EVERY_N_BATCHES = 25

# --- GAN defaults ---
NUM_EPOCHS = 500
BATCH_SIZE = 256
NOISE_DIM = 100
GAN_LEARNING_RATE = 2e-4
GAN_BETA1 = 0.5
GAN_BETA2 = 0.999
LEAKY_RELU_ALPHA = 0.2
SAMPLE_GRID_ROWS = 10
SAMPLE_GRID_COLUMNS = 10


@dataclass
class ClassifierConfig:
    """Settings for one classifier run (see classifier.CLASSIFIER_PRESETS)."""
    preset: str = "tanh_sigmoid_adam"
    dataset: str = "mnist"
    epochs: int = CLASSIFIER_EPOCHS
    batch_size: int = CLASSIFIER_BATCH_SIZE
    hidden_neurons: int = CLASSIFIER_HIDDEN_NEURONS
    log_every: int = LOG_EVERY_N_BATCHES
    digits: Optional[List[int]] = None
    seed: Optional[int] = None


@dataclass
class GANConfig:
    """Settings for one GAN run."""
    dataset: str = "mnist"
    epochs: int = NUM_EPOCHS
    batch_size: int = BATCH_SIZE
    noise_dim: int = NOISE_DIM
    learning_rate: float = GAN_LEARNING_RATE
    beta1: float = GAN_BETA1
    beta2: float = GAN_BETA2
    leaky_relu_alpha: float = LEAKY_RELU_ALPHA
    # Data is scaled into the generator's tanh output range
    scale_min: float = -1.0
    scale_max: float = 1.0
    digits: List[int] = field(default_factory=list)
    sample_grid_rows: int = SAMPLE_GRID_ROWS
    sample_grid_columns: int = SAMPLE_GRID_COLUMNS
    image_folder: Optional[str] = None
    seed: Optional[int] = None
