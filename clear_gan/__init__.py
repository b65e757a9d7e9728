"""
clear_gan: a NumPy-backed, from-scratch feed-forward network engine.

Dense layers, hand-derived backward passes, SGD/Adam, and a Model that can be
trained as a classifier or as one half of a generator/discriminator pair.
"""

from .activations import Activation, LeakyReLU, Sigmoid, Tanh, get_activation
from .constants import EPSILON
from .costs import BinaryCrossEntropy, Cost, MeanSquaredError, get_cost
from .errors import (
    IndexOutOfRangeError,
    InvalidDimensionError,
    InvalidRangeError,
    MatrixError,
    ShapeMismatchError,
    SizeMismatchError,
)
from .gan import GAN, build_discriminator, build_generator
from .layer import DenseLayer, Layer
from .matrix import Matrix
from .model import BatchEndEvent, EpochEndEvent, Model
from .optimisers import SGD, Adam, Optimiser, get_optimiser
from .prng import PRNG, BasicPRNG

__version__ = "0.1.0"
