"""
Adversarial training of two fully connected models.

The generator maps normal noise to flattened images; the discriminator maps
images to a single sigmoid "is real" score. Each training step:

1. Trains the discriminator on a random slice of real images labelled
   ``REAL_LABEL`` (0.9, a soft label that keeps the discriminator from becoming
   over-confident), then on freshly generated images labelled 0. These are two
   independent forward/cost/backward/update cycles.
2. Trains the generator: noise goes through the generator and then the
   discriminator, the cost is taken against all-ones ("fool the
   discriminator"), the discriminator runs its backward pass only to produce
   the gradient with respect to its input, and that gradient (the first
   discriminator layer's ``input_gradient``) is fed into the generator's
   backward pass. Only the generator's optimiser runs in this half.
"""

import math
import os
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .activations import LeakyReLU, Sigmoid, Tanh
from .config import GANConfig, IMAGE_SIZE
from .costs import BinaryCrossEntropy
from .imaging import rescale, tile_samples, write_image
from .layer import DenseLayer
from .matrix import Matrix
from .model import Model
from .optimisers import Adam, Optimiser
from .prng import PRNG

REAL_LABEL = 0.9
FAKE_LABEL = 0.0


def build_generator(optimiser: Optimiser, noise_dim: int = 100, image_pixels: int = IMAGE_SIZE * IMAGE_SIZE,
                    alpha: float = 0.2) -> Model:
    """noise_dim -> 256 -> 512 -> 1024 -> image_pixels, tanh output centred on 0 like the data."""
    generator = Model(optimiser, BinaryCrossEntropy())
    generator.add(DenseLayer(noise_dim, 256, LeakyReLU(alpha), name="generator_1"))
    generator.add(DenseLayer(256, 512, LeakyReLU(alpha), name="generator_2"))
    generator.add(DenseLayer(512, 1024, LeakyReLU(alpha), name="generator_3"))
    generator.add(DenseLayer(1024, image_pixels, Tanh(), name="generator_out"))
    return generator


def build_discriminator(optimiser: Optimiser, image_pixels: int = IMAGE_SIZE * IMAGE_SIZE,
                        alpha: float = 0.2) -> Model:
    """image_pixels -> 512 -> 256 -> 1, sigmoid output."""
    discriminator = Model(optimiser, BinaryCrossEntropy())
    discriminator.add(DenseLayer(image_pixels, 512, LeakyReLU(alpha), name="discriminator_1"))
    discriminator.add(DenseLayer(512, 256, LeakyReLU(alpha), name="discriminator_2"))
    discriminator.add(DenseLayer(256, 1, Sigmoid(), name="discriminator_out"))
    return discriminator


class GAN:
    """
    Alternating generator/discriminator training.

    The two models must not share an optimiser instance: Adam's moment state and
    iteration counter belong to exactly one network.
    """

    def __init__(self, generator: Model, discriminator: Model, noise_dim: int,
                 prng: Optional[PRNG] = None, real_label: float = REAL_LABEL):
        if generator.optimiser is discriminator.optimiser:
            raise ValueError("Generator and discriminator need separate optimiser instances.")
        self.generator = generator
        self.discriminator = discriminator
        self.noise_dim = noise_dim
        self.prng = prng or PRNG.basic()
        self.real_label = real_label
        self.history: Dict[str, List[float]] = {'discriminator_loss': [], 'generator_loss': []}

    def noise(self, count: int) -> Matrix:
        return Matrix.normal_randomised(0.0, 1.0, count, self.noise_dim, prng=self.prng)

    def real_batch(self, x_train: Matrix, count: int) -> Tuple[Matrix, Matrix]:
        """A contiguous slice of real images from a random start, labelled ``real_label``."""
        start_idx = self.prng.uniform_int(0, max(x_train.rows - count, 1))
        images = x_train.slice_rows(start_idx, count)
        labels = Matrix.filled(self.real_label, count, 1)
        return images, labels

    def fake_batch(self, count: int) -> Tuple[Matrix, Matrix]:
        """Freshly generated images labelled 0."""
        images = self.generator.predict(self.noise(count))
        labels = Matrix.filled(FAKE_LABEL, count, 1)
        return images, labels

    def train_discriminator(self, x_train: Matrix, half_batch: int) -> float:
        """One real and one fake update of the discriminator; returns their mean loss."""
        real_images, real_labels = self.real_batch(x_train, half_batch)
        real_loss = self.discriminator.train_batch(real_images, real_labels)

        fake_images, fake_labels = self.fake_batch(half_batch)
        fake_loss = self.discriminator.train_batch(fake_images, fake_labels)

        return (real_loss + fake_loss) / 2.0

    def train_generator(self, batch_size: int) -> float:
        """
        One generator update through the (frozen) discriminator.

        The discriminator's backward pass runs, refreshing its gradients as a side
        effect, but its optimiser is never called here.
        """
        noise = self.noise(batch_size)
        forged_labels = Matrix.ones(batch_size, 1)

        generator_forward = self.generator.forward(noise)
        combined_forward = self.discriminator.forward(generator_forward)
        combined_loss = self.discriminator.cost.forward(combined_forward, forged_labels)[0]

        self.discriminator.backward(self.discriminator.cost.backward(combined_forward, forged_labels))
        self.generator.backward(self.discriminator.layers[0].input_gradient)
        self.generator.update()
        return combined_loss

    def train_step(self, x_train: Matrix, batch_size: int) -> Tuple[float, float]:
        """Discriminator half-batch training followed by one generator update."""
        discriminator_loss = self.train_discriminator(x_train, batch_size // 2)
        generator_loss = self.train_generator(batch_size)
        return discriminator_loss, generator_loss

    def train(self, x_train: Matrix, epochs: int, batch_size: int,
              on_epoch_end: Optional[Callable[[int, "GAN"], None]] = None) -> Dict[str, List[float]]:
        """
        Runs ``epochs`` epochs of ceil(rows / batch_size) steps each.

        ``x_train`` is shuffled in place at the start of every epoch.

        Returns:
            Per-epoch mean discriminator and generator losses.
        """
        if batch_size < 2:
            raise ValueError(f"batch_size must be at least 2 to split real/fake halves, got {batch_size}.")
        if x_train.rows < batch_size // 2:
            raise ValueError(f"Need at least {batch_size // 2} training rows, got {x_train.rows}.")

        batch_count = math.ceil(x_train.rows / batch_size)
        for epoch in range(1, epochs + 1):
            logging.info(f"Starting Epoch {epoch}")
            x_train.shuffle_rows(self.prng)
            logging.debug("Shuffled training data...")

            d_losses, g_losses = [], []
            for step in range(1, batch_count + 1):
                d_loss, g_loss = self.train_step(x_train, batch_size)
                d_losses.append(d_loss)
                g_losses.append(g_loss)
                logging.info(f"Epoch {epoch} Step {step} of {batch_count} - "
                             f"Discriminator Loss {d_loss:.3f} - Generator Loss {g_loss:.3f}")

            self.history['discriminator_loss'].append(float(np.mean(d_losses)))
            self.history['generator_loss'].append(float(np.mean(g_losses)))
            if on_epoch_end is not None:
                on_epoch_end(epoch, self)

        return self.history

    def save_example_images(self, filename: str, grid_rows: int = 10, grid_columns: int = 10,
                            value_range: Tuple[float, float] = (-1.0, 1.0), image_size: int = IMAGE_SIZE):
        """Generates a grid of samples and writes it as a grey-scale image."""
        created_images, _ = self.fake_batch(grid_rows * grid_columns)
        grid = tile_samples(created_images, grid_rows, grid_columns, image_size=image_size)
        write_image(rescale(grid, *value_range), filename)


def create_image_folder(root: str = ".") -> str:
    """Creates (if needed) and returns a folder named after the current local time."""
    image_folder = os.path.join(root, datetime.now().strftime("%Y-%m-%d-%H-%M-%S"))
    os.makedirs(image_folder, exist_ok=True)
    return image_folder


def run_gan(config: GANConfig, x_train: Matrix) -> GAN:
    """
    Builds both networks from ``config`` and trains them on ``x_train``.

    ``x_train`` must already be scaled to the generator's output range. A sample
    grid is written to ``<image_folder>/<epoch>.png`` after every epoch.
    """
    PRNG.seed_basic(config.seed)
    prng = PRNG.basic()
    image_pixels = x_train.columns
    image_size = int(round(math.sqrt(image_pixels)))
    if image_size * image_size != image_pixels:
        raise ValueError(f"Training rows must be square images, got {image_pixels} values per row.")

    generator = build_generator(Adam(config.learning_rate, config.beta1, config.beta2),
                                config.noise_dim, image_pixels, config.leaky_relu_alpha)
    discriminator = build_discriminator(Adam(config.learning_rate, config.beta1, config.beta2),
                                        image_pixels, config.leaky_relu_alpha)
    gan = GAN(generator, discriminator, config.noise_dim, prng=prng)

    image_folder = config.image_folder or create_image_folder()
    logging.info(f"Example generated images will be written into '{image_folder}' at the end of each epoch.")

    def save_epoch_images(epoch: int, trained: GAN):
        trained.save_example_images(
            os.path.join(image_folder, f"{epoch}.png"),
            config.sample_grid_rows,
            config.sample_grid_columns,
            value_range=(config.scale_min, config.scale_max),
            image_size=image_size,
        )

    gan.train(x_train, config.epochs, config.batch_size, on_epoch_end=save_epoch_images)
    return gan
