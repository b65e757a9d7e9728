import os

import matplotlib.pyplot as plt
import numpy as np
import pytest

from clear_gan.activations import LeakyReLU, Sigmoid, Tanh
from clear_gan.config import GANConfig
from clear_gan.costs import BinaryCrossEntropy
from clear_gan.gan import GAN, REAL_LABEL, build_discriminator, build_generator, run_gan
from clear_gan.layer import DenseLayer
from clear_gan.matrix import Matrix
from clear_gan.model import Model
from clear_gan.optimisers import Adam

NOISE_DIM = 3
PIXELS = 4


def small_gan(prng=None):
    generator = Model(Adam(0.01), BinaryCrossEntropy())
    generator.add(DenseLayer(NOISE_DIM, 5, LeakyReLU(0.2)))
    generator.add(DenseLayer(5, PIXELS, Tanh()))
    discriminator = Model(Adam(0.01), BinaryCrossEntropy())
    discriminator.add(DenseLayer(PIXELS, 3, LeakyReLU(0.2)))
    discriminator.add(DenseLayer(3, 1, Sigmoid()))
    return GAN(generator, discriminator, NOISE_DIM, prng=prng)


def real_images(rows=8):
    return Matrix.uniform_randomised(-1.0, 1.0, rows, PIXELS)


def weights_of(model):
    return [layer.weights.copy() for layer in model.layers]


def test_separate_optimisers_required():
    shared = Adam()
    generator = Model(shared, BinaryCrossEntropy()).add(DenseLayer(NOISE_DIM, PIXELS))
    discriminator = Model(shared, BinaryCrossEntropy()).add(DenseLayer(PIXELS, 1))
    with pytest.raises(ValueError):
        GAN(generator, discriminator, NOISE_DIM)


def test_noise_shape_and_distribution():
    noise = small_gan().noise(500)
    assert noise.shape == (500, NOISE_DIM)
    assert abs(float(np.mean(noise.data))) < 0.15


def test_real_batch_labels_and_start(fixed_int_prng):
    gan = small_gan(prng=fixed_int_prng)
    x = Matrix.from_data(range(8 * PIXELS), 8, PIXELS)
    images, labels = gan.real_batch(x, 3)
    assert fixed_int_prng.calls == [(0, 5)]
    assert images == x.slice_rows(0, 3)
    assert labels.shape == (3, 1)
    assert list(labels.data) == [REAL_LABEL] * 3


def test_real_batch_of_every_row(fixed_int_prng):
    gan = small_gan(prng=fixed_int_prng)
    x = real_images(4)
    images, _ = gan.real_batch(x, 4)
    assert fixed_int_prng.calls == [(0, 1)]
    assert images == x


def test_fake_batch_labels():
    images, labels = small_gan().fake_batch(6)
    assert images.shape == (6, PIXELS)
    assert np.all(np.abs(images.data) <= 1.0)
    assert list(labels.data) == [0.0] * 6


def test_discriminator_step_leaves_generator_alone():
    gan = small_gan()
    generator_before = weights_of(gan.generator)
    discriminator_before = weights_of(gan.discriminator)

    loss = gan.train_discriminator(real_images(), 4)

    assert loss > 0
    assert weights_of(gan.generator) == generator_before
    assert gan.generator.optimiser.iteration == 0
    # One real and one fake update, each touching both layers
    assert gan.discriminator.optimiser.iteration == 4
    assert weights_of(gan.discriminator) != discriminator_before


def test_generator_step_leaves_discriminator_alone():
    gan = small_gan()
    generator_before = weights_of(gan.generator)
    discriminator_before = weights_of(gan.discriminator)

    loss = gan.train_generator(4)

    assert loss > 0
    assert weights_of(gan.discriminator) == discriminator_before
    assert gan.discriminator.optimiser.iteration == 0
    assert gan.generator.optimiser.iteration == 2
    assert all(after != before for after, before in zip(weights_of(gan.generator), generator_before))


def test_generator_step_changes_output_for_same_noise():
    gan = small_gan()
    noise = gan.noise(4)
    before = gan.generator.forward(noise)
    scores_before = gan.discriminator.forward(before)

    gan.train_generator(4)

    assert gan.generator.forward(noise) != before
    # discriminator unchanged: same images score the same
    assert gan.discriminator.forward(before) == scores_before


def test_generator_gradient_comes_through_discriminator():
    gan = small_gan()
    gan.train_generator(4)
    first_discriminator_layer = gan.discriminator.layers[0]
    last_generator_layer = gan.generator.layers[-1]
    assert first_discriminator_layer.input_gradient.shape == (4, PIXELS)
    assert last_generator_layer.output.shape == (4, PIXELS)


def test_train_step_returns_both_losses():
    gan = small_gan()
    d_loss, g_loss = gan.train_step(real_images(), 4)
    assert d_loss > 0
    assert g_loss > 0
    assert gan.discriminator.optimiser.iteration == 4
    assert gan.generator.optimiser.iteration == 2


def test_train_history_and_callback():
    gan = small_gan()
    seen = []
    history = gan.train(real_images(10), epochs=3, batch_size=4,
                        on_epoch_end=lambda epoch, trained: seen.append((epoch, trained)))
    assert [epoch for epoch, _ in seen] == [1, 2, 3]
    assert all(trained is gan for _, trained in seen)
    assert len(history['discriminator_loss']) == 3
    assert len(history['generator_loss']) == 3
    # ceil(10 / 4) = 3 steps per epoch, two generator layers per step
    assert gan.generator.optimiser.iteration == 3 * 3 * 2


def test_train_shuffles_rows_in_place():
    gan = small_gan()
    x = Matrix.from_data(range(40), 10, PIXELS)
    gan.train(x, epochs=1, batch_size=4)
    rows = x.to_numpy()
    assert sorted(rows[:, 0].tolist()) == list(range(0, 40, 4))
    assert rows[:, 0].tolist() != list(range(0, 40, 4))


def test_train_rejects_bad_batch_sizes():
    gan = small_gan()
    with pytest.raises(ValueError):
        gan.train(real_images(4), epochs=1, batch_size=1)
    with pytest.raises(ValueError):
        gan.train(real_images(2), epochs=1, batch_size=8)


def test_save_example_images(tmp_path):
    gan = small_gan()
    filename = str(tmp_path / "samples" / "1.png")
    gan.save_example_images(filename, grid_rows=2, grid_columns=3, image_size=2)
    assert os.path.exists(filename)
    # cells are image_size + 2 pixels
    assert plt.imread(filename).shape[:2] == (8, 12)


def test_builders():
    generator = build_generator(Adam(), noise_dim=10, image_pixels=16)
    assert [layer.weights.shape for layer in generator.layers] == [(10, 256), (256, 512), (512, 1024), (1024, 16)]
    assert isinstance(generator.layers[-1].activation, Tanh)
    assert all(isinstance(layer.activation, LeakyReLU) for layer in generator.layers[:-1])
    assert generator.layers[0].activation.alpha == 0.2

    discriminator = build_discriminator(Adam(), image_pixels=16)
    assert [layer.weights.shape for layer in discriminator.layers] == [(16, 512), (512, 256), (256, 1)]
    assert isinstance(discriminator.layers[-1].activation, Sigmoid)
    assert isinstance(discriminator.cost, BinaryCrossEntropy)


def test_run_gan_writes_an_image_per_epoch(tmp_path):
    image_folder = tmp_path / "images"
    config = GANConfig(epochs=2, batch_size=4, noise_dim=5, sample_grid_rows=2, sample_grid_columns=2,
                       image_folder=str(image_folder), seed=3)
    gan = run_gan(config, Matrix.uniform_randomised(-1.0, 1.0, 6, 16))

    assert sorted(os.listdir(image_folder)) == ["1.png", "2.png"]
    assert len(gan.history['generator_loss']) == 2
    assert gan.generator.optimiser is not gan.discriminator.optimiser
    assert gan.generator.optimiser.learning_rate == config.learning_rate
    assert gan.generator.optimiser.beta1 == config.beta1


def test_run_gan_needs_square_images(tmp_path):
    config = GANConfig(epochs=1, batch_size=4, image_folder=str(tmp_path))
    with pytest.raises(ValueError):
        run_gan(config, Matrix.ones(6, 15))
