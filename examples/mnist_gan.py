"""
MNIST GAN - Adversarial Training Example

Trains a fully connected generator/discriminator pair on MNIST digits and
writes a 10x10 grid of generated digits to ``<image-folder>/<epoch>.png`` after
every epoch. Training on every digit takes a *long* time; restricting the run
to one or two digits with ``--digits`` is much quicker.

Usage:
    python examples/mnist_gan.py --digits 3 --epochs 20
"""

import argparse
import logging

import matplotlib
matplotlib.use("Agg")

from clear_gan.config import GANConfig, BATCH_SIZE, NUM_EPOCHS, NOISE_DIM, GAN_LEARNING_RATE
from clear_gan.console import configure_logging, parse_digit_filter, render_digit_as_text
from clear_gan.datasets import load_dataset
from clear_gan.gan import run_gan
from clear_gan.imaging import plot_training_loss
from clear_gan.prng import PRNG


def parse_args():
    parser = argparse.ArgumentParser(description="Train a dense GAN on MNIST digits.")
    parser.add_argument("--digits", default="",
                        help="Comma separated list of digits 0-9 to train on (default: all).")
    parser.add_argument("--dataset", choices=["mnist", "digits"], default="mnist")
    parser.add_argument("--epochs", type=int, default=NUM_EPOCHS)
    parser.add_argument("--batch-size", type=int, default=BATCH_SIZE)
    parser.add_argument("--noise-dim", type=int, default=NOISE_DIM)
    parser.add_argument("--learning-rate", type=float, default=GAN_LEARNING_RATE)
    parser.add_argument("--image-folder", default=None,
                        help="Where to write sample grids (default: a new timestamped folder).")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--plot", default=None, help="Save the loss curves to this file prefix.")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    PRNG.seed_basic(args.seed)
    logger = logging.getLogger("MNISTGAN")

    config = GANConfig(
        dataset=args.dataset,
        epochs=args.epochs,
        batch_size=args.batch_size,
        noise_dim=args.noise_dim,
        learning_rate=args.learning_rate,
        digits=parse_digit_filter(args.digits),
        image_folder=args.image_folder,
        seed=args.seed,
    )

    X_train, _ = load_dataset(config.dataset, True, config.scale_min, config.scale_max, config.digits)
    logger.info(f"XTrain: {X_train}")
    example_row = PRNG.basic().uniform_int(0, X_train.rows)
    width = int(round(X_train.columns ** 0.5))
    logger.info("Example training image:\n" + render_digit_as_text(
        X_train.slice_rows(example_row, 1).data, config.scale_min, config.scale_max, width, width))

    gan = run_gan(config, X_train)

    if args.plot:
        plot_training_loss(gan.history['discriminator_loss'], f"{args.plot}_discriminator.png",
                           title="Discriminator Loss", ylabel="Loss (BCE)")
        plot_training_loss(gan.history['generator_loss'], f"{args.plot}_generator.png",
                           title="Generator Loss", ylabel="Loss (BCE)")
