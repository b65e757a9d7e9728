"""
MNIST Classification - Dense Network Example

Builds, trains and evaluates one of six small classifiers (one hidden layer,
sigmoid output, mean squared error) and plots the per-epoch training loss.

Usage:
    python examples/mnist_classifier.py --preset tanh_sigmoid_adam --epochs 1
    python examples/mnist_classifier.py --dataset digits --epochs 30 --batch-size 10
"""

import argparse
import logging

import matplotlib
matplotlib.use("Agg")

from clear_gan.classifier import CLASSIFIER_PRESETS, run_classifier
from clear_gan.config import ClassifierConfig, CLASSIFIER_BATCH_SIZE, CLASSIFIER_EPOCHS, LOG_EVERY_N_BATCHES
from clear_gan.console import configure_logging, parse_digit_filter
from clear_gan.imaging import plot_training_loss
from clear_gan.prng import PRNG


def parse_args():
    parser = argparse.ArgumentParser(description="Train and evaluate a dense MNIST classifier.")
    parser.add_argument("--preset", choices=list(CLASSIFIER_PRESETS.keys()), default="tanh_sigmoid_adam",
                        help="Hidden activation / optimiser combination.")
    parser.add_argument("--dataset", choices=["mnist", "digits"], default="mnist")
    parser.add_argument("--epochs", type=int, default=CLASSIFIER_EPOCHS)
    parser.add_argument("--batch-size", type=int, default=CLASSIFIER_BATCH_SIZE)
    parser.add_argument("--log-every", type=int, default=LOG_EVERY_N_BATCHES,
                        help="Log every N-th batch.")
    parser.add_argument("--digits", default="",
                        help="Comma separated digits to train on (default: all).")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--plot", default=None, help="Save the loss curve to this file.")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    PRNG.seed_basic(args.seed)
    logger = logging.getLogger("MNISTClassifier")

    for name, preset in CLASSIFIER_PRESETS.items():
        logger.info(f"  {name}: {preset.description}")

    config = ClassifierConfig(
        preset=args.preset,
        dataset=args.dataset,
        epochs=args.epochs,
        batch_size=args.batch_size,
        log_every=args.log_every,
        digits=parse_digit_filter(args.digits) or None,
        seed=args.seed,
    )
    model, accuracy = run_classifier(config)
    logger.info(f"Test accuracy: {accuracy:.2%}")

    if args.plot:
        plot_training_loss(model.training_loss, args.plot, title=f"{args.preset} Training Loss",
                           ylabel=f"Loss ({model.cost.name})")
