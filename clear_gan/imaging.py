"""Turning generated samples into grey-scale images."""

import logging
import os

import matplotlib.pyplot as plt
import numpy as np

from .matrix import Matrix

CELL_PADDING = 2


def rescale(data: np.ndarray, min_value: float, max_value: float) -> np.ndarray:
    """Maps values from [min_value, max_value] onto [0, 1], clipping anything outside."""
    if min_value >= max_value:
        raise ValueError(f"min_value ({min_value}) must be less than max_value ({max_value}).")
    return np.clip((np.asarray(data, dtype=float) - min_value) / (max_value - min_value), 0.0, 1.0)


def tile_samples(samples: Matrix, grid_rows: int, grid_columns: int, image_size: int = 28) -> np.ndarray:
    """
    Lays flattened square images out on a grid.

    Sample ``x * grid_rows + y`` goes to grid column x, grid row y (the grid is
    filled column by column). Each image sits one pixel in from the top-left of a
    (image_size + 2)-pixel cell.

    Args:
        samples: One flattened image per row, (count, image_size * image_size).
        grid_rows: Images per grid column.
        grid_columns: Images per grid row.
        image_size: Width and height of each image.

    Returns:
        A (grid_rows * cell, grid_columns * cell) array.

    Raises:
        ValueError: If there are too few samples or the row length is wrong.
    """
    if samples.columns != image_size * image_size:
        raise ValueError(f"Expected {image_size * image_size} values per sample, got {samples.columns}.")
    if samples.rows < grid_rows * grid_columns:
        raise ValueError(f"Need {grid_rows * grid_columns} samples for the grid, got {samples.rows}.")

    cell = image_size + CELL_PADDING
    images = samples.to_numpy()
    grid = np.zeros((cell * grid_rows, cell * grid_columns), dtype=float)
    for x in range(grid_columns):
        for y in range(grid_rows):
            sx = cell * x + 1
            sy = cell * y + 1
            grid[sy:sy + image_size, sx:sx + image_size] = images[x * grid_rows + y].reshape(image_size, image_size)
    return grid


def write_image(data: np.ndarray, filename: str):
    """
    Writes a 2-D array of [0, 1] intensities as a grey-scale image.

    Values outside [0, 1] are clipped. The format follows the file extension.
    """
    data = np.asarray(data, dtype=float)
    if data.ndim != 2:
        raise ValueError(f"Image data must be 2-D, got shape {data.shape}.")
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    plt.imsave(filename, np.clip(data, 0.0, 1.0), cmap="gray", vmin=0.0, vmax=1.0)
    logging.info(f"Wrote {data.shape[1]}x{data.shape[0]} image to {filename}")


def plot_training_loss(losses, filename: str, title: str = "Training Loss", ylabel: str = "Loss"):
    """Saves a line plot of per-epoch losses."""
    plt.figure(figsize=(8, 5))
    plt.plot(range(1, len(losses) + 1), losses, label='Training Loss')
    plt.xlabel('Epoch')
    plt.ylabel(ylabel)
    plt.title(title)
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.ylim(bottom=0)
    plt.tight_layout()
    plt.savefig(filename)
    plt.close()
    logging.info(f"Saved loss plot to {filename}")
