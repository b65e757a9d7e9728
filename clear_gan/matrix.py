"""
Dense 2-D matrix used by every layer, cost and optimiser.

Elements live in a flat, row-major numpy array (``index = row * columns + column``).
The shape is fixed at construction; the contents are mutable. Transforms return
new matrices; only the owner mutates a matrix in place (row shuffling and the
optimisers updating layer parameters).

Element-wise helpers take a function that is evaluated over whole numpy arrays,
so ``lambda x: np.tanh(x)`` or ``lambda p, l: (p - l) ** 2`` both work as-is.
"""

import logging
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .errors import (
    IndexOutOfRangeError,
    InvalidDimensionError,
    InvalidRangeError,
    ShapeMismatchError,
    SizeMismatchError,
)
from .prng import PRNG

MAX_ELEMENTS_TO_SHOW = 5


class Matrix:
    """
    A rows x columns matrix of doubles.

    Key Attributes:
        rows (int): Number of rows, always >= 1.
        columns (int): Number of columns, always >= 1.
        count (int): rows * columns.
        data (np.ndarray): Flat row-major backing array of length ``count``.
    """

    def __init__(self, rows: int, columns: int):
        """
        Creates a zero-filled matrix.

        Raises:
            InvalidDimensionError: If rows or columns is not positive.
        """
        if rows <= 0:
            raise InvalidDimensionError(f"rows must be +ve, got {rows}.")
        if columns <= 0:
            raise InvalidDimensionError(f"columns must be +ve, got {columns}.")
        self.rows = int(rows)
        self.columns = int(columns)
        self.count = self.rows * self.columns
        self.data = np.zeros(self.count, dtype=float)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.columns

    # --- Element access ---

    def _flat_index(self, key: Union[int, Tuple[int, int]]) -> int:
        if isinstance(key, tuple):
            row, column = key
            if row < 0 or row >= self.rows:
                raise IndexOutOfRangeError(f"row {row} outside 0..{self.rows - 1}.")
            if column < 0 or column >= self.columns:
                raise IndexOutOfRangeError(f"column {column} outside 0..{self.columns - 1}.")
            return row * self.columns + column
        if key < 0 or key >= self.count:
            raise IndexOutOfRangeError(f"index {key} outside 0..{self.count - 1}.")
        return key

    def __getitem__(self, key: Union[int, Tuple[int, int]]) -> float:
        return float(self.data[self._flat_index(key)])

    def __setitem__(self, key: Union[int, Tuple[int, int]], value: float):
        self.data[self._flat_index(key)] = value

    # --- Slicing ---

    def slice_rows(self, start_row: int, count_of_rows: int) -> "Matrix":
        """
        Returns a new matrix holding ``count_of_rows`` consecutive rows from ``start_row``.

        Raises:
            InvalidRangeError: If count_of_rows < 1, start_row is outside the matrix,
                or the slice would run past the last row.
        """
        if count_of_rows < 1:
            raise InvalidRangeError(f"count_of_rows must be at least 1, got {count_of_rows}.")
        if start_row < 0 or start_row >= self.rows:
            raise InvalidRangeError(f"start_row {start_row} outside 0..{self.rows - 1}.")
        if start_row + count_of_rows > self.rows:
            raise InvalidRangeError(
                f"Cannot slice {count_of_rows} rows from row {start_row} of a {self.rows} row matrix."
            )
        start_idx = self.columns * start_row
        count_of_elements = self.columns * count_of_rows
        return Matrix.from_data(self.data[start_idx:start_idx + count_of_elements], count_of_rows, self.columns)

    def can_slice_rows(self, start_row: int, count_of_rows: int) -> bool:
        """Non-raising probe for :meth:`slice_rows`; drives batch iteration."""
        return count_of_rows >= 1 and 0 <= start_row < self.rows and start_row + count_of_rows <= self.rows

    # --- Linear algebra ---

    def matrix_multiply(self, other: "Matrix") -> "Matrix":
        """
        Standard matrix product ``self @ other``.

        Raises:
            ShapeMismatchError: If self.columns != other.rows.
        """
        if self.columns != other.rows:
            raise ShapeMismatchError(
                f"Cannot multiply {self.rows}x{self.columns} by {other.rows}x{other.columns}: "
                f"columns must equal other rows."
            )
        product = np.dot(self.to_numpy(), other.to_numpy())
        return Matrix.from_numpy(product)

    def __matmul__(self, other: "Matrix") -> "Matrix":
        return self.matrix_multiply(other)

    def transpose(self) -> "Matrix":
        return Matrix.from_numpy(self.to_numpy().T)

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    def average(self) -> "Matrix":
        """Returns a 1x1 matrix holding the mean of every element."""
        return Matrix.filled(float(np.mean(self.data)), 1, 1)

    def shuffle_rows(self, prng: Optional[PRNG] = None):
        """
        Shuffles the rows in place (Fisher-Yates, scanning backwards).

        For i from the last row down to 1, row i is swapped with a uniformly
        chosen row in [0, i].
        """
        prng = prng or PRNG.basic()
        rows_view = self.data.reshape(self.rows, self.columns)
        for i in range(self.rows - 1, 0, -1):
            swap_index = prng.uniform_int(0, i + 1)
            if swap_index != i:
                rows_view[[i, swap_index]] = rows_view[[swap_index, i]]

    # --- Conversions ---

    def to_numpy(self) -> np.ndarray:
        """Returns a (rows, columns) copy of the contents."""
        return self.data.reshape(self.rows, self.columns).copy()

    def copy(self) -> "Matrix":
        return Matrix.from_data(self.data, self.rows, self.columns)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self.data, other.data))

    __hash__ = None

    def __len__(self) -> int:
        return self.count

    def __str__(self) -> str:
        shown = ", ".join(str(float(d)) for d in self.data[:min(MAX_ELEMENTS_TO_SHOW, self.count)])
        return f"{self.rows} by {self.columns} : {shown}"

    def __repr__(self) -> str:
        return f"Matrix({self})"

    # --- Generators ---

    @staticmethod
    def filled(fill_with: float, rows: int, columns: int) -> "Matrix":
        result = Matrix(rows, columns)
        result.data.fill(fill_with)
        return result

    @staticmethod
    def zeroes(rows: int, columns: int) -> "Matrix":
        return Matrix.filled(0.0, rows, columns)

    @staticmethod
    def ones(rows: int, columns: int) -> "Matrix":
        return Matrix.filled(1.0, rows, columns)

    @staticmethod
    def uniform_randomised(min_value: float, max_value: float, rows: int, columns: int,
                           prng: Optional[PRNG] = None) -> "Matrix":
        """
        Matrix of independent uniform draws in [min_value, max_value).

        Raises:
            InvalidRangeError: If min_value >= max_value.
        """
        if min_value >= max_value:
            raise InvalidRangeError(f"min_value ({min_value}) must be less than max_value ({max_value}).")
        result = Matrix(rows, columns)
        prng = prng or PRNG.basic()
        result.data[:] = prng.uniform_array(min_value, max_value, result.count)
        logging.debug(f"Uniform randomised {rows}x{columns} matrix in [{min_value}, {max_value})")
        return result

    @staticmethod
    def normal_randomised(mean: float, standard_deviation: float, rows: int, columns: int,
                          prng: Optional[PRNG] = None) -> "Matrix":
        """Matrix of independent normal draws (Box-Muller)."""
        result = Matrix(rows, columns)
        prng = prng or PRNG.basic()
        result.data[:] = prng.normal_array(mean, standard_deviation, result.count)
        return result

    @staticmethod
    def from_data(data: Union[Sequence[float], np.ndarray], rows: int, columns: int) -> "Matrix":
        """
        Builds a matrix from a flat row-major sequence (the data is copied).

        Raises:
            SizeMismatchError: If len(data) != rows * columns.
        """
        result = Matrix(rows, columns)
        flat = np.asarray(data, dtype=float).ravel()
        if flat.size != result.count:
            raise SizeMismatchError(f"data has {flat.size} elements, which does not match {rows} by {columns}.")
        result.data[:] = flat
        return result

    @staticmethod
    def from_numpy(array: np.ndarray) -> "Matrix":
        """Builds a matrix from a 2-D (or 1-D, treated as a single row) numpy array."""
        array = np.asarray(array, dtype=float)
        if array.ndim == 1:
            array = array.reshape(1, -1)
        if array.ndim != 2:
            raise InvalidDimensionError(f"Expected a 1-D or 2-D array, got {array.ndim}-D.")
        return Matrix.from_data(array, array.shape[0], array.shape[1])

    # --- Element-wise application ---

    @staticmethod
    def apply_elementwise(first: "Matrix", *others_and_f) -> "Matrix":
        """
        Applies ``f`` position by position and returns a matrix of ``first``'s shape.

        Call as ``apply_elementwise(a, f)``, ``apply_elementwise(a, b, f)`` or
        ``apply_elementwise(a, b, c, f)``. Only the total element count of the
        operands is compared, so a 3x2 and a 2x3 combine by flat index.

        Raises:
            ShapeMismatchError: If the operands hold different numbers of elements.
        """
        if not others_and_f:
            raise TypeError("apply_elementwise requires a function.")
        *others, f = others_and_f
        if len(others) > 2:
            raise TypeError(f"apply_elementwise takes at most three matrices, got {len(others) + 1}.")
        for other in others:
            if other.count != first.count:
                raise ShapeMismatchError(
                    f"Element-wise operands must hold the same number of elements: "
                    f"{first.count} vs {other.count}."
                )
        values = f(first.data, *(other.data for other in others))
        result = Matrix(first.rows, first.columns)
        result.data[:] = np.broadcast_to(np.asarray(values, dtype=float), result.data.shape)
        return result
