"""Errors raised by the Matrix primitive.

All of these are caller errors detected at the point of the offending call.
Each one also derives from the closest builtin so callers that already catch
``ValueError`` / ``IndexError`` keep working.
"""


class MatrixError(Exception):
    """Base class for every error raised by :class:`clear_gan.matrix.Matrix`."""


class InvalidDimensionError(MatrixError, ValueError):
    """Rows or columns were not positive at construction."""


class IndexOutOfRangeError(MatrixError, IndexError):
    """Element access outside the matrix bounds."""


class InvalidRangeError(MatrixError, ValueError):
    """Slice or random-range arguments violate their ordering constraints."""


class ShapeMismatchError(MatrixError, ValueError):
    """Operand sizes are incompatible for the requested operation."""


class SizeMismatchError(MatrixError, ValueError):
    """A flat sequence does not match the declared rows * columns."""
