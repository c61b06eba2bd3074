"""
Numeric primitives shared by the optimizer, the loss and the prediction generator.
"""

from typing import Optional, Tuple, Union

import numpy as np


def sigmoid(x):
    """Logistic link mapping an unbounded score into (0, 1)."""
    with np.errstate(over='ignore'):
        return 1 / (1 + np.exp(-x))


def grad_sigmoid(x):
    """
    Derivative of the sigmoid at x.

    Uses 1 / (2 + e^-x + e^x), which equals sigmoid(x) * (1 - sigmoid(x))
    without the cancellation of the product form.
    """
    with np.errstate(over='ignore'):
        return 1 / (2 + np.exp(-x) + np.exp(x))


def dot_product(vec1: np.ndarray, vec2: np.ndarray) -> np.longdouble:
    """Inner product accumulated in extended precision."""
    return np.dot(
        np.asarray(vec1, dtype=np.longdouble),
        np.asarray(vec2, dtype=np.longdouble)
    )


class DenseMatrix:
    """
    Row-major dense matrix over contiguous float64 storage.

    The matrix either borrows a caller-owned buffer (``from_buffer``) or owns
    freshly allocated storage (``zeros``). Row accessors return views, so
    writes through a row land in the underlying buffer.
    """

    def __init__(self, data: np.ndarray):
        if data.ndim != 2:
            raise ValueError(f"DenseMatrix needs 2D storage, got {data.ndim}D")
        self.data = data

    @classmethod
    def from_buffer(
        cls,
        buffer: Union[np.ndarray, 'DenseMatrix'],
        rows: int,
        cols: int
    ) -> Optional['DenseMatrix']:
        """
        Address a flat (or already 2D) buffer as a rows x cols matrix without copying.

        Returns None when the buffer cannot be viewed in place: wrong size,
        wrong dtype or non-contiguous memory. Callers must check.
        """
        if isinstance(buffer, DenseMatrix):
            buffer = buffer.data
        if not isinstance(buffer, np.ndarray):
            return None
        if rows < 1 or cols < 1 or buffer.size != rows * cols:
            return None
        if buffer.dtype != np.float64 or not buffer.flags['C_CONTIGUOUS']:
            return None

        view = buffer.reshape(rows, cols)
        if not np.shares_memory(view, buffer):
            return None
        return cls(view)

    @classmethod
    def zeros(cls, rows: int, cols: int) -> 'DenseMatrix':
        """Allocate an owned, zero-initialised matrix."""
        return cls(np.zeros((rows, cols), dtype=np.float64))

    @property
    def rows(self) -> int:
        return self.data.shape[0]

    @property
    def cols(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    def row(self, i: int) -> np.ndarray:
        self._check_row(i)
        return self.data[i]

    def column(self, j: int) -> np.ndarray:
        self._check_col(j)
        return self.data[:, j]

    def _check_row(self, i: int) -> None:
        if not 0 <= i < self.rows:
            raise IndexError(f"row {i} out of range for {self.rows} rows")

    def _check_col(self, j: int) -> None:
        if not 0 <= j < self.cols:
            raise IndexError(f"column {j} out of range for {self.cols} columns")

    def __getitem__(self, index: Tuple[int, int]) -> float:
        i, j = index
        self._check_row(i)
        self._check_col(j)
        return self.data[i, j]

    def __setitem__(self, index: Tuple[int, int], value: float) -> None:
        i, j = index
        self._check_row(i)
        self._check_col(j)
        self.data[i, j] = value

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self.data
        return self.data.astype(dtype)

    def __repr__(self) -> str:
        return f"DenseMatrix(rows={self.rows}, cols={self.cols})"


def matrix_view(buffer, rows: int, cols: int) -> Optional[DenseMatrix]:
    """Shorthand for DenseMatrix.from_buffer."""
    return DenseMatrix.from_buffer(buffer, rows, cols)


def vector_view(buffer, length: int) -> Optional[np.ndarray]:
    """
    Address a caller-owned buffer as a 1D float64 vector without copying.

    Returns None when the buffer cannot be viewed in place.
    """
    if not isinstance(buffer, np.ndarray):
        return None
    if length < 1 or buffer.size != length:
        return None
    if buffer.dtype != np.float64 or not buffer.flags['C_CONTIGUOUS']:
        return None
    return buffer.reshape(length)
