"""Dense two-dimensional float64 matrix used by the learners.

Operations either mutate the receiver and return it (``randomize``, ``scale``,
``add``, ``map``) or build a new matrix (the static helpers, ``copy``).  No
two matrices ever share a storage buffer.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Sequence, Tuple

import numpy as np

from .errors import DimensionMismatch, InvalidDimension
from .types import Array

ElementFn = Callable[[float, int, int], float]


def _check_dim(name: str, value: int) -> int:
    if isinstance(value, bool) or int(value) != value:
        raise InvalidDimension(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidDimension(f"{name} must be non-negative, got {value}")
    return int(value)


class Matrix:
    """Row-major grid of IEEE-754 doubles."""

    __slots__ = ("rows", "cols", "data")

    def __init__(self, rows: int, cols: int) -> None:
        self.rows = _check_dim("rows", rows)
        self.cols = _check_dim("cols", cols)
        self.data: Array = np.zeros((self.rows, self.cols), dtype=np.float64)

    # ------------------------------------------------------------------
    # Construction

    @classmethod
    def from_vector(cls, values: Sequence[float]) -> "Matrix":
        """Return a ``[len(values), 1]`` column matrix."""

        column = np.asarray(values, dtype=np.float64)
        if column.ndim != 1:
            raise InvalidDimension(
                f"from_vector expects a flat sequence, got {column.ndim}-d input"
            )
        out = cls(column.shape[0], 1)
        out.data[:, 0] = column
        return out

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[float]]) -> "Matrix":
        grid = [list(row) for row in rows]
        width = len(grid[0]) if grid else 0
        if any(len(row) != width for row in grid):
            raise InvalidDimension("all rows must have the same number of columns")
        out = cls(len(grid), width)
        if grid and width:
            out.data[:, :] = np.asarray(grid, dtype=np.float64)
        return out

    @classmethod
    def identity(cls, size: int) -> "Matrix":
        out = cls(size, size)
        out.data[:, :] = np.eye(out.rows, dtype=np.float64)
        return out

    def to_vector(self) -> List[float]:
        """Flatten row-major into a list of floats."""

        return [float(v) for v in self.data.reshape(-1)]

    def copy(self) -> "Matrix":
        out = Matrix(self.rows, self.cols)
        out.data[:, :] = self.data
        return out

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    # ------------------------------------------------------------------
    # In-place operations

    def randomize(self, rng: np.random.Generator | None = None) -> "Matrix":
        """Fill with independent uniform samples in ``[-1, 1]``."""

        rng = rng if rng is not None else np.random.default_rng()
        self.data[:, :] = rng.uniform(-1.0, 1.0, size=(self.rows, self.cols))
        return self

    def scale(self, scalar: float) -> "Matrix":
        self.data *= float(scalar)
        return self

    def add(self, other: "Matrix") -> "Matrix":
        _require_same_shape(self, other, "add")
        self.data += other.data
        return self

    def map(self, fn: ElementFn) -> "Matrix":
        """Apply ``fn(value, row, col)`` to every element in place."""

        for i in range(self.rows):
            for j in range(self.cols):
                self.data[i, j] = fn(float(self.data[i, j]), i, j)
        return self

    # ------------------------------------------------------------------
    # Pure operations

    @staticmethod
    def multiply(a: "Matrix", b: "Matrix") -> "Matrix":
        """Matrix product ``a · b``."""

        if a.cols != b.rows:
            raise DimensionMismatch(
                f"cannot multiply {a.rows}x{a.cols} by {b.rows}x{b.cols}: "
                "columns of A must match rows of B"
            )
        out = Matrix(a.rows, b.cols)
        out.data[:, :] = a.data @ b.data
        return out

    @staticmethod
    def subtract(a: "Matrix", b: "Matrix") -> "Matrix":
        _require_same_shape(a, b, "subtract")
        out = Matrix(a.rows, a.cols)
        out.data[:, :] = a.data - b.data
        return out

    @staticmethod
    def hadamard(a: "Matrix", b: "Matrix") -> "Matrix":
        """Element-wise product of two equally shaped matrices."""

        _require_same_shape(a, b, "hadamard")
        out = Matrix(a.rows, a.cols)
        out.data[:, :] = a.data * b.data
        return out

    @staticmethod
    def transpose(m: "Matrix") -> "Matrix":
        out = Matrix(m.cols, m.rows)
        out.data[:, :] = m.data.T
        return out

    @staticmethod
    def mapped(m: "Matrix", fn: ElementFn) -> "Matrix":
        """Return a new matrix holding ``fn(value, row, col)`` for each element."""

        return m.copy().map(fn)

    # ------------------------------------------------------------------
    # Dunder helpers

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self.data, other.data))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Matrix({self.rows}x{self.cols}, {self.data.tolist()!r})"


def _require_same_shape(a: Matrix, b: Matrix, op: str) -> None:
    if a.shape != b.shape:
        raise DimensionMismatch(
            f"cannot {op} {a.rows}x{a.cols} and {b.rows}x{b.cols}: "
            "matrices must have same dimensions"
        )


__all__ = ["Matrix", "ElementFn"]
