"""Dense two-dimensional matrix of floats used by the network."""

from __future__ import annotations

import sys
from typing import Callable, Iterable, Iterator, Sequence

import numpy as np


class Matrix:
    """A rows x cols matrix of double-precision values."""

    __slots__ = ("_data",)

    def __init__(self, rows: int = 0, cols: int = 0, fill: float = 0.0) -> None:
        if rows < 0 or cols < 0:
            raise ValueError("Matrix dimensions cannot be negative.")
        self._data = np.full((rows, cols), float(fill), dtype=np.float64)

    @classmethod
    def _wrap(cls, array: np.ndarray) -> "Matrix":
        matrix = cls.__new__(cls)
        matrix._data = np.asarray(array, dtype=np.float64)
        return matrix

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[float]]) -> "Matrix":
        """Build a matrix from an iterable of equally long rows."""
        row_list = [list(row) for row in rows]
        if not row_list:
            return cls(0, 0)
        width = len(row_list[0])
        if any(len(row) != width for row in row_list):
            raise ValueError("Matrix.from_rows: all rows must have the same length.")
        return cls._wrap(np.array(row_list, dtype=np.float64).reshape(len(row_list), width))

    @property
    def shape(self) -> tuple[int, int]:
        """The (rows, cols) pair."""
        rows, cols = self._data.shape
        return rows, cols

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    def _check_index(self, index: tuple[int, int], action: str) -> tuple[int, int]:
        rows, cols = self.shape
        if rows == 0 or cols == 0:
            raise IndexError(f"Matrix: cannot {action} entry in zero-dimension matrix.")
        r, c = index
        if not (0 <= r < rows and 0 <= c < cols):
            raise IndexError(
                f"Matrix: index ({r},{c}) out of bounds for {rows}x{cols} matrix."
            )
        return r, c

    def __getitem__(self, index: tuple[int, int]) -> float:
        r, c = self._check_index(index, "get")
        return float(self._data[r, c])

    def __setitem__(self, index: tuple[int, int], value: float) -> None:
        r, c = self._check_index(index, "set")
        self._data[r, c] = float(value)

    def tolist(self) -> list[list[float]]:
        """The entries as a list of row lists."""
        return [[float(v) for v in row] for row in self._data]

    def apply(self, func: Callable[[float], float]) -> "Matrix":
        """A new matrix with ``func`` applied to every entry."""
        if self._data.size == 0:
            return Matrix(*self.shape)
        mapped = [func(float(v)) for v in self._data.ravel()]
        return Matrix._wrap(np.array(mapped, dtype=np.float64).reshape(self.shape))

    def _check_same_shape(self, other: "Matrix", operation: str) -> None:
        if self.shape != other.shape:
            raise ValueError(
                f"Matrix.{operation}: Dimensions not compatible. "
                f"LHS: {self.rows}x{self.cols}, RHS: {other.rows}x{other.cols}"
            )

    def add(self, other: "Matrix") -> "Matrix":
        self._check_same_shape(other, "add")
        return Matrix._wrap(self._data + other._data)

    def subtract(self, other: "Matrix") -> "Matrix":
        self._check_same_shape(other, "subtract")
        return Matrix._wrap(self._data - other._data)

    def multiply(self, other: "Matrix") -> "Matrix":
        """Matrix product ``self @ other``."""
        if self.cols != other.rows:
            raise ValueError(
                "Matrix.multiply: Dimensions not compatible. "
                f"LHS: {self.rows}x{self.cols}, RHS: {other.rows}x{other.cols}"
            )
        return Matrix._wrap(self._data @ other._data)

    def multiply_elements(self, other: "Matrix") -> "Matrix":
        """Element-wise (Hadamard) product."""
        self._check_same_shape(other, "multiply_elements")
        return Matrix._wrap(self._data * other._data)

    def multiply_scalar(self, scalar: float) -> "Matrix":
        return Matrix._wrap(self._data * float(scalar))

    def transpose(self) -> "Matrix":
        return Matrix._wrap(self._data.T.copy())

    def _lines(self) -> Iterator[str]:
        rows, cols = self.shape
        if rows == 0 or cols == 0:
            yield f"Matrix is {rows}x{cols} (empty)."
            return
        for row in self._data:
            yield "".join(f"{v:.4f} " for v in row)

    def format(self) -> str:
        """Text with four decimals per entry, one line per row."""
        return "\n".join(self._lines())

    def display(self) -> None:
        """Write the matrix to standard output, one line per row."""
        out = sys.stdout
        for line in self._lines():
            out.write(line)
            out.write("\n")
        out.flush()

    def __add__(self, other: "Matrix") -> "Matrix":
        return self.add(other)

    def __sub__(self, other: "Matrix") -> "Matrix":
        return self.subtract(other)

    def __matmul__(self, other: "Matrix") -> "Matrix":
        return self.multiply(other)

    def __repr__(self) -> str:
        return f"Matrix.from_rows({self.tolist()!r})"