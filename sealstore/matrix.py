"""Dense row-major matrices over the Mersenne-31 field."""

from __future__ import annotations

from dataclasses import dataclass

from sealstore.field import P, inverse


@dataclass
class RowMajorMatrix:
    """A matrix stored as a flat list of field elements, row after row."""

    values: list[int]
    width: int

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise ValueError("matrix width must be positive")
        if len(self.values) % self.width:
            raise ValueError("number of values is not a multiple of the width")
        self.values = [v % P for v in self.values]

    def height(self) -> int:
        """Number of rows."""
        return len(self.values) // self.width

    def get(self, row: int, col: int) -> int:
        """Return the element at ``(row, col)``."""
        if not (0 <= row < self.height() and 0 <= col < self.width):
            raise IndexError("matrix index out of range")
        return self.values[row * self.width + col]

    def row(self, index: int) -> list[int]:
        """Return a copy of row ``index``."""
        if not 0 <= index < self.height():
            raise IndexError("row index out of range")
        start = index * self.width
        return self.values[start:start + self.width]

    def transpose(self) -> RowMajorMatrix:
        """Return the transposed matrix."""
        columns = zip(*_rows(self))
        return RowMajorMatrix([v for column in columns for v in column], self.height())


def _rows(matrix: RowMajorMatrix) -> list[list[int]]:
    w = matrix.width
    return [matrix.values[start:start + w] for start in range(0, len(matrix.values), w)]


def _from_rows(rows: list[list[int]], width: int) -> RowMajorMatrix:
    return RowMajorMatrix([v for row in rows for v in row], width)


def identity_matrix(n: int) -> RowMajorMatrix:
    """Return the ``n`` by ``n`` identity matrix."""
    return _from_rows([[1 if r == c else 0 for c in range(n)] for r in range(n)], n)


def invert_matrix(matrix: RowMajorMatrix) -> RowMajorMatrix:
    """Invert a square matrix by Gauss-Jordan elimination."""
    n = matrix.width
    if n != matrix.height():
        raise ValueError("Matrix must be square")

    a = _rows(matrix)
    inv = _rows(identity_matrix(n))

    for i in range(n):
        pivot_row = next((j for j in range(i, n) if a[j][i]), None)
        if pivot_row is None:
            raise ValueError("Matrix is singular and cannot be inverted")
        if pivot_row != i:
            a[i], a[pivot_row] = a[pivot_row], a[i]
            inv[i], inv[pivot_row] = inv[pivot_row], inv[i]

        pivot_inv = inverse(a[i][i])
        a[i] = [v * pivot_inv % P for v in a[i]]
        inv[i] = [v * pivot_inv % P for v in inv[i]]
        row_a, row_inv = a[i], inv[i]

        for j in range(n):
            factor = a[j][i]
            if j == i or not factor:
                continue
            a[j] = [(t - factor * s) % P for t, s in zip(a[j], row_a)]
            inv[j] = [(t - factor * s) % P for t, s in zip(inv[j], row_inv)]

    return _from_rows(inv, n)


def multiply_matrices(a: RowMajorMatrix, b: RowMajorMatrix) -> RowMajorMatrix:
    """Return the product ``a * b``."""
    if a.width != b.height():
        raise ValueError("Incompatible dimensions for multiplication")
    columns = list(zip(*_rows(b)))
    product = [
        [sum(x * y for x, y in zip(row, column)) % P for column in columns]
        for row in _rows(a)
    ]
    return _from_rows(product, b.width)