from numbers import Integral

import numpy as np

from wordvec.errors import DimensionMismatch, InvalidDivisor

# Word vectors: a label plus a float32 array whose length is the vocabulary size.
# Vocabulary vectors are read-only views into the model; arithmetic yields new, owned vectors.


def _check_dimension(a: "WordVector", b: "WordVector") -> None:
    if a.dimension != b.dimension:
        raise DimensionMismatch(
            f"Cannot combine vectors of dimension {a.dimension} ({a.label!r}) "
            f"and {b.dimension} ({b.label!r})"
        )


class WordVector:
    """A labelled vector over the vocabulary.

    Equality compares values only; labels are descriptive.

    Attributes:
        label (str): Vocabulary word, or a description such as "king - man" for derived vectors.
        values (np.ndarray): 1D float32 array of length dimension.
    """

    def __init__(self, label: str, values: np.ndarray):
        self.label = label
        self.values = np.asarray(values, dtype=np.float32)
        if self.values.ndim != 1:
            raise ValueError(f"Word vector must be 1D, got shape {self.values.shape}")

    @classmethod
    def zeros(cls, label: str, dimension: int) -> "WordVector":
        return cls(label, np.zeros(dimension, dtype=np.float32))

    @property
    def dimension(self) -> int:
        return self.values.shape[0]

    def copy(self) -> "WordVector":
        """Owned, writeable copy (the source may be a read-only model row)."""
        return WordVector(self.label, self.values.copy())

    def add(self, other: "WordVector") -> "WordVector":
        """Elementwise sum; label "a + b".

        Raises:
            DimensionMismatch: If the dimensions differ.
        """
        result = self.copy()
        result += other
        return result

    def subtract(self, other: "WordVector") -> "WordVector":
        """Elementwise difference; label "a - b".

        Raises:
            DimensionMismatch: If the dimensions differ.
        """
        result = self.copy()
        result -= other
        return result

    def divide(self, n: int) -> "WordVector":
        """Divide every entry by the integer n; label "a / n".

        Raises:
            InvalidDivisor: If n is zero or not an integer.
        """
        result = self.copy()
        result /= n
        return result

    def distance(self, other: "WordVector") -> float:
        """Euclidean distance between the two vectors.

        Raises:
            DimensionMismatch: If the dimensions differ.
        """
        _check_dimension(self, other)
        diff = self.values - other.values
        return float(np.sqrt(np.sum(diff * diff)))

    def __iadd__(self, other: "WordVector") -> "WordVector":
        _check_dimension(self, other)
        self.values += other.values
        self.label = f"{self.label} + {other.label}"
        return self

    def __isub__(self, other: "WordVector") -> "WordVector":
        _check_dimension(self, other)
        self.values -= other.values
        self.label = f"{self.label} - {other.label}"
        return self

    def __itruediv__(self, n: int) -> "WordVector":
        if isinstance(n, bool) or not isinstance(n, Integral):
            raise InvalidDivisor(f"Divisor must be an integer, got {n!r}", token=str(n))
        if n == 0:
            raise InvalidDivisor("Division by zero", token=str(n))
        try:
            with np.errstate(over="ignore"):
                divisor = np.float32(n)
        except OverflowError:
            divisor = np.float32(np.inf)
        if not np.isfinite(divisor):
            raise InvalidDivisor("Divisor is out of float32 range", token=str(n))
        self.values /= divisor
        self.label = f"{self.label} / {n}"
        return self

    def __add__(self, other: "WordVector") -> "WordVector":
        return self.add(other)

    def __sub__(self, other: "WordVector") -> "WordVector":
        return self.subtract(other)

    def __truediv__(self, n: int) -> "WordVector":
        return self.divide(n)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WordVector):
            return NotImplemented
        return bool(np.array_equal(self.values, other.values))

    __hash__ = None

    def __repr__(self) -> str:
        head = ", ".join(f"{x:.4g}" for x in self.values[:5])
        more = ", ..." if self.dimension > 5 else ""
        return f"{self.label}: [{head}{more}]"
