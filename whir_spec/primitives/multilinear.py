"""Multilinear polynomials in coefficient and evaluation form.

Index convention: the first coordinate of a point is the most significant bit
of a hypercube index. Coefficient i belongs to the monomial whose variables
are the set bits of i under the same convention, so for two variables

    coeffs = [c0, c1, c2, c3]  ->  f(X1, X2) = c0 + c1*X2 + c2*X1 + c3*X1*X2
    evals  = [f(0,0), f(0,1), f(1,0), f(1,1)]
"""

from typing import Sequence

import numpy as np

from .field import as_field_array, field_of


def _check_power_of_two(n: int, what: str) -> int:
    """Return log2(n), rejecting lengths that are not a power of two."""
    if n < 1 or n & (n - 1):
        raise ValueError(f"{what} length must be a power of two, got {n}")
    return n.bit_length() - 1


# --- Points ---

class MultilinearPoint:
    """A point (x_1, ..., x_k) at which a multilinear polynomial is evaluated."""

    def __init__(self, coords: Sequence) -> None:
        self.coords = list(coords)

    def __repr__(self) -> str:
        return f"MultilinearPoint({[int(c) for c in self.coords]})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, MultilinearPoint):
            return NotImplemented
        return len(self.coords) == len(other.coords) and all(
            a == b for a, b in zip(self.coords, other.coords)
        )

    def __len__(self) -> int:
        return len(self.coords)

    def __iter__(self):
        return iter(self.coords)

    @property
    def num_variables(self) -> int:
        return len(self.coords)

    @classmethod
    def expand_from_univariate(cls, point, num_variables: int) -> "MultilinearPoint":
        """Map x to (x^(2^(n-1)), ..., x^4, x^2, x).

        A univariate polynomial evaluated at x equals the multilinear
        polynomial with the same coefficient list evaluated at this point.
        """
        coords = []
        cur = point
        for _ in range(num_variables):
            coords.append(cur)
            cur = cur * cur
        coords.reverse()
        return cls(coords)

    def eq_poly_outside(self, other: "MultilinearPoint"):
        """eq(x, y) = prod_i (x_i * y_i + (1 - x_i) * (1 - y_i))."""
        if len(self.coords) != len(other.coords):
            raise ValueError(
                f"points have {len(self.coords)} and {len(other.coords)} variables"
            )
        if not self.coords:
            raise ValueError("eq of zero-variable points has no field to live in")
        one = field_of(self.coords[0])(1)
        acc = one
        for x, y in zip(self.coords, other.coords):
            acc = acc * (x * y + (one - x) * (one - y))
        return acc


# --- Equality Polynomial ---

def eq_table(coords: Sequence, scalar) -> np.ndarray:
    """scalar * eq_z(X) evaluated over the whole hypercube {0,1}^k."""
    field_cls = field_of(scalar)
    one = field_cls(1)
    table = scalar.reshape(1)
    for z in coords:
        nxt = field_cls.Zeros(2 * table.size)
        nxt[0::2] = table * (one - z)
        nxt[1::2] = table * z
        table = nxt
    return table


def eval_eq(coords: Sequence, out: np.ndarray, scalar) -> None:
    """Accumulate scalar * eq_z(X) into out, one full pass over the hypercube."""
    if out.size != 1 << len(coords):
        raise ValueError(
            f"table of size {out.size} does not match a {len(coords)}-variable point"
        )
    out[:] = out + eq_table(coords, scalar)


# --- Coefficient Form ---

class CoefficientList:
    """A multilinear polynomial given by its 2^n monomial coefficients."""

    def __init__(self, coeffs) -> None:
        self._coeffs = as_field_array(coeffs)
        self._num_variables = _check_power_of_two(self._coeffs.size, "coefficient list")

    def __repr__(self) -> str:
        return f"CoefficientList({[int(c) for c in self._coeffs]})"

    @property
    def coeffs(self) -> np.ndarray:
        return self._coeffs

    @property
    def num_variables(self) -> int:
        return self._num_variables

    @property
    def num_coeffs(self) -> int:
        return self._coeffs.size

    @property
    def field(self) -> type:
        return type(self._coeffs)

    def evaluate(self, point: MultilinearPoint):
        """Evaluate at an arbitrary point of the extension of the hypercube."""
        if point.num_variables != self._num_variables:
            raise ValueError(
                f"point has {point.num_variables} variables, polynomial has {self._num_variables}"
            )
        values = self._coeffs
        # Peel off the last (least significant) variable first
        for x in reversed(point.coords):
            values = values[0::2] + values[1::2] * x
        return values[0]

    def to_evaluations(self) -> "EvaluationsList":
        """Wavelet transform into evaluations over {0,1}^n."""
        evals = self._coeffs.copy()
        for level in range(self._num_variables):
            half = 1 << level
            blocks = evals.reshape(-1, 2, half)
            blocks[:, 1, :] = blocks[:, 1, :] + blocks[:, 0, :]
        return EvaluationsList(evals)


# --- Evaluation Form ---

class EvaluationsList:
    """A multilinear polynomial given by its 2^n evaluations over {0,1}^n."""

    def __init__(self, evals) -> None:
        self._evals = as_field_array(evals)
        self._num_variables = _check_power_of_two(self._evals.size, "evaluation list")

    def __repr__(self) -> str:
        return f"EvaluationsList({[int(e) for e in self._evals]})"

    @classmethod
    def from_coefficients(cls, coeffs: CoefficientList) -> "EvaluationsList":
        return coeffs.to_evaluations()

    @classmethod
    def zeros(cls, field_cls, num_variables: int) -> "EvaluationsList":
        return cls(field_cls.Zeros(1 << num_variables))

    @property
    def evals(self) -> np.ndarray:
        """The evaluation table (mutable in place)."""
        return self._evals

    @property
    def num_variables(self) -> int:
        return self._num_variables

    @property
    def num_evals(self) -> int:
        return self._evals.size

    def evaluate(self, point: MultilinearPoint):
        """Multilinear extension evaluated at point."""
        if point.num_variables != self._num_variables:
            raise ValueError(
                f"point has {point.num_variables} variables, polynomial has {self._num_variables}"
            )
        values = self._evals
        for x in reversed(point.coords):
            lo, hi = values[0::2], values[1::2]
            values = lo + (hi - lo) * x
        return values[0]


def inner_product(a: np.ndarray, b: np.ndarray):
    """sum_i a[i] * b[i] over the field."""
    if a.size != b.size:
        raise ValueError(f"length mismatch: {a.size} != {b.size}")
    return np.add.reduce(a * b)

