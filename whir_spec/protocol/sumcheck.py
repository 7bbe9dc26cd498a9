"""Single-round sumcheck prover.

Given a multilinear polynomial p and a combined weight table w over {0,1}^n
with claimed sum

    sum_b p(b) * w(b) = S

one sumcheck round sends the univariate polynomial

    h(X) = sum_{b in {0,1}^(n-1)} p(b, X) * w(b, X)

which is quadratic, as three evaluations h(0), h(1), h(2). The verifier
checks h(0) + h(1) = S and answers with a random challenge; folding p and w at
that challenge is the caller's job.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..primitives.field import field_of
from ..primitives.multilinear import (
    CoefficientList,
    EvaluationsList,
    MultilinearPoint,
    eval_eq,
)
from .statement import Statement

logger = logging.getLogger(__name__)

# Below this many (p, w) pairs a round is reduced on the calling thread
PARALLEL_MIN_PAIRS = 1 << 12


# --- Sumcheck Polynomial ---

def _binary_to_ternary_index(binary_index: int) -> int:
    """Read the bits of binary_index as base-3 digits."""
    ternary_index = 0
    factor = 1
    while binary_index > 0:
        ternary_index += (binary_index & 1) * factor
        binary_index >>= 1
        factor *= 3
    return ternary_index


def _eq_poly3(point: MultilinearPoint, index: int):
    """Lagrange basis polynomial of the ternary grid point `index`, evaluated at point."""
    field_cls = field_of(point.coords[0])
    one = field_cls(1)
    two = field_cls(2)
    two_inv = two ** -1

    acc = one
    # Last coordinate is the least significant ternary digit
    for x in reversed(point.coords):
        digit = index % 3
        index //= 3
        if digit == 0:
            acc = acc * (x - one) * (x - two) * two_inv
        elif digit == 1:
            acc = acc * x * (two - x)
        else:
            acc = acc * x * (x - one) * two_inv
    return acc


class SumcheckPolynomial:
    """A polynomial of degree <= 2 in each of n_variables variables.

    Stored as its evaluations on {0,1,2}^n_variables in ternary order, the
    first coordinate being the most significant digit.
    """

    def __init__(self, evaluations, n_variables: int) -> None:
        if len(evaluations) != 3 ** n_variables:
            raise ValueError(
                f"expected {3 ** n_variables} evaluations for {n_variables} variables, "
                f"got {len(evaluations)}"
            )
        self._evaluations = evaluations
        self.n_variables = n_variables

    def __repr__(self) -> str:
        return f"SumcheckPolynomial({[int(e) for e in self._evaluations]}, {self.n_variables})"

    def evaluations(self):
        return self._evaluations

    def sum_over_boolean_hypercube(self):
        """sum_{b in {0,1}^n} h(b)."""
        indices = [_binary_to_ternary_index(b) for b in range(1 << self.n_variables)]
        return np.add.reduce(self._evaluations[indices])

    def evaluate_at_point(self, point: MultilinearPoint):
        """Interpolate from the ternary grid and evaluate at point."""
        if point.num_variables != self.n_variables:
            raise ValueError(
                f"point has {point.num_variables} variables, polynomial has {self.n_variables}"
            )
        acc = type(self._evaluations)(0)
        for index, value in enumerate(self._evaluations):
            acc = acc + value * _eq_poly3(point, index)
        return acc


# --- Prover ---

class SumcheckSingle:
    """Prover state for the sumcheck of sum_b p(b) * w(b).

    Attributes:
        evaluation_of_p: Evaluations of p over {0,1}^n
        weights: Combined constraint weights over {0,1}^n
        sum: Claimed value of sum_b p(b) * w(b)
        max_workers: Thread count for the round reduction (None: executor default)
    """

    def __init__(
        self,
        coeffs: CoefficientList,
        statement: Statement,
        combination_randomness,
        max_workers: Optional[int] = None,
    ) -> None:
        if statement.num_variables != coeffs.num_variables:
            raise ValueError(
                f"statement over {statement.num_variables} variables for a "
                f"{coeffs.num_variables}-variable polynomial"
            )
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.evaluation_of_p = EvaluationsList.from_coefficients(coeffs)
        self.weights, self.sum = statement.combine(combination_randomness)
        self.max_workers = max_workers

    def num_variables(self) -> int:
        return self.evaluation_of_p.num_variables

    def add_new_equality(
        self,
        points: Sequence[MultilinearPoint],
        combination_randomness: Sequence,
        evaluations: Sequence,
    ) -> None:
        """Fold further evaluation claims f(z_i) = v_i into the running instance.

        w <- w + sum_i r_i * eq_{z_i}
        S <- S + sum_i r_i * v_i
        """
        if len(combination_randomness) != len(points):
            raise ValueError(
                f"{len(points)} points but {len(combination_randomness)} combination coefficients"
            )
        if len(combination_randomness) != len(evaluations):
            raise ValueError(
                f"{len(evaluations)} evaluations but {len(combination_randomness)} combination coefficients"
            )

        # TODO: accumulate all points in one pass over the weight table
        for point, rand in zip(points, combination_randomness):
            eval_eq(point.coords, self.weights.evals, rand)
        for rand, value in zip(combination_randomness, evaluations):
            self.sum = self.sum + rand * value

    def compute_sumcheck_polynomial(self) -> SumcheckPolynomial:
        """Evaluations of this round's quadratic h(X) at 0, 1 and 2.

        Writing each adjacent pair as a line, p(X) = p0 + p1*X and
        w(X) = w0 + w1*X, gives

            h(X) = c0 + c1*X + c2*X^2,  c0 = sum p0*w0,  c2 = sum p1*w1

        and c1 follows from the claimed sum S = h(0) + h(1) = 2*c0 + c1 + c2.
        """
        if self.num_variables() < 1:
            raise ValueError("a sumcheck round needs at least one variable")

        p = self.evaluation_of_p.evals
        w = self.weights.evals
        logger.debug("sumcheck round over %d variables, weights: %s", self.num_variables(), w)

        c0, c2 = self._reduce_pairs(p, w)
        c1 = self.sum - (c0 + c0) - c2

        eval_0 = c0
        eval_1 = c0 + c1 + c2
        eval_2 = eval_1 + c1 + c2 + (c2 + c2)

        evaluations = type(p).Zeros(3)
        evaluations[0] = eval_0
        evaluations[1] = eval_1
        evaluations[2] = eval_2
        return SumcheckPolynomial(evaluations, 1)

    def _reduce_pairs(self, p: np.ndarray, w: np.ndarray):
        """(sum p0*w0, sum p1*w1) over all pairs, reduced in parallel chunks."""
        n_pairs = p.size // 2
        zero = type(p)(0)

        def partial(bounds: Tuple[int, int]):
            start, end = bounds
            p_at = p[2 * start:2 * end].reshape(-1, 2)
            w_at = w[2 * start:2 * end].reshape(-1, 2)
            p_0, p_1 = p_at[:, 0], p_at[:, 1] - p_at[:, 0]
            w_0, w_1 = w_at[:, 0], w_at[:, 1] - w_at[:, 0]
            return np.add.reduce(p_0 * w_0), np.add.reduce(p_1 * w_1)

        chunks = _split(n_pairs, self.max_workers)
        if len(chunks) == 1:
            partials = [partial(chunks[0])]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                partials = list(executor.map(partial, chunks))

        return reduce(lambda a, b: (a[0] + b[0], a[1] + b[1]), partials, (zero, zero))


def _split(n_pairs: int, max_workers: Optional[int]) -> List[Tuple[int, int]]:
    """Disjoint contiguous [start, end) ranges of pairs, one per worker."""
    if n_pairs < PARALLEL_MIN_PAIRS or max_workers == 1:
        return [(0, n_pairs)]
    n_chunks = max_workers or 4
    step = -(-n_pairs // n_chunks)
    return [(start, min(start + step, n_pairs)) for start in range(0, n_pairs, step)]
