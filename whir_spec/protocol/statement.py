"""Constraints on a committed multilinear polynomial.

A Statement is a list of (Weights, claimed value) pairs. Each pair asserts

    sum_{b in {0,1}^n} w(b) * p(b) = claimed value

For an evaluation constraint at z the weight is the equality polynomial eq_z,
which turns the sum into p(z). Combining the constraints with powers of a
random challenge gives one weight table and one claimed sum, the input of the
sumcheck.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from ..primitives.field import field_of
from ..primitives.multilinear import (
    CoefficientList,
    EvaluationsList,
    MultilinearPoint,
    eval_eq,
    inner_product,
)


# --- Weights ---

@dataclass(eq=False)
class Weights:
    """Either an evaluation point or an explicit weight table over the hypercube.

    Attributes:
        point: Set for evaluation constraints
        weight_list: Set for linear constraints
    """
    point: Optional[MultilinearPoint] = None
    weight_list: Optional[EvaluationsList] = None

    def __post_init__(self) -> None:
        if (self.point is None) == (self.weight_list is None):
            raise ValueError("Weights needs exactly one of point or weight_list")

    @classmethod
    def evaluation(cls, point: MultilinearPoint) -> "Weights":
        return cls(point=point)

    @classmethod
    def linear(cls, weight_list: EvaluationsList) -> "Weights":
        return cls(weight_list=weight_list)

    @property
    def is_evaluation(self) -> bool:
        return self.point is not None

    def num_variables(self) -> int:
        if self.point is not None:
            return self.point.num_variables
        return self.weight_list.num_variables

    def accumulate(self, accumulator: EvaluationsList, factor) -> None:
        """accumulator += factor * w, in place."""
        if self.point is not None:
            eval_eq(self.point.coords, accumulator.evals, factor)
        else:
            acc = accumulator.evals
            acc[:] = acc + self.weight_list.evals * factor

    def evaluate(self, poly: CoefficientList):
        """sum_b w(b) * p(b) for the given polynomial."""
        if self.point is not None:
            return poly.evaluate(self.point)
        return inner_product(self.weight_list.evals, poly.to_evaluations().evals)

    def compute(self, folding_randomness: MultilinearPoint):
        """The weight polynomial evaluated at the folding randomness."""
        if self.point is not None:
            return self.point.eq_poly_outside(folding_randomness)
        return self.weight_list.evaluate(folding_randomness)


# --- Statement ---

class Statement:
    """Ordered list of weighted-sum constraints over num_variables variables."""

    def __init__(self, num_variables: int) -> None:
        self.num_variables = num_variables
        self.constraints: List[Tuple[Weights, Any]] = []

    def __len__(self) -> int:
        return len(self.constraints)

    def is_empty(self) -> bool:
        return not self.constraints

    def _check(self, weights: Weights) -> None:
        if weights.num_variables() != self.num_variables:
            raise ValueError(
                f"constraint over {weights.num_variables()} variables added to a "
                f"{self.num_variables}-variable statement"
            )

    def add_constraint(self, weights: Weights, sum_) -> None:
        self._check(weights)
        self.constraints.append((weights, sum_))

    def add_constraint_in_front(self, weights: Weights, sum_) -> None:
        self._check(weights)
        self.constraints.insert(0, (weights, sum_))

    def add_constraints_in_front(self, constraints: List[Tuple[Weights, Any]]) -> None:
        for weights, _ in constraints:
            self._check(weights)
        self.constraints[:0] = constraints

    def combine(self, challenge) -> Tuple[EvaluationsList, Any]:
        """Fold all constraints into one weight table and one sum.

        The i-th constraint is scaled by challenge^i, so a challenge of one
        simply adds the constraints up.

        Returns:
            (combined weights over {0,1}^n, combined claimed sum)
        """
        field_cls = field_of(challenge)
        combined = EvaluationsList.zeros(field_cls, self.num_variables)
        combined_sum = field_cls(0)
        power = field_cls(1)
        for weights, sum_ in self.constraints:
            weights.accumulate(combined, power)
            combined_sum = combined_sum + sum_ * power
            power = power * challenge
        return combined, combined_sum

    def verify(self, poly: CoefficientList) -> bool:
        """Check every claimed value against the polynomial."""
        return all(bool(weights.evaluate(poly) == sum_) for weights, sum_ in self.constraints)
