"""Folding-factor schedules.

A folding factor k removes k variables per WHIR round (the polynomial is
folded 2^k-to-1). The first round may use a different factor from the rest.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

# Once this few variables remain, the prover sends the coefficients directly
MAX_NUM_VARIABLES_TO_SEND_COEFFS = 6


class FoldingFactorError(ValueError):
    """A folding factor that cannot be applied to the polynomial."""


@dataclass(frozen=True)
class FoldingFactor:
    """Fold by `first` in round 0 and by `rest` afterwards.

    Attributes:
        first: Variables folded in the first round
        rest: Variables folded in every later round (None: same as first)
    """
    first: int
    rest: Optional[int] = None

    @classmethod
    def constant(cls, factor: int) -> "FoldingFactor":
        return cls(factor)

    @classmethod
    def constant_from_second_round(cls, first: int, rest: int) -> "FoldingFactor":
        return cls(first, rest)

    @property
    def is_constant(self) -> bool:
        return self.rest is None

    def at_round(self, round_: int) -> int:
        if round_ == 0 or self.rest is None:
            return self.first
        return self.rest

    def check_validity(self, num_variables: int) -> None:
        """Raise FoldingFactorError unless every factor is in [1, num_variables]."""
        for factor in (self.first, self.at_round(1)):
            if factor > num_variables:
                raise FoldingFactorError(
                    f"Folding factor {factor} is greater than the number of variables {num_variables}. "
                    "Polynomial too small, just send it directly."
                )
            if factor == 0:
                raise FoldingFactorError("Folding factor shouldn't be zero.")

    def compute_number_of_rounds(self, num_variables: int) -> Tuple[int, int]:
        """(number of folding rounds after the first fold, final sumcheck rounds).

        Folding stops as soon as at most MAX_NUM_VARIABLES_TO_SEND_COEFFS
        variables remain; those go to the final sumcheck. After at least one
        round this leaves between MAX - rest + 1 and MAX final variables.
        """
        rest = self.at_round(1)
        remaining = num_variables - self.first
        if remaining <= MAX_NUM_VARIABLES_TO_SEND_COEFFS:
            return 0, remaining
        num_rounds = -(-(remaining - MAX_NUM_VARIABLES_TO_SEND_COEFFS) // rest)
        return num_rounds, remaining - num_rounds * rest

    def __str__(self) -> str:
        if self.rest is None:
            return f"Constant({self.first})"
        return f"ConstantFromSecondRound({self.first}, {self.rest})"

    def total_number(self, num_rounds: int) -> int:
        """Variables folded away by the first fold plus num_rounds later folds."""
        return self.first + num_rounds * self.at_round(1)
