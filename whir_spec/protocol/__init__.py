"""Protocol - WHIR parameter derivation, sumcheck and proof transcript layout."""

from .folding import (
    MAX_NUM_VARIABLES_TO_SEND_COEFFS,
    FoldingFactor,
    FoldingFactorError,
)
from .parameters import (
    FoldType,
    MultivariateParameters,
    RoundConfig,
    SoundnessType,
    WhirConfig,
    WhirParameters,
)
from .statement import Statement, Weights
from .sumcheck import SumcheckPolynomial, SumcheckSingle
from .transcript_pattern import add_sumcheck, add_whir_proof, commit_statement

__all__ = [
    # Folding
    "FoldingFactor",
    "FoldingFactorError",
    "MAX_NUM_VARIABLES_TO_SEND_COEFFS",
    # Parameters
    "SoundnessType",
    "FoldType",
    "MultivariateParameters",
    "WhirParameters",
    "RoundConfig",
    "WhirConfig",
    # Statement
    "Statement",
    "Weights",
    # Sumcheck
    "SumcheckSingle",
    "SumcheckPolynomial",
    # Transcript
    "add_sumcheck",
    "commit_statement",
    "add_whir_proof",
]
