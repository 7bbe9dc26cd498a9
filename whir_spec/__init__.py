"""WHIR core: parameter derivation, sumcheck and Fiat-Shamir transcript patterns.

Uses galois for field arithmetic over BabyBear, Goldilocks and the cubic
Goldilocks extension.
"""

from .primitives import (
    BABY_BEAR,
    GOLDILOCKS,
    GOLDILOCKS_3,
    CoefficientList,
    Domain,
    DomainSeparator,
    EvaluationsList,
    MultilinearPoint,
    Radix2EvaluationDomain,
    TwoAdicField,
)
from .protocol import (
    FoldingFactor,
    MultivariateParameters,
    SoundnessType,
    Statement,
    SumcheckSingle,
    Weights,
    WhirConfig,
    WhirParameters,
)

__version__ = "0.1.0"

__all__ = [
    "BABY_BEAR",
    "GOLDILOCKS",
    "GOLDILOCKS_3",
    "TwoAdicField",
    "Radix2EvaluationDomain",
    "Domain",
    "MultilinearPoint",
    "CoefficientList",
    "EvaluationsList",
    "DomainSeparator",
    "FoldingFactor",
    "SoundnessType",
    "MultivariateParameters",
    "WhirParameters",
    "WhirConfig",
    "Statement",
    "Weights",
    "SumcheckSingle",
]
