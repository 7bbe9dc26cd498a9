"""Primitives - Fields, domains, multilinear polynomials and transcript patterns."""

from .domain import Domain, Radix2EvaluationDomain
from .domain_separator import (
    DIGEST_SIZE,
    DomainSeparator,
    FieldDomainSeparator,
    PoWDomainSeparator,
    add_ood,
    add_pow,
)
from .field import (
    BABY_BEAR,
    BABY_BEAR_PRIME,
    GOLDILOCKS,
    GOLDILOCKS_3,
    GOLDILOCKS_PRIME,
    TwoAdicField,
    field_size_bits,
)
from .multilinear import (
    CoefficientList,
    EvaluationsList,
    MultilinearPoint,
    eval_eq,
)

__all__ = [
    # Field
    "TwoAdicField",
    "BABY_BEAR",
    "BABY_BEAR_PRIME",
    "GOLDILOCKS",
    "GOLDILOCKS_3",
    "GOLDILOCKS_PRIME",
    "field_size_bits",
    # Domains
    "Radix2EvaluationDomain",
    "Domain",
    # Multilinear
    "MultilinearPoint",
    "CoefficientList",
    "EvaluationsList",
    "eval_eq",
    # Transcript pattern
    "DomainSeparator",
    "FieldDomainSeparator",
    "PoWDomainSeparator",
    "DIGEST_SIZE",
    "add_ood",
    "add_pow",
]
