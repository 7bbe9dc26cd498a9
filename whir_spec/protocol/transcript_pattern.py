"""Transcript pattern of a WHIR proof.

Declares, from a WhirConfig alone, every message of the proof in the order the
prover and verifier exchange them. The resulting DomainSeparator is what the
transcript engine is keyed with; any change to the schedule changes the
pattern, and so every challenge.
"""

from ..primitives.domain_separator import DomainSeparator, add_ood, add_pow
from .parameters import WhirConfig


def _query_bytes(folded_domain_size: int) -> int:
    """Bytes squeezed per STIR query index into a domain of the given size."""
    return ((folded_domain_size * 2 - 1).bit_length() - 1 + 7) // 8


def add_sumcheck(separator: DomainSeparator, folding_factor: int, pow_bits: float) -> DomainSeparator:
    """One sumcheck round per folded variable: h(0), h(1), h(2), a challenge and PoW."""
    for _ in range(folding_factor):
        separator = separator.add_scalars(3, "sumcheck_poly").challenge_scalars(1, "folding_randomness")
        separator = add_pow(separator, pow_bits)
    return separator


def commit_statement(separator: DomainSeparator, config: WhirConfig) -> DomainSeparator:
    """Merkle root of the initial commitment and its OOD samples."""
    separator = separator.add_digest("merkle_digest")
    return add_ood(separator, config.committment_ood_samples)


def add_whir_proof(separator: DomainSeparator, config: WhirConfig) -> DomainSeparator:
    """Everything after the commitment, up to and including the final sumcheck."""
    folding_factor = config.folding_factor

    if config.initial_statement:
        separator = separator.challenge_scalars(1, "initial_combination_randomness")
        separator = add_sumcheck(separator, folding_factor.at_round(0), config.starting_folding_pow_bits)
    else:
        separator = separator.challenge_scalars(folding_factor.at_round(0), "folding_randomness")
        separator = add_pow(separator, config.starting_folding_pow_bits)

    domain_size = config.starting_domain.size()
    for round_, r in enumerate(config.round_parameters):
        folded_domain_size = domain_size >> folding_factor.at_round(round_)
        domain_size_bytes = _query_bytes(folded_domain_size)

        separator = separator.add_digest("merkle_digest")
        separator = add_ood(separator, r.ood_samples)
        separator = separator.challenge_bytes(r.num_queries * domain_size_bytes, "stir_queries")
        separator = add_pow(separator, r.pow_bits)
        separator = separator.challenge_scalars(1, "combination_randomness")
        separator = add_sumcheck(separator, folding_factor.at_round(round_ + 1), r.folding_pow_bits)

        # Each round halves the evaluation domain
        domain_size >>= 1

    folded_domain_size = domain_size >> folding_factor.at_round(len(config.round_parameters))
    domain_size_bytes = _query_bytes(folded_domain_size)

    separator = separator.add_scalars(1 << config.final_sumcheck_rounds, "final_coeffs")
    separator = separator.challenge_bytes(domain_size_bytes * config.final_queries, "final_queries")
    separator = add_pow(separator, config.final_pow_bits)
    return add_sumcheck(separator, config.final_sumcheck_rounds, config.final_folding_pow_bits)
