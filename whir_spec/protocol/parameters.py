"""WHIR parameter derivation.

Turns a target security level and a soundness assumption into the concrete
round schedule of the protocol: how many folding rounds, and per round the
number of STIR queries, out-of-domain samples and proof-of-work bits.

All soundness quantities are in bits. A round is sound to `b` bits when a
cheating prover passes it with probability at most 2^-b; PoW grinding adds
its bits on top, which is why each PoW figure is the shortfall
max(0, security_level - error).
"""

import json
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..primitives.domain import Domain
from ..primitives.field import BABY_BEAR, TwoAdicField, field_size_bits
from .folding import FoldingFactor

logger = logging.getLogger(__name__)

LOG2_10 = math.log2(10)


# --- Enums ---

class SoundnessType(Enum):
    """List-decoding regime assumed for the Reed-Solomon code."""
    UniqueDecoding = "UniqueDecoding"
    ProvableList = "ProvableList"
    ConjectureList = "ConjectureList"

    @classmethod
    def from_string(cls, s: str) -> "SoundnessType":
        """Parse "ConjectureList", "conjecture_list", "cl" style names."""
        key = s.replace("_", "").replace("-", "").lower()
        aliases = {"ud": "uniquedecoding", "pl": "provablelist", "cl": "conjecturelist"}
        key = aliases.get(key, key)
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"Unknown soundness type: {s!r}")

    def __str__(self) -> str:
        return self.value


class FoldType(Enum):
    """Who computes the folded values the verifier needs."""
    Naive = "Naive"
    ProverHelps = "ProverHelps"

    @classmethod
    def from_string(cls, s: str) -> "FoldType":
        for member in cls:
            if member.value.lower() == s.replace("_", "").lower():
                return member
        raise ValueError(f"Unknown fold type: {s!r}")


# --- Inputs ---

@dataclass
class MultivariateParameters:
    """Shape of the committed polynomial."""
    num_variables: int

    def __str__(self) -> str:
        return f"Number of variables: {self.num_variables}"


@dataclass
class WhirParameters:
    """Protocol-level knobs.

    Attributes:
        initial_statement: True when the commitment comes with an evaluation
            claim to prove, False for a bare low-degree proof
        starting_log_inv_rate: log2 of the inverse Reed-Solomon rate
        folding_factor: Folding schedule
        soundness_type: Soundness assumption
        security_level: Target bits of security
        pow_bits: Largest acceptable proof-of-work difficulty
        fold_optimisation: Folding strategy
        merkle_hash: Leaf hash, passed through to the commitment layer
        merkle_compress: Node compression, passed through to the commitment layer
    """
    initial_statement: bool = True
    starting_log_inv_rate: int = 1
    folding_factor: FoldingFactor = field(default_factory=lambda: FoldingFactor.constant(4))
    soundness_type: SoundnessType = SoundnessType.ConjectureList
    security_level: int = 100
    pow_bits: int = 20
    fold_optimisation: FoldType = FoldType.ProverHelps
    merkle_hash: Any = None
    merkle_compress: Any = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any], **primitives: Any) -> "WhirParameters":
        """Build from a camelCase config dict.

        foldingFactor is either an int (constant) or a [first, rest] pair.
        Commitment primitives are not serializable and come in as keyword
        arguments (merkle_hash=..., merkle_compress=...).
        """
        params = cls(**primitives)
        if "initialStatement" in d:
            params.initial_statement = bool(d["initialStatement"])
        if "startingLogInvRate" in d:
            params.starting_log_inv_rate = int(d["startingLogInvRate"])
        if "foldingFactor" in d:
            ff = d["foldingFactor"]
            if isinstance(ff, int):
                params.folding_factor = FoldingFactor.constant(ff)
            else:
                first, rest = ff
                params.folding_factor = FoldingFactor.constant_from_second_round(first, rest)
        if "soundnessType" in d:
            params.soundness_type = SoundnessType.from_string(d["soundnessType"])
        if "securityLevel" in d:
            params.security_level = int(d["securityLevel"])
        if "powBits" in d:
            params.pow_bits = int(d["powBits"])
        if "foldOptimisation" in d:
            params.fold_optimisation = FoldType.from_string(d["foldOptimisation"])
        return params

    @classmethod
    def from_json(cls, path: Union[str, Path], **primitives: Any) -> "WhirParameters":
        """Load from a JSON file (see from_dict for the keys)."""
        with open(path) as f:
            return cls.from_dict(json.load(f), **primitives)


# --- Derived Configuration ---

@dataclass
class RoundConfig:
    """Parameters of one folding round after the first.

    Attributes:
        pow_bits: PoW before the STIR queries
        folding_pow_bits: PoW per sumcheck round of the fold
        num_queries: STIR queries on the previous function
        ood_samples: Out-of-domain samples on the folded function
        log_inv_rate: Inverse rate before this round's fold
    """
    pow_bits: float
    folding_pow_bits: float
    num_queries: int
    ood_samples: int
    log_inv_rate: int

    def __str__(self) -> str:
        return (
            f"Num_queries: {self.num_queries}, rate: 2^-{self.log_inv_rate}, "
            f"pow_bits: {self.pow_bits:.1f}, ood_samples: {self.ood_samples}, "
            f"folding_pow: {self.folding_pow_bits:.1f}"
        )


class WhirConfig:
    """Round schedule derived from MultivariateParameters and WhirParameters.

    Args:
        mv_parameters: Polynomial shape
        whir_parameters: Protocol knobs
        field: Base field the polynomial is committed over
        extension: Field challenges live in (defaults to field)
        pow_strategy: Opaque PoW solver, passed through

    Raises:
        FoldingFactorError: If the folding schedule does not fit num_variables
        ValueError: If the field has no domain large enough, or no OOD sample
            count reaches the security level
    """

    def __init__(
        self,
        mv_parameters: MultivariateParameters,
        whir_parameters: WhirParameters,
        field: TwoAdicField = BABY_BEAR,
        extension: Optional[TwoAdicField] = None,
        pow_strategy: Any = None,
    ) -> None:
        extension = extension or field
        if extension.prime_subfield.characteristic != field.prime_subfield.characteristic:
            raise ValueError(f"{extension.name} is not an extension of {field.name}")

        folding_factor = whir_parameters.folding_factor
        soundness_type = whir_parameters.soundness_type
        security_level = whir_parameters.security_level
        folding_factor.check_validity(mv_parameters.num_variables)

        protocol_security_level = max(0, security_level - whir_parameters.pow_bits)
        field_bits = field_size_bits(extension, field)
        log_inv_rate = whir_parameters.starting_log_inv_rate
        num_variables = mv_parameters.num_variables

        starting_domain = Domain.new(1 << num_variables, log_inv_rate, field, extension)
        if starting_domain is None:
            raise ValueError(
                f"Should have found an appropriate domain - check Field 2 adicity? "
                f"(2^{num_variables + log_inv_rate} points, {field.name} two-adicity {field.two_adicity})"
            )

        num_rounds, final_sumcheck_rounds = folding_factor.compute_number_of_rounds(num_variables)

        log_eta_start = self.log_eta(soundness_type, log_inv_rate)

        if whir_parameters.initial_statement:
            committment_ood_samples = self.ood_samples(
                security_level, soundness_type, num_variables, log_inv_rate, log_eta_start, field_bits
            )
            starting_folding_pow_bits = self.folding_pow_bits(
                security_level, soundness_type, field_bits, num_variables, log_inv_rate, log_eta_start
            )
        else:
            committment_ood_samples = 0
            prox_gaps_error = self.rbr_soundness_fold_prox_gaps(
                soundness_type, field_bits, num_variables, log_inv_rate, log_eta_start
            ) + math.log2(folding_factor.at_round(0))
            starting_folding_pow_bits = max(0.0, security_level - prox_gaps_error)

        round_parameters: List[RoundConfig] = []
        num_variables -= folding_factor.at_round(0)
        for round_ in range(num_rounds):
            # Queries are set w.r.t. to old rate, while the rest to the new rate
            next_rate = log_inv_rate + (folding_factor.at_round(round_) - 1)

            log_next_eta = self.log_eta(soundness_type, next_rate)
            num_queries = self.queries(soundness_type, protocol_security_level, log_inv_rate)
            ood_samples = self.ood_samples(
                security_level, soundness_type, num_variables, next_rate, log_next_eta, field_bits
            )

            query_error = self.rbr_queries(soundness_type, log_inv_rate, num_queries)
            combination_error = self.rbr_soundness_queries_combination(
                soundness_type, field_bits, num_variables, next_rate, log_next_eta, ood_samples, num_queries
            )
            pow_bits = max(0.0, security_level - min(query_error, combination_error))

            folding_pow_bits = self.folding_pow_bits(
                security_level, soundness_type, field_bits, num_variables, next_rate, log_next_eta
            )

            round_parameters.append(RoundConfig(
                pow_bits=pow_bits,
                folding_pow_bits=folding_pow_bits,
                num_queries=num_queries,
                ood_samples=ood_samples,
                log_inv_rate=log_inv_rate,
            ))

            num_variables -= folding_factor.at_round(round_ + 1)
            log_inv_rate = next_rate

        final_queries = self.queries(soundness_type, protocol_security_level, log_inv_rate)
        final_pow_bits = max(
            0.0, security_level - self.rbr_queries(soundness_type, log_inv_rate, final_queries)
        )
        final_folding_pow_bits = max(0.0, float(security_level - (field_bits - 1)))

        self.mv_parameters = mv_parameters
        self.soundness_type = soundness_type
        self.security_level = security_level
        self.max_pow_bits = whir_parameters.pow_bits
        self.field = field
        self.extension = extension
        self.field_size_bits = field_bits

        self.committment_ood_samples = committment_ood_samples
        # The WHIR protocol can prove either:
        # 1. The commitment is a valid low degree polynomial. In that case, the
        #    initial statement is set to false.
        # 2. The commitment is a valid folded polynomial, and an additional
        #    polynomial evaluation statement. In that case, the initial
        #    statement is set to true.
        self.initial_statement = whir_parameters.initial_statement
        self.starting_domain = starting_domain
        self.starting_log_inv_rate = whir_parameters.starting_log_inv_rate
        self.starting_folding_pow_bits = starting_folding_pow_bits

        self.folding_factor = folding_factor
        self.round_parameters = round_parameters
        self.fold_optimisation = whir_parameters.fold_optimisation

        self.final_queries = final_queries
        self.final_pow_bits = final_pow_bits
        self.final_log_inv_rate = log_inv_rate
        self.final_sumcheck_rounds = final_sumcheck_rounds
        self.final_folding_pow_bits = final_folding_pow_bits

        self.pow_strategy = pow_strategy
        self.merkle_hash = whir_parameters.merkle_hash
        self.merkle_compress = whir_parameters.merkle_compress

        logger.debug("Derived WHIR configuration:\n%s", self)

    def n_rounds(self) -> int:
        return len(self.round_parameters)

    def check_pow_bits(self) -> bool:
        """True when every PoW requirement fits within max_pow_bits (inclusive)."""
        max_bits = float(self.max_pow_bits)

        required = [
            ("starting_folding_pow_bits", self.starting_folding_pow_bits),
            ("final_pow_bits", self.final_pow_bits),
            ("final_folding_pow_bits", self.final_folding_pow_bits),
        ]
        for i, r in enumerate(self.round_parameters):
            required.append((f"round {i} pow_bits", r.pow_bits))
            required.append((f"round {i} folding_pow_bits", r.folding_pow_bits))

        ok = True
        for name, bits in required:
            if bits > max_bits:
                logger.warning("%s = %.2f exceeds the PoW budget of %d bits", name, bits, self.max_pow_bits)
                ok = False
        return ok

    # --- Soundness formulas ---

    @staticmethod
    def log_eta(soundness_type: SoundnessType, log_inv_rate: int) -> float:
        if soundness_type == SoundnessType.ProvableList:
            return -(0.5 * log_inv_rate + LOG2_10 + 1.0)
        if soundness_type == SoundnessType.UniqueDecoding:
            return 0.0
        return -(log_inv_rate + 1.0)

    @staticmethod
    def list_size_bits(
        soundness_type: SoundnessType,
        num_variables: int,
        log_inv_rate: int,
        log_eta: float,
    ) -> float:
        if soundness_type == SoundnessType.ConjectureList:
            return (num_variables + log_inv_rate) - log_eta
        if soundness_type == SoundnessType.ProvableList:
            log_inv_sqrt_rate = log_inv_rate / 2.0
            return log_inv_sqrt_rate - (1.0 + log_eta)
        return 0.0

    @staticmethod
    def rbr_ood_sample(
        soundness_type: SoundnessType,
        num_variables: int,
        log_inv_rate: int,
        log_eta: float,
        field_size_bits: int,
        ood_samples: int,
    ) -> float:
        list_size_bits = WhirConfig.list_size_bits(soundness_type, num_variables, log_inv_rate, log_eta)

        error = 2.0 * list_size_bits + (num_variables * ood_samples)
        return (ood_samples * field_size_bits) + 1.0 - error

    @staticmethod
    def ood_samples(
        security_level: int,  # We don't do PoW for OOD
        soundness_type: SoundnessType,
        num_variables: int,
        log_inv_rate: int,
        log_eta: float,
        field_size_bits: int,
    ) -> int:
        """Smallest OOD sample count in [1, 64) reaching security_level."""
        if soundness_type == SoundnessType.UniqueDecoding:
            return 0
        for ood_samples in range(1, 64):
            bits = WhirConfig.rbr_ood_sample(
                soundness_type, num_variables, log_inv_rate, log_eta, field_size_bits, ood_samples
            )
            if bits >= security_level:
                return ood_samples
        raise ValueError("Could not find an appropriate number of OOD samples")

    @staticmethod
    def rbr_soundness_fold_prox_gaps(
        soundness_type: SoundnessType,
        field_size_bits: int,
        num_variables: int,
        log_inv_rate: int,
        log_eta: float,
    ) -> float:
        """Proximity-gaps term of one fold."""
        # Recall, at each round we are only folding by two at a time
        if soundness_type == SoundnessType.ConjectureList:
            error = (num_variables + log_inv_rate) - log_eta
        elif soundness_type == SoundnessType.ProvableList:
            error = LOG2_10 + 3.5 * log_inv_rate + 2.0 * num_variables
        else:
            error = float(num_variables + log_inv_rate)
        return field_size_bits - error

    @staticmethod
    def rbr_soundness_fold_sumcheck(
        soundness_type: SoundnessType,
        field_size_bits: int,
        num_variables: int,
        log_inv_rate: int,
        log_eta: float,
    ) -> float:
        list_size = WhirConfig.list_size_bits(soundness_type, num_variables, log_inv_rate, log_eta)
        return field_size_bits - (list_size + 1.0)

    @staticmethod
    def folding_pow_bits(
        security_level: int,
        soundness_type: SoundnessType,
        field_size_bits: int,
        num_variables: int,
        log_inv_rate: int,
        log_eta: float,
    ) -> float:
        prox_gaps_error = WhirConfig.rbr_soundness_fold_prox_gaps(
            soundness_type, field_size_bits, num_variables, log_inv_rate, log_eta
        )
        sumcheck_error = WhirConfig.rbr_soundness_fold_sumcheck(
            soundness_type, field_size_bits, num_variables, log_inv_rate, log_eta
        )
        error = min(prox_gaps_error, sumcheck_error)
        return max(0.0, security_level - error)

    @staticmethod
    def queries(soundness_type: SoundnessType, protocol_security_level: int, log_inv_rate: int) -> int:
        """Number of queries reaching protocol_security_level at the given rate."""
        if soundness_type == SoundnessType.UniqueDecoding:
            rate = 1.0 / (1 << log_inv_rate)
            denom = math.log2(0.5 * (1.0 + rate))
            num_queries_f = -protocol_security_level / denom
        elif soundness_type == SoundnessType.ProvableList:
            num_queries_f = (2 * protocol_security_level) / log_inv_rate
        else:
            num_queries_f = protocol_security_level / log_inv_rate
        return math.ceil(num_queries_f)

    @staticmethod
    def rbr_queries(soundness_type: SoundnessType, log_inv_rate: int, num_queries: int) -> float:
        """Bits of security of the query step."""
        if soundness_type == SoundnessType.UniqueDecoding:
            rate = 1.0 / (1 << log_inv_rate)
            denom = -math.log2(0.5 * (1.0 + rate))
            return num_queries * denom
        if soundness_type == SoundnessType.ProvableList:
            return num_queries * 0.5 * log_inv_rate
        return float(num_queries * log_inv_rate)

    @staticmethod
    def rbr_soundness_queries_combination(
        soundness_type: SoundnessType,
        field_size_bits: int,
        num_variables: int,
        log_inv_rate: int,
        log_eta: float,
        ood_samples: int,
        num_queries: int,
    ) -> float:
        list_size = WhirConfig.list_size_bits(soundness_type, num_variables, log_inv_rate, log_eta)
        log_combination = math.log2(ood_samples + num_queries)
        return field_size_bits - (log_combination + list_size + 1.0)

    # --- Reporting ---

    def summary(self) -> str:
        """Parameters followed by the round-by-round soundness analysis."""
        st = self.soundness_type
        fsb = self.field_size_bits
        lines = [
            str(self.mv_parameters),
            f", folding factor: {self.folding_factor}, final sumcheck rounds: {self.final_sumcheck_rounds}",
            f"Security level: {self.security_level} bits using {st} security and {self.max_pow_bits} bits of PoW",
            f"initial_folding_pow_bits: {self.starting_folding_pow_bits:.1f}",
        ]
        lines.extend(str(r) for r in self.round_parameters)
        lines.append(
            f"final_queries: {self.final_queries}, final_rate: 2^-{self.final_log_inv_rate}, "
            f"final_pow_bits: {self.final_pow_bits:.1f}, final_folding_pow_bits: {self.final_folding_pow_bits:.1f}"
        )
        lines.append("------------------------------------")
        lines.append("Round by round soundness analysis:")
        lines.append("------------------------------------")

        num_variables = self.mv_parameters.num_variables
        log_eta = self.log_eta(st, self.starting_log_inv_rate)

        if self.committment_ood_samples > 0:
            bits = self.rbr_ood_sample(
                st, num_variables, self.starting_log_inv_rate, log_eta, fsb, self.committment_ood_samples
            )
            lines.append(f"{bits:.1f} bits -- OOD commitment")

        prox_gaps_error = self.rbr_soundness_fold_prox_gaps(st, fsb, num_variables, self.starting_log_inv_rate, log_eta)
        sumcheck_error = self.rbr_soundness_fold_sumcheck(st, fsb, num_variables, self.starting_log_inv_rate, log_eta)
        lines.append(
            f"{min(prox_gaps_error, sumcheck_error) + self.starting_folding_pow_bits:.1f} bits -- "
            f"(x{self.folding_factor.at_round(0)}) prox gaps: {prox_gaps_error:.1f}, "
            f"sumcheck: {sumcheck_error:.1f}, pow: {self.starting_folding_pow_bits:.1f}"
        )

        num_variables -= self.folding_factor.at_round(0)
        for round_, r in enumerate(self.round_parameters):
            next_rate = r.log_inv_rate + (self.folding_factor.at_round(round_) - 1)
            log_eta = self.log_eta(st, next_rate)

            if r.ood_samples > 0:
                bits = self.rbr_ood_sample(st, num_variables, next_rate, log_eta, fsb, r.ood_samples)
                lines.append(f"{bits:.1f} bits -- OOD sample")

            query_error = self.rbr_queries(st, r.log_inv_rate, r.num_queries)
            combination_error = self.rbr_soundness_queries_combination(
                st, fsb, num_variables, next_rate, log_eta, r.ood_samples, r.num_queries
            )
            lines.append(
                f"{min(query_error, combination_error) + r.pow_bits:.1f} bits -- query error: {query_error:.1f}, "
                f"combination: {combination_error:.1f}, pow: {r.pow_bits:.1f}"
            )

            prox_gaps_error = self.rbr_soundness_fold_prox_gaps(st, fsb, num_variables, next_rate, log_eta)
            sumcheck_error = self.rbr_soundness_fold_sumcheck(st, fsb, num_variables, next_rate, log_eta)
            lines.append(
                f"{min(prox_gaps_error, sumcheck_error) + r.folding_pow_bits:.1f} bits -- "
                f"(x{self.folding_factor.at_round(round_ + 1)}) prox gaps: {prox_gaps_error:.1f}, "
                f"sumcheck: {sumcheck_error:.1f}, pow: {r.folding_pow_bits:.1f}"
            )

            num_variables -= self.folding_factor.at_round(round_ + 1)

        query_error = self.rbr_queries(st, self.final_log_inv_rate, self.final_queries)
        lines.append(
            f"{query_error + self.final_pow_bits:.1f} bits -- query error: {query_error:.1f}, "
            f"pow: {self.final_pow_bits:.1f}"
        )

        if self.final_sumcheck_rounds > 0:
            combination_error = fsb - 1
            lines.append(
                f"{combination_error + self.final_folding_pow_bits:.1f} bits -- "
                f"(x{self.final_sumcheck_rounds}) combination: {combination_error:.1f}, "
                f"pow: {self.final_folding_pow_bits:.1f}"
            )

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()
