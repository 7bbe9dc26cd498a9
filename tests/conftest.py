"""Shared fixtures for the WHIR tests."""

import pytest

from whir_spec.primitives.field import BABY_BEAR
from whir_spec.protocol.folding import FoldingFactor
from whir_spec.protocol.parameters import (
    FoldType,
    MultivariateParameters,
    SoundnessType,
    WhirConfig,
    WhirParameters,
)


@pytest.fixture
def gf():
    """galois class of the BabyBear field."""
    return BABY_BEAR.GF


@pytest.fixture
def default_whir_params() -> WhirParameters:
    """Folding by 4 at 100 bits under ConjectureList, 20 bits of PoW."""
    return WhirParameters(
        initial_statement=True,
        starting_log_inv_rate=1,
        folding_factor=FoldingFactor.constant_from_second_round(4, 4),
        soundness_type=SoundnessType.ConjectureList,
        security_level=100,
        pow_bits=20,
        fold_optimisation=FoldType.ProverHelps,
    )


@pytest.fixture
def default_config(default_whir_params: WhirParameters) -> WhirConfig:
    return WhirConfig(MultivariateParameters(12), default_whir_params, field=BABY_BEAR)
