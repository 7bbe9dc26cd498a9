"""Two-adic prime fields and their extensions.

Uses galois library for all field arithmetic. A TwoAdicField describes a field
by its characteristic and degree, and exposes the capabilities the protocol
needs: identities, element construction, two-adicity and two-adic roots of
unity, and the bit-size figures used by the soundness bounds.

The galois class behind an extension field is built on first use, since
galois.GF() for extension fields takes several seconds to initialize.
"""

from functools import cached_property
from typing import List, Optional

import galois
import numpy as np

# --- Field Constants ---

BABY_BEAR_PRIME = 0x78000001
"""BabyBear prime: p = 2^31 - 2^27 + 1."""

GOLDILOCKS_PRIME = 0xFFFFFFFF00000001
"""Goldilocks prime: p = 2^64 - 2^32 + 1."""


def _two_adicity(order: int) -> int:
    """Largest k such that 2^k divides order - 1."""
    n = order - 1
    return (n & -n).bit_length() - 1


# --- Field Descriptor ---

class TwoAdicField:
    """A prime field or an extension of one with a large power-of-two subgroup.

    Args:
        name: Human readable name, used in reprs and config summaries
        characteristic: The prime p
        degree: Extension degree over the prime subfield (1 for prime fields)
        irreducible_poly: Descending coefficients of the defining polynomial
            (extension fields only)
        prime_subfield: The base TwoAdicField this one extends
    """

    def __init__(
        self,
        name: str,
        characteristic: int,
        degree: int = 1,
        irreducible_poly: Optional[List[int]] = None,
        prime_subfield: Optional["TwoAdicField"] = None,
    ) -> None:
        if degree < 1:
            raise ValueError(f"degree must be >= 1, got {degree}")
        if degree > 1 and prime_subfield is None:
            raise ValueError("extension fields need their prime subfield")
        if prime_subfield is not None and prime_subfield.characteristic != characteristic:
            raise ValueError(
                f"{name} has characteristic {characteristic}, "
                f"prime subfield {prime_subfield.name} has {prime_subfield.characteristic}"
            )

        self.name = name
        self.characteristic = characteristic
        self.degree = degree
        self.irreducible_poly = irreducible_poly
        self._prime_subfield = prime_subfield

        self.order = characteristic ** degree
        self.two_adicity = _two_adicity(self.order)

    def __repr__(self) -> str:
        return f"TwoAdicField({self.name})"

    @property
    def prime_subfield(self) -> "TwoAdicField":
        """The prime field underneath (self for prime fields)."""
        return self._prime_subfield if self._prime_subfield is not None else self

    @property
    def bits(self) -> int:
        """Bit length of the field order p^degree."""
        return self.order.bit_length()

    @property
    def characteristic_bits(self) -> int:
        """Bit length of the characteristic, the size of one coordinate."""
        return self.characteristic.bit_length()

    @property
    def dimension(self) -> int:
        """Dimension as a vector space over the prime subfield."""
        return self.degree

    @cached_property
    def GF(self):
        """The galois FieldArray class implementing this field."""
        if self.degree == 1:
            return galois.GF(self.characteristic)
        poly = galois.Poly(self.irreducible_poly, field=self.prime_subfield.GF)
        return galois.GF(self.order, irreducible_poly=poly)

    # --- Elements ---

    def zero(self):
        return self.GF(0)

    def one(self):
        return self.GF(1)

    def element(self, value: int):
        """Field element from its integer representation."""
        return self.GF(value % self.order)

    def elements(self, values: List[int]):
        """1-D field array from integer representations."""
        return self.GF([v % self.order for v in values])

    def zeros(self, n: int):
        return self.GF.Zeros(n)

    def lift(self, value):
        """Embed an element of the prime subfield into this field.

        galois integer representations of extension elements put the constant
        coefficient in the low digit, so integers below p are the prime
        subfield.
        """
        return self.GF(int(value))

    # --- Two-adic structure ---

    def two_adic_generator(self, log_n: int):
        """Canonical generator of the subgroup of order 2^log_n."""
        if log_n < 0 or log_n > self.two_adicity:
            raise ValueError(
                f"log_n must be in [0, {self.two_adicity}] for {self.name}, got {log_n}"
            )
        subfield = self.prime_subfield
        if self.degree > 1 and log_n <= subfield.two_adicity:
            # Roots of unity of the prime subfield keep their order in the extension
            return self.lift(subfield.two_adic_generator(log_n))
        return self.GF.primitive_element ** ((self.order - 1) >> log_n)


def field_size_bits(extension: TwoAdicField, base: TwoAdicField) -> int:
    """Total entropy, in bits, of an extension element as used by the list-decoding bounds."""
    return extension.bits * extension.dimension * base.dimension


def field_of(value) -> type:
    """galois FieldArray class of a field element or array."""
    if not isinstance(value, galois.FieldArray):
        raise TypeError(f"expected a galois FieldArray, got {type(value).__name__}")
    return type(value)


def as_field_array(values, field_cls=None) -> np.ndarray:
    """Copy values (a FieldArray or a sequence of field scalars) into a 1-D FieldArray."""
    if isinstance(values, galois.FieldArray):
        return values.reshape(-1).copy()
    values = list(values)
    if field_cls is None:
        if not values:
            raise ValueError("cannot infer the field of an empty sequence")
        field_cls = field_of(values[0])
    return field_cls([int(v) for v in values])


# --- Field Instances ---

BABY_BEAR = TwoAdicField("BabyBear", BABY_BEAR_PRIME)
"""Base field with two-adicity 27."""

GOLDILOCKS = TwoAdicField("Goldilocks", GOLDILOCKS_PRIME)
"""Base field with two-adicity 32."""

# x^3 - x - 1 = x^3 + 0*x^2 + (p-1)*x + (p-1), descending order for galois
GOLDILOCKS_3 = TwoAdicField(
    "Goldilocks3",
    GOLDILOCKS_PRIME,
    degree=3,
    irreducible_poly=[1, 0, GOLDILOCKS_PRIME - 1, GOLDILOCKS_PRIME - 1],
    prime_subfield=GOLDILOCKS,
)
"""Cubic extension of Goldilocks."""
