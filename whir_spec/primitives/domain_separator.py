"""Fiat-Shamir transcript patterns.

A DomainSeparator declares, before any proving happens, the exact sequence of
messages an interactive protocol exchanges: what the prover absorbs into the
sponge and what the verifier squeezes out of it. It is pure declaration; the
transcript engine that executes it against a hash function lives elsewhere.

Pattern layout (bytes):

    <protocol id> ( NUL <op> <length> <label> )*

where op is "A" (absorb, prover message) or "S" (squeeze, verifier
challenge) and length is a decimal byte count. Labels must be non-empty,
must not contain NUL and must not start with a digit, so the pattern can be
parsed back unambiguously.

Builders never mutate: every operation returns a new separator, so calls can
be chained.
"""

import copy
from typing import List, Optional, Protocol, Tuple, TypeVar

from .field import TwoAdicField

SEP_BYTE = b"\0"
ABSORB = "A"
SQUEEZE = "S"

DIGEST_SIZE = 32
POW_CHALLENGE_SIZE = 32
POW_NONCE_SIZE = 8


def bytes_modp(bits: int) -> int:
    """Bytes needed to serialize one element of a field with bits-bit modulus."""
    return (bits + 7) // 8


def bytes_uniform_modp(bits: int) -> int:
    """Bytes squeezed per challenge element so that reduction mod p is ~uniform."""
    return (bits + 128 + 7) // 8


# --- Domain Separator ---

class DomainSeparator:
    """Append-only transcript pattern keyed by a protocol identifier.

    Args:
        protocol_id: Identifier string that starts the pattern
        field: Field whose elements scalar operations count (optional for
            byte-only patterns)
    """

    def __init__(self, protocol_id: str, field: Optional[TwoAdicField] = None) -> None:
        encoded = protocol_id.encode()
        if SEP_BYTE in encoded:
            raise ValueError("protocol id must not contain NUL")
        self._pattern = encoded
        self.field = field

    def __repr__(self) -> str:
        return f"DomainSeparator({self._pattern!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, DomainSeparator):
            return NotImplemented
        return self._pattern == other._pattern

    def __hash__(self) -> int:
        return hash(self._pattern)

    def __bytes__(self) -> bytes:
        return self._pattern

    def as_bytes(self) -> bytes:
        return self._pattern

    def ops(self) -> List[Tuple[str, int, str]]:
        """Parse the pattern back into (op, length, label) triples."""
        result = []
        for entry in self._pattern.split(SEP_BYTE)[1:]:
            text = entry.decode()
            op, rest = text[0], text[1:]
            digits = len(rest) - len(rest.lstrip("0123456789"))
            result.append((op, int(rest[:digits]), rest[digits:]))
        return result

    # --- Byte primitives ---

    def _append(self, op: str, count: int, label: str) -> "DomainSeparator":
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        if not label:
            raise ValueError("label must be non-empty")
        if "\0" in label:
            raise ValueError(f"label {label!r} must not contain NUL")
        if label[0].isdigit():
            raise ValueError(f"label {label!r} must not start with a digit")

        other = copy.copy(self)
        other._pattern = self._pattern + SEP_BYTE + f"{op}{count}{label}".encode()
        return other

    def add_bytes(self, count: int, label: str) -> "DomainSeparator":
        """Prover message of count raw bytes."""
        return self._append(ABSORB, count, label)

    def challenge_bytes(self, count: int, label: str) -> "DomainSeparator":
        """Verifier challenge of count raw bytes."""
        return self._append(SQUEEZE, count, label)

    def add_digest(self, label: str) -> "DomainSeparator":
        """Prover message carrying a Merkle root."""
        return self.add_bytes(DIGEST_SIZE, label)

    # --- Field primitives ---

    def _require_field(self) -> TwoAdicField:
        if self.field is None:
            raise ValueError("scalar operations need a DomainSeparator built with a field")
        return self.field

    def add_scalars(self, count: int, label: str) -> "DomainSeparator":
        """Prover message of count field elements."""
        field = self._require_field()
        size = bytes_modp(field.characteristic_bits) * field.dimension
        return self.add_bytes(count * size, label)

    def challenge_scalars(self, count: int, label: str) -> "DomainSeparator":
        """Verifier challenge of count field elements."""
        field = self._require_field()
        size = bytes_uniform_modp(field.characteristic_bits) * field.dimension
        return self.challenge_bytes(count * size, label)

    def challenge_pow(self, label: str) -> "DomainSeparator":
        """Proof-of-work: a challenge followed by the prover's nonce."""
        return self.challenge_bytes(POW_CHALLENGE_SIZE, label).add_bytes(POW_NONCE_SIZE, "pow-nonce")

    # --- Protocol extensions ---

    def add_ood(self, num_samples: int) -> "DomainSeparator":
        return add_ood(self, num_samples)

    def pow(self, bits: float) -> "DomainSeparator":
        return add_pow(self, bits)


# --- Extension Operations ---

class FieldDomainSeparator(Protocol):
    """Anything that can declare field-element challenges and responses."""

    def challenge_scalars(self, count: int, label: str) -> "FieldDomainSeparator": ...

    def add_scalars(self, count: int, label: str) -> "FieldDomainSeparator": ...


class PoWDomainSeparator(Protocol):
    """Anything that can declare a proof-of-work challenge."""

    def challenge_pow(self, label: str) -> "PoWDomainSeparator": ...


F = TypeVar("F", bound=FieldDomainSeparator)
P = TypeVar("P", bound=PoWDomainSeparator)


def add_ood(separator: F, num_samples: int) -> F:
    """Append num_samples out-of-domain queries and their answers.

    - If num_samples > 0, this appends a challenge labeled "ood_query" and a
      response labeled "ood_ans", each of num_samples field elements.
    - If num_samples == 0, the separator is returned unchanged.
    """
    if num_samples > 0:
        return separator.challenge_scalars(num_samples, "ood_query").add_scalars(num_samples, "ood_ans")
    return separator


def add_pow(separator: P, bits: float) -> P:
    """Append a proof-of-work challenge labeled "pow_queries" when bits > 0."""
    if bits > 0.0:
        return separator.challenge_pow("pow_queries")
    return separator
