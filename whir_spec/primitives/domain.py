"""Radix-2 evaluation domains.

A Radix2EvaluationDomain is the multiplicative subgroup of power-of-two order
n (optionally shifted into a coset) over which Reed-Solomon encodings and
NTTs operate. A Domain pairs such a subgroup over the base field with its
image in the extension field, sized for a polynomial of a given degree at a
given rate.
"""

from dataclasses import dataclass, replace
from typing import Any, Optional

from .field import TwoAdicField


def _next_power_of_two(n: int) -> int:
    return 1 if n <= 1 else 1 << (n - 1).bit_length()


# --- Radix-2 Domain ---

@dataclass(frozen=True, eq=False)
class Radix2EvaluationDomain:
    """Defines a domain over which finite field (I)FFTs can be performed.

    Works only for fields that have a multiplicative subgroup of size that is
    a power-of-2.

    Attributes:
        field: Field the domain lives in
        size: The size of the domain
        log_size_of_group: log2(size)
        size_as_field_element: Size of the domain as a field element
        size_inv: Inverse of the size in the field
        group_gen: A generator of the subgroup
        group_gen_inv: Inverse of the generator of the subgroup
        offset: Offset that specifies the coset
        offset_inv: Inverse of the offset that specifies the coset
        offset_pow_size: offset^size, constant coefficient of the vanishing polynomial
    """
    field: TwoAdicField
    size: int
    log_size_of_group: int
    size_as_field_element: Any
    size_inv: Any
    group_gen: Any
    group_gen_inv: Any
    offset: Any
    offset_inv: Any
    offset_pow_size: Any

    @classmethod
    def new(cls, field: TwoAdicField, num_coeffs: int) -> Optional["Radix2EvaluationDomain"]:
        """Smallest subgroup holding num_coeffs points, or None if the field has none that large."""
        size = _next_power_of_two(num_coeffs)
        log_size_of_group = size.bit_length() - 1

        if log_size_of_group > field.two_adicity:
            return None

        # The 2^(log_size_of_group) root of unity
        group_gen = field.two_adic_generator(log_size_of_group)
        assert group_gen ** size == field.one(), "generator order does not divide the domain size"
        assert size == 1 or group_gen ** (size // 2) != field.one(), "generator order is below the domain size"

        size_as_field_element = field.element(size)
        one = field.one()
        return cls(
            field=field,
            size=size,
            log_size_of_group=log_size_of_group,
            size_as_field_element=size_as_field_element,
            size_inv=size_as_field_element ** -1,
            group_gen=group_gen,
            group_gen_inv=group_gen ** -1,
            offset=one,
            offset_inv=one,
            offset_pow_size=one,
        )

    def get_coset(self, offset) -> "Radix2EvaluationDomain":
        """Same subgroup shifted by offset."""
        return replace(
            self,
            offset=offset,
            offset_inv=offset ** -1,
            offset_pow_size=offset ** self.size,
        )

    def elements(self):
        """All domain points offset * g^i, in order."""
        points = self.field.zeros(self.size)
        points[0] = self.offset
        for i in range(1, self.size):
            points[i] = points[i - 1] * self.group_gen
        return points

    def evaluate_vanishing_polynomial(self, tau):
        """Z(tau) = tau^n - offset^n."""
        return tau ** self.size - self.offset_pow_size


# --- WHIR Domain ---

@dataclass(frozen=True, eq=False)
class Domain:
    """Evaluation domain of a committed polynomial.

    Attributes:
        base_domain: The subgroup over the base field (None once scaled)
        backing_domain: The same subgroup lifted into the extension field
    """
    base_domain: Optional[Radix2EvaluationDomain]
    backing_domain: Radix2EvaluationDomain

    @classmethod
    def new(
        cls,
        degree: int,
        log_rho_inv: int,
        field: TwoAdicField,
        extension: Optional[TwoAdicField] = None,
    ) -> Optional["Domain"]:
        """Domain of size degree * 2^log_rho_inv, or None if the field cannot hold it."""
        extension = extension or field
        size = degree * (1 << log_rho_inv)
        base_domain = Radix2EvaluationDomain.new(field, size)
        if base_domain is None:
            return None
        return cls(base_domain=base_domain, backing_domain=_to_extension_domain(base_domain, extension))

    def size(self) -> int:
        return self.backing_domain.size

    def scale(self, power: int) -> "Domain":
        """Domain of the folded function: size / power, generator g^power."""
        return Domain(base_domain=None, backing_domain=self._scale_generator_by(power))

    def _scale_generator_by(self, power: int) -> Radix2EvaluationDomain:
        backing = self.backing_domain
        if power < 1 or self.size() % power != 0:
            raise ValueError(f"cannot scale a domain of size {self.size()} by {power}")

        new_size = self.size() // power
        group_gen = backing.group_gen ** power
        offset = backing.offset ** power
        size_as_field_element = backing.field.element(new_size)
        return Radix2EvaluationDomain(
            field=backing.field,
            size=new_size,
            log_size_of_group=new_size.bit_length() - 1,
            size_as_field_element=size_as_field_element,
            size_inv=size_as_field_element ** -1,
            group_gen=group_gen,
            group_gen_inv=group_gen ** -1,
            offset=offset,
            offset_inv=offset ** -1,
            offset_pow_size=offset ** new_size,
        )


def _to_extension_domain(domain: Radix2EvaluationDomain, extension: TwoAdicField) -> Radix2EvaluationDomain:
    """Lift every field of a base-field domain into the extension field."""
    if domain.field is extension:
        return domain
    return Radix2EvaluationDomain(
        field=extension,
        size=domain.size,
        log_size_of_group=domain.log_size_of_group,
        size_as_field_element=extension.lift(domain.size_as_field_element),
        size_inv=extension.lift(domain.size_inv),
        group_gen=extension.lift(domain.group_gen),
        group_gen_inv=extension.lift(domain.group_gen_inv),
        offset=extension.lift(domain.offset),
        offset_inv=extension.lift(domain.offset_inv),
        offset_pow_size=extension.lift(domain.offset_pow_size),
    )
