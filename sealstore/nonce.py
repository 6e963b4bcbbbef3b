"""Nonces that fit in two Mersenne-31 field elements."""

from __future__ import annotations

from dataclasses import dataclass

from sealstore.field import P

_NONCE_LIMIT = P * P


def div_mod_mersenne31(x: int) -> tuple[int, int]:
    """Split ``x`` (assumed below P^2) into quotient and remainder by P."""
    t = (x & P) + (x >> 31)
    if t <= P:
        return x >> 31, t
    return (x >> 31) + 1, t - P


@dataclass(frozen=True)
class Nonce:
    """A nonce strictly below P^2."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value < _NONCE_LIMIT:
            raise ValueError("Nonce overflow")

    def as_mersenne31_word(self) -> tuple[int, int]:
        """Return the nonce as ``(low, high)`` field elements."""
        high, low = div_mod_mersenne31(self.value)
        return low % P, high % P