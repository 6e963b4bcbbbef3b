"""Arithmetic in the Mersenne-31 prime field."""

from __future__ import annotations

from collections.abc import Iterable

P = (1 << 31) - 1
"""The field modulus, 2^31 - 1."""


def inverse(value: int) -> int:
    """Return the multiplicative inverse of ``value`` modulo ``P``."""
    reduced = value % P
    if reduced == 0:
        raise ZeroDivisionError("zero has no multiplicative inverse")
    return pow(reduced, P - 2, P)


def batch_inverse(values: Iterable[int]) -> list[int]:
    """Invert every element of ``values`` using a single field inversion."""
    items = [v % P for v in values]
    if not items:
        return []
    prefix: list[int] = []
    acc = 1
    for item in items:
        prefix.append(acc)
        acc = acc * item % P
    acc_inv = inverse(acc)
    result = [0] * len(items)
    for position in reversed(range(len(items))):
        result[position] = acc_inv * prefix[position] % P
        acc_inv = acc_inv * items[position] % P
    return result


def collect_rational(pairs: Iterable[tuple[int, int]]) -> list[int]:
    """Evaluate ``numerator / denominator`` for each pair, batching the inversions."""
    collected = list(pairs)
    if not collected:
        return []
    numerators, denominators = zip(*collected)
    return [num * inv % P for num, inv in zip(numerators, batch_inverse(denominators))]