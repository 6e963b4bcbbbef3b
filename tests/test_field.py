import random

import pytest

from sealstore.field import P, batch_inverse, collect_rational, inverse


def test_inverse_of_one_is_one():
    assert inverse(1) == 1


@pytest.mark.parametrize("value", [2, 3, 12345, P - 1, P + 5])
def test_inverse_times_value_is_one(value):
    assert inverse(value) * value % P == 1


def test_inverse_of_zero_raises():
    with pytest.raises(ZeroDivisionError):
        inverse(0)
    with pytest.raises(ZeroDivisionError):
        inverse(P)


def test_batch_inverse_matches_single_inverse():
    rng = random.Random(7)
    values = [rng.randrange(1, P) for _ in range(50)]
    assert batch_inverse(values) == [inverse(v) for v in values]


def test_batch_inverse_empty():
    assert batch_inverse([]) == []


def test_batch_inverse_with_zero_raises():
    with pytest.raises(ZeroDivisionError):
        batch_inverse([3, 0, 5])


def test_collect_rational_exact_division():
    assert collect_rational([(6, 3), (10, 5)]) == [2, 2]


def test_collect_rational_round_trip():
    rng = random.Random(11)
    originals = [rng.randrange(P) for _ in range(20)]
    denominators = [rng.randrange(1, P) for _ in range(20)]
    pairs = [(a * b % P, b) for a, b in zip(originals, denominators)]
    assert collect_rational(pairs) == originals


def test_collect_rational_empty():
    assert collect_rational([]) == []