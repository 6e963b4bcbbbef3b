"""A keystream generator built from a field permutation in sponge mode."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence

Permutation = Callable[[list[int]], Sequence[int]]


class StreamCipher:
    """Produce an endless stream of field elements by repeatedly permuting a state.

    Each permutation call yields the first ``rate`` elements of the new state.
    """

    def __init__(self, permutation: Permutation, width: int, rate: int) -> None:
        if width <= 0:
            raise ValueError("width must be positive")
        if not 0 < rate <= width:
            raise ValueError("rate must be between 1 and width")
        self.permutation = permutation
        self.width = width
        self.rate = rate

    def cipher(self, state: Sequence[int]) -> Iterator[int]:
        """Return the keystream seeded with ``state``, zero-padded to the width."""
        seed = list(state)
        if len(seed) > self.width:
            raise ValueError("State length must be less than or equal to WIDTH")
        seed.extend([0] * (self.width - len(seed)))
        return self._stream(seed)

    def _stream(self, state: list[int]) -> Iterator[int]:
        while True:
            state = list(self.permutation(state))
            if len(state) != self.width:
                raise ValueError("permutation changed the state width")
            yield from state[:self.rate]