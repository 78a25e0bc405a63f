"""Seedable random source shared by every casino game."""

from random import Random
from typing import Any, Hashable, Mapping, MutableSequence, Sequence, TypeVar

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


class RandomSource:
    """
    Uniform random generator with the derived samplers the games need.

    Construct with an explicit seed for reproducible sequences, or without
    one for live play (seeded from OS entropy). Two instances built with the
    same seed return identical values for identical call sequences.
    """

    def __init__(self, seed: int | None = None) -> None:
        """
        Initialize the random source.

        Args:
            seed: Integer seed, or None for a non-deterministic source
        """
        self._seed = seed
        self._random = Random(seed) if seed is not None else Random()

    @property
    def seed(self) -> int | None:
        """Return the seed (None if unseeded)."""
        return self._seed

    def getstate(self) -> Any:
        """Return the internal generator state."""
        return self._random.getstate()

    def uniform(self) -> float:
        """Return a float in [0, 1)."""
        return self._random.random()

    def uniform_int(self, bound: int) -> int:
        """Return an integer in [0, bound)."""
        if bound <= 0:
            raise ValueError(f"bound must be positive, got {bound}")
        return self._random.randrange(bound)

    def boolean(self) -> bool:
        """Return True or False with equal probability."""
        return self._random.random() < 0.5

    def choice(self, items: Sequence[T]) -> T:
        """Return a uniformly chosen element of a non-empty sequence."""
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        return items[self.uniform_int(len(items))]

    def shuffle(self, items: MutableSequence[Any]) -> None:
        """Shuffle in place (Fisher-Yates, top index down)."""
        for i in range(len(items) - 1, 0, -1):
            j = self.uniform_int(i + 1)
            items[i], items[j] = items[j], items[i]

    def weighted_choice(self, weights: Mapping[K, float]) -> K:
        """
        Draw a key with probability proportional to its weight.

        Args:
            weights: Mapping of key to positive weight

        Returns:
            The selected key. If floating-point error leaves the scan
            without a selection, the last key is returned.
        """
        if not weights:
            raise ValueError("weighted_choice requires at least one weight")
        total = sum(weights.values())
        if total <= 0:
            raise ValueError(f"Total weight must be positive, got {total}")

        remainder = self.uniform() * total
        for key, weight in weights.items():
            remainder -= weight
            if remainder <= 0:
                return key

        return next(reversed(list(weights)))

    def crash_point(self, house_edge: float) -> float:
        """
        Draw a crash multiplier by inverse-transform sampling.

        The survival function is P(crash > x) = (1 - house_edge) / x for
        x >= 1, so cashing out at any fixed target x returns
        x * P(crash > x) = 1 - house_edge. A draw in the top house_edge
        slice of [0, 1) is an instant crash at exactly 1.0; below it the
        multiplier is 1 / (1 - u / (1 - house_edge)).

        Args:
            house_edge: House edge in [0, 1)

        Returns:
            Crash multiplier, always >= 1.0
        """
        if not 0.0 <= house_edge < 1.0:
            raise ValueError(f"house_edge must be in [0, 1), got {house_edge}")

        u = self.uniform()
        survival = 1.0 - house_edge
        if u >= survival:
            return 1.0
        return survival / (survival - u)


# Process-wide live-play source
_live_rng: RandomSource | None = None


def live_rng() -> RandomSource:
    """Get or create the live-play random source."""
    global _live_rng
    if _live_rng is None:
        _live_rng = RandomSource()
    return _live_rng


def reset_live_rng(seed: int | None = None) -> RandomSource:
    """Replace the live-play source (tests seed it for reproducibility)."""
    global _live_rng
    _live_rng = RandomSource(seed)
    return _live_rng
