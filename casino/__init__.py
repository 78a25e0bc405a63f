"""Casino game engine with RTP verification - UI-agnostic."""

from casino.rng import RandomSource, live_rng, reset_live_rng

__all__ = [
    "RandomSource",
    "live_rng",
    "reset_live_rng",
]
