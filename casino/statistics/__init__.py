"""Statistical calculations: probability engine and round aggregation."""

from casino.statistics.accumulator import RoundStats
from casino.statistics.probability import FinalDistribution, ProbabilityEngine

__all__ = [
    "FinalDistribution",
    "ProbabilityEngine",
    "RoundStats",
]
