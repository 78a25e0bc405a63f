"""Incremental per-round statistics for simulation batches."""

import math
from dataclasses import dataclass


@dataclass
class RoundStats:
    """
    Running aggregates over settled rounds.

    Everything is updated in O(1) per round, so a batch never keeps its
    round history. Variance uses Welford's online algorithm.
    """

    rounds: int = 0
    total_bet: int = 0
    total_return: int = 0
    wins: int = 0
    losses: int = 0
    pushes: int = 0
    max_return: int = 0

    # Return ratio (return / bet) moments
    _mean: float = 0.0
    _m2: float = 0.0

    # Cumulative profit and drawdown
    profit: int = 0
    peak_profit: int = 0
    max_drawdown: int = 0

    # Streaks; pushes break both
    _win_streak: int = 0
    _loss_streak: int = 0
    longest_winning_streak: int = 0
    longest_losing_streak: int = 0

    def record(self, bet: int, returned: int, is_win: bool, is_push: bool) -> None:
        """Fold one settled round into the aggregates."""
        if bet <= 0:
            raise ValueError(f"bet must be positive, got {bet}")

        self.rounds += 1
        self.total_bet += bet
        self.total_return += returned
        self.max_return = max(self.max_return, returned)

        ratio = returned / bet
        delta = ratio - self._mean
        self._mean += delta / self.rounds
        self._m2 += delta * (ratio - self._mean)

        self.profit += returned - bet
        self.peak_profit = max(self.peak_profit, self.profit)
        self.max_drawdown = max(self.max_drawdown, self.peak_profit - self.profit)

        if is_push:
            self.pushes += 1
            self._win_streak = 0
            self._loss_streak = 0
        elif is_win:
            self.wins += 1
            self._win_streak += 1
            self._loss_streak = 0
            self.longest_winning_streak = max(self.longest_winning_streak, self._win_streak)
        else:
            self.losses += 1
            self._loss_streak += 1
            self._win_streak = 0
            self.longest_losing_streak = max(self.longest_losing_streak, self._loss_streak)

    @property
    def observed_rtp(self) -> float:
        return self.total_return / self.total_bet if self.total_bet else 0.0

    @property
    def hit_rate(self) -> float:
        return self.wins / self.rounds if self.rounds else 0.0

    @property
    def mean_return_ratio(self) -> float:
        return self._mean

    @property
    def variance(self) -> float:
        """Population variance of the per-round return ratio."""
        return self._m2 / self.rounds if self.rounds else 0.0

    @property
    def std_deviation(self) -> float:
        return math.sqrt(self.variance)
