"""Batch simulation and RTP verification for every casino game."""

import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable

from casino.games import GameKind, get_game
from casino.games.base import Bet
from casino.rng import RandomSource
from casino.statistics.accumulator import RoundStats
from config import config

logger = logging.getLogger(__name__)

# z-score of a two-sided 95% confidence interval
Z_95 = 1.96


def expected_tolerance(num_rounds: int) -> float:
    """
    95% half-width for an RTP estimate over `num_rounds` rounds.

    Uses a per-round variance bound of 0.25, so the pass/fail threshold
    shrinks with sample size. Zero rounds give 0.0.
    """
    if num_rounds <= 0:
        return 0.0
    return Z_95 * math.sqrt(0.25 / num_rounds)


class RiskLevel(str, Enum):
    """Volatility class of a game, from the std deviation of its return ratio."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"

    @classmethod
    def from_std_deviation(cls, std_deviation: float) -> "RiskLevel":
        if std_deviation < 0.5:
            return cls.LOW
        if std_deviation < 1.5:
            return cls.MEDIUM
        if std_deviation < 3.0:
            return cls.HIGH
        return cls.VERY_HIGH

    def __str__(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class SimulationResult:
    """Read-only outcome of a simulation batch."""

    game_name: str
    kind: GameKind
    seed: int
    num_rounds: int
    total_bet: int
    total_return: int
    observed_rtp: float
    theoretical_rtp: float
    hit_rate: float
    wins: int
    losses: int
    pushes: int
    std_deviation: float
    max_drawdown: int
    longest_winning_streak: int
    longest_losing_streak: int
    expected_tolerance: float
    risk_level: RiskLevel
    elapsed_seconds: float
    cancelled: bool = False
    extra_stats: dict[str, Any] = field(default_factory=dict)

    @property
    def rtp_difference(self) -> float:
        return abs(self.observed_rtp - self.theoretical_rtp)

    @property
    def within_tolerance(self) -> bool:
        """|observed - theoretical| < expected tolerance; never true for an empty batch."""
        return self.num_rounds > 0 and self.rtp_difference < self.expected_tolerance

    @property
    def observed_house_edge(self) -> float:
        return 1 - self.observed_rtp

    @property
    def theoretical_house_edge(self) -> float:
        return 1 - self.theoretical_rtp

    def to_dict(self) -> dict[str, Any]:
        return {
            "game_name": self.game_name,
            "kind": self.kind.value,
            "seed": self.seed,
            "num_rounds": self.num_rounds,
            "total_bet": self.total_bet,
            "total_return": self.total_return,
            "observed_rtp": self.observed_rtp,
            "theoretical_rtp": self.theoretical_rtp,
            "rtp_difference": self.rtp_difference,
            "observed_house_edge": self.observed_house_edge,
            "theoretical_house_edge": self.theoretical_house_edge,
            "hit_rate": self.hit_rate,
            "wins": self.wins,
            "losses": self.losses,
            "pushes": self.pushes,
            "std_deviation": self.std_deviation,
            "max_drawdown": self.max_drawdown,
            "longest_winning_streak": self.longest_winning_streak,
            "longest_losing_streak": self.longest_losing_streak,
            "expected_tolerance": self.expected_tolerance,
            "within_tolerance": self.within_tolerance,
            "risk_level": self.risk_level.value,
            "elapsed_seconds": self.elapsed_seconds,
            "cancelled": self.cancelled,
            "extra_stats": self.extra_stats,
        }

    def __str__(self) -> str:
        status = "✓ Within tolerance" if self.within_tolerance else "✗ Outside tolerance"
        return "\n".join(
            [
                f"{self.game_name} Simulation Results",
                "━" * 28,
                f"Rounds: {self.num_rounds}",
                f"Observed RTP: {self.observed_rtp * 100:.2f}%",
                f"Theoretical RTP: {self.theoretical_rtp * 100:.2f}%",
                f"Difference: {self.rtp_difference * 100:.2f}% "
                f"(tolerance {self.expected_tolerance * 100:.2f}%)",
                f"House edge: {self.observed_house_edge * 100:.2f}% "
                f"(theoretical {self.theoretical_house_edge * 100:.2f}%)",
                f"Hit rate: {self.hit_rate * 100:.2f}%",
                f"Risk: {self.risk_level}",
                f"Status: {status}",
                f"Time: {self.elapsed_seconds * 1000:.0f}ms",
            ]
        )


StopCallback = Callable[[int], bool]


class SimulationService:
    """
    Runs batches of independent rounds against a private random source.

    The service never touches the live-play source: it is seeded from an
    explicit seed, or from the clock when none is given, and the seed is
    recorded on every result so a batch can be replayed.
    """

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            seed = config.simulation.seed
        self.seed = seed if seed is not None else time.time_ns()
        self.rng = RandomSource(self.seed)

    def run(
        self,
        kind: GameKind | str,
        num_rounds: int | None = None,
        selection: Any = None,
        bet_amount: int | None = None,
        should_stop: StopCallback | None = None,
    ) -> SimulationResult:
        """
        Simulate `num_rounds` rounds of a game.

        Args:
            kind: Game to simulate
            num_rounds: Number of rounds (configured default if None)
            selection: Bet selection in the game's external form; the
                game's default selection if None
            bet_amount: Stake per round
            should_stop: Called with the rounds played so far before each
                round; returning True ends the batch early

        Returns:
            SimulationResult over the rounds actually played
        """
        if num_rounds is None:
            num_rounds = config.simulation.default_rounds
        if bet_amount is None:
            bet_amount = config.simulation.bet_amount
        if not 0 <= num_rounds <= config.simulation.max_rounds:
            raise ValueError(
                f"num_rounds must be between 0 and {config.simulation.max_rounds}, got {num_rounds}"
            )
        if bet_amount <= 0:
            raise ValueError(f"bet_amount must be positive, got {bet_amount}")

        game = get_game(kind, self.rng)
        chosen = game.default_selection() if selection is None else game.parse_selection(selection)
        theoretical_rtp = game.theoretical_rtp(chosen)
        label = game.describe_selection(chosen)
        bet = Bet(selection=chosen, amount=bet_amount)

        logger.info(
            "Simulating %d rounds of %s (%s), seed=%d", num_rounds, game.kind, label, self.seed
        )

        stats = RoundStats()
        cancelled = False
        start = time.perf_counter()
        for played in range(num_rounds):
            if should_stop is not None and should_stop(played):
                cancelled = True
                break
            result = game.play(bet)
            stats.record(bet_amount, result.payout, result.won, result.is_push)
        elapsed = time.perf_counter() - start

        if cancelled:
            logger.info("Simulation of %s cancelled after %d rounds", game.kind, stats.rounds)

        result = SimulationResult(
            game_name=f"{game.display_name} ({label})",
            kind=game.kind,
            seed=self.seed,
            num_rounds=stats.rounds,
            total_bet=stats.total_bet,
            total_return=stats.total_return,
            observed_rtp=stats.observed_rtp,
            theoretical_rtp=theoretical_rtp,
            hit_rate=stats.hit_rate,
            wins=stats.wins,
            losses=stats.losses,
            pushes=stats.pushes,
            std_deviation=stats.std_deviation,
            max_drawdown=stats.max_drawdown,
            longest_winning_streak=stats.longest_winning_streak,
            longest_losing_streak=stats.longest_losing_streak,
            expected_tolerance=expected_tolerance(stats.rounds),
            risk_level=RiskLevel.from_std_deviation(stats.std_deviation),
            elapsed_seconds=elapsed,
            cancelled=cancelled,
            extra_stats={
                "selection": label,
                "bet_amount": bet_amount,
                "max_return": stats.max_return,
            },
        )
        logger.info(
            "%s: observed RTP %.4f vs theoretical %.4f (%s)",
            result.game_name,
            result.observed_rtp,
            result.theoretical_rtp,
            "within tolerance" if result.within_tolerance else "outside tolerance",
        )
        return result

    def run_all(
        self,
        num_rounds: int | None = None,
        should_stop: StopCallback | None = None,
    ) -> list[SimulationResult]:
        """Simulate every game with its default selection."""
        return [
            self.run(kind, num_rounds, should_stop=should_stop) for kind in GameKind
        ]


def generate_report(results: Iterable[SimulationResult]) -> str:
    """Render a batch of results as a text summary."""
    results = list(results)
    rounds = results[0].num_rounds if results else 0
    lines = [
        "╔═══════════════════════════════════════════╗",
        "║     CASINO RTP SIMULATION REPORT          ║",
        "╠═══════════════════════════════════════════╣",
        f"║ Rounds per game: {rounds}",
        "╠═══════════════════════════════════════════╣",
    ]
    for result in results:
        status = "✓" if result.within_tolerance else "✗"
        lines.append(
            f"║ {status} {result.game_name:<32} "
            f"RTP: {result.observed_rtp * 100:.1f}% ({result.theoretical_rtp * 100:.1f}%)"
        )
    lines.append("╚═══════════════════════════════════════════╝")
    return "\n".join(lines)


def run_simulation(
    kind: GameKind | str,
    num_rounds: int,
    selection: Any = None,
    seed: int | None = None,
) -> SimulationResult:
    """One-off simulation on a fresh, independently seeded source."""
    return SimulationService(seed).run(kind, num_rounds, selection)
