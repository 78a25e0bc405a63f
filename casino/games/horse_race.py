"""Horse race with weighted win probabilities and house-edge odds."""

from dataclasses import dataclass
from typing import Any, Sequence

from casino.games.base import Bet, CasinoGame, GameKind, RoundResult, settle
from casino.rng import RandomSource
from config import HorseConfig, config


@dataclass(frozen=True)
class HorseRaceResult(RoundResult):
    winner_index: int
    winner: HorseConfig
    selected: int
    payout_multiplier: float
    bet_amount: int
    payout: int
    # Animation only: winner at 1.0, the rest behind it
    final_positions: tuple[float, ...]

    @property
    def player_wins(self) -> bool:
        return self.selected == self.winner_index


class HorseRace(CasinoGame[int]):
    """
    Weighted horse race.

    Each horse pays its fair odds (1 / P(win)) reduced by the house edge,
    so P(win) * payout = 1 - house_edge for every horse.
    """

    kind = GameKind.HORSE_RACE
    display_name = "Horse Race"

    def __init__(
        self,
        rng: RandomSource,
        horses: Sequence[HorseConfig] | None = None,
        house_edge: float | None = None,
    ) -> None:
        super().__init__(rng)
        self.horses = tuple(config.casino.horses if horses is None else horses)
        self.house_edge = (
            config.casino.horse_race_house_edge if house_edge is None else house_edge
        )
        if not self.horses:
            raise ValueError("A race needs at least one horse")
        if not 0.0 <= self.house_edge < 1.0:
            raise ValueError(f"house_edge must be in [0, 1), got {self.house_edge}")

        self.total_weight = sum(h.weight for h in self.horses)
        self._weights = {i: float(h.weight) for i, h in enumerate(self.horses)}

    def check_horse(self, index: int) -> int:
        if not 0 <= index < len(self.horses):
            raise ValueError(f"Unknown horse: {index}")
        return index

    def win_probability(self, index: int) -> float:
        return self.horses[self.check_horse(index)].weight / self.total_weight

    def payout_multiplier(self, index: int) -> float:
        """Fair odds reduced by the house edge (total return)."""
        return (1 / self.win_probability(index)) * (1 - self.house_edge)

    def odds_display(self, index: int) -> str:
        return f"{self.payout_multiplier(index):.1f}x"

    def probability_display(self, index: int) -> str:
        return f"{self.win_probability(index) * 100:.0f}%"

    def race(self) -> tuple[int, tuple[float, ...]]:
        """
        Decide the winner, then generate finish positions.

        Positions are drawn after the winner and never affect it.
        """
        winner = self.rng.weighted_choice(self._weights)
        positions = tuple(
            1.0 if i == winner else 0.6 + self.rng.uniform() * 0.39
            for i in range(len(self.horses))
        )
        return winner, positions

    def play(self, bet: Bet[int]) -> HorseRaceResult:
        self.check_horse(bet.selection)

        winner, positions = self.race()
        multiplier = self.payout_multiplier(bet.selection) if winner == bet.selection else 0.0
        return HorseRaceResult(
            winner_index=winner,
            winner=self.horses[winner],
            selected=bet.selection,
            payout_multiplier=multiplier,
            bet_amount=bet.amount,
            payout=settle(bet.amount, multiplier),
            final_positions=positions,
        )

    def theoretical_rtp(self, selection: int | None = None) -> float:
        index = self.default_selection() if selection is None else selection
        return self.win_probability(index) * self.payout_multiplier(index)

    def default_selection(self) -> int:
        return 0

    def parse_selection(self, raw: Any) -> int:
        return int(raw)

    def describe_selection(self, selection: int) -> str:
        return self.horses[self.check_horse(selection)].name
