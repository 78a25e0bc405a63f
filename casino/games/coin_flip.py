"""Coin flip: a fair 50/50 draw with the house edge in the payout."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from casino.games.base import Bet, CasinoGame, GameKind, RoundResult, settle
from casino.rng import RandomSource
from config import config


class CoinSide(str, Enum):
    HEADS = "heads"
    TAILS = "tails"


@dataclass(frozen=True)
class CoinFlipResult(RoundResult):
    side: CoinSide
    choice: CoinSide
    payout_multiplier: float
    bet_amount: int
    payout: int

    @property
    def player_wins(self) -> bool:
        return self.side == self.choice


class CoinFlip(CasinoGame[CoinSide]):
    """
    Coin flip with a transparent house edge.

    The coin is fair; a 2% edge pays 1.96x instead of 2x, so
    RTP = 0.5 * 2 * (1 - edge) = 1 - edge.
    """

    kind = GameKind.COIN_FLIP
    display_name = "Coin Flip"

    def __init__(self, rng: RandomSource, house_edge: float | None = None) -> None:
        super().__init__(rng)
        self.house_edge = config.casino.coin_flip_house_edge if house_edge is None else house_edge
        if not 0.0 <= self.house_edge < 1.0:
            raise ValueError(f"house_edge must be in [0, 1), got {self.house_edge}")

    @property
    def payout_multiplier(self) -> float:
        """Total-return multiplier on a win."""
        return 2.0 * (1 - self.house_edge)

    @property
    def payout_display(self) -> str:
        return f"{self.payout_multiplier:.2f}x"

    def flip(self) -> CoinSide:
        return CoinSide.HEADS if self.rng.boolean() else CoinSide.TAILS

    def play(self, bet: Bet[CoinSide]) -> CoinFlipResult:
        side = self.flip()
        multiplier = self.payout_multiplier if side == bet.selection else 0.0
        return CoinFlipResult(
            side=side,
            choice=bet.selection,
            payout_multiplier=multiplier,
            bet_amount=bet.amount,
            payout=settle(bet.amount, multiplier),
        )

    def theoretical_rtp(self, selection: CoinSide | None = None) -> float:
        return 0.5 * self.payout_multiplier

    def default_selection(self) -> CoinSide:
        return CoinSide.HEADS

    def parse_selection(self, raw: Any) -> CoinSide:
        return CoinSide(raw)
