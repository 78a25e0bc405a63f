"""Shared contract for every casino game module."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Generic, TypeVar

from casino.rng import RandomSource

S = TypeVar("S")


class GameKind(str, Enum):
    """Identifiers of the casino games."""

    ROULETTE = "roulette"
    BLACKJACK = "blackjack"
    SLOTS = "slots"
    COIN_FLIP = "coin_flip"
    HORSE_RACE = "horse_race"
    CRASH = "crash"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Bet(Generic[S]):
    """
    A stake on a game-specific selection.

    Callers verify and debit the balance before submitting; a non-positive
    amount is never paid out.
    """

    selection: S
    amount: int

    @property
    def is_payable(self) -> bool:
        return self.amount > 0


def settle(amount: int, multiplier: float) -> int:
    """
    Total return for a stake at a total-return multiplier.

    Rounded half-up to whole credits; zero for non-positive stakes.
    """
    if amount <= 0 or multiplier <= 0:
        return 0
    value = Decimal(str(amount * multiplier))
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class RoundResult:
    """Fields shared by every game's result (mixed into frozen dataclasses)."""

    bet_amount: int
    payout: int

    @property
    def won(self) -> bool:
        return self.bet_amount > 0 and self.payout > self.bet_amount

    @property
    def is_push(self) -> bool:
        return self.bet_amount > 0 and self.payout == self.bet_amount

    @property
    def net(self) -> int:
        """Winnings net of the stake (negative on loss)."""
        return self.payout - max(self.bet_amount, 0)


class CasinoGame(ABC, Generic[S]):
    """
    A game module: owns its odds model and draws from an injected source.

    Subclasses never reach for a global random source; the live-play and
    simulation sources are always passed in.
    """

    kind: GameKind
    display_name: str = "Casino Game"

    def __init__(self, rng: RandomSource) -> None:
        self.rng = rng

    @abstractmethod
    def play(self, bet: Bet[S]) -> RoundResult:
        """Play one independent round and settle the bet."""
        ...

    @abstractmethod
    def theoretical_rtp(self, selection: S | None = None) -> float:
        """Exact return-to-player for a selection (default if None)."""
        ...

    @abstractmethod
    def default_selection(self) -> S:
        """Selection used when a simulation is not given one."""
        ...

    def parse_selection(self, raw: Any) -> S:
        """Convert an external (JSON) selection into this game's type."""
        return raw

    def describe_selection(self, selection: S) -> str:
        return str(selection)

    def get_metadata(self) -> dict[str, Any]:
        """Return game metadata for the API."""
        selection = self.default_selection()
        return {
            "kind": self.kind.value,
            "display_name": self.display_name,
            "default_selection": self.describe_selection(selection),
            "theoretical_rtp": self.theoretical_rtp(selection),
        }
