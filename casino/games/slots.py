"""Three-reel slot machine driven by a weighted paytable."""

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from itertools import product
from typing import Any, Sequence

from casino.games.base import Bet, CasinoGame, GameKind, RoundResult
from casino.rng import RandomSource
from config import config


class SlotSymbol(str, Enum):
    SEVEN = "seven"
    BAR = "bar"
    BELL = "bell"
    CHERRY = "cherry"
    LEMON = "lemon"
    ORANGE = "orange"
    BLANK = "blank"


@dataclass(frozen=True)
class SlotSymbolData:
    """One paytable row. Higher weight = more common = lower value."""

    symbol: SlotSymbol
    emoji: str
    weight: int
    three_match: int
    two_match: int = 0


# Exact RTP of this table is 0.951108 (three-match 0.517474,
# first-two-match 0.10457, loose cherries 0.329064).
PAYTABLE: tuple[SlotSymbolData, ...] = (
    SlotSymbolData(SlotSymbol.SEVEN, "7️⃣", 3, 1000, 20),  # Jackpot
    SlotSymbolData(SlotSymbol.BAR, "🎱", 5, 250, 10),
    SlotSymbolData(SlotSymbol.BELL, "🔔", 8, 100),
    SlotSymbolData(SlotSymbol.CHERRY, "🍒", 12, 50, 5),
    SlotSymbolData(SlotSymbol.LEMON, "🍋", 15, 40),
    SlotSymbolData(SlotSymbol.ORANGE, "🍊", 18, 32),
    SlotSymbolData(SlotSymbol.BLANK, "⬜", 39, 0),
)

REELS = 3


@dataclass(frozen=True)
class SlotOutcome:
    """How a reel combination pays, independent of the stake."""

    payout_multiplier: int
    is_jackpot: bool = False
    win_type: str | None = None


@dataclass(frozen=True)
class SlotResult(RoundResult):
    reels: tuple[SlotSymbol, ...]
    payout_multiplier: int
    is_jackpot: bool
    win_type: str | None
    bet_amount: int
    payout: int

    @property
    def is_win(self) -> bool:
        return self.payout_multiplier > 0


class SlotMachine(CasinoGame[None]):
    """
    Slot machine.

    Live spins and the exact RTP calculation share `evaluate`, so the
    published RTP always describes the game that is actually played.
    """

    kind = GameKind.SLOTS
    display_name = "Slot Machine"

    def __init__(
        self,
        rng: RandomSource,
        paytable: Sequence[SlotSymbolData] = PAYTABLE,
        min_rtp: float | None = None,
        max_rtp: float | None = None,
    ) -> None:
        super().__init__(rng)
        if not paytable:
            raise ValueError("Paytable must not be empty")
        for row in paytable:
            if row.weight <= 0:
                raise ValueError(f"Symbol {row.symbol.value} must have a positive weight")

        self.paytable = tuple(paytable)
        self._by_symbol = {row.symbol: row for row in self.paytable}
        self._weights = {row.symbol: float(row.weight) for row in self.paytable}
        self.total_weight = sum(row.weight for row in self.paytable)

        low = config.casino.slot_min_rtp if min_rtp is None else min_rtp
        high = config.casino.slot_max_rtp if max_rtp is None else max_rtp
        rtp = self.theoretical_rtp()
        if not low <= rtp <= high:
            raise ValueError(f"Paytable RTP {rtp:.4f} outside [{low}, {high}]")

    def symbol_data(self, symbol: SlotSymbol) -> SlotSymbolData:
        return self._by_symbol[symbol]

    def spin_reel(self) -> SlotSymbol:
        return self.rng.weighted_choice(self._weights)

    def spin_reels(self) -> tuple[SlotSymbol, ...]:
        return tuple(self.spin_reel() for _ in range(REELS))

    def evaluate(self, reels: Sequence[SlotSymbol]) -> SlotOutcome:
        """
        Price a reel combination. First match wins:

        1. three identical non-blank symbols pay the three-match multiplier
        2. first two reels identical, non-blank, with a two-match multiplier
        3. one or two cherries anywhere pay the cherry count
        """
        first, second, third = reels

        if first == second == third and first != SlotSymbol.BLANK:
            data = self.symbol_data(first)
            return SlotOutcome(
                payout_multiplier=data.three_match,
                is_jackpot=first == SlotSymbol.SEVEN,
                win_type=f"3x {data.emoji}" if data.three_match > 0 else None,
            )

        # Only reels 1 and 2 are checked for a pair
        if first == second and first != SlotSymbol.BLANK:
            data = self.symbol_data(first)
            if data.two_match > 0:
                return SlotOutcome(payout_multiplier=data.two_match, win_type=f"2x {data.emoji}")

        cherries = sum(1 for symbol in reels if symbol == SlotSymbol.CHERRY)
        if 1 <= cherries < REELS:
            return SlotOutcome(payout_multiplier=cherries, win_type=f"{cherries}🍒")

        return SlotOutcome(payout_multiplier=0)

    def play(self, bet: Bet[None]) -> SlotResult:
        reels = self.spin_reels()
        outcome = self.evaluate(reels)
        return SlotResult(
            reels=reels,
            payout_multiplier=outcome.payout_multiplier,
            is_jackpot=outcome.is_jackpot,
            win_type=outcome.win_type,
            bet_amount=bet.amount,
            payout=bet.amount * outcome.payout_multiplier if bet.is_payable else 0,
        )

    def combination_probabilities(self) -> dict[tuple[SlotSymbol, ...], Fraction]:
        """Exact probability of every ordered reel combination."""
        probabilities = {
            row.symbol: Fraction(row.weight, self.total_weight) for row in self.paytable
        }
        combos = {}
        for reels in product(probabilities, repeat=REELS):
            p = Fraction(1)
            for symbol in reels:
                p *= probabilities[symbol]
            combos[reels] = p
        return combos

    def exact_rtp(self) -> Fraction:
        return sum(
            (p * self.evaluate(reels).payout_multiplier
             for reels, p in self.combination_probabilities().items()),
            Fraction(0),
        )

    def theoretical_rtp(self, selection: None = None) -> float:
        return float(self.exact_rtp())

    def default_selection(self) -> None:
        return None

    def parse_selection(self, raw: Any) -> None:
        return None

    def describe_selection(self, selection: None) -> str:
        return "spin"
