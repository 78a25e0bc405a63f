"""European roulette: 37 pockets (0-36), single zero."""

from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from functools import lru_cache
from typing import Any

from casino.games.base import Bet, CasinoGame, GameKind, RoundResult
from casino.rng import RandomSource
from config import config

POCKETS = 37

# Wheel order for animation reference
WHEEL_ORDER: tuple[int, ...] = (
    0, 32, 15, 19, 4, 21, 2, 25, 17, 34, 6, 27, 13, 36, 11, 30, 8, 23, 10,
    5, 24, 16, 33, 1, 20, 14, 31, 9, 22, 18, 29, 7, 28, 12, 35, 3, 26,
)

RED_NUMBERS = frozenset({1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36})
BLACK_NUMBERS = frozenset(range(1, POCKETS)) - RED_NUMBERS


class Color(str, Enum):
    RED = "red"
    BLACK = "black"
    GREEN = "green"


class RouletteBetType(str, Enum):
    """Bet types on the European layout."""

    SINGLE = "single"
    GREEN = "green"  # 0 only, pays as a single number
    RED = "red"
    BLACK = "black"
    ODD = "odd"
    EVEN = "even"
    LOW = "low"  # 1-18
    HIGH = "high"  # 19-36
    DOZEN1 = "dozen1"
    DOZEN2 = "dozen2"
    DOZEN3 = "dozen3"
    COLUMN1 = "column1"
    COLUMN2 = "column2"
    COLUMN3 = "column3"


_SINGLE_TYPES = {RouletteBetType.SINGLE, RouletteBetType.GREEN}
_EVEN_MONEY_TYPES = {
    RouletteBetType.RED,
    RouletteBetType.BLACK,
    RouletteBetType.ODD,
    RouletteBetType.EVEN,
    RouletteBetType.LOW,
    RouletteBetType.HIGH,
}


def color(number: int) -> Color:
    """Color of a pocket."""
    if number == 0:
        return Color.GREEN
    return Color.RED if number in RED_NUMBERS else Color.BLACK


def dozen(number: int) -> int:
    """Dozen 1-3, or 0 for the zero pocket."""
    return 0 if number == 0 else (number - 1) // 12 + 1


def column(number: int) -> int:
    """Column 1-3, or 0 for the zero pocket."""
    return 0 if number == 0 else (number - 1) % 3 + 1


@dataclass(frozen=True)
class RouletteSelection:
    """What a roulette bet covers."""

    bet_type: RouletteBetType
    number: int | None = None

    def __post_init__(self) -> None:
        if self.bet_type == RouletteBetType.SINGLE:
            if self.number is None or not 0 <= self.number < POCKETS:
                raise ValueError("A single-number bet needs a number in 0-36")

    def __str__(self) -> str:
        if self.bet_type == RouletteBetType.SINGLE:
            return f"single {self.number}"
        return self.bet_type.value


@lru_cache(maxsize=None)
def covered_numbers(selection: RouletteSelection) -> frozenset[int]:
    """Pockets that win for a selection."""
    bet_type = selection.bet_type
    if bet_type == RouletteBetType.SINGLE:
        return frozenset({selection.number})
    if bet_type == RouletteBetType.GREEN:
        return frozenset({0})
    if bet_type == RouletteBetType.RED:
        return RED_NUMBERS
    if bet_type == RouletteBetType.BLACK:
        return BLACK_NUMBERS

    numbers = range(1, POCKETS)
    if bet_type == RouletteBetType.ODD:
        return frozenset(n for n in numbers if n % 2 == 1)
    if bet_type == RouletteBetType.EVEN:
        return frozenset(n for n in numbers if n % 2 == 0)
    if bet_type == RouletteBetType.LOW:
        return frozenset(n for n in numbers if n <= 18)
    if bet_type == RouletteBetType.HIGH:
        return frozenset(n for n in numbers if n >= 19)
    if bet_type.value.startswith("dozen"):
        index = int(bet_type.value[-1])
        return frozenset(n for n in numbers if dozen(n) == index)
    index = int(bet_type.value[-1])
    return frozenset(n for n in numbers if column(n) == index)


@dataclass(frozen=True)
class RouletteResult(RoundResult):
    """A spin and, if a bet was placed, its settlement."""

    number: int
    bet: Bet[RouletteSelection] | None = None
    payout_multiplier: int = 0
    payout: int = 0
    bet_amount: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "bet_amount", self.bet.amount if self.bet else 0)

    @property
    def color(self) -> Color:
        return color(self.number)

    @property
    def is_odd(self) -> bool:
        return self.number > 0 and self.number % 2 == 1

    @property
    def is_low(self) -> bool:
        return 1 <= self.number <= 18

    @property
    def dozen(self) -> int:
        return dozen(self.number)

    @property
    def column(self) -> int:
        return column(self.number)


class Roulette(CasinoGame[RouletteSelection]):
    """European roulette. The house edge comes entirely from the zero."""

    kind = GameKind.ROULETTE
    display_name = "Roulette"

    def __init__(
        self,
        rng: RandomSource,
        single_payout: int | None = None,
        even_money_payout: int | None = None,
        dozen_payout: int | None = None,
    ) -> None:
        super().__init__(rng)
        odds = config.casino
        self.single_payout = odds.roulette_single_payout if single_payout is None else single_payout
        self.even_money_payout = (
            odds.roulette_even_money_payout if even_money_payout is None else even_money_payout
        )
        self.dozen_payout = odds.roulette_dozen_payout if dozen_payout is None else dozen_payout

    def payout_multiplier(self, bet_type: RouletteBetType) -> int:
        """Winnings multiplier on the stake (excludes the stake itself)."""
        if bet_type in _SINGLE_TYPES:
            return self.single_payout
        if bet_type in _EVEN_MONEY_TYPES:
            return self.even_money_payout
        return self.dozen_payout

    def spin(self) -> int:
        """Draw a pocket."""
        return self.rng.uniform_int(POCKETS)

    def is_winner(self, selection: RouletteSelection, number: int) -> bool:
        return number in covered_numbers(selection)

    def evaluate(self, bet: Bet[RouletteSelection], number: int) -> RouletteResult:
        """Settle a bet against a drawn number."""
        if not self.is_winner(bet.selection, number):
            return RouletteResult(number=number, bet=bet)

        multiplier = self.payout_multiplier(bet.selection.bet_type)
        payout = bet.amount + bet.amount * multiplier if bet.is_payable else 0
        return RouletteResult(
            number=number,
            bet=bet,
            payout_multiplier=multiplier,
            payout=payout,
        )

    def play(self, bet: Bet[RouletteSelection]) -> RouletteResult:
        return self.evaluate(bet, self.spin())

    def winnings(self, result: RouletteResult) -> int:
        """Net winnings (negative stake on loss)."""
        return result.net

    def exact_rtp(self, selection: RouletteSelection) -> Fraction:
        covered = len(covered_numbers(selection))
        multiplier = self.payout_multiplier(selection.bet_type)
        return Fraction(covered, POCKETS) * (multiplier + 1)

    def theoretical_rtp(self, selection: RouletteSelection | None = None) -> float:
        """(covered / 37) * (multiplier + 1); 36/37 for every standard bet."""
        return float(self.exact_rtp(selection or self.default_selection()))

    def default_selection(self) -> RouletteSelection:
        return RouletteSelection(RouletteBetType.RED)

    def parse_selection(self, raw: Any) -> RouletteSelection:
        """Accept 'red', 'single:17', or {'bet_type': ..., 'number': ...}."""
        if isinstance(raw, RouletteSelection):
            return raw
        if isinstance(raw, dict):
            return RouletteSelection(RouletteBetType(raw["bet_type"]), raw.get("number"))
        bet_type, _, number = str(raw).partition(":")
        return RouletteSelection(RouletteBetType(bet_type), int(number) if number else None)
