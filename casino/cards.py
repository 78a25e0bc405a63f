"""Playing cards and the multi-deck blackjack shoe."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator

from casino.rng import RandomSource

CARDS_PER_DECK = 52


class Suit(Enum):
    """Card suits."""

    HEARTS = auto()
    DIAMONDS = auto()
    CLUBS = auto()
    SPADES = auto()

    def __str__(self) -> str:
        return {
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
            Suit.SPADES: "♠",
        }[self]

    @property
    def is_red(self) -> bool:
        return self in (Suit.HEARTS, Suit.DIAMONDS)


class Rank(Enum):
    """Card ranks. Values are the rank order, not the point value."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        if 2 <= self.value <= 10:
            return str(self.value)
        return {
            Rank.ACE: "A",
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }[self]

    @property
    def points(self) -> int:
        """Blackjack point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        return min(self.value, 10)

    @property
    def is_ace(self) -> bool:
        return self == Rank.ACE


_RANK_CODES = {str(rank): rank for rank in Rank} | {"T": Rank.TEN}
_SUIT_CODES = {
    "H": Suit.HEARTS,
    "D": Suit.DIAMONDS,
    "C": Suit.CLUBS,
    "S": Suit.SPADES,
} | {str(suit): suit for suit in Suit}


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.points

    @property
    def is_ace(self) -> bool:
        return self.rank.is_ace

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like 'AS', '10h' or 'K♥'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str, suit_str = s[:-1], s[-1]
        if rank_str not in _RANK_CODES:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUIT_CODES:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_RANK_CODES[rank_str], _SUIT_CODES[suit_str])


class Shoe:
    """
    A multi-deck shoe shuffled with the owning game's random source.

    The shoe is rebuilt and reshuffled when fewer than one full deck
    remains at the start of a round, or when a draw finds it empty.
    """

    def __init__(self, rng: RandomSource, num_decks: int = 6) -> None:
        """
        Initialize and shuffle a shoe.

        Args:
            rng: Random source used for every shuffle
            num_decks: Number of 52-card decks
        """
        if num_decks < 1:
            raise ValueError("Shoe must have at least 1 deck")

        self._rng = rng
        self._num_decks = num_decks
        self._cards: list[Card] = []
        self.shuffles = 0
        self.shuffle()

    def shuffle(self) -> None:
        """Rebuild the full shoe and shuffle it."""
        self._cards = [
            Card(rank, suit)
            for _ in range(self._num_decks)
            for suit in Suit
            for rank in Rank
        ]
        self._rng.shuffle(self._cards)
        self.shuffles += 1

    def draw(self) -> Card:
        """Draw a card, reshuffling first if the shoe is empty."""
        if not self._cards:
            self.shuffle()
        return self._cards.pop()

    def load(self, cards: Iterable[Card]) -> None:
        """Replace the remaining cards, e.g. when restoring a saved shoe."""
        self._cards = list(cards)

    @property
    def needs_shuffle(self) -> bool:
        """True when less than one full deck remains."""
        return len(self._cards) < CARDS_PER_DECK

    @property
    def cards_remaining(self) -> int:
        return len(self._cards)

    @property
    def total_cards(self) -> int:
        return self._num_decks * CARDS_PER_DECK

    @property
    def num_decks(self) -> int:
        return self._num_decks

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
