"""Blackjack hand evaluation."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from casino.cards import Card


def hand_value(cards: Iterable[Card]) -> tuple[int, bool]:
    """
    Score a set of cards.

    Aces start at 11 and are demoted to 1 one at a time while the total
    exceeds 21.

    Returns:
        (total, soft) where soft means an ace is still counted as 11
    """
    total = 0
    aces = 0
    for card in cards:
        total += card.value
        if card.is_ace:
            aces += 1

    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return total, aces > 0


@dataclass
class Hand:
    """A blackjack hand."""

    cards: list[Card] = field(default_factory=list)

    def add_card(self, card: Card) -> None:
        self.cards.append(card)

    def clear(self) -> None:
        self.cards.clear()

    @property
    def value(self) -> int:
        """Best total, or the lowest bust total."""
        return hand_value(self.cards)[0]

    @property
    def is_soft(self) -> bool:
        """Check if an ace is counted as 11 without busting."""
        return hand_value(self.cards)[1]

    @property
    def is_blackjack(self) -> bool:
        """Natural: 21 on exactly two cards."""
        return len(self.cards) == 2 and self.value == 21

    @property
    def is_busted(self) -> bool:
        return self.value > 21

    @property
    def can_hit(self) -> bool:
        return self.value < 21

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        if self.is_blackjack:
            return f"{cards_str} (BLACKJACK)"
        if self.is_busted:
            return f"{cards_str} (BUST)"
        if self.is_soft:
            return f"{cards_str} (soft {self.value})"
        return f"{cards_str} ({self.value})"
