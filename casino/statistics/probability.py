"""Infinite-deck probability calculations for blackjack."""

from dataclasses import dataclass, field
from typing import Callable

from config import config

BUST = 22

# Infinite deck: each point value's chance of being the next card (Ace = 11)
CARD_PROBABILITIES: dict[int, float] = {value: 1 / 13 for value in range(2, 10)} | {
    10: 4 / 13,
    11: 1 / 13,
}

HitPolicy = Callable[[int, bool], bool]


def add_card(total: int, soft: bool, card: int) -> tuple[int, bool]:
    """
    Add a card to a (total, soft) hand state.

    A second ace always counts as 1; a soft hand that goes over 21
    demotes its ace to 1.
    """
    if card == 11:
        if soft:
            total += 1
        else:
            total += 11
            soft = True
    else:
        total += card

    if total > 21 and soft:
        total -= 10
        soft = False
    return total, soft


@dataclass(frozen=True)
class FinalDistribution:
    """Distribution of a hand's final result under a fixed hitting policy."""

    natural: float
    bust: float
    totals: dict[int, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate probabilities sum to 1."""
        total = self.natural + self.bust + sum(self.totals.values())
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Probabilities must sum to 1.0, got {total}")

    def probability_of(self, total: int) -> float:
        """P(final total == total), naturals excluded."""
        return self.totals.get(total, 0.0)


class ProbabilityEngine:
    """
    Exact blackjack probabilities for an infinite deck.

    A good approximation for 6+ deck shoes. Hands are tracked as
    (total, soft) states, so every hit-or-stand policy that depends only
    on the total and softness is solved by a short recursion.
    """

    def __init__(
        self,
        dealer_stands_soft_17: bool | None = None,
        natural_payout: float | None = None,
    ) -> None:
        """
        Initialize the probability engine.

        Args:
            dealer_stands_soft_17: Dealer stands on soft 17 (configured default)
            natural_payout: Winnings multiplier for a natural (3:2 = 1.5)
        """
        odds = config.casino
        self.dealer_stands_soft_17 = (
            odds.blackjack_dealer_stands_soft_17
            if dealer_stands_soft_17 is None
            else dealer_stands_soft_17
        )
        self.natural_payout = (
            odds.blackjack_natural_payout if natural_payout is None else natural_payout
        )
        self._dealer: FinalDistribution | None = None
        self._players: dict[int, FinalDistribution] = {}

    @staticmethod
    def card_probability(card: int) -> float:
        """Probability that the next card has point value `card` (2-11)."""
        return CARD_PROBABILITIES.get(card, 0.0)

    def dealer_should_hit(self, total: int, soft: bool) -> bool:
        if total < 17:
            return True
        return total == 17 and soft and not self.dealer_stands_soft_17

    def _distribution(self, should_hit: HitPolicy) -> FinalDistribution:
        cache: dict[tuple[int, bool], dict[int, float]] = {}

        def finish(total: int, soft: bool) -> dict[int, float]:
            if total > 21:
                return {BUST: 1.0}
            if not should_hit(total, soft):
                return {total: 1.0}
            key = (total, soft)
            if key not in cache:
                outcome: dict[int, float] = {}
                for card, p in CARD_PROBABILITIES.items():
                    for final, q in finish(*add_card(total, soft, card)).items():
                        outcome[final] = outcome.get(final, 0.0) + p * q
                cache[key] = outcome
            return cache[key]

        natural = 0.0
        results: dict[int, float] = {}
        for first, p1 in CARD_PROBABILITIES.items():
            state = add_card(0, False, first)
            for second, p2 in CARD_PROBABILITIES.items():
                total, soft = add_card(*state, second)
                if total == 21:
                    natural += p1 * p2
                    continue
                for final, q in finish(total, soft).items():
                    results[final] = results.get(final, 0.0) + p1 * p2 * q

        bust = results.pop(BUST, 0.0)
        return FinalDistribution(natural=natural, bust=bust, totals=results)

    def dealer_distribution(self) -> FinalDistribution:
        """Final dealer result from a fresh two-card start."""
        if self._dealer is None:
            self._dealer = self._distribution(self.dealer_should_hit)
        return self._dealer

    def player_distribution(self, stand_on: int) -> FinalDistribution:
        """Final result of a player who hits while below `stand_on`."""
        if stand_on not in self._players:
            self._players[stand_on] = self._distribution(
                lambda total, soft: total < stand_on
            )
        return self._players[stand_on]

    def dealer_bust_probability(self) -> float:
        return self.dealer_distribution().bust

    def expected_return(self, stand_on: int | None = None) -> float:
        """
        Return-to-player of a hit-below-`stand_on` policy.

        Outcomes are resolved in table order: player bust loses, a player
        natural pays 3:2 unless the dealer also has one (push), a dealer bust
        pays 1:1, otherwise the higher total wins and equal totals push.
        A dealer natural counts as 21 against a player's non-natural total.
        """
        if stand_on is None:
            stand_on = config.casino.blackjack_player_stands_on
        player = self.player_distribution(stand_on)
        dealer = self.dealer_distribution()

        # Return ratios: loss 0, push 1, even-money win 2
        rtp = player.natural * (
            dealer.natural * 1.0 + (1 - dealer.natural) * (1 + self.natural_payout)
        )

        dealer_totals = dict(dealer.totals)
        dealer_totals[21] = dealer_totals.get(21, 0.0) + dealer.natural
        for total, p in player.totals.items():
            win = dealer.bust + sum(q for d, q in dealer_totals.items() if d < total)
            push = dealer_totals.get(total, 0.0)
            rtp += p * (2.0 * win + push)

        return rtp

    def house_edge(self, stand_on: int | None = None) -> float:
        return 1.0 - self.expected_return(stand_on)
