"""Blackjack: multi-deck shoe, 3:2 naturals, configurable soft-17 rule."""

from dataclasses import asdict, dataclass
from enum import Enum, auto
from typing import Any, Callable

from transitions import Machine

from casino.cards import Card, Shoe
from casino.events import EventEmitter, EventType, GameEvent
from casino.games.base import Bet, CasinoGame, GameKind, RoundResult, settle
from casino.hand import Hand
from casino.rng import RandomSource
from casino.statistics.probability import ProbabilityEngine
from config import config


class TableState(Enum):
    """
    Table state machine states.

    Flow: WAITING_FOR_BET → PLAYER_TURN → DEALER_TURN → ROUND_COMPLETE
    """

    WAITING_FOR_BET = auto()
    PLAYER_TURN = auto()
    DEALER_TURN = auto()
    ROUND_COMPLETE = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


class BlackjackOutcome(str, Enum):
    PLAYER_BLACKJACK = "player_blackjack"  # 3:2
    PLAYER_WINS = "player_wins"
    DEALER_BUSTS = "dealer_busts"
    DEALER_WINS = "dealer_wins"
    PLAYER_BUSTS = "player_busts"
    PUSH = "push"


@dataclass(frozen=True)
class BlackjackRules:
    """Blackjack table rules."""

    num_decks: int = 6
    dealer_stands_soft_17: bool = True
    natural_payout: float = 1.5  # 3:2 = 1.5, 6:5 = 1.2

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.num_decks < 1:
            raise ValueError("num_decks must be at least 1")
        if self.natural_payout < 1.0:
            raise ValueError("natural_payout must be at least 1.0")

    @classmethod
    def from_config(cls) -> "BlackjackRules":
        odds = config.casino
        return cls(
            num_decks=odds.blackjack_decks,
            dealer_stands_soft_17=odds.blackjack_dealer_stands_soft_17,
            natural_payout=odds.blackjack_natural_payout,
        )


@dataclass(frozen=True)
class BlackjackResult(RoundResult):
    outcome: BlackjackOutcome
    player_cards: tuple[str, ...]
    dealer_cards: tuple[str, ...]
    player_value: int
    dealer_value: int
    # Winnings multiplier: -1 loss, 0 push, 1 even money, 1.5 natural
    payout_multiplier: float
    bet_amount: int
    payout: int


def resolve(
    player: Hand, dealer: Hand, natural_payout: float = 1.5
) -> tuple[BlackjackOutcome, float]:
    """
    Decide a finished hand.

    Order: player bust, player natural, both natural, dealer bust, totals.

    Returns:
        (outcome, winnings multiplier) with -1 for a loss and 0 for a push
    """
    if player.is_busted:
        return BlackjackOutcome.PLAYER_BUSTS, -1.0
    if player.is_blackjack:
        if dealer.is_blackjack:
            return BlackjackOutcome.PUSH, 0.0
        return BlackjackOutcome.PLAYER_BLACKJACK, natural_payout
    if dealer.is_busted:
        return BlackjackOutcome.DEALER_BUSTS, 1.0
    if player.value > dealer.value:
        return BlackjackOutcome.PLAYER_WINS, 1.0
    if dealer.value > player.value:
        return BlackjackOutcome.DEALER_WINS, -1.0
    return BlackjackOutcome.PUSH, 0.0


def blackjack_payout(amount: int, multiplier: float) -> int:
    """Total return: 0 on a loss, the stake on a push, stake plus winnings on a win."""
    if amount <= 0 or multiplier < 0:
        return 0
    return amount + settle(amount, multiplier)


class BlackjackTable:
    """
    Interactive single-hand blackjack table using a state machine.

    UI-agnostic: communication happens through events and return values.
    Illegal actions return False and emit INVALID_ACTION.
    """

    STATES = [s.name.lower() for s in TableState]

    TRANSITIONS = [
        {"trigger": "deal_cards", "source": "waiting_for_bet", "dest": "player_turn"},
        {"trigger": "player_action", "source": "player_turn", "dest": "player_turn"},
        {"trigger": "player_done", "source": "player_turn", "dest": "dealer_turn"},
        {"trigger": "finish_round", "source": ["player_turn", "dealer_turn"], "dest": "round_complete"},
        {"trigger": "new_round", "source": "round_complete", "dest": "waiting_for_bet"},
    ]

    def __init__(self, rng: RandomSource, rules: BlackjackRules | None = None) -> None:
        """
        Initialize a table.

        Args:
            rng: Random source used to shuffle the shoe
            rules: Table rules (configured defaults if not provided)
        """
        self.rules = rules or BlackjackRules.from_config()
        self.shoe = Shoe(rng, num_decks=self.rules.num_decks)
        self.player_hand = Hand()
        self.dealer_hand = Hand()
        self.bet_amount = 0
        self.result: BlackjackResult | None = None
        self.events = EventEmitter()

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="waiting_for_bet",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> TableState:
        """Get current table state as enum."""
        return TableState[self._machine_state.upper()]  # type: ignore

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to table events."""
        self.events.subscribe(handler, event_type)

    def deal(self, amount: int) -> bool:
        """
        Take a bet and deal a new round.

        Args:
            amount: Stake, already debited by the caller

        Returns:
            True if the round was dealt
        """
        if self.state == TableState.ROUND_COMPLETE:
            self.new_round()
        if self.state != TableState.WAITING_FOR_BET:
            self.events.emit(
                EventType.INVALID_ACTION,
                message="Cannot deal in current state",
                state=self.state.name,
            )
            return False

        if self.shoe.needs_shuffle:
            self.shoe.shuffle()
            self.events.emit(EventType.SHOE_SHUFFLED)

        self.player_hand.clear()
        self.dealer_hand.clear()
        self.bet_amount = amount
        self.result = None

        # Deal: player, dealer, player, dealer (face down)
        self._deal_card(self.player_hand)
        self._deal_card(self.dealer_hand)
        self._deal_card(self.player_hand)
        self._deal_card(self.dealer_hand, face_up=False)

        self.events.emit(EventType.ROUND_STARTED, amount=amount)
        self.deal_cards()

        if self.player_hand.is_blackjack:
            # No dealer draw against a natural
            self.events.emit(EventType.PLAYER_BLACKJACK)
            self._reveal_hole_card()
            self._finish()
        return True

    def _deal_card(self, hand: Hand, face_up: bool = True) -> None:
        card = self.shoe.draw()
        hand.add_card(card)
        self.events.emit(
            EventType.CARD_DEALT,
            card=str(card) if face_up else "??",
            hand="dealer" if hand is self.dealer_hand else "player",
        )

    def hit(self) -> bool:
        """Player takes another card."""
        if self.state != TableState.PLAYER_TURN or not self.player_hand.can_hit:
            self.events.emit(EventType.INVALID_ACTION, message="Cannot hit")
            return False

        self._deal_card(self.player_hand)
        self.events.emit(EventType.PLAYER_HIT, hand_value=self.player_hand.value)

        if self.player_hand.is_busted:
            # No dealer draw against a bust
            self.events.emit(EventType.PLAYER_BUSTS, hand_value=self.player_hand.value)
            self._reveal_hole_card()
            self._finish()
            return True

        self.player_action()
        return True

    def stand(self) -> bool:
        """Player keeps the hand; the dealer plays out."""
        if self.state != TableState.PLAYER_TURN:
            self.events.emit(EventType.INVALID_ACTION, message="Cannot stand")
            return False

        self.events.emit(EventType.PLAYER_STAND, hand_value=self.player_hand.value)
        self.player_done()
        self._play_dealer()
        return True

    def _reveal_hole_card(self) -> None:
        self.events.emit(
            EventType.DEALER_REVEALS,
            card=str(self.dealer_hand.cards[1]),
            hand_value=self.dealer_hand.value,
        )

    def _play_dealer(self) -> None:
        self._reveal_hole_card()

        while self.dealer_should_hit():
            self._deal_card(self.dealer_hand)
            self.events.emit(EventType.DEALER_HITS, hand_value=self.dealer_hand.value)

        if self.dealer_hand.is_busted:
            self.events.emit(EventType.DEALER_BUSTS)

        self._finish()

    def dealer_should_hit(self) -> bool:
        """Dealer hits below 17, and on soft 17 unless standing on it."""
        value = self.dealer_hand.value
        if value < 17:
            return True
        return value == 17 and self.dealer_hand.is_soft and not self.rules.dealer_stands_soft_17

    def _settle(self) -> BlackjackResult:
        outcome, multiplier = resolve(
            self.player_hand, self.dealer_hand, self.rules.natural_payout
        )
        return BlackjackResult(
            outcome=outcome,
            player_cards=tuple(str(c) for c in self.player_hand),
            dealer_cards=tuple(str(c) for c in self.dealer_hand),
            player_value=self.player_hand.value,
            dealer_value=self.dealer_hand.value,
            payout_multiplier=multiplier,
            bet_amount=self.bet_amount,
            payout=blackjack_payout(self.bet_amount, multiplier),
        )

    def _finish(self) -> None:
        self.result = self._settle()
        self.events.emit(
            EventType.ROUND_ENDED,
            outcome=self.result.outcome.value,
            payout=self.result.payout,
        )
        self.finish_round()

    def snapshot(self) -> dict[str, Any]:
        """JSON-compatible table state for session storage."""
        return {
            "state": self._machine_state,
            "bet_amount": self.bet_amount,
            "rules": asdict(self.rules),
            "shoe": [str(c) for c in self.shoe],
            "player_cards": [str(c) for c in self.player_hand],
            "dealer_cards": [str(c) for c in self.dealer_hand],
        }

    @classmethod
    def restore(cls, rng: RandomSource, data: dict[str, Any]) -> "BlackjackTable":
        """Rebuild a table from `snapshot()` output; `rng` drives later reshuffles."""
        table = cls(rng, BlackjackRules(**data["rules"]))
        table.shoe.load(Card.from_string(c) for c in data["shoe"])
        table.player_hand = Hand([Card.from_string(c) for c in data["player_cards"]])
        table.dealer_hand = Hand([Card.from_string(c) for c in data["dealer_cards"]])
        table.bet_amount = data["bet_amount"]

        # Restore state machine state
        table._machine_state = data["state"]
        if table.state == TableState.ROUND_COMPLETE:
            table.result = table._settle()
        return table

    @property
    def can_hit(self) -> bool:
        return self.state == TableState.PLAYER_TURN and self.player_hand.can_hit

    @property
    def can_stand(self) -> bool:
        return self.state == TableState.PLAYER_TURN

    def to_dict(self, reveal: bool | None = None) -> dict[str, Any]:
        """Table snapshot; the hole card stays hidden during the player's turn."""
        if reveal is None:
            reveal = self.state == TableState.ROUND_COMPLETE
        dealer_cards = [str(c) for c in self.dealer_hand]
        if not reveal and len(dealer_cards) > 1:
            dealer_cards[1] = "??"
        return {
            "state": self.state.name.lower(),
            "bet_amount": self.bet_amount,
            "player_cards": [str(c) for c in self.player_hand],
            "player_value": self.player_hand.value,
            "dealer_cards": dealer_cards,
            "dealer_value": self.dealer_hand.value if reveal else None,
            "cards_remaining": self.shoe.cards_remaining,
            "can_hit": self.can_hit,
            "can_stand": self.can_stand,
        }


class BlackjackGame(CasinoGame[int]):
    """
    Auto-played blackjack for simulations.

    The selection is the player policy: hit while the hand is below
    `stand_on`, then stand.
    """

    kind = GameKind.BLACKJACK
    display_name = "Blackjack"

    def __init__(self, rng: RandomSource, rules: BlackjackRules | None = None) -> None:
        super().__init__(rng)
        self.table = BlackjackTable(rng, rules)
        self.rules = self.table.rules
        self._probability = ProbabilityEngine(
            dealer_stands_soft_17=self.rules.dealer_stands_soft_17,
            natural_payout=self.rules.natural_payout,
        )

    def play(self, bet: Bet[int]) -> BlackjackResult:
        stand_on = self._check_policy(bet.selection)
        table = self.table
        table.deal(bet.amount)
        while table.state == TableState.PLAYER_TURN and table.player_hand.value < stand_on:
            table.hit()
        if table.state == TableState.PLAYER_TURN:
            table.stand()
        assert table.result is not None
        return table.result

    def theoretical_rtp(self, selection: int | None = None) -> float:
        """Infinite-deck RTP of the hit-below-`stand_on` policy."""
        stand_on = self._check_policy(
            self.default_selection() if selection is None else selection
        )
        return self._probability.expected_return(stand_on)

    def default_selection(self) -> int:
        return config.casino.blackjack_player_stands_on

    def parse_selection(self, raw: Any) -> int:
        return int(raw)

    def describe_selection(self, selection: int) -> str:
        return f"stand on {selection}"

    @staticmethod
    def _check_policy(stand_on: int) -> int:
        if not 2 <= stand_on <= 21:
            raise ValueError(f"stand_on must be between 2 and 21, got {stand_on}")
        return stand_on
