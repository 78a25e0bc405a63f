"""Crash ("aviator") game: a rising multiplier that stops at a hidden point."""

import math
from dataclasses import dataclass
from typing import Any, Union

from casino.events import EventEmitter, EventType
from casino.games.base import Bet, CasinoGame, GameKind, RoundResult, settle
from casino.rng import RandomSource
from config import config


@dataclass(frozen=True)
class NotStarted:
    """No flight yet."""


@dataclass(frozen=True)
class Flying:
    crash_point: float
    multiplier: float = 1.0


@dataclass(frozen=True)
class CashedOut:
    crash_point: float
    cashout_at: float


@dataclass(frozen=True)
class Crashed:
    crash_point: float


FlightState = Union[NotStarted, Flying, CashedOut, Crashed]


@dataclass(frozen=True)
class CrashResult(RoundResult):
    """Settlement of a flight. `cashout_at` is None when nothing was locked in."""

    crash_point: float | None
    cashout_at: float | None
    bet_amount: int
    payout: int

    @property
    def payout_multiplier(self) -> float:
        return self.cashout_at or 0.0

    @property
    def cashed_out(self) -> bool:
        return self.cashout_at is not None


def multiplier_at(elapsed: float, growth_rate: float) -> float:
    """Live multiplier after `elapsed` seconds: e^(rate * t)."""
    return math.exp(growth_rate * max(elapsed, 0.0))


def start(rng: RandomSource, house_edge: float) -> Flying:
    """Draw the hidden crash point and take off at 1.00x."""
    return Flying(crash_point=rng.crash_point(house_edge))


def tick(state: FlightState, elapsed: float, growth_rate: float) -> FlightState:
    """
    Advance a flight to `elapsed` seconds.

    Returns Crashed once the live multiplier reaches the crash point.
    Any state other than Flying is returned unchanged.
    """
    if not isinstance(state, Flying):
        return state

    multiplier = multiplier_at(elapsed, growth_rate)
    if multiplier >= state.crash_point:
        return Crashed(crash_point=state.crash_point)
    return Flying(crash_point=state.crash_point, multiplier=multiplier)


def cash_out(
    state: FlightState,
    bet_amount: int,
    growth_rate: float,
    elapsed: float | None = None,
) -> tuple[FlightState, CrashResult]:
    """
    Lock in the current multiplier.

    Only a Flying state strictly before the crash cashes out. Anything else
    yields a no-op result (no payout, cashout_at None); a flight found past
    its crash point becomes Crashed.

    Args:
        state: Current flight state
        bet_amount: Stake riding on the flight
        growth_rate: Multiplier growth rate
        elapsed: Seconds since take-off; None uses the state's multiplier
    """
    if isinstance(state, Flying):
        if elapsed is not None:
            state = tick(state, elapsed, growth_rate)
        elif state.multiplier >= state.crash_point:
            state = Crashed(crash_point=state.crash_point)

    if not isinstance(state, Flying):
        crash_point = getattr(state, "crash_point", None)
        return state, CrashResult(
            crash_point=crash_point, cashout_at=None, bet_amount=bet_amount, payout=0
        )

    result = CrashResult(
        crash_point=state.crash_point,
        cashout_at=state.multiplier,
        bet_amount=bet_amount,
        payout=settle(bet_amount, state.multiplier),
    )
    return CashedOut(crash_point=state.crash_point, cashout_at=state.multiplier), result


class CrashGame(CasinoGame[float]):
    """
    Crash game.

    P(crash > x) = (1 - house_edge) / x for x >= 1, so cashing out at any
    fixed target returns 1 - house_edge on average.
    """

    kind = GameKind.CRASH
    display_name = "Crash"

    def __init__(
        self,
        rng: RandomSource,
        house_edge: float | None = None,
        growth_rate: float | None = None,
    ) -> None:
        super().__init__(rng)
        self.house_edge = config.casino.crash_house_edge if house_edge is None else house_edge
        self.growth_rate = config.casino.crash_growth_rate if growth_rate is None else growth_rate
        if not 0.0 <= self.house_edge < 1.0:
            raise ValueError(f"house_edge must be in [0, 1), got {self.house_edge}")
        if self.growth_rate <= 0:
            raise ValueError("growth_rate must be positive")
        self.events = EventEmitter()

    # Interactive flight

    def start(self) -> Flying:
        state = start(self.rng, self.house_edge)
        self.events.emit(EventType.FLIGHT_STARTED)
        return state

    def tick(self, state: FlightState, elapsed: float) -> FlightState:
        new_state = tick(state, elapsed, self.growth_rate)
        if isinstance(new_state, Crashed) and not isinstance(state, Crashed):
            self.events.emit(EventType.CRASHED, crash_point=new_state.crash_point)
        return new_state

    def cash_out(
        self,
        state: FlightState,
        bet_amount: int,
        elapsed: float | None = None,
    ) -> tuple[FlightState, CrashResult]:
        new_state, result = cash_out(state, bet_amount, self.growth_rate, elapsed)
        if result.cashed_out:
            self.events.emit(EventType.CASHED_OUT, multiplier=result.cashout_at, payout=result.payout)
        elif isinstance(new_state, Crashed) and not isinstance(state, Crashed):
            self.events.emit(EventType.CRASHED, crash_point=new_state.crash_point)
        else:
            self.events.emit(EventType.INVALID_ACTION, message="Not flying")
        return new_state, result

    def multiplier_at(self, elapsed: float) -> float:
        return multiplier_at(elapsed, self.growth_rate)

    # Auto-cashout rounds

    def play(self, bet: Bet[float]) -> CrashResult:
        """Auto-cashout round: wins iff the flight passes the target."""
        target = bet.selection
        if target < 1.0:
            raise ValueError(f"Auto-cashout target must be >= 1.0, got {target}")

        crash_point = self.rng.crash_point(self.house_edge)
        if crash_point > target:
            return CrashResult(
                crash_point=crash_point,
                cashout_at=target,
                bet_amount=bet.amount,
                payout=settle(bet.amount, target),
            )
        return CrashResult(
            crash_point=crash_point, cashout_at=None, bet_amount=bet.amount, payout=0
        )

    # Odds

    def probability_of_reaching(self, multiplier: float) -> float:
        """P(crash > multiplier); certain below 1.00x."""
        if multiplier < 1.0:
            return 1.0
        return (1 - self.house_edge) / multiplier

    def probability_display(self, multiplier: float) -> str:
        return f"{self.probability_of_reaching(multiplier) * 100:.1f}%"

    def multiplier_for_survival(self, probability: float) -> float:
        """Target whose survival probability is `probability`."""
        if not 0.0 < probability <= 1.0:
            raise ValueError(f"probability must be in (0, 1], got {probability}")
        return (1 - self.house_edge) / probability

    def seconds_to_reach(self, multiplier: float) -> float:
        """Flight time until the live multiplier hits `multiplier`."""
        if multiplier < 1.0:
            raise ValueError("Multiplier must be >= 1.0")
        return math.log(multiplier) / self.growth_rate

    def theoretical_rtp(self, selection: float | None = None) -> float:
        """target * P(crash > target), equal to 1 - house_edge for any target >= 1."""
        target = self.default_selection() if selection is None else selection
        if target < 1.0:
            raise ValueError(f"Auto-cashout target must be >= 1.0, got {target}")
        return target * self.probability_of_reaching(target)

    def default_selection(self) -> float:
        return config.casino.crash_default_target

    def parse_selection(self, raw: Any) -> float:
        return float(raw)

    def describe_selection(self, selection: float) -> str:
        return f"auto-cashout {selection:.2f}x"
