"""Pydantic schemas for API requests and responses."""

from typing import Any

from pydantic import BaseModel, Field

from casino.games.base import GameKind
from casino.games.coin_flip import CoinSide
from casino.games.roulette import RouletteBetType
from config import config


# Single-round schemas
class BetRequest(BaseModel):
    """Request to place a bet."""

    amount: int = Field(..., ge=1, description="Bet amount")


class RouletteSpinRequest(BetRequest):
    """Roulette bet: a bet type, plus a number for single-number bets."""

    bet_type: RouletteBetType = RouletteBetType.RED
    number: int | None = Field(default=None, ge=0, le=36)


class CoinFlipRequest(BetRequest):
    side: CoinSide = CoinSide.HEADS


class HorseRaceRequest(BetRequest):
    horse: int = Field(default=0, ge=0, description="Index of the backed horse")


class CrashAutoRequest(BetRequest):
    target: float = Field(default=config.casino.crash_default_target, ge=1.0)


class RoundResponse(BaseModel):
    """Settlement of a single round."""

    kind: GameKind
    bet_amount: int
    payout: int
    net: int
    won: bool
    is_push: bool
    details: dict[str, Any] = {}


# Interactive session schemas
class BlackjackStateResponse(BaseModel):
    """Current blackjack table state."""

    session_id: str
    state: str
    bet_amount: int
    player_cards: list[str]
    player_value: int
    dealer_cards: list[str]
    dealer_value: int | None
    cards_remaining: int
    can_hit: bool
    can_stand: bool
    outcome: str | None = None
    payout: int | None = None


class CrashFlightResponse(BaseModel):
    """A flight in progress; the crash point stays hidden."""

    session_id: str
    state: str
    bet_amount: int
    growth_rate: float


class CashOutResponse(BaseModel):
    """Result of a cash-out attempt."""

    cashed_out: bool
    cashout_at: float | None
    crash_point: float | None
    bet_amount: int
    payout: int
    state: str


# Catalogue schemas
class GameInfoResponse(BaseModel):
    kind: GameKind
    display_name: str
    default_selection: str
    theoretical_rtp: float


class RtpResponse(BaseModel):
    kind: GameKind
    selection: str
    theoretical_rtp: float
    house_edge: float


# Simulation schemas
class SimulationRequest(BaseModel):
    """Request to run a simulation batch."""

    kind: GameKind
    num_rounds: int = Field(
        default=config.simulation.default_rounds, ge=0, le=config.simulation.max_rounds
    )
    selection: str | int | float | None = None
    bet_amount: int = Field(default=config.simulation.bet_amount, ge=1)
    seed: int | None = None


class SimulationResponse(BaseModel):
    """Simulation batch result."""

    game_name: str
    kind: GameKind
    seed: int
    num_rounds: int
    total_bet: int
    total_return: int
    observed_rtp: float
    theoretical_rtp: float
    rtp_difference: float
    observed_house_edge: float
    theoretical_house_edge: float
    hit_rate: float
    wins: int
    losses: int
    pushes: int
    std_deviation: float
    max_drawdown: int
    longest_winning_streak: int
    longest_losing_streak: int
    expected_tolerance: float
    within_tolerance: bool
    risk_level: str
    elapsed_seconds: float
    cancelled: bool
    extra_stats: dict[str, Any] = {}


class ReportRequest(BaseModel):
    """Request to simulate every game and render a report."""

    num_rounds: int = Field(
        default=config.simulation.default_rounds, ge=1, le=config.simulation.max_rounds
    )
    seed: int | None = None


class ReportResponse(BaseModel):
    report: str
    results: list[SimulationResponse]
