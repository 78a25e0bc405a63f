"""Game API endpoints."""

import time
from typing import Annotated, Any

from fastapi import APIRouter, Header, HTTPException

from api.schemas import (
    BetRequest,
    BlackjackStateResponse,
    CashOutResponse,
    CoinFlipRequest,
    CrashAutoRequest,
    CrashFlightResponse,
    GameInfoResponse,
    HorseRaceRequest,
    RoundResponse,
    RouletteSpinRequest,
    RtpResponse,
)
from api.session import InvalidSessionToken, create_session, load_session, save_session
from casino.games import GAME_ENGINES, Bet, GameKind, RoundResult, get_game
from casino.games.blackjack import BlackjackTable
from casino.games.coin_flip import CoinFlip
from casino.games.crash import CashedOut, CrashGame, Crashed, Flying
from casino.games.horse_race import HorseRace
from casino.games.roulette import Roulette, RouletteSelection
from casino.games.slots import SlotMachine
from casino.rng import live_rng

router = APIRouter()

# Session data keys
SESSION_KEY_BLACKJACK = "blackjack"
SESSION_KEY_CRASH = "crash"
SESSION_KEY_LAST_ACTIVITY = "last_activity"

SessionHeader = Annotated[str, Header(alias="X-Session-ID")]
OptionalSessionHeader = Annotated[str | None, Header(alias="X-Session-ID")]


def _round_response(kind: GameKind, result: RoundResult, **details: Any) -> RoundResponse:
    return RoundResponse(
        kind=kind,
        bet_amount=result.bet_amount,
        payout=result.payout,
        net=result.net,
        won=result.won,
        is_push=result.is_push,
        details=details,
    )


async def _require_session(session_id: str) -> dict[str, Any]:
    """Load a session or fail with 400 (bad token) / 404 (unknown session)."""
    try:
        data = await load_session(session_id)
    except InvalidSessionToken:
        raise HTTPException(status_code=400, detail="Invalid session") from None
    if data is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return data


async def _save(session_id: str, data: dict[str, Any]) -> None:
    data[SESSION_KEY_LAST_ACTIVITY] = int(time.time())
    await save_session(session_id, data)


async def _open_session(session_id: str | None) -> tuple[str, dict[str, Any]]:
    """Reuse the caller's session, or start one when no header was sent."""
    if session_id is None:
        session_id = await create_session()
        return session_id, {}
    return session_id, await _require_session(session_id)


# Catalogue


@router.get("")
async def list_games() -> list[GameInfoResponse]:
    """List every game with the RTP of its default selection."""
    rng = live_rng()
    return [GameInfoResponse(**get_game(kind, rng).get_metadata()) for kind in GAME_ENGINES]


@router.get("/{kind}/rtp")
async def theoretical_rtp(kind: str, selection: str | None = None) -> RtpResponse:
    """Exact theoretical RTP for a selection (default selection if omitted)."""
    try:
        game = get_game(kind, live_rng())
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None

    try:
        chosen = game.default_selection() if selection is None else game.parse_selection(selection)
        rtp = game.theoretical_rtp(chosen)
    except (ValueError, KeyError, IndexError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid selection: {exc}") from None

    return RtpResponse(
        kind=game.kind,
        selection=game.describe_selection(chosen),
        theoretical_rtp=rtp,
        house_edge=1 - rtp,
    )


# Single rounds on the live source


@router.post("/roulette/spin")
async def roulette_spin(request: RouletteSpinRequest) -> RoundResponse:
    try:
        selection = RouletteSelection(request.bet_type, request.number)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None

    result = Roulette(live_rng()).play(Bet(selection, request.amount))
    return _round_response(
        GameKind.ROULETTE,
        result,
        number=result.number,
        color=result.color.value,
        selection=str(selection),
    )


@router.post("/coin-flip/flip")
async def coin_flip(request: CoinFlipRequest) -> RoundResponse:
    game = CoinFlip(live_rng())
    result = game.play(Bet(request.side, request.amount))
    return _round_response(
        GameKind.COIN_FLIP,
        result,
        side=result.side.value,
        choice=result.choice.value,
        payout_multiplier=game.payout_multiplier,
    )


@router.post("/slots/spin")
async def slots_spin(request: BetRequest) -> RoundResponse:
    result = SlotMachine(live_rng()).play(Bet(None, request.amount))
    return _round_response(
        GameKind.SLOTS,
        result,
        reels=[symbol.value for symbol in result.reels],
        payout_multiplier=result.payout_multiplier,
        is_jackpot=result.is_jackpot,
        win_type=result.win_type,
    )


@router.post("/horse-race/race")
async def horse_race(request: HorseRaceRequest) -> RoundResponse:
    game = HorseRace(live_rng())
    if request.horse >= len(game.horses):
        raise HTTPException(status_code=400, detail=f"Unknown horse: {request.horse}")

    result = game.play(Bet(request.horse, request.amount))
    return _round_response(
        GameKind.HORSE_RACE,
        result,
        winner=result.winner_index,
        winner_name=result.winner.name,
        odds=game.odds_display(request.horse),
        final_positions=list(result.final_positions),
    )


@router.post("/crash/auto")
async def crash_auto(request: CrashAutoRequest) -> RoundResponse:
    result = CrashGame(live_rng()).play(Bet(request.target, request.amount))
    return _round_response(
        GameKind.CRASH,
        result,
        crash_point=result.crash_point,
        target=request.target,
        cashout_at=result.cashout_at,
    )


# Blackjack table (session-backed)


def _table_response(session_id: str, table: BlackjackTable) -> BlackjackStateResponse:
    result = table.result
    return BlackjackStateResponse(
        session_id=session_id,
        outcome=result.outcome.value if result else None,
        payout=result.payout if result else None,
        **table.to_dict(),
    )


def _load_table(data: dict[str, Any]) -> BlackjackTable:
    if SESSION_KEY_BLACKJACK not in data:
        raise HTTPException(status_code=400, detail="No blackjack round in this session")
    return BlackjackTable.restore(live_rng(), data[SESSION_KEY_BLACKJACK])


@router.post("/blackjack/deal")
async def blackjack_deal(
    request: BetRequest,
    session_id: OptionalSessionHeader = None,
) -> BlackjackStateResponse:
    """Place a bet and deal a new round (starts a session if needed)."""
    session_id, data = await _open_session(session_id)
    if SESSION_KEY_BLACKJACK in data:
        table = _load_table(data)
    else:
        table = BlackjackTable(live_rng())

    if not table.deal(request.amount):
        raise HTTPException(status_code=400, detail="Round in progress")

    data[SESSION_KEY_BLACKJACK] = table.snapshot()
    await _save(session_id, data)
    return _table_response(session_id, table)


@router.post("/blackjack/hit")
async def blackjack_hit(session_id: SessionHeader) -> BlackjackStateResponse:
    data = await _require_session(session_id)
    table = _load_table(data)
    if not table.hit():
        raise HTTPException(status_code=400, detail="Cannot hit now")

    data[SESSION_KEY_BLACKJACK] = table.snapshot()
    await _save(session_id, data)
    return _table_response(session_id, table)


@router.post("/blackjack/stand")
async def blackjack_stand(session_id: SessionHeader) -> BlackjackStateResponse:
    data = await _require_session(session_id)
    table = _load_table(data)
    if not table.stand():
        raise HTTPException(status_code=400, detail="Cannot stand now")

    data[SESSION_KEY_BLACKJACK] = table.snapshot()
    await _save(session_id, data)
    return _table_response(session_id, table)


@router.get("/blackjack/state")
async def blackjack_state(session_id: SessionHeader) -> BlackjackStateResponse:
    data = await _require_session(session_id)
    return _table_response(session_id, _load_table(data))


# Crash flight (session-backed, server-side clock)


def _flight_state(flight: dict[str, Any]) -> Flying | CashedOut | Crashed:
    if flight["state"] == "flying":
        return Flying(crash_point=flight["crash_point"])
    if flight["state"] == "cashed_out":
        return CashedOut(crash_point=flight["crash_point"], cashout_at=flight["cashout_at"])
    return Crashed(crash_point=flight["crash_point"])


@router.post("/crash/start")
async def crash_start(
    request: BetRequest,
    session_id: OptionalSessionHeader = None,
) -> CrashFlightResponse:
    """Take off. The crash point is stored server-side and never returned."""
    session_id, data = await _open_session(session_id)
    game = CrashGame(live_rng())

    flight = data.get(SESSION_KEY_CRASH)
    if flight is not None and flight["state"] == "flying":
        elapsed = time.time() - flight["started_at"]
        if isinstance(game.tick(_flight_state(flight), elapsed), Flying):
            raise HTTPException(status_code=400, detail="Flight already in progress")

    state = game.start()
    data[SESSION_KEY_CRASH] = {
        "state": "flying",
        "crash_point": state.crash_point,
        "bet_amount": request.amount,
        "started_at": time.time(),
    }
    await _save(session_id, data)
    return CrashFlightResponse(
        session_id=session_id,
        state="flying",
        bet_amount=request.amount,
        growth_rate=game.growth_rate,
    )


@router.post("/crash/cash-out")
async def crash_cash_out(session_id: SessionHeader) -> CashOutResponse:
    """
    Cash out at the live multiplier.

    Outside a flight, or after the crash, this is a no-op result rather
    than an error.
    """
    data = await _require_session(session_id)
    flight = data.get(SESSION_KEY_CRASH)
    if flight is None:
        raise HTTPException(status_code=400, detail="No flight in this session")

    game = CrashGame(live_rng())
    elapsed = time.time() - flight["started_at"]
    new_state, result = game.cash_out(_flight_state(flight), flight["bet_amount"], elapsed)

    if isinstance(new_state, CashedOut):
        flight.update(state="cashed_out", cashout_at=new_state.cashout_at)
    elif isinstance(new_state, Crashed):
        flight["state"] = "crashed"
    await _save(session_id, data)

    revealed = not isinstance(new_state, Flying)
    return CashOutResponse(
        cashed_out=result.cashed_out,
        cashout_at=result.cashout_at,
        crash_point=result.crash_point if revealed else None,
        bet_amount=result.bet_amount,
        payout=result.payout,
        state=flight["state"],
    )
