"""Casino game modules and the game registry."""

from casino.games.base import Bet, CasinoGame, GameKind, RoundResult, settle
from casino.games.blackjack import BlackjackGame, BlackjackRules, BlackjackTable
from casino.games.coin_flip import CoinFlip, CoinSide
from casino.games.crash import CrashGame
from casino.games.horse_race import HorseRace
from casino.games.roulette import Roulette, RouletteBetType, RouletteSelection
from casino.games.slots import SlotMachine, SlotSymbol
from casino.rng import RandomSource

GAME_ENGINES: dict[GameKind, type[CasinoGame]] = {
    GameKind.ROULETTE: Roulette,
    GameKind.BLACKJACK: BlackjackGame,
    GameKind.SLOTS: SlotMachine,
    GameKind.COIN_FLIP: CoinFlip,
    GameKind.HORSE_RACE: HorseRace,
    GameKind.CRASH: CrashGame,
}


def get_game(kind: GameKind | str, rng: RandomSource) -> CasinoGame:
    """
    Build the game module for a kind, drawing from `rng`.

    Raises:
        ValueError: If the kind is unknown
    """
    try:
        kind = GameKind(kind)
    except ValueError:
        raise ValueError(
            f"Unknown game kind: {kind}. Available: {[k.value for k in GAME_ENGINES]}"
        ) from None
    return GAME_ENGINES[kind](rng)


__all__ = [
    "Bet",
    "BlackjackGame",
    "BlackjackRules",
    "BlackjackTable",
    "CasinoGame",
    "CoinFlip",
    "CoinSide",
    "CrashGame",
    "GAME_ENGINES",
    "GameKind",
    "HorseRace",
    "RandomSource",
    "Roulette",
    "RouletteBetType",
    "RouletteSelection",
    "RoundResult",
    "SlotMachine",
    "SlotSymbol",
    "get_game",
    "settle",
]
