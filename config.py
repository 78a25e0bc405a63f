"""Configuration management with environment variable support."""

import os
import secrets
from dataclasses import dataclass, field


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(name, default))


def _env_int(name: str, default: str) -> int:
    return int(os.getenv(name, default))


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _parse_cors_origins() -> list[str]:
    """Parse CORS_ORIGINS environment variable."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:8000")
    return [o.strip() for o in origins.split(",") if o.strip()]


def _parse_seed() -> int | None:
    """Parse SIMULATION_SEED (unset means time-seeded)."""
    seed = os.getenv("SIMULATION_SEED")
    return int(seed) if seed else None


@dataclass(frozen=True)
class HorseConfig:
    """A horse in the race. Higher weight = more likely to win."""

    name: str
    weight: int
    color: int

    def __post_init__(self) -> None:
        if self.weight <= 0:
            raise ValueError(f"Horse {self.name} must have a positive weight")


DEFAULT_HORSES: tuple[HorseConfig, ...] = (
    HorseConfig("Thunder", 25, 0xFFE53935),  # Favorite
    HorseConfig("Lightning", 22, 0xFF1E88E5),
    HorseConfig("Storm", 20, 0xFF43A047),
    HorseConfig("Blaze", 18, 0xFFFF9800),
    HorseConfig("Shadow", 15, 0xFF8E24AA),  # Longshot
)


@dataclass(frozen=True)
class CasinoConfig:
    """Per-game odds and house edges."""

    # Roulette (European, single zero): multiplier on stake
    roulette_single_payout: int = 35
    roulette_even_money_payout: int = 1
    roulette_dozen_payout: int = 2

    # Blackjack
    blackjack_decks: int = field(default_factory=lambda: _env_int("BLACKJACK_DECKS", "6"))
    blackjack_dealer_stands_soft_17: bool = field(
        default_factory=lambda: _env_bool("BLACKJACK_STANDS_SOFT_17", "true")
    )
    blackjack_natural_payout: float = 1.5  # 3:2
    blackjack_player_stands_on: int = 17

    # Slots: bounds the paytable's exact RTP must fall within
    slot_min_rtp: float = 0.85
    slot_max_rtp: float = 0.98

    # Coin flip: house edge applied through the payout
    coin_flip_house_edge: float = field(
        default_factory=lambda: _env_float("COIN_FLIP_HOUSE_EDGE", "0.02")
    )

    # Horse race: house edge applied to fair odds
    horse_race_house_edge: float = field(
        default_factory=lambda: _env_float("HORSE_RACE_HOUSE_EDGE", "0.10")
    )
    horses: tuple[HorseConfig, ...] = DEFAULT_HORSES

    # Crash ("aviator")
    crash_house_edge: float = field(
        default_factory=lambda: _env_float("CRASH_HOUSE_EDGE", "0.04")
    )
    crash_growth_rate: float = 0.06  # multiplier = e^(rate * seconds)
    crash_default_target: float = 2.0

    def __post_init__(self) -> None:
        """Validate odds configuration."""
        for name in ("coin_flip_house_edge", "horse_race_house_edge", "crash_house_edge"):
            value = getattr(self, name)
            if not 0.0 <= value < 1.0:
                raise ValueError(f"{name} must be in [0, 1), got {value}")
        if not self.horses:
            raise ValueError("At least one horse is required")
        if self.blackjack_decks < 1:
            raise ValueError("blackjack_decks must be at least 1")
        if self.crash_growth_rate <= 0:
            raise ValueError("crash_growth_rate must be positive")


@dataclass(frozen=True)
class SimulationConfig:
    """Simulation defaults."""

    default_rounds: int = field(default_factory=lambda: _env_int("SIMULATION_ROUNDS", "10000"))
    max_rounds: int = field(default_factory=lambda: _env_int("SIMULATION_MAX_ROUNDS", "1000000"))
    bet_amount: int = 100
    seed: int | None = field(default_factory=_parse_seed)


@dataclass(frozen=True)
class CORSConfig:
    """CORS configuration."""

    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["*"])
    allow_headers: list[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class RateLimitConfig:
    """Rate limiting configuration."""

    enabled: bool = field(default_factory=lambda: _env_bool("RATE_LIMIT_ENABLED", "true"))
    requests_per_minute: int = field(default_factory=lambda: _env_int("RATE_LIMIT_RPM", "60"))


@dataclass(frozen=True)
class SecurityConfig:
    """Security configuration."""

    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
    )


@dataclass(frozen=True)
class RedisConfig:
    """Redis connection configuration."""

    enabled: bool = field(default_factory=lambda: _env_bool("REDIS_ENABLED", "true"))
    host: str = field(default_factory=lambda: os.getenv("REDIS_HOST", "localhost"))
    port: int = field(default_factory=lambda: _env_int("REDIS_PORT", "6379"))
    db: int = field(default_factory=lambda: _env_int("REDIS_DB", "0"))
    password: str | None = field(default_factory=lambda: os.getenv("REDIS_PASSWORD"))

    @property
    def url(self) -> str:
        """Build Redis connection URL."""
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", "false"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    session_ttl: int = 3600  # Session timeout in seconds

    casino: CasinoConfig = field(default_factory=CasinoConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)


# Global configuration instance
config = AppConfig()
