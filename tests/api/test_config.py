"""Tests for configuration classes."""

import os
from unittest.mock import patch

import pytest


class TestCasinoConfig:
    """Tests for CasinoConfig class."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            from config import CasinoConfig

            config = CasinoConfig()

            assert config.roulette_single_payout == 35
            assert config.blackjack_decks == 6
            assert config.blackjack_dealer_stands_soft_17 is True
            assert config.blackjack_natural_payout == 1.5
            assert config.coin_flip_house_edge == 0.02
            assert config.horse_race_house_edge == 0.10
            assert config.crash_house_edge == 0.04
            assert len(config.horses) == 5

    def test_house_edges_from_env(self):
        with patch.dict(
            os.environ,
            {"COIN_FLIP_HOUSE_EDGE": "0.05", "CRASH_HOUSE_EDGE": "0.01", "BLACKJACK_DECKS": "8"},
        ):
            from config import CasinoConfig

            config = CasinoConfig()

            assert config.coin_flip_house_edge == 0.05
            assert config.crash_house_edge == 0.01
            assert config.blackjack_decks == 8

    def test_soft_17_rule_from_env(self):
        with patch.dict(os.environ, {"BLACKJACK_STANDS_SOFT_17": "false"}):
            from config import CasinoConfig

            assert CasinoConfig().blackjack_dealer_stands_soft_17 is False

    @pytest.mark.parametrize(
        "field,value",
        [
            ("coin_flip_house_edge", 1.0),
            ("horse_race_house_edge", -0.1),
            ("crash_house_edge", 1.5),
            ("blackjack_decks", 0),
            ("crash_growth_rate", 0.0),
            ("horses", ()),
        ],
    )
    def test_validation(self, field, value):
        from config import CasinoConfig

        with pytest.raises(ValueError):
            CasinoConfig(**{field: value})

    def test_frozen(self):
        from config import CasinoConfig

        config = CasinoConfig()
        with pytest.raises(Exception):  # dataclasses.FrozenInstanceError
            config.crash_house_edge = 0.5


class TestSimulationConfig:
    """Tests for SimulationConfig class."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            from config import SimulationConfig

            config = SimulationConfig()

            assert config.default_rounds == 10000
            assert config.max_rounds == 1000000
            assert config.bet_amount == 100
            assert config.seed is None

    def test_seed_from_env(self):
        with patch.dict(os.environ, {"SIMULATION_SEED": "1234", "SIMULATION_ROUNDS": "500"}):
            from config import SimulationConfig

            config = SimulationConfig()

            assert config.seed == 1234
            assert config.default_rounds == 500


class TestServiceConfig:
    """Tests for the web service settings."""

    def test_cors_parses_env_var(self):
        with patch.dict(os.environ, {"CORS_ORIGINS": "  http://a.test , http://b.test,"}):
            from config import _parse_cors_origins

            assert _parse_cors_origins() == ["http://a.test", "http://b.test"]

    def test_cors_default_origin(self):
        with patch.dict(os.environ, {}, clear=True):
            from config import CORSConfig

            assert CORSConfig().allowed_origins == ["http://localhost:8000"]

    def test_rate_limit_from_env(self):
        with patch.dict(os.environ, {"RATE_LIMIT_ENABLED": "False", "RATE_LIMIT_RPM": "120"}):
            from config import RateLimitConfig

            config = RateLimitConfig()

            assert config.enabled is False
            assert config.requests_per_minute == 120

    def test_only_true_enables(self):
        for value in ["TRUE", "True", "true"]:
            with patch.dict(os.environ, {"RATE_LIMIT_ENABLED": value}):
                from config import RateLimitConfig

                assert RateLimitConfig().enabled is True

        for value in ["1", "yes", "no"]:
            with patch.dict(os.environ, {"RATE_LIMIT_ENABLED": value}):
                from config import RateLimitConfig

                assert RateLimitConfig().enabled is False

    def test_secret_key(self):
        with patch.dict(os.environ, {"SECRET_KEY": "my-super-secret-key-12345"}):
            from config import SecurityConfig

            assert SecurityConfig().secret_key == "my-super-secret-key-12345"

        with patch.dict(os.environ, {}, clear=True):
            from config import SecurityConfig

            assert len(SecurityConfig().secret_key) > 0

    def test_redis_url(self):
        with patch.dict(os.environ, {}, clear=True):
            from config import RedisConfig

            assert RedisConfig().url == "redis://localhost:6379/0"

        with patch.dict(
            os.environ,
            {"REDIS_HOST": "redis.example.com", "REDIS_PORT": "6380", "REDIS_PASSWORD": "pw"},
        ):
            from config import RedisConfig

            assert RedisConfig().url == "redis://:pw@redis.example.com:6380/0"

    def test_app_config(self):
        with patch.dict(os.environ, {"DEBUG": "true", "LOG_LEVEL": "debug"}):
            from config import AppConfig

            config = AppConfig()

            assert config.debug is True
            assert config.log_level == "DEBUG"
            assert config.session_ttl == 3600
            assert config.casino.crash_default_target == 2.0
            assert config.simulation.bet_amount == 100
