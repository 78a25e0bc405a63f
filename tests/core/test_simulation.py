"""Tests for round aggregation and batch simulation."""

import math

import pytest

from casino.games.base import GameKind
from casino.rng import live_rng, reset_live_rng
from casino.statistics.accumulator import RoundStats
from casino.statistics.simulation import (
    RiskLevel,
    SimulationService,
    expected_tolerance,
    generate_report,
    run_simulation,
)


def comparable(result):
    data = result.to_dict()
    data.pop("elapsed_seconds")
    return data


class TestRoundStats:
    """Tests for the incremental accumulator."""

    @pytest.fixture
    def stats(self):
        stats = RoundStats()
        # W, L, L, P, W, W at a stake of 100
        for returned, is_win, is_push in [
            (200, True, False),
            (0, False, False),
            (0, False, False),
            (100, False, True),
            (200, True, False),
            (200, True, False),
        ]:
            stats.record(100, returned, is_win, is_push)
        return stats

    def test_counts(self, stats):
        assert stats.rounds == 6
        assert (stats.wins, stats.losses, stats.pushes) == (3, 2, 1)
        assert stats.total_bet == 600
        assert stats.total_return == 700
        assert stats.max_return == 200

    def test_rtp_and_hit_rate(self, stats):
        assert stats.observed_rtp == pytest.approx(700 / 600)
        assert stats.hit_rate == pytest.approx(0.5)

    def test_variance(self, stats):
        """Population variance of the return ratios 2, 0, 0, 1, 2, 2."""
        assert stats.mean_return_ratio == pytest.approx(7 / 6)
        assert stats.variance == pytest.approx(29 / 36)
        assert stats.std_deviation == pytest.approx(math.sqrt(29 / 36))

    def test_drawdown(self, stats):
        # Profit runs +100, 0, -100, -100, 0, +100
        assert stats.max_drawdown == 200
        assert stats.profit == 100
        assert stats.peak_profit == 100

    def test_streaks_broken_by_push(self, stats):
        assert stats.longest_winning_streak == 2
        assert stats.longest_losing_streak == 2

    def test_empty(self):
        stats = RoundStats()
        assert stats.observed_rtp == 0.0
        assert stats.hit_rate == 0.0
        assert stats.std_deviation == 0.0
        assert stats.max_drawdown == 0

    def test_rejects_non_positive_bet(self):
        with pytest.raises(ValueError):
            RoundStats().record(0, 0, False, False)


class TestTolerance:
    def test_expected_tolerance(self):
        assert expected_tolerance(10000) == pytest.approx(0.0098)
        assert expected_tolerance(100) == pytest.approx(0.098)
        assert expected_tolerance(0) == 0.0

    def test_shrinks_with_sample_size(self):
        assert expected_tolerance(100000) < expected_tolerance(1000)

    @pytest.mark.parametrize(
        "std,level",
        [
            (0.0, RiskLevel.LOW),
            (0.49, RiskLevel.LOW),
            (0.5, RiskLevel.MEDIUM),
            (1.5, RiskLevel.HIGH),
            (3.0, RiskLevel.VERY_HIGH),
        ],
    )
    def test_risk_levels(self, std, level):
        assert RiskLevel.from_std_deviation(std) == level

    def test_risk_level_display(self):
        assert str(RiskLevel.VERY_HIGH) == "Very High"


class TestSimulationService:
    """Tests for SimulationService."""

    def test_same_seed_same_result(self):
        a = SimulationService(seed=42).run(GameKind.ROULETTE, 2000)
        b = SimulationService(seed=42).run(GameKind.ROULETTE, 2000)
        assert comparable(a) == comparable(b)
        assert a.seed == 42

    def test_different_seeds_differ(self):
        a = SimulationService(seed=1).run(GameKind.SLOTS, 2000)
        b = SimulationService(seed=2).run(GameKind.SLOTS, 2000)
        assert comparable(a) != comparable(b)

    def test_unseeded_service_records_seed(self):
        service = SimulationService()
        assert isinstance(service.seed, int)
        assert service.run(GameKind.COIN_FLIP, 10).seed == service.seed

    def test_live_source_untouched(self):
        """Simulations draw only from their own source."""
        live = reset_live_rng(7)
        before = live.getstate()

        SimulationService(seed=3).run_all(200)

        assert live_rng() is live
        assert live.getstate() == before

    def test_counts_add_up(self):
        result = SimulationService(seed=5).run(GameKind.BLACKJACK, 1000)
        assert result.num_rounds == 1000
        assert result.wins + result.losses + result.pushes == 1000
        assert result.total_bet == 1000 * 100

    def test_zero_rounds(self):
        result = SimulationService(seed=5).run(GameKind.ROULETTE, 0)

        assert result.num_rounds == 0
        assert result.observed_rtp == 0.0
        assert result.expected_tolerance == 0.0
        assert not result.within_tolerance
        assert result.theoretical_rtp == pytest.approx(36 / 37)

    def test_cancellation(self):
        result = SimulationService(seed=5).run(
            GameKind.COIN_FLIP, 1000, should_stop=lambda played: played >= 50
        )
        assert result.cancelled
        assert result.num_rounds == 50

    def test_selection_and_stake(self):
        result = SimulationService(seed=5).run(
            GameKind.ROULETTE, 500, selection="single:17", bet_amount=10
        )
        assert result.extra_stats["selection"] == "single 17"
        assert result.extra_stats["bet_amount"] == 10
        assert result.total_bet == 5000
        assert "single 17" in result.game_name

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"kind": "poker", "num_rounds": 10},
            {"kind": GameKind.ROULETTE, "num_rounds": -1},
            {"kind": GameKind.ROULETTE, "num_rounds": 10, "bet_amount": 0},
            {"kind": GameKind.ROULETTE, "num_rounds": 10, "selection": "purple"},
        ],
    )
    def test_invalid_requests(self, kwargs):
        with pytest.raises(ValueError):
            SimulationService(seed=5).run(**kwargs)

    def test_bounded_return_within_tolerance(self):
        """A 1.00x crash target returns at most the stake, so the 0.25 bound holds."""
        result = SimulationService(seed=11).run(GameKind.CRASH, 10000, selection=1.0)
        assert result.theoretical_rtp == pytest.approx(0.96)
        assert result.within_tolerance

    def test_pass_rate_across_seeds(self):
        passes = sum(
            SimulationService(seed=seed).run(GameKind.CRASH, 2000, selection=1.0).within_tolerance
            for seed in range(20)
        )
        assert passes >= 19

    def test_coin_flip_converges(self):
        for seed in range(5):
            result = SimulationService(seed=seed).run(GameKind.COIN_FLIP, 20000)
            assert result.rtp_difference < 4 * result.expected_tolerance

    def test_blackjack_tracks_infinite_deck_rtp(self):
        result = SimulationService(seed=8).run(GameKind.BLACKJACK, 20000)
        assert result.rtp_difference < 0.04

    def test_pass_rate_at_full_sample_size(self):
        passes = sum(
            SimulationService(seed=seed).run(GameKind.CRASH, 100_000, selection=1.0).within_tolerance
            for seed in range(20)
        )
        assert passes >= 19

    def test_blackjack_full_sample_matches_infinite_deck_rtp(self):
        result = SimulationService(seed=21).run(GameKind.BLACKJACK, 100_000)
        assert result.num_rounds == 100_000
        assert result.rtp_difference < 0.015

    def test_run_all_and_report(self):
        results = SimulationService(seed=9).run_all(300)
        assert [r.kind for r in results] == list(GameKind)

        report = generate_report(results)
        assert "Rounds per game: 300" in report
        for result in results:
            assert result.game_name in report

    def test_result_str(self):
        result = run_simulation(GameKind.HORSE_RACE, 100, seed=4)
        text = str(result)
        assert "Horse Race" in text
        assert "Observed RTP" in text
        assert "House edge" in text

    def test_house_edges(self):
        result = run_simulation(GameKind.COIN_FLIP, 2000, seed=4)
        data = result.to_dict()

        assert data["theoretical_house_edge"] == pytest.approx(0.02)
        assert data["observed_house_edge"] == pytest.approx(1 - result.observed_rtp)
