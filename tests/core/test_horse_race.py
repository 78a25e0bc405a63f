"""Tests for the horse race game."""

from unittest.mock import patch

import pytest

from casino.games.base import Bet
from casino.games.horse_race import HorseRace
from config import HorseConfig


@pytest.fixture
def race(rng):
    return HorseRace(rng, house_edge=0.10)


class TestOdds:
    """Tests for odds and probabilities."""

    def test_probabilities_sum_to_one(self, race):
        total = sum(race.win_probability(i) for i in range(len(race.horses)))
        assert total == pytest.approx(1.0)

    def test_favorite_pays_least(self, race):
        multipliers = [race.payout_multiplier(i) for i in range(len(race.horses))]
        assert multipliers[0] == min(multipliers)
        assert multipliers[-1] == max(multipliers)

    def test_favorite_odds(self, race):
        # Weight 25 of 100: fair 4.0x, less 10%
        assert race.win_probability(0) == pytest.approx(0.25)
        assert race.payout_multiplier(0) == pytest.approx(3.6)
        assert race.odds_display(0) == "3.6x"
        assert race.probability_display(0) == "25%"

    def test_rtp_equal_for_every_horse(self, race):
        for i in range(len(race.horses)):
            assert race.theoretical_rtp(i) == pytest.approx(0.90)

    @pytest.mark.parametrize("index", [-1, 5])
    def test_odds_reject_unknown_horse(self, race, index):
        with pytest.raises(ValueError):
            race.theoretical_rtp(index)
        with pytest.raises(ValueError):
            race.describe_selection(index)

    def test_custom_field(self, rng):
        horses = [HorseConfig("A", 1, 0), HorseConfig("B", 3, 0)]
        race = HorseRace(rng, horses=horses, house_edge=0.0)
        assert race.payout_multiplier(0) == pytest.approx(4.0)
        assert race.payout_multiplier(1) == pytest.approx(4 / 3)

    def test_empty_field_rejected(self, rng):
        with pytest.raises(ValueError):
            HorseRace(rng, horses=[])

    def test_non_positive_weight_rejected(self):
        with pytest.raises(ValueError):
            HorseConfig("Lame", 0, 0)


class TestRace:
    """Tests for running races."""

    def test_winning_bet_pays_odds(self, race):
        with patch.object(race.rng, "weighted_choice", return_value=0):
            result = race.play(Bet(0, 100))

        assert result.player_wins
        assert result.winner.name == "Thunder"
        assert result.payout == 360

    def test_losing_bet(self, race):
        with patch.object(race.rng, "weighted_choice", return_value=1):
            result = race.play(Bet(0, 100))

        assert not result.player_wins
        assert result.payout == 0

    def test_winner_finishes_first(self, race):
        winner, positions = race.race()
        assert positions[winner] == 1.0
        assert all(p < 1.0 for i, p in enumerate(positions) if i != winner)

    def test_unknown_horse(self, race):
        with pytest.raises(ValueError):
            race.play(Bet(99, 100))

    def test_win_frequencies(self, rng):
        race = HorseRace(rng)
        wins = sum(1 for _ in range(20000) if race.race()[0] == 0)
        assert abs(wins / 20000 - 0.25) < 0.02
