"""Tests for European roulette."""

from fractions import Fraction
from unittest.mock import patch

import pytest

from casino.games.base import Bet
from casino.games.roulette import (
    BLACK_NUMBERS,
    RED_NUMBERS,
    Color,
    Roulette,
    RouletteBetType,
    RouletteSelection,
    color,
    column,
    covered_numbers,
    dozen,
)
from casino.rng import RandomSource


@pytest.fixture
def roulette(rng):
    return Roulette(rng)


def bet(bet_type, amount=100, number=None):
    return Bet(RouletteSelection(RouletteBetType(bet_type), number), amount)


class TestLayout:
    """Tests for the wheel layout."""

    def test_colors_partition_wheel(self):
        assert len(RED_NUMBERS) == 18
        assert len(BLACK_NUMBERS) == 18
        assert not RED_NUMBERS & BLACK_NUMBERS

    def test_zero_is_green(self):
        assert color(0) == Color.GREEN
        assert dozen(0) == 0
        assert column(0) == 0

    def test_number_properties(self):
        assert color(17) == Color.BLACK
        assert color(32) == Color.RED
        assert dozen(12) == 1
        assert dozen(13) == 2
        assert dozen(36) == 3
        assert column(1) == 1
        assert column(17) == 2
        assert column(36) == 3

    @pytest.mark.parametrize(
        "bet_type,size",
        [
            ("green", 1),
            ("red", 18),
            ("black", 18),
            ("odd", 18),
            ("even", 18),
            ("low", 18),
            ("high", 18),
            ("dozen1", 12),
            ("dozen2", 12),
            ("dozen3", 12),
            ("column1", 12),
            ("column2", 12),
            ("column3", 12),
        ],
    )
    def test_coverage_sizes(self, bet_type, size):
        covered = covered_numbers(RouletteSelection(RouletteBetType(bet_type)))
        assert len(covered) == size
        if bet_type != "green":
            assert 0 not in covered

    def test_single_needs_number(self):
        with pytest.raises(ValueError):
            RouletteSelection(RouletteBetType.SINGLE)
        with pytest.raises(ValueError):
            RouletteSelection(RouletteBetType.SINGLE, 37)


class TestSettlement:
    """Tests for bet settlement."""

    def test_seventeen_pays_single_and_loses_red(self, roulette):
        """17 is black: a red bet returns nothing, a straight-up bet pays 35:1."""
        red = roulette.evaluate(bet("red"), 17)
        single = roulette.evaluate(bet("single", number=17), 17)

        assert red.payout == 0
        assert red.net == -100
        assert single.payout == 3600
        assert single.net == 3500
        assert single.won

    def test_zero_loses_outside_bets(self, roulette):
        for bet_type in ("red", "black", "odd", "even", "low", "high", "dozen1", "column1"):
            assert roulette.evaluate(bet(bet_type), 0).payout == 0

    def test_green_pays_on_zero(self, roulette):
        assert roulette.evaluate(bet("green"), 0).payout == 3600

    def test_even_money_and_dozen(self, roulette):
        assert roulette.evaluate(bet("black"), 17).payout == 200
        assert roulette.evaluate(bet("dozen2"), 17).payout == 300
        assert roulette.evaluate(bet("column2"), 17).payout == 300

    def test_non_positive_stake_pays_nothing(self, roulette):
        result = roulette.evaluate(bet("black", amount=0), 17)
        assert result.payout == 0

    @pytest.mark.parametrize("amount", [0, -100])
    def test_non_positive_stake_is_not_a_win(self, roulette, amount):
        result = roulette.evaluate(bet("black", amount=amount), 17)

        assert result.payout == 0
        assert not result.won
        assert not result.is_push
        assert result.net == 0

    def test_result_properties(self, roulette):
        result = roulette.evaluate(bet("red"), 17)
        assert result.color == Color.BLACK
        assert result.is_odd
        assert result.is_low
        assert result.dozen == 2
        assert result.column == 2

    def test_play_uses_spin(self, roulette):
        with patch.object(roulette.rng, "uniform_int", return_value=17):
            result = roulette.play(bet("single", number=17))
        assert result.number == 17
        assert result.payout == 3600


class TestRtp:
    """Tests for theoretical return."""

    @pytest.mark.parametrize(
        "selection",
        ["red", "odd", "high", "dozen3", "column1", "green", "single:17"],
    )
    def test_every_bet_is_36_over_37(self, roulette, selection):
        assert roulette.exact_rtp(roulette.parse_selection(selection)) == Fraction(36, 37)

    def test_default_rtp(self, roulette):
        assert roulette.theoretical_rtp() == pytest.approx(0.972973, abs=1e-6)

    def test_parse_selection_forms(self, roulette):
        assert roulette.parse_selection("single:17") == RouletteSelection(
            RouletteBetType.SINGLE, 17
        )
        assert roulette.parse_selection({"bet_type": "red"}) == RouletteSelection(
            RouletteBetType.RED
        )
        with pytest.raises(ValueError):
            roulette.parse_selection("purple")

    def test_spin_distribution(self):
        """A long run of spins covers all 37 pockets."""
        roulette = Roulette(RandomSource(3))
        assert {roulette.spin() for _ in range(5000)} == set(range(37))
