"""Tests for Card and Shoe classes."""

import pytest

from casino.cards import CARDS_PER_DECK, Card, Rank, Shoe, Suit
from casino.rng import RandomSource


class TestCard:
    """Tests for the Card class."""

    def test_card_creation(self):
        card = Card(Rank.ACE, Suit.SPADES)
        assert card.rank == Rank.ACE
        assert card.suit == Suit.SPADES

    def test_card_immutability(self):
        """Test that cards are immutable."""
        card = Card(Rank.ACE, Suit.SPADES)
        with pytest.raises(AttributeError):
            card.rank = Rank.KING

    def test_card_value(self):
        """Test card blackjack values."""
        assert Card(Rank.TWO, Suit.HEARTS).value == 2
        assert Card(Rank.TEN, Suit.HEARTS).value == 10
        assert Card(Rank.JACK, Suit.HEARTS).value == 10
        assert Card(Rank.QUEEN, Suit.HEARTS).value == 10
        assert Card(Rank.KING, Suit.HEARTS).value == 10
        assert Card(Rank.ACE, Suit.HEARTS).value == 11

    def test_card_is_ace(self):
        assert Card(Rank.ACE, Suit.SPADES).is_ace
        assert not Card(Rank.KING, Suit.SPADES).is_ace

    def test_card_from_string(self):
        """Test creating cards from strings."""
        assert Card.from_string("AS") == Card(Rank.ACE, Suit.SPADES)
        assert Card.from_string("2H") == Card(Rank.TWO, Suit.HEARTS)
        assert Card.from_string("10D") == Card(Rank.TEN, Suit.DIAMONDS)
        assert Card.from_string("TD") == Card(Rank.TEN, Suit.DIAMONDS)
        assert Card.from_string("kc") == Card(Rank.KING, Suit.CLUBS)

    def test_card_from_string_with_symbols(self):
        assert Card.from_string("A♠") == Card(Rank.ACE, Suit.SPADES)
        assert Card.from_string("10♥") == Card(Rank.TEN, Suit.HEARTS)

    def test_str_round_trips(self):
        """Every card parses back from its own string form."""
        for suit in Suit:
            for rank in Rank:
                card = Card(rank, suit)
                assert Card.from_string(str(card)) == card

    @pytest.mark.parametrize("bad", ["", "A", "1S", "AX", "11H"])
    def test_card_from_string_invalid(self, bad):
        with pytest.raises(ValueError):
            Card.from_string(bad)

    def test_suit_colors(self):
        assert Suit.HEARTS.is_red
        assert Suit.DIAMONDS.is_red
        assert not Suit.SPADES.is_red


class TestShoe:
    """Tests for the Shoe class."""

    def test_shoe_size(self, rng):
        shoe = Shoe(rng, num_decks=6)
        assert len(shoe) == 6 * CARDS_PER_DECK
        assert shoe.total_cards == 312
        assert shoe.num_decks == 6

    def test_shoe_composition(self, rng):
        """Each rank appears four times per deck."""
        shoe = Shoe(rng, num_decks=2)
        aces = sum(1 for card in shoe if card.rank == Rank.ACE)
        assert aces == 8

    def test_shoe_requires_a_deck(self, rng):
        with pytest.raises(ValueError):
            Shoe(rng, num_decks=0)

    def test_draw_reduces_count(self, rng):
        shoe = Shoe(rng, num_decks=1)
        shoe.draw()
        assert shoe.cards_remaining == CARDS_PER_DECK - 1

    def test_needs_shuffle_below_one_deck(self, rng):
        shoe = Shoe(rng, num_decks=2)
        assert not shoe.needs_shuffle
        for _ in range(CARDS_PER_DECK + 1):
            shoe.draw()
        assert shoe.needs_shuffle

    def test_empty_shoe_reshuffles_on_draw(self, rng):
        shoe = Shoe(rng, num_decks=1)
        for _ in range(CARDS_PER_DECK):
            shoe.draw()
        assert shoe.cards_remaining == 0

        shoe.draw()
        assert shoe.shuffles == 2
        assert shoe.cards_remaining == CARDS_PER_DECK - 1

    def test_same_seed_same_order(self):
        a = Shoe(RandomSource(11), num_decks=1)
        b = Shoe(RandomSource(11), num_decks=1)
        assert list(a) == list(b)

    def test_load_replaces_cards(self, rng):
        shoe = Shoe(rng, num_decks=1)
        shoe.load([Card.from_string("2H"), Card.from_string("AS")])
        assert shoe.cards_remaining == 2
        # Draws come off the end
        assert shoe.draw() == Card(Rank.ACE, Suit.SPADES)
