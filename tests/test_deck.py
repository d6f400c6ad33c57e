"""Tests for cards and the deck."""
import random

import pytest

from pokerbot.game.deck import Card, Deck, Rank, Suit, full_deck


class TestCard:
    """Test card parsing and display."""

    @pytest.mark.parametrize("text,rank,suit", [
        ("Ah", Rank.ACE, Suit.HEARTS),
        ("10s", Rank.TEN, Suit.SPADES),
        ("Tc", Rank.TEN, Suit.CLUBS),
        ("2d", Rank.TWO, Suit.DIAMONDS),
        ("qS", Rank.QUEEN, Suit.SPADES),
    ])
    def test_from_string(self, text, rank, suit):
        card = Card.from_string(text)
        assert card.rank == rank
        assert card.suit == suit

    def test_str(self):
        assert str(Card(Rank.TEN, Suit.SPADES)) == "10s"
        assert str(Card(Rank.KING, Suit.HEARTS)) == "Kh"

    def test_invalid(self):
        with pytest.raises(ValueError):
            Card.from_string("1x")


class TestDeck:
    """Test shuffling and dealing."""

    def test_full_deck_is_unique(self):
        cards = full_deck()
        assert len(cards) == 52
        assert len(set(cards)) == 52

    def test_reset_shuffles_with_rng(self):
        first, second = Deck(random.Random(1)), Deck(random.Random(1))
        first.reset()
        second.reset()
        assert first.deal(52) == second.deal(52)

    def test_deal(self):
        deck = Deck(random.Random(3))
        deck.reset()
        hand = deck.deal(2)

        assert len(hand) == 2
        assert deck.remaining == 50
        assert deck.deal_one() not in hand
        assert len(deck) == 49

    def test_deal_too_many(self):
        deck = Deck()
        deck.reset()
        deck.deal(50)
        with pytest.raises(ValueError):
            deck.deal(3)

    def test_clear(self):
        deck = Deck()
        deck.reset()
        deck.clear()
        assert deck.remaining == 0
