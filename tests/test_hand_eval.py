"""Tests for hand evaluation."""
import pytest

from pokerbot.game.deck import Card
from pokerbot.game.hand_eval import (
    HandRank,
    _evaluate_5_cards,
    best_hand,
    compare,
    evaluate_hand,
    rank_hands,
)


def make_cards(cards: str) -> list[Card]:
    """Helper to create cards from space-separated string."""
    return [Card.from_string(c) for c in cards.split()]


def value_of(cards: str):
    return _evaluate_5_cards(make_cards(cards))


class TestHandRanking:
    """Test individual hand rankings."""

    @pytest.mark.parametrize("cards,rank,high", [
        ("2h 5d 8c Jh Ks", HandRank.HIGH_CARD, 13),
        ("2h 2d 8c Jh Ks", HandRank.PAIR, 2),
        ("2h 2d 8c 8h Ks", HandRank.TWO_PAIR, 8),
        ("Jh Jd Jc 8h Ks", HandRank.THREE_OF_A_KIND, 11),
        ("5h 6d 7c 8h 9s", HandRank.STRAIGHT, 9),
        ("Ah 2d 3c 4h 5s", HandRank.STRAIGHT, 5),
        ("Th Jd Qc Kh As", HandRank.STRAIGHT, 14),
        ("2h 5h 8h Jh Kh", HandRank.FLUSH, 13),
        ("Jh Jd Jc 8h 8s", HandRank.FULL_HOUSE, 11),
        ("Jh Jd Jc Js Ks", HandRank.FOUR_OF_A_KIND, 11),
        ("5h 6h 7h 8h 9h", HandRank.STRAIGHT_FLUSH, 9),
        ("Th Jh Qh Kh Ah", HandRank.ROYAL_FLUSH, 14),
    ])
    def test_rankings(self, cards, rank, high):
        result = value_of(cards)
        assert result.rank == rank
        assert result.values[0] == high

    def test_two_pair_tiebreakers(self):
        """Test two pair keeps both pairs and the kicker."""
        assert value_of("2h 2d 8c 8h Ks").values == (8, 2, 13)

    def test_labels(self):
        assert value_of("Jh Jd Jc 8h 8s").hand_type == "Full House"
        assert value_of("Jh Jd Jc 8h 8s").description == "Full House, Js full of 8s"
        assert HandRank.TWO_PAIR.label == "Two Pair"

    def test_wrong_card_count(self):
        with pytest.raises(ValueError):
            _evaluate_5_cards(make_cards("2h 3h 4h 5h"))
        with pytest.raises(ValueError):
            evaluate_hand(make_cards("2h 3h 4h 5h"))


class TestBestHand:
    """Test picking the best five of seven cards."""

    def test_uses_both_hole_cards(self):
        hole = make_cards("Ah As")
        result = best_hand(hole[0], hole[1], make_cards("Ad Ac 2h 3c 4d"))
        assert result.rank == HandRank.FOUR_OF_A_KIND

    def test_uses_one_hole_card(self):
        hole = make_cards("Ah 2c")
        result = best_hand(hole[0], hole[1], make_cards("Kh Qh Jh Th 3d"))
        assert result.rank == HandRank.ROYAL_FLUSH

    def test_plays_the_board(self):
        hole = make_cards("2c 3d")
        result = best_hand(hole[0], hole[1], make_cards("Ah Kh Qh Jh Th"))
        assert result.rank == HandRank.ROYAL_FLUSH
        assert len(result.cards) == 5

    def test_seven_card_straight_beats_pair(self):
        result = evaluate_hand(make_cards("9c 9d 5h 6d 7c 8h 2s"))
        assert result.rank == HandRank.STRAIGHT


class TestComparison:
    """Test ordering and grouping hands."""

    def test_compare(self):
        pair = value_of("2h 2d 8c Jh Ks")
        straight = value_of("5h 6d 7c 8h 9s")
        assert compare(pair, straight) < 0
        assert compare(straight, pair) > 0
        assert compare(pair, value_of("2c 2s 8d Jd Kh")) == 0

    def test_kicker_breaks_tie(self):
        assert value_of("Ah Kd 8c Jh 2s") > value_of("Ah Qd 8c Jh 2s")

    def test_wheel_is_lowest_straight(self):
        wheel = value_of("Ah 2d 3c 4h 5s")
        assert value_of("2h 3d 4c 5h 6s") > wheel
        assert wheel > value_of("Kh Qd Jc 9h 7s")

    def test_rank_hands(self):
        results = [
            ("player1", value_of("2h 2d 8c Jh Ks")),
            ("player2", value_of("Ah Kd 8c Jh 2s")),
            ("player3", value_of("5h 5d 5c Jh Ks")),
        ]
        assert rank_hands(results) == [["player3"], ["player1"], ["player2"]]

    def test_rank_hands_ties_keep_input_order(self):
        results = [
            ("player2", value_of("As Ks Qs Js Ts")),
            ("player1", value_of("Ah Kh Qh Jh Th")),
            ("player3", value_of("2h 2d 8c Jh Ks")),
        ]
        assert rank_hands(results) == [["player2", "player1"], ["player3"]]

    def test_rank_no_hands(self):
        assert rank_hands([]) == []
