"""Hand evaluation for Texas Hold'em."""
from enum import IntEnum
from typing import Optional, Sequence, TypeVar
from dataclasses import dataclass
from collections import Counter
from itertools import combinations, groupby

from pokerbot.game.deck import Card, Rank

K = TypeVar("K")


class HandRank(IntEnum):
    """Poker hand rankings (higher is better)."""
    HIGH_CARD = 1
    PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9
    ROYAL_FLUSH = 10

    @property
    def label(self) -> str:
        """Display name, e.g. 'Full House'."""
        return _RANK_LABELS[self]


_RANK_LABELS = {
    HandRank.HIGH_CARD: "High Card",
    HandRank.PAIR: "Pair",
    HandRank.TWO_PAIR: "Two Pair",
    HandRank.THREE_OF_A_KIND: "Three of a Kind",
    HandRank.STRAIGHT: "Straight",
    HandRank.FLUSH: "Flush",
    HandRank.FULL_HOUSE: "Full House",
    HandRank.FOUR_OF_A_KIND: "Four of a Kind",
    HandRank.STRAIGHT_FLUSH: "Straight Flush",
    HandRank.ROYAL_FLUSH: "Royal Flush",
}


@dataclass
class HandValue:
    """Totally ordered value of a best 5-card hand."""
    rank: HandRank
    values: tuple[int, ...]  # Tiebreaker values (highest to lowest importance)
    cards: list[Card]  # The 5 cards making the hand
    description: str

    @property
    def hand_type(self) -> str:
        """Classification label for display."""
        return self.rank.label

    def _key(self) -> tuple:
        return (self.rank, self.values)

    def __lt__(self, other: "HandValue") -> bool:
        return self._key() < other._key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HandValue):
            return NotImplemented
        return self._key() == other._key()

    def __gt__(self, other: "HandValue") -> bool:
        return other < self

    def __le__(self, other: "HandValue") -> bool:
        return self == other or self < other

    def __ge__(self, other: "HandValue") -> bool:
        return self == other or self > other


def compare(a: HandValue, b: HandValue) -> int:
    """Three-way comparison: negative if a loses, 0 on an exact tie, positive if a wins."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def _is_flush(cards: list[Card]) -> bool:
    """Check if 5 cards are all the same suit."""
    return len(set(c.suit for c in cards)) == 1


def _straight_high(ranks: list[int]) -> Optional[int]:
    """High card of a straight, or None if the ranks don't form one."""
    sorted_ranks = sorted(set(ranks))
    if len(sorted_ranks) != 5:
        return None

    # A-2-3-4-5 (wheel) plays as five high
    if sorted_ranks == [2, 3, 4, 5, 14]:
        return 5

    if sorted_ranks[-1] - sorted_ranks[0] == 4:
        return sorted_ranks[-1]
    return None


def _evaluate_5_cards(cards: list[Card]) -> HandValue:
    """Evaluate exactly 5 cards.

    Args:
        cards: Exactly 5 cards.

    Returns:
        HandValue with ranking.
    """
    if len(cards) != 5:
        raise ValueError(f"Expected 5 cards, got {len(cards)}")

    ranks = [c.rank.value for c in cards]
    is_flush = _is_flush(cards)
    straight_high = _straight_high(ranks)

    # Counts sorted by frequency then rank
    counts = sorted(Counter(ranks).items(), key=lambda x: (x[1], x[0]), reverse=True)

    if is_flush and straight_high is not None:
        if straight_high == 14:
            return HandValue(HandRank.ROYAL_FLUSH, (14,), cards, "Royal Flush")
        return HandValue(
            HandRank.STRAIGHT_FLUSH,
            (straight_high,),
            cards,
            f"Straight Flush, {Rank(straight_high)} high",
        )

    if counts[0][1] == 4:
        quad_rank, kicker = counts[0][0], counts[1][0]
        return HandValue(
            HandRank.FOUR_OF_A_KIND,
            (quad_rank, kicker),
            cards,
            f"Four of a Kind, {Rank(quad_rank)}s",
        )

    if counts[0][1] == 3 and counts[1][1] == 2:
        trips_rank, pair_rank = counts[0][0], counts[1][0]
        return HandValue(
            HandRank.FULL_HOUSE,
            (trips_rank, pair_rank),
            cards,
            f"Full House, {Rank(trips_rank)}s full of {Rank(pair_rank)}s",
        )

    if is_flush:
        sorted_ranks = tuple(sorted(ranks, reverse=True))
        return HandValue(
            HandRank.FLUSH, sorted_ranks, cards, f"Flush, {Rank(sorted_ranks[0])} high"
        )

    if straight_high is not None:
        return HandValue(
            HandRank.STRAIGHT, (straight_high,), cards, f"Straight, {Rank(straight_high)} high"
        )

    if counts[0][1] == 3:
        trips_rank = counts[0][0]
        kickers = tuple(sorted([c[0] for c in counts[1:]], reverse=True))
        return HandValue(
            HandRank.THREE_OF_A_KIND,
            (trips_rank,) + kickers,
            cards,
            f"Three of a Kind, {Rank(trips_rank)}s",
        )

    if counts[0][1] == 2 and counts[1][1] == 2:
        high_pair = max(counts[0][0], counts[1][0])
        low_pair = min(counts[0][0], counts[1][0])
        kicker = counts[2][0]
        return HandValue(
            HandRank.TWO_PAIR,
            (high_pair, low_pair, kicker),
            cards,
            f"Two Pair, {Rank(high_pair)}s and {Rank(low_pair)}s",
        )

    if counts[0][1] == 2:
        pair_rank = counts[0][0]
        kickers = tuple(sorted([c[0] for c in counts[1:]], reverse=True))
        return HandValue(
            HandRank.PAIR, (pair_rank,) + kickers, cards, f"Pair of {Rank(pair_rank)}s"
        )

    sorted_ranks = tuple(sorted(ranks, reverse=True))
    return HandValue(
        HandRank.HIGH_CARD, sorted_ranks, cards, f"High Card, {Rank(sorted_ranks[0])}"
    )


def evaluate_hand(cards: Sequence[Card]) -> HandValue:
    """Evaluate the best 5-card hand out of 5 to 7 cards.

    Raises:
        ValueError: If fewer than 5 cards are given.
    """
    if len(cards) < 5:
        raise ValueError(f"Need at least 5 cards, got {len(cards)}")

    best: Optional[HandValue] = None
    for combo in combinations(cards, 5):
        result = _evaluate_5_cards(list(combo))
        if best is None or result > best:
            best = result

    return best  # type: ignore


def best_hand(card1: Card, card2: Card, board: Sequence[Card]) -> HandValue:
    """Best hand a player makes from two hole cards and the community cards."""
    return evaluate_hand([card1, card2, *board])


def rank_hands(results: list[tuple[K, HandValue]]) -> list[list[K]]:
    """Group hands from best to worst.

    Exact ties share a group, and input order is kept within a group.
    """
    ordered = sorted(results, key=lambda item: item[1]._key(), reverse=True)
    return [
        [key for key, _ in group]
        for _, group in groupby(ordered, key=lambda item: item[1]._key())
    ]
